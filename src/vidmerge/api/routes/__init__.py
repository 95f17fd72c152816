from vidmerge.api.routes.download import router as download_router
from vidmerge.api.routes.formats import router as formats_router
from vidmerge.api.routes.index import router as index_router
from vidmerge.api.routes.keys import router as keys_router

__all__ = ["download_router", "formats_router", "index_router", "keys_router"]
