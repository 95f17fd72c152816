"""Service banner endpoint."""

from fastapi import APIRouter

from vidmerge.version import __version__

router = APIRouter(tags=["meta"])

SERVICE_NAME = "Video Download API Server"


@router.get("/")
def index():
    """Describes the service and its endpoints."""
    return {
        "message": SERVICE_NAME,
        "version": __version__,
        "endpoints": {
            "GET /v1/keys": "List issued API keys",
            "POST /v1/keys": "Generate a new API key",
            "POST /v1/download": "Download and merge video (requires API key)",
            "POST /v1/formats": "Get available video formats and file sizes (requires API key)",
        },
    }
