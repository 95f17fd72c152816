"""HTTP layer — FastAPI application, routes and request schemas.

Rules
-----
* Translates :mod:`vidmerge.exceptions` types into status codes and
  generic ``{"error": ...}`` bodies; raw tool output never reaches a
  caller.
* No business logic: routes delegate to the core services held on
  ``app.state``.
"""

from vidmerge.api.app import create_app

__all__: list[str] = ["create_app"]
