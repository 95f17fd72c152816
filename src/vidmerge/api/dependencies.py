"""FastAPI dependency injection configuration.

Services are built once by :func:`vidmerge.api.app.create_app` and kept
on ``app.state``; the accessors below hand them to route functions.
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Request

from vidmerge.core.credential_gate import CredentialGate, extract_bearer_token
from vidmerge.core.format_catalog import FormatCatalog
from vidmerge.core.job_pipeline import JobPipeline
from vidmerge.core.protocols import CredentialStore
from vidmerge.exceptions import InternalError, Unauthenticated, Unauthorized

logger = logging.getLogger(__name__)

NO_TOKEN_MESSAGE: str = "Unauthorized: No token provided"
INVALID_KEY_MESSAGE: str = (
    "Forbidden: Invalid API key. Please generate a key from the dashboard."
)
AUTH_ERROR_MESSAGE: str = "Internal server error during authentication"


def get_credential_store(request: Request) -> CredentialStore:
    return request.app.state.credential_store


def get_credential_gate(request: Request) -> CredentialGate:
    return request.app.state.credential_gate


def get_format_catalog(request: Request) -> FormatCatalog:
    return request.app.state.format_catalog


def get_job_pipeline(request: Request) -> JobPipeline:
    return request.app.state.job_pipeline


CredentialStoreDep = Annotated[CredentialStore, Depends(get_credential_store)]
CredentialGateDep = Annotated[CredentialGate, Depends(get_credential_gate)]
FormatCatalogDep = Annotated[FormatCatalog, Depends(get_format_catalog)]
JobPipelineDep = Annotated[JobPipeline, Depends(get_job_pipeline)]


def require_api_key(
    gate: CredentialGateDep,
    authorization: Annotated[Optional[str], Header()] = None,
) -> None:
    """Reject the request unless it carries a known bearer token.

    Runs before the request body is looked at, so unauthorised calls
    never reach the pipeline.
    """
    try:
        gate.authorize(extract_bearer_token(authorization))
    except Unauthenticated:
        raise HTTPException(status_code=401, detail=NO_TOKEN_MESSAGE)
    except Unauthorized:
        raise HTTPException(status_code=403, detail=INVALID_KEY_MESSAGE)
    except InternalError:
        raise HTTPException(status_code=500, detail=AUTH_ERROR_MESSAGE)
