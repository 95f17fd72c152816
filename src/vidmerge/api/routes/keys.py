"""API key issuance endpoints."""

import logging

from fastapi import APIRouter, HTTPException

from vidmerge.api.dependencies import CredentialStoreDep
from vidmerge.api.schemas import ApiKeyListResponse, ApiKeyResponse
from vidmerge.exceptions import CredentialStoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/keys", tags=["keys"])


@router.get("", response_model=ApiKeyListResponse)
def list_keys(store: CredentialStoreDep):
    """Returns every issued key, newest first."""
    try:
        records = store.list_all()
    except CredentialStoreError:
        logger.exception("Error fetching API keys")
        raise HTTPException(status_code=500, detail="Failed to fetch API keys")
    return ApiKeyListResponse(keys=[ApiKeyResponse.from_record(r) for r in records])


@router.post("", response_model=ApiKeyResponse, status_code=201)
def create_key(store: CredentialStoreDep):
    """Issues and stores a new key."""
    try:
        record = store.insert()
    except CredentialStoreError:
        logger.exception("Error generating API key")
        raise HTTPException(status_code=500, detail="Failed to generate API key")
    return ApiKeyResponse.from_record(record)
