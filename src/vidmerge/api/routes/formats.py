"""Format listing endpoint."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from vidmerge.api.dependencies import FormatCatalogDep, require_api_key
from vidmerge.api.schemas import ERROR_RESPONSES, FormatsRequest, FormatsResponse
from vidmerge.exceptions import MetadataUnavailable, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["media"], dependencies=[Depends(require_api_key)])

FORMATS_ERROR_MESSAGE = "Failed to fetch video formats"


@router.post("/formats", response_model=FormatsResponse, responses=ERROR_RESPONSES)
async def list_formats(body: FormatsRequest, catalog: FormatCatalogDep):
    """Lists mp4-compatible formats with estimated merged sizes."""
    try:
        listing = await catalog.list_formats(body.url)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except MetadataUnavailable:
        logger.exception("Error fetching formats", extra={"url": body.url})
        raise HTTPException(status_code=500, detail=FORMATS_ERROR_MESSAGE)
    return FormatsResponse.from_listing(listing)
