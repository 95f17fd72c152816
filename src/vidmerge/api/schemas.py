"""Request and response bodies of the HTTP API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field

from vidmerge.core.models import CredentialRecord, FormatListing


class FormatsRequest(BaseModel):
    """Body of ``POST /v1/formats``.

    ``url`` is optional at the schema level so a missing value produces
    the API's own 400 message instead of a generic validation error.
    """

    url: Optional[str] = None


class DownloadRequestBody(BaseModel):
    """Body of ``POST /v1/download``."""

    url: Optional[str] = None
    format_id: Optional[str] = None
    audio_format: Optional[str] = None
    audio_bitrate: Optional[str] = None


class ApiKeyResponse(BaseModel):
    id: int
    key: str
    created_at: datetime = Field(serialization_alias="createdAt")

    @classmethod
    def from_record(cls, record: CredentialRecord) -> ApiKeyResponse:
        return cls(id=record.id, key=record.key, created_at=record.created_at)


class ApiKeyListResponse(BaseModel):
    keys: list[ApiKeyResponse]


class FormatOptionResponse(BaseModel):
    format_id: str
    resolution: str
    height: int
    fps: Union[int, float]
    filesize: int
    ext: str
    vcodec: str
    acodec: str


class FormatsResponse(BaseModel):
    """Source details plus renderable formats, lowest height first."""

    title: str
    duration: Optional[Union[int, float]] = None
    thumbnail: Optional[str] = None
    formats: list[FormatOptionResponse]

    @classmethod
    def from_listing(cls, listing: FormatListing) -> FormatsResponse:
        return cls(
            title=listing.title,
            duration=listing.duration,
            thumbnail=listing.thumbnail,
            formats=[FormatOptionResponse(**option.to_dict()) for option in listing.formats],
        )


class ErrorResponse(BaseModel):
    error: str


ERROR_RESPONSES: dict[int | str, dict] = {
    status: {"model": ErrorResponse} for status in (400, 401, 403, 500)
}
"""OpenAPI documentation of the error bodies shared by protected routes."""
