"""Download-and-merge endpoint."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from vidmerge.api.dependencies import JobPipelineDep, require_api_key
from vidmerge.api.schemas import ERROR_RESPONSES, DownloadRequestBody
from vidmerge.core.models import DownloadRequest
from vidmerge.exceptions import ValidationError
from vidmerge.utils.filenames import content_disposition

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["media"], dependencies=[Depends(require_api_key)])

PROCESSING_ERROR_MESSAGE = "An internal server error occurred during video processing."


@router.post("/download", response_class=StreamingResponse, responses=ERROR_RESPONSES)
async def download(body: DownloadRequestBody, pipeline: JobPipelineDep):
    """Fetches, merges and streams one video.

    Every failure before the first byte yields a JSON error body; the job
    directory is already gone by then.  Once streaming starts the
    pipeline owns cleanup.
    """
    request = DownloadRequest(
        url=body.url,
        format_id=body.format_id,
        audio_codec=body.audio_format,
        audio_bitrate=body.audio_bitrate,
    )
    try:
        merged = await pipeline.prepare(request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Error processing video", extra={"url": body.url})
        raise HTTPException(status_code=500, detail=PROCESSING_ERROR_MESSAGE)

    return StreamingResponse(
        pipeline.stream(merged),
        media_type=merged.media_type,
        headers={
            "Content-Length": str(merged.size),
            "Content-Disposition": content_disposition(merged.filename),
        },
        # Covers disconnects where the stream generator is never closed.
        background=BackgroundTask(pipeline.release, merged.job),
    )
