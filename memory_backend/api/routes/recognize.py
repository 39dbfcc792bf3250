from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.concurrency import run_in_threadpool

from memory_backend.api.errors import error_response
from memory_backend.schemas.recognition import RecognizeResponse
from memory_backend.services.matcher import FaceMatcher, get_matcher

router = APIRouter(tags=["recognize"])
logger = logging.getLogger("memory_backend.recognize")


@router.post("/recognize", response_model=RecognizeResponse)
async def recognize(
    image: UploadFile | None = File(default=None),
    matcher: FaceMatcher = Depends(get_matcher),
):
    if image is None:
        return error_response(400, "Image is required")

    content = await image.read()
    if not content:
        return error_response(400, "Image is empty")
    logger.info("Image received for recognition (%s bytes)", len(content))

    try:
        result = await run_in_threadpool(matcher.match, content, image.content_type or "image/jpeg")
    except Exception as exc:
        logger.exception("Error in recognize endpoint")
        return error_response(500, "Recognition failed", str(exc) or exc.__class__.__name__)

    return RecognizeResponse(
        person_id=result.person_id,
        confidence=result.confidence,
        message=result.message,
    )
