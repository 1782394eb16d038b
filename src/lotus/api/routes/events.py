"""
Output event ingress route.

The engine under test posts every output event here. Each parsed body is
forwarded to the test driver through the event channel; the request is held
while the channel is full.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request, Response, status

from lotus.core.errors import ChannelClosedError
from lotus.core.payloads import loads_strict

logger = logging.getLogger(__name__)

router = APIRouter()


async def _read_json(request: Request) -> Any:
    content_type = request.headers.get("content-type", "")
    if content_type and "json" not in content_type:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"Expected a JSON body, got {content_type}",
        )
    body = await request.body()
    try:
        return loads_strict(body)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Request body is not valid JSON: {e}",
        ) from e


@router.post("/", status_code=status.HTTP_204_NO_CONTENT)
async def receive_event(request: Request) -> Response:
    """Forward one output event to the test driver."""
    payload = await _read_json(request)
    sender = request.app.state.sender

    try:
        await sender.send(payload)
    except ChannelClosedError as e:
        request.app.state.on_fatal(e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="The test driver is no longer receiving events",
        ) from e

    logger.debug("Forwarded output event to the test driver")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
