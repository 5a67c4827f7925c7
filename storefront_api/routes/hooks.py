"""Platform webhook receiver.

The platform forwards subscribed events here; handlers run in-process.
"""

import logging

from fastapi import APIRouter, Depends

from storefront_api.schemas.commerce import EventRequest, EventResponse
from storefront_api.services.auth import require_admin
from storefront_api.services.events import dispatch_event

router = APIRouter(dependencies=[Depends(require_admin)])
logger = logging.getLogger("uvicorn.error")


@router.post("/events", response_model=EventResponse)
async def post_event(body: EventRequest) -> EventResponse:
    logger.info(f"[events] received {body.name}")
    handled = await dispatch_event(body.name, body.data)
    return EventResponse(handled=handled)
