"""Real-time processing event stream."""

import asyncio

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from src.api.dependencies import RealtimeChannelDep
from src.commons.infrastructure.realtime.base import RealtimeChannelBase
from src.commons.telemetry import get_logger

router = APIRouter()
logger = get_logger(__name__)


async def _relay(
    websocket: WebSocket,
    channel: RealtimeChannelBase,
    user_id: str,
) -> None:
    async for message in channel.subscribe(user_id):
        await websocket.send_json(message.as_dict())


@router.websocket("/ws/processing/{user_id}")
async def processing_events(
    websocket: WebSocket,
    user_id: str,
    channel: RealtimeChannelDep,
) -> None:
    """Stream ``video:processing:*`` events for one user.

    Each message is ``{"event": <name>, "data": <payload>}``. Inbound
    messages are ignored; they only keep the connection observable.
    """
    await websocket.accept()
    logger.info("Realtime session opened", extra={"user_id": user_id})

    relay = asyncio.create_task(_relay(websocket, channel, user_id))
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        relay.cancel()
        await asyncio.gather(relay, return_exceptions=True)
        logger.info("Realtime session closed", extra={"user_id": user_id})
