import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from anytime import db, state
from anytime.bus import EventBus
from anytime.messages import PingMessage

logger = logging.getLogger("anytime.ws.events")
router = APIRouter()

HEARTBEAT_INTERVAL_SEC = 25


@router.websocket("/ws/events/{event_id}")
async def websocket_event_updates(websocket: WebSocket, event_id: str):
    """Relay change notices for one event to a live viewer.

    Messages from the viewer are read and ignored; the socket only exists
    so the page knows when to re-fetch.
    """
    await websocket.accept()

    if state.redis_client is None:
        await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)
        return
    try:
        event = await db.get_event(event_id)
    except Exception:
        logger.exception("Event lookup failed for websocket on %s", event_id)
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return
    if not event:
        await websocket.close(code=4404, reason="Event not found")
        return

    channel = EventBus.event_channel(event_id)
    pubsub = state.redis_client.pubsub()
    await pubsub.subscribe(channel)
    logger.info("Viewer subscribed to %s", channel)

    async def send_updates():
        try:
            async for message in pubsub.listen():
                if message["type"] == "message":
                    await websocket.send_text(message["data"])
        except Exception as e:
            logger.debug("Update relay for %s stopped: %s", channel, e)

    async def heartbeat():
        try:
            while True:
                await asyncio.sleep(HEARTBEAT_INTERVAL_SEC)
                ping: PingMessage = {"type": "ping"}
                await websocket.send_text(json.dumps(ping))
        except Exception as e:
            logger.debug("Heartbeat for %s stopped: %s", channel, e)

    update_task = asyncio.create_task(send_updates())
    heartbeat_task = asyncio.create_task(heartbeat())

    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        update_task.cancel()
        heartbeat_task.cancel()
        await pubsub.unsubscribe(channel)
        if hasattr(pubsub, "aclose"):
            await pubsub.aclose()
        else:
            await pubsub.close()
        logger.info("Viewer left %s", channel)
