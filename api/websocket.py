"""
WebSocket invalidation stream

One socket per client per room. Every committed change to the room pushes
{"type": "invalidate", "room": CODE}; the client then re-fetches
GET /api/rooms/{code}. Messages never carry state.
"""
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
import asyncio
import logging

from services.naming_service import normalize_room_code

router = APIRouter(tags=["realtime"])
logger = logging.getLogger(__name__)


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    # Client frames, text or binary, are ignored; we only care about the close.
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/ws/rooms/{code}")
async def room_updates(websocket: WebSocket, code: str):
    code = normalize_room_code(code)
    store = websocket.app.state.store

    await websocket.accept()

    # Store notifications fire on worker threads; hop onto this loop.
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    unsubscribe = store.subscribe(code, lambda changed: loop.call_soon_threadsafe(queue.put_nowait, changed))
    logger.info(f"WebSocket subscribed to room {code}")

    closed = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        await websocket.send_json({"type": "subscribed", "room": code})
        while True:
            next_change = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait({next_change, closed}, return_when=asyncio.FIRST_COMPLETED)
            if closed in done:
                next_change.cancel()
                if closed.exception():
                    logger.error(f"WebSocket for room {code} failed: {closed.exception()!r}")
                break
            await websocket.send_json({"type": "invalidate", "room": next_change.result()})
    except WebSocketDisconnect:
        pass
    finally:
        unsubscribe()
        closed.cancel()
        logger.info(f"WebSocket unsubscribed from room {code}")
