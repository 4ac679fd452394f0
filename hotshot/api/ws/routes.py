import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from hotshot.models import Option
from hotshot.services.serializers import serialize_option, serialize_question
from hotshot.services.tally import LiveTallyView

router = APIRouter()
logger = logging.getLogger(__name__)


@router.websocket("/ws/rooms/{room_id}")
async def room_socket(websocket: WebSocket, room_id: str):
    """Push the active question and its live tallies for one room."""
    await websocket.accept()
    store = websocket.app.state.store
    lifecycle = websocket.app.state.lifecycle

    async def push_tally(question_id: Optional[str], options: list[Option]):
        await websocket.send_json(
            {
                "type": "tally",
                "question_id": question_id,
                "options": [serialize_option(o).model_dump() for o in options],
            }
        )

    view = LiveTallyView(store, on_change=push_tally)
    questions = store.subscribe("questions", room_id=room_id)

    async def sync_active():
        active = await lifecycle.active_question(room_id)
        if active and active.id == view.question_id:
            return
        await websocket.send_json(
            {"type": "question", "question": serialize_question(active).model_dump() if active else None}
        )
        if active:
            await view.activate(active.id)
        else:
            await view.deactivate()

    async def watch_loop():
        await sync_active()
        async for _event in questions:
            questions.drain()
            await sync_active()

    watcher = asyncio.create_task(watch_loop())
    try:
        # Client messages are ignored; reading only detects the disconnect
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return
    finally:
        questions.close()
        watcher.cancel()
        try:
            await watcher
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Room feed failed room=%s", room_id)
        await view.deactivate()
