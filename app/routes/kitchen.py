from fastapi import APIRouter, Depends, Request, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session
from starlette.responses import StreamingResponse
import json
import asyncio

from app.db.session import get_db
from app.services import order_items as items_service
from app.services import orders as orders_service
from app.utils.pubsub import register_queue, unregister_queue, register_ws, unregister_ws, get_status

router = APIRouter(prefix="/kitchen", tags=["Kitchen"])


async def event_generator(request: Request):
    q = register_queue()
    try:
        while True:
            if await request.is_disconnected():
                break
            try:
                event = await q.get()
            except asyncio.CancelledError:
                break
            # yield as server-sent event
            yield f"data: {json.dumps(event, default=str)}\n\n"
    finally:
        unregister_queue(q)


@router.get("/stream")
def stream(request: Request):
    # StreamingResponse with text/event-stream keeps us off an extra SSE dependency
    return StreamingResponse(event_generator(request), media_type="text/event-stream")


@router.websocket('/ws')
async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()
    register_ws(websocket)
    try:
        # keep the connection open; anything the client sends is ignored
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        unregister_ws(websocket)


@router.get('/status')
def status(db: Session = Depends(get_db)):
    """Subscriber counts plus how much work is waiting in the kitchen."""
    out = get_status()
    out["pending_orders"] = len(orders_service.kitchen_orders(db))
    out["pending_items"] = len(items_service.kitchen_items(db))
    return out
