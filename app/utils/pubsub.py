import asyncio
import logging
from typing import List, Any
from starlette.websockets import WebSocket

logger = logging.getLogger("app.pubsub")

# In-memory pub/sub: support both EventSource (asyncio.Queue) and WebSocket clients
_subscribers: List[asyncio.Queue] = []
_websockets: List[WebSocket] = []


def register_queue() -> asyncio.Queue:
    q = asyncio.Queue()
    _subscribers.append(q)
    return q


def unregister_queue(q: asyncio.Queue) -> None:
    try:
        _subscribers.remove(q)
    except ValueError:
        pass


def register_ws(ws: WebSocket) -> None:
    _websockets.append(ws)


def unregister_ws(ws: WebSocket) -> None:
    try:
        _websockets.remove(ws)
    except ValueError:
        pass


async def publish(event: Any) -> None:
    logger.debug("publish event: %s", event.get('type') if isinstance(event, dict) else type(event))

    # put the event into all subscriber queues (SSE)
    for q in list(_subscribers):
        await q.put(event)

    # broadcast to connected WebSocket clients; drop the ones that went away
    for ws in list(_websockets):
        try:
            await ws.send_json(event)
        except Exception:
            logger.info("dropping websocket subscriber after failed send")
            unregister_ws(ws)


# publish tasks in flight; the loop only keeps weak references to tasks
_pending = set()


def _on_publish_done(task: asyncio.Task) -> None:
    _pending.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("publishing event failed", exc_info=exc)


def publish_nowait(event: Any) -> None:
    """Schedule :func:`publish` on the running loop without awaiting it."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        # no running loop (sync context): nobody can be subscribed anyway
        logger.debug("no running event loop, event not published")
        return
    task = loop.create_task(publish(event))
    _pending.add(task)
    task.add_done_callback(_on_publish_done)


def get_status() -> dict:
    """Return a small debug status: number of SSE queues and WS clients."""
    return {"sse_queues": len(_subscribers), "websockets": len(_websockets)}
