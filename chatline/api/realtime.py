import asyncio
from typing import AsyncGenerator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from chatline.api.deps import ChangeFeed, CurrentUser
from chatline.core.config import get_settings

router = APIRouter()


@router.get("/stream")
async def stream_realtime(
    user: CurrentUser,
    feed: ChangeFeed,
    request: Request,
) -> StreamingResponse:
    subscription = await feed.subscribe(user.id)
    keepalive = get_settings().REALTIME_KEEPALIVE_SECONDS

    async def event_generator() -> AsyncGenerator[str, None]:
        try:
            yield 'data: {"type":"connected"}\n\n'
            while True:
                if await request.is_disconnected():
                    break
                try:
                    event = await subscription.get(timeout=keepalive)
                except asyncio.TimeoutError:
                    yield ": keep-alive\n\n"
                    continue
                if event is None:
                    break
                yield f"data: {event.model_dump_json()}\n\n"
        finally:
            await subscription.unsubscribe()

    return StreamingResponse(event_generator(), media_type="text/event-stream")
