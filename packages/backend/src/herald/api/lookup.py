"""Redis key lookup with fallback default."""

from fastapi import APIRouter, Depends

from herald.api.deps import get_settings, get_store
from herald.config import Settings
from herald.realtime.store import RedisStore

router = APIRouter()


@router.get("/redis")
async def redis_lookup(
    settings: Settings = Depends(get_settings),
    store: RedisStore = Depends(get_store),
):
    """Return the configured key's value, or DEFAULT_VALUE if unset/unreachable."""
    value = await store.get_value(settings.lookup_key)
    return {"redis": value}
