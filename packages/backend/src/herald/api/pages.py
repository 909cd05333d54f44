"""Greeting page — renders templates/index.html for any other path.

Learn: The path itself (minus the leading slash) is the name being
greeted, so /alice greets "alice" and / greets nobody in particular.
Template errors answer 500 with the error text instead of a bare
traceback.
"""

import getpass
import os
from datetime import datetime
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from fastapi.templating import Jinja2Templates
from jinja2 import TemplateError

from herald.api.deps import get_settings, get_store
from herald.config import Settings
from herald.realtime.store import RedisStore

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
router = APIRouter()


def stamp(moment: datetime) -> str:
    """Format like `Jan  2 15:04:05` (day padded to two characters)."""
    return f"{moment:%b} {moment.day:>2} {moment:%H:%M:%S}"


def current_user() -> str:
    user = os.environ.get("USER")
    if user is not None:
        return user
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return ""


@router.get("/", include_in_schema=False)
@router.get("/{name:path}")
async def hello(
    request: Request,
    name: str = "",
    settings: Settings = Depends(get_settings),
    store: RedisStore = Depends(get_store),
):
    """Render the welcome page."""
    context = {
        "name": name,
        "time": stamp(datetime.now()),
        "user": current_user(),
        "redis_value": await store.get_value(settings.lookup_key),
    }
    try:
        return templates.TemplateResponse(request, "index.html", context)
    except TemplateError as e:
        return PlainTextResponse(str(e), status_code=500)
