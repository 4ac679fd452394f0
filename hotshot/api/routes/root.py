from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from hotshot.core.config import Settings
from hotshot.dependencies import get_settings

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def root(settings: Settings = Depends(get_settings)):
    with open(settings.static_root / "index.html", "r", encoding="utf-8") as f:
        return f.read()


@router.get("/room/{room_id}", response_class=HTMLResponse)
async def room_page(room_id: str, settings: Settings = Depends(get_settings)):
    with open(settings.static_root / "room.html", "r", encoding="utf-8") as f:
        return f.read()
