from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.api import get_store
from services.reading_store import ReadingStore
from storage.backend import normalize_limit


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
def ui_index(
    request: Request,
    limit: Optional[str] = Query(None),
    store: ReadingStore = Depends(get_store),
) -> HTMLResponse:
    count = normalize_limit(limit, default=20)
    readings = store.list(count)
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "readings": readings,
            "limit": count,
            "database_live": store.durable_live,
        },
    )
