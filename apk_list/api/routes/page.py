"""Serves the current APK page."""

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from apk_list.api.deps import get_page_cache
from apk_list.worker.page_cache import PageCache

router = APIRouter(tags=["page"])


@router.get("/", response_class=HTMLResponse)
async def get_page(cache: PageCache = Depends(get_page_cache)):
    """Return the last published page, or the placeholder before the first refresh."""
    return HTMLResponse(content=cache.read().body, status_code=200)


@router.get("/health")
async def health(cache: PageCache = Depends(get_page_cache)):
    """Health check endpoint."""
    snapshot = cache.read()
    return {
        "status": "healthy",
        "last_updated": None if snapshot.placeholder else snapshot.created_at.isoformat(),
        "placeholder": snapshot.placeholder,
    }


@router.get("/{path:path}", response_class=HTMLResponse, include_in_schema=False)
async def get_page_any_path(path: str, cache: PageCache = Depends(get_page_cache)):
    """Every other GET path serves the same page. Must stay the last route."""
    return HTMLResponse(content=cache.read().body, status_code=200)
