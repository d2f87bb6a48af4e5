"""FastAPI dependencies."""

from fastapi import Request

from apk_list.worker.page_cache import PageCache


def get_page_cache(request: Request) -> PageCache:
    """Dependency for the shared page cache created at startup."""
    return request.app.state.page_cache
