"""Redirect route."""

from fastapi import APIRouter, Request, status
from fastapi.responses import RedirectResponse

router = APIRouter()


@router.get("/{short_code}", include_in_schema=False)
async def redirect_to_url(request: Request, short_code: str):
    """Redirect to the target URL (the lookup also records the click)."""
    target = await request.app.state.service.resolve(short_code)

    # 302 so every visit comes back through the resolver and is counted
    return RedirectResponse(url=target, status_code=status.HTTP_302_FOUND)
