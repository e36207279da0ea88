"""
FastAPI Endpoints for the Short-Link Service

Endpoints only handle:
- Form/path extraction
- Rate limiting
- Turning service outcomes into HTTP responses

All resolution logic is in RedirectService.

Routes:
- GET  /             home page
- POST /verify       password form submission
- DELETE /del/{code} creator-only deletion (JSON)
- GET  /{code}       resolve a short link (catch-all, registered last)
- GET  /{code}/...   same, extra path segments are ignored
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse
from starlette.responses import Response

from zye.api.dependencies import (
    get_link_admin_service,
    get_redirect_service,
    get_template_renderer,
)
from zye.api.schemas import MessageResponse
from zye.core.exceptions import LinkNotFoundError, LinkOwnershipError, StoreError
from zye.core.network import get_client_ip
from zye.core.rate_limit import limiter, RATE_LIMITS
from zye.core.setting import settings
from zye.core.validators import sanitize_short_code
from zye.services.link_admin import LinkAdminService
from zye.services.redirect_service import RedirectService, Resolution, ResolutionKind
from zye.services.templates import TemplateRenderer

logger = logging.getLogger(__name__)

router = APIRouter()

MISSING_FIELDS_MESSAGE = "缺少必要參數"


def record_outcome(request: Request, code: str, resolution: Resolution) -> None:
    """Expose the resolved code and outcome to the request log."""
    request.state.short_code = code
    request.state.outcome = resolution.kind.value


def build_response(resolution: Resolution) -> Response:
    """Translate a Resolution into a Starlette response."""
    if resolution.kind is ResolutionKind.REDIRECT:
        return RedirectResponse(url=resolution.location, status_code=status.HTTP_302_FOUND)

    if resolution.kind is ResolutionKind.SERVER_ERROR:
        return PlainTextResponse(resolution.body, status_code=resolution.status_code)

    return HTMLResponse(resolution.body, status_code=resolution.status_code)


@router.get("/", response_class=HTMLResponse, summary="Home page")
async def home(renderer: TemplateRenderer = Depends(get_template_renderer)) -> HTMLResponse:
    return HTMLResponse(renderer.render("home", {"base_url": settings.BASE_URL}))


@router.post(
    "/verify",
    summary="Verify a link password",
    description="Form submission from the password page; redirects on success"
)
@limiter.limit(RATE_LIMITS["verify"])
async def verify_link_password(
    request: Request,
    code: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    redirect_service: RedirectService = Depends(get_redirect_service),
) -> Response:
    """
    Check a password for a protected link.

    Returns:
        302 to the destination, the preview page for crawlers, or the
        password page again with an inline error (HTTP 200)
    """
    if not code or not password:
        return PlainTextResponse(MISSING_FIELDS_MESSAGE, status_code=status.HTTP_400_BAD_REQUEST)

    resolution = await redirect_service.verify(code, password, request)
    record_outcome(request, code, resolution)
    return build_response(resolution)


@router.delete(
    "/del/{code}",
    response_model=MessageResponse,
    summary="Delete a short link",
    description="Only the client that created the link may delete it"
)
@limiter.limit(RATE_LIMITS["delete"])
async def delete_link(
    code: str,
    request: Request,
    admin_service: LinkAdminService = Depends(get_link_admin_service),
) -> JSONResponse:
    sanitized_code = sanitize_short_code(code)
    if not sanitized_code:
        return _message(False, "找不到該短網址", status.HTTP_404_NOT_FOUND)

    try:
        await admin_service.delete_link(sanitized_code, get_client_ip(request))
    except LinkNotFoundError:
        return _message(False, "找不到該短網址", status.HTTP_404_NOT_FOUND)
    except LinkOwnershipError:
        return _message(False, "你沒有權限刪除這個短網址", status.HTTP_403_FORBIDDEN)
    except StoreError as e:
        logger.error(f"Failed to delete '{sanitized_code}': {str(e)}", exc_info=True)
        return _message(False, "伺服器錯誤，請稍後再試", status.HTTP_500_INTERNAL_SERVER_ERROR)

    return _message(True, "短網址刪除成功", status.HTTP_200_OK)


@router.get(
    "/{code}",
    summary="Resolve a short link",
    description="Redirects, shows the password page, or serves a crawler preview"
)
@limiter.limit(RATE_LIMITS["redirect"])
async def resolve_link(
    code: str,
    request: Request,
    redirect_service: RedirectService = Depends(get_redirect_service),
) -> Response:
    """
    Resolve a short code.

    Returns:
        302 redirect, 200 password or preview page, 404 not-found page,
        or 500 plain text when the store fails
    """
    resolution = await redirect_service.resolve(code, request)
    record_outcome(request, code, resolution)
    return build_response(resolution)


def _message(success: bool, message: str, status_code: int) -> JSONResponse:
    body = MessageResponse(success=success, message=message)
    return JSONResponse(body.model_dump(), status_code=status_code)


@router.get(
    "/{code}/{rest:path}",
    summary="Resolve a short link with trailing path",
    description="Only the first path segment is the short code"
)
@limiter.limit(RATE_LIMITS["redirect"])
async def resolve_nested_link(
    code: str,
    rest: str,
    request: Request,
    redirect_service: RedirectService = Depends(get_redirect_service),
) -> Response:
    resolution = await redirect_service.resolve(code, request)
    record_outcome(request, code, resolution)
    return build_response(resolution)
