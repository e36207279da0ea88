"""
Redirect Service

This service decides what a visitor of `/{code}` gets: a redirect, the
password gate, a crawler preview page, or the not-found page.

Resolution is an ordered list of gates. Each gate looks at the shared
context and either returns a final Resolution or None to hand over to the
next gate; the first Resolution wins. Lookup and verification share every
gate except the password step.

Design Decisions:
- Expired links are deleted on read and answered exactly like unknown codes
- Password-protected links show the gate to everyone, crawlers included
- Any unexpected failure becomes a generic 500; nothing leaks past here
"""

import html
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from zye.api.schemas import LinkRecord
from zye.core.security import verify_password
from zye.core.validators import sanitize_short_code
from zye.services.bot_classifier import classify
from zye.services.expiration import check_expired
from zye.services.link_store import LinkStore
from zye.services.preview import PreviewGenerator
from zye.services.templates import TemplateRenderer

logger = logging.getLogger(__name__)

PASSWORD_INCORRECT_MESSAGE = "密碼錯誤，請重新輸入"
SERVER_ERROR_MESSAGE = "伺服器錯誤"


class ResolutionKind(str, Enum):
    NOT_FOUND = "not_found"
    PASSWORD_REQUIRED = "password_required"
    PASSWORD_INCORRECT = "password_incorrect"
    PREVIEW = "preview"
    REDIRECT = "redirect"
    SERVER_ERROR = "server_error"


@dataclass
class Resolution:
    """Final outcome of a resolution, turned into an HTTP response by the API layer."""
    kind: ResolutionKind
    status_code: int
    body: str = ""
    location: Optional[str] = None


@dataclass
class ResolutionContext:
    code: str
    request: Any
    password: Optional[str] = None
    record: Optional[LinkRecord] = None


Gate = Callable[[ResolutionContext], Awaitable[Optional[Resolution]]]


class RedirectService:
    """
    Service for resolving short codes.
    """

    def __init__(self, store: LinkStore, renderer: TemplateRenderer, preview: PreviewGenerator):
        """
        Args:
            store: Link store used for lookups and expiry deletes
            renderer: Page template renderer
            preview: Generator for crawler preview pages
        """
        self.store = store
        self.renderer = renderer
        self.preview = preview

    @property
    def resolve_gates(self) -> tuple[Gate, ...]:
        return (
            self._lookup_gate,
            self._expiration_gate,
            self._password_required_gate,
            self._preview_gate,
            self._redirect_gate,
        )

    @property
    def verify_gates(self) -> tuple[Gate, ...]:
        return (
            self._lookup_gate,
            self._expiration_gate,
            self._password_check_gate,
            self._preview_gate,
            self._redirect_gate,
        )

    async def resolve(self, code: str, request: Any) -> Resolution:
        """
        Resolve a short code for `GET /{code}`.

        Args:
            code: Short code from the request path
            request: Incoming request (headers and query parameters are read)

        Returns:
            Resolution for the first gate that fired
        """
        return await self._run(self.resolve_gates, ResolutionContext(code=code, request=request))

    async def verify(self, code: str, password: str, request: Any) -> Resolution:
        """
        Resolve a short code after a password form submission (`POST /verify`).
        """
        context = ResolutionContext(code=code, request=request, password=password)
        return await self._run(self.verify_gates, context)

    async def _run(self, gates: tuple[Gate, ...], context: ResolutionContext) -> Resolution:
        try:
            for gate in gates:
                resolution = await gate(context)
                if resolution is not None:
                    logger.info(f"Resolved '{context.code}': {resolution.kind.value} ({resolution.status_code})")
                    return resolution
        except Exception as e:
            logger.error(f"Failed to resolve '{context.code}': {str(e)}", exc_info=True)
            return self.server_error()

        # The redirect gate always fires
        logger.error(f"No gate fired for '{context.code}'")
        return self.server_error()

    # Gates

    async def _lookup_gate(self, context: ResolutionContext) -> Optional[Resolution]:
        code = sanitize_short_code(context.code)
        if code is None:
            return self.not_found(context.code)

        record = await self.store.get(code)
        if record is None:
            return self.not_found(code)

        context.code = code
        context.record = record
        return None

    async def _expiration_gate(self, context: ResolutionContext) -> Optional[Resolution]:
        if not check_expired(context.record):
            return None

        logger.debug(f"Link '{context.code}' expired at {context.record.exp}, deleting")
        await self.store.delete(context.code)
        return self.not_found(context.code)

    async def _password_required_gate(self, context: ResolutionContext) -> Optional[Resolution]:
        if context.record.password:
            return self.password_page(context.code)
        return None

    async def _password_check_gate(self, context: ResolutionContext) -> Optional[Resolution]:
        if verify_password(context.password or "", context.record.password):
            return None
        return self.password_page(context.code, error=PASSWORD_INCORRECT_MESSAGE)

    async def _preview_gate(self, context: ResolutionContext) -> Optional[Resolution]:
        if not classify(context.request):
            return None

        record = context.record
        body = await self.preview.generate(record.url, record.meta, record.code or context.code)
        return Resolution(ResolutionKind.PREVIEW, 200, body=body)

    async def _redirect_gate(self, context: ResolutionContext) -> Optional[Resolution]:
        return Resolution(ResolutionKind.REDIRECT, 302, location=context.record.url)

    # Terminal pages

    def not_found(self, code: str) -> Resolution:
        body = self.renderer.render("not_found", {"code": html.escape(code)})
        return Resolution(ResolutionKind.NOT_FOUND, 404, body=body)

    def password_page(self, code: str, error: Optional[str] = None) -> Resolution:
        error_section = f'<div class="error-message">{html.escape(error)}</div>' if error else ""
        body = self.renderer.render(
            "password",
            {"code": html.escape(code), "error_section": error_section},
        )
        kind = ResolutionKind.PASSWORD_INCORRECT if error else ResolutionKind.PASSWORD_REQUIRED
        return Resolution(kind, 200, body=body)

    def server_error(self) -> Resolution:
        return Resolution(ResolutionKind.SERVER_ERROR, 500, body=SERVER_ERROR_MESSAGE)
