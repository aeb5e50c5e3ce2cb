"""Template source resolution.

A generation request names its template in exactly one of three ways:
a stored template id, inline base64 content, or a remote URL. The
resolver turns that reference into template bytes and a display name.
It does not validate the bytes.
"""

import asyncio
import base64
import binascii
import logging
import re
from urllib.parse import parse_qs, unquote, urlsplit

import httpx

from docgen.core.config import Settings
from docgen.interfaces.storage import BaseTemplateStorage, StorageError, TemplateNotFoundError
from docgen.pipeline.errors import (
    FetchError,
    FetchReason,
    InternalGenerationError,
    RequestShapeError,
    TemplateMissingError,
)
from docgen.pipeline.models import GenerationRequest, ResolvedTemplate, TemplateSourceMode

logger = logging.getLogger(__name__)

FALLBACK_TEMPLATE_NAME = "template.docx"

_NON_BASE64_RE = re.compile(r"[^A-Za-z0-9+/\-_]")


def decode_base64(content: str) -> bytes:
    """Leniently decode base64 content.

    Whitespace and stray characters are ignored and missing padding is
    restored. Undecodable content yields empty bytes, which later fails
    structural validation.
    """
    cleaned = _NON_BASE64_RE.sub("", content).replace("-", "+").replace("_", "/")
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        return base64.b64decode(cleaned)
    except (binascii.Error, ValueError):
        return b""


def display_name_from_url(url: str) -> str:
    """Derive a template file name from a URL.

    Uses the last path segment when it looks like a file name, then a
    ``file`` or ``filename`` query parameter, then a generic name.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return FALLBACK_TEMPLATE_NAME
    segments = [segment for segment in parts.path.split("/") if segment]
    if segments and "." in segments[-1]:
        return unquote(segments[-1]).split("?")[0]

    query = parse_qs(parts.query)
    for key in ("file", "filename"):
        if query.get(key):
            return query[key][0]

    return FALLBACK_TEMPLATE_NAME


def source_mode(request: GenerationRequest) -> TemplateSourceMode:
    """Return the template source of a request.

    Raises:
        RequestShapeError: If zero or several sources are given.
    """
    given = [
        mode
        for mode, present in (
            (TemplateSourceMode.STORED, bool(request.template_id)),
            (TemplateSourceMode.INLINE, request.template is not None),
            (TemplateSourceMode.REMOTE, bool(request.template_url)),
        )
        if present
    ]
    if len(given) != 1:
        raise RequestShapeError(
            "Provide exactly one of 'template_id', 'template' or 'template_url'"
            + (f" (got {', '.join(m.value for m in given)})" if given else "")
        )
    return given[0]


class TemplateSourceResolver:
    """Resolves a generation request's template reference into bytes."""

    def __init__(
        self,
        storage: BaseTemplateStorage,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            storage: Backend holding server-stored templates.
            settings: Supplies fetch timeout, size cap and User-Agent.
            transport: Optional httpx transport, used by tests.
        """
        self._storage = storage
        self._timeout_ms = settings.template_fetch_timeout_ms
        self._timeout_seconds = settings.template_fetch_timeout_seconds
        self._max_bytes = settings.template_fetch_max_bytes
        self._user_agent = settings.template_fetch_user_agent
        self._transport = transport

    async def resolve(self, request: GenerationRequest, org_id: str) -> ResolvedTemplate:
        """Resolve the request's template.

        Raises:
            RequestShapeError: If the request does not name exactly one source.
            TemplateMissingError: If a stored template does not exist.
            FetchError: If a remote template cannot be fetched.
        """
        mode = source_mode(request)

        match mode:
            case TemplateSourceMode.STORED:
                content = await self._load_stored(org_id, request.template_id)
                name = request.template_id
            case TemplateSourceMode.INLINE:
                content = decode_base64(request.template.content)
                name = request.template.filename
            case TemplateSourceMode.REMOTE:
                content = await self.fetch(request.template_url)
                name = display_name_from_url(request.template_url)

        logger.info(f"Resolved {mode.value} template '{name}' ({len(content)} bytes)")
        return ResolvedTemplate(content=content, display_name=name, mode=mode)

    async def _load_stored(self, org_id: str, template_id: str) -> bytes:
        try:
            return await self._storage.get(org_id, template_id)
        except TemplateNotFoundError as e:
            raise TemplateMissingError(template_id) from e
        except StorageError as e:
            raise InternalGenerationError(str(e)) from e

    async def fetch(self, url: str) -> bytes:
        """Download a template with a hard timeout and size cap.

        Raises:
            RequestShapeError: If the URL is not an http(s) URL.
            FetchError: On timeout, non-success status, oversize body or
                transport failure.
        """
        try:
            parts = urlsplit(url)
        except ValueError as e:
            raise RequestShapeError(f"Invalid template_url: {e}") from e
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise RequestShapeError(f"template_url must be an http(s) URL: {url}")

        try:
            async with asyncio.timeout(self._timeout_seconds):
                return await self._download(url, self._timeout_seconds)
        except (TimeoutError, httpx.TimeoutException) as e:
            raise FetchError(
                FetchReason.TIMEOUT,
                f"Timed out fetching template from URL after {self._timeout_ms} ms",
            ) from e
        except httpx.InvalidURL as e:
            raise RequestShapeError(f"Invalid template_url: {e}") from e
        except httpx.HTTPError as e:
            raise FetchError(
                FetchReason.TRANSPORT, f"Failed to fetch template from URL: {e}"
            ) from e

    async def _download(self, url: str, seconds: float) -> bytes:
        async with httpx.AsyncClient(
            timeout=seconds,
            follow_redirects=True,
            headers={"User-Agent": self._user_agent},
            transport=self._transport,
        ) as client:
            async with client.stream("GET", url) as response:
                if not response.is_success:
                    raise FetchError(
                        FetchReason.STATUS,
                        f"Template URL returned HTTP {response.status_code}"
                        f" {response.reason_phrase}".rstrip(),
                    )

                declared = response.headers.get("content-length", "")
                if declared.isdigit() and int(declared) > self._max_bytes:
                    raise self._too_large()

                content = bytearray()
                async for chunk in response.aiter_bytes():
                    content.extend(chunk)
                    if len(content) > self._max_bytes:
                        raise self._too_large()
                return bytes(content)

    def _too_large(self) -> FetchError:
        return FetchError(
            FetchReason.TOO_LARGE,
            f"Template at URL exceeds the maximum size of {self._max_bytes} bytes",
        )
