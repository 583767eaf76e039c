"""HTTP middleware: security headers, request logging, input sanitising,
rate limiting and CORS."""

import asyncio
import re
import time
from collections import defaultdict, deque
from typing import Callable
from urllib.parse import parse_qsl, urlencode

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from loginlab.config import Settings
from loginlab.util.logging import get_logger

logger = get_logger(__name__)

CONTENT_SECURITY_POLICY = "; ".join(
    [
        "default-src 'self'",
        "style-src 'self' 'unsafe-inline'",
        "script-src 'self'",
        "img-src 'self' data: https:",
        "connect-src 'self'",
        "font-src 'self'",
        "object-src 'none'",
        "media-src 'self'",
        "frame-src 'none'",
    ]
)

SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.I)

OAUTH_PATH_PREFIXES = ("/auth/", "/callback/")


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "anonymous"


def sanitize(value: str) -> str:
    """Trim and strip ``<script>`` blocks from a user-supplied string."""
    return SCRIPT_BLOCK.sub("", value.strip())


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds security headers to every response (HSTS in production only)."""

    def __init__(self, app, production: bool = False) -> None:
        super().__init__(app)
        self.production = production

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        response.headers.setdefault(
            "Permissions-Policy", "geolocation=(), microphone=()"
        )
        response.headers.setdefault("Content-Security-Policy", CONTENT_SECURITY_POLICY)
        if self.production:
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request; status >= 400 is logged as an error.

    Only the path is logged: callback query strings carry authorization codes.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        message = (
            f"{request.method} {request.url.path} {response.status_code} "
            f"{duration_ms:.1f}ms ip={client_ip(request)} "
            f"user_agent={request.headers.get('user-agent', '-')}"
        )
        if response.status_code >= 400:
            logger.error(message)
        else:
            logger.info(message)
        return response


class SanitizeInputMiddleware(BaseHTTPMiddleware):
    """Trims query parameters and removes ``<script>`` blocks from them.

    The query string is only rewritten when a value changes. Undecodable
    bytes survive the rewrite through ``surrogateescape``.
    """

    async def dispatch(self, request: Request, call_next):
        query_string = request.scope.get("query_string", b"")
        if query_string:
            pairs = parse_qsl(
                query_string.decode("utf-8", errors="surrogateescape"),
                keep_blank_values=True,
                errors="surrogateescape",
            )
            cleaned = [(key, sanitize(value)) for key, value in pairs]
            if cleaned != pairs:
                request.scope["query_string"] = urlencode(
                    cleaned, errors="surrogateescape"
                ).encode("ascii")
        return await call_next(request)


class SlidingWindowRateLimiter:
    """In-memory sliding-window limiter keyed by an arbitrary string.

    Single-process only; counts are lost on restart.
    """

    def __init__(
        self,
        times: int,
        seconds: int,
        clock: Callable[[], float] = time.monotonic,
        cleanup_interval: float = 60.0,
    ) -> None:
        self._hits: defaultdict[str, deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()
        self.times = times
        self.seconds = seconds
        self.clock = clock
        self.cleanup_interval = cleanup_interval
        self._last_cleanup = clock()

    @property
    def tracked_keys(self) -> int:
        return len(self._hits)

    def _evict_expired(self, now: float) -> None:
        """Drop keys with no hits inside the window, at most once per interval."""
        if now - self._last_cleanup < self.cleanup_interval:
            return
        self._last_cleanup = now
        window_start = now - self.seconds
        expired = [
            key
            for key, hits in self._hits.items()
            if not hits or hits[-1] <= window_start
        ]
        for key in expired:
            del self._hits[key]

    async def hit(self, key: str) -> int | None:
        """Record a request for ``key``.

        Returns:
            None if the request is allowed, otherwise seconds until retry
        """
        now = self.clock()
        window_start = now - self.seconds
        async with self._lock:
            self._evict_expired(now)
            hits = self._hits[key]
            while hits and hits[0] <= window_start:
                hits.popleft()
            if len(hits) >= self.times:
                return max(1, int(self.seconds - (now - hits[0])))
            hits.append(now)
            return None

    async def reset(self) -> None:
        async with self._lock:
            self._hits.clear()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Applies the general limit to every request and the OAuth limit to
    ``/auth/*`` and ``/callback/*``."""

    def __init__(
        self,
        app,
        general: SlidingWindowRateLimiter,
        oauth: SlidingWindowRateLimiter,
    ) -> None:
        super().__init__(app)
        self.general = general
        self.oauth = oauth

    async def dispatch(self, request: Request, call_next):
        ip = client_ip(request)

        if request.url.path.startswith(OAUTH_PATH_PREFIXES):
            retry_after = await self.oauth.hit(ip)
            if retry_after is not None:
                return self._too_many(
                    "Too many OAuth attempts",
                    "Please wait before trying to authenticate again",
                    retry_after,
                )

        retry_after = await self.general.hit(ip)
        if retry_after is not None:
            return self._too_many(
                "Too many requests", "Please try again later", retry_after
            )

        return await call_next(request)

    def _too_many(self, error: str, message: str, retry_after: int) -> Response:
        logger.warning(f"Rate limit exceeded: {error}")
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"error": error, "message": message, "retry_after": retry_after},
            headers={"Retry-After": str(retry_after)},
        )


def install_middleware(app: FastAPI, settings: Settings) -> None:
    """Install the middleware stack.

    Starlette runs the last-added middleware first, so the order below is
    innermost to outermost.
    """
    app.add_middleware(SanitizeInputMiddleware)

    if settings.rate_limit.enabled:
        window = settings.rate_limit.window_seconds
        app.add_middleware(
            RateLimitMiddleware,
            general=SlidingWindowRateLimiter(settings.rate_limit.max_requests, window),
            oauth=SlidingWindowRateLimiter(
                settings.rate_limit.oauth_max_requests, window
            ),
        )

    app.add_middleware(SecurityHeadersMiddleware, production=settings.is_production)

    if settings.environment != "test":
        app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
        max_age=86400,
    )
