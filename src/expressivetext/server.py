"""HTTP REST server for expressive-text."""

import logging
import time
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from expressivetext import __version__
from expressivetext.crypto import decrypt_with_aes, encrypt_with_aes
from expressivetext.exceptions import (
    CipherFormatError,
    InvalidArgumentError,
    PatternConfigurationError,
)
from expressivetext.locator import DEFAULT_MAX_NARROWING_STEPS, TextLocator
from expressivetext.models import MatchSpan, PatternKind
from expressivetext.registry import PatternRegistry, default_registry, load_registry
from expressivetext.validator import Validator

logger = logging.getLogger(__name__)

# Prometheus metrics
REQUEST_COUNT = Counter(
    "expressivetext_requests_total",
    "Total requests",
    ["endpoint", "status"],
)
REQUEST_DURATION = Histogram(
    "expressivetext_request_duration_seconds",
    "Request duration in seconds",
    ["endpoint"],
)
VALIDATIONS = Counter(
    "expressivetext_validations_total",
    "Total validations",
    ["kind", "result"],
)


# Request/Response models
class ValidateRequest(BaseModel):
    """Request model for /validate endpoint."""

    text: str
    kind: str


class ValidateResponse(BaseModel):
    """Response model for /validate endpoint."""

    ok: bool
    kind: str


class FindBetweenRequest(BaseModel):
    """Request model for /find-between endpoint."""

    text: str
    start: str
    end: str
    recursive: bool = True


class AffixRequest(BaseModel):
    """Request model for /starts-with and /ends-with endpoints."""

    text: str
    values: Optional[list[str]] = None
    ignore_case: bool = True
    culture: Optional[str] = None


class AffixResponse(BaseModel):
    """Response model for /starts-with and /ends-with endpoints."""

    ok: bool


class ContainsWordsRequest(BaseModel):
    """Request model for /contains-words endpoint."""

    text: str
    words: list[str]


class SpansResponse(BaseModel):
    """Response model for span-producing endpoints."""

    hits: list[dict[str, Any]]
    count: int


class CryptoRequest(BaseModel):
    """Request model for /encrypt and /decrypt endpoints."""

    text: str
    key: str


class CryptoResponse(BaseModel):
    """Response model for /encrypt and /decrypt endpoints."""

    text: str


class PatternUpdate(BaseModel):
    """Request model for PUT /patterns/{kind}."""

    pattern: str


class PatternsResponse(BaseModel):
    """Response model for /patterns endpoints."""

    version: int
    patterns: dict[str, str]


class HealthResponse(BaseModel):
    """Response model for /health endpoint."""

    status: str
    version: str
    registry_version: int


class ExpressiveTextServer:
    """Server wrapper for managing state."""

    def __init__(self, config: Optional[dict[str, Any]] = None) -> None:
        """Initialize server with configuration."""
        self.config = config or {}
        self.registry: PatternRegistry = self._load_registry()
        self.validator = Validator(self.registry)
        self.locator = TextLocator(
            max_narrowing_steps=self.config.get("locator", {}).get(
                "max_narrowing_steps", DEFAULT_MAX_NARROWING_STEPS
            )
        )

    def _load_registry(self) -> PatternRegistry:
        """Use the process-wide registry unless a pattern file is configured."""
        path = self.config.get("registry", {}).get("path")
        if path is None:
            return default_registry

        logger.info(f"Loading patterns from: {path}")
        return load_registry(path)


def _hits(spans: list[MatchSpan]) -> SpansResponse:
    return SpansResponse(
        hits=[{"span": s.span, "length": s.length, "text": s.text} for s in spans],
        count=len(spans),
    )


def create_app(config: Optional[dict[str, Any]] = None) -> FastAPI:
    """
    Create FastAPI application.

    Args:
        config: Server configuration dictionary

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="expressive-text",
        description="Text validation, location and encryption service",
        version=__version__,
    )

    server = ExpressiveTextServer(config)

    # Middleware for metrics and timing
    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next: Any) -> Response:
        """Record metrics for each request."""
        start_time = time.time()
        endpoint = request.url.path

        response = await call_next(request)

        duration = time.time() - start_time
        REQUEST_COUNT.labels(endpoint=endpoint, status=response.status_code).inc()
        REQUEST_DURATION.labels(endpoint=endpoint).observe(duration)

        return response

    @app.post("/validate", response_model=ValidateResponse)
    async def validate(request: ValidateRequest) -> ValidateResponse:
        """Validate text as an email, IP, URL, date or number."""
        try:
            result = server.validator.validate(request.text, request.kind)
        except PatternConfigurationError as e:
            logger.error(f"Validate error: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=404, detail=str(e))

        VALIDATIONS.labels(kind=result.kind, result=str(result.is_valid).lower()).inc()
        return ValidateResponse(ok=result.is_valid, kind=result.kind)

    @app.post("/find-between", response_model=SpansResponse)
    async def find_between(request: FindBetweenRequest) -> SpansResponse:
        """Extract text between two markers."""
        spans = server.locator.find_between(
            request.text, request.start, request.end, recursive=request.recursive
        )
        return _hits(spans)

    @app.post("/starts-with", response_model=AffixResponse)
    async def starts_with(request: AffixRequest) -> AffixResponse:
        """Check whether any line starts with one of the values."""
        try:
            ok = server.locator.starts_with_any(
                request.text, request.values, request.ignore_case, request.culture
            )
        except InvalidArgumentError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return AffixResponse(ok=ok)

    @app.post("/ends-with", response_model=AffixResponse)
    async def ends_with(request: AffixRequest) -> AffixResponse:
        """Check whether any line ends with one of the values."""
        try:
            ok = server.locator.ends_with_any(
                request.text, request.values, request.ignore_case, request.culture
            )
        except InvalidArgumentError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return AffixResponse(ok=ok)

    @app.post("/contains-words", response_model=SpansResponse)
    async def contains_words(request: ContainsWordsRequest) -> SpansResponse:
        """Locate any of the given words, ignoring case."""
        try:
            spans = server.locator.contains_words(request.text, *request.words)
        except InvalidArgumentError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _hits(spans)

    @app.post("/encrypt", response_model=CryptoResponse)
    async def encrypt(request: CryptoRequest) -> CryptoResponse:
        """Encrypt text with AES."""
        try:
            return CryptoResponse(text=encrypt_with_aes(request.text, request.key))
        except InvalidArgumentError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app.post("/decrypt", response_model=CryptoResponse)
    async def decrypt(request: CryptoRequest) -> CryptoResponse:
        """Decrypt the first block of an encrypted value."""
        try:
            return CryptoResponse(text=decrypt_with_aes(request.text, request.key))
        except (InvalidArgumentError, CipherFormatError) as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app.get("/patterns", response_model=PatternsResponse)
    async def patterns() -> PatternsResponse:
        """List the active patterns."""
        return PatternsResponse(
            version=server.registry.version,
            patterns={kind.value: p for kind, p in server.registry.snapshot().items()},
        )

    @app.put("/patterns/{kind}", response_model=PatternsResponse)
    async def set_pattern(kind: str, update: PatternUpdate) -> PatternsResponse:
        """Replace the active pattern for a kind."""
        try:
            pattern_kind = PatternKind(kind)
        except ValueError:
            raise HTTPException(status_code=404, detail=f"Unknown pattern kind: {kind}")

        server.registry.set_pattern(pattern_kind, update.pattern)
        return await patterns()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            version=__version__,
            registry_version=server.registry.version,
        )

    @app.get("/metrics")
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8080)
