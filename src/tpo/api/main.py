from __future__ import annotations

import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from tpo.api.error_handling import register_exception_handlers
from tpo.api.middleware.request_id import RequestIDMiddleware
from tpo.api.routes.compositions import router as compositions_router
from tpo.api.routes.currency import router as currency_router
from tpo.api.routes.health import router as health_router
from tpo.api.routes.invoices import router as invoices_router
from tpo.api.routes.metrics import router as metrics_router
from tpo.infrastructure import settings
from tpo.infrastructure.observability.logging_config import configure_logging
from tpo.infrastructure.observability.otel import configure_otel

logger = logging.getLogger("tpo.api.access")

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "route", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "route"],
)


def _route_label(request: Request) -> str:
    # Templated path keeps composition ids out of metric labels.
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        path = request.url.path
        method = request.method
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - started) * 1000
            route = _route_label(request)
            REQUEST_COUNT.labels(method=method, route=route, status_code="500").inc()
            REQUEST_LATENCY.labels(method=method, route=route).observe(duration_ms / 1000)
            logger.exception(
                "request_error",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": 500,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        route = _route_label(request)
        REQUEST_COUNT.labels(method=method, route=route, status_code=str(response.status_code)).inc()
        REQUEST_LATENCY.labels(method=method, route=route).observe(duration_ms / 1000)
        logger.info(
            "request_complete",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Travel Partner Ordering Pricing", version="0.1.0")
    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(currency_router)
    app.include_router(compositions_router)
    app.include_router(invoices_router)

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id"],
    )

    configure_otel(app)
    return app


app = create_app()
