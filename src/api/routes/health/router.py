"""Endpoints de liveness e readiness."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

if TYPE_CHECKING:
    from app.infra.webhook import WebhookDispatcher
    from app.protocols import CredentialStoreProtocol

logger = logging.getLogger(__name__)

router = APIRouter()

STORE_CHECK_TIMEOUT_SECONDS = 2.0


@dataclass(frozen=True, slots=True)
class DependencyCheck:
    """Resultado de checagem de dependência."""

    status: Literal["ok", "degraded", "failed"]
    latency_ms: float | None = None
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "latency_ms": self.latency_ms,
            "error": self.error,
        }


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Liveness probe: o processo está de pé."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness probe: store acessível e dispatcher aceitando envelopes."""
    context = request.app.state.context
    store_check = await _check_store(context.store)
    webhook_check = _check_webhook(context.dispatcher)

    ready = store_check.status == "ok" and webhook_check.status != "failed"
    payload = {
        "status": "ready" if ready else "not_ready",
        "checks": {
            "store": store_check.as_dict(),
            "webhook": webhook_check.as_dict(),
        },
    }
    return JSONResponse(content=payload, status_code=200 if ready else 503)


async def _check_store(store: CredentialStoreProtocol) -> DependencyCheck:
    started_at = time.perf_counter()
    try:
        reachable = await asyncio.wait_for(
            asyncio.to_thread(store.ping),
            timeout=STORE_CHECK_TIMEOUT_SECONDS,
        )
    except TimeoutError:
        return DependencyCheck(status="failed", error="timeout")
    except Exception as exc:
        logger.warning("readiness_store_check_failed", extra={"error_type": type(exc).__name__})
        return DependencyCheck(status="failed", error=type(exc).__name__)
    if not reachable:
        return DependencyCheck(status="failed", error="unreachable")
    latency_ms = (time.perf_counter() - started_at) * 1000
    return DependencyCheck(status="ok", latency_ms=round(latency_ms, 2))


def _check_webhook(dispatcher: WebhookDispatcher) -> DependencyCheck:
    if dispatcher.sealed:
        return DependencyCheck(status="failed", error="sealed")
    if not dispatcher.started:
        return DependencyCheck(status="degraded", error="not_started")
    return DependencyCheck(status="ok")
