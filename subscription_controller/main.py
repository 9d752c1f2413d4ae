"""
Subscription Controller

Serves the SaaS provisioning callbacks of a multitenant application and
keeps one APIRule per subscribed tenant exposing the tenant's host on the
cluster gateway.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from .apirule_client import ApiRuleClient, load_kube_config
from .config import ControllerConfig
from .errors import InvalidEventError, ProvisioningError, TemporaryError
from .handlers import TenantCallbackHandler
from .models import Dependency, SubscriptionEvent, UnsubscriptionEvent
from .sync import ApiRuleSynchronizer

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

CALLBACK_PREFIX = "/callback/v1.0"


def create_app(
    config: Optional[ControllerConfig] = None,
    synchronizer: Optional[ApiRuleSynchronizer] = None,
) -> FastAPI:
    """
    Build the callback application.

    Args:
        config: controller configuration (None: read from the environment)
        synchronizer: APIRule synchronizer (None: backed by the cluster the
            process runs in, Kubernetes config loaded at startup)
    """
    config = config or ControllerConfig.from_env()
    dependencies = [Dependency.model_validate(item) for item in config.dependencies]

    connect_cluster = synchronizer is None
    if synchronizer is None:
        client = ApiRuleClient(namespace=config.namespace, timeout=config.api_timeout)
        synchronizer = ApiRuleSynchronizer(config, client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if connect_cluster:
            load_kube_config()
        logger.info(
            f"Subscription controller started (namespace={config.namespace}, "
            f"cluster_domain={config.cluster_domain})"
        )
        yield

    app = FastAPI(title="Subscription Controller", lifespan=lifespan)
    app.state.config = config
    app.state.synchronizer = synchronizer
    app.state.handler = TenantCallbackHandler(config, synchronizer)

    # =========================================================================
    # Error mapping
    # =========================================================================

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'][1:]) or 'body'}: {error['msg']}"
            for error in exc.errors()
        )
        logger.warning(f"Rejected {request.method} {request.url.path}: {problems}")
        return PlainTextResponse(f"Invalid callback body: {problems}", status_code=400)

    @app.exception_handler(InvalidEventError)
    async def invalid_event(request: Request, exc: InvalidEventError):
        logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
        return PlainTextResponse(f"Invalid callback body: {exc}", status_code=400)

    @app.exception_handler(ProvisioningError)
    async def provisioning_failed(request: Request, exc: ProvisioningError):
        if isinstance(exc, TemporaryError):
            logger.warning(f"{request.method} {request.url.path} failed temporarily: {exc}")
        else:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return PlainTextResponse(str(exc), status_code=500)

    # =========================================================================
    # Callbacks
    # =========================================================================

    @app.put(f"{CALLBACK_PREFIX}/tenants/{{tenant_path:path}}", response_class=PlainTextResponse)
    async def subscribe(tenant_path: str, event: SubscriptionEvent, request: Request) -> str:
        """Tenant subscribed: ensure its APIRule and return the tenant URL."""
        return await request.app.state.handler.subscribe(event)

    @app.delete(f"{CALLBACK_PREFIX}/tenants/{{tenant_path:path}}", response_class=PlainTextResponse)
    async def unsubscribe(tenant_path: str, event: UnsubscriptionEvent, request: Request) -> str:
        """Tenant unsubscribed: remove its APIRule, always acknowledged."""
        return await request.app.state.handler.unsubscribe(event)

    @app.get(f"{CALLBACK_PREFIX}/dependencies")
    async def get_dependencies() -> list[dict]:
        """Services the application depends on, for the subscription manager."""
        return [item.model_dump(by_alias=True, exclude_none=True) for item in dependencies]

    # =========================================================================
    # Health
    # =========================================================================

    @app.get("/healthz")
    async def healthz(request: Request) -> dict:
        return {
            "status": "ok",
            "orphanedDeletions": request.app.state.synchronizer.orphaned_deletions,
        }

    return app


def main() -> None:
    import uvicorn

    app = create_app(ControllerConfig.from_env())
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    main()
