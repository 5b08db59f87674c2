from fastapi import FastAPI, Request, HTTPException
from contextlib import asynccontextmanager
import logging
import os
from dotenv import load_dotenv
from typing import Optional
import uvicorn
from fastapi.responses import FileResponse
from core.logging_config import configure_logging
import structlog
import uuid
import time
from prometheus_fastapi_instrumentator import Instrumentator, metrics as pfi_metrics_module

from core.config import AppConfig, ConfigLoader
from core.errors import ProviderNotFound
from core.registry import ResourceRegistry
from providers.factory import ProviderFactory

log = structlog.get_logger(__name__)

# TOML config file read by create_app() when no config is passed in (reload mode)
CONFIG_PATH_ENV = "RESOURCE_REGISTRY_CONFIG"

# Metric collectors are process-wide; every app built by create_app shares them
instrumentator = Instrumentator(
    should_group_status_codes=False,
    excluded_handlers=["/metrics"], # Exclude metrics endpoint itself
)
instrumentator.add(pfi_metrics_module.requests(
    metric_name="http_requests_total",
    metric_doc="Total HTTP requests processed",
    should_include_handler=True,
    should_include_method=True,
    should_include_status=True,
))


def get_registry(request: Request) -> ResourceRegistry:
    registry: Optional[ResourceRegistry] = getattr(request.app.state, 'registry', None)
    if registry is None:
        log.error("ResourceRegistry not found in app state.")
        raise HTTPException(status_code=500, detail="Resource registry not initialized.")
    return registry


def create_app(config: Optional[AppConfig] = None, registry: Optional[ResourceRegistry] = None) -> FastAPI:
    """
    Builds the FastAPI application.

    Args:
        config: Application configuration. If omitted, it is loaded from the TOML file named
                by $RESOURCE_REGISTRY_CONFIG, or from the environment / .env when that is unset.
        registry: A pre-built registry to serve from. If omitted, one is built from
                  ``config.providers`` during startup.
    """
    if config is None:
        config_path = os.getenv(CONFIG_PATH_ENV)
        config = ConfigLoader(config_path).get_config() if config_path else AppConfig()

    # --- FastAPI Lifecycle (Startup/Shutdown) ---
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Builds the resource registry once and shares it through app.state."""
        log.info("Application startup...")
        app.state.config = config
        if registry is not None:
            app.state.registry = registry
            log.info("Using provided resource registry.", providers=list(registry))
        else:
            app.state.registry = ProviderFactory(config).build_registry()
        log.info("Application startup complete.")
        try:
            yield # Application runs here
        finally:
            log.info("Application shutdown complete.")

    app = FastAPI(title="Resource Registry", description="Serves static resources from registered providers.", version="0.1.0", lifespan=lifespan)

    instrumentator.instrument(app)
    instrumentator.expose(app, endpoint="/metrics", include_in_schema=True, tags=["observability"])

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        structlog.contextvars.clear_contextvars()
        request_id = request.headers.get("x-request-id", str(uuid.uuid4())) # Generate if missing
        structlog.contextvars.bind_contextvars(
            path=request.url.path,
            method=request.method,
            request_id=request_id,
        )
        log.debug("Received request")
        start_time = time.time()

        response = await call_next(request)

        process_time = (time.time() - start_time) * 1000
        structlog.contextvars.bind_contextvars(status_code=response.status_code, process_time_ms=round(process_time, 2))
        log.info("Sending response")
        structlog.contextvars.clear_contextvars()
        response.headers["X-Request-ID"] = request_id # Add request ID to response header
        return response

    # --- Resource Endpoints ---
    # Plain def handlers: resolution touches the filesystem, so it runs in the threadpool

    @app.get("/resources/{resource_path:path}")
    def get_resource(request: Request, resource_path: str):
        """Serves a resource from the first provider that has it."""
        found = get_registry(request).resolve(None, resource_path)
        if found is None:
            log.info("Resource not found in any provider", resource_path=resource_path)
            raise HTTPException(status_code=404, detail=f"Resource '{resource_path}' not found")
        return FileResponse(found)

    @app.get("/providers/{provider_name}/resources/{resource_path:path}")
    def get_provider_resource(request: Request, provider_name: str, resource_path: str):
        """Serves a resource from one named provider."""
        try:
            found = get_registry(request).resolve(provider_name, resource_path)
        except ProviderNotFound as e:
            raise HTTPException(status_code=404, detail=str(e))
        if found is None:
            log.info("Resource not found", provider=provider_name, resource_path=resource_path)
            raise HTTPException(status_code=404, detail=f"Resource '{resource_path}' not found in provider '{provider_name}'")
        return FileResponse(found)

    @app.get("/providers")
    def list_providers(request: Request):
        """Lists registered providers in lookup order."""
        return [
            {
                "name": name,
                "type": getattr(provider, "type_name", type(provider).__name__),
                "development_root": str(provider.development_root) if provider.development_root else None,
            }
            for name, provider in get_registry(request).list_providers().items()
        ]

    # --- Health Check Endpoint ---
    @app.get("/health", status_code=200)
    async def health_check(request: Request):
        log.debug("Health check requested.")
        return {"status": "ok", "providers": len(get_registry(request))}

    return app


def main(config: Optional[AppConfig] = None, config_path: Optional[str] = None):
    """
    Runs the server with uvicorn, configuring logging from ``config`` first.

    ``config_path`` is the TOML file ``config`` was loaded from; with reload enabled
    the worker process rebuilds the app from it.
    """
    load_dotenv()
    try:
        app_config = config or AppConfig()
    except Exception as e:
        # structlog isn't configured yet
        logging.basicConfig()
        logging.getLogger(__name__).critical(f"Failed to load configuration: {e}", exc_info=True)
        raise

    configure_logging(log_level=app_config.log_level, force_json=app_config.log_json)
    log.info("Starting resource server", host=app_config.host, port=app_config.port, reload=app_config.reload)
    if app_config.reload:
        # reload needs an import string; the factory re-reads the config file
        if config_path:
            os.environ[CONFIG_PATH_ENV] = os.path.abspath(config_path)
        uvicorn.run("server:create_app", factory=True, host=app_config.host, port=app_config.port, reload=True, log_config=None)
    else:
        uvicorn.run(create_app(app_config), host=app_config.host, port=app_config.port, log_config=None)
    log.info("Resource server stopped")


if __name__ == "__main__":
    main()
