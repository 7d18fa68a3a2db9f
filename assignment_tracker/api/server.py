"""
FastAPI server for the tracker API. Run with run_api_server(app).
Central endpoints: GET /api/health, GET /api/features. Per-feature routes are mounted
from assignment_tracker.features.<package>.api (get_router(tracker_app)) under /api/components/<package>/.
Docs: http://<host>:<port>/docs
"""
import importlib
import logging
import pkgutil
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

FEATURES_PACKAGE = "assignment_tracker.features"


def serialize_datetime(dt: Optional[datetime]) -> Optional[str]:
    """Serialize datetime to ISO string (UTC)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def user_dependency(tracker_app: Any):
    """FastAPI dependency resolving the request's user id from the X-User-Id header."""

    def current_user_id(x_user_id: Optional[int] = Header(default=None)) -> int:
        return tracker_app.resolve_user_id(x_user_id)

    return current_user_id


def create_app(tracker_app: Any) -> FastAPI:
    """Create FastAPI app with routes that use the given TrackerApp instance."""
    app = FastAPI(title="Assignment Tracker API", description="Assignments, subjects, calendar and spreadsheet import")
    mounted: List[str] = []

    @app.exception_handler(SQLAlchemyError)
    async def database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Database error"})

    @app.get("/api/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok", "time": serialize_datetime(datetime.now(timezone.utc))}

    @app.get("/api/features")
    def list_features() -> List[str]:
        """Names of mounted feature routers."""
        return list(mounted)

    # Mount per-feature API routers from assignment_tracker.features.<name>.api (get_router(tracker_app))
    features_pkg = importlib.import_module(FEATURES_PACKAGE)
    for _mod, name, is_pkg in pkgutil.iter_modules(features_pkg.__path__):
        if not is_pkg:
            continue
        try:
            api_module = importlib.import_module(f"{FEATURES_PACKAGE}.{name}.api")
        except ModuleNotFoundError:
            logger.debug(f"Feature {name} has no api module")
            continue
        if not hasattr(api_module, "get_router") or not callable(api_module.get_router):
            continue
        router = api_module.get_router(tracker_app)
        if router is not None:
            app.include_router(router, prefix=f"/api/components/{name}")
            mounted.append(name)
            logger.debug(f"Mounted API router for feature {name}")

    return app


def run_api_server(tracker_app: Any) -> None:
    """
    Serve the API with uvicorn (blocking).
    Reads api.host (default 127.0.0.1) and api.port (default 8765) from config.
    """
    import uvicorn

    api_config = tracker_app.config.data.get("api") or {}
    host = api_config.get("host", "127.0.0.1")
    port = int(api_config.get("port", 8765))
    fastapi_app = tracker_app.create_api()
    logger.info(f"API server listening at http://{host}:{port} (docs at /docs)")
    uvicorn.run(fastapi_app, host=host, port=port, log_config=None)
