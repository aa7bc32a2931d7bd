import logging
import time

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from legalrisk import get_runtime_version

from app import db as app_db
from app import models as _models  # noqa: F401 - register SQLAlchemy models before create_all
from app.bootstrap import ensure_default_admin, seed_catalog
from app.config import BASE_DIR, get_settings
from app.dependencies import ApiAuthError
from app.routers import (
    ai,
    auth,
    controls,
    dashboard,
    protocols,
    reports,
    risks,
    treatment,
    user,
    wizard,
)
from app.services.deepseek_client import AIServiceNotConfigured, DeepSeekError

logger = logging.getLogger(__name__)


def _initialize_db_schema(settings) -> None:
    active_engine = app_db.configure_database(settings.database_url)
    app_db.Base.metadata.create_all(bind=active_engine)
    with app_db.SessionLocal() as db:
        ensure_default_admin(db)
        if settings.seed_catalog_on_startup:
            seed_catalog(db)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _invalid_payload(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "invalid_payload", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(ApiAuthError)
    async def _unauthorized(request: Request, exc: ApiAuthError):
        return JSONResponse(status_code=401, content={"error": "unauthorized"})

    @app.exception_handler(AIServiceNotConfigured)
    async def _ai_not_configured(request: Request, exc: AIServiceNotConfigured):
        return JSONResponse(status_code=503, content={"error": "ai_not_configured"})

    @app.exception_handler(DeepSeekError)
    async def _ai_failed(request: Request, exc: DeepSeekError):
        logger.warning("AI request failed on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=502, content={"error": "ai_request_failed", "message": str(exc)})


def create_app() -> FastAPI:
    # Respect runtime env overrides (tests, temporary runs).
    get_settings.cache_clear()
    settings = get_settings()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.secret_key,
        session_cookie=settings.session_cookie_name,
        same_site="lax",
        https_only=False,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins or ["http://127.0.0.1", "http://localhost"],
        allow_origin_regex=settings.cors_allow_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    static_dir = BASE_DIR / "static"
    templates_dir = BASE_DIR / "templates"
    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")
    app.state.templates = Jinja2Templates(directory=str(templates_dir), auto_reload=True, cache_size=0)

    def _static_v(rel_path: str) -> int:
        # Cache-busting for static assets, keyed on file mtime.
        try:
            return int((static_dir / rel_path).stat().st_mtime)
        except OSError:
            return int(time.time())

    app.state.templates.env.globals["static_v"] = _static_v

    _register_error_handlers(app)
    _initialize_db_schema(settings)

    app.include_router(auth.router)
    app.include_router(user.router)
    app.include_router(wizard.router)
    app.include_router(risks.router)
    app.include_router(controls.router)
    app.include_router(treatment.router)
    app.include_router(protocols.router)
    app.include_router(dashboard.router)
    app.include_router(reports.router)
    app.include_router(ai.router)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.get("/api/health")
    def api_health():
        return {"status": "ok", "version": get_runtime_version()}

    return app


app = create_app()
