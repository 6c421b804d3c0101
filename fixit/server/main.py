import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Iterable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from fixit.core.errors import InvalidQuote, PersistError, ReadError, Unauthenticated, ValidationError
from fixit.server.api import auth, health, repairs
from fixit.server.settings.config import Settings, settings as default_settings
from fixit.services.notifications import NotificationChannel, NotificationDispatcher, build_channels
from fixit.services.repair_service import RepairService
from fixit.services.repair_store import RepairStore
from fixit.services.session_gate import SessionGate

logger = logging.getLogger("fixit")


def _register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(Unauthenticated)
    async def _unauthenticated(request: Request, exc: Unauthenticated):
        return RedirectResponse("/login", status_code=303)

    @app.exception_handler(ValidationError)
    async def _validation(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"error": str(exc), "missing": exc.missing})

    @app.exception_handler(InvalidQuote)
    async def _invalid_quote(request: Request, exc: InvalidQuote):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(ReadError)
    async def _read_error(request: Request, exc: ReadError):
        logger.error("failed to load repair requests: %s", exc)
        return JSONResponse(status_code=500, content={"error": "Failed to load repair requests."})

    @app.exception_handler(PersistError)
    async def _persist_error(request: Request, exc: PersistError):
        logger.error("failed to save repair requests: %s", exc)
        return JSONResponse(status_code=500, content={"error": "Could not save your request."})


def create_app(
    settings: Optional[Settings] = None,
    *,
    channels: Optional[Iterable[NotificationChannel]] = None,
) -> FastAPI:
    """
    Bygger appen. channels=None → kanaler från inställningarna (Twilio/SMTP),
    tester skickar in egna.
    """
    settings = settings or default_settings
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    upload_dir = Path(settings.upload_dir)
    store = RepairStore(Path(settings.repairs_file))
    dispatcher = NotificationDispatcher(build_channels(settings) if channels is None else channels)
    service = RepairService(store, dispatcher=dispatcher, upload_dir=upload_dir)
    gate = SessionGate(
        settings.admin_username,
        settings.admin_password,
        ttl_seconds=settings.session_ttl_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info("%s starting, ledger=%s uploads=%s", settings.app_name, store.path, upload_dir)
        if not gate.configured:
            logger.warning("ADMIN_USERNAME/ADMIN_PASSWORD not set, dashboard login is disabled")
        yield
        logger.info("%s stopping", settings.app_name)

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.service = service
    app.state.gate = gate
    app.state.upload_dir = upload_dir

    # Uppladdade foton serveras statiskt
    app.mount("/uploads", StaticFiles(directory=str(upload_dir), check_dir=False), name="uploads")

    # Routers
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(repairs.router)          # formulär + inskick, öppet
    app.include_router(repairs.admin_router)    # dashboard + /repairs + /repair/{id}/..., kräver inloggning

    _register_error_handlers(app)
    return app


app = create_app()
