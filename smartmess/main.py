import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .config import get_settings
from .exceptions import SmartMessError
from .migration_runner import run_migrations_once
from .routers import auth, leaves, monitoring, reminders
from .services.notifications import NotificationDispatcher

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.add_middleware(SessionMiddleware, secret_key=settings.secret_key, session_cookie=settings.session_cookie)
app.state.notification_dispatcher = NotificationDispatcher.from_settings(settings)


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        {"success": False, "message": str(exc.detail)},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return JSONResponse({"success": False, "message": "Invalid request", "errors": errors}, status_code=400)


@app.exception_handler(SmartMessError)
async def domain_error(request: Request, exc: SmartMessError):
    return JSONResponse({"success": False, "message": exc.message}, status_code=exc.status_code)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


@app.on_event("startup")
async def ensure_schema() -> None:
    if not settings.run_migrations:
        logger.info("Skipping database migrations (RUN_MIGRATIONS disabled)")
        return
    try:
        run_migrations_once()
    except Exception:  # pragma: no cover - startup failures should surface
        logger.exception("Database migration failed")
        raise


app.include_router(auth.router)
app.include_router(leaves.router)
app.include_router(monitoring.router)
app.include_router(reminders.router)
