"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sodipas_api.config import settings
from sodipas_api.database.engine import init_db
from sodipas_api.errors import ApiError
from sodipas_api.routers.activity import router as activity_router
from sodipas_api.routers.auth import router as auth_router
from sodipas_api.routers.cashier import router as cashier_router
from sodipas_api.routers.directory import clients_router, managers_router, users_router
from sodipas_api.routers.stocks import router as stocks_router
from sodipas_api.routers.trucks import router as trucks_router

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle hook."""
    logger.info("Starting %s …", settings.app_name)
    await init_db()
    logger.info("Database initialised")
    if settings.dev_mode:
        logger.warning("dev_mode is on: login responses include the one-time code")
    yield
    logger.info("Shutting down %s …", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    description="Fruit distribution logistics: OTP sign-in, trucks and hangar stock",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    logger.info("%s %s -> %s", request.method, request.url.path, response.status_code)
    return response


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Render domain errors as ``{success: false, message}``."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are plain 400 validation errors."""
    problems = []
    for err in exc.errors():
        where = ".".join(str(part) for part in err["loc"][1:]) or err["loc"][0]
        problems.append(f"{where}: {err['msg']}")
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "; ".join(problems) or "Invalid request"},
    )


app.include_router(auth_router)
app.include_router(trucks_router)
app.include_router(stocks_router)
app.include_router(users_router)
app.include_router(clients_router)
app.include_router(managers_router)
app.include_router(activity_router)
app.include_router(cashier_router)


@app.get("/health")
async def health_check():
    """Simple liveness probe."""
    return {"status": "healthy", "app": settings.app_name}
