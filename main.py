import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings
from database import build_stores, seed_demo_data
from errors import AppError, InternalError, ValidationError
from logging_setup import configure_logging, instrument_fastapi
from routes import auth, tasks
from schemas import error_response
from utils.jwt import TokenService

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure in the standard error envelope"""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.to_dict()),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = ValidationError("Invalid request", details=jsonable_encoder(exc.errors()))
        return JSONResponse(status_code=error.status_code, content=error_response(error.to_dict()))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        error = {"code": "HTTP_ERROR", "message": str(exc.detail)}
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(error),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        error = InternalError()
        return JSONResponse(status_code=error.status_code, content=error_response(error.to_dict()))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API with its stores and token service

    Args:
        settings: Settings to use; read from the environment when omitted

    Raises:
        ValueError: If JWT_SECRET is not configured
    """
    settings = settings or Settings.from_env()
    configure_logging(settings)

    # Create FastAPI app
    app = FastAPI(
        title="Task Management API",
        description="RESTful API for task management with multi-user support",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    users, task_repository, engine = build_stores(settings)
    if settings.seed_demo_data:
        seed_demo_data(users, task_repository)

    app.state.settings = settings
    app.state.users = users
    app.state.tasks = task_repository
    app.state.engine = engine
    app.state.token_service = TokenService(settings.jwt_secret, settings.jwt_expire)

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(tasks.router, prefix="/api/tasks", tags=["tasks"])

    @app.get("/")
    def read_root():
        """Root endpoint"""
        return {
            "success": True,
            "message": "Task Management API is running",
            "version": "1.0.0",
            "docs": "/docs"
        }

    @app.get("/health", status_code=status.HTTP_200_OK)
    def health_check():
        """Health check endpoint"""
        return {"status": "healthy"}

    instrument_fastapi(app, settings)
    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn"""
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
