from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import TaskError, describe_errors
from .logging_setup import setup_logging
from .ports import Clock, IdGenerator, SystemClock, UuidGenerator
from .repositories import TaskStore, get_store
from .routers import tasks as tasks_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Create, list, update and delete tasks. Lists are ordered by due date.",
    },
]


async def task_error_handler(request: Request, exc: TaskError) -> JSONResponse:
    """
    Map task errors to their wire status.

    Response format:
        {"error": "NotFound", "message": "Task not found"}
    """
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": type(exc).__name__, "message": exc.message},
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent 400 JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "message": "title: title must not be empty",
            "detail": [... pydantic/fastapi error details ...]
        }
    """
    errors = exc.errors()
    return JSONResponse(
        status_code=400,
        content={
            "error": "ValidationError",
            "message": describe_errors(errors),
            "detail": jsonable_encoder(errors),
        },
    )


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    store: Optional[TaskStore] = None,
    clock: Optional[Clock] = None,
    id_generator: Optional[IdGenerator] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    The store, clock and id generator are held on app.state and handed to a
    fresh TaskService per request; pass fakes here to test deterministically.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Task Tracker",
        description="Backend API service for tracking tasks with due dates.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.settings = settings
    app.state.store = store or get_store(settings)
    app.state.clock = clock or SystemClock()
    app.state.id_generator = id_generator or UuidGenerator()

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS)
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=not allow_all,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Origin", "Content-Type"],
    )

    app.add_exception_handler(TaskError, task_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health, backend and task count.
        """
        current: TaskStore = app.state.store
        return {"message": "Healthy", "backend": current.backend_name, "tasks": current.count()}

    app.include_router(tasks_router.router)
    return app


_app: Optional[FastAPI] = None


def __getattr__(name: str):
    # `app` is built on first access, so importing this module opens no store
    global _app
    if name == "app":
        if _app is None:
            _app = create_app()
        return _app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
