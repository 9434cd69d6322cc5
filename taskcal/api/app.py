"""FastAPI application exposing the task calendar."""
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from loguru import logger

from .. import __version__
from ..config import Settings, settings
from ..tasks.errors import (
    NothingToExport,
    OverlapConflict,
    PersistenceUnavailable,
    TaskCalError,
    TaskInputError,
)
from ..tasks.service import CalendarService
from .models import ErrorResponse, TaskCreate, TaskOut

logger = logger.bind(module="api")

# Checked in order; the first matching class wins
_ERROR_STATUS: list[tuple[type[TaskCalError], int]] = [
    (OverlapConflict, status.HTTP_409_CONFLICT),
    (TaskInputError, status.HTTP_400_BAD_REQUEST),
    (NothingToExport, status.HTTP_404_NOT_FOUND),
    (PersistenceUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
]

router = APIRouter()


def get_service(request: Request) -> CalendarService:
    return request.app.state.service


def _tasks_by_date(snapshot) -> dict[str, list[TaskOut]]:
    return {
        str(key): [TaskOut.from_task(t) for t in tasks]
        for key, tasks in snapshot.items()
    }


# Route handlers are async with no await inside: each runs to completion on
# the event loop, so the store keeps a single mutator at a time.

@router.get("/health")
async def health(request: Request):
    service = get_service(request)
    return {
        "status": "ok",
        "version": __version__,
        "tasks": service.store.count(),
        "warnings": service.warnings,
        "persistence_degraded": service.persistence_degraded,
    }


@router.get("/v1/tasks")
async def list_all_tasks(request: Request) -> dict[str, list[TaskOut]]:
    return _tasks_by_date(get_service(request).all())


@router.get("/v1/dates/{date}/tasks")
async def list_tasks(request: Request, date: str, q: str = "") -> list[TaskOut]:
    """Tasks on a date, optionally filtered by a search term."""
    tasks = get_service(request).filter(date, q)
    return [TaskOut.from_task(t) for t in tasks]


@router.post("/v1/dates/{date}/tasks", status_code=status.HTTP_201_CREATED)
async def create_task(request: Request, date: str, body: TaskCreate) -> TaskOut:
    task = get_service(request).insert(
        date,
        body.title,
        body.description,
        body.starttime,
        body.endtime,
    )
    return TaskOut.from_task(task)


@router.delete("/v1/dates/{date}/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(request: Request, date: str, task_id: str) -> Response:
    get_service(request).delete(date, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/v1/months/{year}/{month}")
async def month_view(
    request: Request,
    year: int,
    month: int,
    q: str = "",
) -> dict[str, list[TaskOut]]:
    """Dates of a month that have matching tasks."""
    return _tasks_by_date(get_service(request).month(year, month, q))


@router.get("/v1/export")
async def export_csv(request: Request) -> Response:
    """Download every task as CSV."""
    service = get_service(request)
    content = service.export()
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{service.export_filename()}"'
        },
    )


async def _handle_task_error(request: Request, exc: TaskCalError) -> JSONResponse:
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_cls, code in _ERROR_STATUS:
        if isinstance(exc, error_cls):
            status_code = code
            break

    details: list = []
    if isinstance(exc, OverlapConflict):
        details.append({
            "date": str(exc.date_key),
            "task": TaskOut.from_task(exc.conflict).model_dump(mode="json"),
        })
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=exc.message, code=exc.code, details=details).model_dump(),
    )


def create_app(
    service: CalendarService | None = None,
    app_settings: Settings | None = None,
) -> FastAPI:
    """Build the API around a calendar service.

    Args:
        service: Service to expose; built from settings when omitted
        app_settings: Settings to use instead of the global instance
    """
    app_settings = app_settings or settings
    service = service or CalendarService.from_settings(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service.initialize()
        yield
        service.close()

    app = FastAPI(
        title="taskcal",
        description="Personal task calendar with overlap-checked time slots",
        version=__version__,
        debug=app_settings.debug,
        lifespan=lifespan,
    )
    app.state.service = service
    app.add_exception_handler(TaskCalError, _handle_task_error)
    app.include_router(router)
    return app
