"""HTTP/JSON API and static UI for dayplan."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from auth import GoogleOAuthClient, build_router, require_user
from config import AppConfig, load as load_config
from database import Database, StoreError
from task_service import NoFieldsToUpdate, TaskRepository

logger = logging.getLogger("dayplan.api")


# --- API schemas ---


class TaskCreate(BaseModel):
    """Creation fields, bound to the store unchecked."""
    text: Any = None
    date: Any = None
    createdAt: Any = None
    priority: Any = None


class TaskPatch(BaseModel):
    """Any subset of the editable fields. Presence, not value, decides what is written."""
    text: Any = None
    date: Any = None
    priority: Any = None
    completed: Any = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def get_repository(request: Request) -> TaskRepository:
    return request.app.state.repository


def _allow_all() -> None:
    return None


def create_app(
    config: AppConfig | None = None,
    repository: TaskRepository | None = None,
    oauth_client: GoogleOAuthClient | None = None,
) -> FastAPI:
    config = config or load_config()
    if repository is None:
        repository = TaskRepository(Database(config.database_path).open())

    app = FastAPI(title="Dayplan", version="1.0")
    app.state.repository = repository

    # --- Error envelopes ---

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return _error(400, str(exc))

    @app.exception_handler(NoFieldsToUpdate)
    async def no_fields_handler(request: Request, exc: NoFieldsToUpdate) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return _error(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)

    # --- Middleware ---

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """When config.debug is True, log API request method, path and status."""
        response = await call_next(request)
        if config.debug:
            logger.warning("[API] %s %s -> %s", request.method, request.url.path, response.status_code)
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if config.sessions_enabled:
        app.add_middleware(SessionMiddleware, secret_key=config.session_secret)

    # --- Tasks API ---

    if config.require_login:
        if not config.sessions_enabled:
            logger.warning("REQUIRE_LOGIN is set but SESSION_SECRET is empty; /api/tasks will reject every request")
        guard = require_user
    else:
        guard = _allow_all

    @app.get("/api/tasks", dependencies=[Depends(guard)])
    def api_list_tasks(
        startDate: str | None = None,
        endDate: str | None = None,
        repo: TaskRepository = Depends(get_repository),
    ) -> dict[str, Any]:
        tasks = repo.list(start_date=startDate, end_date=endDate)
        return {"message": "success", "data": [t.to_json() for t in tasks]}

    @app.post("/api/tasks", dependencies=[Depends(guard)])
    def api_create_task(body: TaskCreate | None = None, repo: TaskRepository = Depends(get_repository)) -> dict[str, Any]:
        if body is None:
            body = TaskCreate()
        task = repo.create(body.text, date=body.date, created_at=body.createdAt, priority=body.priority)
        return {"message": "success", "data": task.to_json()}

    @app.patch("/api/tasks/{task_id}", dependencies=[Depends(guard)])
    def api_update_task(task_id: str, body: TaskPatch | None = None, repo: TaskRepository = Depends(get_repository)) -> dict[str, Any]:
        if body is None:
            body = TaskPatch()
        changes = {name: getattr(body, name) for name in body.model_fields_set}
        n = repo.update(task_id, changes)
        return {"message": "success", "changes": n}

    @app.delete("/api/tasks/{task_id}", dependencies=[Depends(guard)])
    def api_delete_task(task_id: str, repo: TaskRepository = Depends(get_repository)) -> dict[str, Any]:
        n = repo.delete(task_id)
        return {"message": "deleted", "changes": n}

    @app.delete("/api/tasks", dependencies=[Depends(guard)])
    def api_clear_completed(completed: bool = False, repo: TaskRepository = Depends(get_repository)) -> dict[str, Any]:
        if not completed:
            raise HTTPException(status_code=400, detail="Only completed=true is supported")
        n = repo.clear_completed()
        return {"message": "deleted", "changes": n}

    @app.get("/health")
    def health() -> dict[str, bool]:
        return {"ok": True}

    # --- Sign-in ---

    if config.oauth_enabled:
        if config.sessions_enabled:
            app.include_router(build_router(oauth_client or GoogleOAuthClient.from_config(config)))
        else:
            logger.warning("Google OAuth is configured but SESSION_SECRET is empty; sign-in routes not mounted")

    # --- Static UI (mounted last so API routes win) ---

    static_dir = Path(config.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")
    else:
        logger.warning("Static directory %s not found; UI not served", static_dir)

    return app


def main() -> None:
    import uvicorn
    config = load_config()
    logger.info("Server running on http://localhost:%s", config.port)
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
