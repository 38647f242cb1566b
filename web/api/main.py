"""FastAPI TeamHub API - teams, join requests, events and registrations."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from teamhub.errors import Conflict, InvalidArgument, NotFound, StorageError, TeamHubError
from teamhub.models.base import async_session_factory, init_db
from teamhub.services.join_requests import recover_interrupted_approvals

from web.api.auth_routes import router as auth_router
from web.api.event_routes import router as event_router
from web.api.manager_routes import router as manager_router
from web.api.team_routes import router as team_router

logger = logging.getLogger("teamhub.api")

_STATUS_CODES = (
    (NotFound, 404),
    (Conflict, 409),
    (InvalidArgument, 400),
    (StorageError, 503),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    await init_db()
    async with async_session_factory() as session:
        await recover_interrupted_approvals(session)
    yield


app = FastAPI(title="TeamHub API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(auth_router)
app.include_router(team_router)
app.include_router(event_router)
app.include_router(manager_router)


@app.exception_handler(TeamHubError)
async def teamhub_error_handler(request: Request, exc: TeamHubError):
    """Map the service error taxonomy to HTTP responses."""
    status_code = next((code for cls, code in _STATUS_CODES if isinstance(exc, cls)), 500)
    if isinstance(exc, InvalidArgument):
        logger.warning("%s %s: %s", request.method, request.url.path, exc)
        if config.DEBUG:
            raise exc
    elif status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "error": exc.code})


@app.get("/api/health")
async def health():
    return {"status": "ok"}
