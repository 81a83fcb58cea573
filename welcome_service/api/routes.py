"""GET /welcome and GET /health endpoints.

`/welcome` greets the client with the name of the first stored user.
`/health` reports the connection supervisor's state without touching the
store, so it answers even while the database is unreachable.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from welcome_service.infrastructure.repository import UserRepository
from welcome_service.infrastructure.supervisor import ConnectionSupervisor
from welcome_service.utils.logging import get_logger

log = get_logger(__name__)

router = APIRouter()


def get_repository(request: Request) -> UserRepository:
    return request.app.state.repository


def get_supervisor(request: Request) -> ConnectionSupervisor:
    return request.app.state.supervisor


@router.get(
    "/welcome",
    response_class=PlainTextResponse,
    summary="Greeting with the stored user's name",
    responses={
        404: {"description": "No user record exists yet"},
        503: {"description": "The database connection is not established"},
    },
)
async def welcome(repository: UserRepository = Depends(get_repository)) -> str:
    log.info("Client request received")
    user = await repository.first()
    log.info("Responding with record for %s", user.name)
    return f"Hello Client! There is one record in the database for {user.name}"


@router.get("/health", tags=["meta"], summary="Health check")
async def health(supervisor: ConnectionSupervisor = Depends(get_supervisor)) -> dict:
    """Return 200 with the database connection state; `degraded` until connected."""
    return {
        "status": "ok" if supervisor.is_connected else "degraded",
        "database": supervisor.state.value,
    }
