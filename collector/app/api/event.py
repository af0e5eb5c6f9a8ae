"""First-party event ingestion endpoint."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from collector.app.middleware.request_id import get_request_id
from collector.app.services.ingestion import EventIngestionService

router = APIRouter(prefix="/api", tags=["events"])


def get_ingestion_service(request: Request) -> EventIngestionService:
    """Return the ingestion service created by the application factory."""
    return request.app.state.ingestion


@router.post("/event")
async def ingest_event(request: Request) -> JSONResponse:
    """Accept one client interaction event.

    The raw body is handed over as a coroutine function so the service
    can skip reading it for rate limited clients.
    """
    service = get_ingestion_service(request)
    result = await service.ingest(
        request.headers,
        request.body,
        request_id=get_request_id(request),
    )
    return JSONResponse(status_code=result.status_code, content=result.to_response())
