"""HTTP route definitions for the service."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from app.schemas import (
    AccidentRecord,
    CarPosition,
    HealthResponse,
    IngestResponse,
    MapPoint,
    SensorRecord,
    Stats,
)
from models.records import RecordKind
from services.auth import resolve_credential
from services.errors import AuthError, NotFoundError, PersistenceError, ValidationError
from services.ingestion import IngestionService, build_default_ingestion
from services.queries import QueryService, build_default_query

router = APIRouter(prefix="/api")


def get_ingestion() -> IngestionService:
    return build_default_ingestion()


def get_queries() -> QueryService:
    return build_default_query()


def get_credential(
    x_api_key: Optional[str] = Header(default=None),
    api_key: Optional[str] = Query(default=None),
) -> Optional[str]:
    return resolve_credential(x_api_key, api_key)


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        return None


def _ingest(
    service: IngestionService,
    payload: Any,
    kind: RecordKind,
    credential: Optional[str],
) -> IngestResponse:
    try:
        record_id = service.ingest(payload, kind, credential)
    except AuthError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {kind.value} data: {exc.reason}",
        ) from exc
    except PersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database error: {exc}",
        ) from exc
    return IngestResponse(id=record_id)


@router.get("/health", response_model=HealthResponse, summary="Health check endpoint.")
async def healthcheck() -> HealthResponse:
    return HealthResponse(time=datetime.now(timezone.utc))


@router.get("/stats", response_model=Stats, summary="Accident and sensor statistics.")
async def get_stats(queries: QueryService = Depends(get_queries)) -> Stats:
    return queries.get_stats()


@router.get("/sensor", response_model=SensorRecord, summary="Most recent sensor reading.")
async def get_latest_sensor(queries: QueryService = Depends(get_queries)) -> SensorRecord:
    return queries.get_latest_sensor()


@router.get("/map", response_model=list[MapPoint], summary="Accident locations.")
async def get_map_points(queries: QueryService = Depends(get_queries)) -> list[MapPoint]:
    return queries.get_map_points()


@router.get(
    "/accidents",
    response_model=list[AccidentRecord],
    summary="All accident events, newest first.",
)
async def get_accidents(queries: QueryService = Depends(get_queries)) -> list[AccidentRecord]:
    return queries.get_accidents()


@router.get("/car/position", response_model=CarPosition, summary="Last known car position.")
async def get_car_position(queries: QueryService = Depends(get_queries)) -> CarPosition:
    return queries.get_car_position()


@router.get(
    "/sensor/history",
    response_model=list[SensorRecord],
    summary="Sensor readings ordered by timestamp, newest first.",
)
async def get_sensor_history(
    limit: int = Query(default=1000, ge=1, le=1000),
    queries: QueryService = Depends(get_queries),
) -> list[SensorRecord]:
    try:
        return queries.get_sensor_history(limit)
    except PersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database error: {exc}",
        ) from exc


@router.get(
    "/accident/{accident_id}",
    response_model=AccidentRecord,
    summary="Fetch a single accident event.",
)
async def get_accident(
    accident_id: str,
    queries: QueryService = Depends(get_queries),
) -> AccidentRecord:
    try:
        return queries.get_accident_by_id(accident_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except PersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database error: {exc}",
        ) from exc


@router.post("/sensor", response_model=IngestResponse, summary="Ingest a sensor reading.")
async def post_sensor(
    request: Request,
    credential: Optional[str] = Depends(get_credential),
    ingestion: IngestionService = Depends(get_ingestion),
) -> IngestResponse:
    payload = await _read_json(request)
    return _ingest(ingestion, payload, RecordKind.sensor, credential)


@router.post(
    "/sensor/http",
    response_model=IngestResponse,
    summary="Plain-HTTP sensor ingestion for constrained devices.",
)
async def post_sensor_http(
    request: Request,
    credential: Optional[str] = Depends(get_credential),
    ingestion: IngestionService = Depends(get_ingestion),
) -> IngestResponse:
    payload = await _read_json(request)
    return _ingest(ingestion, payload, RecordKind.sensor, credential)


@router.post("/accident", response_model=IngestResponse, summary="Ingest an accident event.")
async def post_accident(
    request: Request,
    credential: Optional[str] = Depends(get_credential),
    ingestion: IngestionService = Depends(get_ingestion),
) -> IngestResponse:
    payload = await _read_json(request)
    return _ingest(ingestion, payload, RecordKind.accident, credential)
