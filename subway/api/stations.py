"""Stations API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from subway.core.database import get_db
from subway.models.network import Station
from subway.schemas.stations import CreateStationRequest, StationResponse
from subway.services.station_service import StationService

router = APIRouter(prefix="/stations", tags=["stations"])


@router.post("", response_model=StationResponse, status_code=status.HTTP_201_CREATED)
async def create_station(
    request: CreateStationRequest,
    db: AsyncSession = Depends(get_db),
) -> Station:
    """
    Create a station.

    Args:
        request: Station creation request
        db: Database session

    Returns:
        Created station
    """
    return await StationService(db).create_station(request)


@router.get("", response_model=list[StationResponse])
async def list_stations(db: AsyncSession = Depends(get_db)) -> list[Station]:
    """List all stations."""
    return await StationService(db).list_stations()


@router.delete("/{station_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_station(
    station_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Delete a station.

    Args:
        station_id: Station UUID
        db: Database session

    Raises:
        HTTPException: 404 if not found, 409 if a line still uses the station
    """
    await StationService(db).delete_station(station_id)
