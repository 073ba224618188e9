"""Station management service."""

import uuid
from collections.abc import Iterable

import structlog
from fastapi import HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from subway.models.network import Section, Station
from subway.schemas.stations import CreateStationRequest

logger = structlog.get_logger(__name__)


class StationService:
    """Service for managing stations."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize the station service.

        Args:
            db: Database session
        """
        self.db = db

    async def get_station_by_id(self, station_id: uuid.UUID) -> Station:
        """
        Get a station by ID.

        Raises:
            HTTPException: 404 if station not found
        """
        if not (station := await self.db.get(Station, station_id)):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Station {station_id} not found.",
            )
        return station

    async def get_stations_by_ids(self, station_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, Station]:
        """
        Load several stations at once.

        Args:
            station_ids: Station UUIDs

        Returns:
            Mapping of id to station for every id found
        """
        ids = set(station_ids)
        if not ids:
            return {}
        result = await self.db.execute(select(Station).where(Station.id.in_(ids)))
        return {station.id: station for station in result.scalars().all()}

    async def list_stations(self) -> list[Station]:
        """List all stations by name."""
        result = await self.db.execute(select(Station).order_by(Station.name))
        return list(result.scalars().all())

    async def create_station(self, request: CreateStationRequest) -> Station:
        """Create a station."""
        station = Station(name=request.name)
        self.db.add(station)
        await self.db.commit()
        await self.db.refresh(station)

        logger.info("station_created", station_id=str(station.id), name=station.name)
        return station

    async def delete_station(self, station_id: uuid.UUID) -> None:
        """
        Delete a station that no line uses.

        Raises:
            HTTPException: 404 if station not found, 409 if a section still references it
        """
        station = await self.get_station_by_id(station_id)

        result = await self.db.execute(
            select(Section.line_id)
            .where(or_(Section.up_station_id == station_id, Section.down_station_id == station_id))
            .limit(1)
        )
        if (line_id := result.scalar_one_or_none()) is not None:
            logger.warning("station_delete_rejected", station_id=str(station_id), line_id=str(line_id))
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Station is still part of a line. Remove it from the line first.",
            )

        await self.db.delete(station)
        await self.db.commit()
        logger.info("station_deleted", station_id=str(station_id))
