"""Line management service: line metadata and the section chain of each line."""

import uuid
from collections.abc import Callable, Iterable

import structlog
from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from subway.core.config import settings
from subway.core.telemetry import service_span
from subway.domain import BrokenChainError, NoInsertionPointError, SectionError, Sections
from subway.domain import Section as SectionValue
from subway.models.network import Line, Section, Station
from subway.schemas.lines import AddSectionRequest, CreateLineRequest, UpdateLineRequest
from subway.services.station_service import StationService

logger = structlog.get_logger(__name__)

SERVICE_NAME = "line-service"


class LineService:
    """
    Service for managing lines and their section chains.

    Every chain mutation follows the same steps inside one transaction: load all
    sections of the line, wrap them in a Sections aggregate, apply the change in
    memory, then write back only the rows that changed. The line row is locked
    while loading for a mutation so concurrent requests on one line are serialized
    by the database.
    """

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize the line service.

        Args:
            db: Database session
        """
        self.db = db
        self.station_service = StationService(db)

    # ==================== Line metadata ====================

    async def get_line_by_id(self, line_id: uuid.UUID, *, for_update: bool = False) -> Line:
        """
        Get a line with its sections loaded.

        Args:
            line_id: Line UUID
            for_update: Lock the line row until the transaction ends

        Raises:
            HTTPException: 404 if line not found
        """
        query = select(Line).where(Line.id == line_id).options(selectinload(Line.sections))
        if for_update:
            query = query.with_for_update()

        result = await self.db.execute(query)
        if not (line := result.scalar_one_or_none()):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Line {line_id} not found.",
            )
        return line

    async def list_lines(self) -> list[Line]:
        """List all lines with sections loaded, ordered by name."""
        result = await self.db.execute(select(Line).options(selectinload(Line.sections)).order_by(Line.name))
        return list(result.scalars().all())

    async def create_line(self, request: CreateLineRequest) -> Line:
        """
        Create a line and its first section.

        Raises:
            HTTPException: 404 if a terminus station does not exist, 409 if the name is taken
        """
        await self._require_stations(request.up_station_id, request.down_station_id)

        line = Line(id=uuid.uuid4(), name=request.name, color=request.color)
        chain = Sections()
        chain.add(SectionValue(line.id, request.up_station_id, request.down_station_id, request.distance))
        line.sections.extend(Section.from_value(value) for value in chain.sections())

        try:
            self.db.add(line)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"A line named '{request.name}' already exists.",
            ) from None

        logger.info("line_created", line_id=str(line.id), name=line.name)
        return await self.get_line_by_id(line.id)

    async def update_line(self, line_id: uuid.UUID, request: UpdateLineRequest) -> Line:
        """
        Update line name and/or colour.

        Raises:
            HTTPException: 404 if line not found, 409 if the new name is taken
        """
        line = await self.get_line_by_id(line_id)

        if request.name is not None:
            line.name = request.name
        if request.color is not None:
            line.color = request.color

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"A line named '{request.name}' already exists.",
            ) from None

        return await self.get_line_by_id(line_id)

    async def delete_line(self, line_id: uuid.UUID) -> None:
        """
        Delete a line and all of its sections.

        Raises:
            HTTPException: 404 if line not found
        """
        line = await self.get_line_by_id(line_id)
        await self.db.delete(line)
        await self.db.commit()
        logger.info("line_deleted", line_id=str(line_id))

    # ==================== Section chain ====================

    @staticmethod
    def get_chain(line: Line) -> Sections:
        """
        Build the chain aggregate from a line's stored sections.

        Raises:
            BrokenChainError: The stored sections are not a single path
        """
        return Sections(row.to_value() for row in line.sections)

    async def get_ordered_stations(self, lines: Iterable[Line]) -> dict[uuid.UUID, list[Station]]:
        """
        Resolve the head-to-tail station list of several lines with one query.

        Returns:
            Mapping of line id to its stations in travel order
        """
        station_ids_by_line = {line.id: self.get_chain(line).stations() for line in lines}
        stations = await self.station_service.get_stations_by_ids(
            station_id for ids in station_ids_by_line.values() for station_id in ids
        )
        return {
            line_id: [stations[station_id] for station_id in station_ids]
            for line_id, station_ids in station_ids_by_line.items()
        }

    async def add_section(self, line_id: uuid.UUID, request: AddSectionRequest) -> Line:
        """
        Add a section to a line.

        The section either extends one end of the line or is nested inside an
        existing section, which is then split in two.

        Raises:
            HTTPException: 404 if line or a station does not exist,
                400 if the section cannot be placed on the line
        """
        line = await self.get_line_by_id(line_id, for_update=True)
        await self._require_stations(request.up_station_id, request.down_station_id)

        chain = self.get_chain(line)
        if len(chain) >= settings.MAX_SECTIONS_PER_LINE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"A line can have at most {settings.MAX_SECTIONS_PER_LINE} sections.",
            )

        before = chain.sections()
        candidate = SectionValue(line.id, request.up_station_id, request.down_station_id, request.distance)
        with service_span(
            "add_section",
            SERVICE_NAME,
            line_id=str(line_id),
            up_station_id=str(request.up_station_id),
            down_station_id=str(request.down_station_id),
        ) as span:
            self._apply_to_chain(line_id, lambda: chain.add(candidate))
            span.set_attribute("line.section_count", len(chain))

        await self._save_chain(line, before, chain.sections())
        logger.info(
            "section_added",
            line_id=str(line_id),
            up_station_id=str(request.up_station_id),
            down_station_id=str(request.down_station_id),
            distance=request.distance,
            section_count=len(chain),
        )
        return await self.get_line_by_id(line_id)

    async def remove_station(self, line_id: uuid.UUID, station_id: uuid.UUID) -> None:
        """
        Remove a station from a line, merging the two sections around an interior station.

        Raises:
            HTTPException: 404 if line not found,
                400 if the line has a single section or the station is not on it
        """
        line = await self.get_line_by_id(line_id, for_update=True)
        chain = self.get_chain(line)

        before = chain.sections()
        with service_span("remove_station", SERVICE_NAME, line_id=str(line_id), station_id=str(station_id)) as span:
            self._apply_to_chain(line_id, lambda: chain.remove(station_id))
            span.set_attribute("line.section_count", len(chain))

        await self._save_chain(line, before, chain.sections())
        logger.info("station_removed", line_id=str(line_id), station_id=str(station_id), section_count=len(chain))

    @staticmethod
    def _apply_to_chain(line_id: uuid.UUID, operation: Callable[[], None]) -> None:
        """
        Run a chain mutation, turning rejected input into a 400.

        Consistency failures (NoInsertionPointError, BrokenChainError) are not
        the caller's fault and propagate unchanged.
        """
        try:
            operation()
        except (NoInsertionPointError, BrokenChainError):
            logger.exception("section_chain_inconsistent", line_id=str(line_id))
            raise
        except SectionError as e:
            logger.info("section_change_rejected", line_id=str(line_id), reason=type(e).__name__)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(e),
            ) from e

    async def _save_chain(self, line: Line, before: list[SectionValue], after: list[SectionValue]) -> None:
        """
        Persist the difference between two states of a line's chain.

        Old rows are deleted and flushed before new rows are inserted so the
        per-station unique constraints never see both at once.
        """
        removed = set(before) - set(after)
        added = [value for value in after if value not in set(before)]

        rows_by_value = {row.to_value(): row for row in line.sections}
        for value in removed:
            line.sections.remove(rows_by_value[value])
        await self.db.flush()

        line.sections.extend(Section.from_value(value) for value in added)
        await self.db.commit()

    async def _require_stations(self, *station_ids: uuid.UUID) -> None:
        """
        Raises:
            HTTPException: 404 naming the first station that does not exist
        """
        found = await self.station_service.get_stations_by_ids(station_ids)
        for station_id in station_ids:
            if station_id not in found:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Station {station_id} not found.",
                )
