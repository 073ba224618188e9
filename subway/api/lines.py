"""Lines API endpoints, including the sections of each line."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from subway.core.database import get_db
from subway.models.network import Line, Section
from subway.schemas.lines import (
    AddSectionRequest,
    CreateLineRequest,
    LineResponse,
    SectionResponse,
    UpdateLineRequest,
)
from subway.schemas.stations import StationResponse
from subway.services.line_service import LineService

router = APIRouter(prefix="/lines", tags=["lines"])


async def _build_line_responses(service: LineService, lines: list[Line]) -> list[LineResponse]:
    """Attach ordered stations to each line."""
    stations_by_line = await service.get_ordered_stations(lines)
    return [
        LineResponse(
            id=line.id,
            name=line.name,
            color=line.color,
            stations=[StationResponse.model_validate(station) for station in stations_by_line[line.id]],
        )
        for line in lines
    ]


# ==================== Line Endpoints ====================


@router.post("", response_model=LineResponse, status_code=status.HTTP_201_CREATED)
async def create_line(
    request: CreateLineRequest,
    db: AsyncSession = Depends(get_db),
) -> LineResponse:
    """
    Create a line with its first section.

    Args:
        request: Line name, colour and first section
        db: Database session

    Returns:
        Created line with its two terminus stations

    Raises:
        HTTPException: 404 if a station does not exist, 409 if the name is taken
    """
    service = LineService(db)
    line = await service.create_line(request)
    [response] = await _build_line_responses(service, [line])
    return response


@router.get("", response_model=list[LineResponse])
async def list_lines(db: AsyncSession = Depends(get_db)) -> list[LineResponse]:
    """List all lines with their stations in travel order."""
    service = LineService(db)
    return await _build_line_responses(service, await service.list_lines())


@router.get("/{line_id}", response_model=LineResponse)
async def get_line(
    line_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> LineResponse:
    """
    Get one line with its stations in travel order.

    Raises:
        HTTPException: 404 if line not found
    """
    service = LineService(db)
    [response] = await _build_line_responses(service, [await service.get_line_by_id(line_id)])
    return response


@router.patch("/{line_id}", response_model=LineResponse)
async def update_line(
    line_id: UUID,
    request: UpdateLineRequest,
    db: AsyncSession = Depends(get_db),
) -> LineResponse:
    """
    Update line name and/or colour.

    Raises:
        HTTPException: 404 if line not found, 409 if the new name is taken
    """
    service = LineService(db)
    [response] = await _build_line_responses(service, [await service.update_line(line_id, request)])
    return response


@router.delete("/{line_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_line(
    line_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Delete a line and its sections.

    Raises:
        HTTPException: 404 if line not found
    """
    await LineService(db).delete_line(line_id)


# ==================== Section Endpoints ====================


@router.post("/{line_id}/sections", response_model=LineResponse, status_code=status.HTTP_201_CREATED)
async def add_section(
    line_id: UUID,
    request: AddSectionRequest,
    db: AsyncSession = Depends(get_db),
) -> LineResponse:
    """
    Add a section to a line.

    A section sharing a terminus extends the line. A section sharing the start or
    end of an existing section splits that section in two.

    Args:
        line_id: Line UUID
        request: Up station, down station and distance
        db: Database session

    Returns:
        The line with its updated station order

    Raises:
        HTTPException: 404 if line or station not found, 400 if the section cannot be placed
    """
    service = LineService(db)
    [response] = await _build_line_responses(service, [await service.add_section(line_id, request)])
    return response


@router.get("/{line_id}/sections", response_model=list[SectionResponse])
async def list_sections(
    line_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> list[Section]:
    """List the stored sections of a line, in no particular order."""
    line = await LineService(db).get_line_by_id(line_id)
    return list(line.sections)


@router.delete("/{line_id}/sections", status_code=status.HTTP_204_NO_CONTENT)
async def remove_station(
    line_id: UUID,
    station_id: UUID = Query(..., description="Station to take off the line"),
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Remove a station from a line.

    Removing a terminus drops its section. Removing an interior station merges
    the two sections around it into one.

    Raises:
        HTTPException: 404 if line not found,
            400 if the line has only one section or the station is not on it
    """
    await LineService(db).remove_station(line_id, station_id)
