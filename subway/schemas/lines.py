"""Pydantic schemas for lines and their sections."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from subway.schemas.stations import StationResponse

# ==================== Helper Functions ====================


def _validate_distinct_stations(up_station_id: UUID, down_station_id: UUID) -> None:
    """
    Validate that a section joins two different stations - reusable helper.

    Raises:
        ValueError: If both ids are the same
    """
    if up_station_id == down_station_id:
        msg = "up_station_id and down_station_id must be different stations"
        raise ValueError(msg)


# ==================== Request Schemas ====================


class CreateLineRequest(BaseModel):
    """Request to create a line together with its first section."""

    name: str = Field(..., min_length=1, max_length=255, description="Line name, unique")
    color: str = Field(..., min_length=1, max_length=50, description="Display colour")
    up_station_id: UUID = Field(..., description="Terminus at the up end of the first section")
    down_station_id: UUID = Field(..., description="Terminus at the down end of the first section")
    distance: int = Field(..., gt=0, description="Distance of the first section")

    @model_validator(mode="after")
    def validate_stations(self) -> "CreateLineRequest":
        """Validate the first section joins two different stations."""
        _validate_distinct_stations(self.up_station_id, self.down_station_id)
        return self


class UpdateLineRequest(BaseModel):
    """Request to update a line's metadata. Sections are changed through the sections endpoints."""

    name: str | None = Field(None, min_length=1, max_length=255)
    color: str | None = Field(None, min_length=1, max_length=50)


class AddSectionRequest(BaseModel):
    """Request to add a section to a line."""

    up_station_id: UUID
    down_station_id: UUID
    distance: int = Field(..., gt=0, description="Distance between the two stations")

    @model_validator(mode="after")
    def validate_stations(self) -> "AddSectionRequest":
        """Validate the section joins two different stations."""
        _validate_distinct_stations(self.up_station_id, self.down_station_id)
        return self


# ==================== Response Schemas ====================


class SectionResponse(BaseModel):
    """Response schema for one stored section."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    up_station_id: UUID
    down_station_id: UUID
    distance: int


class LineResponse(BaseModel):
    """Response schema for a line with its stations in travel order."""

    id: UUID
    name: str
    color: str
    stations: list[StationResponse] = Field(..., description="Stations from the up terminus to the down terminus")
