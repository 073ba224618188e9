"""Subway network models: stations, lines and the sections joining them."""

import uuid

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from subway.domain import Section as SectionValue
from subway.models.base import BaseModel


class Station(BaseModel):
    """A station. Lines reference it only through their sections."""

    __tablename__ = "stations"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        """String representation of the station."""
        return f"<Station(id={self.id}, name={self.name})>"


class Line(BaseModel):
    """A subway line. Its route is the chain formed by its sections."""

    __tablename__ = "lines"

    name: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    color: Mapped[str] = mapped_column(
        String(50),  # CSS colour, e.g. "bg-green-600" or "#00a84d"
        nullable=False,
    )

    # Relationships
    sections: Mapped[list["Section"]] = relationship(
        back_populates="line",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        """String representation of the line."""
        return f"<Line(id={self.id}, name={self.name})>"


class Section(BaseModel):
    """Stored form of one section of a line's chain (up station -> down station)."""

    __tablename__ = "sections"

    line_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("lines.id", ondelete="CASCADE"),
        nullable=False,
    )
    up_station_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("stations.id", ondelete="RESTRICT"),
        nullable=False,
    )
    down_station_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("stations.id", ondelete="RESTRICT"),
        nullable=False,
    )
    distance: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    # Relationships
    line: Mapped[Line] = relationship(back_populates="sections")

    # A station leaves and enters at most one section per line
    __table_args__ = (
        UniqueConstraint("line_id", "up_station_id", name="uq_section_line_up_station"),
        UniqueConstraint("line_id", "down_station_id", name="uq_section_line_down_station"),
        CheckConstraint("distance > 0", name="distance_positive"),
        CheckConstraint("up_station_id <> down_station_id", name="distinct_stations"),
        Index("ix_sections_line", "line_id"),
        Index("ix_sections_up_station", "up_station_id"),
        Index("ix_sections_down_station", "down_station_id"),
    )

    def to_value(self) -> SectionValue:
        """Domain value for this row."""
        return SectionValue(
            line=self.line_id,
            up_station=self.up_station_id,
            down_station=self.down_station_id,
            distance=self.distance,
        )

    @classmethod
    def from_value(cls, value: SectionValue) -> "Section":
        """New row for a domain value produced by a chain operation."""
        return cls(
            line_id=value.line,
            up_station_id=value.up_station,
            down_station_id=value.down_station,
            distance=value.distance,
        )

    def __repr__(self) -> str:
        """String representation of the section."""
        return (
            f"<Section(id={self.id}, line={self.line_id}, "
            f"{self.up_station_id}->{self.down_station_id}, distance={self.distance})>"
        )
