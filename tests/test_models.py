"""Tests for database models."""

import uuid

import pytest
from sqlalchemy import delete, func, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from subway.domain import Section as SectionValue
from subway.models import Line, Section, Station

from tests.helpers.network import NetworkBuilder


class TestNetworkModels:
    """Test cases for Station, Line and Section."""

    @pytest.mark.asyncio
    async def test_create_station(self, db_session: AsyncSession) -> None:
        station = Station(name="Jamsil")
        db_session.add(station)
        await db_session.commit()

        assert isinstance(station.id, uuid.UUID)
        assert station.created_at is not None
        assert station.updated_at is not None

    @pytest.mark.asyncio
    async def test_duplicate_line_name_raises_error(self, db_session: AsyncSession) -> None:
        db_session.add(Line(name="green", color="bg-green-600"))
        await db_session.commit()

        db_session.add(Line(name="green", color="bg-red-600"))
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "triples",
        [
            [("A", "B", 1), ("A", "C", 1)],  # two sections leave A
            [("A", "C", 1), ("B", "C", 1)],  # two sections enter C
        ],
    )
    async def test_station_in_one_section_per_direction(
        self, network: NetworkBuilder, stations: dict[str, Station], triples: list[tuple[str, str, int]]
    ) -> None:
        with pytest.raises(IntegrityError):
            await network.line("forked", triples, stations)
        await network.db.rollback()

    @pytest.mark.asyncio
    async def test_distance_must_be_positive(self, network: NetworkBuilder, stations: dict[str, Station]) -> None:
        with pytest.raises(IntegrityError):
            await network.line("flat", [("A", "B", 0)], stations)
        await network.db.rollback()

    @pytest.mark.asyncio
    async def test_to_value(self, line_a_c: Line, stations: dict[str, Station]) -> None:
        [row] = line_a_c.sections

        assert row.to_value() == SectionValue(line_a_c.id, stations["A"].id, stations["C"].id, 10)

    def test_from_value(self) -> None:
        line_id, up, down = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()

        row = Section.from_value(SectionValue(line_id, up, down, 7))

        assert (row.line_id, row.up_station_id, row.down_station_id, row.distance) == (line_id, up, down, 7)
        assert row.to_value() == SectionValue(line_id, up, down, 7)

    @pytest.mark.asyncio
    async def test_orphaned_section_deleted(self, db_session: AsyncSession, line_a_c: Line) -> None:
        [row] = line_a_c.sections
        row_id = row.id

        line_a_c.sections.remove(row)
        await db_session.commit()

        assert await db_session.get(Section, row_id) is None

    def test_constraint_names_match_migration(self) -> None:
        names = {c.name for c in Section.__table__.constraints}

        assert {
            "pk_sections",
            "fk_sections_line_id_lines",
            "uq_section_line_up_station",
            "ck_sections_distance_positive",
            "ck_sections_distinct_stations",
        } <= names
        assert {c.name for c in Line.__table__.constraints} >= {"pk_lines", "uq_lines_name"}


class TestForeignKeys:
    """Database-level referential actions on sections."""

    @pytest.mark.asyncio
    async def test_session_matches_application_options(self, db_session: AsyncSession) -> None:
        assert db_session.autoflush is False
        assert (await db_session.execute(text("PRAGMA foreign_keys"))).scalar() == 1

    @pytest.mark.asyncio
    async def test_station_in_use_cannot_be_deleted(
        self, db_session: AsyncSession, line_a_c: Line, stations: dict[str, Station]
    ) -> None:
        with pytest.raises(IntegrityError):
            await db_session.execute(delete(Station).where(Station.id == stations["A"].id))
        await db_session.rollback()

    @pytest.mark.asyncio
    async def test_section_needs_existing_station(self, db_session: AsyncSession, line_a_c: Line) -> None:
        db_session.add(
            Section(line_id=line_a_c.id, up_station_id=uuid.uuid4(), down_station_id=uuid.uuid4(), distance=3)
        )
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()

    @pytest.mark.asyncio
    async def test_deleting_line_row_cascades_to_sections(self, db_session: AsyncSession, line_a_c: Line) -> None:
        line_id = line_a_c.id

        await db_session.execute(delete(Line).where(Line.id == line_id))
        await db_session.commit()

        remaining = await db_session.execute(
            select(func.count()).select_from(Section).where(Section.line_id == line_id)
        )
        assert remaining.scalar() == 0
