import os
import sys
import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import (
    AsyncLogRepository,
    LogRepository,
    ProgramRepository,
    WorkoutRepository,
    WorkoutRowRepository,
)
from stats_service import StatisticsService


def _seed(db_file: str) -> None:
    pid = ProgramRepository(db_file).create("Program")
    wid = WorkoutRepository(db_file).create(pid, "Day", 1)
    rows = WorkoutRowRepository(db_file)
    anchor = rows.add(wid, "1a", "Deadlift", "1", "3", is_anchor=True, movement_family="Deadlift")
    backoff = rows.add(wid, "1b", "Deficit Deadlift", "3", "5", movement_family="Deadlift")
    logs = LogRepository(db_file)
    logs.add("u1", anchor, 405, 3, 7, date="2024-02-01T09:00:00Z")
    logs.add("u1", anchor, 415, 3, 7.5, date="2024-02-08T09:00:00Z")
    logs.add("u1", backoff, 315, 5, 6, date="2024-02-08T09:30:00Z")


@pytest.mark.asyncio
async def test_async_log_repository_matches_sync(tmp_path):
    db_file = str(tmp_path / "logs.db")
    _seed(db_file)
    sync_repo = LogRepository(db_file)
    async_repo = AsyncLogRepository(db_file)

    rows = await async_repo.fetch_history("u1", "Deadlift")
    assert [tuple(r) for r in rows] == sync_repo.fetch_history("u1", "Deadlift")

    anchors = await async_repo.fetch_history("u1", "Deadlift", True)
    assert [r[0] for r in anchors] == [415.0, 405.0]

    last = await async_repo.last_anchor("u1", "Deadlift")
    assert last == sync_repo.last_anchor("u1", "Deadlift")
    assert last[0] == 415.0

    assert await async_repo.last_anchor("u1", "Bench") is None


@pytest.mark.asyncio
async def test_async_statistics_paths(tmp_path):
    db_file = str(tmp_path / "stats.db")
    _seed(db_file)
    service = StatisticsService(
        LogRepository(db_file), async_log_repo=AsyncLogRepository(db_file)
    )
    series = await service.e1rm_series_async("u1", "Deadlift", True)
    assert series == service.e1rm_series("u1", "Deadlift", True)
    assert [p["weight"] for p in series] == [405.0, 415.0]

    rec = await service.suggestions_async("u1", "Deadlift", 3, 8)
    assert rec == service.suggestions("u1", "Deadlift", 3, 8)
    assert rec["basedOn"]["weight"] == 415.0
