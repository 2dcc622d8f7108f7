from __future__ import annotations
import logging
from typing import Dict, List, Optional

from algorithms import LoadRecommender, build_e1rm_series
from db import AsyncLogRepository, LogRepository, SettingsRepository
from models import LoggedSet, MovementFamily, Target

logger = logging.getLogger(__name__)


class StatisticsService:
    """Feed stored history into the strength estimation engine."""

    def __init__(
        self,
        log_repo: LogRepository,
        settings_repo: SettingsRepository | None = None,
        async_log_repo: AsyncLogRepository | None = None,
    ) -> None:
        self.logs = log_repo
        self.settings = settings_repo
        self.async_logs = async_log_repo

    def _load_increment(self) -> float:
        if self.settings is not None:
            return self.settings.get_float(
                "load_increment", LoadRecommender.DEFAULT_LOAD_INCREMENT
            )
        return LoadRecommender.DEFAULT_LOAD_INCREMENT

    @staticmethod
    def _series(rows: list, family: MovementFamily) -> List[Dict]:
        sets = [LoggedSet.from_row(r) for r in rows]
        points = build_e1rm_series(sets)
        logger.debug("Built %d e1RM points for %s", len(points), family.value)
        return [p.to_dict() for p in points]

    def _recommend(
        self, row: Optional[tuple], target_reps, target_rpe
    ) -> Dict:
        last = LoggedSet.from_row(row) if row is not None else None
        target = Target.parse(target_reps, target_rpe)
        if target is None and (target_reps is not None or target_rpe is not None):
            logger.info(
                "Ignoring malformed target reps=%r rpe=%r", target_reps, target_rpe
            )
        recommender = LoadRecommender(self._load_increment())
        return recommender.recommend_loads(last, target).to_dict()

    def e1rm_series(
        self,
        user_id: str,
        movement_family: str,
        is_anchor: Optional[bool] = None,
    ) -> List[Dict]:
        """Return the e1RM history for ``movement_family``, earliest first."""
        family = MovementFamily.parse(movement_family)
        rows = self.logs.fetch_history(user_id, family.value, is_anchor)
        return self._series(rows, family)

    def suggestions(
        self,
        user_id: str,
        movement_family: str,
        target_reps=None,
        target_rpe=None,
    ) -> Dict:
        """Return load suggestions derived from the latest anchor set."""
        family = MovementFamily.parse(movement_family)
        row = self.logs.last_anchor(user_id, family.value)
        if row is None:
            logger.info("No anchor history for %s", family.value)
        return self._recommend(row, target_reps, target_rpe)

    async def e1rm_series_async(
        self,
        user_id: str,
        movement_family: str,
        is_anchor: Optional[bool] = None,
    ) -> List[Dict]:
        if self.async_logs is None:
            return self.e1rm_series(user_id, movement_family, is_anchor)
        family = MovementFamily.parse(movement_family)
        rows = await self.async_logs.fetch_history(user_id, family.value, is_anchor)
        return self._series(rows, family)

    async def suggestions_async(
        self,
        user_id: str,
        movement_family: str,
        target_reps=None,
        target_rpe=None,
    ) -> Dict:
        if self.async_logs is None:
            return self.suggestions(user_id, movement_family, target_reps, target_rpe)
        family = MovementFamily.parse(movement_family)
        row = await self.async_logs.last_anchor(user_id, family.value)
        return self._recommend(row, target_reps, target_rpe)
