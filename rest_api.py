import logging
import os
import time
from typing import Optional
from fastapi import (
    FastAPI,
    HTTPException,
    Response,
    Request,
    Header,
    Depends,
)
from db import (
    ProgramRepository,
    WorkoutRepository,
    WorkoutRowRepository,
    LogRepository,
    AsyncLogRepository,
    SettingsRepository,
)
from config import APP_VERSION
from stats_service import StatisticsService

logger = logging.getLogger(__name__)


class RateLimiter:
    """Simple in-memory rate limiter."""

    def __init__(self, limit: int = 60, window: int = 60) -> None:
        self.limit = limit
        self.window = window
        self.requests: dict[str, list[float]] = {}

    def _prune(self, now: float) -> None:
        for ip in list(self.requests):
            recent = [t for t in self.requests[ip] if now - t < self.window]
            if recent:
                self.requests[ip] = recent
            else:
                self.requests.pop(ip)

    async def __call__(self, request: Request, call_next):
        ip = request.client.host if request.client else "anon"
        now = time.time()
        self._prune(now)
        history = self.requests.get(ip, [])
        if len(history) >= self.limit:
            logger.warning("Rate limit exceeded for %s", ip)
            return Response("rate limit exceeded", status_code=429)
        history.append(now)
        self.requests[ip] = history
        return await call_next(request)


def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id")
) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header required")
    return x_user_id


def _parse_anchor_flag(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    return value == "true"


class StrengthAPI:
    """Provides REST endpoints for strength estimates and load suggestions."""

    def __init__(
        self,
        db_path: str = "workout.db",
        yaml_path: str = "settings.yaml",
        *,
        rate_limit: int | None = None,
        rate_window: int = 60,
    ) -> None:
        self.db_path = db_path
        self.settings = SettingsRepository(db_path, yaml_path)
        self.programs = ProgramRepository(db_path)
        self.workouts = WorkoutRepository(db_path)
        self.workout_rows = WorkoutRowRepository(db_path)
        self.logs = LogRepository(db_path)
        self.async_logs = AsyncLogRepository(db_path)
        self.statistics = StatisticsService(
            self.logs,
            self.settings,
            async_log_repo=self.async_logs,
        )
        self.app = FastAPI(
            title="Strength API",
            description="e1RM history and load suggestions for anchor lifts",
            version=APP_VERSION,
        )
        if rate_limit is not None:
            limiter = RateLimiter(limit=rate_limit, window=rate_window)
            self.app.middleware("http")(limiter)
        self._setup_routes()

    def _setup_routes(self) -> None:
        @self.app.get(
            "/health",
            summary="Health check",
            description="Verify API and database connectivity.",
        )
        def health():
            """Return API and database connection status."""
            try:
                self.programs.fetch_all_programs()
                return {"status": "ok"}
            except Exception as e:  # pragma: no cover - connectivity failure
                logger.error("Health check failed: %s", e)
                raise HTTPException(status_code=500, detail=str(e))

        @self.app.get("/stats/e1rm", tags=["Stats"])
        async def stats_e1rm(
            movementFamily: str = None,
            isAnchor: str = None,
            user_id: str = Depends(get_current_user_id),
        ):
            if not movementFamily:
                raise HTTPException(status_code=400, detail="Movement family required")
            try:
                return await self.statistics.e1rm_series_async(
                    user_id,
                    movementFamily,
                    _parse_anchor_flag(isAnchor),
                )
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.get("/stats/suggestions", tags=["Stats"])
        async def stats_suggestions(
            movementFamily: str = None,
            targetReps: str = None,
            targetRpe: str = None,
            user_id: str = Depends(get_current_user_id),
        ):
            if not movementFamily:
                raise HTTPException(status_code=400, detail="Movement family required")
            try:
                return await self.statistics.suggestions_async(
                    user_id,
                    movementFamily,
                    targetReps,
                    targetRpe,
                )
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))


def create_app() -> FastAPI:
    api = StrengthAPI(
        db_path=os.environ.get("DB_PATH", "workout.db"),
        yaml_path=os.environ.get("SETTINGS_PATH", "settings.yaml"),
    )
    return api.app


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(create_app())
