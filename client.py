import requests
from typing import Optional


class StatsClient:
    """Simple REST client for the strength statistics endpoints."""

    def __init__(
        self,
        user_id: str,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_id = user_id
        self.timeout = timeout

    def _get(self, path: str, params: dict):
        resp = requests.get(
            f"{self.base_url}{path}",
            params={k: v for k, v in params.items() if v is not None},
            headers={"X-User-Id": self.user_id},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def e1rm_series(self, movement_family: str, is_anchor: Optional[bool] = None) -> list:
        anchor = None if is_anchor is None else str(is_anchor).lower()
        return self._get(
            "/stats/e1rm",
            {"movementFamily": movement_family, "isAnchor": anchor},
        )

    def suggestions(
        self,
        movement_family: str,
        target_reps: Optional[int] = None,
        target_rpe: Optional[float] = None,
    ) -> dict:
        return self._get(
            "/stats/suggestions",
            {
                "movementFamily": movement_family,
                "targetReps": target_reps,
                "targetRpe": target_rpe,
            },
        )
