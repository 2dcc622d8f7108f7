import datetime
from typing import Iterable, List

from models import E1RMPoint, LoggedSet
from .math_tools import MathTools

_EPOCH_START = datetime.datetime.min.replace(tzinfo=datetime.timezone.utc)


def _sort_key(logged: LoggedSet) -> datetime.datetime:
    ts = logged.performed_at
    if ts is None:
        return _EPOCH_START
    if ts.tzinfo is None:
        return ts.replace(tzinfo=datetime.timezone.utc)
    return ts


def build_e1rm_series(sets: Iterable[LoggedSet]) -> List[E1RMPoint]:
    """Return one e1RM point per logged set, earliest first.

    ``sets`` must already be filtered by movement family and anchor flag.
    Sets sharing a timestamp keep their input order; undated sets sort first.
    """
    ordered = sorted(sets, key=_sort_key)
    series: List[E1RMPoint] = []
    for logged in ordered:
        est = MathTools.estimate_one_rep_max(logged.weight, logged.reps, logged.rpe)
        series.append(
            E1RMPoint(
                date=logged.date,
                e1rm=int(MathTools.round_half_up(est)),
                weight=logged.weight,
                reps=logged.reps,
                rpe=logged.rpe,
            )
        )
    return series
