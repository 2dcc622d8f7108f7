from typing import Optional

from models import LoggedSet, Recommendation, Target
from .math_tools import MathTools


class LoadRecommender:
    """Propose training loads from the most recent anchor set."""

    STANDARD_TARGETS = {
        "suggestion_1x3": (3, 6.0),
        "suggestion_1x5": (5, 6.0),
    }
    DEFAULT_LOAD_INCREMENT: float = 5.0

    def __init__(self, load_increment: float = DEFAULT_LOAD_INCREMENT) -> None:
        if load_increment <= 0:
            raise ValueError("load_increment must be positive")
        self.load_increment = load_increment

    def recommend_loads(
        self,
        last_anchor: Optional[LoggedSet],
        target: Optional[Target] = None,
    ) -> Recommendation:
        """Return suggested loads for the standard targets and ``target``.

        Without an anchor set every field is ``None``. The standard 1x3 and
        1x5 suggestions are rounded to 0.1, the caller target is snapped to
        the load increment. A target whose inverted factor is not positive is
        treated like a malformed one and leaves its fields empty.
        """
        if last_anchor is None:
            return Recommendation()

        e1rm = MathTools.estimate_one_rep_max(
            last_anchor.weight, last_anchor.reps, last_anchor.rpe
        )
        fixed = {
            field: MathTools.round_half_up(
                MathTools.weight_for_target(e1rm, reps, rpe), 1
            )
            for field, (reps, rpe) in self.STANDARD_TARGETS.items()
        }

        recommended_raw = None
        recommended_weight = None
        e1rm_used = None
        if target is not None and MathTools.rpe_factor(target.reps, target.rpe) > 0:
            recommended_raw = MathTools.weight_for_target(e1rm, target.reps, target.rpe)
            recommended_weight = MathTools.round_to_step(
                recommended_raw, self.load_increment
            )
            e1rm_used = MathTools.round_half_up(e1rm, 1)

        return Recommendation(
            suggestion_1x3=fixed["suggestion_1x3"],
            suggestion_1x5=fixed["suggestion_1x5"],
            recommended_weight=recommended_weight,
            recommended_raw=recommended_raw,
            e1rm_used=e1rm_used,
            based_on={
                "date": last_anchor.date,
                "weight": last_anchor.weight,
                "reps": last_anchor.reps,
                "rpe": last_anchor.rpe,
            },
        )


def recommend_loads(
    last_anchor: Optional[LoggedSet],
    target: Optional[Target] = None,
    load_increment: float = LoadRecommender.DEFAULT_LOAD_INCREMENT,
) -> Recommendation:
    return LoadRecommender(load_increment).recommend_loads(last_anchor, target)
