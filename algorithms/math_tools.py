import math


class MathTools:
    """Provides essential mathematical utilities for load calculations."""

    EPL_COEFF: float = 0.0333
    MAX_RPE: float = 10.0
    DEFAULT_RPE_WHEN_ABSENT: float = 10.0

    @classmethod
    def effective_reps(cls, reps: float, rpe: float | None) -> float:
        """Return reps performed plus reps left in reserve."""
        if rpe is None:
            rpe = cls.DEFAULT_RPE_WHEN_ABSENT
        return reps + (cls.MAX_RPE - rpe)

    @classmethod
    def rpe_factor(cls, reps: float, rpe: float | None) -> float:
        return 1 + cls.EPL_COEFF * cls.effective_reps(reps, rpe)

    @classmethod
    def estimate_one_rep_max(
        cls, weight: float, reps: float, rpe: float | None = None
    ) -> float:
        """Return the RPE-adjusted Epley estimate of a one-rep max.

        Every point of reserve (``10 - rpe``) counts as one more rep taken to
        failure. A missing ``rpe`` is treated as a max effort set. Inputs are
        not validated and the result is not rounded.
        """
        return weight * cls.rpe_factor(reps, rpe)

    @classmethod
    def weight_for_target(
        cls, one_rep_max: float, reps: float, rpe: float | None = None
    ) -> float:
        """Invert :meth:`estimate_one_rep_max` for a target rep/RPE pair."""
        return one_rep_max / cls.rpe_factor(reps, rpe)

    @staticmethod
    def round_half_up(value: float, ndigits: int = 0) -> float:
        """Round ties away from negative infinity, like ``Math.round``."""
        scale = 10**ndigits
        return math.floor(value * scale + 0.5) / scale

    @staticmethod
    def round_to_step(value: float, step: float) -> float:
        """Snap ``value`` to the nearest multiple of ``step``, ties upward."""
        if step <= 0:
            return value
        return math.floor(value / step + 0.5) * step
