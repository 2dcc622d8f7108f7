class WeightConverter:
    """Convert loads between kilograms and pounds."""

    KG_TO_LB = 2.20462
    UNITS = ("kg", "lb")

    @staticmethod
    def kg_to_lb(kg: float) -> float:
        return round(kg * WeightConverter.KG_TO_LB, 2)

    @staticmethod
    def lb_to_kg(lb: float) -> float:
        return round(lb / WeightConverter.KG_TO_LB, 2)

    @classmethod
    def other_unit(cls, unit: str) -> str:
        if unit not in cls.UNITS:
            raise ValueError("unit must be 'kg' or 'lb'")
        return "lb" if unit == "kg" else "kg"

    @classmethod
    def convert(cls, weight: float, unit: str) -> float:
        """Convert ``weight`` given in ``unit`` to the other unit."""
        if cls.other_unit(unit) == "lb":
            return cls.kg_to_lb(weight)
        return cls.lb_to_kg(weight)
