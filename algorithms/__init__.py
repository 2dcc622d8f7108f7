from .math_tools import MathTools
from .e1rm_series import build_e1rm_series
from .load_recommender import LoadRecommender, recommend_loads
from .weight_converter import WeightConverter

__all__ = [
    "MathTools",
    "build_e1rm_series",
    "LoadRecommender",
    "recommend_loads",
    "WeightConverter",
]
