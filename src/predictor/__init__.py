"""Factor evaluation and weighted scoring of katabatic predictions."""

from src.predictor.analyzer import KatabaticAnalyzer
from src.predictor.factors import (
    FactorEvaluator,
    FactorRegistry,
    PrecipitationFactor,
    PressureChangeFactor,
    SkyClarityFactor,
    TemperatureDifferentialFactor,
    TransportWindFactor,
    build_default_registry,
    linear_score,
)
from src.predictor.scoring import ScoringEngine

__all__ = [
    "KatabaticAnalyzer",
    "ScoringEngine",
    "FactorEvaluator",
    "FactorRegistry",
    "PrecipitationFactor",
    "SkyClarityFactor",
    "PressureChangeFactor",
    "TemperatureDifferentialFactor",
    "TransportWindFactor",
    "build_default_registry",
    "linear_score",
]
