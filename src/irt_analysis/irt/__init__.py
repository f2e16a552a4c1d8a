"""
IRT (Item Response Theory) module.

This module provides:
- The logistic item response function (1PL, 2PL, 3PL)
- Sampling functions for generating responses
- Estimation infrastructure for fitting IRT models to data
- Ability estimation
- Information curves
- Diagnostic utilities for model validation
"""

from irt_analysis.irt.comparison import ModelComparison, compare_models
from irt_analysis.irt.diagnostics import (
    ItemFitResult,
    PatternFitResult,
    ResponseProbComparison,
    UnidimensionalityResult,
    compute_response_prob_comparison,
    item_fit,
    pattern_goodness_of_fit,
    unidimensionality_test,
)
from irt_analysis.irt.estimation import (
    IRTEstimationResult,
    IRTEstimator,
    ItemParameters,
    ModelVariant,
    ScoringMethod,
    estimate_abilities,
)
from irt_analysis.irt.information import (
    CharacteristicCurve,
    InformationCurve,
    ThetaGrid,
    information_in_range,
    item_information,
    test_information,
)
from irt_analysis.irt.response_models import (
    item_response_derivative,
    item_response_function,
)
from irt_analysis.irt.sampling import (
    sample_response,
    sample_responses,
    simulate_from_model,
)

__all__ = [
    "CharacteristicCurve",
    "IRTEstimationResult",
    "IRTEstimator",
    "InformationCurve",
    "ItemFitResult",
    "ItemParameters",
    "ModelComparison",
    "ModelVariant",
    "PatternFitResult",
    "ResponseProbComparison",
    "ScoringMethod",
    "ThetaGrid",
    "UnidimensionalityResult",
    "compare_models",
    "compute_response_prob_comparison",
    "estimate_abilities",
    "information_in_range",
    "item_fit",
    "item_information",
    "item_response_derivative",
    "item_response_function",
    "pattern_goodness_of_fit",
    "sample_response",
    "sample_responses",
    "simulate_from_model",
    "test_information",
    "unidimensionality_test",
]
