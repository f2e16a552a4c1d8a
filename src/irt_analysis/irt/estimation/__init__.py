"""
IRT model estimation module.

This module provides infrastructure for estimating dichotomous logistic
Item Response Theory models using Marginal Maximum Likelihood via the EM
algorithm.

Key components:
- EstimationConfig: Configuration for estimation
- ModelVariant: 1PL, 2PL or 3PL
- IRTEstimator: MML-EM estimator for all variants
- IRTEstimationResult: Output from estimation
- estimate_abilities: EAP/MAP/ML ability estimation
"""

from irt_analysis.irt.estimation.abilities import (
    AbilityEstimates,
    PatternScores,
    estimate_abilities,
    score_patterns,
)
from irt_analysis.irt.estimation.config import (
    ConvergenceConfig,
    EstimationConfig,
    FitTestConfig,
    ParameterBounds,
    QuadratureConfig,
    ScoringConfig,
    SignificanceConfig,
    default_config,
)
from irt_analysis.irt.estimation.data_models import (
    IRTEstimationResult,
    ParameterEstimate,
)
from irt_analysis.irt.estimation.enums import (
    ConvergenceStatus,
    ModelVariant,
    ScoringMethod,
)
from irt_analysis.irt.estimation.estimator import IRTEstimator, fit_model
from irt_analysis.irt.estimation.parameters import ItemParameters

__all__ = [
    "AbilityEstimates",
    "ConvergenceConfig",
    "ConvergenceStatus",
    "EstimationConfig",
    "FitTestConfig",
    "IRTEstimationResult",
    "IRTEstimator",
    "ItemParameters",
    "ModelVariant",
    "ParameterBounds",
    "ParameterEstimate",
    "PatternScores",
    "QuadratureConfig",
    "ScoringConfig",
    "ScoringMethod",
    "SignificanceConfig",
    "default_config",
    "estimate_abilities",
    "fit_model",
    "score_patterns",
]
