from pydantic_settings import BaseSettings

from irt_analysis.irt.estimation.config import (
    DEFAULT_ALPHA,
    DEFAULT_MAX_EM_ITERATIONS,
    DEFAULT_N_GROUPS,
    DEFAULT_N_SIMULATIONS,
    DEFAULT_QUADRATURE_POINTS,
    DEFAULT_STRICT_ALPHA,
    DEFAULT_Z_THRESHOLD,
    ConvergenceConfig,
    EstimationConfig,
    FitTestConfig,
    QuadratureConfig,
    SignificanceConfig,
)

IRT_ANALYSIS_ENV_PREFIX = "IRT_ANALYSIS_"


class AnalysisSettings(BaseSettings):
    model_config = {"env_prefix": IRT_ANALYSIS_ENV_PREFIX}

    quadrature_points: int = DEFAULT_QUADRATURE_POINTS
    max_em_iterations: int = DEFAULT_MAX_EM_ITERATIONS
    n_groups: int = DEFAULT_N_GROUPS
    n_simulations: int = DEFAULT_N_SIMULATIONS
    refit_simulations: bool = True
    z_threshold: float = DEFAULT_Z_THRESHOLD
    alpha: float = DEFAULT_ALPHA
    strict_alpha: float = DEFAULT_STRICT_ALPHA
    allow_non_convergence: bool = False
    seed: int | None = None

    def to_estimation_config(self) -> EstimationConfig:
        """Estimation config with these settings and defaults elsewhere."""
        return EstimationConfig(
            quadrature=QuadratureConfig(n_points=self.quadrature_points),
            convergence=ConvergenceConfig(
                max_em_iterations=self.max_em_iterations
            ),
            significance=SignificanceConfig(
                z_threshold=self.z_threshold,
                alpha=self.alpha,
                strict_alpha=self.strict_alpha,
            ),
            fit_tests=FitTestConfig(
                n_groups=self.n_groups,
                n_simulations=self.n_simulations,
                refit=self.refit_simulations,
            ),
            allow_non_convergence=self.allow_non_convergence,
        )
