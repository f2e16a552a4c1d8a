"""
Configuration dataclasses for IRT model estimation.

This module defines the configuration parameters for:
- Quadrature settings (Gauss-Hermite integration)
- Convergence criteria for the EM and quasi-Newton phases
- Parameter bounds for the M-step optimizer
- Significance thresholds used when reporting estimates and tests
- Ability scoring and simulation-based fit tests
"""

from dataclasses import dataclass, field
from importlib import metadata

import toml

from irt_analysis.core.paths import (
    PROJECT_NAME,
    ProjectRootNotFound,
    get_project_root_dir,
)
from irt_analysis.irt.estimation.enums import ScoringMethod

# Default parameter bounds (internal slope/intercept/logit-guessing scale)
DEFAULT_DISCRIMINATION_BOUNDS = (0.05, 8.0)
DEFAULT_INTERCEPT_BOUNDS = (-30.0, 30.0)
DEFAULT_LOGIT_GUESSING_BOUNDS = (-10.0, 3.0)

# Default convergence settings
DEFAULT_MAX_EM_ITERATIONS = 500
DEFAULT_EM_TOLERANCE = 1e-4
DEFAULT_MAX_LBFGS_ITERATIONS = 100
DEFAULT_LBFGS_TOLERANCE = 1e-9
DEFAULT_MAX_QN_ITERATIONS = 150
DEFAULT_HESSIAN_STEP = 1e-4

# Starting value for the guessing parameter in 3PL fits
DEFAULT_INITIAL_GUESSING = 0.1

# Default quadrature settings
DEFAULT_QUADRATURE_POINTS = 41

# Conventional thresholds from the tutorial; one-sided 0.05 for z
DEFAULT_Z_THRESHOLD = 1.65
DEFAULT_ALPHA = 0.05
DEFAULT_STRICT_ALPHA = 0.01

# Ability scoring
DEFAULT_THETA_BOUNDS = (-4.0, 4.0)

# Simulation-based fit tests
DEFAULT_N_GROUPS = 10
DEFAULT_N_SIMULATIONS = 100


def _get_package_version() -> str:
    try:
        root_dir = get_project_root_dir()
    except ProjectRootNotFound:
        # Installed without the source tree
        return metadata.version(PROJECT_NAME)

    with open(root_dir / "pyproject.toml") as f:
        data = toml.load(f)

    version = data.get("project", {}).get("version")

    if not version:
        raise ValueError("Version not found in pyproject.toml")

    assert isinstance(version, str)
    return version


@dataclass(frozen=True)
class QuadratureConfig:
    """
    Configuration for Gauss-Hermite quadrature.

    Attributes:
        n_points: Number of quadrature points. Standard in IRT software
            (IRTPRO, flexMIRT) is 41 points.
        mean: Mean of the ability distribution (typically 0).
        std: Standard deviation of the ability distribution (typically 1).
    """

    n_points: int = DEFAULT_QUADRATURE_POINTS
    mean: float = 0.0
    std: float = 1.0

    def __post_init__(self) -> None:
        if self.n_points < 2:
            raise ValueError(f"n_points must be >= 2, got {self.n_points}")
        if self.std <= 0:
            raise ValueError(f"std must be > 0, got {self.std}")


@dataclass(frozen=True)
class ConvergenceConfig:
    """
    Configuration for estimation convergence.

    Attributes:
        max_em_iterations: Maximum number of EM iterations.
        em_tolerance: EM stops when |LL_new - LL_old| < tolerance.
        max_lbfgs_iterations: Maximum iterations for L-BFGS-B in the M-step.
        lbfgs_tolerance: ftol for the L-BFGS-B optimizer.
        max_qn_iterations: Iterations of the quasi-Newton phase that
            maximizes the marginal likelihood directly after EM.
            Set to 0 to stop after EM.
        hessian_step: Relative finite-difference step for the observed
            information matrix.
    """

    max_em_iterations: int = DEFAULT_MAX_EM_ITERATIONS
    em_tolerance: float = DEFAULT_EM_TOLERANCE
    max_lbfgs_iterations: int = DEFAULT_MAX_LBFGS_ITERATIONS
    lbfgs_tolerance: float = DEFAULT_LBFGS_TOLERANCE
    max_qn_iterations: int = DEFAULT_MAX_QN_ITERATIONS
    hessian_step: float = DEFAULT_HESSIAN_STEP


@dataclass(frozen=True)
class ParameterBounds:
    """
    Bounds for item parameters during optimization.

    Attributes:
        discrimination: (min, max) for the slope a. The lower bound is
            positive so that higher a always means a steeper curve.
        intercept: (min, max) for the intercept d = -a * b.
        logit_guessing: (min, max) for logit(c). Keeps c inside (0, 1).
    """

    discrimination: tuple[float, float] = DEFAULT_DISCRIMINATION_BOUNDS
    intercept: tuple[float, float] = DEFAULT_INTERCEPT_BOUNDS
    logit_guessing: tuple[float, float] = DEFAULT_LOGIT_GUESSING_BOUNDS


@dataclass(frozen=True)
class SignificanceConfig:
    """
    Thresholds used to flag estimates and tests.

    Attributes:
        z_threshold: |z| above which a parameter estimate is flagged.
        alpha: Significance level for fit tests.
        strict_alpha: Stricter level, reported alongside alpha.
    """

    z_threshold: float = DEFAULT_Z_THRESHOLD
    alpha: float = DEFAULT_ALPHA
    strict_alpha: float = DEFAULT_STRICT_ALPHA


@dataclass(frozen=True)
class ScoringConfig:
    """
    Ability scoring settings.

    Attributes:
        method: Default scoring method.
        theta_bounds: Search interval for MAP/ML. ML estimates for
            all-correct or all-incorrect vectors are reported at these
            bounds.
    """

    method: ScoringMethod = ScoringMethod.EAP
    theta_bounds: tuple[float, float] = DEFAULT_THETA_BOUNDS


@dataclass(frozen=True)
class FitTestConfig:
    """
    Settings for item fit and simulation-based tests.

    Attributes:
        n_groups: Number of ability groups for the item fit chi-square.
        n_simulations: Number of datasets simulated from the fitted model.
            0 uses asymptotic chi-square p-values where available.
        refit: Refit the model to each simulated dataset.
    """

    n_groups: int = DEFAULT_N_GROUPS
    n_simulations: int = DEFAULT_N_SIMULATIONS
    refit: bool = True


@dataclass(frozen=True)
class EstimationConfig:
    """
    Master configuration for IRT model estimation.

    Attributes:
        quadrature: Settings for Gauss-Hermite quadrature.
        convergence: Convergence criteria.
        bounds: Parameter bounds for optimization.
        significance: Thresholds used in reports.
        scoring: Ability scoring settings.
        fit_tests: Item fit and simulation settings.
        initial_guessing: Starting guessing value for 3PL fits.
        allow_non_convergence: Return non-converged results instead of
            raising ConvergenceError.
        model_version: Version string for reproducibility tracking.
    """

    quadrature: QuadratureConfig = QuadratureConfig()
    convergence: ConvergenceConfig = ConvergenceConfig()
    bounds: ParameterBounds = ParameterBounds()
    significance: SignificanceConfig = SignificanceConfig()
    scoring: ScoringConfig = ScoringConfig()
    fit_tests: FitTestConfig = FitTestConfig()
    initial_guessing: float = DEFAULT_INITIAL_GUESSING
    allow_non_convergence: bool = False
    model_version: str = field(default_factory=_get_package_version)


def default_config() -> EstimationConfig:
    """Create a default estimation configuration."""
    return EstimationConfig()
