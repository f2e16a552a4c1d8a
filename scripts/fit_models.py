#!/usr/bin/env python
"""
Fit the 1PL, 2PL and 3PL models to a response table and write reports.

For every fitted model the report directory receives the model JSON, the
parameter table, item fit, ability scores and curve plots. Nested models
are compared with likelihood-ratio tests.
"""

from dataclasses import replace
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from irt_analysis.core.data import load_response_table
from irt_analysis.core.data_models import ResponseMatrix
from irt_analysis.core.errors import (
    ConvergenceError,
    DataValidationError,
    EstimationError,
)
from irt_analysis.core.utils import get_rng
from irt_analysis.irt.comparison import compare_models
from irt_analysis.irt.diagnostics import item_fit, unidimensionality_test
from irt_analysis.irt.estimation import (
    EstimationConfig,
    IRTEstimationResult,
    IRTEstimator,
    ModelVariant,
    ScoringMethod,
    score_patterns,
)
from irt_analysis.irt.information import information_in_range
from irt_analysis.irt.plotting import (
    plot_characteristic_curves,
    plot_item_information,
    plot_test_information,
)
from irt_analysis.irt.reporting import ModelSummary, summarize_model
from irt_analysis.settings import AnalysisSettings

PROJECT_DIR = Path(__file__).parent.parent.absolute()
DEFAULT_OUTPUT_DIR = PROJECT_DIR / "reports" / "fitted-models"

console = Console(force_terminal=True, legacy_windows=True)
app = typer.Typer()


def save_model(model: IRTEstimationResult, output_path: Path) -> None:
    """Save fitted model to json file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(model.model_dump_json(indent=4))


def _format(value: float, digits: int = 3) -> str:
    return "-" if not np.isfinite(value) else f"{value:.{digits}f}"


def print_summary(summary: ModelSummary) -> None:
    """Pretty-print parameter estimates as a rich Table."""
    model = summary.model
    table = Table(
        title=(
            f"{model.variant.value}: LL={model.log_likelihood:.2f}, "
            f"AIC={model.aic:.2f}, BIC={model.bic:.2f}"
        )
    )
    table.add_column("Item", style="bold")
    table.add_column("Parameter")
    table.add_column("Estimate", justify="right")
    table.add_column("SE", justify="right")
    table.add_column("z", justify="right")

    for row in summary.estimates.itertuples():
        z_text = _format(row.z_value)
        if row.significant:
            z_text = f"[green]{z_text}[/green]"
        table.add_row(
            str(row.item_id + 1),
            row.parameter,
            _format(row.estimate),
            _format(row.standard_error),
            z_text,
        )
    console.print(table)


def fit_variant(
    data: ResponseMatrix,
    variant: ModelVariant,
    config: EstimationConfig,
) -> IRTEstimationResult | None:
    console.print(f"[dim]Fitting {variant.value} model...[/dim]")
    try:
        model = IRTEstimator(variant, config).fit(data)
    except ConvergenceError as e:
        console.print(f"[red]{e}[/red]")
        return None

    console.print(
        f"  {model.convergence_status.value} "
        f"({model.n_iterations} iterations, LL={model.log_likelihood:.2f})"
    )
    return model


@app.command()
def main(
    input_path: Path = typer.Argument(
        ...,
        help="Whitespace-delimited 0/1 response table, no header",
    ),
    output_dir: Path = typer.Option(
        DEFAULT_OUTPUT_DIR,
        "-o",
        "--output-dir",
        help="Output directory for reports",
    ),
    variants: list[ModelVariant] = typer.Option(
        [ModelVariant.ONE_PL, ModelVariant.TWO_PL, ModelVariant.THREE_PL],
        "-m",
        "--model",
        help="Models to fit (repeatable)",
    ),
    n_simulations: int | None = typer.Option(
        None,
        "-b",
        "--n-simulations",
        help="Simulated datasets per fit test (0 = asymptotic item fit)",
    ),
    scoring: ScoringMethod = typer.Option(
        ScoringMethod.EAP,
        "--scoring",
        help="Ability scoring method",
    ),
    seed: int | None = typer.Option(
        None,
        "-s",
        "--seed",
        help="Random seed for reproducibility",
    ),
) -> None:
    """Fit IRT models to a response table and write reports."""

    if not input_path.exists():
        console.print(f"[red]File not found: {input_path}[/red]")
        raise typer.Exit(1)

    settings = AnalysisSettings()
    config = settings.to_estimation_config()
    if n_simulations is not None:
        config = replace(
            config,
            fit_tests=replace(config.fit_tests, n_simulations=n_simulations),
        )
    rng = get_rng(seed if seed is not None else settings.seed)

    console.print("[dim]Loading data...[/dim]")
    try:
        data = load_response_table(input_path)
    except DataValidationError as e:
        console.print(f"[red]Error loading table: {e}[/red]")
        raise typer.Exit(1) from e

    console.print(
        Panel(
            f"[bold]Fit IRT Models[/bold]\n\n"
            f"Input: [cyan]{input_path}[/cyan]\n"
            f"Respondents: [cyan]{data.n_respondents}[/cyan]\n"
            f"Items: [cyan]{data.n_items}[/cyan]\n"
            f"Models: [cyan]{', '.join(v.value for v in variants)}[/cyan]\n"
            f"Simulations: [cyan]{config.fit_tests.n_simulations}[/cyan]",
            title="Configuration",
        )
    )

    alpha = config.significance.alpha
    models: dict[ModelVariant, IRTEstimationResult] = {}

    for variant in sorted(set(variants), key=lambda v: v.n_item_parameters):
        try:
            model = fit_variant(data, variant, config)
        except EstimationError as e:
            console.print(f"[red]Estimation failed: {e}[/red]")
            raise typer.Exit(1) from e
        if model is None:
            continue
        models[variant] = model

        report_dir = output_dir / input_path.stem / variant.value
        report_dir.mkdir(parents=True, exist_ok=True)
        save_model(model, report_dir / "model.json")

        summary = summarize_model(model, config.significance)
        print_summary(summary)
        summary.estimates.to_csv(report_dir / "parameters.csv", index=False)

        # -- Item fit --
        console.print("[dim]Testing item fit...[/dim]")
        fit = item_fit(data, model, config, rng)
        fit.to_frame().to_csv(report_dir / "item_fit.csv", index=False)
        misfit = fit.misfitting(alpha)
        console.print(
            f"  Items with p < {alpha}: "
            f"{', '.join(str(k + 1) for k in misfit) or 'none'}"
        )

        # -- Abilities --
        scores = score_patterns(data, model, scoring, config)
        scores.to_frame().to_csv(report_dir / "pattern_scores.csv", index=False)

        # -- Information --
        low_range = information_in_range(model.item_parameters, -4.0, 0.0)
        console.print(
            f"  Information in [-4, 0]: {low_range.information:.2f} "
            f"({low_range.proportion:.1%} of total)"
        )

        # -- Plots --
        for name, fig in (
            ("icc.png", plot_characteristic_curves(model)),
            ("item_information.png", plot_item_information(model)),
            ("test_information.png", plot_test_information(model)),
        ):
            fig.savefig(report_dir / name, dpi=150)
            plt.close(fig)

    # -- Nested model comparisons --
    fitted = sorted(models, key=lambda v: v.n_item_parameters)
    for restricted, general in zip(fitted, fitted[1:]):
        comparison = compare_models(models[restricted], models[general])
        verdict = (
            f"[green]{general.value} preferred[/green]"
            if comparison.prefers_general(alpha)
            else f"{restricted.value} retained"
        )
        console.print(
            f"LRT {restricted.value} vs {general.value}: "
            f"LR={comparison.statistic:.2f}, df={comparison.df}, "
            f"p={comparison.p_value:.4g} -> {verdict}"
        )

    # -- Unidimensionality (under the simplest fitted model) --
    if fitted and config.fit_tests.n_simulations > 0:
        console.print("[dim]Testing unidimensionality...[/dim]")
        unidim = unidimensionality_test(data, models[fitted[0]], config, rng)
        console.print(
            f"Second eigenvalue {unidim.statistic:.3f}, "
            f"p={unidim.p_value:.3f} ({fitted[0].value})"
        )

    console.print(
        Panel(
            f"[bold green]Reports saved[/bold green]\n\n"
            f"Output: [cyan]{output_dir / input_path.stem}[/cyan]",
            title="Done",
        )
    )


if __name__ == "__main__":
    app()
