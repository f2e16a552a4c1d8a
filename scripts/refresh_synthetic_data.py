#!/usr/bin/env python
"""
Refresh synthetic response tables from parameter configurations.

Generates one table for each non-empty configuration in synthetic_data/params/.
Output files are written to data/synthetic/{preset_name}.txt, with the
generating item parameters in data/synthetic/{preset_name}_items.csv.
"""

import logging
from pathlib import Path

import pandas as pd
import typer

from irt_analysis.synthetic_data.generators import (
    generate_responses,
    write_generated,
)
from irt_analysis.synthetic_data.presets import PARAMS_DIR, get_preset

SYNTHETIC_DATA_DIR = Path(__file__).parent.parent / "data" / "synthetic"

# Child of the package logger so records go through its handler
logger = logging.getLogger("irt_analysis.refresh_synthetic_data")


def get_non_empty_presets() -> list[str]:
    """Return preset names for YAML files that are non-empty."""
    presets = []
    for path in PARAMS_DIR.glob("*.yaml"):
        if path.read_text().strip() != "":
            presets.append(path.stem)
    return sorted(presets)


def main(preset: str | None = None) -> int:
    """Generate response tables for all non-empty presets."""
    SYNTHETIC_DATA_DIR.mkdir(parents=True, exist_ok=True)

    if preset is None:
        presets = get_non_empty_presets()
        if not presets:
            raise FileNotFoundError("No non-empty preset configurations found")
        logger.info("Found %d non-empty presets: %s", len(presets), presets)
    else:
        logger.info(f"Generating synthetic data for preset {preset}")
        presets = [preset]

    for preset_name in presets:
        output_path = SYNTHETIC_DATA_DIR / f"{preset_name}.txt"
        logger.info("Generating %s -> %s", preset_name, output_path)

        config = get_preset(preset_name)
        data = generate_responses(config)
        write_generated(data, output_path)

        pd.DataFrame(
            [params.model_dump() for params in data.item_parameters]
        ).to_csv(SYNTHETIC_DATA_DIR / f"{preset_name}_items.csv", index=False)

        logger.info(
            "  Generated %d respondents, %d items",
            config.n_respondents,
            config.n_items,
        )

    logger.info(
        "Done. Generated %d tables in %s", len(presets), SYNTHETIC_DATA_DIR
    )
    return 0


if __name__ == "__main__":
    typer.run(main)
