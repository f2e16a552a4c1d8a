"""
Loading and writing whitespace-delimited response tables.

The table has one row per respondent and one 0/1 column per item, no
header. Missing answers are written as one of MISSING_TOKENS.
"""

from pathlib import Path

import numpy as np
import pandas as pd

from irt_analysis.core.constants import MISSING_TOKENS, MISSING_VALUE
from irt_analysis.core.data_models import ResponseMatrix
from irt_analysis.core.errors import DataValidationError


def _read_rows(path: Path) -> list[list[str]]:
    """Split non-blank lines into whitespace-separated tokens."""
    with open(path) as f:
        return [line.split() for line in f if line.strip()]


def response_matrix_from_frame(frame: pd.DataFrame) -> ResponseMatrix:
    """
    Convert a table of 0/1 answers into a ResponseMatrix.

    Cells may be numbers, numeric strings, one of MISSING_TOKENS, or
    NaN (missing).

    Raises:
        DataValidationError: If a cell is neither 0, 1 nor missing.
    """
    if frame.empty:
        raise DataValidationError("Response table is empty")

    cleaned = frame.replace(list(MISSING_TOKENS), np.nan)
    numeric = cleaned.apply(pd.to_numeric, errors="coerce")

    # Cells that were present but did not parse as numbers
    unparsed = numeric.isna() & cleaned.notna()
    if unparsed.to_numpy().any():
        row, col = np.argwhere(unparsed.to_numpy())[0]
        raise DataValidationError(
            f"Non-numeric value {cleaned.iat[row, col]!r} "
            f"in row {row + 1}, column {col + 1}"
        )

    values = numeric.to_numpy(dtype=np.float64)
    observed = ~np.isnan(values)
    non_binary = observed & ~np.isin(values, (0.0, 1.0))
    if non_binary.any():
        row, col = np.argwhere(non_binary)[0]
        raise DataValidationError(
            f"Non-binary value {values[row, col]:g} "
            f"in row {row + 1}, column {col + 1}"
        )

    responses = np.where(observed, values, MISSING_VALUE).astype(np.int8)
    return ResponseMatrix(responses=responses)


def load_response_table(path: Path) -> ResponseMatrix:
    """
    Load a whitespace-delimited text table into a ResponseMatrix.

    Returns:
        ResponseMatrix with n_rows respondents and n_columns items.

    Raises:
        DataValidationError: If rows have different lengths or contain
            values other than 0, 1 or a missing token.
        FileNotFoundError: If path doesn't exist.
    """
    if not path.exists():
        raise FileNotFoundError(f"Response table not found: {path}")

    rows = _read_rows(path)
    if not rows:
        raise DataValidationError(f"Response table is empty: {path}")

    # Validate all rows have the same number of columns
    lengths = {len(row) for row in rows}
    if len(lengths) != 1:
        raise DataValidationError(
            f"Inconsistent row lengths in {path}: {sorted(lengths)}"
        )

    return response_matrix_from_frame(pd.DataFrame(rows))


def write_response_table(data: ResponseMatrix, path: Path) -> None:
    """Write a ResponseMatrix in the format read by load_response_table."""
    path.parent.mkdir(parents=True, exist_ok=True)
    cells = data.responses.astype(object)
    cells[data.missing_mask] = MISSING_TOKENS[0]
    pd.DataFrame(cells).to_csv(path, sep=" ", header=False, index=False)
