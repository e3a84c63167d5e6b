"""
Writers for the transect output files.
"""

import os
import logging
from dataclasses import dataclass

import pandas as pd

from .utils import file_stem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutputPaths:
    """Every file a processed transect writes, resolved up front."""
    output_dir: str
    variables: str
    summary_matrix: str
    hit_matrix: str
    hit_grid: str
    pavd: str


def make_output_paths(filename, output_dir="output"):
    """
    Build the output file paths for a transect.

    Parameters:
    ----------
    filename : str
        Input file name (or table name). Its extension is dropped.
    output_dir : str
        Directory the files are written to.

    Returns:
    -------
    OutputPaths
    """
    stem = file_stem(filename)
    output_name = f"{stem}_output"
    return OutputPaths(
        output_dir=output_dir,
        variables=os.path.join(output_dir, f"{output_name}.csv"),
        summary_matrix=os.path.join(output_dir, f"{output_name}_summary_matrix.csv"),
        hit_matrix=os.path.join(output_dir, f"{output_name}_hit_matrix.csv"),
        hit_grid=os.path.join(output_dir, f"{stem}_hit_grid.png"),
        pavd=os.path.join(output_dir, f"{stem}_pavd.png"),
    )


def ensure_output_dir(output_dir):
    os.makedirs(output_dir, exist_ok=True)


def write_pcl_to_csv(variables, path):
    """Write the CSC variables as a single row table."""
    pd.DataFrame([variables]).to_csv(path, index=False)
    logger.info(f"Wrote CSC variables to {path}")


def write_summary_matrix_to_csv(summary_matrix, path):
    summary_matrix.to_csv(path, index=False)
    logger.info(f"Wrote summary matrix to {path}")


def write_hit_matrix_to_csv(hit_matrix, path):
    hit_matrix.to_csv(path, index=False)
    logger.info(f"Wrote hit matrix to {path}")
