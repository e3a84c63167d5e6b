"""
Transect processor: runs one TLS slice through the whole pipeline.

load -> slice -> rename -> mean leaf height -> CSC variables -> summary and
hit matrices -> hit grid (and PAVD) -> output files.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.figure import Figure

from .config_options import TransectOptions
from .loader import as_source, read_tls
from .transect import slice_transect, rename_to_transect
from .vegetation_indicators import (
    calc_tls_mean_leaf_ht,
    calc_tls_csc,
    make_summary_matrix,
    make_hit_matrix,
)
from .visualization import plot_hit_grid, plot_pavd, save_figure
from .writer import (
    OutputPaths,
    make_output_paths,
    ensure_output_dir,
    write_pcl_to_csv,
    write_summary_matrix_to_csv,
    write_hit_matrix_to_csv,
)


@dataclass
class TransectResult:
    """Everything computed for one transect."""
    filename: str
    transect: pd.DataFrame
    variables: Dict[str, Any]
    summary_matrix: pd.DataFrame
    hit_matrix: pd.DataFrame
    hit_grid: Figure
    pavd: Optional[Figure] = None
    paths: Optional[OutputPaths] = None


class TransectProcessor:
    """
    Process single slices of voxelated TLS scans.

    Parameters:
    ----------
    output_dir : str
        Directory the output files are written to. Default is "output",
        relative to the working directory.
    options : TransectOptions, optional
        Plotting and output options.
    """

    def __init__(self, output_dir="output", options=None):
        if output_dir is None:
            raise ValueError("Output directory must be specified.")
        self.output_dir = output_dir
        self.options = options or TransectOptions()
        self.log = logging.getLogger(__name__)

    def process(self, source, slice, pavd=False, hist=False, save_output=True):
        """
        Run one slice of a scan through the pipeline.

        Parameters:
        ----------
        source : str, os.PathLike, pandas.DataFrame, PathSource or TableSource
            The scan, as a headerless x, y, z, vai CSV or a table.
        slice : int
            Scan line (x value) to process.
        pavd : bool
            Also plot the plant area volume density profile.
        hist : bool
            Add a VAI histogram to the PAVD plot. Only used with ``pavd``.
        save_output : bool
            Write the tables and plots to ``output_dir``. When False nothing
            is written to disk.

        Returns:
        -------
        TransectResult
        """
        df_xyz, filename = read_tls(as_source(source))

        self.log.info("=" * 50)
        self.log.info(f"Processing {filename}, slice {slice}")

        m1 = rename_to_transect(slice_transect(df_xyz, slice))
        m2 = calc_tls_mean_leaf_ht(m1)

        variables = calc_tls_csc(m2, filename)
        summary_matrix = make_summary_matrix(m2)
        hit_matrix = make_hit_matrix(m2)

        paths = make_output_paths(filename, self.output_dir) if save_output else None
        if paths is not None:
            ensure_output_dir(paths.output_dir)

        hit_grid = plot_hit_grid(
            m2, filename, variables["transect_length"], options=self.options
        )

        pavd_fig = None
        if pavd:
            pavd_fig = plot_pavd(
                m2,
                filename,
                output_file=paths.pavd if paths is not None else None,
                hist=hist,
                options=self.options,
            )

        result = TransectResult(
            filename=filename,
            transect=m2,
            variables=variables,
            summary_matrix=summary_matrix,
            hit_matrix=hit_matrix,
            hit_grid=hit_grid,
            pavd=pavd_fig,
            paths=paths,
        )

        if paths is not None:
            self.save(result)

        if self.options.close_figures:
            for fig in (hit_grid, pavd_fig):
                if fig is not None:
                    plt.close(fig)

        self.log.info(f"Finished {filename}, slice {slice}")
        self.log.info("=" * 50)
        return result

    def save(self, result):
        """Write the CSC variables, matrices and hit grid of a result."""
        paths = result.paths or make_output_paths(result.filename, self.output_dir)
        ensure_output_dir(paths.output_dir)

        write_pcl_to_csv(result.variables, paths.variables)
        write_summary_matrix_to_csv(result.summary_matrix, paths.summary_matrix)
        write_hit_matrix_to_csv(result.hit_matrix, paths.hit_matrix)
        save_figure(result.hit_grid, paths.hit_grid, self.options)
        return paths


def process_tls(
    source,
    slice,
    pavd=False,
    hist=False,
    save_output=True,
    output_dir="output",
    options=None,
):
    """
    Process a single transect from a voxelated TLS scan.

    The scan is a four column (x, y, z, vai) CSV without header, or a
    DataFrame. VAI is computed beforehand by the user. With ``save_output``
    the following files are written to ``output_dir``:

    1. ``<name>_output.csv``: the CSC variables
    2. ``<name>_output_summary_matrix.csv``: one row per vertical column
    3. ``<name>_output_hit_matrix.csv``: VAI at each xbin, zbin position
    4. ``<name>_hit_grid.png``: the hit grid plot
    5. ``<name>_pavd.png``: the PAVD profile, only with ``pavd=True``

    Examples:
    --------
    >>> result = process_tls("UVAX_A4_01_tls.csv", slice=5, save_output=False)
    >>> result.variables["mean_height"]
    """
    processor = TransectProcessor(output_dir=output_dir, options=options)
    return processor.process(
        source, slice, pavd=pavd, hist=hist, save_output=save_output
    )
