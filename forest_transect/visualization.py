"""
Visualization utilities for transect data.
"""

import logging

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.cm import ScalarMappable
from matplotlib.colors import LinearSegmentedColormap, Normalize

from .config_options import TransectOptions
from .vegetation_indicators import calc_vai_profile

logger = logging.getLogger(__name__)

VAI_LABEL = r"VAI (m$^2$ m$^{-2}$)"
PAVD_LABEL = r"PAVD (m$^2$ m$^{-3}$)"


def bin_edges(values):
    """Lower edges of sorted bin positions plus one closing edge."""
    step = np.diff(values).min() if values.size > 1 else 1.0
    return np.append(values, values[-1] + step)


def build_vai_grid(m2):
    """
    Rasterize the transect into a 2D VAI array.

    A bin at position v covers [v, next bin position), the last one closes
    at the smallest bin spacing (1 for unit voxels). Records without
    coordinates are skipped. Several records in one cell keep the largest
    measured VAI, so a sky hit never hides a measurement. Positions without a
    record, and cells holding only sky hits, are NaN.

    Returns:
    -------
    grid : numpy.ndarray
        Array of shape (n_zbin, n_xbin).
    x_edges, z_edges : numpy.ndarray
        Cell edges along the transect and in height.
    """
    valid = m2.dropna(subset=["xbin", "zbin"]).astype({"xbin": float, "zbin": float})
    if valid.empty:
        return np.empty((0, 0)), np.empty(0), np.empty(0)

    xs = np.sort(valid["xbin"].unique())
    zs = np.sort(valid["zbin"].unique())

    cells = valid.groupby(["zbin", "xbin"])["vai"].max()
    grid = cells.unstack("xbin").reindex(index=zs, columns=xs).to_numpy(dtype=float)
    return grid, bin_edges(xs), bin_edges(zs)


def plot_hit_grid(m2, filename, transect_length=None, options=None):
    """
    Plot the hit grid: VAI over distance along the transect and height.

    Parameters:
    ----------
    m2 : pandas.DataFrame
        Transect with columns xbin, zbin, vai.
    filename : str
        Used as the plot title.
    transect_length : float, optional
        Upper limit of the distance axis. Defaults to the largest xbin.
    options : TransectOptions, optional
        Colour scale, height cap and figure size.

    Returns:
    -------
    matplotlib.figure.Figure
    """
    options = options or TransectOptions()
    if transect_length is None or not np.isfinite(transect_length):
        transect_length = float(m2["xbin"].max()) if not m2.empty else np.nan
    if not np.isfinite(transect_length):
        transect_length = 0.0

    cmap = LinearSegmentedColormap.from_list(
        "vai", [options.low_color, options.high_color]
    ).with_extremes(bad=options.na_color)
    norm = Normalize(vmin=options.vai_limits[0], vmax=options.vai_limits[1])

    fig, ax = plt.subplots(figsize=options.figure_size)

    grid, x_edges, z_edges = build_vai_grid(m2)
    if grid.size == 0:
        logger.warning(f"Empty transect for {filename}, hit grid has no tiles")
    else:
        # Masked cells are drawn with the colormap's "bad" colour
        ax.pcolormesh(x_edges, z_edges, np.ma.masked_invalid(grid), cmap=cmap, norm=norm)

    fig.colorbar(ScalarMappable(norm=norm, cmap=cmap), ax=ax, label=VAI_LABEL)

    ax.set_xlim(0, transect_length + 1)
    ax.set_ylim(0, options.max_height)
    ax.set_xlabel("Distance along transect (m)", fontsize=20)
    ax.set_ylabel("Height above ground (m)", fontsize=20)
    ax.tick_params(labelsize=14)
    ax.set_title(filename, fontweight="bold")
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.set_facecolor(options.na_color)
    return fig


def plot_pavd(m2, filename, output_file=None, hist=False, options=None):
    """
    Plot the plant area volume density (PAVD) profile of the transect.

    Parameters:
    ----------
    m2 : pandas.DataFrame
        Transect with columns xbin, zbin, vai.
    filename : str
        Used as the plot title.
    output_file : str, optional
        Path to save the figure to. Nothing is written when None.
    hist : bool
        Add a horizontal histogram of VAI per height bin.
    options : TransectOptions, optional

    Returns:
    -------
    matplotlib.figure.Figure
    """
    options = options or TransectOptions()
    profile = calc_vai_profile(m2)
    heights = profile["zbin"].to_numpy(dtype=float) + 0.5
    pavd = profile["pavd"].to_numpy(dtype=float)

    fig, ax = plt.subplots(figsize=options.figure_size)

    if len(profile):
        ax.plot(pavd, heights, color=options.high_color, linewidth=2, label="PAVD")
        ax.fill_betweenx(heights, 0, pavd, color=options.high_color, alpha=0.3)
    else:
        logger.warning(f"Empty transect for {filename}, PAVD profile is empty")

    ax.set_ylim(0, options.max_height)
    ax.set_xlim(left=0)
    ax.set_xlabel(PAVD_LABEL, fontsize=20)
    ax.set_ylabel("Height above ground (m)", fontsize=20)
    ax.tick_params(labelsize=14)
    ax.set_title(filename, fontweight="bold")
    ax.grid(True, which="both", linewidth=0.5, alpha=0.5)

    if hist and len(profile):
        # Summed VAI per height bin, on its own VAI scale along the top
        hist_ax = ax.twiny()
        hist_ax.barh(
            heights,
            profile["sum_vai"].to_numpy(dtype=float),
            height=1.0,
            color=options.low_color,
            edgecolor="gray",
            alpha=0.6,
            label="VAI",
        )
        hist_ax.set_xlim(left=0)
        hist_ax.set_xlabel(VAI_LABEL, fontsize=14)
        hist_ax.set_zorder(ax.get_zorder() - 1)
        ax.patch.set_visible(False)
        handles = ax.get_legend_handles_labels()[0] + hist_ax.get_legend_handles_labels()[0]
        ax.legend(handles=handles, loc="upper right")
        ax.set_title(filename, fontweight="bold", pad=30)

    if output_file:
        save_figure(fig, output_file, options)
    return fig


def save_figure(fig, output_file, options=None):
    """Save a figure with the configured resolution."""
    options = options or TransectOptions()
    fig.savefig(output_file, dpi=options.dpi, bbox_inches="tight")
    logger.info(f"Saved figure {output_file}")
