"""
Canopy structural complexity (CSC) indicators for a single transect.

All functions take the transect table (columns xbin, zbin, vai). Cells whose
vai is NaN are sky hits (no canopy return): they are left out of every sum,
mean and count on VAI. Cells with vai == 0 are real zeros and are counted.
"""

import logging

import numpy as np
import pandas as pd
from scipy.stats import entropy

logger = logging.getLogger(__name__)

# Beer-Lambert extinction coefficient used for per-column gap fractions
K_EXTINCTION = 0.5

SUMMARY_COLUMNS = [
    "xbin",
    "height_bin",
    "max_ht",
    "sum_vai",
    "std_bin",
    "n_cells",
    "sky_hit",
]

PROFILE_COLUMNS = ["zbin", "sum_vai", "pavd", "ratio"]

CSC_VARIABLES = [
    "plot",
    "transect_length",
    "mean_height",
    "height_2",
    "mean_height_var",
    "mean_height_rms",
    "mode_el",
    "max_el",
    "mean_max_ht",
    "max_ht",
    "top_rugosity",
    "mean_vai",
    "max_vai",
    "mean_std",
    "std_std",
    "rugosity",
    "rumple",
    "sky_fraction",
    "cover_fraction",
    "deep_gap_fraction",
    "clumping_index",
    "fhd",
]


def calc_tls_mean_leaf_ht(m):
    """
    Derive the mean leaf height of every vertical column.

    Each cell gets ``vai_z = vai * (zbin + 0.5)``, the VAI weighted by the
    height of the voxel centre, and ``height_bin``, the VAI-weighted mean
    height of its column: ``sum(vai_z) / sum(vai)``.

    Parameters:
    ----------
    m : pandas.DataFrame
        Transect with columns xbin, zbin, vai.

    Returns:
    -------
    pandas.DataFrame
        Copy of ``m`` with vai_z and height_bin added, one row per cell.
        height_bin is NaN for columns without any VAI.
    """
    m2 = m.copy()
    m2["vai_z"] = m2["vai"] * (m2["zbin"] + 0.5)

    if m2.empty:
        m2["height_bin"] = pd.Series(dtype=float)
        return m2

    sums = m2.groupby("xbin")[["vai_z", "vai"]].sum()
    height = sums["vai_z"] / sums["vai"].where(sums["vai"] > 0)
    m2["height_bin"] = m2["xbin"].map(height).astype(float)
    return m2


def process_column(xbin, cells):
    """Summarise one vertical column of the transect."""
    valid = cells.loc[cells["vai"].notna()]
    vai = valid["vai"].to_numpy(dtype=float)
    z = valid["zbin"].to_numpy(dtype=float)
    sum_vai = float(vai.sum())

    hits = z[vai > 0]
    max_ht = float(hits.max()) if hits.size else 0.0

    if sum_vai > 0:
        height_bin = float((vai * (z + 0.5)).sum() / sum_vai)
        std_bin = float(np.sqrt((vai * ((z + 0.5) - height_bin) ** 2).sum() / sum_vai))
    else:
        height_bin = np.nan
        std_bin = np.nan

    return {
        "xbin": xbin,
        "height_bin": height_bin,
        "max_ht": max_ht,
        "sum_vai": sum_vai,
        "std_bin": std_bin,
        "n_cells": int(len(valid)),
        "sky_hit": bool(hits.size == 0),
    }


def make_summary_matrix(m2):
    """
    Build the summary matrix: one row per vertical column (xbin).

    Columns are xbin, height_bin (mean leaf height), max_ht (highest zbin
    with VAI > 0, 0 when none), sum_vai, std_bin (VAI-weighted standard
    deviation of leaf height), n_cells (cells with a VAI value) and sky_hit
    (column without any VAI > 0).
    """
    rows = [process_column(xbin, cells) for xbin, cells in m2.groupby("xbin", sort=True)]
    summary = pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
    if summary.empty:
        summary = summary.astype({c: float for c in SUMMARY_COLUMNS if c != "sky_hit"})
    return summary


def make_hit_matrix(m2):
    """Long xbin, zbin, vai table sorted by position. Sky hits stay NaN."""
    hit = m2.loc[:, ["xbin", "zbin", "vai"]]
    return hit.sort_values(["xbin", "zbin"], kind="mergesort").reset_index(drop=True)


def calc_vai_profile(m2):
    """
    Vertical VAI profile of the transect.

    Returns one row per zbin with the summed VAI, the plant area volume
    density ``pavd`` (sum over the number of columns) and the ``ratio`` of
    the total VAI found at that height.
    """
    if m2.empty:
        return pd.DataFrame(columns=PROFILE_COLUMNS, dtype=float)

    profile = m2.groupby("zbin", sort=True)["vai"].sum().rename("sum_vai").reset_index()
    n_columns = m2["xbin"].nunique()
    total = profile["sum_vai"].sum()

    profile["pavd"] = profile["sum_vai"] / n_columns
    profile["ratio"] = profile["sum_vai"] / total if total > 0 else 0.0
    return profile[PROFILE_COLUMNS]


def calc_fhd(profile):
    """Foliage height diversity: Shannon entropy of the VAI height profile."""
    values = np.clip(np.asarray(profile["sum_vai"], dtype=float), 0, None)
    total = values.sum()
    if values.size == 0 or total <= 0:
        return 0.0
    return float(entropy(values / total))


def calc_rumple(summary):
    """Length of the outer canopy surface over its horizontal extent."""
    x = summary["xbin"].to_numpy(dtype=float)
    z = summary["max_ht"].to_numpy(dtype=float)
    extent = x.max() - x.min() if x.size else 0.0
    if extent <= 0:
        return np.nan
    surface = np.hypot(np.diff(x), np.diff(z)).sum()
    return float(surface / extent)


def calc_clumping_index(summary):
    """Clumping index from per-column gap fractions, NaN when undefined."""
    sum_vai = summary["sum_vai"].to_numpy(dtype=float)
    if sum_vai.size == 0:
        return np.nan
    gap = np.exp(-K_EXTINCTION * sum_vai)
    mean_log_gap = np.log(gap).mean()
    if mean_log_gap == 0:
        return np.nan
    return float(np.log(gap.mean()) / mean_log_gap)


def calc_tls_csc(m2, filename):
    """
    Compute the CSC variable set of one transect.

    Parameters:
    ----------
    m2 : pandas.DataFrame
        Output of :func:`calc_tls_mean_leaf_ht`.
    filename : str
        Name stored under the ``plot`` key.

    Returns:
    -------
    dict
        CSC variables keyed by name, in the order of ``CSC_VARIABLES``.
        Every statistic is NaN for an empty transect.
    """
    variables = dict.fromkeys(CSC_VARIABLES, np.nan)
    variables["plot"] = filename

    if m2.empty:
        logger.warning(f"Empty transect for {filename}, CSC variables are all NaN")
        return variables

    summary = make_summary_matrix(m2)
    profile = calc_vai_profile(m2)

    heights = summary["height_bin"].astype(float)
    max_ht = summary["max_ht"].astype(float)
    sum_vai = summary["sum_vai"].astype(float)
    std_bin = summary["std_bin"].astype(float)

    variables["transect_length"] = float(m2["xbin"].max())

    # Mean leaf height statistics
    variables["mean_height"] = heights.mean()
    variables["height_2"] = heights.std()
    variables["mean_height_var"] = heights.var()
    variables["mean_height_rms"] = np.sqrt((heights**2).mean())

    # Vertical profile
    if profile["sum_vai"].max() > 0:
        variables["mode_el"] = float(profile.loc[profile["sum_vai"].idxmax(), "zbin"])
    variables["max_el"] = profile["pavd"].max()

    # Outer canopy
    variables["mean_max_ht"] = max_ht.mean()
    variables["max_ht"] = max_ht.max()
    variables["top_rugosity"] = max_ht.std()
    variables["rumple"] = calc_rumple(summary)

    # Density and variability
    variables["mean_vai"] = sum_vai.mean()
    variables["max_vai"] = sum_vai.max()
    variables["mean_std"] = std_bin.mean()
    variables["std_std"] = std_bin.std()
    rugosity_sq = (std_bin**2).mean() - std_bin.mean() ** 2
    variables["rugosity"] = np.sqrt(max(rugosity_sq, 0.0)) if pd.notna(rugosity_sq) else np.nan

    # Openness
    variables["sky_fraction"] = 100.0 * summary["sky_hit"].mean()
    variables["cover_fraction"] = 100.0 - variables["sky_fraction"]
    variables["deep_gap_fraction"] = 100.0 * (max_ht < 1).mean()
    variables["clumping_index"] = calc_clumping_index(summary)

    variables["fhd"] = calc_fhd(profile)

    for key, value in variables.items():
        if key != "plot":
            variables[key] = float(value)

    logger.info(
        f"CSC for {filename}: mean height {variables['mean_height']:.2f}, "
        f"rugosity {variables['rugosity']:.3f}"
    )
    return variables
