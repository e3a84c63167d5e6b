#!/usr/bin/env python3
"""
Test script for Step 2 - Transect Indicators
============================================

Checks mean leaf height, the summary and hit matrices, the vertical VAI
profile and the canopy structural complexity (CSC) variables. Sky hits
(NaN VAI) must be left out of the statistics, zero VAI must not.
"""

import os
import sys

import numpy as np
import pandas as pd
import pytest

# Add parent directory to path to import project modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from forest_transect.vegetation_indicators import (
    CSC_VARIABLES,
    SUMMARY_COLUMNS,
    calc_fhd,
    calc_tls_csc,
    calc_tls_mean_leaf_ht,
    calc_vai_profile,
    make_hit_matrix,
    make_summary_matrix,
)


def scenario_transect():
    """Slice 1 of the reference scenario, already renamed"""
    return pd.DataFrame(
        {
            "xbin": [0.0, 0.0, 1.0],
            "zbin": [0.0, 1.0, 0.0],
            "vai": [2.0, 0.0, np.nan],
        }
    )


def create_test_transect():
    """Three columns of four voxels, middle column is open sky"""
    vai = {
        0: [0.0, 1.0, 2.0, 1.0],
        1: [np.nan, np.nan, np.nan, np.nan],
        2: [1.0, 0.0, 0.0, 3.0],
    }
    rows = [
        (xbin, zbin, value)
        for xbin, column in vai.items()
        for zbin, value in enumerate(column)
    ]
    return pd.DataFrame(rows, columns=["xbin", "zbin", "vai"]).astype(float)


def empty_transect():
    return pd.DataFrame({"xbin": [], "zbin": [], "vai": []}, dtype=float)


def test_mean_leaf_height_scenario():
    m2 = calc_tls_mean_leaf_ht(scenario_transect())

    assert len(m2) == 3
    # (2.0 * 0.5 + 0.0 * 1.5) / (2.0 + 0.0)
    assert m2.loc[0, "height_bin"] == pytest.approx(0.5)
    assert m2.loc[1, "height_bin"] == pytest.approx(0.5)
    assert np.isnan(m2.loc[2, "height_bin"])
    assert np.isnan(m2.loc[2, "vai_z"])
    assert m2.loc[1, "vai_z"] == 0.0


def test_mean_leaf_height_ignores_sky_hits():
    m = pd.DataFrame({"xbin": [0.0, 0.0, 0.0], "zbin": [0.0, 4.0, 9.0], "vai": [1.0, 1.0, np.nan]})

    m2 = calc_tls_mean_leaf_ht(m)

    assert m2["height_bin"].iloc[0] == pytest.approx((0.5 + 4.5) / 2)


def test_mean_leaf_height_does_not_mutate_input():
    m = scenario_transect()
    calc_tls_mean_leaf_ht(m)
    assert list(m.columns) == ["xbin", "zbin", "vai"]


def test_mean_leaf_height_empty():
    m2 = calc_tls_mean_leaf_ht(empty_transect())

    assert m2.empty
    assert {"vai_z", "height_bin"} <= set(m2.columns)


def test_summary_matrix_scenario():
    summary = make_summary_matrix(calc_tls_mean_leaf_ht(scenario_transect()))

    assert list(summary.columns) == SUMMARY_COLUMNS
    assert list(summary["xbin"]) == [0.0, 1.0]

    col0 = summary.iloc[0]
    assert col0["sum_vai"] == pytest.approx(2.0)
    assert col0["n_cells"] == 2
    assert col0["max_ht"] == 0.0
    assert not col0["sky_hit"]

    col1 = summary.iloc[1]
    assert col1["n_cells"] == 0
    assert col1["sum_vai"] == 0.0
    assert col1["sky_hit"]
    assert np.isnan(col1["height_bin"])


def test_summary_matrix_columns():
    summary = make_summary_matrix(calc_tls_mean_leaf_ht(create_test_transect()))

    assert len(summary) == 3
    np.testing.assert_allclose(summary["sum_vai"], [4.0, 0.0, 4.0])
    np.testing.assert_allclose(summary["max_ht"], [3.0, 0.0, 3.0])
    # (1 * 1.5 + 2 * 2.5 + 1 * 3.5) / 4
    assert summary.loc[0, "height_bin"] == pytest.approx(2.5)
    assert summary.loc[0, "std_bin"] == pytest.approx(np.sqrt(0.5))
    assert list(summary["sky_hit"]) == [False, True, False]


def test_summary_matrix_empty():
    summary = make_summary_matrix(calc_tls_mean_leaf_ht(empty_transect()))

    assert summary.empty
    assert list(summary.columns) == SUMMARY_COLUMNS


def test_hit_matrix_keeps_sky_hits():
    m2 = calc_tls_mean_leaf_ht(scenario_transect().iloc[::-1])

    hit = make_hit_matrix(m2)

    assert list(hit.columns) == ["xbin", "zbin", "vai"]
    assert list(zip(hit["xbin"], hit["zbin"])) == [(0.0, 0.0), (0.0, 1.0), (1.0, 0.0)]
    assert hit.loc[0, "vai"] == 2.0
    assert hit.loc[1, "vai"] == 0.0
    assert np.isnan(hit.loc[2, "vai"])


def test_vai_profile():
    profile = calc_vai_profile(create_test_transect())

    assert list(profile["zbin"]) == [0.0, 1.0, 2.0, 3.0]
    np.testing.assert_allclose(profile["sum_vai"], [1.0, 1.0, 2.0, 4.0])
    np.testing.assert_allclose(profile["pavd"], np.array([1.0, 1.0, 2.0, 4.0]) / 3)
    assert profile["ratio"].sum() == pytest.approx(1.0)


def test_vai_profile_empty():
    profile = calc_vai_profile(empty_transect())
    assert profile.empty


def test_fhd():
    uniform = pd.DataFrame({"sum_vai": [1.0, 1.0, 1.0, 1.0]})
    single = pd.DataFrame({"sum_vai": [0.0, 5.0, 0.0]})

    assert calc_fhd(uniform) == pytest.approx(np.log(4))
    assert calc_fhd(single) == pytest.approx(0.0)
    assert calc_fhd(pd.DataFrame({"sum_vai": []})) == 0.0


def test_csc_keys_and_values():
    m2 = calc_tls_mean_leaf_ht(create_test_transect())

    variables = calc_tls_csc(m2, "test_scan.csv")

    assert list(variables) == CSC_VARIABLES
    assert variables["plot"] == "test_scan.csv"
    assert variables["transect_length"] == 2.0
    assert variables["max_ht"] == 3.0
    assert variables["mean_max_ht"] == pytest.approx(2.0)
    assert variables["mode_el"] == 3.0
    assert variables["mean_vai"] == pytest.approx(8.0 / 3)
    assert variables["max_vai"] == 4.0
    assert variables["sky_fraction"] == pytest.approx(100.0 / 3)
    assert variables["cover_fraction"] == pytest.approx(200.0 / 3)
    assert variables["deep_gap_fraction"] == pytest.approx(100.0 / 3)
    assert variables["rugosity"] >= 0
    assert variables["fhd"] > 0
    for key in CSC_VARIABLES[1:]:
        assert isinstance(variables[key], float)


def test_csc_mean_height_skips_sky_columns():
    m2 = calc_tls_mean_leaf_ht(create_test_transect())

    variables = calc_tls_csc(m2, "test_scan.csv")

    # columns 0 and 2: 2.5 and (1 * 0.5 + 3 * 3.5) / 4
    heights = np.array([2.5, 2.75])
    assert variables["mean_height"] == pytest.approx(heights.mean())
    assert variables["height_2"] == pytest.approx(heights.std(ddof=1))


def test_csc_zero_vai_counts_in_statistics():
    with_zero = pd.DataFrame({"xbin": [0.0, 0.0], "zbin": [0.0, 1.0], "vai": [1.0, 0.0]})
    with_sky = pd.DataFrame({"xbin": [0.0, 0.0], "zbin": [0.0, 1.0], "vai": [1.0, np.nan]})

    summary_zero = make_summary_matrix(calc_tls_mean_leaf_ht(with_zero))
    summary_sky = make_summary_matrix(calc_tls_mean_leaf_ht(with_sky))

    assert summary_zero.loc[0, "n_cells"] == 2
    assert summary_sky.loc[0, "n_cells"] == 1


def test_csc_empty_transect():
    variables = calc_tls_csc(calc_tls_mean_leaf_ht(empty_transect()), "empty.csv")

    assert list(variables) == CSC_VARIABLES
    assert variables["plot"] == "empty.csv"
    assert all(np.isnan(variables[key]) for key in CSC_VARIABLES[1:])


def test_csc_single_column():
    m = pd.DataFrame({"xbin": [0.0, 0.0], "zbin": [0.0, 1.0], "vai": [1.0, 1.0]})

    variables = calc_tls_csc(calc_tls_mean_leaf_ht(m), "single")

    assert variables["transect_length"] == 0.0
    assert np.isnan(variables["rumple"])
    assert np.isnan(variables["height_2"])
    assert variables["mean_height"] == pytest.approx(1.0)
