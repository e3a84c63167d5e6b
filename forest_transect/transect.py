"""
Slicing of a TLS scan into a single PCL-style transect.
"""

import logging

logger = logging.getLogger(__name__)

TRANSECT_COLUMNS = ("xbin", "zbin", "vai")


def slice_transect(df, slice_index):
    """
    Select the rows of one scan line.

    Parameters:
    ----------
    df : pandas.DataFrame
        Scan with columns x, y, z, vai.
    slice_index : int
        Value of x to keep.

    Returns:
    -------
    pandas.DataFrame
        Matching rows in their original order. Empty when nothing matches.
    """
    transect = df.loc[df["x"] == slice_index].reset_index(drop=True)
    if transect.empty:
        logger.warning(f"Slice {slice_index} matches no rows, transect is empty")
    else:
        logger.info(f"Slice {slice_index}: {len(transect)} of {len(df)} rows kept")
    return transect


def rename_to_transect(df):
    """Rename y -> xbin and z -> zbin, the y axis being distance along the transect."""
    m1 = df.rename(columns={"y": "xbin", "z": "zbin"})
    return m1.loc[:, list(TRANSECT_COLUMNS)].copy()
