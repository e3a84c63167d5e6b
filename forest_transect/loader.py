"""
Loading of voxelated TLS scans.

A scan arrives either as a path to a headerless four column CSV
(x, y, z, vai) or as an in-memory ``pandas.DataFrame``. The kind of source
is resolved once, by :func:`as_source`, and everything downstream works on
a ``DataFrame`` with the canonical column names.

Missing VAI (a sky hit, i.e. no canopy return) is stored as ``NO_DATA``,
which is ``numpy.nan``. A VAI of ``0.0`` is a real measurement.
"""

import os
import logging
from dataclasses import dataclass
from typing import Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

NO_DATA = np.nan
TLS_COLUMNS = ["x", "y", "z", "vai"]


class InvalidInputKind(TypeError):
    """Raised when a scan source is neither a file path nor a table."""


@dataclass(frozen=True)
class PathSource:
    path: Union[str, os.PathLike]

    @property
    def name(self):
        return os.path.basename(os.fspath(self.path))


@dataclass(frozen=True)
class TableSource:
    table: pd.DataFrame
    name: str = "transect"


def as_source(obj):
    """
    Resolve a loose input into a ``PathSource`` or ``TableSource``.

    Parameters:
    ----------
    obj : PathSource, TableSource, str, os.PathLike or pandas.DataFrame
        The scan to process.

    Returns:
    -------
    PathSource or TableSource

    Raises:
    ------
    InvalidInputKind
        If ``obj`` is none of the accepted kinds.
    """
    if isinstance(obj, (PathSource, TableSource)):
        return obj
    if isinstance(obj, (str, os.PathLike)):
        return PathSource(obj)
    if isinstance(obj, pd.DataFrame):
        return TableSource(obj)
    raise InvalidInputKind(
        f"Expected a file path or a DataFrame, got {type(obj).__name__}"
    )


def read_tls(source):
    """
    Read a TLS scan into a DataFrame with columns x, y, z and vai.

    Parameters:
    ----------
    source : PathSource or TableSource
        Resolved scan source, see :func:`as_source`.

    Returns:
    -------
    tuple
        ``(DataFrame, name)`` where name is the file basename or the table name.
    """
    if isinstance(source, PathSource):
        logger.info(f"Reading TLS scan from {source.path}")
        df = pd.read_csv(
            source.path,
            header=None,
            skip_blank_lines=False,
            na_values=["NA", ""],
        )
        if df.shape[1] != len(TLS_COLUMNS):
            raise ValueError(
                f"TLS file {source.path} needs {len(TLS_COLUMNS)} columns "
                f"(x, y, z, vai), got {df.shape[1]}"
            )
        df.columns = TLS_COLUMNS
        df = df.astype(float)
        return df, source.name

    if isinstance(source, TableSource):
        table = source.table
        if table.shape[1] < len(TLS_COLUMNS):
            raise ValueError(
                f"TLS table needs {len(TLS_COLUMNS)} columns (x, y, z, vai), "
                f"got {table.shape[1]}"
            )
        df = table.iloc[:, : len(TLS_COLUMNS)].copy()
        df.columns = TLS_COLUMNS
        df = df.astype(float)
        logger.info(f"Using in-memory TLS table '{source.name}' ({len(df)} rows)")
        return df, source.name

    raise InvalidInputKind(
        f"Expected PathSource or TableSource, got {type(source).__name__}"
    )
