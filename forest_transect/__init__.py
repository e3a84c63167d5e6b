"""
PyForest Transect - Canopy structural complexity from single LiDAR transects.

This package provides tools for handling voxelated TLS / PCL transects, including:
- Reading x, y, z, VAI scans from CSV files or tables
- Slicing a scan to a single transect
- Mean leaf height and canopy structural complexity (CSC) variables
- Summary and hit matrices
- Hit grid and PAVD plots
"""

__version__ = "0.1.0"

from .config_options import TransectOptions
from .loader import NO_DATA, InvalidInputKind, PathSource, TableSource
from .processor import TransectProcessor, TransectResult, process_tls

__all__ = [
    "NO_DATA",
    "InvalidInputKind",
    "PathSource",
    "TableSource",
    "TransectOptions",
    "TransectProcessor",
    "TransectResult",
    "process_tls",
]
