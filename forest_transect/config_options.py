from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Tuple


@dataclass
class TransectOptions:
    """Configuration options for transect processing and rendering."""
    max_height: float = 41
    vai_limits: Optional[Tuple[float, float]] = None
    low_color: str = "#e0e0e0"  # gray88
    high_color: str = "darkgreen"
    na_color: str = "white"
    figure_size: Tuple[float, float] = (8, 6)
    dpi: int = 300
    close_figures: bool = True

    def __post_init__(self):
        """Set the default VAI scale and check the plotting bounds."""
        if self.vai_limits is None:
            self.vai_limits = (0, 8)
        self.vai_limits = tuple(self.vai_limits)
        self.figure_size = tuple(self.figure_size)

        if len(self.vai_limits) != 2 or self.vai_limits[0] >= self.vai_limits[1]:
            raise ValueError(f"Invalid VAI limits: {self.vai_limits}")
        if self.max_height <= 0:
            raise ValueError(f"max_height must be positive, got {self.max_height}")

    @classmethod
    def from_dict(cls, config: Dict[str, Any]):
        """Build options from a config dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (config or {}).items() if k in known})
