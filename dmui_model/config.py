"""
Runtime configuration for the DMUI pipeline.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

# Cap assigned to the open-ended top bracket before midpoints are computed
DEFAULT_TOP_BRACKET_CAP = 1_000_000.0

# Strings that mark an unbounded BracketMax (compared case-insensitively)
DEFAULT_UNBOUNDED_MARKERS = ("inf", "infinity", "unbounded", "or more")

TOP_BRACKET_CAP_ENV = "DMUI_TOP_BRACKET_CAP"


@dataclass(frozen=True)
class DMUIConfig:
    """
    Modeling parameters for a DMUI run.

    Attributes:
        top_bracket_cap: Value substituted for the unbounded top bracket's
            BracketMax (dollars)
        unbounded_markers: Text values in BracketMax that mean "no limit"
    """
    top_bracket_cap: float = DEFAULT_TOP_BRACKET_CAP
    unbounded_markers: Tuple[str, ...] = DEFAULT_UNBOUNDED_MARKERS

    def __post_init__(self):
        if not self.top_bracket_cap > 0:
            raise ValueError(
                f"top_bracket_cap must be positive, got {self.top_bracket_cap}"
            )

    def is_unbounded_marker(self, value) -> bool:
        """True if a raw BracketMax value stands for an unbounded bracket."""
        if isinstance(value, str):
            return value.strip().lower() in self.unbounded_markers
        try:
            return float(value) == float("inf")
        except (TypeError, ValueError):
            return False

    @classmethod
    def from_env(cls, top_bracket_cap: Optional[float] = None) -> "DMUIConfig":
        """
        Build a config, reading overrides from the environment.

        Args:
            top_bracket_cap: Explicit cap. If None, tries the DMUI_TOP_BRACKET_CAP
                environment variable, then falls back to the default.
        """
        if top_bracket_cap is None:
            raw = os.environ.get(TOP_BRACKET_CAP_ENV)
            if raw:
                try:
                    top_bracket_cap = float(raw.replace(",", "").replace("_", ""))
                except ValueError:
                    raise ValueError(
                        f"{TOP_BRACKET_CAP_ENV}={raw!r} is not a number"
                    ) from None
                logger.info(f"Using top bracket cap ${top_bracket_cap:,.0f} from environment")

        if top_bracket_cap is None:
            return cls()
        return cls(top_bracket_cap=top_bracket_cap)
