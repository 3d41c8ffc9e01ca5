# mini_fem/config.py
"""
Kernel configuration and defaults.
"""

from dataclasses import dataclass


@dataclass
class FEMConfig:
    """Global kernel configuration."""

    # Mesh files
    float_precision: int = 17     # %.17g round-trips every double exactly
    comment_char: str = "%"

    # Assembly
    sparse_threshold: int = 2000  # ndof above which assembly defaults to sparse
    zero_length_tol: float = 1e-12

    # Solver
    cond_limit: float = 1e12

    # Logging
    log_level: str = "INFO"

    def float_format(self) -> str:
        return f"%.{self.float_precision}g"


# Global config instance
CONFIG = FEMConfig()
