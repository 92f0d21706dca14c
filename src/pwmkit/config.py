"""Configuration parameters for pwmkit."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from pwmkit.errors import DomainError

NUCLEOTIDES = "ACGT"
MIN_PROB = 1e-3
SUM_TOLERANCE = 1e-4


@dataclass(frozen=True)
class ScanConfig:
    """How a PWM is prepared before it is used for scanning.

    Attributes
    ----------
    smooth : bool
        Apply pseudocount smoothing when any probability is too small.
    pseudocount : float, optional
        Explicit pseudocount; overrides the automatic smoothing when set.
    validate : bool
        Validate the PWM before use.
    """

    smooth: bool = True
    pseudocount: Optional[float] = None
    validate: bool = True


def create_scan_config(
    smooth: bool = True,
    pseudocount: Optional[float] = None,
    validate: bool = True,
) -> ScanConfig:
    """Factory function for ScanConfig."""
    if pseudocount is not None:
        if not math.isfinite(pseudocount):
            raise DomainError(f"pseudocount {pseudocount} is not a finite number")
        if pseudocount < 0:
            raise DomainError(f"pseudocount {pseudocount} is less than 0")
    return ScanConfig(smooth=smooth, pseudocount=pseudocount, validate=validate)
