"""
Pytest configuration and common fixtures for pwmkit tests.
"""
import tempfile
from pathlib import Path

import pytest

from pwmkit.models import Pwm


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def pwm_a():
    """Single position that is always A."""
    return Pwm.from_mapping({0: {"A": 1, "C": 0, "G": 0, "T": 0}})


@pytest.fixture
def pwm_eq2():
    """Two uniform positions."""
    return Pwm.from_mapping(
        {
            0: {"A": 0.25, "C": 0.25, "G": 0.25, "T": 0.25},
            1: {"A": 0.25, "C": 0.25, "G": 0.25, "T": 0.25},
        }
    )


@pytest.fixture
def pwm_aca():
    """Three positions favouring the motif ACA."""
    return Pwm.from_mapping(
        {
            0: {"A": 0.5, "C": 0.3, "G": 0.1, "T": 0.1},
            1: {"A": 0.05, "C": 0.75, "G": 0.1, "T": 0.1},
            2: {"A": 0.5, "C": 0.3, "G": 0.1, "T": 0.1},
        }
    )
