"""Pytest configuration and fixtures for the porous-duct solver tests."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def rng():
    """Seeded generator so random systems are reproducible."""
    return np.random.default_rng(2689)


@pytest.fixture
def constant_params():
    """Small isothermal-property case: water-like fluid, 50 nodes, 1 cm duct."""
    return {
        "L": 0.01,
        "N": 50,
        "dt": 1e-4,
        "t_end": 5e-4,
        "K": 1e-6,
        "fluid": "constant",
        "u_inlet": 0.01,
        "T_initial": 300.0,
        "T_inlet": 350.0,
        "T_outlet": 300.0,
        "n_correctors": 3,
        "tolerance": 1e-9,
        "max_outer_iterations": 500,
    }


@pytest.fixture
def sodium_params():
    """Sodium case kept above the melting point everywhere."""
    return {
        "L": 0.01,
        "N": 50,
        "dt": 1e-4,
        "t_end": 3e-4,
        "K": 1e-6,
        "fluid": "sodium",
        "u_inlet": 0.01,
        "T_initial": 400.0,
        "T_inlet": 1000.0,
        "T_outlet": 500.0,
        "n_correctors": 2,
        "tolerance": 1e-8,
        "max_outer_iterations": 500,
    }
