"""Tests for the fluid property models."""

import logging

import numpy as np
import pytest

from pisoflow import (
    ConstantProperties,
    OutOfRange,
    SodiumProperties,
    Valid,
    create_fluid,
)


class TestSodium:
    """Liquid sodium correlations."""

    def test_density_near_melting_point(self):
        """About 926 kg/m^3 at 371 K."""
        assert SodiumProperties().density(371.0) == pytest.approx(926.0, abs=2.0)

    def test_density_decreases_with_temperature(self):
        """Thermal expansion: rho falls monotonically."""
        rho = SodiumProperties().density(np.linspace(400.0, 1500.0, 50))
        assert np.all(np.diff(rho) < 0)

    def test_viscosity_decreases_with_temperature(self):
        """Liquid metal viscosity falls with temperature."""
        mu = SodiumProperties().viscosity(np.linspace(400.0, 1500.0, 50))
        assert np.all(np.diff(mu) < 0)
        assert 1e-4 < mu[-1] < mu[0] < 1e-3

    def test_evaluate_returns_arrays(self):
        """All four properties come back on the temperature grid and positive."""
        T = np.linspace(400.0, 1000.0, 7)
        for prop in SodiumProperties().evaluate(T):
            assert prop.shape == T.shape
            assert np.all(prop > 0)


class TestRangeCheck:
    """Warnings only strictly below the validity floor."""

    def test_at_floor_is_valid(self, caplog):
        """T == T_min is inside the range and logs nothing."""
        fluid = SodiumProperties()
        with caplog.at_level(logging.WARNING):
            status = fluid.check_range(np.array([fluid.T_min, 500.0]))
        assert isinstance(status, Valid)
        assert status.ok
        assert caplog.records == []

    def test_below_floor_warns(self, caplog):
        """The coldest value is reported and a warning is logged."""
        fluid = SodiumProperties()
        T = np.array([500.0, fluid.T_min - 1e-6, 400.0])
        with caplog.at_level(logging.WARNING):
            status = fluid.check_range(T)
        assert isinstance(status, OutOfRange)
        assert not status.ok
        assert status.value == pytest.approx(fluid.T_min - 1e-6)
        assert status.floor == fluid.T_min
        assert any("below the validity limit" in r.message for r in caplog.records)

    def test_evaluation_continues_below_floor(self):
        """Correlations are extrapolated, not clipped."""
        rho, mu, k, cp = SodiumProperties().evaluate(np.array([300.0]))
        assert np.isfinite(rho[0]) and np.isfinite(mu[0])
        assert rho[0] > SodiumProperties().density(371.0)


class TestConstant:
    """Temperature-independent model."""

    def test_uniform_values(self):
        """Every node gets the configured constants."""
        rho, mu, k, cp = ConstantProperties(rho=2.0, mu=3.0, k=4.0, cp=5.0).evaluate(np.zeros(4))
        np.testing.assert_array_equal(rho, 2.0)
        np.testing.assert_array_equal(mu, 3.0)
        np.testing.assert_array_equal(k, 4.0)
        np.testing.assert_array_equal(cp, 5.0)

    def test_never_out_of_range_by_default(self):
        """Floor is 0 K."""
        assert ConstantProperties().check_range(np.array([1.0])).ok


class TestFactory:
    """Lookup by configuration name."""

    def test_create_by_name(self):
        """Names map to models and forward options."""
        assert isinstance(create_fluid("Sodium"), SodiumProperties)
        fluid = create_fluid("constant", rho=850.0)
        assert isinstance(fluid, ConstantProperties)
        assert fluid.rho == 850.0

    def test_unknown_fluid(self):
        """Unknown names are rejected."""
        with pytest.raises(ValueError, match="Unknown fluid"):
            create_fluid("mercury")
