"""Tests for result output."""

import io

import numpy as np

from pisoflow import PISOSolver
from utilities.console import print_summary
from utilities.io import load_simulation_data, read_profiles, write_profiles


class TestProfiles:
    """Final-timestep text output."""

    def test_three_lines_comma_separated(self):
        """u, p and T each occupy one line of N values."""
        u = np.array([0.01, 0.02, 0.03])
        p = np.array([3.0, 2.0, 0.0])
        T = np.array([400.0, 350.0, 300.0])
        buf = io.StringIO()
        write_profiles(buf, u, p, T)
        lines = buf.getvalue().strip().splitlines()
        assert len(lines) == 3
        assert all(len(line.split(", ")) == 3 for line in lines)

        buf.seek(0)
        u2, p2, T2 = read_profiles(buf)
        np.testing.assert_allclose(u2, u, rtol=1e-10)
        np.testing.assert_allclose(p2, p, rtol=1e-10)
        np.testing.assert_allclose(T2, T, rtol=1e-10)


class TestSimulationData:
    """HDF5 archive of a finished run."""

    def test_save_and_load(self, constant_params, tmp_path):
        """All four tables are written and the fields match the solver."""
        solver = PISOSolver(**constant_params)
        solver.solve(n_steps=2)
        path = tmp_path / "run" / "solution.h5"
        solver.save(path)

        data = load_simulation_data(path)
        assert set(data) == {"params", "metrics", "time_series", "fields"}
        assert data["params"]["N"].iloc[0] == constant_params["N"]
        assert data["metrics"]["steps"].iloc[0] == 2
        assert len(data["time_series"]) == 2
        np.testing.assert_allclose(data["fields"]["T"].to_numpy(), solver.fields.T)

    def test_summary_prints(self, constant_params, capsys):
        """Console summary renders without error."""
        solver = PISOSolver(**constant_params)
        solver.solve(n_steps=1)
        print_summary(solver)
        assert "steps" in capsys.readouterr().out


class TestPlots:
    """Profile and convergence figures."""

    def test_generate_plots(self, constant_params, tmp_path):
        """Both figures are written; nothing is uploaded without an active run."""
        import matplotlib

        matplotlib.use("Agg")
        from utilities.plotting import generate_plots_for_run

        solver = PISOSolver(**constant_params)
        solver.solve(n_steps=2)
        paths = generate_plots_for_run(solver, tmp_path / "plots")
        assert {p.name for p in paths} == {"profiles.pdf", "convergence.pdf"}
        assert all(p.exists() for p in paths)


class TestSweepNames:
    """Parent run names for multiruns."""

    def test_placeholders_resolved(self):
        """Both {key} and ${key} forms take the case value."""
        from omegaconf import OmegaConf

        from utilities.mlflow import resolve_sweep_name

        cfg = OmegaConf.create({"case": {"coupling": "SIMPLEC", "N": 200, "source_zones": []}})
        assert resolve_sweep_name("dt-{coupling}-N${N}", cfg) == "dt-SIMPLEC-N200"
        assert resolve_sweep_name("sweep", cfg) == "sweep"
