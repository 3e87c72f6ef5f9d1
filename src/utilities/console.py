"""Rich console output helpers."""

from rich.console import Console
from rich.table import Table

console = Console()


def ok(msg: str):
    """Print success message."""
    console.print(f"  [green]✓[/green] {msg}")


def fail(msg: str):
    """Print failure message."""
    console.print(f"  [red]✗[/red] {msg}")


def header(msg: str):
    """Print bold header."""
    console.print(f"\n[bold]{msg}[/bold]")


def print_summary(solver):
    """Table of the final metrics of a run."""
    m = solver.metrics
    header(f"{solver.params.method}: {m.steps} steps, t = {m.simulated_time:.4g} s")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Outer iterations (total)", str(m.total_outer_iterations))
    table.add_row("Final residual", f"{m.final_residual:.3e}")
    table.add_row("Max Courant", f"{m.max_courant:.4f}")
    table.add_row("Max Reynolds", f"{m.max_reynolds:.4f}")
    table.add_row("Continuity residual", f"{m.continuity_residual:.3e}")
    table.add_row("Min temperature [K]", f"{m.min_temperature:.2f}")
    table.add_row("Wall time [s]", f"{m.wall_time_seconds:.2f}")
    console.print(table)

    if m.converged:
        ok("All timesteps converged")
    else:
        fail(f"{m.nonconverged_steps} timestep(s) did not converge")
    if m.out_of_range_steps:
        fail(f"{m.out_of_range_steps} timestep(s) below the property validity floor")
    if not m.finite:
        fail("Non-finite values in the final fields")
