"""Cross-project utilities (console output, result IO)."""

from utilities.io import (  # noqa: F401
    ensure_output_dir,
    load_simulation_data,
    read_profiles,
    save_simulation_data,
    write_profiles,
)

__all__ = [
    "ensure_output_dir",
    "load_simulation_data",
    "read_profiles",
    "save_simulation_data",
    "write_profiles",
]
