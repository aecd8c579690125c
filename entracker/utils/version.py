"""Project version helpers."""

from pathlib import Path

import tomlkit

__all__ = ["get_pyproject_version"]

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def get_pyproject_version(pyproject_path: Path | None = None) -> str:
    """Read Entracker's version from pyproject.toml.

    Args:
        pyproject_path (Path | None): File to read; defaults to the project root.

    Returns:
        str: The declared version, or "unknown" when it cannot be determined
    """
    toml_file = pyproject_path or PROJECT_ROOT / "pyproject.toml"
    if not toml_file.is_file():
        return "unknown"

    with toml_file.open(encoding="utf-8") as f:
        toml_data = tomlkit.load(f)

    project = toml_data.get("project", {})
    return str(project.get("version", "unknown"))
