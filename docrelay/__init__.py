# docrelay/__init__.py
"""
docrelay - Messaging bot document relay

Receives PDFs, images and presentations from chat users, runs them through
OCR, machine translation and file conversion services, and replies with the
transformed artifact.
"""

from pathlib import Path


def _get_version() -> str:
    """
    Read the version from pyproject.toml.

    Falls back to the hard-coded version when pyproject.toml is not shipped
    next to the package (e.g. installed as a wheel).

    Returns:
        str: version string (e.g. "0.3.0")
    """
    try:
        import tomllib  # Python 3.11+ standard library

        pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            with open(pyproject_path, "rb") as f:
                data = tomllib.load(f)
            return data.get("project", {}).get("version", "0.0.0")
    except (ImportError, OSError, ValueError):
        pass

    return "0.3.0"


__version__ = _get_version()
__app_name__ = "docrelay"
