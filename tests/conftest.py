from __future__ import annotations

import sys
from pathlib import Path

import pytest


# Make `import app` and `import docrelay` work when pytest is started from
# another directory or through its console script.
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(autouse=True)
def _isolated_font_cache():
    """System font lookups are cached per process; start every test clean."""
    from docrelay.processors.font_manager import clear_font_cache

    clear_font_cache()
    yield
    clear_font_cache()
