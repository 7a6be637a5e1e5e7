"""Every command test reads configuration, so none may see the real ~/.repodiff."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolated_home(isolated_home: Path) -> Path:
    return isolated_home
