from __future__ import annotations

import sys
from pathlib import Path

import pytest


# Allow `pytest` to import the package directly from the src layout
# without requiring an editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from tfpv_analysis import (  # noqa: E402
    TFPVAnalyzer,
    limit_cycle_model,
    michaelis_menten_model,
)


@pytest.fixture
def mm():
    return michaelis_menten_model()


@pytest.fixture
def mm_session(mm):
    return TFPVAnalyzer(mm, 1)


@pytest.fixture
def circle():
    return limit_cycle_model()
