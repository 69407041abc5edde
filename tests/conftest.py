from __future__ import annotations

import sys
from pathlib import Path

import pytest
import sympy as sp


# Allow `pytest` to import the package directly from the src layout
# without requiring an editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture
def xyz():
    return sp.symbols("x y z")
