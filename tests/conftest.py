import copy
import sys
from pathlib import Path

# Ensure package import for tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from Optical_Web.config import Config


@pytest.fixture(autouse=True)
def _restore_config():
    """Undo any ``Config`` changes a test makes."""

    saved = {
        key: copy.deepcopy(value)
        for key, value in vars(Config).items()
        if not key.startswith("_") and not callable(value)
        and not isinstance(value, (staticmethod, classmethod))
    }
    yield
    for key, value in saved.items():
        setattr(Config, key, value)
