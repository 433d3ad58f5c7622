import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)


@pytest.fixture(autouse=True)
def _clean_config_env(monkeypatch):
    for name in ("CARDSCAN_CONFIG", "CARDSCAN_CONFIDENCE_THRESHOLD", "CARDSCAN_ALLOW_TEST_CARDS"):
        monkeypatch.delenv(name, raising=False)
