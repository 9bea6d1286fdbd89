# Ensure project root is on sys.path so 'ircplug' is importable when running pytest from
# environments that don't automatically include it.
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).parent.resolve()
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def reset_failure_counter():
    """Clear failure counts after each test so totals don't leak between tests."""
    yield
    from ircplug.logging_config import failure_counter

    failure_counter.clear()
