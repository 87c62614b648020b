import copy
import sys
from pathlib import Path

import pytest

# Repo root on sys.path so radix_agent_kit.tests.test_utils imports under importlib mode.
_repo_root_str = str(Path(__file__).parent.parent)
if _repo_root_str not in sys.path:
    sys.path.insert(0, _repo_root_str)


@pytest.fixture(autouse=True)
def isolated_config():
    """Run every test against an empty CONFIG, whatever config.json holds."""
    from radix_agent_kit.core import config

    original = copy.deepcopy(config.CONFIG)
    config.set_config({})
    yield
    config.set_config(original)
