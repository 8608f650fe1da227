"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import logging
import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local apidiff package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of apidiff modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("apidiff"):
        del sys.modules[module_name]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep the user's global config and APIDIFF__ env vars out of every test."""
    import apidiff.config.loader as loader

    monkeypatch.setattr(loader, "GLOBAL_CONFIG_PATH", tmp_path / "no-global-config.yaml")
    for key in list(os.environ):
        if key.upper().startswith("APIDIFF__"):
            monkeypatch.delenv(key, raising=False)
    yield
    logging.getLogger().handlers.clear()
