import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_package_logging():
    """Drop the console handler the CLI installs so it never outlives a test."""
    pkg = logging.getLogger("sfoedit")
    level = pkg.level
    yield
    for h in list(pkg.handlers):
        if getattr(h, "name", None) == "sfoedit_console":
            pkg.removeHandler(h)
    pkg.setLevel(level)
