"""
Pytest configuration file for lazyweave tests.

This file ensures that the repository root is in the Python path
so that test files can import the lazyweave package.
"""

import sys
from pathlib import Path

# Add the parent directory to the Python path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import pytest

from lazyweave.config import reset_settings
from lazyweave.utils import CountingIterator


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Every test starts from default settings, unaffected by the caller's environment"""
    for name in ("LAZYWEAVE_MEMO_CAPACITY", "LAZYWEAVE_LOG_LEVEL", "LAZYWEAVE_LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def counted():
    """Factory wrapping an iterable in a CountingIterator"""
    def _make(iterable):
        return CountingIterator(iterable)
    return _make
