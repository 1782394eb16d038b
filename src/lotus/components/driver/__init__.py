"""
Driver component - submits fixtures and checks the engine's output.
"""

from .component import TestDriver, input_url, load_fixture
from .models import EXPECTED_FILE, INPUT_FILE, TestResult, TestStatus

__all__ = [
    # Entry points
    "TestDriver",
    "input_url",
    "load_fixture",
    # Models
    "EXPECTED_FILE",
    "INPUT_FILE",
    "TestResult",
    "TestStatus",
]
