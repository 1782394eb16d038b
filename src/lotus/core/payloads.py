"""
JSON payload decoding shared by fixtures and the event route.
"""

from __future__ import annotations

import json
from typing import Any


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON value")


def loads_strict(raw: str | bytes) -> Any:
    """Parse a JSON document, rejecting the NaN and Infinity literals.

    Raises ValueError for any malformed document.
    """
    return json.loads(raw, parse_constant=_reject_constant)
