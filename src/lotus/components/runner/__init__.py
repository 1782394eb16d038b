"""
Runner component - coordinates one full test run and reports its outcome.
"""

from .component import RunCoordinator, default_client
from .models import RunOutput, RunPlan

__all__ = [
    # Entry points
    "RunCoordinator",
    "default_client",
    # Models
    "RunOutput",
    "RunPlan",
]
