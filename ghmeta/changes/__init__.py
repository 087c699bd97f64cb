"""Changed-file detection strategies.

Two interchangeable :class:`ChangeDetector` implementations exist:

* :class:`DiffDetector` compares commits in the local clone, widening a
  shallow history in bounded steps.
* :class:`ApiDetector` asks the GitHub REST API for the file list.

:func:`select_detector` chooses between them from the action inputs.
"""

from __future__ import annotations

from .api import ApiDetector
from .git import DiffDetector, Git
from .protocol import ZERO_SHA, ChangeDetector, ChangeRequest
from .selection import resolve_method, select_detector

__all__ = [
    "ZERO_SHA",
    "ApiDetector",
    "ChangeDetector",
    "ChangeRequest",
    "DiffDetector",
    "Git",
    "resolve_method",
    "select_detector",
]
