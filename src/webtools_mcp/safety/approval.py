"""Session approval mode and confirmation policy for tool calls.

The approval mode decides whether a tool call needs the user's confirmation
before it runs.  Read-only web tools (search, fetch, image) run without
confirmation in every mode except ``default``; ``plan`` allows them because
they only retrieve information.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)


class ApprovalMode(str, Enum):
    DEFAULT = "default"
    AUTO_EDIT = "auto_edit"
    YOLO = "yolo"
    PLAN = "plan"


class ConfirmationOutcome(str, Enum):
    PROCEED_ONCE = "proceed_once"
    PROCEED_ALWAYS = "proceed_always"
    CANCEL = "cancel"


# Modes in which read-only web tools skip confirmation
_AUTO_APPROVE_READ_ONLY = frozenset(
    {ApprovalMode.AUTO_EDIT, ApprovalMode.YOLO, ApprovalMode.PLAN}
)


class ApprovalState:
    """Holds the approval mode for the current server session.

    Args:
        mode: Initial mode, as an ``ApprovalMode`` or its string value.
            Unknown strings fall back to ``default`` with a warning.
    """

    def __init__(self, mode: "ApprovalMode | str" = ApprovalMode.DEFAULT):
        self._lock = threading.Lock()
        self._mode = _coerce_mode(mode)

    @property
    def mode(self) -> ApprovalMode:
        return self._mode

    def set_mode(self, mode: "ApprovalMode | str") -> ApprovalMode:
        """Switch to *mode*; returns the new mode."""
        new_mode = ApprovalMode(mode)
        with self._lock:
            previous, self._mode = self._mode, new_mode
        if previous != new_mode:
            logger.info("Approval mode changed: %s -> %s", previous.value, new_mode.value)
        return new_mode

    def toggle(self, mode: ApprovalMode) -> ApprovalMode:
        """Enable *mode*, or return to ``default`` if it is already active."""
        with self._lock:
            previous = self._mode
            self._mode = ApprovalMode.DEFAULT if previous == mode else mode
            current = self._mode
        logger.info("Approval mode toggled: %s -> %s", previous.value, current.value)
        return current

    def auto_approves_read_only(self) -> bool:
        return self._mode in _AUTO_APPROVE_READ_ONLY


@dataclass
class ConfirmationDetails:
    """What the host should show the user before running a tool call."""

    title: str
    prompt: str
    state: ApprovalState = field(repr=False)
    urls: List[str] = field(default_factory=list)
    kind: str = "info"

    def on_confirm(self, outcome: ConfirmationOutcome) -> None:
        """Apply the user's answer; "always" upgrades the session to auto_edit."""
        if ConfirmationOutcome(outcome) == ConfirmationOutcome.PROCEED_ALWAYS:
            self.state.set_mode(ApprovalMode.AUTO_EDIT)


def confirmation_for(
    state: ApprovalState,
    title: str,
    prompt: str,
    urls: Optional[List[str]] = None,
) -> Optional[ConfirmationDetails]:
    """Return confirmation details for a read-only tool call, or None if auto-approved."""
    if state.auto_approves_read_only():
        return None
    return ConfirmationDetails(title=title, prompt=prompt, state=state, urls=list(urls or []))


def _coerce_mode(mode: "ApprovalMode | str") -> ApprovalMode:
    try:
        return ApprovalMode(mode)
    except ValueError:
        logger.warning("Unknown approval mode %r, using 'default'", mode)
        return ApprovalMode.DEFAULT
