"""
==============================================================================
Frame Session Module
==============================================================================

Gate that brackets a sequence of decoded frames.

States:
-------
- IDLE: initial state, decoding is refused
- ACTIVE: a frame sequence is open, decoding is allowed

Nested sequences are not supported: start() on an ACTIVE session returns
False and leaves the state unchanged. end() is idempotent.

Usage:
------
    session = FrameSession()
    with session:
        outcome = scanner.process_frame(frame, session)

==============================================================================
"""

from __future__ import annotations

import logging
from enum import Enum


# Module logger
logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


class FrameSession:
    """
    Idle/Active state machine consumed by BarcodeScanner.process_frame.

    Owns no image data. Usable as a context manager; leaving the block (or
    garbage-collecting an active session) ends the sequence.
    """

    def __init__(self) -> None:
        self._state = SessionState.IDLE

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is SessionState.ACTIVE

    def start(self) -> bool:
        """
        Open a new frame sequence.

        Returns:
            True if the session moved IDLE -> ACTIVE, False if already active
        """
        if self.is_active:
            logger.warning("Frame sequence already started")
            return False

        self._state = SessionState.ACTIVE
        logger.info("New frame sequence started")
        return True

    def end(self) -> None:
        """Close the frame sequence; a no-op when idle."""
        if not self.is_active:
            return

        self._state = SessionState.IDLE
        logger.info("Frame sequence ended")

    def __enter__(self) -> "FrameSession":
        if not self.start():
            raise RuntimeError("Frame sequence already started")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.end()

    def __del__(self) -> None:
        if getattr(self, "_state", None) is SessionState.ACTIVE:
            self.end()

    def __repr__(self) -> str:
        return f"FrameSession(state={self._state.value!r})"
