"""Debounce guard for external capture triggers.

This module contains the DebounceGuard class. External triggers (a
shortcut, a share action) only record a pending request; the request is
processed later when the app becomes active. Repeated triggers within
the cooldown and an unchanged clipboard are both ignored.
"""

import logging
import time
from typing import TYPE_CHECKING, Callable, Optional

from ..config import Config
from ..database import ScratchRepository
from ..models import CaptureResult

if TYPE_CHECKING:
    from ..classifiers import Pasteboard
    from ..processors import CaptureProcessor

__all__ = ["DebounceGuard"]

logger = logging.getLogger(__name__)

PENDING_KEY = "pendingClipboardCapture"
LAST_REQUEST_KEY = "lastCaptureRequestAt"
LAST_PROCESSED_KEY = "lastCaptureProcessedAt"
LAST_CHANGE_COUNT_KEY = "lastClipboardChangeCount"


class DebounceGuard:
    """Cooldown and clipboard-generation check in front of the capture processor.

    State lives in a scratch key-value store so it survives the process
    being relaunched by the trigger.

    Attributes:
        scratch: Key-value store for the guard state
        cooldown: Minimum seconds between two requests or two captures
    """

    def __init__(
        self,
        scratch: ScratchRepository,
        clock: Callable[[], float] = time.time,
        cooldown: float = Config.CAPTURE_COOLDOWN_SECONDS,
    ) -> None:
        self.scratch: ScratchRepository = scratch
        self.cooldown: float = cooldown
        self._clock = clock

    def mark_pending(self) -> bool:
        """Record a capture request unless one was recorded within the cooldown.

        Returns:
            True when the request was recorded
        """
        now = self._clock()
        last_request = self._get_float(LAST_REQUEST_KEY)
        if last_request is not None and now - last_request <= self.cooldown:
            logger.debug("Capture request ignored, %.2fs since last request", now - last_request)
            return False

        self.scratch.set(LAST_REQUEST_KEY, repr(now))
        self.scratch.set(PENDING_KEY, "1")
        logger.info("Capture request recorded")
        return True

    def consume_pending(self) -> bool:
        """Read and clear the pending flag."""
        return self.scratch.pop(PENDING_KEY) == "1"

    async def handle_pending(
        self,
        processor: "CaptureProcessor",
        pasteboard: "Pasteboard",
    ) -> Optional[CaptureResult]:
        """Run a pending capture through the processor.

        The pending flag is consumed first, so a skipped request is not
        retried.

        Args:
            processor: Capture processor that performs the capture
            pasteboard: Current clipboard

        Returns:
            The capture result, or None when nothing ran
        """
        if not self.consume_pending():
            return None

        now = self._clock()
        last_processed = self._get_float(LAST_PROCESSED_KEY)
        if last_processed is not None and now - last_processed < self.cooldown:
            logger.info("Pending capture skipped, %.2fs since last capture", now - last_processed)
            return None

        change_count = pasteboard.change_count()
        last_change_count = self.scratch.get(LAST_CHANGE_COUNT_KEY)
        if last_change_count is not None and last_change_count == str(change_count):
            logger.info("Pending capture skipped, clipboard unchanged (generation %s)", change_count)
            return None

        self.scratch.set(LAST_CHANGE_COUNT_KEY, str(change_count))
        self.scratch.set(LAST_PROCESSED_KEY, repr(now))

        result = await processor.handle_clipboard(pasteboard)
        if result.success:
            logger.info("Pending capture saved entry %s", result.entry_id)
        else:
            logger.warning("Pending capture failed: %s", result.error)
        return result

    def _get_float(self, key: str) -> Optional[float]:
        value = self.scratch.get(key)
        if value is None:
            return None
        try:
            return float(value)
        except ValueError:
            logger.warning("Ignoring malformed scratch value %s=%r", key, value)
            return None
