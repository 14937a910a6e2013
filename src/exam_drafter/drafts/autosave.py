"""
Module: drafts.autosave

Purpose:
    Timer-driven auto-save. A periodic tick saves while the surface is
    dirty, field blur saves immediately, and form edits schedule a
    debounced save. All three end in the same idempotent write to the
    draft slot, so they need no locking.

Key Classes:
    - AutoSaver: Dirty tracking + periodic/debounced save scheduling

Guarantees:
    - A failing save is logged and swallowed. The dirty flag stays set so
      the next tick retries.
    - A clean surface never causes a write.

Dependencies:
    - asyncio (std): Timers via ``loop.call_later``

Used By:
    - session.controller: AuthoringSession
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

AUTO_SAVE_INTERVAL = 30.0
FORM_DEBOUNCE = 1.0


class AutoSaver:
    """
    Schedule draft saves on an asyncio event loop.

    Without a loop (and no running loop) debounced saves run immediately
    and ``start`` does nothing, which keeps batch tools and tests simple.

    Example:
        >>> saver = AutoSaver(session.save_draft, interval=30.0, debounce=1.0)
        >>> synchronizer.set_on_user_edit(saver.mark_dirty)
        >>> saver.start()
    """

    def __init__(
        self,
        save_fn: Callable[[], Any],
        interval: float = AUTO_SAVE_INTERVAL,
        debounce: float = FORM_DEBOUNCE,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        if debounce < 0:
            raise ValueError(f"debounce must be non-negative, got {debounce}")
        self._save_fn = save_fn
        self.interval = interval
        self.debounce = debounce
        self._loop = loop
        self._dirty = False
        self._timer: Optional[asyncio.TimerHandle] = None
        self._pending: Optional[asyncio.TimerHandle] = None
        self.save_count = 0
        self.failure_count = 0

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def is_running(self) -> bool:
        return self._timer is not None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def _resolve_loop(self) -> Optional[asyncio.AbstractEventLoop]:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    # ─────────────────────────────────────────────────────────────────────────
    # Triggers
    # ─────────────────────────────────────────────────────────────────────────

    def mark_dirty(self, *_args: Any) -> None:
        """Record that there is unsaved content. Accepts and ignores callback args."""
        self._dirty = True

    def tick(self) -> bool:
        """Periodic timer callback. Saves only when dirty."""
        if not self._dirty:
            return False
        return self.flush()

    def on_blur(self) -> bool:
        """Field lost focus: save now if anything changed."""
        self.cancel_pending()
        return self.tick()

    def schedule_debounced(self) -> None:
        """
        Mark dirty and (re)schedule a save ``debounce`` seconds from now.

        A previously scheduled debounced save is cancelled.
        """
        self._dirty = True
        self.cancel_pending()
        loop = self._resolve_loop()
        if loop is None:
            logger.debug("No event loop for debounced save, saving immediately")
            self.flush()
            return
        self._pending = loop.call_later(self.debounce, self._fire_debounced)

    def _fire_debounced(self) -> None:
        self._pending = None
        self.tick()

    def cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    # ─────────────────────────────────────────────────────────────────────────
    # Save
    # ─────────────────────────────────────────────────────────────────────────

    def mark_clean(self) -> None:
        """Forget unsaved changes (after publish or discard)."""
        self.cancel_pending()
        self._dirty = False

    def flush(self) -> bool:
        """
        Run the save callback now.

        Returns:
            True if the save succeeded, False if it raised (logged, swallowed)
        """
        try:
            self._save_fn()
        except Exception as e:
            self.failure_count += 1
            logger.warning(f"Auto-save failed, will retry on next tick: {e}")
            return False
        self._dirty = False
        self.save_count += 1
        return True

    # ─────────────────────────────────────────────────────────────────────────
    # Periodic timer
    # ─────────────────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Start the periodic timer. No-op if already running or no loop."""
        if self._timer is not None:
            return
        loop = self._resolve_loop()
        if loop is None:
            logger.debug("No event loop available, periodic auto-save disabled")
            return
        self._timer = loop.call_later(self.interval, self._on_timer)

    def _on_timer(self) -> None:
        loop = self._resolve_loop()
        self.tick()
        if self._timer is not None and loop is not None:
            self._timer = loop.call_later(self.interval, self._on_timer)

    def stop(self) -> None:
        """Cancel the periodic timer and any pending debounced save."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.cancel_pending()
