"""
Draft autosave

A `DraftAutoSaver` belongs to one wizard session. It persists the draft's
running total (and, once known, its shooting address) on a timer:

- one save shortly after start, then one every interval
- skipped when the tracked fields are unchanged since the last good save
- single-flight: a save requested while another is writing is dropped
- best-effort: failures are logged and the next tick tries again

The loop is an asyncio task that owns its own stop event, so `stop()` tears
it down deterministically when the session ends.
"""

import asyncio
import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from ... import config
from ...database import SessionLocal
from .draft import OrderDraft
from .pricing import price_draft
from .repository import OrderRepository

logger = logging.getLogger(__name__)


def running_total(draft: OrderDraft) -> Decimal:
    """Total shown in the wizard; 0 until the draft has something to price"""
    if not draft.category or not draft.has_pricing_basis():
        return Decimal("0")
    try:
        return price_draft(draft).total
    except (ValueError, TypeError) as e:
        logger.warning(f"⚠️ Could not price draft {draft.draft_order_id} for autosave: {e}")
        return Decimal("0")


class DraftAutoSaver:
    def __init__(
        self,
        user_id: str,
        get_draft: Callable[[], OrderDraft],
        session_factory=SessionLocal,
        interval: Optional[float] = None,
        initial_delay: Optional[float] = None,
        enabled: Optional[bool] = None,
    ):
        self.user_id = user_id
        self.get_draft = get_draft
        self.session_factory = session_factory
        self.interval = config.AUTOSAVE_INTERVAL_SECONDS if interval is None else interval
        self.initial_delay = config.AUTOSAVE_INITIAL_DELAY_SECONDS if initial_delay is None else initial_delay
        self.enabled = config.AUTOSAVE_ENABLED if enabled is None else enabled

        self.is_saving = False
        self.last_saved: Optional[datetime] = None
        self.save_count = 0
        self._last_snapshot: Optional[str] = None
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _should_run(self) -> bool:
        return self.enabled and bool(self.get_draft().draft_order_id)

    async def save(self) -> bool:
        """Persist the draft if it changed. Returns True only when a write happened."""
        if not self._should_run():
            return False
        if self.is_saving:
            logger.debug("Autosave already in flight, dropping request")
            return False

        draft = self.get_draft()
        snapshot = draft.snapshot()
        if snapshot == self._last_snapshot:
            return False

        self.is_saving = True
        try:
            # Write a copy so wizard edits during the write don't leak in
            await asyncio.to_thread(self._write, draft.copy())
        except Exception as e:
            logger.error(f"❌ Autosave failed for draft {draft.draft_order_id}: {e}")
            return False
        finally:
            self.is_saving = False

        self._last_snapshot = snapshot
        self.last_saved = datetime.utcnow()
        self.save_count += 1
        logger.info(f"✅ Draft {draft.draft_order_id} autosaved")
        return True

    def _write(self, draft: OrderDraft) -> None:
        db = self.session_factory()
        try:
            OrderRepository.update_draft_total(db, draft.draft_order_id, running_total(draft))
            if draft.address.street and draft.address.postal_code:
                OrderRepository.upsert_order_address(db, draft.draft_order_id, self.user_id, draft.address)
        finally:
            db.close()

    def start(self) -> None:
        """Start the timer loop on the running event loop. No-op if already running."""
        if self.is_running or not self._should_run():
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(self._stop_event))
        logger.info(f"📊 Autosave started for draft {self.get_draft().draft_order_id}")

    async def _run(self, stop_event: asyncio.Event) -> None:
        delay = self.initial_delay
        while self._should_run():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=delay)
                return
            except asyncio.TimeoutError:
                pass
            if not self._should_run():
                break
            await self.save()
            delay = self.interval

    def disable(self) -> None:
        self.enabled = False
        if self._stop_event:
            self._stop_event.set()

    async def stop(self) -> None:
        """Stop the loop and wait for an in-flight save to finish"""
        task, self._task = self._task, None
        if self._stop_event:
            self._stop_event.set()
        if task is None:
            return
        await task
        logger.info(f"📊 Autosave stopped for draft {self.get_draft().draft_order_id}")
