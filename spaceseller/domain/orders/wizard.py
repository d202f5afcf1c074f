"""
Order wizard session

A `WizardSession` is the single owner of one `OrderDraft`. It creates the
draft order row, runs the autosave loop while the customer edits, gates step
navigation with the step validators and hands the draft to the submission
coordinator. All database work runs in worker threads with its own session
so the event loop is never blocked.
"""

import asyncio
import logging
import time
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ... import config
from ...database import SessionLocal
from .autosave import DraftAutoSaver
from .draft import FIRST_STEP, LAST_STEP, OrderDraft, ServiceCategory
from .pricing import PriceBreakdown, price_draft
from .repository import OrderRepository
from .submission import SubmissionCoordinator, SubmissionResult
from .validation import ValidationResult, can_advance_from, validate_order

logger = logging.getLogger(__name__)

SUBMISSION_IN_PROGRESS_ERROR = "Submission already in progress"
ALREADY_SUBMITTED_ERROR = "Order has already been submitted"
PHOTOGRAPHY_UNAVAILABLE_ERROR = "On-site photography is not available at this location"

ORDER_NUMBER_ATTEMPTS = 3


def fallback_order_number(year: int) -> str:
    return f"SS-{year}-{int(time.time() * 1000)}"


class WizardSession:
    def __init__(
        self,
        user_id: str,
        session_factory=SessionLocal,
        location_validator=None,
        autosave_enabled: Optional[bool] = None,
        autosave_interval: Optional[float] = None,
        autosave_initial_delay: Optional[float] = None,
    ):
        self.id = str(uuid.uuid4())
        self.user_id = user_id
        self.session_factory = session_factory
        self.location_validator = location_validator
        self.draft = OrderDraft()
        self.order_number: Optional[str] = None
        self.is_submitting = False
        self.submitted = False
        self.location_message: Optional[str] = None
        self.last_activity = time.monotonic()
        self.autosaver = DraftAutoSaver(
            user_id,
            lambda: self.draft,
            session_factory=session_factory,
            interval=autosave_interval,
            initial_delay=autosave_initial_delay,
            enabled=autosave_enabled,
        )

    async def start(self) -> str:
        """Create the draft order (once) and start autosaving it"""
        if not self.draft.draft_order_id:
            order_id, order_number = await asyncio.to_thread(self._create_draft_order)
            self.draft.draft_order_id = order_id
            self.order_number = order_number
            logger.info(f"✅ Draft order {order_number} created for user {self.user_id}")
        self.autosaver.start()
        return self.draft.draft_order_id

    def _create_draft_order(self):
        db = self.session_factory()
        try:
            year = datetime.utcnow().year
            for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
                try:
                    order_number = OrderRepository.next_order_number(db, year)
                except SQLAlchemyError as e:
                    db.rollback()
                    logger.warning(f"⚠️ Order number generator unavailable: {e}")
                    break
                try:
                    order = OrderRepository.create_draft_order(db, self.user_id, order_number)
                    return order.id, order.order_number
                except IntegrityError:
                    # Another session took this number between read and insert
                    logger.warning(f"⚠️ Order number {order_number} already taken (attempt {attempt})")

            order_number = fallback_order_number(year)
            logger.warning(f"⚠️ Using fallback order number {order_number}")
            order = OrderRepository.create_draft_order(db, self.user_id, order_number)
            return order.id, order.order_number
        finally:
            db.close()

    def touch(self) -> None:
        self.last_activity = time.monotonic()

    def idle_seconds(self, now: Optional[float] = None) -> float:
        return (now if now is not None else time.monotonic()) - self.last_activity

    # Draft mutators

    def update_address_field(self, field_name: str, value: str) -> None:
        self.draft.update_address_field(field_name, value)
        self.location_message = None

    def set_location_validation(
        self, travel_cost: Decimal, distance_km: float, photography_available: bool
    ) -> None:
        self.draft.apply_location_check(travel_cost, distance_km, photography_available)
        if not photography_available and self.draft.category == ServiceCategory.ONSITE:
            self.draft.set_category(None)

    async def validate_location(self):
        """Run the external location check and record a positive outcome on the draft"""
        if self.location_validator is None:
            raise RuntimeError("No location validator configured for this session")

        result = await self.location_validator.validate(self.draft.address)
        self.location_message = result.message
        if result.valid:
            self.set_location_validation(result.travel_cost, result.distance_km, result.photography_available)
        return result

    def set_category(self, category: Optional[ServiceCategory]) -> None:
        if (
            category == ServiceCategory.ONSITE
            and self.draft.location_validated
            and not self.draft.photography_available
        ):
            raise ValueError(PHOTOGRAPHY_UNAVAILABLE_ERROR)
        self.draft.set_category(category)

    def toggle_line_item(self, service_id: str, quantity: int, unit_price: Decimal, unit: str = "piece", code: Optional[str] = None) -> None:
        self.draft.toggle_line_item(service_id, quantity, unit_price, unit=unit, code=code)

    def set_package(self, package_id: Optional[str]) -> None:
        self.draft.set_package(package_id)

    def toggle_add_on(self, add_on_id: str) -> None:
        self.draft.toggle_add_on(add_on_id)

    def set_staging_variations(self, variations: int) -> None:
        self.draft.staging_variations = max(1, variations)

    def set_schedule(
        self,
        requested_date: Optional[date],
        requested_time: Optional[str],
        alternative_date: Optional[date] = None,
        alternative_time: Optional[str] = None,
    ) -> None:
        self.draft.requested_date = requested_date
        self.draft.requested_time = requested_time
        self.draft.alternative_date = alternative_date
        self.draft.alternative_time = alternative_time

    def set_special_instructions(self, instructions: Optional[str]) -> None:
        self.draft.special_instructions = instructions or None

    # Navigation

    def next_step(self) -> bool:
        if self.draft.step >= LAST_STEP or not can_advance_from(self.draft.step, self.draft):
            return False
        self.draft.step += 1
        return True

    def prev_step(self) -> bool:
        if self.draft.step <= FIRST_STEP:
            return False
        self.draft.step -= 1
        return True

    def validate(self) -> ValidationResult:
        return validate_order(self.draft)

    def quote(self) -> Optional[PriceBreakdown]:
        if not self.draft.category or not self.draft.has_pricing_basis():
            return None
        return price_draft(self.draft)

    # Submission

    async def submit(self) -> SubmissionResult:
        if self.is_submitting:
            return SubmissionResult(success=False, order_id=self.draft.draft_order_id, error=SUBMISSION_IN_PROGRESS_ERROR)
        if self.submitted:
            return SubmissionResult(success=False, order_id=self.draft.draft_order_id, error=ALREADY_SUBMITTED_ERROR)

        self.is_submitting = True
        try:
            # No autosave writes may interleave with the submission writes
            await self.autosaver.stop()
            result = await asyncio.to_thread(self._run_submission, self.draft.copy())
        finally:
            self.is_submitting = False

        if result.success:
            self.submitted = True
            self.autosaver.disable()
        else:
            self.autosaver.start()
        return result

    def _run_submission(self, draft: OrderDraft) -> SubmissionResult:
        category = draft.category.value if draft.category else ""
        db = self.session_factory()
        try:
            return SubmissionCoordinator(db).submit(self.user_id, draft, category)
        finally:
            db.close()

    async def close(self) -> None:
        await self.autosaver.stop()
        logger.info(f"📊 Wizard session {self.id} closed")


class WizardSessionStore:
    """In-process registry of open wizard sessions, keyed by session id.

    Sessions untouched for `idle_ttl` seconds are closed by `sweep_idle`,
    which the background sweeper runs every `sweep_interval` seconds.
    """

    def __init__(
        self,
        session_factory=SessionLocal,
        location_validator=None,
        autosave_enabled: Optional[bool] = None,
        idle_ttl: Optional[float] = None,
        sweep_interval: Optional[float] = None,
    ):
        self.session_factory = session_factory
        self.location_validator = location_validator
        self.autosave_enabled = autosave_enabled
        self.idle_ttl = config.WIZARD_SESSION_TTL_SECONDS if idle_ttl is None else idle_ttl
        self.sweep_interval = config.WIZARD_SWEEP_INTERVAL_SECONDS if sweep_interval is None else sweep_interval
        self._sessions: Dict[str, WizardSession] = {}
        self._sweeper: Optional[asyncio.Task] = None
        self._sweeper_stop: Optional[asyncio.Event] = None

    def __len__(self) -> int:
        return len(self._sessions)

    async def open(self, user_id: str) -> WizardSession:
        session = WizardSession(
            user_id,
            session_factory=self.session_factory,
            location_validator=self.location_validator,
            autosave_enabled=self.autosave_enabled,
        )
        await session.start()
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str, user_id: str) -> Optional[WizardSession]:
        session = self._sessions.get(session_id)
        if session is None or session.user_id != user_id:
            return None
        session.touch()
        return session

    async def close(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session:
            await session.close()

    async def close_all(self) -> None:
        await self.stop_sweeper()
        for session_id in list(self._sessions):
            await self.close(session_id)

    async def sweep_idle(self, now: Optional[float] = None) -> int:
        """Close sessions idle longer than the TTL. Returns how many were closed."""
        now = time.monotonic() if now is None else now
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if session.idle_seconds(now) > self.idle_ttl and not session.is_submitting
        ]
        for session_id in expired:
            await self.close(session_id)
        if expired:
            logger.info(f"🧹 Closed {len(expired)} idle wizard session(s)")
        return len(expired)

    def start_sweeper(self) -> None:
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper_stop = asyncio.Event()
        self._sweeper = asyncio.create_task(self._sweep_loop(self._sweeper_stop))

    async def _sweep_loop(self, stop_event: asyncio.Event) -> None:
        while True:
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.sweep_interval)
                return
            except asyncio.TimeoutError:
                pass
            try:
                await self.sweep_idle()
            except Exception as e:
                logger.error(f"❌ Wizard session sweep failed: {e}")

    async def stop_sweeper(self) -> None:
        task, self._sweeper = self._sweeper, None
        if self._sweeper_stop:
            self._sweeper_stop.set()
        if task is not None:
            await task
