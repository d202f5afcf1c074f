"""
Order submission - turns a wizard draft into a submitted order

The commit is an ordered sequence of independent writes:

    0. validate_order     re-run the wizard validation
    1. price_order        recompute the authoritative total
    2. update_order       status -> submitted, total, schedule, instructions
    3. create_line_items  package row (photography) or one row per line item
    4. create_upgrades    one row per resolvable add-on (photography only)
    5. create_address     shooting location
    6. notify_admins      one notification per admin user

There is no surrounding transaction. The first failing step aborts the rest
and its message is returned unchanged; rows written by earlier steps stay in
place. Retrying therefore duplicates items, upgrades, address and
notifications, so callers must block double submission.
"""

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ... import config
from ...models import Order
from .catalog import PACKAGE_UNIT, get_add_on, get_package
from .draft import OrderDraft, ServiceCategory
from .pricing import price_draft
from .repository import CatalogRepository, NotificationRepository, OrderRepository
from .validation import validate_order

logger = logging.getLogger(__name__)

NO_DRAFT_ERROR = "No draft order ID found"


@dataclass
class SubmissionResult:
    success: bool
    order_id: Optional[str] = None
    error: Optional[str] = None
    failed_step: Optional[str] = None
    completed_steps: list[str] = field(default_factory=list)


@dataclass
class SubmissionContext:
    user_id: str
    draft: OrderDraft
    requested_category: str
    order_id: str
    category: Optional[ServiceCategory] = None
    total: Decimal = Decimal("0")
    order: Optional[Order] = None


class SubmissionCoordinator:
    """Runs the submission steps in order against the database"""

    def __init__(self, db: Session):
        self.db = db
        self.steps: list[tuple[str, Callable[[SubmissionContext], None]]] = [
            ("validate_order", self._validate_order),
            ("price_order", self._price_order),
            ("update_order", self._update_order),
            ("create_line_items", self._create_line_items),
            ("create_upgrades", self._create_upgrades),
            ("create_address", self._create_address),
            ("notify_admins", self._notify_admins),
        ]

    def submit(self, user_id: str, draft: OrderDraft, category: str) -> SubmissionResult:
        if not draft.draft_order_id:
            logger.error(f"❌ Submission rejected for user {user_id}: {NO_DRAFT_ERROR}")
            return SubmissionResult(success=False, error=NO_DRAFT_ERROR)

        ctx = SubmissionContext(
            user_id=user_id,
            draft=draft,
            requested_category=category,
            order_id=draft.draft_order_id,
        )
        completed: list[str] = []

        logger.info(f"📥 Submitting draft {ctx.order_id} ({category}) for user {user_id}")

        for name, step in self.steps:
            try:
                step(ctx)
            except Exception as e:
                logger.error(
                    f"❌ Submission step '{name}' failed for order {ctx.order_id} "
                    f"after {completed or 'no steps'}: {e}"
                )
                return SubmissionResult(
                    success=False,
                    order_id=ctx.order_id,
                    error=str(e),
                    failed_step=name,
                    completed_steps=completed,
                )
            completed.append(name)

        logger.info(f"✅ Order {ctx.order_id} submitted (total {ctx.total})")
        return SubmissionResult(success=True, order_id=ctx.order_id, completed_steps=completed)

    def _validate_order(self, ctx: SubmissionContext) -> None:
        validation = validate_order(ctx.draft)
        if not validation.is_valid:
            raise ValueError(", ".join(validation.errors))
        ctx.category = ServiceCategory(ctx.requested_category)

    def _price_order(self, ctx: SubmissionContext) -> None:
        priced = ctx.draft.copy()
        priced.category = ctx.category
        ctx.total = price_draft(priced).total

    def _update_order(self, ctx: SubmissionContext) -> None:
        draft = ctx.draft
        ctx.order = OrderRepository.mark_submitted(
            self.db,
            ctx.order_id,
            ctx.total,
            requested_date=draft.requested_date,
            requested_time=draft.requested_time,
            alternative_date=draft.alternative_date,
            alternative_time=draft.alternative_time,
            special_instructions=draft.special_instructions,
        )

    def _create_line_items(self, ctx: SubmissionContext) -> None:
        if ctx.category == ServiceCategory.ONSITE:
            package = get_package(ctx.draft.selected_package)
            if package is None:
                raise ValueError(f"Unknown photography package: {ctx.draft.selected_package}")

            service = CatalogRepository.find_service(
                self.db, ctx.category.value, package.name, PACKAGE_UNIT
            )
            if service is None:
                raise LookupError(f"Package '{package.name}' not found in service catalog")

            metadata = {
                "package_id": package.id,
                "package_type": package.type,
                "photo_count": package.photo_count,
                "tier": package.tier,
            }
            OrderRepository.add_order_item(
                self.db,
                ctx.order_id,
                service.id,
                quantity=1,
                unit_price=package.price,
                total_price=package.price,
                item_notes=json.dumps(metadata),
            )
            return

        for service_id, item in ctx.draft.selected_line_items.items():
            OrderRepository.add_order_item(
                self.db,
                ctx.order_id,
                service_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total_price=item.total_price,
            )

    def _create_upgrades(self, ctx: SubmissionContext) -> None:
        if ctx.category != ServiceCategory.ONSITE or not ctx.draft.selected_add_ons:
            return

        for add_on_id in ctx.draft.selected_add_ons:
            add_on = get_add_on(add_on_id)
            upgrade = None
            if add_on:
                upgrade = CatalogRepository.find_upgrade(self.db, ctx.category.value, add_on.name)
            if upgrade is None:
                # Catalog drift is tolerated, but the paid add-on is not recorded
                logger.warning(
                    f"⚠️ Add-on '{add_on_id}' not found in upgrade catalog - not recorded on order {ctx.order_id}"
                )
                continue
            OrderRepository.add_order_upgrade(self.db, ctx.order_id, upgrade)

    def _create_address(self, ctx: SubmissionContext) -> None:
        OrderRepository.add_address(self.db, ctx.order_id, ctx.user_id, ctx.draft.address)

    def _notify_admins(self, ctx: SubmissionContext) -> None:
        admin_ids = NotificationRepository.get_admin_user_ids(self.db)
        order_number = ctx.order.order_number if ctx.order else ctx.order_id
        for admin_id in admin_ids:
            NotificationRepository.create_notification(
                self.db,
                admin_id,
                type="new_order",
                title="New order",
                message=f"Order {order_number} has been placed.",
                link=config.ADMIN_ORDERS_LINK,
            )
        logger.info(f"📧 Notified {len(admin_ids)} admin(s) about order {order_number}")
