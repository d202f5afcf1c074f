"""Order repository - Database operations for drafts and submitted orders"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import (
    Address,
    Notification,
    Order,
    OrderItem,
    OrderUpgrade,
    Service,
    Upgrade,
    UserRole,
)
from .draft import Address as DraftAddress
from .status import OrderStatus, can_transition

SHOOTING_LOCATION = "shooting_location"


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


class OrderRepository:
    """Repository for order database operations"""

    @staticmethod
    def next_order_number(db: Session, year: int) -> str:
        """Next sequential order number for the year, e.g. SS-2026-00042"""
        prefix = f"SS-{year}-"
        numbers = (
            db.query(Order.order_number).filter(Order.order_number.like(f"{prefix}%")).all()
        )
        sequence = 0
        for (number,) in numbers:
            suffix = number[len(prefix):]
            # Skip epoch-millis fallback numbers
            if suffix.isdigit() and len(suffix) < 10:
                sequence = max(sequence, int(suffix))
        return f"{prefix}{sequence + 1:05d}"

    @staticmethod
    def create_draft_order(db: Session, user_id: str, order_number: str) -> Order:
        order = Order(user_id=user_id, order_number=order_number, status=OrderStatus.DRAFT.value)
        db.add(order)
        _commit(db)
        db.refresh(order)
        return order

    @staticmethod
    def update_draft_total(db: Session, order_id: str, total_amount: Decimal) -> None:
        updated = (
            db.query(Order)
            .filter(Order.id == order_id)
            .update({"total_amount": total_amount, "updated_at": datetime.utcnow()})
        )
        if not updated:
            db.rollback()
            raise LookupError(f"Order {order_id} not found")
        _commit(db)

    @staticmethod
    def upsert_order_address(
        db: Session, order_id: str, user_id: str, address: DraftAddress
    ) -> Address:
        """Create or update the single shooting-location row of an order"""
        row = (
            db.query(Address)
            .filter(Address.order_id == order_id, Address.address_type == SHOOTING_LOCATION)
            .first()
        )
        if row is None:
            row = Address(order_id=order_id, user_id=user_id, address_type=SHOOTING_LOCATION)
            db.add(row)

        row.street = address.street
        row.house_number = address.house_number or ""
        row.postal_code = address.postal_code
        row.city = address.city
        row.additional_info = address.notes or ""
        row.updated_at = datetime.utcnow()
        _commit(db)
        return row

    @staticmethod
    def mark_submitted(db: Session, order_id: str, total_amount: Decimal, **details) -> Order:
        order = db.query(Order).filter(Order.id == order_id).first()
        if order is None:
            raise LookupError(f"Order {order_id} not found")
        # A retry after a partial failure finds the order already submitted
        retry = order.status == OrderStatus.SUBMITTED.value
        if not retry and not can_transition(order.status, OrderStatus.SUBMITTED.value):
            raise ValueError(f"Order {order.order_number} cannot be submitted from status {order.status}")

        order.status = OrderStatus.SUBMITTED.value
        order.total_amount = total_amount
        for key, value in details.items():
            setattr(order, key, value)
        _commit(db)
        db.refresh(order)
        return order

    @staticmethod
    def add_order_item(
        db: Session,
        order_id: str,
        service_id: str,
        quantity: int,
        unit_price: Decimal,
        total_price: Decimal,
        item_notes: Optional[str] = None,
    ) -> OrderItem:
        item = OrderItem(
            order_id=order_id,
            service_id=service_id,
            quantity=quantity,
            unit_price=unit_price,
            total_price=total_price,
            item_notes=item_notes,
        )
        db.add(item)
        _commit(db)
        return item

    @staticmethod
    def add_order_upgrade(db: Session, order_id: str, upgrade: Upgrade, quantity: int = 1) -> OrderUpgrade:
        row = OrderUpgrade(
            order_id=order_id,
            upgrade_id=upgrade.id,
            quantity=quantity,
            unit_price=upgrade.base_price,
            total_price=upgrade.base_price * quantity,
        )
        db.add(row)
        _commit(db)
        return row

    @staticmethod
    def add_address(db: Session, order_id: str, user_id: str, address: DraftAddress) -> Address:
        row = Address(
            order_id=order_id,
            user_id=user_id,
            address_type=SHOOTING_LOCATION,
            street=address.street,
            house_number=address.house_number,
            postal_code=address.postal_code,
            city=address.city,
            additional_info=address.notes,
        )
        db.add(row)
        _commit(db)
        return row

    @staticmethod
    def delete_abandoned_drafts(db: Session, cutoff: datetime) -> int:
        """Delete drafts (and their child rows) last touched before the cutoff"""
        drafts = (
            db.query(Order)
            .filter(Order.status == OrderStatus.DRAFT.value, Order.updated_at < cutoff)
            .all()
        )
        for order in drafts:
            db.delete(order)
        _commit(db)
        return len(drafts)


class CatalogRepository:
    """Read-only catalog lookups used during submission"""

    @staticmethod
    def find_service(db: Session, category: str, name: str, unit: str) -> Optional[Service]:
        return (
            db.query(Service)
            .filter(
                Service.category == category,
                Service.name == name,
                Service.unit == unit,
                Service.is_active.is_(True),
            )
            .first()
        )

    @staticmethod
    def find_upgrade(db: Session, category: str, name: str) -> Optional[Upgrade]:
        return (
            db.query(Upgrade)
            .filter(Upgrade.category == category, Upgrade.name == name, Upgrade.is_active.is_(True))
            .first()
        )


class NotificationRepository:
    @staticmethod
    def get_admin_user_ids(db: Session) -> list[str]:
        rows = db.query(UserRole.user_id).filter(UserRole.role == "admin").all()
        return [user_id for (user_id,) in rows]

    @staticmethod
    def create_notification(
        db: Session, user_id: str, type: str, title: str, message: str, link: Optional[str] = None
    ) -> Notification:
        notification = Notification(user_id=user_id, type=type, title=title, message=message, link=link)
        db.add(notification)
        _commit(db)
        return notification
