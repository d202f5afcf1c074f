import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_uuid():
    """Generate a string UUID primary key"""
    return str(uuid.uuid4())


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=generate_uuid)  # Same as auth user id
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    roles = relationship("UserRole", back_populates="profile")


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("profiles.id"), index=True, nullable=False)
    role = Column(String(20), nullable=False)  # admin, client, photographer, editor
    created_at = Column(DateTime, server_default=func.now())

    profile = relationship("Profile", back_populates="roles")


class Service(Base):
    """Orderable product or package (catalog reference data)"""

    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    category = Column(String(50), index=True, nullable=False)  # onsite, photo_editing, ...
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    base_price = Column(Numeric(10, 2), nullable=False)
    unit = Column(String(50), nullable=False)  # package, photo, room, certificate, piece
    features = Column(JSON, default=list, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Upgrade(Base):
    """Add-on catalog entry (drone, video, twilight)"""

    __tablename__ = "upgrades"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    category = Column(String(50), index=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    base_price = Column(Numeric(10, 2), nullable=False)
    unit = Column(String(50), nullable=False, default="piece")
    pricing_type = Column(String(50), nullable=False, default="fixed")
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), index=True, nullable=False)
    order_number = Column(String(50), unique=True, index=True, nullable=False)  # SS-<year>-<seq>
    # draft, submitted, in_progress, completed, delivered, cancelled
    status = Column(String(20), default="draft", nullable=False, index=True)
    total_amount = Column(Numeric(10, 2), default=0, nullable=False)
    requested_date = Column(Date, nullable=True)
    requested_time = Column(String(10), nullable=True)  # "HH:MM"
    alternative_date = Column(Date, nullable=True)
    alternative_time = Column(String(10), nullable=True)
    special_instructions = Column(Text, nullable=True)
    delivery_deadline = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    upgrades = relationship("OrderUpgrade", back_populates="order", cascade="all, delete-orphan")
    addresses = relationship("Address", back_populates="order", cascade="all, delete-orphan")
    assignments = relationship("OrderAssignment", back_populates="order")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    order_id = Column(String(36), ForeignKey("orders.id"), index=True, nullable=False)
    service_id = Column(String(36), ForeignKey("services.id"), nullable=False)
    quantity = Column(Integer, default=1, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    item_notes = Column(Text, nullable=True)  # JSON package metadata for photography packages
    created_at = Column(DateTime, server_default=func.now())

    order = relationship("Order", back_populates="items")
    service = relationship("Service")


class OrderUpgrade(Base):
    __tablename__ = "order_upgrades"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    order_id = Column(String(36), ForeignKey("orders.id"), index=True, nullable=False)
    upgrade_id = Column(String(36), ForeignKey("upgrades.id"), nullable=False)
    quantity = Column(Integer, default=1, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    order = relationship("Order", back_populates="upgrades")
    upgrade = relationship("Upgrade")


class Address(Base):
    __tablename__ = "addresses"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), index=True, nullable=False)
    order_id = Column(String(36), ForeignKey("orders.id"), index=True, nullable=True)
    address_type = Column(String(30), nullable=False)  # shooting_location, billing_address
    street = Column(String(255), nullable=False)
    house_number = Column(String(20), nullable=True)
    postal_code = Column(String(20), nullable=False)
    city = Column(String(255), nullable=False)
    country = Column(String(2), default="DE", nullable=False)
    additional_info = Column(Text, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    order = relationship("Order", back_populates="addresses")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), index=True, nullable=False)
    type = Column(String(50), nullable=False)  # new_order, ...
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    link = Column(String(500), nullable=True)
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class OrderAssignment(Base):
    """Offer of an order to a photographer and its outcome"""

    __tablename__ = "order_assignments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    order_id = Column(String(36), ForeignKey("orders.id"), index=True, nullable=False)
    photographer_id = Column(String(36), index=True, nullable=False)
    assigned_by = Column(String(36), nullable=False)
    status = Column(String(20), default="pending", nullable=False)  # pending, accepted, declined, completed
    photographer_notes = Column(Text, nullable=True)
    admin_notes = Column(Text, nullable=True)
    scheduled_date = Column(Date, nullable=True)
    scheduled_time = Column(String(10), nullable=True)
    travel_cost = Column(Numeric(10, 2), nullable=True)
    payment_amount = Column(Numeric(10, 2), nullable=True)
    assigned_at = Column(DateTime, server_default=func.now())
    responded_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    order = relationship("Order", back_populates="assignments")
