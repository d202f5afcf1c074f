import os

# Must be set before spaceseller.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTOSAVE_ENABLED", "false")
os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from spaceseller import models
from spaceseller.database import Base
from spaceseller.domain.orders.draft import Address, OrderDraft, ServiceCategory


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def customer(db):
    profile = models.Profile(id="user-1", first_name="Erika", last_name="Muster", email="erika@example.com")
    db.add(profile)
    db.add(models.UserRole(user_id=profile.id, role="client"))
    db.commit()
    return profile


@pytest.fixture
def admins(db):
    profiles = [
        models.Profile(id="admin-1", email="admin1@example.com"),
        models.Profile(id="admin-2", email="admin2@example.com"),
    ]
    db.add_all(profiles)
    db.add_all([models.UserRole(user_id=p.id, role="admin") for p in profiles])
    db.commit()
    return profiles


@pytest.fixture
def catalog(db):
    """Catalog rows for the standard photo package and two of the three add-ons"""
    package = models.Service(
        id="svc-photo-standard",
        category="onsite",
        name="Foto Standard",
        base_price=Decimal("199"),
        unit="package",
    )
    editing = models.Service(
        id="svc-editing",
        category="photo_editing",
        name="Bildbearbeitung",
        base_price=Decimal("10"),
        unit="photo",
    )
    drone = models.Upgrade(id="upg-drone", category="onsite", name="Drohnenaufnahmen", base_price=Decimal("89"))
    video = models.Upgrade(id="upg-video", category="onsite", name="Video-Tour", base_price=Decimal("249"))
    db.add_all([package, editing, drone, video])
    db.commit()
    return {"package": package, "editing": editing, "drone": drone, "video": video}


@pytest.fixture
def draft_order(db, customer):
    order = models.Order(id="order-1", user_id=customer.id, order_number="SS-2026-00001", status="draft")
    db.add(order)
    db.commit()
    return order


def make_valid_draft(**overrides) -> OrderDraft:
    draft = OrderDraft(
        address=Address(street="Hauptstraße", house_number="12", postal_code="10115", city="Berlin"),
        location_validated=True,
        travel_cost=Decimal("10"),
        distance_km=25.0,
        category=ServiceCategory.ONSITE,
        selected_package="photo_standard",
    )
    for key, value in overrides.items():
        setattr(draft, key, value)
    return draft


@pytest.fixture
def valid_draft():
    return make_valid_draft()
