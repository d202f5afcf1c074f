"""Static photography catalog: package tiers and add-ons"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

PACKAGE_TYPES = ("photo", "drone", "photo_drone")


@dataclass(frozen=True)
class PackageTier:
    id: str
    name: str
    type: str  # photo, drone, photo_drone
    photo_count: int
    price: Decimal
    tier: str  # basic, standard, premium
    popular: bool = False


@dataclass(frozen=True)
class AddOn:
    id: str
    name: str
    description: str
    price: Decimal


PACKAGE_TIERS: tuple[PackageTier, ...] = (
    PackageTier("photo_basic", "Foto Basis", "photo", 10, Decimal("129"), "basic"),
    PackageTier("photo_standard", "Foto Standard", "photo", 20, Decimal("199"), "standard", popular=True),
    PackageTier("photo_premium", "Foto Premium", "photo", 35, Decimal("299"), "premium"),
    PackageTier("drone_basic", "Drohne Basis", "drone", 5, Decimal("149"), "basic"),
    PackageTier("drone_premium", "Drohne Premium", "drone", 10, Decimal("229"), "premium"),
    PackageTier("photo_drone_standard", "Foto & Drohne Standard", "photo_drone", 25, Decimal("299"), "standard"),
    PackageTier("photo_drone_premium", "Foto & Drohne Premium", "photo_drone", 40, Decimal("429"), "premium"),
)

ADD_ONS: tuple[AddOn, ...] = (
    AddOn("drone", "Drohnenaufnahmen", "5 aerial shots of the property", Decimal("89")),
    AddOn("video", "Video-Tour", "2-3 minute property video", Decimal("249")),
    AddOn("twilight", "Twilight-Shooting", "5 additional twilight shots", Decimal("129")),
)

# Catalog unit used for photography packages in the services table
PACKAGE_UNIT = "package"


def get_package(package_id: Optional[str]) -> Optional[PackageTier]:
    for package in PACKAGE_TIERS:
        if package.id == package_id:
            return package
    return None


def get_add_on(add_on_id: str) -> Optional[AddOn]:
    for add_on in ADD_ONS:
        if add_on.id == add_on_id:
            return add_on
    return None


def filter_packages_by_type(package_type: str) -> list[PackageTier]:
    return [p for p in PACKAGE_TIERS if p.type == package_type]


def calculate_add_ons_total(add_on_ids: list[str]) -> Decimal:
    """Sum of selected add-on prices; unknown ids contribute nothing"""
    total = Decimal("0")
    for add_on_id in add_on_ids:
        add_on = get_add_on(add_on_id)
        if add_on:
            total += add_on.price
    return total
