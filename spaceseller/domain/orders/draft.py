"""In-memory order draft owned by a single wizard session.

The draft is mutated in place while the customer walks through the wizard
(location -> category & configuration -> review). Nothing here performs I/O;
persistence is handled by the autosave and submission services.
"""

import copy
import json
from dataclasses import asdict, dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

FIRST_STEP = 1
LAST_STEP = 3


class ServiceCategory(str, Enum):
    """Top-level service types offered in the wizard"""

    ONSITE = "onsite"  # on-site photography
    PHOTO_EDITING = "photo_editing"
    VIRTUAL_STAGING = "virtual_staging"
    ENERGY_CERTIFICATE = "energy_certificate"


@dataclass
class Address:
    street: str = ""
    house_number: str = ""
    postal_code: str = ""
    city: str = ""
    notes: str = ""


@dataclass
class LineItemSelection:
    """Quantity-based selection of one catalog service"""

    quantity: int
    unit_price: Decimal
    total_price: Decimal
    unit: str = "piece"  # photo, room, certificate, piece
    code: Optional[str] = None  # catalog code, e.g. certificate type


@dataclass
class OrderDraft:
    step: int = FIRST_STEP
    category: Optional[ServiceCategory] = None
    address: Address = field(default_factory=Address)
    location_validated: bool = False
    photography_available: bool = True
    travel_cost: Decimal = Decimal("0")
    distance_km: float = 0.0
    # Photography pricing basis
    selected_package: Optional[str] = None
    selected_add_ons: list[str] = field(default_factory=list)
    # Pricing basis for every other category, keyed by service id
    selected_line_items: dict[str, LineItemSelection] = field(default_factory=dict)
    staging_variations: int = 1
    requested_date: Optional[date] = None
    requested_time: Optional[str] = None
    alternative_date: Optional[date] = None
    alternative_time: Optional[str] = None
    special_instructions: Optional[str] = None
    draft_order_id: Optional[str] = None

    def has_pricing_basis(self) -> bool:
        return bool(self.selected_line_items) or self.selected_package is not None

    def copy(self) -> "OrderDraft":
        return copy.deepcopy(self)

    def update_address_field(self, field_name: str, value: str) -> None:
        if not hasattr(self.address, field_name):
            raise ValueError(f"Unknown address field: {field_name}")
        setattr(self.address, field_name, value)
        # A changed address has to be checked again
        self.location_validated = False
        self.travel_cost = Decimal("0")
        self.distance_km = 0.0

    def apply_location_check(self, travel_cost: Decimal, distance_km: float, photography_available: bool) -> None:
        """Record the outcome of the external eligibility check"""
        self.travel_cost = travel_cost
        self.distance_km = distance_km
        self.photography_available = photography_available
        self.location_validated = True

    def set_category(self, category: ServiceCategory) -> None:
        if category != self.category:
            # Pricing bases are category specific
            self.selected_package = None
            self.selected_add_ons = []
            self.selected_line_items = {}
            self.staging_variations = 1
        self.category = category

    def toggle_line_item(
        self,
        service_id: str,
        quantity: int,
        unit_price: Decimal,
        unit: str = "piece",
        code: Optional[str] = None,
    ) -> None:
        """Set the quantity of a service; quantity 0 removes it"""
        if quantity <= 0:
            self.selected_line_items.pop(service_id, None)
            return
        self.selected_line_items[service_id] = LineItemSelection(
            quantity=quantity,
            unit_price=unit_price,
            total_price=unit_price * quantity,
            unit=unit,
            code=code,
        )

    def set_package(self, package_id: Optional[str]) -> None:
        self.selected_package = package_id
        if package_id is None:
            self.selected_add_ons = []

    def toggle_add_on(self, add_on_id: str) -> None:
        if add_on_id in self.selected_add_ons:
            self.selected_add_ons.remove(add_on_id)
        else:
            self.selected_add_ons.append(add_on_id)

    def snapshot(self) -> str:
        """Canonical serialization of the fields autosave tracks"""
        payload = {
            "category": self.category.value if self.category else None,
            "line_items": {
                service_id: asdict(item) for service_id, item in sorted(self.selected_line_items.items())
            },
            "package": self.selected_package,
            "add_ons": sorted(self.selected_add_ons),
            "address": asdict(self.address),
            "step": self.step,
        }
        return json.dumps(payload, sort_keys=True, default=str)
