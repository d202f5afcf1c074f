"""
Category pricing engine

Every service category carries its own selection payload. `price_selection`
dispatches on the payload type and applies that category's composition rule:

- onsite photography: package + add-ons + travel cost
- photo editing: volume discount on the per-photo price, flat options on top
- virtual staging: rooms x price, scaled by the style variation multiplier
- energy certificate: fixed price per certificate type

Amounts are Decimal currency units. Only the final total is rounded to cents.
"""

from dataclasses import dataclass
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional, Union

from ... import config
from .catalog import AddOn, PackageTier, get_add_on, get_package
from .draft import OrderDraft, ServiceCategory

DEFAULT_TAX_RATE = Decimal(config.TAX_RATE)
CENT = Decimal("0.01")

# (minimum quantity, price factor), highest threshold first
PACKAGE_QUANTITY_TIERS = (
    (10, Decimal("0.85")),
    (5, Decimal("0.90")),
    (3, Decimal("0.95")),
)
EDITING_VOLUME_TIERS = (
    (50, Decimal("0.70")),
    (25, Decimal("0.80")),
    (10, Decimal("0.90")),
)
VARIATION_PREMIUM = Decimal("0.5")


class CertificateType(str, Enum):
    CONSUMPTION = "verbrauchsausweis"
    DEMAND = "bedarfsausweis"


CERTIFICATE_PRICES = {
    CertificateType.CONSUMPTION: Decimal("99"),
    CertificateType.DEMAND: Decimal("149"),
}


@dataclass(frozen=True)
class PricedItem:
    id: str
    price: Decimal
    quantity: int = 1


@dataclass(frozen=True)
class PriceBreakdown:
    items: tuple[PricedItem, ...]
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal
    travel_cost: Optional[Decimal] = None


@dataclass(frozen=True)
class PhotographySelection:
    package: PackageTier
    add_ons: tuple[AddOn, ...] = ()


@dataclass(frozen=True)
class PhotoEditingSelection:
    photo_count: int
    price_per_photo: Decimal
    options: tuple[PricedItem, ...] = ()


@dataclass(frozen=True)
class VirtualStagingSelection:
    room_count: int
    price_per_room: Decimal
    variations: int = 1
    options: tuple[PricedItem, ...] = ()


@dataclass(frozen=True)
class EnergyCertificateSelection:
    certificate_type: CertificateType


CategorySelection = Union[
    PhotographySelection,
    PhotoEditingSelection,
    VirtualStagingSelection,
    EnergyCertificateSelection,
]


def calculate_subtotal(items, additional_fees: Decimal = Decimal("0")) -> Decimal:
    items_total = sum((item.price * (item.quantity or 1) for item in items), Decimal("0"))
    return items_total + additional_fees


def calculate_total(subtotal: Decimal, tax_rate: Decimal = DEFAULT_TAX_RATE) -> Decimal:
    return round_currency(subtotal + subtotal * tax_rate)


def round_currency(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def get_breakdown(
    items,
    additional_fees: Decimal = Decimal("0"),
    tax_rate: Decimal = DEFAULT_TAX_RATE,
) -> PriceBreakdown:
    subtotal = calculate_subtotal(items, additional_fees)
    tax_amount = subtotal * tax_rate
    return PriceBreakdown(
        items=tuple(items),
        subtotal=subtotal,
        tax_amount=tax_amount,
        total=round_currency(subtotal + tax_amount),
        travel_cost=additional_fees if additional_fees > 0 else None,
    )


def apply_tier(price: Decimal, quantity: int, tiers) -> Decimal:
    """Apply the single highest tier the quantity qualifies for"""
    for threshold, factor in tiers:
        if quantity >= threshold:
            return price * factor
    return price


def tiered_package_price(base_price: Decimal, quantity: int) -> Decimal:
    """Bulk package discount: >=10 15%, >=5 10%, >=3 5%"""
    return apply_tier(base_price, quantity, PACKAGE_QUANTITY_TIERS)


def editing_unit_price(photo_count: int, price_per_photo: Decimal) -> Decimal:
    """Volume discount on the per-photo price: >=50 30%, >=25 20%, >=10 10%"""
    return apply_tier(price_per_photo, photo_count, EDITING_VOLUME_TIERS)


def variation_multiplier(variations: int) -> Decimal:
    if variations > 1:
        return 1 + (variations - 1) * VARIATION_PREMIUM
    return Decimal("1")


def price_selection(
    selection: CategorySelection,
    travel_cost: Decimal = Decimal("0"),
    tax_rate: Decimal = DEFAULT_TAX_RATE,
) -> PriceBreakdown:
    """Price a category selection. Travel cost only applies to on-site photography."""
    if isinstance(selection, PhotographySelection):
        items = [PricedItem(id=selection.package.id, price=selection.package.price)]
        items += [PricedItem(id=add_on.id, price=add_on.price) for add_on in selection.add_ons]
        return get_breakdown(items, travel_cost, tax_rate)

    if isinstance(selection, PhotoEditingSelection):
        unit_price = editing_unit_price(selection.photo_count, selection.price_per_photo)
        editing = PricedItem(id="photo-editing", price=unit_price * selection.photo_count)
        return get_breakdown([editing, *selection.options], tax_rate=tax_rate)

    if isinstance(selection, VirtualStagingSelection):
        room_cost = selection.room_count * selection.price_per_room
        staging = PricedItem(id="virtual-staging", price=room_cost * variation_multiplier(selection.variations))
        return get_breakdown([staging, *selection.options], tax_rate=tax_rate)

    if isinstance(selection, EnergyCertificateSelection):
        certificate = PricedItem(
            id=f"certificate-{selection.certificate_type.value}",
            price=CERTIFICATE_PRICES[selection.certificate_type],
        )
        return get_breakdown([certificate], tax_rate=tax_rate)

    raise TypeError(f"Unsupported pricing selection: {type(selection).__name__}")


def calculate_travel_cost(distance_km: float) -> Decimal:
    """
    Travel cost for a one-way distance.

    0.30 EUR/km for the first 20 km, 0.38 EUR/km beyond,
    rounded up to the next 5 EUR.
    """
    if distance_km < 0:
        raise ValueError("Distance cannot be negative")

    distance = Decimal(str(distance_km))
    first_tier_km = Decimal(config.TRAVEL_COST_FIRST_TIER_KM)
    first_rate = Decimal(config.TRAVEL_COST_PER_KM_FIRST_TIER)
    after_rate = Decimal(config.TRAVEL_COST_PER_KM_AFTER_TIER)

    if distance <= first_tier_km:
        cost = distance * first_rate
    else:
        cost = first_tier_km * first_rate + (distance - first_tier_km) * after_rate

    step = Decimal(config.TRAVEL_COST_ROUNDING_STEP)
    return (cost / step).to_integral_value(rounding=ROUND_CEILING) * step


def _split_base_item(draft: OrderDraft, unit: str):
    """Pick the first line item with the given unit; the rest become flat options"""
    base = None
    options = []
    for service_id, item in draft.selected_line_items.items():
        if base is None and item.unit == unit:
            base = item
        else:
            options.append(PricedItem(id=service_id, price=item.unit_price, quantity=item.quantity))
    return base, tuple(options)


def build_selection(draft: OrderDraft) -> CategorySelection:
    """Translate the wizard draft into the selection payload of its category"""
    category = draft.category

    if category == ServiceCategory.ONSITE:
        package = get_package(draft.selected_package)
        if package is None:
            raise ValueError(f"Unknown photography package: {draft.selected_package}")
        add_ons = tuple(a for a in (get_add_on(i) for i in draft.selected_add_ons) if a)
        return PhotographySelection(package=package, add_ons=add_ons)

    if category == ServiceCategory.PHOTO_EDITING:
        base, options = _split_base_item(draft, "photo")
        if base is None:
            return PhotoEditingSelection(photo_count=0, price_per_photo=Decimal("0"), options=options)
        return PhotoEditingSelection(photo_count=base.quantity, price_per_photo=base.unit_price, options=options)

    if category == ServiceCategory.VIRTUAL_STAGING:
        base, options = _split_base_item(draft, "room")
        room_count = base.quantity if base else 0
        price_per_room = base.unit_price if base else Decimal("0")
        return VirtualStagingSelection(
            room_count=room_count,
            price_per_room=price_per_room,
            variations=draft.staging_variations,
            options=options,
        )

    if category == ServiceCategory.ENERGY_CERTIFICATE:
        for item in draft.selected_line_items.values():
            if item.code:
                return EnergyCertificateSelection(certificate_type=CertificateType(item.code))
        raise ValueError("No certificate type selected")

    raise ValueError(f"Cannot price a draft without a valid category: {category}")


def price_draft(draft: OrderDraft, tax_rate: Decimal = DEFAULT_TAX_RATE) -> PriceBreakdown:
    """Authoritative price for a draft, recomputed from its selections"""
    return price_selection(build_selection(draft), draft.travel_cost, tax_rate)
