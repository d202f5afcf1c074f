"""Order service - Business logic behind the wizard endpoints"""

import logging
from decimal import Decimal
from typing import Optional

from fastapi import HTTPException

from ...models import Profile
from .catalog import get_package
from .draft import OrderDraft, ServiceCategory
from .pricing import PriceBreakdown, calculate_travel_cost, price_draft
from .schemas import (
    AddressResponse,
    AddressUpdate,
    LineItemResponse,
    PricedItemResponse,
    QuoteRequest,
    QuoteResponse,
    WizardStateResponse,
)
from .validation import can_advance_from, can_submit
from .wizard import WizardSession, WizardSessionStore

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = {
    "street": "street",
    "houseNumber": "house_number",
    "postalCode": "postal_code",
    "city": "city",
    "notes": "notes",
}


class OrderWizardService:
    """Service layer for wizard sessions of the current user"""

    def __init__(self, store: WizardSessionStore, user: Profile):
        self.store = store
        self.user = user

    async def open_session(self) -> WizardSession:
        session = await self.store.open(self.user.id)
        logger.info(f"📥 Wizard session {session.id} opened for user {self.user.id}")
        return session

    def get_session(self, session_id: str) -> WizardSession:
        session = self.store.get(session_id, self.user.id)
        if not session:
            raise HTTPException(status_code=404, detail="Wizard session not found")
        return session

    async def close_session(self, session_id: str) -> None:
        self.get_session(session_id)
        await self.store.close(session_id)

    def update_address(self, session: WizardSession, data: AddressUpdate) -> None:
        for key, value in data.model_dump(exclude_unset=True).items():
            session.update_address_field(ADDRESS_FIELDS[key], value or "")

    def set_category(self, session: WizardSession, category: Optional[ServiceCategory]) -> None:
        try:
            session.set_category(category)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    def set_package(self, session: WizardSession, package_id: Optional[str]) -> None:
        if package_id is not None and get_package(package_id) is None:
            raise HTTPException(status_code=400, detail=f"Unknown package: {package_id}")
        session.set_package(package_id)

    def quote_session(self, session: WizardSession) -> Optional[QuoteResponse]:
        try:
            breakdown = session.quote()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return to_quote_response(breakdown) if breakdown else None


def quote_selection(data: QuoteRequest) -> QuoteResponse:
    """Price a selection without a wizard session"""
    draft = OrderDraft(category=data.category, staging_variations=data.stagingVariations)
    if data.category == ServiceCategory.ONSITE:
        draft.selected_package = data.packageId
        draft.selected_add_ons = list(data.addOns)
        if data.distanceKm is not None:
            draft.travel_cost = calculate_travel_cost(data.distanceKm)
    for item in data.lineItems:
        draft.toggle_line_item(item.serviceId, item.quantity, item.unitPrice, unit=item.unit, code=item.code)

    try:
        return to_quote_response(price_draft(draft))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def to_quote_response(breakdown: PriceBreakdown) -> QuoteResponse:
    return QuoteResponse(
        items=[PricedItemResponse(id=i.id, price=i.price, quantity=i.quantity) for i in breakdown.items],
        subtotal=breakdown.subtotal,
        taxAmount=breakdown.tax_amount,
        total=breakdown.total,
        travelCost=breakdown.travel_cost,
    )


def to_state_response(session: WizardSession) -> WizardStateResponse:
    draft = session.draft
    address = draft.address
    return WizardStateResponse(
        sessionId=session.id,
        draftOrderId=draft.draft_order_id,
        orderNumber=session.order_number,
        step=draft.step,
        category=draft.category,
        address=AddressResponse(
            street=address.street,
            houseNumber=address.house_number,
            postalCode=address.postal_code,
            city=address.city,
            notes=address.notes,
        ),
        locationValidated=draft.location_validated,
        photographyAvailable=draft.photography_available,
        travelCost=draft.travel_cost or Decimal("0"),
        distanceKm=draft.distance_km,
        selectedPackage=draft.selected_package,
        selectedAddOns=list(draft.selected_add_ons),
        lineItems=[
            LineItemResponse(
                serviceId=service_id,
                quantity=item.quantity,
                unitPrice=item.unit_price,
                totalPrice=item.total_price,
                unit=item.unit,
                code=item.code,
            )
            for service_id, item in draft.selected_line_items.items()
        ],
        stagingVariations=draft.staging_variations,
        requestedDate=draft.requested_date,
        requestedTime=draft.requested_time,
        alternativeDate=draft.alternative_date,
        alternativeTime=draft.alternative_time,
        specialInstructions=draft.special_instructions,
        canAdvance=can_advance_from(draft.step, draft),
        canSubmit=can_submit(draft),
        submitted=session.submitted,
        lastSaved=session.autosaver.last_saved.isoformat() if session.autosaver.last_saved else None,
    )
