"""Order router - FastAPI endpoints for the order wizard"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from ...auth import get_current_user
from ...models import Profile
from .catalog import ADD_ONS, PACKAGE_TIERS, PACKAGE_TYPES, filter_packages_by_type
from .schemas import (
    AddOnResponse,
    AddressUpdate,
    CategoryUpdate,
    InstructionsUpdate,
    LineItemUpdate,
    LocationCheckResponse,
    PackageResponse,
    PackageUpdate,
    QuoteRequest,
    QuoteResponse,
    ScheduleUpdate,
    SubmissionResponse,
    ValidationResponse,
    VariationsUpdate,
    WizardStateResponse,
)
from .service import OrderWizardService, quote_selection, to_state_response
from .wizard import WizardSessionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])


def get_session_store(request: Request) -> WizardSessionStore:
    return request.app.state.wizard_sessions


def get_order_service(
    store: WizardSessionStore = Depends(get_session_store),
    current_user: Profile = Depends(get_current_user),
) -> OrderWizardService:
    """Dependency injection for OrderWizardService"""
    return OrderWizardService(store, current_user)


async def enqueue_order_webhook(order_id: str, user_id: str, category: str) -> None:
    """Queue the new-order webhook; never fails the request"""
    from arq import create_pool

    from ...worker import get_redis_settings

    try:
        pool = await create_pool(get_redis_settings())
        job = await pool.enqueue_job("trigger_order_webhook_task", order_id, user_id, category)
        logger.info(f"📋 Order webhook job queued: {job.job_id if job else 'duplicate'}")
        await pool.close()
    except Exception as e:
        logger.warning(f"⚠️ Failed to queue order webhook for {order_id}: {e}")


# ============================================================================
# CATALOG
# ============================================================================


@router.get("/catalog/packages", response_model=list[PackageResponse])
async def list_packages(type: Optional[str] = None):
    if type and type not in PACKAGE_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown package type: {type}")
    packages = filter_packages_by_type(type) if type else PACKAGE_TIERS
    return [
        PackageResponse(
            id=p.id,
            name=p.name,
            type=p.type,
            photoCount=p.photo_count,
            price=p.price,
            tier=p.tier,
            popular=p.popular,
        )
        for p in packages
    ]


@router.get("/catalog/add-ons", response_model=list[AddOnResponse])
async def list_add_ons():
    return [AddOnResponse(id=a.id, name=a.name, description=a.description, price=a.price) for a in ADD_ONS]


@router.post("/quote", response_model=QuoteResponse)
async def quote(data: QuoteRequest):
    """Price a category selection without opening a wizard"""
    return quote_selection(data)


# ============================================================================
# WIZARD SESSION
# ============================================================================


@router.post("/wizard", response_model=WizardStateResponse)
async def open_wizard(service: OrderWizardService = Depends(get_order_service)):
    """Create a draft order and open a wizard session for it"""
    session = await service.open_session()
    return to_state_response(session)


@router.get("/wizard/{session_id}", response_model=WizardStateResponse)
async def get_wizard(session_id: str, service: OrderWizardService = Depends(get_order_service)):
    return to_state_response(service.get_session(session_id))


@router.delete("/wizard/{session_id}")
async def close_wizard(session_id: str, service: OrderWizardService = Depends(get_order_service)):
    await service.close_session(session_id)
    return {"message": "Wizard session closed"}


@router.patch("/wizard/{session_id}/address", response_model=WizardStateResponse)
async def update_address(
    session_id: str,
    data: AddressUpdate,
    service: OrderWizardService = Depends(get_order_service),
):
    """Update address fields. Any change requires the location to be validated again."""
    session = service.get_session(session_id)
    service.update_address(session, data)
    return to_state_response(session)


@router.post("/wizard/{session_id}/location/validate", response_model=LocationCheckResponse)
async def validate_location(session_id: str, service: OrderWizardService = Depends(get_order_service)):
    session = service.get_session(session_id)
    result = await session.validate_location()
    return LocationCheckResponse(
        valid=result.valid,
        message=result.message,
        travelCost=result.travel_cost,
        distanceKm=result.distance_km,
        photographyAvailable=result.photography_available,
    )


@router.put("/wizard/{session_id}/category", response_model=WizardStateResponse)
async def set_category(
    session_id: str,
    data: CategoryUpdate,
    service: OrderWizardService = Depends(get_order_service),
):
    session = service.get_session(session_id)
    service.set_category(session, data.category)
    return to_state_response(session)


@router.put("/wizard/{session_id}/line-items", response_model=WizardStateResponse)
async def set_line_item(
    session_id: str,
    data: LineItemUpdate,
    service: OrderWizardService = Depends(get_order_service),
):
    """Set the quantity of a product; quantity 0 removes it"""
    session = service.get_session(session_id)
    session.toggle_line_item(data.serviceId, data.quantity, data.unitPrice, unit=data.unit, code=data.code)
    return to_state_response(session)


@router.put("/wizard/{session_id}/package", response_model=WizardStateResponse)
async def set_package(
    session_id: str,
    data: PackageUpdate,
    service: OrderWizardService = Depends(get_order_service),
):
    session = service.get_session(session_id)
    service.set_package(session, data.packageId)
    return to_state_response(session)


@router.post("/wizard/{session_id}/add-ons/{add_on_id}/toggle", response_model=WizardStateResponse)
async def toggle_add_on(
    session_id: str,
    add_on_id: str,
    service: OrderWizardService = Depends(get_order_service),
):
    session = service.get_session(session_id)
    session.toggle_add_on(add_on_id)
    return to_state_response(session)


@router.put("/wizard/{session_id}/staging-variations", response_model=WizardStateResponse)
async def set_staging_variations(
    session_id: str,
    data: VariationsUpdate,
    service: OrderWizardService = Depends(get_order_service),
):
    session = service.get_session(session_id)
    session.set_staging_variations(data.variations)
    return to_state_response(session)


@router.put("/wizard/{session_id}/schedule", response_model=WizardStateResponse)
async def set_schedule(
    session_id: str,
    data: ScheduleUpdate,
    service: OrderWizardService = Depends(get_order_service),
):
    session = service.get_session(session_id)
    session.set_schedule(data.requestedDate, data.requestedTime, data.alternativeDate, data.alternativeTime)
    return to_state_response(session)


@router.put("/wizard/{session_id}/instructions", response_model=WizardStateResponse)
async def set_instructions(
    session_id: str,
    data: InstructionsUpdate,
    service: OrderWizardService = Depends(get_order_service),
):
    session = service.get_session(session_id)
    session.set_special_instructions(data.specialInstructions)
    return to_state_response(session)


@router.post("/wizard/{session_id}/next", response_model=WizardStateResponse)
async def next_step(session_id: str, service: OrderWizardService = Depends(get_order_service)):
    session = service.get_session(session_id)
    session.next_step()
    return to_state_response(session)


@router.post("/wizard/{session_id}/prev", response_model=WizardStateResponse)
async def prev_step(session_id: str, service: OrderWizardService = Depends(get_order_service)):
    session = service.get_session(session_id)
    session.prev_step()
    return to_state_response(session)


@router.get("/wizard/{session_id}/validation", response_model=ValidationResponse)
async def get_validation(session_id: str, service: OrderWizardService = Depends(get_order_service)):
    result = service.get_session(session_id).validate()
    return ValidationResponse(isValid=result.is_valid, errors=result.errors)


@router.get("/wizard/{session_id}/quote", response_model=Optional[QuoteResponse])
async def get_quote(session_id: str, service: OrderWizardService = Depends(get_order_service)):
    session = service.get_session(session_id)
    return service.quote_session(session)


@router.post("/wizard/{session_id}/submit", response_model=SubmissionResponse)
async def submit_order(session_id: str, service: OrderWizardService = Depends(get_order_service)):
    """Submit the draft. Failures return the reason of the failing step."""
    session = service.get_session(session_id)
    result = await session.submit()
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)

    await enqueue_order_webhook(result.order_id, session.user_id, session.draft.category.value)
    await service.close_session(session_id)
    return SubmissionResponse(success=True, orderId=result.order_id, orderNumber=session.order_number)
