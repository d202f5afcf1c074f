"""Order domain schemas - Pydantic models for the wizard API"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .draft import ServiceCategory


class AddressUpdate(BaseModel):
    """Partial address update; only the fields sent are changed"""

    street: Optional[str] = None
    houseNumber: Optional[str] = None
    postalCode: Optional[str] = None
    city: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("postalCode")
    @classmethod
    def validate_postal_code(cls, v):
        if v and not (v.isdigit() and len(v) == 5):
            raise ValueError("Postal code must be 5 digits")
        return v


class CategoryUpdate(BaseModel):
    category: Optional[ServiceCategory] = None


class LineItemUpdate(BaseModel):
    serviceId: str
    quantity: int = Field(ge=0)
    unitPrice: Decimal = Field(ge=0)
    unit: str = "piece"
    code: Optional[str] = None


class PackageUpdate(BaseModel):
    packageId: Optional[str] = None


class VariationsUpdate(BaseModel):
    variations: int = Field(ge=1, le=10)


class ScheduleUpdate(BaseModel):
    requestedDate: Optional[date] = None
    requestedTime: Optional[str] = None
    alternativeDate: Optional[date] = None
    alternativeTime: Optional[str] = None


class InstructionsUpdate(BaseModel):
    specialInstructions: Optional[str] = Field(default=None, max_length=2000)


class AddressResponse(BaseModel):
    street: str
    houseNumber: str
    postalCode: str
    city: str
    notes: str


class LineItemResponse(BaseModel):
    serviceId: str
    quantity: int
    unitPrice: Decimal
    totalPrice: Decimal
    unit: str
    code: Optional[str] = None


class WizardStateResponse(BaseModel):
    sessionId: str
    draftOrderId: Optional[str]
    orderNumber: Optional[str]
    step: int
    category: Optional[ServiceCategory]
    address: AddressResponse
    locationValidated: bool
    photographyAvailable: bool
    travelCost: Decimal
    distanceKm: float
    selectedPackage: Optional[str]
    selectedAddOns: list[str]
    lineItems: list[LineItemResponse]
    stagingVariations: int
    requestedDate: Optional[date] = None
    requestedTime: Optional[str] = None
    alternativeDate: Optional[date] = None
    alternativeTime: Optional[str] = None
    specialInstructions: Optional[str] = None
    canAdvance: bool
    canSubmit: bool
    submitted: bool
    lastSaved: Optional[str] = None


class LocationCheckResponse(BaseModel):
    valid: bool
    message: str
    travelCost: Decimal
    distanceKm: float
    photographyAvailable: bool


class ValidationResponse(BaseModel):
    isValid: bool
    errors: list[str]


class PricedItemResponse(BaseModel):
    id: str
    price: Decimal
    quantity: int


class QuoteResponse(BaseModel):
    items: list[PricedItemResponse]
    subtotal: Decimal
    taxAmount: Decimal
    total: Decimal
    travelCost: Optional[Decimal] = None


class QuoteRequest(BaseModel):
    """Stateless quote for a category selection"""

    category: ServiceCategory
    packageId: Optional[str] = None
    addOns: list[str] = []
    lineItems: list[LineItemUpdate] = []
    stagingVariations: int = Field(default=1, ge=1, le=10)
    distanceKm: Optional[float] = Field(default=None, ge=0)


class SubmissionResponse(BaseModel):
    success: bool
    orderId: Optional[str] = None
    orderNumber: Optional[str] = None


class PackageResponse(BaseModel):
    id: str
    name: str
    type: str
    photoCount: int
    price: Decimal
    tier: str
    popular: bool


class AddOnResponse(BaseModel):
    id: str
    name: str
    description: str
    price: Decimal
