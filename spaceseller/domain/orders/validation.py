"""Wizard step validation. Pure functions, safe to run on every keystroke."""

from dataclasses import dataclass, field

from .draft import OrderDraft


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


def _result(errors: list[str]) -> ValidationResult:
    return ValidationResult(is_valid=not errors, errors=errors)


def validate_location_step(draft: OrderDraft) -> ValidationResult:
    """Collect every address problem at once so the form can show them together"""
    errors = []
    address = draft.address

    if not address.street:
        errors.append("Street is required")
    if not address.house_number:
        errors.append("House number is required")
    if not address.postal_code:
        errors.append("Postal code is required")
    if not address.city:
        errors.append("City is required")
    if not draft.location_validated:
        errors.append("Location must be validated")

    return _result(errors)


def validate_category_step(draft: OrderDraft) -> ValidationResult:
    errors = []
    if not draft.category:
        errors.append("A category must be selected")
    return _result(errors)


def validate_configuration_step(draft: OrderDraft) -> ValidationResult:
    errors = []
    if not draft.has_pricing_basis():
        errors.append("At least one product or package must be selected")
    return _result(errors)


def validate_order(draft: OrderDraft) -> ValidationResult:
    errors = (
        validate_location_step(draft).errors
        + validate_category_step(draft).errors
        + validate_configuration_step(draft).errors
    )
    return _result(errors)


def can_advance_from(step: int, draft: OrderDraft) -> bool:
    """Whether the wizard may leave `step` going forward"""
    if step == 1:
        return validate_location_step(draft).is_valid
    if step == 2:
        return validate_location_step(draft).is_valid and validate_category_step(draft).is_valid
    if step == 3:
        return can_submit(draft)
    return False


def can_submit(draft: OrderDraft) -> bool:
    return validate_order(draft).is_valid
