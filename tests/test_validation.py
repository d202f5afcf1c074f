"""Tests for wizard step validation and draft mutators"""

from decimal import Decimal

import pytest

from spaceseller.domain.orders.draft import OrderDraft, ServiceCategory
from spaceseller.domain.orders.validation import (
    can_advance_from,
    can_submit,
    validate_category_step,
    validate_configuration_step,
    validate_location_step,
    validate_order,
)


class TestLocationStep:
    def test_empty_address_reports_every_problem(self):
        result = validate_location_step(OrderDraft())
        assert not result.is_valid
        assert len(result.errors) == 5

    def test_complete_validated_address(self, valid_draft):
        result = validate_location_step(valid_draft)
        assert result.is_valid
        assert result.errors == []

    def test_unvalidated_location_fails(self, valid_draft):
        valid_draft.location_validated = False
        assert validate_location_step(valid_draft).errors == ["Location must be validated"]


class TestOtherSteps:
    def test_category_required(self):
        assert validate_category_step(OrderDraft()).errors == ["A category must be selected"]

    def test_package_or_line_items_required(self):
        draft = OrderDraft(category=ServiceCategory.PHOTO_EDITING)
        assert not validate_configuration_step(draft).is_valid
        draft.toggle_line_item("svc", 1, Decimal("5"))
        assert validate_configuration_step(draft).is_valid

    def test_validate_order_collects_all_steps(self):
        assert len(validate_order(OrderDraft()).errors) == 7


class TestCanSubmit:
    def test_valid_draft_can_submit(self, valid_draft):
        assert can_submit(valid_draft)

    @pytest.mark.parametrize(
        "field,value",
        [("location_validated", False), ("category", None), ("selected_package", None)],
    )
    def test_removing_any_requirement_blocks_submit(self, valid_draft, field, value):
        setattr(valid_draft, field, value)
        assert not can_submit(valid_draft)

    def test_line_items_satisfy_configuration(self, valid_draft):
        valid_draft.selected_package = None
        valid_draft.toggle_line_item("svc", 2, Decimal("5"))
        assert can_submit(valid_draft)


class TestCanAdvance:
    def test_step_one_needs_location(self, valid_draft):
        assert can_advance_from(1, valid_draft)
        assert not can_advance_from(1, OrderDraft())

    def test_step_two_needs_category(self, valid_draft):
        valid_draft.category = None
        assert can_advance_from(1, valid_draft)
        assert not can_advance_from(2, valid_draft)

    def test_unknown_step(self, valid_draft):
        assert not can_advance_from(7, valid_draft)


class TestDraftMutators:
    def test_address_change_invalidates_location(self, valid_draft):
        valid_draft.update_address_field("city", "Potsdam")
        assert valid_draft.address.city == "Potsdam"
        assert not valid_draft.location_validated
        assert valid_draft.travel_cost == Decimal("0")

    def test_unknown_address_field_rejected(self, valid_draft):
        with pytest.raises(ValueError):
            valid_draft.update_address_field("country", "AT")

    def test_category_change_clears_selections(self, valid_draft):
        valid_draft.selected_add_ons = ["drone"]
        valid_draft.set_category(ServiceCategory.VIRTUAL_STAGING)
        assert valid_draft.selected_package is None
        assert valid_draft.selected_add_ons == []

    def test_same_category_keeps_selections(self, valid_draft):
        valid_draft.set_category(ServiceCategory.ONSITE)
        assert valid_draft.selected_package == "photo_standard"

    def test_zero_quantity_removes_line_item(self):
        draft = OrderDraft()
        draft.toggle_line_item("svc", 3, Decimal("2.50"))
        assert draft.selected_line_items["svc"].total_price == Decimal("7.50")
        draft.toggle_line_item("svc", 0, Decimal("2.50"))
        assert draft.selected_line_items == {}

    def test_clearing_package_clears_add_ons(self, valid_draft):
        valid_draft.toggle_add_on("drone")
        valid_draft.set_package(None)
        assert valid_draft.selected_add_ons == []

    def test_toggle_add_on(self):
        draft = OrderDraft()
        draft.toggle_add_on("video")
        assert draft.selected_add_ons == ["video"]
        draft.toggle_add_on("video")
        assert draft.selected_add_ons == []

    def test_snapshot_ignores_untracked_fields(self, valid_draft):
        before = valid_draft.snapshot()
        valid_draft.special_instructions = "Keys at the neighbour"
        assert valid_draft.snapshot() == before
        valid_draft.step = 2
        assert valid_draft.snapshot() != before
