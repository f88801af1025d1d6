from dataclasses import replace
from decimal import Decimal

import pytest

from common.errors import IncompleteConfiguration
from common.pricing import Configuration, CustomizationAxis, ProductDefinition, compute_price, to_line_item


def test_generic_line_records_choices(cards):
    config = Configuration.for_product(cards)
    config.select_option("paper", "600gsm")
    config.toggle_design_assist(True)

    line = to_line_item(cards, config, compute_price(cards, config))

    assert line.product_id == "cards"
    assert line.quantity == 100
    assert line.unit_price == Decimal("170.00")
    assert line.flat_fees == Decimal("5000.00")
    assert line.total_price == Decimal("22000.00")
    specs = line.selected_specs
    assert specs["pricing_model"] == "generic"
    assert [o["value"] for o in specs["options"]] == ["600gsm", "straight"]
    assert "Paper Weight: 600 grams" in specs["labels"]
    assert "Design assistance" in specs["labels"]
    assert line.custom_dimensions is None


def test_area_line_keeps_dimensions(banner_product):
    config = Configuration.for_product(banner_product)
    config.set_dimensions(10, 5)

    line = to_line_item(banner_product, config, compute_price(banner_product, config))

    assert line.quantity == 1
    assert line.total_price == Decimal("15000.00")
    assert line.custom_dimensions == {"width": "10", "height": "5", "unit": "ft", "rate": "300"}
    assert "Size: 10 x 5 ft" in line.selected_specs["labels"]


def test_tier_and_unit_lines_record_choice(invitations, flyers):
    config = Configuration.for_product(invitations)
    config.select_option("package", "Middle Class Card")
    tier_line = to_line_item(invitations, config, compute_price(invitations, config))
    assert tier_line.selected_specs["options"][-1]["value"] == "Middle Class Card"

    config = Configuration.for_product(flyers)
    config.set_quantity(250)
    unit_line = to_line_item(flyers, config, compute_price(flyers, config))
    assert unit_line.selected_specs["options"][-1] == {
        "axis": "Size",
        "type": "unit",
        "value": "A4 Flyer",
        "label": "A4 Flyer",
        "price": "150",
    }
    assert unit_line.total_price == Decimal("37500.00")


def test_artwork_goes_to_its_own_field(cards):
    config = Configuration.for_product(cards)
    config.attach_artwork("http://shop.test/api/uploads/artwork/logo.png")
    line = to_line_item(cards, config, compute_price(cards, config))
    assert line.artwork_url == "http://shop.test/api/uploads/artwork/logo.png"


def test_axis_without_options_is_incomplete():
    product = ProductDefinition(id="odd", name="Odd", axes=(CustomizationAxis("Colour", "colour", ()),))
    config = Configuration.for_product(product)
    with pytest.raises(IncompleteConfiguration):
        compute_price(product, config)


def test_rejects_inconsistent_breakdown(cards):
    config = Configuration.for_product(cards)
    breakdown = compute_price(cards, config)
    with pytest.raises(ValueError):
        to_line_item(cards, config, replace(breakdown, total=breakdown.total + 1))
