from decimal import Decimal

import pytest

from common.errors import InvalidDimensions, InvalidQuantity, UnknownAxis, UnknownOption
from common.pricing import Configuration, DeliverySpeed
from common.pricing.definitions import MAX_DIMENSION, MAX_QUANTITY


class TestDefaults:
    def test_generic_product_starts_on_first_options(self, cards):
        config = Configuration.for_product(cards)
        assert config.quantity == 100
        assert config.selections == {"paper": "350gsm", "edge": "straight"}
        assert config.delivery_speed is DeliverySpeed.STANDARD
        assert config.needs_design_assist is False

    def test_per_unit_product_starts_on_first_unit(self, flyers):
        config = Configuration.for_product(flyers)
        assert config.quantity == 1
        assert config.selections == {"unit": "A4 Flyer"}

    def test_package_is_not_preselected(self, invitations):
        config = Configuration.for_product(invitations)
        assert "package" not in config.selections
        assert config.quantity == 1


class TestSetters:
    @pytest.mark.parametrize("bad", [0, -3, "abc", 2.5, True, None, "", 10**30, "1e30", "1e999999999"])
    def test_invalid_quantity_keeps_previous_value(self, cards, bad):
        config = Configuration.for_product(cards)
        config.set_quantity(250)

        with pytest.raises(InvalidQuantity):
            config.set_quantity(bad)

        assert config.quantity == 250

    def test_quantity_from_string(self, cards):
        config = Configuration.for_product(cards)
        assert config.set_quantity(" 40 ") == 40

    def test_quantity_upper_bound(self, cards):
        config = Configuration.for_product(cards)
        assert config.set_quantity(MAX_QUANTITY) == MAX_QUANTITY
        with pytest.raises(InvalidQuantity):
            config.set_quantity(MAX_QUANTITY + 1)
        assert config.quantity == MAX_QUANTITY

    def test_largest_banner_is_accepted(self, banner_product):
        config = Configuration.for_product(banner_product)
        config.set_dimensions(MAX_DIMENSION, MAX_DIMENSION)
        assert config.width == MAX_DIMENSION

    def test_unknown_axis_leaves_state_untouched(self, cards):
        config = Configuration.for_product(cards)
        config.select_option("paper", "600gsm")
        before = config.snapshot()

        with pytest.raises(UnknownAxis):
            config.select_option("lamination", "gloss")

        assert config.snapshot() == before

    def test_unknown_option(self, cards):
        config = Configuration.for_product(cards)
        with pytest.raises(UnknownOption):
            config.select_option("paper", "900gsm")
        assert config.selections["paper"] == "350gsm"

    def test_unit_axis_only_on_per_unit_products(self, cards, flyers):
        with pytest.raises(UnknownAxis):
            Configuration.for_product(cards).select_option("unit", "A4 Flyer")
        config = Configuration.for_product(flyers)
        config.select_option("unit", "A5 Flyer")
        assert config.selections["unit"] == "A5 Flyer"

    def test_select_package(self, invitations):
        config = Configuration.for_product(invitations)
        config.select_option("package", "Luxury Card")
        assert config.selections["package"] == "Luxury Card"

    def test_delivery_speed(self, cards):
        config = Configuration.for_product(cards)
        assert config.set_delivery_speed("RUSH") is DeliverySpeed.RUSH
        with pytest.raises(UnknownOption):
            config.set_delivery_speed("teleport")
        assert config.delivery_speed is DeliverySpeed.RUSH

    def test_toggle_design_assist(self, cards):
        config = Configuration.for_product(cards)
        assert config.toggle_design_assist() is True
        assert config.toggle_design_assist() is False
        assert config.toggle_design_assist(True) is True

    def test_dimensions_only_for_area_products(self, cards):
        with pytest.raises(UnknownAxis):
            Configuration.for_product(cards).set_dimensions(2, 3)

    @pytest.mark.parametrize(
        "width,height",
        [(0, 5), (4, -1), ("wide", 2), (None, 2), ("nan", 1), ("1e20", "1e20"), (1001, 2), (3, "1e999999999")],
    )
    def test_invalid_dimensions_keep_previous(self, banner_product, width, height):
        config = Configuration.for_product(banner_product)
        config.set_dimensions(3, 2)

        with pytest.raises(InvalidDimensions):
            config.set_dimensions(width, height)

        assert (config.width, config.height) == (Decimal("3"), Decimal("2"))

    def test_artwork(self, cards):
        config = Configuration.for_product(cards)
        config.attach_artwork("http://shop.test/api/uploads/artwork/logo.png")
        assert config.artwork_url.endswith("logo.png")
        with pytest.raises(ValueError):
            config.attach_artwork("   ")
        config.detach_artwork()
        assert config.artwork_url is None


class TestFromPayload:
    def test_applies_every_field(self, banner_product):
        config = Configuration.from_payload(
            banner_product,
            {
                "dimensions": {"width": "6", "height": "3"},
                "delivery_speed": "express",
                "needs_design_assist": True,
                "artwork_url": "http://shop.test/api/uploads/artwork/a.pdf",
            },
        )
        snap = config.snapshot()
        assert snap["dimensions"] == {"width": "6", "height": "3"}
        assert snap["delivery_speed"] == "express"
        assert snap["needs_design_assist"] is True
        assert snap["artwork_url"].endswith("a.pdf")

    def test_rejects_bad_selection(self, cards):
        with pytest.raises(UnknownOption):
            Configuration.from_payload(cards, {"selections": {"edge": "zigzag"}})

    def test_empty_payload_is_default(self, cards):
        assert Configuration.from_payload(cards, None).snapshot() == Configuration.for_product(cards).snapshot()
