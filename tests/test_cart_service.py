from decimal import Decimal

import pytest

from common.errors import InvalidQuantity, LineItemNotFound, PersistenceFailure, UnknownOption
from common.pricing import Configuration, compute_price, to_line_item
from common.services.cart_service import CartAggregate, CartOwner, CartService


def _draft(catalog, product_id, **payload):
    product = catalog.get_definition(product_id)
    config = Configuration.from_payload(product, payload)
    return to_line_item(product, config, compute_price(product, config))


def _recomputed_total(cart):
    return sum((line.unit_price * line.quantity + line.flat_fees for line in cart.lines), Decimal("0"))


class TestCartOwner:
    def test_exactly_one_identity(self):
        with pytest.raises(ValueError):
            CartOwner()
        with pytest.raises(ValueError):
            CartOwner(user_id="u1", session_id="s1")

    def test_resolve_prefers_user(self):
        assert CartOwner.resolve("u1", "s1") == CartOwner(user_id="u1")
        assert CartOwner.resolve(None, "s1") == CartOwner(session_id="s1")
        with pytest.raises(ValueError):
            CartOwner.resolve(None, "")


class TestCartAggregate:
    def test_empty_cart_is_not_persisted(self, session_factory):
        cart = CartAggregate(CartOwner(session_id="anon"), session_factory)
        assert cart.lines == ()
        assert cart.cart_total == Decimal("0.00")
        assert cart.item_count == 0

    def test_add_line_round_trips(self, session_factory, catalog):
        owner = CartOwner(session_id="anon")
        draft = _draft(catalog, "business-cards", selections={"paper": "600gsm"}, needs_design_assist=True)

        line = CartAggregate(owner, session_factory).add_line(draft)
        reloaded = CartAggregate(owner, session_factory)

        assert reloaded.lines == (line,)
        assert line.selected_specs == draft.selected_specs
        assert line.total_price == draft.total_price == Decimal("22000.00")
        assert line.flat_fees == Decimal("5000.00")

    def test_totals_follow_every_mutation(self, session_factory, catalog):
        cart = CartAggregate(CartOwner(user_id="u1"), session_factory)
        first = cart.add_line(_draft(catalog, "business-cards"))
        assert cart.cart_total == _recomputed_total(cart)

        second = cart.add_line(_draft(catalog, "banner", dimensions={"width": 10, "height": 5}))
        assert cart.cart_total == Decimal("29000.00")

        cart.update_quantity(first.id, 200)
        assert cart.cart_total == _recomputed_total(cart)

        third = cart.add_line(_draft(catalog, "flyers-brochure", quantity=250, delivery_speed="rush"))
        cart.remove_line(second.id)
        assert cart.cart_total == _recomputed_total(cart)
        assert [line.id for line in cart.lines] == [first.id, third.id]
        assert cart.item_count == 450

    def test_quantity_update_keeps_flat_fees(self, session_factory, catalog):
        cart = CartAggregate(CartOwner(session_id="anon"), session_factory)
        line = cart.add_line(_draft(catalog, "mugs", delivery_speed="express"))

        updated = cart.update_quantity(line.id, "3")

        assert updated.quantity == 3
        assert updated.flat_fees == Decimal("4000.00")
        assert updated.total_price == Decimal("2000.00") * 3 + Decimal("4000.00")

    @pytest.mark.parametrize("bad", [0, -1, "two", 1.5, 10**30, "1e999999999"])
    def test_invalid_quantity_leaves_line_unchanged(self, session_factory, catalog, bad):
        cart = CartAggregate(CartOwner(session_id="anon"), session_factory)
        line = cart.add_line(_draft(catalog, "mugs"))

        with pytest.raises(InvalidQuantity):
            cart.update_quantity(line.id, bad)

        assert cart.lines == (line,)

    def test_unknown_line(self, session_factory):
        cart = CartAggregate(CartOwner(session_id="anon"), session_factory)
        with pytest.raises(LineItemNotFound):
            cart.remove_line("missing")

    def test_cannot_touch_another_owners_line(self, session_factory, catalog):
        mine = CartAggregate(CartOwner(session_id="mine"), session_factory)
        theirs = CartAggregate(CartOwner(session_id="theirs"), session_factory)
        line = theirs.add_line(_draft(catalog, "mugs"))

        with pytest.raises(LineItemNotFound):
            mine.update_quantity(line.id, 5)
        with pytest.raises(LineItemNotFound):
            mine.remove_line(line.id)

        theirs.reload()
        assert theirs.lines[0].quantity == 1

    def test_user_and_session_carts_are_separate(self, session_factory, catalog):
        CartAggregate(CartOwner(session_id="s1"), session_factory).add_line(_draft(catalog, "mugs"))
        assert CartAggregate(CartOwner(user_id="s1"), session_factory).lines == ()

    def test_clear(self, session_factory, catalog):
        cart = CartAggregate(CartOwner(session_id="anon"), session_factory)
        cart.add_line(_draft(catalog, "mugs"))
        cart.add_line(_draft(catalog, "branded-tshirt"))

        assert cart.clear() == 2
        assert cart.lines == ()
        assert cart.clear() == 0

    def test_persistence_failure_keeps_last_known_lines(self, flaky_sessions, catalog):
        cart = CartAggregate(CartOwner(session_id="anon"), flaky_sessions)
        line = cart.add_line(_draft(catalog, "mugs"))

        flaky_sessions.fail = True
        with pytest.raises(PersistenceFailure):
            cart.add_line(_draft(catalog, "branded-tshirt"))
        with pytest.raises(PersistenceFailure):
            cart.update_quantity(line.id, 9)

        assert cart.lines == (line,)
        flaky_sessions.fail = False
        cart.reload()
        assert cart.lines == (line,)

    def test_reload_failure(self, flaky_sessions):
        flaky_sessions.fail = True
        with pytest.raises(PersistenceFailure):
            CartAggregate(CartOwner(session_id="anon"), flaky_sessions)


class TestCartService:
    def test_add_configured_item(self, session_factory, catalog):
        service = CartService(session_factory, catalog=catalog)
        owner = CartOwner(session_id="anon")

        cart, line = service.add_configured_item(
            owner, "wedding-invitations", {"selections": {"package": "Luxury Card"}}
        )

        assert line.total_price == Decimal("100000.00")
        assert service.for_owner(owner).cart_total == Decimal("100000.00")
        assert cart.lines == (line,)

    def test_unknown_or_inactive_product(self, session_factory, catalog):
        service = CartService(session_factory, catalog=catalog)
        owner = CartOwner(session_id="anon")
        with pytest.raises(LookupError):
            service.add_configured_item(owner, "no-such-product", {})
        catalog.deactivate_product("mugs")
        with pytest.raises(LookupError):
            service.add_configured_item(owner, "mugs", {})

    def test_invalid_configuration_adds_nothing(self, session_factory, catalog):
        service = CartService(session_factory, catalog=catalog)
        owner = CartOwner(session_id="anon")
        with pytest.raises(UnknownOption):
            service.add_configured_item(owner, "mugs", {"selections": {"mug": "golden"}})
        assert service.for_owner(owner).lines == ()
