from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, TypeVar
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError

from ..db.session import get_session
from ..errors import InvalidQuantity, LineItemNotFound, PersistenceFailure
from ..models.cart import Cart
from ..models.cart_item import CartItem
from ..pricing import CartLineDraft, Configuration, PricingSettings, compute_price, line_total, to_line_item, to_money
from ..pricing.definitions import MAX_QUANTITY
from ..utils.validators import ensure_positive_int
from .logging import log_event

T = TypeVar("T")


@dataclass(frozen=True)
class CartOwner:
    """Exactly one of an authenticated user id or an anonymous session id."""

    user_id: Optional[str] = None
    session_id: Optional[str] = None

    def __post_init__(self) -> None:
        if bool(self.user_id) == bool(self.session_id):
            raise ValueError("cart owner needs exactly one of user_id or session_id")

    @classmethod
    def resolve(cls, user_id: Optional[str], session_id: Optional[str]) -> "CartOwner":
        if user_id:
            return cls(user_id=user_id)
        if session_id:
            return cls(session_id=session_id)
        raise ValueError("no user id or session id to own a cart")

    def filter(self, query):
        if self.user_id:
            return query.filter(Cart.user_id == self.user_id)
        return query.filter(Cart.session_id == self.session_id)

    def describe(self) -> Dict[str, Optional[str]]:
        return {"user_id": self.user_id, "session_id": self.session_id}


@dataclass(frozen=True)
class CartLine:
    id: str
    product_id: Optional[str]
    product_name: str
    product_description: str
    quantity: int
    unit_price: Decimal
    flat_fees: Decimal
    total_price: Decimal
    selected_specs: Dict[str, Any]
    custom_dimensions: Optional[Dict[str, Any]]
    artwork_url: Optional[str]

    @classmethod
    def from_row(cls, row: CartItem) -> "CartLine":
        return cls(
            id=row.id,
            product_id=row.product_id,
            product_name=row.product_name,
            product_description=row.product_description or "",
            quantity=int(row.quantity),
            unit_price=to_money(row.unit_price),
            flat_fees=to_money(row.flat_fees),
            total_price=to_money(row.total_price),
            selected_specs=row.selected_specs or {},
            custom_dimensions=row.custom_dimensions,
            artwork_url=row.artwork_url,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "product_description": self.product_description,
            "quantity": self.quantity,
            "unit_price": float(self.unit_price),
            "flat_fees": float(self.flat_fees),
            "total_price": float(self.total_price),
            "selected_specs": self.selected_specs,
            "custom_dimensions": self.custom_dimensions,
            "artwork_url": self.artwork_url,
        }


class CartAggregate:
    """One shopper's cart.

    The line list is only ever replaced by a reload from the store, so the
    derived totals always describe what the store holds.
    """

    def __init__(self, owner: CartOwner, session_factory=get_session, *, load: bool = True):
        self.owner = owner
        self._session_factory = session_factory
        self._lines: Tuple[CartLine, ...] = ()
        if load:
            self.reload()

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return self._lines

    @property
    def cart_total(self) -> Decimal:
        return to_money(sum((line.total_price for line in self._lines), Decimal("0")))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def reload(self) -> None:
        try:
            with self._session_factory() as session:
                cart = self._find_cart(session)
                rows = []
                if cart is not None:
                    rows = (
                        session.query(CartItem)
                        .filter(CartItem.cart_id == cart.id)
                        .order_by(CartItem.added_at.asc())
                        .all()
                    )
                lines = tuple(CartLine.from_row(r) for r in rows)
        except SQLAlchemyError as exc:
            log_event("error", "cart.persistence_failed", action="reload", error=str(exc), **self.owner.describe())
            raise PersistenceFailure("Could not load your cart.") from exc
        self._lines = lines

    def add_line(self, draft: CartLineDraft) -> CartLine:
        def _insert(session) -> str:
            cart = self._find_cart(session) or self._create_cart(session)
            item = CartItem(
                id=str(uuid4()),
                cart_id=cart.id,
                product_id=draft.product_id,
                product_name=draft.product_name,
                product_description=draft.product_description,
                quantity=draft.quantity,
                unit_price=draft.unit_price,
                flat_fees=draft.flat_fees,
                total_price=line_total(draft.unit_price, draft.quantity, draft.flat_fees),
                selected_specs=draft.selected_specs,
                custom_dimensions=draft.custom_dimensions,
                artwork_url=draft.artwork_url,
            )
            session.add(item)
            session.flush()
            return item.id

        line_id = self._apply("add item to cart", _insert, product_id=draft.product_id)
        log_event(
            "info",
            "cart.line_added",
            line_id=line_id,
            product_id=draft.product_id,
            total=str(draft.total_price),
            **self.owner.describe(),
        )
        return self._line(line_id)

    def remove_line(self, line_id: str) -> None:
        def _delete(session) -> None:
            session.delete(self._owned_item(session, line_id))
            session.flush()

        self._apply("remove item from cart", _delete, line_id=line_id)
        log_event("info", "cart.line_removed", line_id=line_id, **self.owner.describe())

    def update_quantity(self, line_id: str, quantity: Any) -> CartLine:
        """Change a line's quantity; one-time fees are carried over unchanged."""

        try:
            new_quantity = ensure_positive_int(quantity, "quantity", maximum=MAX_QUANTITY)
        except ValueError:
            raise InvalidQuantity(quantity) from None

        def _update(session) -> None:
            item = self._owned_item(session, line_id)
            item.quantity = new_quantity
            item.total_price = line_total(item.unit_price, new_quantity, item.flat_fees or 0)
            session.flush()

        self._apply("update item quantity", _update, line_id=line_id)
        log_event("info", "cart.line_updated", line_id=line_id, quantity=new_quantity, **self.owner.describe())
        return self._line(line_id)

    def clear(self) -> int:
        def _clear(session) -> int:
            cart = self._find_cart(session)
            if cart is None:
                return 0
            removed = session.query(CartItem).filter(CartItem.cart_id == cart.id).delete(synchronize_session=False)
            session.flush()
            return removed

        removed = self._apply("clear cart", _clear)
        log_event("info", "cart.cleared", removed=removed, **self.owner.describe())
        return removed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [line.to_dict() for line in self._lines],
            "cart_total": float(self.cart_total),
            "item_count": self.item_count,
        }

    def _apply(self, action: str, fn: Callable[[Any], T], **fields) -> T:
        try:
            with self._session_factory() as session:
                result = fn(session)
        except SQLAlchemyError as exc:
            log_event("error", "cart.persistence_failed", action=action, error=str(exc), **fields)
            self._resync()
            raise PersistenceFailure(f"Could not {action}. Please try again.") from exc
        self.reload()
        return result

    def _resync(self) -> None:
        try:
            self.reload()
        except PersistenceFailure:
            # already logged by reload; keep the last known lines
            pass

    def _line(self, line_id: str) -> CartLine:
        for line in self._lines:
            if line.id == line_id:
                return line
        raise LineItemNotFound(line_id)

    def _find_cart(self, session) -> Optional[Cart]:
        return self.owner.filter(session.query(Cart)).order_by(Cart.created_at.asc()).first()

    def _create_cart(self, session) -> Cart:
        cart = Cart(id=str(uuid4()), user_id=self.owner.user_id, session_id=self.owner.session_id)
        session.add(cart)
        session.flush()
        log_event("info", "cart.created", cart_id=cart.id, **self.owner.describe())
        return cart

    def _owned_item(self, session, line_id: str) -> CartItem:
        cart = self._find_cart(session)
        item = None
        if cart is not None and line_id:
            item = (
                session.query(CartItem)
                .filter(CartItem.id == line_id, CartItem.cart_id == cart.id)
                .first()
            )
        if item is None:
            raise LineItemNotFound(line_id)
        return item


class CartService:
    """Cart operations backed by DB."""

    def __init__(self, session_factory=get_session, *, catalog=None, pricing: Optional[PricingSettings] = None):
        self._session_factory = session_factory
        self._catalog = catalog
        self._pricing = pricing or PricingSettings()

    def use_pricing(self, pricing: PricingSettings) -> None:
        self._pricing = pricing

    def for_owner(self, owner: CartOwner) -> CartAggregate:
        return CartAggregate(owner, self._session_factory)

    def add_configured_item(
        self, owner: CartOwner, product_id: str, payload: Optional[Mapping[str, Any]]
    ) -> Tuple[CartAggregate, CartLine]:
        """Price the requested configuration and append it to the owner's cart."""

        if not product_id:
            raise ValueError("product_id required")
        product = self._catalog.get_definition(product_id)
        if product is None:
            raise LookupError("product not found or inactive")
        configuration = Configuration.from_payload(product, payload)
        breakdown = compute_price(product, configuration, self._pricing)
        draft = to_line_item(product, configuration, breakdown)
        cart = self.for_owner(owner)
        line = cart.add_line(draft)
        return cart, line
