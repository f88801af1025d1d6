from datetime import datetime, timezone
from decimal import Decimal
import secrets
from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from ..db.session import get_session
from ..errors import EmptyCart, PersistenceFailure
from ..models.cart import Cart
from ..models.cart_item import CartItem
from ..models.order import Order, OrderItem
from ..models.product import Product
from ..pricing import to_money
from ..utils.dto import to_order_dto
from ..utils.validators import clean_text
from .cart_service import CartOwner
from .logging import log_event


ORDER_STATUSES = ("pending", "processing", "completed", "cancelled")
PAYMENT_STATUSES = ("unpaid", "paid")


def generate_order_number(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"ORD-{now:%Y%m%d}-{secrets.token_hex(3).upper()}"


class OrderService:
    """Order creation and retrieval backed by DB."""

    def __init__(self, session_factory=get_session, *, currency: str = "NGN"):
        self._session_factory = session_factory
        self._currency = currency

    def use_currency(self, currency: str) -> None:
        self._currency = currency

    def create_order(
        self,
        *,
        owner: CartOwner,
        customer: Mapping[str, Any],
        delivery_address: Any,
        notes: Optional[str] = None,
        delivery_fee: Any = 0,
        request_id: Optional[str] = None,
    ) -> Dict:
        """Create order from current cart (idempotency by request_id)."""
        name = clean_text(customer.get("name"), max_length=255)
        email = clean_text(customer.get("email"), max_length=255)
        if not name or not email:
            raise ValueError("customer name and email required")
        if not delivery_address:
            raise ValueError("delivery_address required")
        fee = to_money(delivery_fee)
        if fee < 0:
            raise ValueError("delivery_fee must be >= 0")

        try:
            with self._session_factory() as session:
                # idempotency: if request_id provided and existing order found, return it
                if request_id:
                    existing = session.query(Order).filter(Order.request_id == request_id).first()
                    if existing:
                        return {"order_id": existing.id, "order_number": existing.order_number, "status": existing.status}
                cart = owner.filter(session.query(Cart)).order_by(Cart.created_at.asc()).first()
                items = []
                if cart is not None:
                    items = (
                        session.query(CartItem)
                        .filter(CartItem.cart_id == cart.id)
                        .order_by(CartItem.added_at.asc())
                        .all()
                    )
                if not items:
                    raise EmptyCart()

                subtotal = sum((to_money(it.total_price) for it in items), Decimal("0"))
                oid = str(uuid4())
                order = Order(
                    id=oid,
                    order_number=generate_order_number(),
                    session_id=owner.session_id,
                    user_id=owner.user_id,
                    customer_name=name,
                    customer_email=email,
                    customer_phone=clean_text(customer.get("phone"), max_length=64),
                    delivery_address=delivery_address,
                    notes=clean_text(notes),
                    subtotal=to_money(subtotal),
                    delivery_fee=fee,
                    total_amount=to_money(subtotal + fee),
                    currency=self._currency,
                    status="pending",
                    payment_status="unpaid",
                    request_id=request_id,
                )
                for line_no, it in enumerate(items):
                    order.items.append(
                        OrderItem(
                            id=str(uuid4()),
                            line_no=line_no,
                            product_id=it.product_id,
                            product_name=it.product_name,
                            product_description=it.product_description,
                            quantity=it.quantity,
                            unit_price=it.unit_price,
                            flat_fees=it.flat_fees,
                            total_price=it.total_price,
                            selected_specs=it.selected_specs,
                            custom_dimensions=it.custom_dimensions,
                            artwork_url=it.artwork_url,
                        )
                    )
                session.add(order)
                # Clear cart after order creation
                for it in items:
                    session.delete(it)
                session.flush()
                order_number = order.order_number
        except SQLAlchemyError as exc:
            log_event("error", "order.persistence_failed", error=str(exc), **owner.describe())
            raise PersistenceFailure("Could not place your order. Please try again.") from exc
        log_event("info", "order.created", order_id=oid, order_number=order_number, items=len(items), subtotal=str(subtotal))
        return {"order_id": oid, "order_number": order_number, "status": "pending"}

    def get_order(self, order_id: str, *, owner: Optional[CartOwner] = None) -> Dict:
        if not order_id:
            return {}
        with self._session_factory() as session:
            q = session.query(Order).options(selectinload(Order.items)).filter(Order.id == order_id)
            if owner is not None:
                q = q.filter(Order.user_id == owner.user_id) if owner.user_id else q.filter(Order.session_id == owner.session_id)
            o = q.first()
            if not o:
                return {}
            return to_order_dto(o)

    def list_orders(self, *, status: Optional[str] = None, limit: int = 50) -> List[Dict]:
        with self._session_factory() as session:
            q = session.query(Order).options(selectinload(Order.items))
            if status:
                q = q.filter(Order.status == status)
            rows = q.order_by(Order.created_at.desc()).limit(max(1, min(int(limit or 50), 500))).all()
            return [to_order_dto(o) for o in rows]

    def update_status(self, order_id: str, *, status: Optional[str] = None, payment_status: Optional[str] = None) -> Optional[Dict]:
        if status is not None and status not in ORDER_STATUSES:
            raise ValueError(f"status must be one of {', '.join(ORDER_STATUSES)}")
        if payment_status is not None and payment_status not in PAYMENT_STATUSES:
            raise ValueError(f"payment_status must be one of {', '.join(PAYMENT_STATUSES)}")
        with self._session_factory() as session:
            o = session.query(Order).options(selectinload(Order.items)).filter(Order.id == order_id).first()
            if not o:
                return None
            previous = o.status
            if status is not None:
                o.status = status
            if payment_status is not None:
                o.payment_status = payment_status
            session.flush()
            dto = to_order_dto(o)
        log_event("info", "order.status_changed", order_id=order_id, previous=previous, status=dto["status"])
        return dto

    def dashboard_stats(self) -> Dict:
        with self._session_factory() as session:
            total_orders = session.query(func.count(Order.id)).scalar() or 0
            revenue = session.query(func.coalesce(func.sum(Order.total_amount), 0)).scalar()
            pending = session.query(func.count(Order.id)).filter(Order.status == "pending").scalar() or 0
            total_products = session.query(func.count(Product.id)).scalar() or 0
        return {
            "total_orders": int(total_orders),
            "total_revenue": float(revenue or 0),
            "pending_orders": int(pending),
            "total_products": int(total_products),
        }
