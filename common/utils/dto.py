from typing import Any, Dict, Optional


def _money(value: Any) -> float:
    return float(value or 0)


def _iso(value: Any) -> Optional[str]:
    return value.isoformat() if value is not None else None


def to_product_dto(row: Any) -> Dict:
    return {
        "id": getattr(row, "id", None),
        "name": getattr(row, "name", None),
        "category": getattr(row, "category", None),
        "description": getattr(row, "description", None),
        "base_price": _money(getattr(row, "base_price", 0)),
        "image_url": getattr(row, "image_url", None),
        "default_quantity": getattr(row, "default_quantity", None),
        "pricing_model": getattr(row, "pricing_model", None),
        "is_active": bool(getattr(row, "is_active", True)),
        "axes": [a.to_dict() for a in (getattr(row, "axes", None) or [])],
    }


def to_order_dto(row: Any, *, with_items: bool = True) -> Dict:
    dto = {
        "id": row.id,
        "order_number": row.order_number,
        "customer_name": row.customer_name,
        "customer_email": row.customer_email,
        "customer_phone": row.customer_phone,
        "delivery_address": row.delivery_address,
        "notes": row.notes,
        "subtotal": _money(row.subtotal),
        "delivery_fee": _money(row.delivery_fee),
        "total_amount": _money(row.total_amount),
        "currency": row.currency,
        "status": row.status,
        "payment_status": row.payment_status,
        "created_at": _iso(row.created_at),
    }
    if with_items:
        dto["items"] = [
            {
                "product_id": it.product_id,
                "product_name": it.product_name,
                "product_description": it.product_description or "",
                "quantity": it.quantity,
                "unit_price": _money(it.unit_price),
                "flat_fees": _money(it.flat_fees),
                "total_price": _money(it.total_price),
                "selected_specs": it.selected_specs or {},
                "custom_dimensions": it.custom_dimensions,
                "artwork_url": it.artwork_url,
            }
            for it in row.items
        ]
    return dto


def to_banner_dto(row: Any) -> Dict:
    return {
        "id": row.id,
        "title": row.title,
        "subtitle": row.subtitle,
        "description": row.description,
        "button_text": row.button_text,
        "link_url": row.link_url,
        "image_url": row.image_url,
        "image_dimensions": row.image_dimensions,
        "position": row.position,
        "is_active": bool(row.is_active),
    }


def to_flash_banner_dto(row: Any) -> Dict:
    return {
        "id": row.id,
        "title": row.title,
        "description": row.description,
        "link_url": row.link_url,
        "background_color": row.background_color,
        "text_color": row.text_color,
        "is_active": bool(row.is_active),
    }
