"""Shopper-facing JSON API: catalog, pricing quotes, cart, uploads, orders."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, abort, current_app, jsonify, request, send_file

from common.errors import (
    EmptyCart,
    LineItemNotFound,
    PersistenceFailure,
    StorefrontError,
    UploadRejected,
)
from common.pricing import Configuration, compute_price


api_bp = Blueprint("storefront_api", __name__, url_prefix="/api")


def _components() -> Dict[str, Any]:
    return current_app.extensions["storefront_components"]


def _config():
    return current_app.config["STOREFRONT_CONFIG"]


def _error(exc: Exception):
    """Map a storefront exception to a JSON error response."""
    if isinstance(exc, PersistenceFailure):
        return jsonify({"error": str(exc)}), 503
    if isinstance(exc, UploadRejected):
        return jsonify({"error": str(exc)}), 413 if exc.too_large else 400
    if isinstance(exc, (LineItemNotFound, LookupError)):
        return jsonify({"error": str(exc).strip("'\"")}), 404
    if isinstance(exc, EmptyCart):
        return jsonify({"error": str(exc)}), 409
    return jsonify({"error": str(exc)}), 400


def _payload() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


@api_bp.get("/products")
def list_products():
    catalog = _components()["catalog"]
    result = catalog.list_products(
        query=request.args.get("q"),
        category=request.args.get("category"),
        page=request.args.get("page", 1, type=int),
        page_size=request.args.get("page_size", 20, type=int),
    )
    return jsonify(result)


@api_bp.get("/categories")
def list_categories():
    return jsonify({"categories": _components()["catalog"].list_categories()})


@api_bp.get("/products/<product_id>")
def get_product(product_id: str):
    product = _components()["catalog"].get_product(product_id)
    if not product:
        return jsonify({"error": "Product not found."}), 404
    return jsonify(product)


@api_bp.post("/products/<product_id>/quote")
def quote_product(product_id: str):
    product = _components()["catalog"].get_definition(product_id)
    if product is None:
        return jsonify({"error": "Product not found."}), 404
    try:
        configuration = Configuration.from_payload(product, _payload())
        breakdown = compute_price(product, configuration, _components()["pricing"])
    except ValueError as exc:
        return _error(exc)
    return jsonify(
        {
            "product_id": product.id,
            "configuration": configuration.snapshot(),
            "price": breakdown.to_dict(),
            "currency": _config().app.currency,
        }
    )


@api_bp.get("/cart")
def get_cart():
    owner = _components()["auth"].cart_owner()
    try:
        cart = _components()["cart"].for_owner(owner)
    except PersistenceFailure as exc:
        return _error(exc)
    return jsonify({**cart.to_dict(), "currency": _config().app.currency})


@api_bp.post("/cart/items")
def add_cart_item():
    payload = _payload()
    owner = _components()["auth"].cart_owner()
    try:
        cart, line = _components()["cart"].add_configured_item(
            owner, str(payload.get("product_id") or ""), payload.get("configuration") or {}
        )
    except (StorefrontError, ValueError, LookupError) as exc:
        return _error(exc)
    return jsonify({"status": "added", "item": line.to_dict(), "cart": cart.to_dict()}), 201


@api_bp.patch("/cart/items/<item_id>")
def update_cart_item(item_id: str):
    owner = _components()["auth"].cart_owner()
    try:
        cart = _components()["cart"].for_owner(owner)
        line = cart.update_quantity(item_id, _payload().get("quantity"))
    except (StorefrontError, ValueError) as exc:
        return _error(exc)
    return jsonify({"status": "updated", "item": line.to_dict(), "cart": cart.to_dict()})


@api_bp.delete("/cart/items/<item_id>")
def remove_cart_item(item_id: str):
    owner = _components()["auth"].cart_owner()
    try:
        cart = _components()["cart"].for_owner(owner)
        cart.remove_line(item_id)
    except StorefrontError as exc:
        return _error(exc)
    return jsonify({"status": "removed", "cart": cart.to_dict()})


@api_bp.delete("/cart")
def clear_cart():
    owner = _components()["auth"].cart_owner()
    try:
        cart = _components()["cart"].for_owner(owner)
        removed = cart.clear()
    except StorefrontError as exc:
        return _error(exc)
    return jsonify({"status": "cleared", "removed": removed, "cart": cart.to_dict()})


@api_bp.post("/artwork")
def upload_artwork():
    try:
        stored = _components()["uploads"].save_artwork(request.files.get("file"))
    except UploadRejected as exc:
        return _error(exc)
    return jsonify({"status": "ok", **stored.to_dict()}), 201


@api_bp.get("/uploads/<path:relative>")
def serve_upload(relative: str):
    target = _components()["uploads"].resolve(relative)
    if target is None:
        abort(404)
    return send_file(target)


@api_bp.post("/orders")
def create_order():
    payload = _payload()
    owner = _components()["auth"].cart_owner()
    try:
        result = _components()["orders"].create_order(
            owner=owner,
            customer=payload.get("customer") or {},
            delivery_address=payload.get("delivery_address"),
            notes=payload.get("notes"),
            request_id=request.headers.get("Idempotency-Key") or payload.get("request_id"),
        )
    except (StorefrontError, ValueError) as exc:
        return _error(exc)
    return jsonify(result), 201


@api_bp.get("/orders/<order_id>")
def get_order(order_id: str):
    owner = _components()["auth"].cart_owner()
    order = _components()["orders"].get_order(order_id, owner=owner)
    if not order:
        return jsonify({"error": "Order not found."}), 404
    return jsonify(order)


@api_bp.get("/banners/active")
def active_banner():
    return jsonify({"banner": _components()["banners"].active_banner()})


@api_bp.get("/banners")
def list_active_banners():
    return jsonify({"banners": _components()["banners"].list_banners(active_only=True)})


@api_bp.get("/flash-banner")
def active_flash_banner():
    return jsonify({"flash_banner": _components()["banners"].active_flash_banner()})
