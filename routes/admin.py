"""Admin dashboard API: products, banners, flash banners, orders and settings."""

from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify, request

from common.config import (
    hot_settings,
    refresh_non_sensitive,
    requires_restart,
    save_settings_file,
    settings_snapshot,
)
from common.errors import UploadRejected
from common.pricing import PricingSettings
from common.services.logging import log_event


admin_bp = Blueprint("storefront_admin", __name__, url_prefix="/admin")


def _components() -> dict:
    return current_app.extensions["storefront_components"]


def _payload() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


@admin_bp.before_request
def guard_admin_routes():
    user = _components()["auth"].current_user()
    if user is None:
        return jsonify({"error": "Sign in required."}), 401
    if not user.is_admin:
        return jsonify({"error": "Admin access required."}), 403
    g.admin_user = user
    return None


@admin_bp.get("/dashboard")
def dashboard():
    return jsonify({"stats": _components()["orders"].dashboard_stats()})


@admin_bp.get("/products")
def list_products():
    return jsonify({"products": _components()["catalog"].list_all_products()})


@admin_bp.post("/products")
def create_product():
    try:
        product = _components()["catalog"].create_product(_payload())
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify({"status": "ok", "product": product}), 201


@admin_bp.patch("/products/<product_id>")
def update_product(product_id: str):
    try:
        product = _components()["catalog"].update_product(product_id, _payload())
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    if product is None:
        return jsonify({"error": "Product not found."}), 404
    return jsonify({"status": "ok", "product": product})


@admin_bp.delete("/products/<product_id>")
def deactivate_product(product_id: str):
    if not _components()["catalog"].deactivate_product(product_id):
        return jsonify({"error": "Product not found."}), 404
    return jsonify({"status": "ok"})


@admin_bp.get("/banners")
def list_banners():
    return jsonify({"banners": _components()["banners"].list_banners()})


@admin_bp.post("/banners")
def create_banner():
    try:
        banner = _components()["banners"].create_banner(_payload())
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify({"status": "ok", "banner": banner}), 201


@admin_bp.patch("/banners/<banner_id>")
def update_banner(banner_id: str):
    try:
        banner = _components()["banners"].update_banner(banner_id, _payload())
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    if banner is None:
        return jsonify({"error": "Banner not found."}), 404
    return jsonify({"status": "ok", "banner": banner})


@admin_bp.delete("/banners/<banner_id>")
def delete_banner(banner_id: str):
    if not _components()["banners"].delete_banner(banner_id):
        return jsonify({"error": "Banner not found."}), 404
    return jsonify({"status": "ok"})


@admin_bp.post("/banners/<banner_id>/image")
def upload_banner_image(banner_id: str):
    try:
        stored = _components()["uploads"].save_banner_image(request.files.get("image"))
    except UploadRejected as exc:
        return jsonify({"error": str(exc)}), 413 if exc.too_large else 400
    banner = _components()["banners"].update_banner(
        banner_id, {"image_url": stored.url, "image_dimensions": stored.dimensions}
    )
    if banner is None:
        return jsonify({"error": "Banner not found."}), 404
    return jsonify({"status": "ok", "banner": banner})


@admin_bp.get("/flash-banners")
def list_flash_banners():
    return jsonify({"flash_banners": _components()["banners"].list_flash_banners()})


@admin_bp.post("/flash-banners")
def create_flash_banner():
    try:
        banner = _components()["banners"].create_flash_banner(_payload())
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify({"status": "ok", "flash_banner": banner}), 201


@admin_bp.patch("/flash-banners/<banner_id>")
def update_flash_banner(banner_id: str):
    try:
        banner = _components()["banners"].update_flash_banner(banner_id, _payload())
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    if banner is None:
        return jsonify({"error": "Flash banner not found."}), 404
    return jsonify({"status": "ok", "flash_banner": banner})


@admin_bp.get("/orders")
def list_orders():
    orders = _components()["orders"].list_orders(
        status=request.args.get("status") or None,
        limit=request.args.get("limit", 50, type=int),
    )
    return jsonify({"orders": orders})


@admin_bp.patch("/orders/<order_id>")
def update_order(order_id: str):
    payload = _payload()
    try:
        order = _components()["orders"].update_status(
            order_id,
            status=payload.get("status"),
            payment_status=payload.get("payment_status"),
        )
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    if order is None:
        return jsonify({"error": "Order not found."}), 404
    return jsonify({"status": "ok", "order": order})


@admin_bp.get("/settings")
def get_settings():
    return jsonify({"settings": settings_snapshot(current_app.config["STOREFRONT_CONFIG"].app)})


@admin_bp.patch("/settings")
def update_settings():
    """Apply currency and fee changes without a restart."""
    payload = {str(k).upper(): v for k, v in _payload().items()}
    config = current_app.config["STOREFRONT_CONFIG"]
    try:
        refreshed = refresh_non_sensitive(payload, config.app)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    config.app = refreshed
    components = _components()
    components["pricing"] = PricingSettings.from_config(refreshed)
    components["cart"].use_pricing(components["pricing"])
    components["orders"].use_currency(refreshed.currency)
    save_settings_file(config.settings_file, hot_settings(refreshed))
    log_event("info", "config.refreshed", keys=sorted(payload), user_id=g.admin_user.user_id)
    return jsonify(
        {
            "status": "ok",
            "settings": settings_snapshot(refreshed),
            "restart_required": requires_restart(list(payload)),
        }
    )
