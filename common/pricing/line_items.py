"""Turn a priced configuration into a persistable cart line."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .configuration import Configuration
from .definitions import AreaBased, PerUnitCatalog, ProductDefinition, TieredPackage, to_money
from .rules import PriceBreakdown, line_total


@dataclass(frozen=True)
class CartLineDraft:
    product_id: str
    product_name: str
    product_description: str
    quantity: int
    unit_price: Decimal
    flat_fees: Decimal
    total_price: Decimal
    selected_specs: Dict[str, Any]
    custom_dimensions: Optional[Dict[str, Any]] = None
    artwork_url: Optional[str] = None


def build_selected_specs(product: ProductDefinition, configuration: Configuration) -> Dict[str, Any]:
    """Ordered record of what was chosen, plus short display labels."""

    options: List[Dict[str, Any]] = []
    labels: List[str] = []
    for axis, option in configuration.resolved_options():
        options.append(
            {
                "axis": axis.name,
                "type": axis.axis_type,
                "value": option.value,
                "label": option.label,
                "price_delta": str(option.price_delta),
            }
        )
        labels.append(f"{axis.name}: {option.label}")

    model = product.pricing_model
    if isinstance(model, TieredPackage):
        tier = model.find(configuration.selections.get("package", ""))
        if tier is not None:
            options.append(
                {"axis": "Package", "type": "package", "value": tier.name, "label": tier.name, "price": str(tier.price)}
            )
            labels.append(f"Package: {tier.name}")
    elif isinstance(model, PerUnitCatalog):
        unit = model.find(configuration.selections.get("unit", "")) or model.units[0]
        options.append({"axis": "Size", "type": "unit", "value": unit.name, "label": unit.name, "price": str(unit.price)})
        labels.append(f"Size: {unit.name}")
    elif isinstance(model, AreaBased) and configuration.width is not None and configuration.height is not None:
        labels.append(f"Size: {configuration.width} x {configuration.height} {model.unit}")

    labels.append(f"Delivery: {configuration.delivery_speed.label}")
    if configuration.needs_design_assist:
        labels.append("Design assistance")

    return {
        "pricing_model": product.pricing_kind,
        "options": options,
        "delivery_speed": configuration.delivery_speed.value,
        "design_assist": configuration.needs_design_assist,
        "labels": labels,
    }


def to_line_item(
    product: ProductDefinition,
    configuration: Configuration,
    breakdown: PriceBreakdown,
) -> CartLineDraft:
    if configuration.product_id != product.id:
        raise ValueError("configuration belongs to a different product")

    selected_specs = build_selected_specs(product, configuration)

    custom_dimensions = None
    if isinstance(product.pricing_model, AreaBased):
        custom_dimensions = {
            "width": str(configuration.width),
            "height": str(configuration.height),
            "unit": product.pricing_model.unit,
            "rate": str(product.pricing_model.rate),
        }

    unit_price = to_money(breakdown.unit_price)
    flat_fees = to_money(breakdown.flat_fees)
    total = line_total(unit_price, breakdown.quantity, flat_fees)
    if total != to_money(breakdown.total):
        raise ValueError("price breakdown is inconsistent with its unit price and fees")

    return CartLineDraft(
        product_id=product.id,
        product_name=product.name,
        product_description=product.description,
        quantity=breakdown.quantity,
        unit_price=unit_price,
        flat_fees=flat_fees,
        total_price=total,
        selected_specs=selected_specs,
        custom_dimensions=custom_dimensions,
        artwork_url=configuration.artwork_url,
    )
