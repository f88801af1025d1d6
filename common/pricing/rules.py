"""Price computation for configured products.

Four models are supported:

- generic: ``(base_price + sum of option deltas) * quantity``
- area_based: ``width * height * rate`` for one physical item
- tiered_package: the chosen tier's fixed price, quantity ignored
- per_unit_catalog: the chosen unit's piece price ``* quantity``

Design assistance and delivery speed are flat fees added once on top.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from ..errors import InvalidDimensions, MissingTierSelection, NegativePriceClamped
from ..services.logging import log_event
from .configuration import Configuration
from .definitions import (
    AreaBased,
    DeliverySpeed,
    PerUnitCatalog,
    ProductDefinition,
    TieredPackage,
    to_money,
)


def _default_delivery_fees() -> Dict[str, Decimal]:
    return {
        DeliverySpeed.STANDARD.value: Decimal("0"),
        DeliverySpeed.EXPRESS.value: Decimal("4000"),
        DeliverySpeed.RUSH.value: Decimal("7000"),
    }


@dataclass(frozen=True)
class PricingSettings:
    design_assist_fee: Decimal = Decimal("5000")
    delivery_fees: Mapping[str, Decimal] = field(default_factory=_default_delivery_fees)

    @classmethod
    def from_config(cls, app_config: Any) -> "PricingSettings":
        return cls(
            design_assist_fee=to_money(app_config.design_assist_fee),
            delivery_fees={k: to_money(v) for k, v in app_config.delivery_fees.items()},
        )

    def delivery_fee(self, speed: DeliverySpeed) -> Decimal:
        return to_money(self.delivery_fees.get(speed.value, 0))


DEFAULT_SETTINGS = PricingSettings()


@dataclass(frozen=True)
class PriceBreakdown:
    pricing_model: str
    unit_price: Decimal
    quantity: int
    line_price: Decimal
    design_fee: Decimal
    delivery_fee: Decimal
    flat_fees: Decimal
    total: Decimal
    clamped: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pricing_model": self.pricing_model,
            "unit_price": float(self.unit_price),
            "quantity": self.quantity,
            "line_price": float(self.line_price),
            "design_fee": float(self.design_fee),
            "delivery_fee": float(self.delivery_fee),
            "flat_fees": float(self.flat_fees),
            "total": float(self.total),
            "clamped": self.clamped,
        }


def line_total(unit_price: Decimal, quantity: int, flat_fees: Decimal) -> Decimal:
    """The one formula every stored line total must satisfy."""

    return to_money(to_money(unit_price) * int(quantity) + to_money(flat_fees))


def compute_price(
    product: ProductDefinition,
    configuration: Configuration,
    settings: Optional[PricingSettings] = None,
) -> PriceBreakdown:
    """Price ``configuration`` for ``product``. No persistence, no mutation."""

    if configuration.product_id != product.id:
        raise ValueError("configuration belongs to a different product")
    settings = settings or DEFAULT_SETTINGS
    model = product.pricing_model

    if isinstance(model, AreaBased):
        if configuration.width is None or configuration.height is None:
            raise InvalidDimensions("enter the banner width and height")
        if configuration.width <= 0 or configuration.height <= 0:
            raise InvalidDimensions()
        raw_unit = configuration.width * configuration.height * model.rate
        quantity = 1
    elif isinstance(model, TieredPackage):
        tier = model.find(configuration.selections.get("package", ""))
        if tier is None:
            raise MissingTierSelection(product.name)
        raw_unit = tier.price
        quantity = 1
    elif isinstance(model, PerUnitCatalog):
        unit = model.find(configuration.selections.get("unit", "")) or model.units[0]
        raw_unit = unit.price
        quantity = configuration.quantity
    else:
        raw_unit = product.base_price + sum(
            (option.price_delta for _, option in configuration.resolved_options()), Decimal("0")
        )
        quantity = configuration.quantity

    unit_price = to_money(raw_unit)
    clamped = unit_price < 0
    if clamped:
        log_event("warning", "pricing.clamped", product_id=product.id, unit_price=str(unit_price))
        warnings.warn(
            NegativePriceClamped(f"unit price for {product.name} fell to {unit_price}; charging 0"),
            stacklevel=2,
        )
        unit_price = to_money(0)

    design_fee = to_money(settings.design_assist_fee) if configuration.needs_design_assist else to_money(0)
    delivery_fee = settings.delivery_fee(configuration.delivery_speed)
    flat_fees = to_money(design_fee + delivery_fee)

    return PriceBreakdown(
        pricing_model=product.pricing_kind,
        unit_price=unit_price,
        quantity=quantity,
        line_price=to_money(unit_price * quantity),
        design_fee=design_fee,
        delivery_fee=delivery_fee,
        flat_fees=flat_fees,
        total=line_total(unit_price, quantity, flat_fees),
        clamped=clamped,
    )
