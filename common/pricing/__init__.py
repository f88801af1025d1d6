from .configuration import Configuration
from .definitions import (
    AreaBased,
    CustomizationAxis,
    CustomizationOption,
    DeliverySpeed,
    PackageTier,
    PerUnitCatalog,
    ProductDefinition,
    TieredPackage,
    UnitChoice,
    parse_pricing_model,
    to_money,
)
from .line_items import CartLineDraft, to_line_item
from .rules import PriceBreakdown, PricingSettings, compute_price, line_total

__all__ = [
    "AreaBased",
    "CartLineDraft",
    "Configuration",
    "CustomizationAxis",
    "CustomizationOption",
    "DeliverySpeed",
    "PackageTier",
    "PerUnitCatalog",
    "PriceBreakdown",
    "PricingSettings",
    "ProductDefinition",
    "TieredPackage",
    "UnitChoice",
    "compute_price",
    "line_total",
    "parse_pricing_model",
    "to_line_item",
    "to_money",
]
