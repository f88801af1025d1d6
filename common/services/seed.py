"""Starter catalog for a fresh database."""

from typing import Dict, List

from .catalog_service import CatalogService
from .logging import log_event


DEFAULT_CATALOG: List[Dict] = [
    {
        "id": "business-cards",
        "name": "Business Cards",
        "category": "Stationery",
        "base_price": 140,
        "default_quantity": 100,
        "description": "Professional business cards that make lasting impressions. Premium quality printing with various finish options.",
        "axes": [
            {
                "name": "Paper Weight",
                "type": "paper",
                "options": [
                    {"value": "350gsm", "label": "350 grams", "price_delta": 0},
                    {"value": "600gsm", "label": "600 grams", "price_delta": 30},
                ],
            },
            {
                "name": "Edge",
                "type": "edge",
                "options": [
                    {"value": "straight", "label": "Straight edge", "price_delta": 0},
                    {"value": "curved", "label": "Curved edge", "price_delta": 10},
                ],
            },
        ],
    },
    {
        "id": "branded-tshirt",
        "name": "Branded T-shirt",
        "category": "Apparel",
        "base_price": 6000,
        "default_quantity": 1,
        "description": "High-quality branded t-shirts perfect for corporate events, promotions, and team uniforms.",
        "axes": [
            {
                "name": "Size",
                "type": "size",
                "options": [
                    {"value": "S-M-L", "label": "L, M, S", "price_delta": 2000},
                    {"value": "XL", "label": "XL", "price_delta": 3000},
                    {"value": "XXL", "label": "XXL", "price_delta": 5000},
                ],
            }
        ],
    },
    {
        "id": "mugs",
        "name": "Mugs",
        "category": "Gifts",
        "base_price": 2000,
        "default_quantity": 1,
        "description": "Custom printed mugs perfect for corporate gifts and promotional items.",
        "axes": [
            {
                "name": "Mug Type",
                "type": "mug",
                "options": [
                    {"value": "classic", "label": "Classic mug", "price_delta": 0},
                    {"value": "magic", "label": "Magic Mug", "price_delta": 5000},
                ],
            }
        ],
    },
    {
        "id": "banner",
        "name": "Banner",
        "category": "Large Format",
        "base_price": 0,
        "description": "Custom banners for events, promotions, and advertising. Price calculated based on dimensions.",
        "pricing_model": {"kind": "area_based", "rate": 300, "unit": "ft"},
    },
    {
        "id": "flyers-brochure",
        "name": "Flyers & Brochure",
        "category": "Marketing",
        "base_price": 0,
        "description": "Eye-catching marketing materials for events, promotions, and business advertising.",
        "pricing_model": {
            "kind": "per_unit_catalog",
            "units": [
                {"name": "A4 Flyer", "price": 150},
                {"name": "A5 Flyer", "price": 80},
                {"name": "A6 Flyer", "price": 50},
            ],
            "default_quantity": 1,
        },
    },
    {
        "id": "wedding-invitations",
        "name": "Wedding Invitations",
        "category": "Stationery",
        "base_price": 0,
        "description": "Elegant wedding invitations with customized printing included. Perfect for your special day.",
        "pricing_model": {
            "kind": "tiered_package",
            "tiers": [
                {"name": "Luxury Card", "price": 100000, "description": "100pcs - Premium materials with gold foiling"},
                {"name": "Middle Class Card", "price": 60000, "description": "100pcs - High-quality printing on premium paper"},
            ],
        },
    },
]


def seed_catalog(catalog: CatalogService) -> int:
    """Insert the starter products that are not in the database yet."""

    created = 0
    for entry in DEFAULT_CATALOG:
        if catalog.get_definition(entry["id"], active_only=False) is not None:
            continue
        catalog.create_product(entry)
        created += 1
    log_event("info", "catalog.seeded", created=created)
    return created
