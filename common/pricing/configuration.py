"""In-progress customization state for one product."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..errors import IncompleteConfiguration, InvalidDimensions, InvalidQuantity, UnknownAxis, UnknownOption
from ..utils.validators import ensure_positive_decimal, ensure_positive_int
from .definitions import (
    MAX_DIMENSION,
    MAX_QUANTITY,
    AreaBased,
    CustomizationAxis,
    CustomizationOption,
    DeliverySpeed,
    ProductDefinition,
)


class Configuration:
    """A shopper's selections for a single product.

    Every setter validates first and only then mutates, so a rejected call
    leaves the previous state in place.
    """

    def __init__(self, product: ProductDefinition) -> None:
        self._product = product
        self.quantity: int = product.initial_quantity
        self.selections: Dict[str, str] = {}
        self.needs_design_assist: bool = False
        self.delivery_speed: DeliverySpeed = DeliverySpeed.STANDARD
        self.width: Optional[Decimal] = None
        self.height: Optional[Decimal] = None
        self.artwork_url: Optional[str] = None

    @classmethod
    def for_product(cls, product: ProductDefinition) -> "Configuration":
        """Fresh configuration with each axis on its first option."""

        config = cls(product)
        for axis in product.axes:
            if axis.default is not None:
                config.selections[axis.axis_type] = axis.default.value
        # flyers start on the first size; packages must be picked explicitly
        if product.choice_axis == "unit":
            config.selections["unit"] = product.pricing_model.units[0].name
        return config

    @classmethod
    def from_payload(cls, product: ProductDefinition, payload: Optional[Mapping[str, Any]]) -> "Configuration":
        """Apply a request body through the validating setters."""

        payload = payload or {}
        config = cls.for_product(product)
        if payload.get("quantity") is not None:
            config.set_quantity(payload["quantity"])
        selections = payload.get("selections") or {}
        if not isinstance(selections, Mapping):
            raise UnknownAxis("selections")
        for axis_type, value in selections.items():
            config.select_option(str(axis_type), value)
        if payload.get("delivery_speed") is not None:
            config.set_delivery_speed(payload["delivery_speed"])
        if "needs_design_assist" in payload:
            config.toggle_design_assist(bool(payload["needs_design_assist"]))
        dimensions = payload.get("dimensions")
        if dimensions is not None:
            if not isinstance(dimensions, Mapping):
                raise InvalidDimensions("dimensions must include width and height")
            config.set_dimensions(dimensions.get("width"), dimensions.get("height"))
        if payload.get("artwork_url"):
            config.attach_artwork(payload["artwork_url"])
        return config

    @property
    def product(self) -> ProductDefinition:
        return self._product

    @property
    def product_id(self) -> str:
        return self._product.id

    def set_quantity(self, value: Any) -> int:
        try:
            quantity = ensure_positive_int(value, "quantity", maximum=MAX_QUANTITY)
        except ValueError:
            raise InvalidQuantity(value) from None
        self.quantity = quantity
        return quantity

    def select_option(self, axis_type: str, value: Any) -> None:
        choices = self._product.choice_values(axis_type)
        if choices is None:
            raise UnknownAxis(axis_type)
        if value is None or str(value) not in choices:
            raise UnknownOption(axis_type, value)
        self.selections[axis_type] = str(value)

    def set_delivery_speed(self, speed: Any) -> DeliverySpeed:
        try:
            chosen = DeliverySpeed(str(speed).strip().lower())
        except ValueError:
            raise UnknownOption("delivery_speed", speed) from None
        self.delivery_speed = chosen
        return chosen

    def toggle_design_assist(self, enabled: Optional[bool] = None) -> bool:
        self.needs_design_assist = (not self.needs_design_assist) if enabled is None else bool(enabled)
        return self.needs_design_assist

    def set_dimensions(self, width: Any, height: Any) -> None:
        if not isinstance(self._product.pricing_model, AreaBased):
            raise UnknownAxis("dimensions")
        try:
            w = ensure_positive_decimal(width, "width", maximum=MAX_DIMENSION)
            h = ensure_positive_decimal(height, "height", maximum=MAX_DIMENSION)
        except ValueError as exc:
            raise InvalidDimensions(str(exc)) from None
        self.width, self.height = w, h

    def attach_artwork(self, reference: Any) -> None:
        ref = str(reference or "").strip()
        if not ref:
            raise ValueError("artwork reference is empty")
        self.artwork_url = ref

    def detach_artwork(self) -> None:
        self.artwork_url = None

    def resolved_options(self) -> List[Tuple[CustomizationAxis, CustomizationOption]]:
        """Chosen option per generic axis, falling back to the axis's first option."""

        resolved = []
        for axis in self._product.axes:
            option = axis.find(self.selections.get(axis.axis_type, "")) or axis.default
            if option is None:
                raise IncompleteConfiguration(axis.axis_type)
            resolved.append((axis, option))
        return resolved

    def snapshot(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "selections": dict(self.selections),
            "needs_design_assist": self.needs_design_assist,
            "delivery_speed": self.delivery_speed.value,
            "dimensions": (
                {"width": str(self.width), "height": str(self.height)}
                if self.width is not None and self.height is not None
                else None
            ),
            "artwork_url": self.artwork_url,
        }
