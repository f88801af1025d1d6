"""Read-only product definitions used by the pricing engine.

The ORM rows in ``common.models`` are turned into these frozen dataclasses
inside a DB session, so pricing never touches the database and a definition
can be handed around after the session has closed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, DecimalException, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, ClassVar, Dict, Iterable, Optional, Tuple, Union


MONEY_QUANT = Decimal("0.01")
# largest amount a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal("9999999999.99")
MAX_QUANTITY = 100_000
# feet, per side
MAX_DIMENSION = Decimal("1000")


def to_money(value: Any) -> Decimal:
    """Coerce ``value`` to a Decimal amount with two decimal places."""

    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value if value is not None else 0))
        except InvalidOperation:
            raise ValueError(f"not a valid amount: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"not a valid amount: {value!r}")
    if amount.copy_abs() > MAX_AMOUNT:
        raise ValueError(f"amount out of range: {value!r}")
    try:
        return amount.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)
    except DecimalException:
        raise ValueError(f"amount out of range: {value!r}") from None


class DeliverySpeed(str, Enum):
    STANDARD = "standard"
    EXPRESS = "express"
    RUSH = "rush"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class CustomizationOption:
    value: str
    label: str
    price_delta: Decimal = Decimal("0")


@dataclass(frozen=True)
class CustomizationAxis:
    name: str
    axis_type: str
    options: Tuple[CustomizationOption, ...] = ()

    @property
    def default(self) -> Optional[CustomizationOption]:
        return self.options[0] if self.options else None

    def find(self, value: str) -> Optional[CustomizationOption]:
        for option in self.options:
            if option.value == value:
                return option
        return None


@dataclass(frozen=True)
class AreaBased:
    kind: ClassVar[str] = "area_based"
    choice_axis: ClassVar[Optional[str]] = None

    rate: Decimal = Decimal("300")
    unit: str = "ft"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "rate": str(self.rate), "unit": self.unit}


@dataclass(frozen=True)
class PackageTier:
    name: str
    price: Decimal
    description: str = ""


@dataclass(frozen=True)
class TieredPackage:
    kind: ClassVar[str] = "tiered_package"
    choice_axis: ClassVar[Optional[str]] = "package"

    tiers: Tuple[PackageTier, ...] = ()

    def find(self, name: str) -> Optional[PackageTier]:
        return next((t for t in self.tiers if t.name == name), None)

    def choices(self) -> Tuple[str, ...]:
        return tuple(t.name for t in self.tiers)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "tiers": [{"name": t.name, "price": str(t.price), "description": t.description} for t in self.tiers],
        }


@dataclass(frozen=True)
class UnitChoice:
    name: str
    price: Decimal


@dataclass(frozen=True)
class PerUnitCatalog:
    kind: ClassVar[str] = "per_unit_catalog"
    choice_axis: ClassVar[Optional[str]] = "unit"

    units: Tuple[UnitChoice, ...] = ()
    default_quantity: int = 1

    def find(self, name: str) -> Optional[UnitChoice]:
        return next((u for u in self.units if u.name == name), None)

    def choices(self) -> Tuple[str, ...]:
        return tuple(u.name for u in self.units)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "units": [{"name": u.name, "price": str(u.price)} for u in self.units],
            "default_quantity": self.default_quantity,
        }


SpecialPricingModel = Union[AreaBased, TieredPackage, PerUnitCatalog]

GENERIC_PRICING = "generic"


def parse_pricing_model(raw: Optional[Dict[str, Any]]) -> Optional[SpecialPricingModel]:
    """Build a special pricing model from its JSON form; ``None`` means generic pricing."""

    if not raw:
        return None
    if not isinstance(raw, dict):
        raise ValueError("pricing_model must be an object")
    kind = raw.get("kind")
    if kind == AreaBased.kind:
        rate = to_money(raw.get("rate", AreaBased.rate))
        if rate <= 0:
            raise ValueError("area rate must be > 0")
        return AreaBased(rate=rate, unit=str(raw.get("unit") or "ft"))
    if kind == TieredPackage.kind:
        tiers = tuple(
            PackageTier(
                name=_choice_name(t, "tier"),
                price=_non_negative(t.get("price"), "tier price"),
                description=str(t.get("description") or ""),
            )
            for t in raw.get("tiers") or []
        )
        if not tiers:
            raise ValueError("tiered_package needs at least one tier")
        return TieredPackage(tiers=tiers)
    if kind == PerUnitCatalog.kind:
        units = tuple(
            UnitChoice(name=_choice_name(u, "unit"), price=_non_negative(u.get("price"), "unit price"))
            for u in raw.get("units") or []
        )
        if not units:
            raise ValueError("per_unit_catalog needs at least one unit")
        default_quantity = int(raw.get("default_quantity") or 1)
        if default_quantity < 1:
            raise ValueError("default_quantity must be >= 1")
        return PerUnitCatalog(units=units, default_quantity=default_quantity)
    raise ValueError(f"unknown pricing model kind: {kind!r}")


def _choice_name(raw: Any, what: str) -> str:
    if not isinstance(raw, dict) or not str(raw.get("name") or "").strip():
        raise ValueError(f"each {what} needs a name")
    return str(raw["name"]).strip()


def _non_negative(value: Any, name: str) -> Decimal:
    amount = to_money(value)
    if amount < 0:
        raise ValueError(f"{name} must be >= 0")
    return amount


@dataclass(frozen=True)
class ProductDefinition:
    id: str
    name: str
    base_price: Decimal = Decimal("0")
    description: str = ""
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True
    default_quantity: int = 100
    axes: Tuple[CustomizationAxis, ...] = field(default_factory=tuple)
    pricing_model: Optional[SpecialPricingModel] = None

    @classmethod
    def from_row(cls, row: Any) -> "ProductDefinition":
        """Snapshot a ``Product`` row (with its axes) while the session is open."""

        axes = tuple(
            CustomizationAxis(
                name=axis.name,
                axis_type=axis.axis_type,
                options=tuple(
                    CustomizationOption(value=o.value, label=o.label, price_delta=to_money(o.price_delta))
                    for o in sorted(axis.options, key=lambda x: x.sort_order)
                ),
            )
            for axis in sorted(row.axes or [], key=lambda x: x.sort_order)
        )
        return cls(
            id=row.id,
            name=row.name,
            base_price=to_money(row.base_price),
            description=row.description or "",
            category=row.category,
            image_url=row.image_url,
            is_active=bool(row.is_active),
            default_quantity=int(row.default_quantity or 100),
            axes=axes,
            pricing_model=parse_pricing_model(row.pricing_model),
        )

    @property
    def pricing_kind(self) -> str:
        return self.pricing_model.kind if self.pricing_model else GENERIC_PRICING

    @property
    def choice_axis(self) -> Optional[str]:
        return self.pricing_model.choice_axis if self.pricing_model else None

    @property
    def axis_types(self) -> Tuple[str, ...]:
        types = tuple(a.axis_type for a in self.axes)
        return types + ((self.choice_axis,) if self.choice_axis else ())

    @property
    def initial_quantity(self) -> int:
        if isinstance(self.pricing_model, PerUnitCatalog):
            return self.pricing_model.default_quantity
        if self.pricing_model is not None:
            return 1
        return self.default_quantity

    def axis(self, axis_type: str) -> Optional[CustomizationAxis]:
        return next((a for a in self.axes if a.axis_type == axis_type), None)

    def choice_values(self, axis_type: str) -> Optional[Iterable[str]]:
        """Valid values for ``axis_type`` or ``None`` when the product has no such axis."""

        if axis_type == self.choice_axis:
            return self.pricing_model.choices()
        axis = self.axis(axis_type)
        if axis is None:
            return None
        return tuple(o.value for o in axis.options)
