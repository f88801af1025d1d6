from collections import OrderedDict
from typing import Any, Dict, List, Mapping, Optional, Tuple
import time
from uuid import uuid4

from sqlalchemy import or_
from sqlalchemy.orm import selectinload

from ..db.session import get_session
from ..models.customization import CustomizationAxis, CustomizationOption
from ..models.product import Product
from ..pricing import ProductDefinition, parse_pricing_model, to_money
from ..pricing.definitions import MAX_QUANTITY
from ..utils.dto import to_product_dto
from ..utils.pagination import normalize_paging, page_window
from ..utils.validators import clean_text, ensure_positive_int
from .logging import log_event


PRODUCT_FIELDS = ("name", "category", "description", "base_price", "image_url", "default_quantity", "is_active", "sort_order")


class CatalogService:
    """Catalog querying and admin maintenance.

    Responsibilities:
    - List/search active products with pagination and optional category filter
    - Hand out ``ProductDefinition`` snapshots to the pricing engine
    - Create/update/deactivate products for the admin dashboard, clearing the
      query cache on every write
    """

    _cache_ttl_seconds: int = 60
    _cache_max_entries: int = 256

    def __init__(
        self,
        session_factory=get_session,
        cache_ttl_seconds: Optional[int] = None,
        cache_max_entries: Optional[int] = None,
    ):
        self._session_factory = session_factory
        # bounded in-process cache, oldest first: key -> (ts, result)
        self._cache: "OrderedDict[Tuple, Tuple[float, Dict]]" = OrderedDict()
        if cache_ttl_seconds is not None:
            self._cache_ttl_seconds = cache_ttl_seconds
        if cache_max_entries is not None:
            self._cache_max_entries = max(1, cache_max_entries)

    def list_products(
        self,
        *,
        query: Optional[str] = None,
        category: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> Dict:
        """Return dict: { items: [ProductDTO], page, page_size, total }"""
        p, ps = normalize_paging(page, page_size)
        cache_key = (query or "", category or "", p, ps)
        now = time.time()
        cached = self._cache.get(cache_key)
        if cached and now - cached[0] <= self._cache_ttl_seconds:
            return cached[1]

        with self._session_factory() as session:
            q = session.query(Product).filter(Product.is_active.is_(True))
            if query:
                like = f"%{query.strip()}%"
                q = q.filter(or_(Product.name.ilike(like), Product.description.ilike(like)))
            if category:
                q = q.filter(Product.category == category)
            total = q.count()
            offset, limit = page_window(p, ps)
            rows = (
                q.options(selectinload(Product.axes).selectinload(CustomizationAxis.options))
                .order_by(Product.sort_order.desc(), Product.created_at.desc(), Product.name.asc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            items = [to_product_dto(r) for r in rows]
            result = {"items": items, "page": p, "page_size": ps, "total": total}
            self._remember(cache_key, now, result)
            return result

    def _remember(self, cache_key: Tuple, now: float, result: Dict) -> None:
        """Store a listing, dropping expired entries and then the oldest over the cap."""
        for key in [k for k, (ts, _) in self._cache.items() if now - ts > self._cache_ttl_seconds]:
            del self._cache[key]
        self._cache[cache_key] = (now, result)
        self._cache.move_to_end(cache_key)
        while len(self._cache) > self._cache_max_entries:
            self._cache.popitem(last=False)

    def list_categories(self) -> List[str]:
        with self._session_factory() as session:
            rows = (
                session.query(Product.category)
                .filter(Product.is_active.is_(True), Product.category.isnot(None))
                .distinct()
                .all()
            )
            return sorted(r[0] for r in rows)

    def get_product(self, product_id: str) -> dict:
        """Return ProductDTO for given product id."""
        with self._session_factory() as session:
            r = self._load(session, product_id, active_only=True)
            return to_product_dto(r) if r else {}

    def get_definition(self, product_id: str, *, active_only: bool = True) -> Optional[ProductDefinition]:
        with self._session_factory() as session:
            r = self._load(session, product_id, active_only=active_only)
            return ProductDefinition.from_row(r) if r else None

    def list_all_products(self) -> List[Dict]:
        """Every product including inactive ones, newest first (admin)."""
        with self._session_factory() as session:
            rows = (
                session.query(Product)
                .options(selectinload(Product.axes).selectinload(CustomizationAxis.options))
                .order_by(Product.created_at.desc(), Product.name.asc())
                .all()
            )
            return [to_product_dto(r) for r in rows]

    def create_product(self, data: Mapping[str, Any]) -> Dict:
        name = clean_text(data.get("name"), max_length=255)
        if not name:
            raise ValueError("name required")
        pricing_model = self._validated_pricing_model(data.get("pricing_model"))
        with self._session_factory() as session:
            product = Product(id=str(data.get("id") or uuid4()), name=name, pricing_model=pricing_model)
            self._assign_fields(product, data)
            product.axes = self._build_axes(data.get("axes") or [], pricing_model)
            session.add(product)
            session.flush()
            dto = to_product_dto(product)
        self.invalidate_cache_for_product(dto["id"])
        log_event("info", "catalog.product_created", product_id=dto["id"], name=name)
        return dto

    def update_product(self, product_id: str, data: Mapping[str, Any]) -> Optional[Dict]:
        """Partial update; ``axes`` in ``data`` replaces the whole axis list."""
        with self._session_factory() as session:
            product = self._load(session, product_id, active_only=False)
            if product is None:
                return None
            if "pricing_model" in data:
                product.pricing_model = self._validated_pricing_model(data.get("pricing_model"))
            self._assign_fields(product, data)
            if "axes" in data:
                new_axes = self._build_axes(data.get("axes") or [], product.pricing_model)
                # drop the old rows first so (product_id, axis_type) stays unique
                product.axes = []
                session.flush()
                product.axes = new_axes
            session.flush()
            dto = to_product_dto(product)
        self.invalidate_cache_for_product(product_id)
        log_event("info", "catalog.product_updated", product_id=product_id, fields=sorted(data.keys()))
        return dto

    def deactivate_product(self, product_id: str) -> bool:
        # cart/order lines keep their snapshot, so products are never hard deleted
        with self._session_factory() as session:
            product = self._load(session, product_id, active_only=False)
            if product is None:
                return False
            product.is_active = False
        self.invalidate_cache_for_product(product_id)
        log_event("info", "catalog.product_deactivated", product_id=product_id)
        return True

    def invalidate_cache_for_product(self, product_id: Optional[str] = None) -> None:
        """Invalidate query caches. For simplicity, clear all cache or by product if needed."""
        self._cache.clear()
        return None

    @staticmethod
    def _load(session, product_id: str, *, active_only: bool) -> Optional[Product]:
        if not product_id:
            return None
        q = (
            session.query(Product)
            .options(selectinload(Product.axes).selectinload(CustomizationAxis.options))
            .filter(Product.id == product_id)
        )
        if active_only:
            q = q.filter(Product.is_active.is_(True))
        return q.first()

    @staticmethod
    def _validated_pricing_model(raw: Any) -> Optional[Dict]:
        model = parse_pricing_model(raw)
        return model.to_dict() if model else None

    @staticmethod
    def _assign_fields(product: Product, data: Mapping[str, Any]) -> None:
        for key in PRODUCT_FIELDS:
            if key not in data:
                continue
            value = data[key]
            if key == "name":
                value = clean_text(value, max_length=255)
                if not value:
                    raise ValueError("name required")
            elif key == "base_price":
                value = to_money(value)
                if value < 0:
                    raise ValueError("base_price must be >= 0")
            elif key == "default_quantity":
                value = ensure_positive_int(value, "default_quantity", maximum=MAX_QUANTITY)
            elif key == "is_active":
                value = bool(value)
            elif key == "sort_order":
                value = int(value or 0)
            else:
                value = clean_text(value)
            setattr(product, key, value)

    @staticmethod
    def _build_axes(raw_axes: List[Mapping[str, Any]], pricing_model: Optional[Dict]) -> List[CustomizationAxis]:
        reserved = {"package", "unit", "dimensions"}
        seen = set()
        axes = []
        for i, raw in enumerate(raw_axes):
            axis_type = clean_text(raw.get("type") or raw.get("axis_type"), max_length=64)
            name = clean_text(raw.get("name"), max_length=128) or axis_type
            if not axis_type:
                raise ValueError("axis type required")
            if axis_type in reserved and pricing_model:
                raise ValueError(f"axis type {axis_type!r} is reserved")
            if axis_type in seen:
                raise ValueError(f"duplicate axis type {axis_type!r}")
            seen.add(axis_type)
            raw_options = raw.get("options") or []
            if not raw_options:
                raise ValueError(f"axis {axis_type!r} needs at least one option")
            axis = CustomizationAxis(id=str(uuid4()), name=name, axis_type=axis_type, sort_order=i)
            for j, opt in enumerate(raw_options):
                value = clean_text(opt.get("value"), max_length=128)
                if not value:
                    raise ValueError(f"option value required on axis {axis_type!r}")
                axis.options.append(
                    CustomizationOption(
                        id=str(uuid4()),
                        value=value,
                        label=clean_text(opt.get("label"), max_length=255) or value,
                        price_delta=to_money(opt.get("price_delta", 0)),
                        sort_order=j,
                    )
                )
            axes.append(axis)
        return axes
