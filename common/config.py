import os
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from pathlib import Path
import json
from typing import Dict, List, Optional

from common.services.logging import log_event


@dataclass
class AppConfig:
    database_url: str
    secret_key: str
    log_level: str
    store_base_url: str
    currency: str
    design_assist_fee: Decimal = Decimal("5000")
    delivery_fees: Dict[str, Decimal] = field(
        default_factory=lambda: {"standard": Decimal("0"), "express": Decimal("4000"), "rush": Decimal("7000")}
    )
    max_upload_bytes: int = 50 * 1024 * 1024

    def get_upload_url(self, filename: str) -> str:
        base = self.store_base_url.rstrip("/")
        return f"{base}/api/uploads/{filename}"


ALLOWED_HOT_KEYS = {"CURRENCY", "DESIGN_ASSIST_FEE", "DELIVERY_FEE_EXPRESS", "DELIVERY_FEE_RUSH"}
SENSITIVE_KEYS = {"DATABASE_URL", "SECRET_KEY", "MAX_UPLOAD_MB"}


def validate_currency(value: Optional[str]) -> str:
    v = (value or "NGN").strip().upper()
    if len(v) != 3:
        raise ValueError("Invalid currency code: expected ISO4217 length 3")
    return v


def validate_fee(value, name: str, default: Decimal) -> Decimal:
    if value is None or str(value).strip() == "":
        return default
    try:
        fee = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"{name} must be a number") from None
    if fee < 0:
        raise ValueError(f"{name} must be >= 0")
    return fee


def _load_settings_file(path: Optional[Path] = None) -> dict:
    try:
        path = path or Path(__file__).resolve().parents[1] / "data" / "settings.json"
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log_event("warning", "config.settings_unreadable", path=str(path), error=str(exc))
    return {}


def load_env(settings_path: Optional[Path] = None) -> AppConfig:
    # data/settings.json wins over the environment for business settings
    s = _load_settings_file(settings_path)
    database_url = os.getenv("DATABASE_URL", "sqlite:///data/app.db")
    secret_key = os.getenv("SECRET_KEY", "dev_secret")
    log_level = os.getenv("LOG_LEVEL", "INFO")
    store_base_url = (s.get("STORE_BASE_URL") or os.getenv("STORE_BASE_URL") or "http://127.0.0.1:5000").rstrip("/")
    currency = validate_currency(s.get("CURRENCY") or os.getenv("CURRENCY"))
    design_fee = validate_fee(
        s.get("DESIGN_ASSIST_FEE", os.getenv("DESIGN_ASSIST_FEE")), "DESIGN_ASSIST_FEE", Decimal("5000")
    )
    express_fee = validate_fee(
        s.get("DELIVERY_FEE_EXPRESS", os.getenv("DELIVERY_FEE_EXPRESS")), "DELIVERY_FEE_EXPRESS", Decimal("4000")
    )
    rush_fee = validate_fee(
        s.get("DELIVERY_FEE_RUSH", os.getenv("DELIVERY_FEE_RUSH")), "DELIVERY_FEE_RUSH", Decimal("7000")
    )
    max_upload_mb = int(os.getenv("MAX_UPLOAD_MB", "50"))
    return AppConfig(
        database_url=database_url,
        secret_key=secret_key,
        log_level=log_level,
        store_base_url=store_base_url,
        currency=currency,
        design_assist_fee=design_fee,
        delivery_fees={"standard": Decimal("0"), "express": express_fee, "rush": rush_fee},
        max_upload_bytes=max_upload_mb * 1024 * 1024,
    )


def refresh_non_sensitive(overrides: Dict[str, str], current: AppConfig) -> AppConfig:
    updates = {k: v for k, v in (overrides or {}).items() if k in ALLOWED_HOT_KEYS}
    currency = validate_currency(updates.get("CURRENCY", current.currency))
    fees = dict(current.delivery_fees)
    fees["express"] = validate_fee(updates.get("DELIVERY_FEE_EXPRESS"), "DELIVERY_FEE_EXPRESS", fees["express"])
    fees["rush"] = validate_fee(updates.get("DELIVERY_FEE_RUSH"), "DELIVERY_FEE_RUSH", fees["rush"])
    design_fee = validate_fee(updates.get("DESIGN_ASSIST_FEE"), "DESIGN_ASSIST_FEE", current.design_assist_fee)
    return replace(current, currency=currency, delivery_fees=fees, design_assist_fee=design_fee)


def requires_restart(changed_keys: List[str]) -> bool:
    if not changed_keys:
        return False
    return any(k in SENSITIVE_KEYS for k in changed_keys)


def save_settings_file(path: Path, updates: Dict[str, str]) -> None:
    """Merge hot-reloadable keys into settings.json; other keys are ignored."""
    current = _load_settings_file(path)
    current.update({k: str(v) for k, v in (updates or {}).items() if k in ALLOWED_HOT_KEYS})
    path.write_text(json.dumps(current, indent=2, ensure_ascii=False), encoding="utf-8")


def settings_snapshot(config: AppConfig) -> Dict[str, object]:
    return {
        "currency": config.currency,
        "design_assist_fee": float(config.design_assist_fee),
        "delivery_fees": {k: float(v) for k, v in config.delivery_fees.items()},
        "max_upload_bytes": config.max_upload_bytes,
    }


def hot_settings(config: AppConfig) -> Dict[str, str]:
    """The hot-reloadable keys of ``config`` in settings.json form."""
    return {
        "CURRENCY": config.currency,
        "DESIGN_ASSIST_FEE": str(config.design_assist_fee),
        "DELIVERY_FEE_EXPRESS": str(config.delivery_fees["express"]),
        "DELIVERY_FEE_RUSH": str(config.delivery_fees["rush"]),
    }
