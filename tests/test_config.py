import json
from decimal import Decimal

import pytest

from common.config import (
    load_env,
    refresh_non_sensitive,
    requires_restart,
    save_settings_file,
    validate_currency,
    validate_fee,
)
from config import StorefrontConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("CURRENCY", "DESIGN_ASSIST_FEE", "DELIVERY_FEE_EXPRESS", "DELIVERY_FEE_RUSH", "STORE_BASE_URL",
                "MAX_UPLOAD_MB", "STOREFRONT_ADMIN_USER_IDS", "STOREFRONT_DATA_DIR"):
        monkeypatch.delenv(key, raising=False)


def test_validate_currency():
    assert validate_currency(None) == "NGN"
    assert validate_currency(" usd ") == "USD"
    with pytest.raises(ValueError):
        validate_currency("NAIRA")


def test_validate_fee():
    assert validate_fee("", "FEE", Decimal("5")) == Decimal("5")
    assert validate_fee("12.50", "FEE", Decimal("5")) == Decimal("12.50")
    with pytest.raises(ValueError):
        validate_fee("-1", "FEE", Decimal("5"))
    with pytest.raises(ValueError):
        validate_fee("cheap", "FEE", Decimal("5"))


def test_settings_file_wins_over_environment(tmp_path, monkeypatch):
    settings = tmp_path / "settings.json"
    settings.write_text(json.dumps({"CURRENCY": "GHS", "DELIVERY_FEE_RUSH": "9000"}), encoding="utf-8")
    monkeypatch.setenv("CURRENCY", "USD")
    monkeypatch.setenv("DESIGN_ASSIST_FEE", "2500")
    monkeypatch.setenv("MAX_UPLOAD_MB", "10")

    config = load_env(settings)

    assert config.currency == "GHS"
    assert config.design_assist_fee == Decimal("2500")
    assert config.delivery_fees == {"standard": Decimal("0"), "express": Decimal("4000"), "rush": Decimal("9000")}
    assert config.max_upload_bytes == 10 * 1024 * 1024


def test_upload_url(tmp_path):
    config = load_env(tmp_path / "missing.json")
    assert config.get_upload_url("artwork/a.png") == "http://127.0.0.1:5000/api/uploads/artwork/a.png"


def test_refresh_only_touches_hot_keys(tmp_path):
    current = load_env(tmp_path / "missing.json")

    refreshed = refresh_non_sensitive(
        {"CURRENCY": "usd", "DELIVERY_FEE_EXPRESS": "3000", "SECRET_KEY": "stolen"}, current
    )

    assert refreshed.currency == "USD"
    assert refreshed.delivery_fees["express"] == Decimal("3000")
    assert refreshed.delivery_fees["rush"] == current.delivery_fees["rush"]
    assert refreshed.secret_key == current.secret_key
    assert current.currency == "NGN"


def test_requires_restart():
    assert requires_restart([]) is False
    assert requires_restart(["CURRENCY"]) is False
    assert requires_restart(["CURRENCY", "DATABASE_URL"]) is True


def test_save_settings_file_merges_hot_keys(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"STORE_BASE_URL": "https://print.example"}), encoding="utf-8")

    save_settings_file(path, {"CURRENCY": "USD", "SECRET_KEY": "nope"})

    assert json.loads(path.read_text(encoding="utf-8")) == {"STORE_BASE_URL": "https://print.example", "CURRENCY": "USD"}


def test_storefront_config_load(tmp_path, monkeypatch):
    monkeypatch.setenv("STOREFRONT_ADMIN_USER_IDS", "alice, bob,,")

    config = StorefrontConfig.load(tmp_path)

    assert config.settings_file.exists()
    assert config.artwork_dir.is_dir()
    assert config.banner_image_dir.is_dir()
    assert config.admin_user_ids == ("alice", "bob")
    assert config.app.design_assist_fee == Decimal("5000")
