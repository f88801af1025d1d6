"""Storefront application settings: paths, secrets and business config."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from common.config import AppConfig, load_env
from common.services.logging import log_event


@dataclass
class StorefrontConfig:
    """Settings the Flask app needs on top of the business config."""

    secret_key: str
    project_root: Path
    data_root: Path
    app: AppConfig
    admin_user_ids: tuple = ()

    @property
    def upload_dir(self) -> Path:
        return self.data_root / "uploads"

    @property
    def artwork_dir(self) -> Path:
        return self.upload_dir / "artwork"

    @property
    def banner_image_dir(self) -> Path:
        return self.upload_dir / "banners"

    @property
    def settings_file(self) -> Path:
        return self.data_root / "settings.json"

    @property
    def database_url(self) -> str:
        return self.app.database_url

    @classmethod
    def load(cls, data_root: Optional[Path] = None) -> "StorefrontConfig":
        """Build settings from the environment and make sure data directories exist."""

        project_root = Path(__file__).resolve().parent
        # a local .env fills in anything the process environment does not set
        load_dotenv(project_root / ".env", override=False)
        data_root = Path(data_root or os.environ.get("STOREFRONT_DATA_DIR") or project_root / "data")
        data_root.mkdir(parents=True, exist_ok=True)

        settings_file = data_root / "settings.json"
        if not settings_file.exists():
            default_settings = {
                "STORE_BASE_URL": "http://127.0.0.1:5000",
                "CURRENCY": "NGN",
                "DESIGN_ASSIST_FEE": "5000",
                "DELIVERY_FEE_EXPRESS": "4000",
                "DELIVERY_FEE_RUSH": "7000",
            }
            settings_file.write_text(
                json.dumps(default_settings, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
            log_event("info", "config.settings_created", path=str(settings_file))

        app_config = load_env(settings_file)
        # comma separated user ids that are promoted to admin on startup
        admin_ids = tuple(
            uid.strip() for uid in os.environ.get("STOREFRONT_ADMIN_USER_IDS", "").split(",") if uid.strip()
        )

        config = cls(
            secret_key=app_config.secret_key,
            project_root=project_root,
            data_root=data_root,
            app=app_config,
            admin_user_ids=admin_ids,
        )
        config.artwork_dir.mkdir(parents=True, exist_ok=True)
        config.banner_image_dir.mkdir(parents=True, exist_ok=True)
        return config
