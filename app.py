"""Print & branding storefront Flask application."""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

import click
from flask import Flask

from common.db.session import build_engine, init_db, make_session_factory
from common.pricing import PricingSettings
from common.services.banner_service import BannerService
from common.services.cart_service import CartService
from common.services.catalog_service import CatalogService
from common.services.logging import configure_logging, log_event
from common.services.order_service import OrderService
from common.services.seed import seed_catalog
from config import StorefrontConfig
from routes import admin, api
from services import SessionAuthProvider, UploadService


def create_app(config: Optional[StorefrontConfig] = None) -> Flask:
    config = config or StorefrontConfig.load()
    configure_logging(config.app.log_level)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["STOREFRONT_CONFIG"] = config
    # room for the multipart envelope around a max-size upload
    app.config["MAX_CONTENT_LENGTH"] = config.app.max_upload_bytes + 1024 * 1024
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(days=365)

    engine = build_engine(config.database_url)
    init_db(engine)
    session_factory = make_session_factory(engine)

    catalog = CatalogService(session_factory)
    pricing = PricingSettings.from_config(config.app)
    auth = SessionAuthProvider(session_factory)
    components = {
        "session_factory": session_factory,
        "catalog": catalog,
        "pricing": pricing,
        "cart": CartService(session_factory, catalog=catalog, pricing=pricing),
        "orders": OrderService(session_factory, currency=config.app.currency),
        "banners": BannerService(session_factory),
        "auth": auth,
        "uploads": UploadService(
            config.artwork_dir,
            config.banner_image_dir,
            config.app.get_upload_url,
            max_bytes=config.app.max_upload_bytes,
        ),
    }
    app.extensions["storefront_components"] = components

    for user_id in config.admin_user_ids:
        auth.grant_admin(user_id)

    app.register_blueprint(api.api_bp)
    app.register_blueprint(admin.admin_bp)
    _register_cli(app)

    log_event("info", "app.started", database=engine.url.render_as_string(hide_password=True))
    return app


def _register_cli(app: Flask) -> None:
    @app.cli.command("init-db")
    def init_db_command():
        """Create missing tables."""
        init_db(app.extensions["storefront_components"]["session_factory"].engine)
        click.echo("Database ready.")

    @app.cli.command("seed-catalog")
    def seed_catalog_command():
        """Insert the starter products."""
        created = seed_catalog(app.extensions["storefront_components"]["catalog"])
        click.echo(f"Created {created} product(s).")

    @app.cli.command("grant-admin")
    @click.argument("user_id")
    @click.option("--role", default="admin", show_default=True)
    def grant_admin_command(user_id: str, role: str):
        """Give USER_ID access to the admin dashboard."""
        granted = app.extensions["storefront_components"]["auth"].grant_admin(user_id, role)
        click.echo("Granted." if granted else "Already an admin.")


def main() -> None:
    app = create_app()
    app.run(host="0.0.0.0", port=5000, debug=False)


if __name__ == "__main__":
    main()
