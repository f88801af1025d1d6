from contextlib import contextmanager
from decimal import Decimal
from io import BytesIO

import pytest
from PIL import Image
from sqlalchemy.exc import OperationalError

from app import create_app
from common.config import AppConfig
from common.db.session import build_engine, init_db, make_session_factory
from common.pricing import (
    AreaBased,
    CustomizationAxis,
    CustomizationOption,
    PackageTier,
    PerUnitCatalog,
    ProductDefinition,
    TieredPackage,
    UnitChoice,
)
from common.services.catalog_service import CatalogService
from common.services.seed import seed_catalog
from config import StorefrontConfig


@pytest.fixture
def session_factory():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def catalog(session_factory):
    service = CatalogService(session_factory)
    seed_catalog(service)
    return service


class FlakySessions:
    """Session factory that can be switched into a failing state."""

    def __init__(self, inner):
        self.inner = inner
        self.fail = False

    @contextmanager
    def __call__(self):
        if self.fail:
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))
        with self.inner() as session:
            yield session


@pytest.fixture
def flaky_sessions(session_factory):
    return FlakySessions(session_factory)


@pytest.fixture
def app_config():
    return AppConfig(
        database_url="sqlite://",
        secret_key="test-secret",
        log_level="WARNING",
        store_base_url="http://shop.test",
        currency="NGN",
    )


@pytest.fixture
def storefront_config(tmp_path, app_config):
    return StorefrontConfig(
        secret_key="test-secret",
        project_root=tmp_path,
        data_root=tmp_path,
        app=app_config,
        admin_user_ids=("admin-1",),
    )


@pytest.fixture
def app(storefront_config):
    app = create_app(storefront_config)
    app.config["TESTING"] = True
    seed_catalog(app.extensions["storefront_components"]["catalog"])
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    with client.session_transaction() as sess:
        sess["user_id"] = "admin-1"
    return client


@pytest.fixture
def cards():
    return ProductDefinition(
        id="cards",
        name="Business Cards",
        base_price=Decimal("140"),
        default_quantity=100,
        axes=(
            CustomizationAxis(
                name="Paper Weight",
                axis_type="paper",
                options=(
                    CustomizationOption("350gsm", "350 grams", Decimal("0")),
                    CustomizationOption("600gsm", "600 grams", Decimal("30")),
                ),
            ),
            CustomizationAxis(
                name="Edge",
                axis_type="edge",
                options=(
                    CustomizationOption("straight", "Straight edge", Decimal("0")),
                    CustomizationOption("curved", "Curved edge", Decimal("10")),
                ),
            ),
        ),
    )


@pytest.fixture
def banner_product():
    return ProductDefinition(id="banner", name="Banner", pricing_model=AreaBased(rate=Decimal("300")))


@pytest.fixture
def invitations():
    return ProductDefinition(
        id="invites",
        name="Wedding Invitations",
        pricing_model=TieredPackage(
            tiers=(
                PackageTier("Luxury Card", Decimal("100000")),
                PackageTier("Middle Class Card", Decimal("60000")),
            )
        ),
    )


@pytest.fixture
def flyers():
    return ProductDefinition(
        id="flyers",
        name="Flyers & Brochure",
        pricing_model=PerUnitCatalog(
            units=(
                UnitChoice("A4 Flyer", Decimal("150")),
                UnitChoice("A5 Flyer", Decimal("80")),
                UnitChoice("A6 Flyer", Decimal("50")),
            )
        ),
    )


def png_bytes(size=(40, 20), fmt="PNG"):
    buffer = BytesIO()
    Image.new("RGB", size, (200, 30, 30)).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def make_png():
    return png_bytes
