import pytest

from common.services.banner_service import BannerService


@pytest.fixture
def banners(session_factory):
    return BannerService(session_factory)


class TestHeroBanners:
    def test_active_banner_has_lowest_position(self, banners):
        banners.create_banner({"title": "Second", "position": 2})
        first = banners.create_banner({"title": "First", "position": 1})
        banners.create_banner({"title": "Hidden", "position": 0, "is_active": False})

        assert banners.active_banner()["id"] == first["id"]
        assert [b["title"] for b in banners.list_banners(active_only=True)] == ["First", "Second"]
        assert len(banners.list_banners()) == 3

    def test_no_banner(self, banners):
        assert banners.active_banner() is None

    def test_update_and_delete(self, banners):
        banner = banners.create_banner({"title": "Sale", "button_text": "Shop now"})

        updated = banners.update_banner(banner["id"], {"subtitle": "Up to 30% off", "is_active": False})

        assert updated["subtitle"] == "Up to 30% off"
        assert updated["button_text"] == "Shop now"
        assert banners.active_banner() is None
        assert banners.delete_banner(banner["id"]) is True
        assert banners.delete_banner(banner["id"]) is False
        assert banners.update_banner(banner["id"], {"title": "x"}) is None

    def test_title_required(self, banners):
        with pytest.raises(ValueError):
            banners.create_banner({"title": "  "})
        banner = banners.create_banner({"title": "Ok"})
        with pytest.raises(ValueError):
            banners.update_banner(banner["id"], {"title": ""})


class TestFlashBanners:
    def test_default_colours(self, banners):
        flash = banners.create_flash_banner({"title": "Free delivery this week"})
        assert flash["background_color"] == "#111827"
        assert flash["text_color"] == "#ffffff"

    def test_latest_active_wins(self, banners):
        banners.create_flash_banner({"title": "Old news"})
        latest = banners.create_flash_banner({"title": "Fresh news"})
        assert banners.active_flash_banner()["id"] == latest["id"]

        banners.update_flash_banner(latest["id"], {"is_active": False})
        assert banners.active_flash_banner()["title"] == "Old news"
        assert len(banners.list_flash_banners()) == 2

    def test_update_missing(self, banners):
        assert banners.update_flash_banner("missing", {"title": "x"}) is None
