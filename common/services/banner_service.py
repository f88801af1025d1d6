from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4

from ..db.session import get_session
from ..models.banner import Banner, FlashBanner
from ..utils.dto import to_banner_dto, to_flash_banner_dto
from ..utils.validators import clean_text
from .logging import log_event


BANNER_FIELDS = ("title", "subtitle", "description", "button_text", "link_url", "image_url", "image_dimensions", "position", "is_active")
FLASH_FIELDS = ("title", "description", "link_url", "background_color", "text_color", "is_active")


def _assign(row: Any, data: Mapping[str, Any], fields) -> None:
    for key in fields:
        if key not in data:
            continue
        value = data[key]
        if key == "is_active":
            value = bool(value)
        elif key == "position":
            value = int(value or 0)
        else:
            value = clean_text(value)
        if key == "title" and not value:
            raise ValueError("title required")
        setattr(row, key, value)


class BannerService:
    """Hero banners and flash banners for the storefront."""

    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    def active_banner(self) -> Optional[Dict]:
        """Active hero banner with the lowest position."""
        with self._session_factory() as session:
            row = (
                session.query(Banner)
                .filter(Banner.is_active.is_(True))
                .order_by(Banner.position.asc(), Banner.created_at.asc())
                .first()
            )
            return to_banner_dto(row) if row else None

    def list_banners(self, *, active_only: bool = False) -> List[Dict]:
        with self._session_factory() as session:
            q = session.query(Banner)
            if active_only:
                q = q.filter(Banner.is_active.is_(True))
            return [to_banner_dto(b) for b in q.order_by(Banner.position.asc(), Banner.created_at.asc()).all()]

    def create_banner(self, data: Mapping[str, Any]) -> Dict:
        if not clean_text(data.get("title")):
            raise ValueError("title required")
        with self._session_factory() as session:
            row = Banner(id=str(uuid4()), position=0, is_active=True)
            _assign(row, data, BANNER_FIELDS)
            session.add(row)
            session.flush()
            dto = to_banner_dto(row)
        log_event("info", "banner.created", banner_id=dto["id"])
        return dto

    def update_banner(self, banner_id: str, data: Mapping[str, Any]) -> Optional[Dict]:
        with self._session_factory() as session:
            row = session.query(Banner).filter(Banner.id == banner_id).first()
            if not row:
                return None
            _assign(row, data, BANNER_FIELDS)
            session.flush()
            dto = to_banner_dto(row)
        log_event("info", "banner.updated", banner_id=banner_id)
        return dto

    def delete_banner(self, banner_id: str) -> bool:
        with self._session_factory() as session:
            row = session.query(Banner).filter(Banner.id == banner_id).first()
            if not row:
                return False
            session.delete(row)
        log_event("info", "banner.deleted", banner_id=banner_id)
        return True

    def active_flash_banner(self) -> Optional[Dict]:
        """Most recently created active flash banner."""
        with self._session_factory() as session:
            row = (
                session.query(FlashBanner)
                .filter(FlashBanner.is_active.is_(True))
                .order_by(FlashBanner.created_at.desc(), FlashBanner.updated_at.desc())
                .first()
            )
            return to_flash_banner_dto(row) if row else None

    def list_flash_banners(self) -> List[Dict]:
        with self._session_factory() as session:
            rows = session.query(FlashBanner).order_by(FlashBanner.created_at.desc()).all()
            return [to_flash_banner_dto(r) for r in rows]

    def create_flash_banner(self, data: Mapping[str, Any]) -> Dict:
        if not clean_text(data.get("title")):
            raise ValueError("title required")
        with self._session_factory() as session:
            row = FlashBanner(id=str(uuid4()), is_active=True, background_color="#111827", text_color="#ffffff")
            _assign(row, data, FLASH_FIELDS)
            session.add(row)
            session.flush()
            dto = to_flash_banner_dto(row)
        log_event("info", "flash_banner.created", banner_id=dto["id"])
        return dto

    def update_flash_banner(self, banner_id: str, data: Mapping[str, Any]) -> Optional[Dict]:
        with self._session_factory() as session:
            row = session.query(FlashBanner).filter(FlashBanner.id == banner_id).first()
            if not row:
                return None
            _assign(row, data, FLASH_FIELDS)
            session.flush()
            dto = to_flash_banner_dto(row)
        log_event("info", "flash_banner.updated", banner_id=banner_id)
        return dto
