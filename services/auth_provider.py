"""Shopper identity as seen by the storefront.

Sign-in itself is handled upstream; the auth gateway stores the signed-in
user's id in the Flask session under ``user_id``. Admin rights come from
the ``admin_user`` table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from flask import session

from common.db.session import get_session
from common.models.admin_user import AdminUser
from common.services.cart_service import CartOwner
from common.services.logging import log_event


USER_SESSION_KEY = "user_id"
CART_SESSION_KEY = "cart_session_id"


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    is_admin: bool = False
    role: Optional[str] = None


class SessionAuthProvider:
    """Reads the current user from the request session."""

    def __init__(self, session_factory=get_session) -> None:
        self._session_factory = session_factory

    def current_user(self) -> Optional[CurrentUser]:
        user_id = session.get(USER_SESSION_KEY)
        if not user_id:
            return None
        with self._session_factory() as db:
            admin = db.query(AdminUser).filter(AdminUser.user_id == str(user_id)).first()
            role = admin.role if admin else None
        return CurrentUser(user_id=str(user_id), is_admin=admin is not None, role=role)

    def cart_session_id(self) -> str:
        """Anonymous cart key, created once and kept for the life of the cookie."""

        sid = session.get(CART_SESSION_KEY)
        if not sid:
            sid = str(uuid4())
            session[CART_SESSION_KEY] = sid
            session.permanent = True
        return sid

    def cart_owner(self) -> CartOwner:
        user = self.current_user()
        if user is not None:
            return CartOwner(user_id=user.user_id)
        return CartOwner(session_id=self.cart_session_id())

    def grant_admin(self, user_id: str, role: str = "admin") -> bool:
        """Promote ``user_id``; returns False if it already had admin rights."""

        if not user_id:
            raise ValueError("user_id required")
        with self._session_factory() as db:
            existing = db.query(AdminUser).filter(AdminUser.user_id == user_id).first()
            if existing:
                return False
            db.add(AdminUser(id=str(uuid4()), user_id=user_id, role=role))
        log_event("info", "auth.admin_granted", user_id=user_id, role=role)
        return True
