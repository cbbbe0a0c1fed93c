from __future__ import annotations

import logging

from werkzeug.security import generate_password_hash

from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .model import SsoProfile, User
from .repository import UserRepository
from .service import generate_temp_password

logger = logging.getLogger(__name__)


class SsoService:
    """Resolve (and optionally provision) the local account for an SSO login."""

    def __init__(self, users: UserRepository, *, provider_id: int = 1, auto_provision: bool = True):
        self._users = users
        self._provider_id = int(provider_id)
        self._auto_provision = bool(auto_provision)

    def resolve_user(self, profile: SsoProfile) -> User:
        if not profile.subject_id:
            raise AuthenticationError("Missing subject id in SSO response")

        user = self._users.get_by_sso_identity(provider_id=self._provider_id, subject_id=profile.subject_id)
        if not user and profile.email:
            user = self._users.get_by_email(profile.email)

        if not user and self._auto_provision:
            if not profile.email:
                raise AuthenticationError("Cannot auto-provision user without email claim")
            # unusable random password: SSO users sign in through the provider
            user_id = self._users.create_user(
                name=profile.display_name or profile.email,
                email=profile.email.lower(),
                password_hash=generate_password_hash(generate_temp_password()),
                role=Role.EMPLOYEE,
            )
            user = self._users.get_by_id(user_id)
            logger.info("Provisioned user %s from SSO subject %s", user_id, profile.subject_id)

        if not user:
            raise AuthenticationError("SSO login failed: user not found")
        if not user.is_active:
            raise AuthenticationError("SSO login failed: user inactive")

        self._users.upsert_sso_identity(
            user_id=user.user_id,
            provider_id=self._provider_id,
            subject_id=profile.subject_id,
            email=profile.email,
            display_name=profile.display_name,
        )
        self._users.touch_last_login(user.user_id)
        return user
