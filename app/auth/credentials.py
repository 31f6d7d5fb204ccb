"""
Credential verification

Login checks run as a chain of verifiers; the first one that recognizes
the (user, pass) pair decides the role.

- StaticCredentialVerifier: admin / superAdmin accounts from settings
- CoachDocumentVerifier: a coach logs in with the document as user and pass
"""
import hmac
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from loguru import logger

from app.config import Settings
from database.store import ClubStore

from .models import UserRole


class CredentialVerifier(ABC):
    """(user, pass) -> role, or None when not recognized"""

    @abstractmethod
    async def verify(self, user: str, password: str) -> Optional[UserRole]:
        pass


class StaticCredentialVerifier(CredentialVerifier):
    """Fixed username/password pair"""

    def __init__(self, username: str, password: str, role: UserRole):
        self.username = username
        self.password = password
        self.role = role

    async def verify(self, user: str, password: str) -> Optional[UserRole]:
        if not self.username or not self.password:
            return None
        if hmac.compare_digest(user.encode(), self.username.encode()) and hmac.compare_digest(
            password.encode(), self.password.encode()
        ):
            return self.role
        return None


class CoachDocumentVerifier(CredentialVerifier):
    """Coach whose document equals both user and pass"""

    def __init__(self, store: ClubStore):
        self.store = store

    async def verify(self, user: str, password: str) -> Optional[UserRole]:
        if not user or user != password:
            return None
        coach = await self.store.get_coach_by_document(user)
        if coach is None:
            return None
        return UserRole.COACH


def default_verifiers(settings: Settings, store: ClubStore) -> List[CredentialVerifier]:
    """관리자 계정 -> 코치 순서"""
    return [
        StaticCredentialVerifier(settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD, UserRole.ADMIN),
        StaticCredentialVerifier(
            settings.SUPERADMIN_USERNAME, settings.SUPERADMIN_PASSWORD, UserRole.SUPER_ADMIN
        ),
        CoachDocumentVerifier(store),
    ]


async def authenticate(verifiers: Iterable[CredentialVerifier], user: str, password: str) -> UserRole:
    """First matching verifier wins; UserRole.NONE when nothing matches"""
    for verifier in verifiers:
        role = await verifier.verify(user, password)
        if role is not None:
            logger.info(f"Login: {user} as {role.value}")
            return role
    logger.warning(f"Login failed: {user}")
    return UserRole.NONE
