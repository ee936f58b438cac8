"""SQLAlchemy models."""

from shared.models.base import Base
from shared.models.file import DesktopFile
from shared.models.user import User
from shared.models.user_settings import UserSettings

__all__ = [
    "Base",
    "DesktopFile",
    "User",
    "UserSettings",
]
