"""Demo / real family group classification.

Demo users only ever see demo data; everyone else sees the real family.
"""
from typing import Optional

from .. import config
from ..domain.enums import FamilyGroup


def is_demo_user(user_id: Optional[str]) -> bool:
    if not user_id:
        return False
    return user_id in config.DEMO_USER_IDS


def get_user_family_group(user_id: Optional[str]) -> str:
    if is_demo_user(user_id):
        return FamilyGroup.DEMO.value
    return FamilyGroup.REAL.value


def normalize_family_group(value: Optional[str]) -> str:
    """Normalize a stored tag. Rows written before groups existed count as real."""
    if value and value.strip().lower() == FamilyGroup.DEMO.value:
        return FamilyGroup.DEMO.value
    return FamilyGroup.REAL.value


def explicit_family_group(value: Optional[str]) -> Optional[str]:
    """Return the recognised tag, or None when missing or unrecognised."""
    if not value:
        return None
    cleaned = value.strip().lower()
    if cleaned in (FamilyGroup.DEMO.value, FamilyGroup.REAL.value):
        return cleaned
    return None
