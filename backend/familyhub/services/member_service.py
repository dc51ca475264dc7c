from sqlalchemy.orm import Session
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Set
from ..db import models
from ..domain.enums import NotificationType
from .event_generator import display_name
from .family_groups import get_user_family_group, normalize_family_group

class MemberNotFound(Exception):
    pass

PROFILE_FIELDS = (
    "first_name", "last_name", "middle_name", "nick_name", "email", "username", "bio",
    "phone_number", "birthday", "birth_city", "birth_state", "current_city", "current_state",
    "profile_photo", "death_date", "use_first_name", "use_middle_name", "use_nick_name",
    "show_zodiac", "social_media", "hobbies", "languages", "pets",
)

def _apply(member: models.FamilyMember, fields: Dict[str, Any]):
    for key, value in fields.items():
        if key in PROFILE_FIELDS and value is not None:
            setattr(member, key, value)

def create_member(db: Session, created_by: str, fields: Dict[str, Any], member_id: Optional[str] = None) -> models.FamilyMember:
    """Admin add: the new member joins the creator's family group."""
    member = models.FamilyMember(family_group=get_user_family_group(created_by))
    if member_id:
        member.id = member_id
    _apply(member, fields)
    db.add(member)
    db.commit()
    db.refresh(member)
    return member

def save_profile(db: Session, user_id: str, fields: Dict[str, Any]) -> models.FamilyMember:
    """Create or update the caller's own profile (member id == user id)."""
    member = db.query(models.FamilyMember).filter(models.FamilyMember.id == user_id).first()
    if member is None:
        return create_member(db, created_by=user_id, fields=fields, member_id=user_id)
    _apply(member, fields)
    member.family_group = get_user_family_group(user_id)
    member.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(member)
    return member

def get_member(db: Session, member_id: str) -> models.FamilyMember:
    member = db.query(models.FamilyMember).filter(models.FamilyMember.id == member_id).first()
    if not member:
        raise MemberNotFound()
    return member

def update_member(db: Session, member_id: str, fields: Dict[str, Any]) -> models.FamilyMember:
    member = get_member(db, member_id)
    _apply(member, fields)
    member.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(member)
    return member

def list_members(db: Session, viewer_id: Optional[str] = None, include_all_groups: bool = False) -> List[models.FamilyMember]:
    members = db.query(models.FamilyMember).order_by(models.FamilyMember.last_name, models.FamilyMember.first_name).all()
    if include_all_groups:
        return members
    group = get_user_family_group(viewer_id)
    return [m for m in members if normalize_family_group(m.family_group) == group]

def family_member_ids(members: Iterable[models.FamilyMember]) -> Set[str]:
    return {m.id for m in members}

def list_hobbies(db: Session, viewer_id: Optional[str] = None) -> List[str]:
    hobbies = set()
    for member in list_members(db, viewer_id):
        hobbies.update(h.strip() for h in (member.hobbies or []) if h and h.strip())
    return sorted(hobbies, key=lambda h: (h.lower(), h))

def list_members_with_hobby(db: Session, hobby: str, viewer_id: Optional[str] = None) -> List[models.FamilyMember]:
    wanted = hobby.strip().lower()
    return [
        m for m in list_members(db, viewer_id)
        if any((h or "").strip().lower() == wanted for h in (m.hobbies or []))
    ]

def get_display_name(db: Session, member_id: str) -> Optional[str]:
    member = db.query(models.FamilyMember).filter(models.FamilyMember.id == member_id).first()
    if member is None:
        return None
    return display_name(member) or None

def get_notification_preferences(db: Session, member_id: str) -> List[str]:
    member = db.query(models.FamilyMember).filter(models.FamilyMember.id == member_id).first()
    if member is None:
        return []
    return list(member.disabled_notification_types or [])

def save_notification_preferences(db: Session, member_id: str, disabled_types: List[NotificationType]) -> List[str]:
    member = get_member(db, member_id)
    member.disabled_notification_types = sorted({NotificationType(t).value for t in disabled_types})
    member.updated_at = datetime.now(timezone.utc)
    db.commit()
    return list(member.disabled_notification_types)
