from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, JSON, UniqueConstraint
from datetime import datetime, timezone
from .session import Base
import uuid


def gen_uuid():
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)

class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True, default=gen_uuid)
    email = Column(String, unique=True, nullable=False)
    hashed_password = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

class FamilyMember(Base):
    __tablename__ = "family_members"
    # Self-created profiles share the id of the owning user
    id = Column(String, primary_key=True, default=gen_uuid)
    first_name = Column(String, nullable=False, default="")
    last_name = Column(String, nullable=False, default="")
    middle_name = Column(String, nullable=False, default="")
    nick_name = Column(String, nullable=False, default="")
    email = Column(String, nullable=False, default="")
    username = Column(String, nullable=False, default="")
    bio = Column(String, nullable=False, default="")
    phone_number = Column(String, nullable=False, default="")
    birthday = Column(String, nullable=False, default="")  # ISO date, may carry a time part
    birth_city = Column(String, nullable=False, default="")
    birth_state = Column(String, nullable=False, default="")
    current_city = Column(String, nullable=False, default="")
    current_state = Column(String, nullable=False, default="")
    profile_photo = Column(String, nullable=False, default="")
    death_date = Column(String, nullable=False, default="")
    use_first_name = Column(Boolean, nullable=False, default=True)
    use_middle_name = Column(Boolean, nullable=False, default=False)
    use_nick_name = Column(Boolean, nullable=False, default=False)
    show_zodiac = Column(Boolean, nullable=False, default=False)
    family_group = Column(String, nullable=False, default="real", index=True)
    social_media = Column(JSON, nullable=True)  # [{platform, url}]
    hobbies = Column(JSON, nullable=True)  # [str]
    languages = Column(JSON, nullable=True)  # [{name, proficiency}]
    pets = Column(JSON, nullable=True)  # [{name, birthday, death_date, image}]
    disabled_notification_types = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

class Relationship(Base):
    __tablename__ = "relationships"
    id = Column(String, primary_key=True, default=gen_uuid)
    person_a_id = Column(String, ForeignKey("family_members.id", ondelete="CASCADE"), nullable=False, index=True)
    person_b_id = Column(String, ForeignKey("family_members.id", ondelete="CASCADE"), nullable=False, index=True)
    relationship_type = Column(String, nullable=False, index=True)
    relationship_subtype = Column(String, nullable=False, default="")
    start_date = Column(String, nullable=False, default="")
    end_date = Column(String, nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=True)
    notes = Column(String, nullable=False, default="")
    created_by = Column(String, nullable=False, default="")
    created_at = Column(DateTime, nullable=False, default=utcnow)

class Event(Base):
    __tablename__ = "events"
    id = Column(String, primary_key=True, default=gen_uuid)
    user_id = Column(String, nullable=True, index=True)  # owning user; empty for system events
    created_by = Column(String, nullable=True)
    family_group = Column(String, nullable=False, default="real", index=True)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    location = Column(String, nullable=True)
    start_at = Column(DateTime, nullable=False, index=True)
    end_at = Column(DateTime, nullable=True)
    all_day = Column(Boolean, nullable=False, default=False)
    background_color = Column(String, nullable=True)
    border_color = Column(String, nullable=True)
    text_color = Column(String, nullable=True)
    category = Column(String, nullable=True, index=True)
    rrule = Column(JSON, nullable=True)  # {freq, interval, byweekday, until}
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

class EventRSVP(Base):
    __tablename__ = "event_rsvps"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_event_rsvps_event_user"),)
    id = Column(String, primary_key=True, default=gen_uuid)
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

class Notification(Base):
    __tablename__ = "notifications"
    id = Column(String, primary_key=True, default=gen_uuid)
    user_id = Column(String, nullable=False, index=True)
    type = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False, index=True)
    related_id = Column(String, nullable=True, index=True)
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
