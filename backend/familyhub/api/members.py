from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..db import models
from ..domain.enums import NotificationType
from ..errors import NotFoundError
from ..services import member_service
from ..services.member_service import MemberNotFound
from ..services.event_generator import display_name
from .auth import get_viewer

router = APIRouter(prefix="/members", tags=["members"])


class SocialMediaLink(BaseModel):
    platform: str
    url: str


class Language(BaseModel):
    name: str
    proficiency: str = ""


class Pet(BaseModel):
    name: str
    birthday: str = ""
    death_date: str = Field(default="", alias="deathDate")
    image: str = ""

    model_config = ConfigDict(populate_by_name=True)


class MemberIn(BaseModel):
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    middle_name: Optional[str] = Field(None, alias="middleName")
    nick_name: Optional[str] = Field(None, alias="nickName")
    email: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = None
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    birthday: Optional[str] = None
    birth_city: Optional[str] = Field(None, alias="birthCity")
    birth_state: Optional[str] = Field(None, alias="birthState")
    current_city: Optional[str] = Field(None, alias="currentCity")
    current_state: Optional[str] = Field(None, alias="currentState")
    profile_photo: Optional[str] = Field(None, alias="profilePhoto")
    death_date: Optional[str] = Field(None, alias="deathDate")
    use_first_name: Optional[bool] = Field(None, alias="useFirstName")
    use_middle_name: Optional[bool] = Field(None, alias="useMiddleName")
    use_nick_name: Optional[bool] = Field(None, alias="useNickName")
    show_zodiac: Optional[bool] = Field(None, alias="showZodiac")
    social_media: Optional[List[SocialMediaLink]] = Field(None, alias="socialMedia")
    hobbies: Optional[List[str]] = None
    languages: Optional[List[Language]] = None
    pets: Optional[List[Pet]] = None

    model_config = ConfigDict(populate_by_name=True)

    def fields(self) -> dict:
        return self.model_dump(exclude_none=True)


class MemberCreate(MemberIn):
    first_name: str = Field(..., alias="firstName", min_length=1)
    last_name: str = Field(..., alias="lastName")


class MemberOut(BaseModel):
    id: str
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    middle_name: str = Field("", alias="middleName")
    nick_name: str = Field("", alias="nickName")
    display_name: str = Field(..., alias="displayName")
    email: str = ""
    username: str = ""
    bio: str = ""
    phone_number: str = Field("", alias="phoneNumber")
    birthday: str = ""
    birth_city: str = Field("", alias="birthCity")
    birth_state: str = Field("", alias="birthState")
    current_city: str = Field("", alias="currentCity")
    current_state: str = Field("", alias="currentState")
    profile_photo: str = Field("", alias="profilePhoto")
    death_date: str = Field("", alias="deathDate")
    use_first_name: bool = Field(True, alias="useFirstName")
    use_middle_name: bool = Field(False, alias="useMiddleName")
    use_nick_name: bool = Field(False, alias="useNickName")
    show_zodiac: bool = Field(False, alias="showZodiac")
    family_group: str = Field(..., alias="familyGroup")
    social_media: List[SocialMediaLink] = Field(default_factory=list, alias="socialMedia")
    hobbies: List[str] = Field(default_factory=list)
    languages: List[Language] = Field(default_factory=list)
    pets: List[Pet] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class NotificationPreferences(BaseModel):
    disabled_types: List[NotificationType] = Field(default_factory=list, alias="disabledTypes")

    model_config = ConfigDict(populate_by_name=True)


def to_out(m: models.FamilyMember) -> MemberOut:
    return MemberOut(
        id=m.id,
        first_name=m.first_name,
        last_name=m.last_name,
        middle_name=m.middle_name,
        nick_name=m.nick_name,
        display_name=display_name(m),
        email=m.email,
        username=m.username,
        bio=m.bio,
        phone_number=m.phone_number,
        birthday=m.birthday,
        birth_city=m.birth_city,
        birth_state=m.birth_state,
        current_city=m.current_city,
        current_state=m.current_state,
        profile_photo=m.profile_photo,
        death_date=m.death_date,
        use_first_name=m.use_first_name,
        use_middle_name=m.use_middle_name,
        use_nick_name=m.use_nick_name,
        show_zodiac=m.show_zodiac,
        family_group=m.family_group,
        social_media=m.social_media or [],
        hobbies=m.hobbies or [],
        languages=m.languages or [],
        pets=m.pets or [],
    )


def _visible_member(db: Session, member_id: str, viewer: models.User) -> models.FamilyMember:
    """Members of the other family group are reported as missing."""
    try:
        member = member_service.get_member(db, member_id)
    except MemberNotFound:
        raise NotFoundError("MEMBER_NOT_FOUND", "Family member not found")
    if member_id not in member_service.family_member_ids(member_service.list_members(db, viewer.id)):
        raise NotFoundError("MEMBER_NOT_FOUND", "Family member not found")
    return member


@router.post("", response_model=MemberOut, status_code=201)
def create_member(body: MemberCreate, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    member = member_service.create_member(db, created_by=viewer.id, fields=body.fields())
    return to_out(member)


@router.get("", response_model=List[MemberOut])
def list_members(db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    return [to_out(m) for m in member_service.list_members(db, viewer.id)]


@router.get("/hobbies", response_model=List[str])
def list_hobbies(db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    return member_service.list_hobbies(db, viewer.id)


@router.get("/hobbies/{hobby}", response_model=List[MemberOut])
def members_with_hobby(hobby: str, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    return [to_out(m) for m in member_service.list_members_with_hobby(db, hobby, viewer.id)]


@router.get("/me", response_model=MemberOut)
def get_my_profile(db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    try:
        return to_out(member_service.get_member(db, viewer.id))
    except MemberNotFound:
        raise NotFoundError("MEMBER_NOT_FOUND", "No profile yet")


@router.put("/me", response_model=MemberOut)
def save_my_profile(body: MemberIn, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    return to_out(member_service.save_profile(db, viewer.id, body.fields()))


@router.get("/me/notification-preferences", response_model=NotificationPreferences)
def get_my_preferences(db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    return NotificationPreferences(disabled_types=member_service.get_notification_preferences(db, viewer.id))


@router.put("/me/notification-preferences", response_model=NotificationPreferences)
def save_my_preferences(body: NotificationPreferences, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    try:
        saved = member_service.save_notification_preferences(db, viewer.id, body.disabled_types)
    except MemberNotFound:
        raise NotFoundError("MEMBER_NOT_FOUND", "Create a profile before setting preferences")
    return NotificationPreferences(disabled_types=saved)


@router.get("/{member_id}", response_model=MemberOut)
def get_member(member_id: str, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    return to_out(_visible_member(db, member_id, viewer))


@router.patch("/{member_id}", response_model=MemberOut)
def update_member(member_id: str, body: MemberIn, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    _visible_member(db, member_id, viewer)
    return to_out(member_service.update_member(db, member_id, body.fields()))
