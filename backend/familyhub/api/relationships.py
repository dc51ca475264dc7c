from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..db import models
from ..domain.enums import RelationshipType
from ..domain.relationship_rules import (
    RELATIONSHIP_RULES,
    format_relationship_type,
    get_inverse_relationship_type,
)
from ..errors import NotFoundError, ValidationAppError
from ..services import member_service
from ..services.relationship_service import RelationshipService, RelationshipInvalid, RelationshipNotFound
from .auth import get_viewer

router = APIRouter(prefix="/relationships", tags=["relationships"])


class RelationshipCreate(BaseModel):
    person_a_id: str = Field(..., alias="personAId")
    person_b_id: str = Field(..., alias="personBId")
    relationship_type: RelationshipType = Field(..., alias="relationshipType")
    relationship_subtype: str = Field("", alias="relationshipSubtype")
    start_date: str = Field("", alias="startDate")
    end_date: str = Field("", alias="endDate")
    notes: str = ""
    auto_create_inverse: bool = Field(True, alias="autoCreateInverse")

    model_config = ConfigDict(populate_by_name=True)


class RelationshipOut(BaseModel):
    id: str
    person_a_id: str = Field(..., alias="personAId")
    person_b_id: str = Field(..., alias="personBId")
    relationship_type: RelationshipType = Field(..., alias="relationshipType")
    label: str
    relationship_subtype: str = Field("", alias="relationshipSubtype")
    start_date: str = Field("", alias="startDate")
    end_date: str = Field("", alias="endDate")
    is_active: bool = Field(True, alias="isActive")
    notes: str = ""
    created_by: str = Field("", alias="createdBy")
    created_at: datetime = Field(..., alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)


class ValidationOut(BaseModel):
    valid: bool
    error: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)


class SuggestionOut(BaseModel):
    relationship_type: RelationshipType = Field(..., alias="relationshipType")
    confidence: float
    reason: str

    model_config = ConfigDict(populate_by_name=True)


class RelationshipTypeOut(BaseModel):
    value: RelationshipType
    label: str
    inverse: RelationshipType
    bidirectional: bool


def to_out(rel: models.Relationship) -> RelationshipOut:
    return RelationshipOut(
        id=rel.id,
        person_a_id=rel.person_a_id,
        person_b_id=rel.person_b_id,
        relationship_type=rel.relationship_type,
        label=format_relationship_type(rel.relationship_type),
        relationship_subtype=rel.relationship_subtype,
        start_date=rel.start_date,
        end_date=rel.end_date,
        is_active=rel.is_active,
        notes=rel.notes,
        created_by=rel.created_by,
        created_at=rel.created_at,
    )


def _family_ids(db: Session, viewer: models.User) -> set:
    return member_service.family_member_ids(member_service.list_members(db, viewer.id))


def _require_members(family_ids: set, *member_ids: str):
    for member_id in member_ids:
        if member_id not in family_ids:
            raise NotFoundError("MEMBER_NOT_FOUND", f"Family member {member_id} not found")


@router.get("/types", response_model=List[RelationshipTypeOut])
def list_relationship_types():
    return [
        RelationshipTypeOut(
            value=rel_type,
            label=format_relationship_type(rel_type),
            inverse=get_inverse_relationship_type(rel_type),
            bidirectional=rule.bidirectional,
        )
        for rel_type, rule in RELATIONSHIP_RULES.items()
    ]


@router.post("", response_model=RelationshipOut, status_code=201)
def create_relationship(body: RelationshipCreate, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    _require_members(_family_ids(db, viewer), body.person_a_id, body.person_b_id)
    try:
        rel = RelationshipService().add_relationship(
            db,
            body.person_a_id,
            body.person_b_id,
            body.relationship_type,
            created_by=viewer.id,
            relationship_subtype=body.relationship_subtype,
            start_date=body.start_date,
            end_date=body.end_date,
            notes=body.notes,
            auto_create_inverse=body.auto_create_inverse,
        )
    except RelationshipInvalid as e:
        raise ValidationAppError("RELATIONSHIP_INVALID", str(e))
    return to_out(rel)


@router.post("/validate", response_model=ValidationOut)
def validate_relationship(body: RelationshipCreate, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    _require_members(_family_ids(db, viewer), body.person_a_id, body.person_b_id)
    result = RelationshipService().validate_relationship(db, body.person_a_id, body.person_b_id, body.relationship_type)
    return ValidationOut(valid=result.valid, error=result.error, warnings=result.warnings)


@router.get("", response_model=List[RelationshipOut])
def list_relationships(
    member_id: Optional[str] = Query(None, alias="memberId"),
    db: Session = Depends(get_db),
    viewer: models.User = Depends(get_viewer),
):
    family_ids = _family_ids(db, viewer)
    service = RelationshipService()
    if member_id:
        rels = service.list_relationships(db, member_id, family_ids)
    else:
        rels = service.list_all_relationships(db, family_ids)
    # an empty family must not fall through to every stored relationship
    rels = [r for r in rels if r.person_a_id in family_ids and r.person_b_id in family_ids]
    return [to_out(r) for r in rels]


@router.get("/suggestions", response_model=List[SuggestionOut])
def suggest_relationships(
    person_a_id: str = Query(..., alias="personAId"),
    person_b_id: str = Query(..., alias="personBId"),
    db: Session = Depends(get_db),
    viewer: models.User = Depends(get_viewer),
):
    _require_members(_family_ids(db, viewer), person_a_id, person_b_id)
    suggestions = RelationshipService().suggest_relationships(db, person_a_id, person_b_id)
    return [
        SuggestionOut(relationship_type=s.relationship_type, confidence=s.confidence, reason=s.reason)
        for s in suggestions
    ]


@router.get("/tree/{root_id}")
def family_tree(root_id: str, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    members = member_service.list_members(db, viewer.id)
    tree = RelationshipService().build_family_tree(db, root_id, members)
    if tree is None:
        raise NotFoundError("MEMBER_NOT_FOUND", "Family member not found")
    return tree.to_dict()


@router.delete("/{relationship_id}", status_code=204)
def delete_relationship(relationship_id: str, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    service = RelationshipService()
    try:
        rel = service.get_relationship(db, relationship_id)
        _require_members(_family_ids(db, viewer), rel.person_a_id, rel.person_b_id)
        service.remove_relationship(db, relationship_id)
    except (RelationshipNotFound, NotFoundError):
        raise NotFoundError("RELATIONSHIP_NOT_FOUND", "Relationship not found")
