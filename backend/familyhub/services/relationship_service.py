"""Family relationships and family tree assembly.

A stored relationship ``(person_a, person_b, type)`` reads "person_a is the
<type> of person_b".
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..db import models
from ..domain.enums import RelationshipType
from ..domain.relationship_rules import describe_relationship, format_relationship_type, get_inverse_relationship_type, should_auto_create_inverse

logger = logging.getLogger(__name__)

MAX_ANCESTOR_DEPTH = 10
MAX_TREE_DEPTH = 5


class RelationshipNotFound(Exception):
    pass


class RelationshipInvalid(Exception):
    pass


@dataclass
class ValidationResult:
    valid: bool
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)


@dataclass
class RelationshipSuggestion:
    relationship_type: RelationshipType
    confidence: float
    reason: str


@dataclass
class FamilyTreeNode:
    id: str
    first_name: str
    last_name: str
    profile_photo: Optional[str] = None
    spouse: Optional["FamilyTreeNode"] = None
    children: List["FamilyTreeNode"] = field(default_factory=list)
    parents: List["FamilyTreeNode"] = field(default_factory=list)
    siblings: List["FamilyTreeNode"] = field(default_factory=list)
    relationships: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "profilePhoto": self.profile_photo or None,
            "spouse": self.spouse.to_dict() if self.spouse else None,
            "children": [c.to_dict() for c in self.children],
            "parents": [p.to_dict() for p in self.parents],
            "siblings": [s.to_dict() for s in self.siblings],
            "relationships": [
                {"personId": r["person_id"], "relationshipType": r["relationship_type"].value}
                for r in self.relationships
            ],
        }


def build_role_graph(relationships: List[models.Relationship]) -> Dict[str, Dict[str, RelationshipType]]:
    """person -> {other: what `other` is to `person`}."""
    roles: Dict[str, Dict[str, RelationshipType]] = {}
    for rel in relationships:
        rel_type = RelationshipType(rel.relationship_type)
        roles.setdefault(rel.person_b_id, {})[rel.person_a_id] = rel_type
        roles.setdefault(rel.person_a_id, {})[rel.person_b_id] = get_inverse_relationship_type(rel_type)
    return roles


class RelationshipService:
    def _scoped(self, relationships: List[models.Relationship], family_member_ids: Optional[Set[str]]):
        if not family_member_ids:
            return relationships
        return [
            r for r in relationships
            if r.person_a_id in family_member_ids and r.person_b_id in family_member_ids
        ]

    def list_relationships(self, db: Session, member_id: str, family_member_ids: Optional[Set[str]] = None) -> List[models.Relationship]:
        rels = (
            db.query(models.Relationship)
            .filter(or_(models.Relationship.person_a_id == member_id, models.Relationship.person_b_id == member_id))
            .all()
        )
        return self._scoped(rels, family_member_ids)

    def list_all_relationships(self, db: Session, family_member_ids: Optional[Set[str]] = None) -> List[models.Relationship]:
        return self._scoped(db.query(models.Relationship).all(), family_member_ids)

    def get_relationship(self, db: Session, relationship_id: str) -> models.Relationship:
        rel = db.query(models.Relationship).filter(models.Relationship.id == relationship_id).first()
        if not rel:
            raise RelationshipNotFound()
        return rel

    def _is_ancestor(self, db: Session, ancestor_id: str, descendant_id: str) -> bool:
        """Walk parent links upwards from ``descendant_id``."""
        visited: Set[str] = set()
        frontier = [(descendant_id, 0)]
        while frontier:
            person_id, depth = frontier.pop()
            if person_id in visited or depth > MAX_ANCESTOR_DEPTH:
                continue
            visited.add(person_id)
            for other_id, role in build_role_graph(self.list_relationships(db, person_id)).get(person_id, {}).items():
                if role != RelationshipType.PARENT:
                    continue
                if other_id == ancestor_id:
                    return True
                frontier.append((other_id, depth + 1))
        return False

    def validate_relationship(self, db: Session, person_a_id: str, person_b_id: str, relationship_type: RelationshipType) -> ValidationResult:
        relationship_type = RelationshipType(relationship_type)
        if person_a_id == person_b_id:
            return ValidationResult(False, "A person cannot have a relationship with themselves")

        warnings: List[str] = []
        for rel in self.list_relationships(db, person_a_id):
            same_pair = {rel.person_a_id, rel.person_b_id} == {person_a_id, person_b_id}
            if not same_pair:
                continue
            if rel.relationship_type == relationship_type.value:
                return ValidationResult(
                    False, f"Relationship already exists between these members: {rel.relationship_type}"
                )
            if rel.person_a_id == person_a_id:
                warnings.append(
                    f"These members are already related as {format_relationship_type(rel.relationship_type)}"
                )

        if relationship_type == RelationshipType.PARENT and self._is_ancestor(db, person_b_id, person_a_id):
            return ValidationResult(False, "This would create a circular parent-child relationship")
        if relationship_type == RelationshipType.CHILD and self._is_ancestor(db, person_a_id, person_b_id):
            return ValidationResult(False, "This would create a circular parent-child relationship")

        if relationship_type == RelationshipType.SPOUSE:
            for person_id in (person_a_id, person_b_id):
                if self._has_other_spouse(db, person_id, {person_a_id, person_b_id}):
                    warnings.append(f"Member {person_id} already has a spouse")

        return ValidationResult(True, warnings=warnings)

    def _has_other_spouse(self, db: Session, person_id: str, pair: Set[str]) -> bool:
        return any(
            rel.relationship_type == RelationshipType.SPOUSE.value
            and rel.is_active
            and {rel.person_a_id, rel.person_b_id} - pair
            for rel in self.list_relationships(db, person_id)
        )

    def add_relationship(
        self,
        db: Session,
        person_a_id: str,
        person_b_id: str,
        relationship_type: RelationshipType,
        created_by: str,
        relationship_subtype: str = "",
        start_date: str = "",
        end_date: str = "",
        notes: str = "",
        auto_create_inverse: bool = True,
    ) -> models.Relationship:
        relationship_type = RelationshipType(relationship_type)
        validation = self.validate_relationship(db, person_a_id, person_b_id, relationship_type)
        if not validation.valid:
            raise RelationshipInvalid(validation.error)

        common = dict(
            relationship_subtype=relationship_subtype or "",
            start_date=start_date or "",
            end_date=end_date or "",
            notes=notes or "",
            is_active=True,
            created_by=created_by,
        )
        rel = models.Relationship(
            person_a_id=person_a_id, person_b_id=person_b_id, relationship_type=relationship_type.value, **common
        )
        db.add(rel)

        if auto_create_inverse and should_auto_create_inverse(relationship_type):
            inverse = get_inverse_relationship_type(relationship_type)
            db.add(models.Relationship(
                person_a_id=person_b_id, person_b_id=person_a_id, relationship_type=inverse.value, **common
            ))
        db.commit()
        db.refresh(rel)
        logger.info("Relationship %s: %s", rel.id, describe_relationship(person_a_id, relationship_type, person_b_id))
        return rel

    def remove_relationship(self, db: Session, relationship_id: str):
        rel = self.get_relationship(db, relationship_id)
        db.delete(rel)
        db.commit()

    def build_family_tree(self, db: Session, root_id: str, members: List[models.FamilyMember]) -> Optional[FamilyTreeNode]:
        by_id = {m.id: m for m in members}
        if root_id not in by_id:
            return None
        roles = build_role_graph(self.list_all_relationships(db, set(by_id)))

        def build(person_id: str, depth: int, visited: Set[str]) -> Optional[FamilyTreeNode]:
            if depth > MAX_TREE_DEPTH or person_id in visited or person_id not in by_id:
                return None
            visited.add(person_id)
            member = by_id[person_id]
            node = FamilyTreeNode(
                id=member.id,
                first_name=member.first_name,
                last_name=member.last_name,
                profile_photo=member.profile_photo,
            )
            for other_id, role in roles.get(person_id, {}).items():
                child = build(other_id, depth + 1, set(visited))  # visited is per branch
                if child is None:
                    continue
                node.relationships.append({"person_id": other_id, "relationship_type": role})
                if role == RelationshipType.SPOUSE:
                    node.spouse = child
                elif role == RelationshipType.CHILD:
                    node.children.append(child)
                elif role == RelationshipType.PARENT:
                    node.parents.append(child)
                elif role == RelationshipType.SIBLING:
                    node.siblings.append(child)
            return node

        return build(root_id, 0, set())

    def suggest_relationships(self, db: Session, person_a_id: str, person_b_id: str) -> List[RelationshipSuggestion]:
        """What could ``person_a`` be to ``person_b``, judged from shared connections."""
        roles_a = build_role_graph(self.list_relationships(db, person_a_id))
        roles_b = build_role_graph(self.list_relationships(db, person_b_id))
        # what A / B is to each connected person
        a_to = {other: roles_a.get(other, {}).get(person_a_id) for other in roles_a.get(person_a_id, {})}
        b_to = {other: roles_b.get(other, {}).get(person_b_id) for other in roles_b.get(person_b_id, {})}

        best: Dict[RelationshipType, RelationshipSuggestion] = {}

        def offer(rel_type: RelationshipType, confidence: float, reason: str):
            current = best.get(rel_type)
            if current is None or current.confidence < confidence:
                best[rel_type] = RelationshipSuggestion(rel_type, confidence, reason)

        for common_id in set(a_to) & set(b_to):
            if common_id in (person_a_id, person_b_id):
                continue
            a_role, b_role = a_to[common_id], b_to[common_id]
            if a_role == RelationshipType.CHILD and b_role == RelationshipType.CHILD:
                offer(RelationshipType.SIBLING, 0.9, f"Both are children of the same parent ({common_id})")
            elif a_role == RelationshipType.PARENT and b_role == RelationshipType.CHILD:
                offer(RelationshipType.GRANDPARENT, 0.8, "One is parent and other is child of the same person")
            elif a_role == RelationshipType.CHILD and b_role == RelationshipType.PARENT:
                offer(RelationshipType.GRANDCHILD, 0.8, "One is child and other is parent of the same person")
            elif a_role == RelationshipType.PARENT and b_role == RelationshipType.PARENT:
                offer(RelationshipType.SPOUSE, 0.5, f"Both are parents of the same child ({common_id})")

        return sorted(best.values(), key=lambda s: s.confidence, reverse=True)
