import pytest

from familyhub.db import models
from familyhub.domain.enums import RelationshipType as R
from familyhub.services.relationship_service import RelationshipInvalid, RelationshipService


@pytest.fixture
def family(db):
    for id, first in [("gp", "Grace"), ("p", "Paul"), ("p2", "Pia"), ("c1", "Cleo"), ("c2", "Cody")]:
        db.add(models.FamilyMember(id=id, first_name=first, last_name="Lee"))
    db.commit()
    return db.query(models.FamilyMember).all()


@pytest.fixture
def svc():
    return RelationshipService()


def types_between(db, a, b):
    return {
        r.relationship_type
        for r in db.query(models.Relationship).all()
        if (r.person_a_id, r.person_b_id) == (a, b)
    }


def test_add_creates_inverse(db, family, svc):
    svc.add_relationship(db, "p", "c1", R.PARENT, created_by="admin")
    assert types_between(db, "p", "c1") == {"parent"}
    assert types_between(db, "c1", "p") == {"child"}


def test_gendered_pair_has_no_automatic_inverse(db, family, svc):
    svc.add_relationship(db, "p2", "c1", R.AUNT, created_by="admin")
    assert types_between(db, "c1", "p2") == set()


def test_inverse_can_be_disabled(db, family, svc):
    svc.add_relationship(db, "p", "c1", R.PARENT, created_by="admin", auto_create_inverse=False)
    assert types_between(db, "c1", "p") == set()


def test_self_relationship_rejected(db, family, svc):
    result = svc.validate_relationship(db, "p", "p", R.SIBLING)
    assert not result.valid
    assert "themselves" in result.error


def test_duplicate_rejected_in_either_direction(db, family, svc):
    svc.add_relationship(db, "c1", "c2", R.SIBLING, created_by="admin")
    assert not svc.validate_relationship(db, "c1", "c2", R.SIBLING).valid
    assert not svc.validate_relationship(db, "c2", "c1", R.SIBLING).valid
    assert svc.validate_relationship(db, "c1", "c2", R.COUSIN).valid


def test_parent_cycle_rejected(db, family, svc):
    svc.add_relationship(db, "gp", "p", R.PARENT, created_by="admin")
    svc.add_relationship(db, "p", "c1", R.PARENT, created_by="admin")

    result = svc.validate_relationship(db, "c1", "gp", R.PARENT)
    assert not result.valid
    assert "circular" in result.error
    assert not svc.validate_relationship(db, "gp", "c1", R.CHILD).valid

    with pytest.raises(RelationshipInvalid):
        svc.add_relationship(db, "c1", "gp", R.PARENT, created_by="admin")


def test_suggests_siblings_for_shared_parent(db, family, svc):
    svc.add_relationship(db, "p", "c1", R.PARENT, created_by="admin")
    svc.add_relationship(db, "p", "c2", R.PARENT, created_by="admin")

    suggestions = svc.suggest_relationships(db, "c1", "c2")

    assert suggestions[0].relationship_type == R.SIBLING
    assert suggestions[0].confidence == 0.9


def test_suggests_grandparent_and_spouse(db, family, svc):
    svc.add_relationship(db, "gp", "p", R.PARENT, created_by="admin")
    svc.add_relationship(db, "p", "c1", R.PARENT, created_by="admin")
    svc.add_relationship(db, "p2", "c1", R.PARENT, created_by="admin")

    assert [s.relationship_type for s in svc.suggest_relationships(db, "gp", "c1")] == [R.GRANDPARENT]
    assert [s.relationship_type for s in svc.suggest_relationships(db, "c1", "gp")] == [R.GRANDCHILD]
    spouse = svc.suggest_relationships(db, "p", "p2")
    assert [(s.relationship_type, s.confidence) for s in spouse] == [(R.SPOUSE, 0.5)]


def test_family_tree(db, family, svc):
    svc.add_relationship(db, "gp", "p", R.PARENT, created_by="admin")
    svc.add_relationship(db, "p", "p2", R.SPOUSE, created_by="admin")
    svc.add_relationship(db, "p", "c1", R.PARENT, created_by="admin")
    svc.add_relationship(db, "c1", "c2", R.SIBLING, created_by="admin")

    tree = svc.build_family_tree(db, "p", family).to_dict()

    assert tree["firstName"] == "Paul"
    assert [n["id"] for n in tree["parents"]] == ["gp"]
    assert tree["spouse"]["id"] == "p2"
    assert [n["id"] for n in tree["children"]] == ["c1"]
    assert [n["id"] for n in tree["children"][0]["siblings"]] == ["c2"]


def test_family_tree_unknown_root(db, family, svc):
    assert svc.build_family_tree(db, "nobody", family) is None


def test_family_tree_restricted_to_given_members(db, family, svc):
    svc.add_relationship(db, "p", "c1", R.PARENT, created_by="admin")
    only_p = [m for m in family if m.id == "p"]
    tree = svc.build_family_tree(db, "p", only_p).to_dict()
    assert tree["children"] == []


def test_family_tree_keeps_children_who_are_siblings(db, family, svc):
    svc.add_relationship(db, "p", "c1", R.PARENT, created_by="admin")
    svc.add_relationship(db, "p", "c2", R.PARENT, created_by="admin")
    svc.add_relationship(db, "c1", "c2", R.SIBLING, created_by="admin")

    tree = svc.build_family_tree(db, "p", family).to_dict()

    assert sorted(n["id"] for n in tree["children"]) == ["c1", "c2"]
    for child in tree["children"]:
        assert [n["id"] for n in child["parents"]] == []
        assert len(child["siblings"]) == 1


def test_validation_warns_about_existing_ties(db, family, svc):
    svc.add_relationship(db, "gp", "p", R.PARENT, created_by="admin")
    svc.add_relationship(db, "p", "p2", R.SPOUSE, created_by="admin")

    result = svc.validate_relationship(db, "gp", "p", R.STEP_PARENT)
    assert result.valid
    assert result.warnings == ["These members are already related as Parent"]

    result = svc.validate_relationship(db, "p", "c1", R.SPOUSE)
    assert result.valid
    assert result.warnings == ["Member p already has a spouse"]

    assert svc.validate_relationship(db, "c1", "c2", R.SIBLING).warnings == []
