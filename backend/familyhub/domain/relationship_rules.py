"""Static relationship rule table.

Every relationship type has an inverse. The table drives display formatting
and automatic creation of the reverse edge; it does not enforce graph
consistency.
"""
from dataclasses import dataclass

from .enums import RelationshipType as R


@dataclass(frozen=True)
class RelationshipRule:
    inverse: R
    bidirectional: bool
    auto_create_inverse: bool


def _pair(a: R, b: R, symmetric: bool = True) -> dict[R, RelationshipRule]:
    return {
        a: RelationshipRule(inverse=b, bidirectional=symmetric, auto_create_inverse=symmetric),
        b: RelationshipRule(inverse=a, bidirectional=symmetric, auto_create_inverse=symmetric),
    }


RELATIONSHIP_RULES: dict[R, RelationshipRule] = {
    **_pair(R.PARENT, R.CHILD),
    **_pair(R.SIBLING, R.SIBLING),
    **_pair(R.SPOUSE, R.SPOUSE),
    **_pair(R.EX_SPOUSE, R.EX_SPOUSE),
    **_pair(R.PARTNER, R.PARTNER),
    **_pair(R.GRANDPARENT, R.GRANDCHILD),
    **_pair(R.GREAT_GRANDPARENT, R.GREAT_GRANDCHILD),
    # Gendered extended kin: the inverse depends on the other person's gender,
    # so the reverse edge is never created automatically.
    **_pair(R.AUNT, R.NIECE, symmetric=False),
    **_pair(R.UNCLE, R.NEPHEW, symmetric=False),
    **_pair(R.GRAND_AUNT, R.GRAND_NIECE, symmetric=False),
    **_pair(R.GRAND_UNCLE, R.GRAND_NEPHEW, symmetric=False),
    **_pair(R.GREAT_GRAND_AUNT, R.GREAT_GRAND_NIECE, symmetric=False),
    **_pair(R.GREAT_GRAND_UNCLE, R.GREAT_GRAND_NEPHEW, symmetric=False),
    **_pair(R.COUSIN, R.COUSIN),
    **_pair(R.SECOND_COUSIN, R.SECOND_COUSIN),
    **_pair(R.COUSIN_ONCE_REMOVED, R.COUSIN_ONCE_REMOVED),
    **_pair(R.STEP_PARENT, R.STEP_CHILD),
    **_pair(R.STEP_SIBLING, R.STEP_SIBLING),
    **_pair(R.PARENT_IN_LAW, R.CHILD_IN_LAW),
    **_pair(R.SIBLING_IN_LAW, R.SIBLING_IN_LAW),
    **_pair(R.SON_IN_LAW, R.FATHER_IN_LAW, symmetric=False),
    **_pair(R.DAUGHTER_IN_LAW, R.MOTHER_IN_LAW, symmetric=False),
    **_pair(R.BROTHER_IN_LAW, R.SISTER_IN_LAW, symmetric=False),
    **_pair(R.UNCLE_IN_LAW, R.NIECE_IN_LAW, symmetric=False),
    **_pair(R.AUNT_IN_LAW, R.NEPHEW_IN_LAW, symmetric=False),
    **_pair(R.COUSIN_IN_LAW, R.COUSIN_IN_LAW),
    **_pair(R.GUARDIAN, R.WARD),
    **_pair(R.GODPARENT, R.GODCHILD),
}


def get_inverse_relationship_type(relationship_type: R | str) -> R:
    rel = R(relationship_type)
    rule = RELATIONSHIP_RULES.get(rel)
    return rule.inverse if rule else rel


def should_auto_create_inverse(relationship_type: R | str) -> bool:
    rule = RELATIONSHIP_RULES.get(R(relationship_type))
    return bool(rule and rule.auto_create_inverse)


def format_relationship_type(relationship_type: R | str) -> str:
    """``great_grand_aunt`` -> ``Great Grand Aunt``; ``ex_spouse`` -> ``Ex-Spouse``."""
    value = R(relationship_type).value
    if value == R.EX_SPOUSE.value:
        return "Ex-Spouse"
    words = value.split("_")
    if value.endswith("_in_law"):
        head = " ".join(w.capitalize() for w in words[:-2])
        return f"{head}-in-Law"
    return " ".join(w.capitalize() for w in words)


def describe_relationship(person_a_name: str, relationship_type: R | str, person_b_name: str) -> str:
    """Human readable sentence: ``Ann is the Parent of Bob``."""
    return f"{person_a_name} is the {format_relationship_type(relationship_type)} of {person_b_name}"
