"""Domain enumerations for strong typing & validation."""
from enum import Enum

class FamilyGroup(str, Enum):
    DEMO = "demo"
    REAL = "real"

class EventCategory(str, Enum):
    BIRTHDAY = "birthday"
    HOLIDAY = "holiday"
    FAMILY_EVENT = "family-event"
    APPOINTMENT = "appointment"
    MEMORIAL = "memorial"  # generated from a member's death date

class RecurrenceFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

class RSVPStatus(str, Enum):
    YES = "yes"
    NO = "no"
    MAYBE = "maybe"

class NotificationType(str, Enum):
    BIRTHDAY = "birthday"
    HOBBY_COMMENT = "hobby_comment"
    PHOTO_COMMENT = "photo_comment"
    PHOTO_TAG = "photo_tag"
    EVENT_RSVP = "event_rsvp"
    EVENT_REMINDER = "event_reminder"
    EVENT_CANCELLED = "event_cancelled"

class RelationshipType(str, Enum):
    # direct
    PARENT = "parent"
    CHILD = "child"
    SIBLING = "sibling"
    SPOUSE = "spouse"
    EX_SPOUSE = "ex_spouse"
    PARTNER = "partner"
    GRANDPARENT = "grandparent"
    GRANDCHILD = "grandchild"
    GREAT_GRANDPARENT = "great_grandparent"
    GREAT_GRANDCHILD = "great_grandchild"
    # extended
    AUNT = "aunt"
    UNCLE = "uncle"
    NIECE = "niece"
    NEPHEW = "nephew"
    GRAND_AUNT = "grand_aunt"
    GRAND_UNCLE = "grand_uncle"
    GRAND_NIECE = "grand_niece"
    GRAND_NEPHEW = "grand_nephew"
    GREAT_GRAND_AUNT = "great_grand_aunt"
    GREAT_GRAND_UNCLE = "great_grand_uncle"
    GREAT_GRAND_NIECE = "great_grand_niece"
    GREAT_GRAND_NEPHEW = "great_grand_nephew"
    COUSIN = "cousin"
    SECOND_COUSIN = "second_cousin"
    COUSIN_ONCE_REMOVED = "cousin_once_removed"
    # step
    STEP_PARENT = "step_parent"
    STEP_CHILD = "step_child"
    STEP_SIBLING = "step_sibling"
    # in-law
    PARENT_IN_LAW = "parent_in_law"
    CHILD_IN_LAW = "child_in_law"
    SIBLING_IN_LAW = "sibling_in_law"
    SON_IN_LAW = "son_in_law"
    DAUGHTER_IN_LAW = "daughter_in_law"
    FATHER_IN_LAW = "father_in_law"
    MOTHER_IN_LAW = "mother_in_law"
    BROTHER_IN_LAW = "brother_in_law"
    SISTER_IN_LAW = "sister_in_law"
    UNCLE_IN_LAW = "uncle_in_law"
    AUNT_IN_LAW = "aunt_in_law"
    NIECE_IN_LAW = "niece_in_law"
    NEPHEW_IN_LAW = "nephew_in_law"
    COUSIN_IN_LAW = "cousin_in_law"
    # honorary
    GUARDIAN = "guardian"
    WARD = "ward"
    GODPARENT = "godparent"
    GODCHILD = "godchild"
