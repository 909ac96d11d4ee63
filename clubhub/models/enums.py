from enum import Enum


class UserRole(Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    CLUB_DIRECTOR = "CLUB_DIRECTOR"
    STAFF_TEACHER = "STAFF_TEACHER"
    STUDENT_PARENT = "STUDENT_PARENT"


class MemberRole(Enum):
    PATHFINDER = "PATHFINDER"
    ADVENTURER = "ADVENTURER"
    TLT = "TLT"
    STAFF = "STAFF"
    CHILD = "CHILD"
    DIRECTOR = "DIRECTOR"
    COUNSELOR = "COUNSELOR"


class Gender(Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class RolloverStatus(Enum):
    NEW = "NEW"
    CONTINUING = "CONTINUING"


class FormFieldType(Enum):
    SHORT_TEXT = "SHORT_TEXT"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    MULTI_SELECT = "MULTI_SELECT"
    ROSTER_SELECT = "ROSTER_SELECT"
    ROSTER_MULTI_SELECT = "ROSTER_MULTI_SELECT"
    FIELD_GROUP = "FIELD_GROUP"


class RegistrationStatus(Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class RequirementType(Enum):
    MIN_AGE = "MIN_AGE"
    MAX_AGE = "MAX_AGE"
    MEMBER_ROLE = "MEMBER_ROLE"
    COMPLETED_HONOR = "COMPLETED_HONOR"
    MASTER_GUIDE = "MASTER_GUIDE"
