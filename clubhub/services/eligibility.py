"""Class/honor prerequisite evaluation.

Everything in this module is pure: it reads an attendee snapshot and a list of
requirement rows and never touches the database, so the same evaluation backs
both the enrollment transaction and the advisory class board.
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from clubhub.models.enums import MemberRole, RequirementType

UNKNOWN_REQUIREMENT_LABEL = "Requirement applies"


@dataclass
class AttendeeEligibility:
    age_at_start: Optional[int]
    member_role: Optional[MemberRole]
    master_guide: bool
    completed_honor_codes: Set[str] = field(default_factory=set)

    @classmethod
    def from_roster_member(cls, member):
        return cls(
            age_at_start=member.age_at_start,
            member_role=member.member_role,
            master_guide=bool(member.master_guide),
            completed_honor_codes=set(member.completed_honor_codes),
        )


@dataclass
class RequirementEvaluation:
    eligible: bool
    blockers: List[str]

    def to_dict(self):
        return {"eligible": self.eligible, "blockers": list(self.blockers)}


def normalize_honor_code(code: str) -> str:
    return code.strip().upper()


def _requirement_type(requirement):
    raw = requirement.requirement_type
    if isinstance(raw, RequirementType):
        return raw
    try:
        return RequirementType(raw)
    except ValueError:
        return None


def _role_value(role):
    if isinstance(role, MemberRole):
        return role.value
    return role


def requirement_to_badge_label(requirement) -> str:
    """Human-readable label for a requirement, used both as badge text and as blocker."""
    requirement_type = _requirement_type(requirement)

    if requirement_type == RequirementType.MIN_AGE:
        if requirement.min_age is not None:
            return f"Requires Age {requirement.min_age}+"
        return "Minimum age required"
    if requirement_type == RequirementType.MAX_AGE:
        if requirement.max_age is not None:
            return f"Max Age {requirement.max_age}"
        return "Maximum age restriction"
    if requirement_type == RequirementType.MEMBER_ROLE:
        if requirement.required_member_role is not None:
            role = _role_value(requirement.required_member_role).replace("_", " ")
            return f"Requires {role} Role"
        return "Specific member role required"
    if requirement_type == RequirementType.COMPLETED_HONOR:
        if requirement.required_honor_code:
            return f"Requires Honor {requirement.required_honor_code}"
        return "Completed honor required"
    if requirement_type == RequirementType.MASTER_GUIDE:
        if requirement.required_master_guide:
            return "Requires Master Guide"
        return "Master Guide restriction"
    return UNKNOWN_REQUIREMENT_LABEL


def _requirement_passes(requirement_type, requirement, attendee, completed_codes) -> bool:
    age = attendee.age_at_start

    if requirement_type == RequirementType.MIN_AGE:
        if requirement.min_age is None:
            return True
        # Unknown age cannot prove a minimum
        return age is not None and age >= requirement.min_age
    if requirement_type == RequirementType.MAX_AGE:
        if requirement.max_age is None or age is None:
            return True
        return age <= requirement.max_age
    if requirement_type == RequirementType.MEMBER_ROLE:
        if requirement.required_member_role is None:
            return True
        return _role_value(attendee.member_role) == _role_value(requirement.required_member_role)
    if requirement_type == RequirementType.COMPLETED_HONOR:
        if requirement.required_honor_code is None:
            return True
        return normalize_honor_code(requirement.required_honor_code) in completed_codes
    if requirement_type == RequirementType.MASTER_GUIDE:
        if requirement.required_master_guide is not True:
            return True
        return attendee.master_guide is True
    return False


def evaluate_class_requirements(
    attendee: AttendeeEligibility, requirements: Iterable
) -> RequirementEvaluation:
    """
    Evaluate every requirement against the attendee (AND semantics).

    All failing requirements are collected so the caller can show every
    blocking reason at once. Unrecognized requirement types fail closed.
    """
    completed_codes = {
        normalize_honor_code(code) for code in attendee.completed_honor_codes if code
    }
    blockers = []

    for requirement in requirements:
        requirement_type = _requirement_type(requirement)
        if requirement_type is None:
            blockers.append(UNKNOWN_REQUIREMENT_LABEL)
            continue
        if not _requirement_passes(requirement_type, requirement, attendee, completed_codes):
            blockers.append(requirement_to_badge_label(requirement))

    return RequirementEvaluation(eligible=len(blockers) == 0, blockers=blockers)
