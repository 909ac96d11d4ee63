from clubhub.models.user import User
from clubhub.models.club import Club, ClubMembership
from clubhub.models.roster import ClubRosterYear, RosterMember, MemberRequirement
from clubhub.models.event import Event
from clubhub.models.event_form_field import EventFormField
from clubhub.models.event_registration import (
    EventRegistration,
    RegistrationAttendee,
    EventFormResponse,
)
from clubhub.models.class_catalog import ClassCatalog, ClassRequirement
from clubhub.models.class_offering import EventClassOffering, ClassEnrollment
from clubhub.models.enums import (
    FormFieldType,
    Gender,
    MemberRole,
    RegistrationStatus,
    RequirementType,
    RolloverStatus,
    UserRole,
)
