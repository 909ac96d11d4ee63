from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional
from flask import current_app
from clubhub.extensions import db
from clubhub.repositories import EventRepository, RegistrationRepository
from clubhub.services.user_service import UserService
from clubhub.services.field_schema import is_attendee_specific_field
from clubhub.exceptions import NotFoundError
from clubhub.models.enums import RegistrationStatus


@dataclass
class RegistrationAudit:
    missing_required_fields: List[str] = field(default_factory=list)
    checked_in_count: int = 0

    @property
    def has_missing_required_fields(self):
        return len(self.missing_required_fields) > 0


def audit_registration(registration, required_fields, attendee_scoped_flags: Optional[Dict] = None) -> RegistrationAudit:
    """
    Report which required fields a registration has not answered yet.

    A registration-scoped field is missing when there is no response without
    an attendee. An attendee-scoped field is reported with the number of
    selected attendees lacking an answer. Nothing is written.
    """
    if attendee_scoped_flags is None:
        attendee_scoped_flags = {f.id: is_attendee_specific_field(f) for f in required_fields}

    global_answers = set()
    attendee_answers = {}
    for response in registration.form_responses:
        if response.attendee_id is None:
            global_answers.add(response.event_form_field_id)
        else:
            attendee_answers.setdefault(response.event_form_field_id, set()).add(response.attendee_id)

    attendee_ids = [attendee.roster_member_id for attendee in registration.attendees]
    missing = []

    for required in required_fields:
        if not attendee_scoped_flags.get(required.id, False):
            if required.id not in global_answers:
                missing.append(required.label)
            continue

        answered = attendee_answers.get(required.id, set())
        missing_count = sum(1 for attendee_id in attendee_ids if attendee_id not in answered)
        if missing_count > 0:
            noun = "attendees" if missing_count > 1 else "attendee"
            missing.append(f"{required.label} ({missing_count} {noun})")

    checked_in_count = sum(1 for attendee in registration.attendees if attendee.checked_in_at is not None)
    return RegistrationAudit(missing_required_fields=missing, checked_in_count=checked_in_count)


class CheckinService:
    @staticmethod
    def get_event_checkin_dashboard(user_id, event_id):
        UserService.require_super_admin(user_id)

        event = EventRepository.get_event(event_id)
        if not event:
            raise NotFoundError("Event not found.")

        required_fields = EventRepository.get_required_fields(event.id)
        scoped = {f.id: is_attendee_specific_field(f) for f in required_fields}

        rows = []
        for registration in RegistrationRepository.get_for_event(event.id):
            audit = audit_registration(registration, required_fields, scoped)
            rows.append(
                {
                    "id": registration.id,
                    "registration_code": registration.registration_code,
                    "status": registration.status.value,
                    "submitted_at": registration.submitted_at.isoformat() if registration.submitted_at else None,
                    "approved_at": registration.approved_at.isoformat() if registration.approved_at else None,
                    "club": registration.club.to_dict(),
                    "attendees": [
                        {
                            "roster_member_id": attendee.roster_member_id,
                            "name": attendee.roster_member.full_name,
                            "checked_in_at": attendee.checked_in_at.isoformat() if attendee.checked_in_at else None,
                        }
                        for attendee in registration.attendees
                    ],
                    "checked_in_count": audit.checked_in_count,
                    "missing_required_fields": audit.missing_required_fields,
                    "has_missing_required_fields": audit.has_missing_required_fields,
                }
            )

        return {"event": event.to_dict(), "registrations": rows}

    @staticmethod
    def mark_registration_checked_in(user_id, event_id, registration_id, now=None):
        """Checks in every attendee not yet checked in and approves the registration."""
        UserService.require_super_admin(user_id)
        now = now or datetime.now(timezone.utc)

        try:
            registration = RegistrationRepository.find_by_id(registration_id)
            if not registration or registration.event_id != int(event_id):
                raise NotFoundError("Registration not found for this event.")

            stamped = RegistrationRepository.mark_attendees_checked_in(registration.id, now)
            registration.status = RegistrationStatus.APPROVED
            registration.approved_at = now
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(
            f"Registration {registration.registration_code} checked in ({stamped} attendees stamped)"
        )
        return registration
