from datetime import datetime, timezone
import random
import string
from flask import current_app
from sqlalchemy.exc import IntegrityError
from clubhub.extensions import db
from clubhub.repositories import (
    EventRepository,
    RegistrationRepository,
    RosterRepository,
    UserRepository,
)
from clubhub.services.user_service import UserService
from clubhub.services.response_assembler import assemble
from clubhub.exceptions import BusinessRuleError, NotFoundError, RegistrationLocked
from clubhub.models.enums import RegistrationStatus
from clubhub.utils.email import send_registration_receipt_email

BASE36_ALPHABET = string.digits + string.ascii_uppercase


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_registration_code(now=None) -> str:
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    suffix = "".join(random.choices(BASE36_ALPHABET, k=6))
    return f"REG-{to_base36(millis)}-{suffix}"


def resolve_roster_year(club_id, now=None):
    """The roster year whose window contains ``now``, else the latest active one."""
    now = now or datetime.now(timezone.utc)
    return RosterRepository.find_current_year(club_id, now) or RosterRepository.find_latest_active_year(club_id)


class RegistrationService:
    @staticmethod
    def get_registration_form(user_id, event_id, now=None):
        """Everything a director needs to fill in the form: fields, eligible roster, saved draft."""
        club_id = UserService.get_director_club_id(user_id, "Only club directors can register for events.")
        event = EventRepository.get_event(event_id)
        if not event:
            raise NotFoundError("Event not found.")

        roster_year = resolve_roster_year(club_id, now)
        members = RosterRepository.get_active_members(roster_year.id) if roster_year else []
        registration = RegistrationRepository.find_by_event_and_club(event.id, club_id)

        return {
            "event": event.to_dict(include_fields=True),
            "roster_year": roster_year.to_dict() if roster_year else None,
            "roster": [member.to_dict() for member in members],
            "registration": registration.to_dict() if registration else None,
        }

    @staticmethod
    def save_draft(user_id, event_id, raw_payload, now=None):
        return RegistrationService._save(user_id, event_id, raw_payload, submit=False, now=now)

    @staticmethod
    def submit(user_id, event_id, raw_payload, now=None):
        return RegistrationService._save(user_id, event_id, raw_payload, submit=True, now=now)

    @staticmethod
    def _save(user_id, event_id, raw_payload, submit, now=None):
        now = now or datetime.now(timezone.utc)
        club_id = UserService.get_director_club_id(user_id, "Only club directors can register for events.")

        event = EventRepository.get_event(event_id)
        if not event:
            raise NotFoundError("Event not found.")

        roster_year = resolve_roster_year(club_id, now)
        valid_attendee_ids = (
            [member.id for member in RosterRepository.get_active_members(roster_year.id)]
            if roster_year
            else []
        )
        fields = event.dynamic_fields
        assembled = assemble(
            raw_payload,
            valid_attendee_ids=valid_attendee_ids,
            valid_field_ids=[field.id for field in fields],
            field_types={field.id: field.type for field in fields},
        )

        try:
            registration = RegistrationRepository.find_by_event_and_club(event.id, club_id, lock=True)
            if registration and registration.status == RegistrationStatus.APPROVED:
                raise RegistrationLocked()

            if registration is None:
                registration = RegistrationRepository.create(
                    {
                        "event_id": event.id,
                        "club_id": club_id,
                        "registration_code": generate_registration_code(now),
                        "status": RegistrationStatus.DRAFT,
                    }
                )

            registration.status = RegistrationStatus.SUBMITTED if submit else RegistrationStatus.DRAFT
            registration.submitted_at = now if submit else None

            RegistrationRepository.replace_attendees(registration, assembled.attendee_ids)
            RegistrationRepository.replace_responses(registration, assembled.responses)
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            current_app.logger.warning(
                f"Concurrent registration write for event {event.id}, club {club_id}: {str(e)}"
            )
            raise BusinessRuleError("This registration was changed by another request. Please try again.")
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(
            f"Registration {registration.registration_code} saved as {registration.status.value} "
            f"with {len(assembled.attendee_ids)} attendees and {len(assembled.responses)} responses"
        )

        if submit:
            RegistrationService._send_receipt(user_id, registration, event, len(assembled.attendee_ids))

        return registration

    @staticmethod
    def _send_receipt(user_id, registration, event, attendee_count):
        # Runs after commit; the saved registration stands even if this fails
        try:
            user = UserRepository.find_by_id(user_id)
            if not user or not user.email:
                return
            send_registration_receipt_email(
                user.email,
                registration.club.name,
                event.name,
                attendee_count,
            )
        except Exception as e:
            current_app.logger.error(
                f"Failed to send receipt for registration {registration.registration_code}: {str(e)}"
            )
