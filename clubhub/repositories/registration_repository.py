from typing import Dict, List, Optional
from clubhub.extensions import db
from clubhub.models import (
    EventFormResponse,
    EventRegistration,
    RegistrationAttendee,
)
from clubhub.models.enums import RegistrationStatus


class RegistrationRepository:
    @staticmethod
    def find_by_event_and_club(event_id: int, club_id: int, lock: bool = False) -> Optional[EventRegistration]:
        query = EventRegistration.query.filter_by(event_id=event_id, club_id=club_id)
        if lock:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def find_by_id(registration_id: int) -> Optional[EventRegistration]:
        return EventRegistration.query.filter_by(id=registration_id).first()

    @staticmethod
    def get_for_event(event_id: int, statuses: List[RegistrationStatus] = None) -> List[EventRegistration]:
        query = EventRegistration.query.filter(EventRegistration.event_id == event_id)
        if statuses:
            query = query.filter(EventRegistration.status.in_(statuses))
        return query.order_by(EventRegistration.status.asc(), EventRegistration.created_at.asc(), EventRegistration.id.asc()).all()

    @staticmethod
    def create(attrs) -> EventRegistration:
        registration = EventRegistration(**attrs)
        db.session.add(registration)
        db.session.flush()
        return registration

    @staticmethod
    def replace_attendees(registration: EventRegistration, roster_member_ids: List[int]):
        """Delete-then-insert the attendee rows, keeping check-in stamps of retained members."""
        previous_check_ins: Dict[int, object] = {
            attendee.roster_member_id: attendee.checked_in_at
            for attendee in registration.attendees
        }
        db.session.expire(registration, ["attendees"])
        RegistrationAttendee.query.filter_by(
            event_registration_id=registration.id
        ).delete()
        db.session.flush()

        for roster_member_id in roster_member_ids:
            db.session.add(
                RegistrationAttendee(
                    event_registration_id=registration.id,
                    roster_member_id=roster_member_id,
                    checked_in_at=previous_check_ins.get(roster_member_id),
                )
            )
        db.session.flush()
        db.session.expire(registration, ["attendees"])

    @staticmethod
    def replace_responses(registration: EventRegistration, responses):
        db.session.expire(registration, ["form_responses"])
        EventFormResponse.query.filter_by(
            event_registration_id=registration.id
        ).delete()
        db.session.flush()

        for response in responses:
            db.session.add(
                EventFormResponse(
                    event_registration_id=registration.id,
                    event_form_field_id=response.field_id,
                    attendee_id=response.attendee_id,
                    value=response.value,
                )
            )
        db.session.flush()
        db.session.expire(registration, ["form_responses"])

    @staticmethod
    def find_attendee_for_club(event_id: int, club_id: int, roster_member_id: int) -> Optional[RegistrationAttendee]:
        return (
            db.session.query(RegistrationAttendee)
            .join(EventRegistration, RegistrationAttendee.event_registration_id == EventRegistration.id)
            .filter(
                EventRegistration.event_id == event_id,
                EventRegistration.club_id == club_id,
                RegistrationAttendee.roster_member_id == roster_member_id,
            )
            .first()
        )

    @staticmethod
    def mark_attendees_checked_in(registration_id: int, checked_in_at) -> int:
        """Stamps every attendee of the registration that has not checked in yet."""
        return (
            RegistrationAttendee.query.filter(
                RegistrationAttendee.event_registration_id == registration_id,
                RegistrationAttendee.checked_in_at.is_(None),
            )
            .update({"checked_in_at": checked_in_at}, synchronize_session="fetch")
        )
