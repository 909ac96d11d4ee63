from enum import Enum
from flask import current_app
from sqlalchemy.exc import IntegrityError
from clubhub.extensions import db
from clubhub.repositories import (
    ClassRepository,
    EventRepository,
    RegistrationRepository,
)
from clubhub.services.user_service import UserService
from clubhub.services.eligibility import (
    AttendeeEligibility,
    evaluate_class_requirements,
    requirement_to_badge_label,
)
from clubhub.exceptions import (
    AttendeeNotRegistered,
    ClassFull,
    MissingFieldsError,
    NotFoundError,
    OfferingNotFound,
    PrerequisitesNotMet,
)


class EnrollmentOutcome(Enum):
    ENROLLED = "ENROLLED"
    ALREADY_ENROLLED = "ALREADY_ENROLLED"


class EnrollmentService:
    @staticmethod
    def enroll_attendee(user_id, event_id, roster_member_id, offering_id) -> EnrollmentOutcome:
        """
        Enroll one registered attendee into one class offering.

        Checks run in a fixed order: registration under the director's club,
        offering belongs to the event, prerequisites, existing enrollment,
        capacity. The offering row stays locked from its lookup until commit
        so two enrollers cannot both take the last seat. Re-enrolling an
        enrolled attendee is a no-op success.
        """
        club_id = UserService.get_director_club_id(user_id, "Only club directors can enroll attendees.")

        if not event_id or not roster_member_id or not offering_id:
            raise MissingFieldsError(
                [
                    name
                    for name, value in (
                        ("event_id", event_id),
                        ("roster_member_id", roster_member_id),
                        ("offering_id", offering_id),
                    )
                    if not value
                ]
            )

        try:
            attendee = RegistrationRepository.find_attendee_for_club(event_id, club_id, roster_member_id)
            if not attendee:
                raise AttendeeNotRegistered()

            offering = ClassRepository.get_offering_for_event(offering_id, event_id, lock=True)
            if not offering:
                raise OfferingNotFound()

            evaluation = evaluate_class_requirements(
                AttendeeEligibility.from_roster_member(attendee.roster_member),
                offering.class_catalog.requirements,
            )
            if not evaluation.eligible:
                raise PrerequisitesNotMet(evaluation.blockers)

            if ClassRepository.find_enrollment(offering.id, roster_member_id):
                db.session.rollback()
                current_app.logger.info(
                    f"Roster member {roster_member_id} already enrolled in offering {offering.id}"
                )
                return EnrollmentOutcome.ALREADY_ENROLLED

            if ClassRepository.count_enrollments(offering.id) >= offering.capacity:
                raise ClassFull()

            ClassRepository.create_enrollment(offering.id, roster_member_id)
            db.session.commit()
        except IntegrityError:
            # Lost a race on the (offering, member) unique constraint
            db.session.rollback()
            if ClassRepository.find_enrollment(offering_id, roster_member_id):
                return EnrollmentOutcome.ALREADY_ENROLLED
            raise
        except (AttendeeNotRegistered, OfferingNotFound, PrerequisitesNotMet, ClassFull) as e:
            db.session.rollback()
            current_app.logger.warning(
                f"Enrollment of roster member {roster_member_id} into offering {offering_id} rejected: {e.message}"
            )
            raise
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(
            f"Roster member {roster_member_id} enrolled in offering {offering_id} for event {event_id}"
        )
        return EnrollmentOutcome.ENROLLED

    @staticmethod
    def get_class_board(user_id, event_id):
        """
        Advisory view for a director: every offering with seats remaining and
        requirement badges, and for each of the club's registered attendees
        their eligibility per offering and current enrollments.
        """
        club_id = UserService.get_director_club_id(user_id, "Only club directors can enroll attendees.")

        event = EventRepository.get_event(event_id)
        if not event:
            raise NotFoundError("Event not found.")

        offerings = ClassRepository.get_offerings_for_event(event.id)
        counts = ClassRepository.count_enrollments_by_offering(event.id)

        registration = RegistrationRepository.find_by_event_and_club(event.id, club_id)
        attendees = registration.attendees if registration else []
        member_ids = [attendee.roster_member_id for attendee in attendees]

        enrolled_by_member = {}
        for enrollment in ClassRepository.get_enrollments_for_members(event.id, member_ids):
            enrolled_by_member.setdefault(enrollment.roster_member_id, []).append(
                enrollment.event_class_offering_id
            )

        offering_rows = []
        for offering in offerings:
            enrolled = counts.get(offering.id, 0)
            row = offering.to_dict()
            row["enrolled_count"] = enrolled
            row["seats_remaining"] = max(offering.capacity - enrolled, 0)
            row["requirement_badges"] = [
                requirement_to_badge_label(requirement)
                for requirement in offering.class_catalog.requirements
            ]
            offering_rows.append(row)

        attendee_rows = []
        for attendee in attendees:
            member = attendee.roster_member
            snapshot = AttendeeEligibility.from_roster_member(member)
            attendee_rows.append(
                {
                    "roster_member_id": member.id,
                    "name": member.full_name,
                    "age_at_start": member.age_at_start,
                    "member_role": member.member_role.value if member.member_role else None,
                    "enrolled_offering_ids": enrolled_by_member.get(member.id, []),
                    "eligibility": {
                        offering.id: evaluate_class_requirements(
                            snapshot, offering.class_catalog.requirements
                        ).to_dict()
                        for offering in offerings
                    },
                }
            )

        return {
            "event": event.to_dict(),
            "registration_status": registration.status.value if registration else None,
            "offerings": offering_rows,
            "attendees": attendee_rows,
        }
