import pytest

from clubhub.exceptions import (
    AttendeeNotRegistered,
    ClassFull,
    OfferingNotFound,
    PrerequisitesNotMet,
    UnauthorizedError,
)
from clubhub.models import ClassEnrollment
from clubhub.models.enums import RequirementType, UserRole
from clubhub.services.enrollment_service import EnrollmentOutcome, EnrollmentService

MIN_AGE_10 = {"requirement_type": RequirementType.MIN_AGE, "min_age": 10}


@pytest.fixture
def setup(factory, admin, club, director, roster_year):
    young = factory.member(roster_year, first_name="Ava", age=8)
    older = factory.member(roster_year, first_name="Ben", age=12)
    other = factory.member(roster_year, first_name="Cal", age=12)
    event = factory.event(admin)
    factory.registration(event, club, members=[young, older, other])
    offering = factory.offering(event, factory.catalog_item(requirements=[MIN_AGE_10]), capacity=1)
    return {"event": event, "offering": offering, "young": young, "older": older, "other": other}


def enroll(director, setup, member, offering=None):
    return EnrollmentService.enroll_attendee(
        director.id, setup["event"].id, member.id, (offering or setup["offering"]).id
    )


def test_capacity_and_prerequisite_example(director, setup):
    with pytest.raises(PrerequisitesNotMet) as exc:
        enroll(director, setup, setup["young"])
    assert exc.value.blockers == ["Requires Age 10+"]
    assert exc.value.status_code == 409

    assert enroll(director, setup, setup["older"]) == EnrollmentOutcome.ENROLLED

    with pytest.raises(ClassFull, match="This class is full"):
        enroll(director, setup, setup["other"])


def test_enrolling_twice_is_idempotent(director, setup):
    assert enroll(director, setup, setup["older"]) == EnrollmentOutcome.ENROLLED
    assert enroll(director, setup, setup["older"]) == EnrollmentOutcome.ALREADY_ENROLLED
    assert ClassEnrollment.query.filter_by(roster_member_id=setup["older"].id).count() == 1


def test_capacity_never_exceeded(factory, director, setup):
    offering = factory.offering(setup["event"], factory.catalog_item(code="OPEN", title="Open"), capacity=2)
    outcomes = []
    for member in (setup["young"], setup["older"], setup["other"]):
        try:
            outcomes.append(enroll(director, setup, member, offering))
        except ClassFull:
            outcomes.append("FULL")
    assert outcomes == [EnrollmentOutcome.ENROLLED, EnrollmentOutcome.ENROLLED, "FULL"]
    assert ClassEnrollment.query.filter_by(event_class_offering_id=offering.id).count() == 2


def test_zero_capacity_is_always_full(factory, director, setup):
    offering = factory.offering(setup["event"], factory.catalog_item(code="CLOSED", title="Closed"), capacity=0)
    with pytest.raises(ClassFull):
        enroll(director, setup, setup["older"], offering)


def test_attendee_must_be_registered_under_the_directors_club(factory, admin, director, setup):
    other_club = factory.club()
    other_year = factory.roster_year(other_club)
    stranger = factory.member(other_year, age=14)
    factory.registration(setup["event"], other_club, members=[stranger])

    with pytest.raises(AttendeeNotRegistered):
        enroll(director, setup, stranger)


def test_offering_must_belong_to_event(factory, admin, director, setup):
    other_event = factory.event(admin, name="Other")
    foreign = factory.offering(other_event, factory.catalog_item(code="ELSE", title="Elsewhere"))
    with pytest.raises(OfferingNotFound):
        enroll(director, setup, setup["older"], foreign)


def test_only_directors_can_enroll(factory, setup):
    teacher = factory.user(UserRole.STAFF_TEACHER)
    with pytest.raises(UnauthorizedError):
        EnrollmentService.enroll_attendee(teacher.id, setup["event"].id, setup["older"].id, setup["offering"].id)


def test_honor_prerequisite_uses_completed_requirements(factory, admin, club, director, roster_year):
    event = factory.event(admin)
    honored = factory.member(roster_year, first_name="Hal", honors=[" hon-camp-1 "])
    plain = factory.member(roster_year, first_name="Pat")
    factory.registration(event, club, members=[honored, plain])
    offering = factory.offering(
        event,
        factory.catalog_item(
            code="CAMP-2",
            title="Camping II",
            requirements=[{"requirement_type": RequirementType.COMPLETED_HONOR, "required_honor_code": "HON-CAMP-1"}],
        ),
    )

    assert EnrollmentService.enroll_attendee(director.id, event.id, honored.id, offering.id) == EnrollmentOutcome.ENROLLED
    with pytest.raises(PrerequisitesNotMet) as exc:
        EnrollmentService.enroll_attendee(director.id, event.id, plain.id, offering.id)
    assert exc.value.blockers == ["Requires Honor HON-CAMP-1"]


def test_class_board_reports_eligibility_and_seats(director, setup):
    enroll(director, setup, setup["older"])

    board = EnrollmentService.get_class_board(director.id, setup["event"].id)

    offering_row = board["offerings"][0]
    assert offering_row["seats_remaining"] == 0
    assert offering_row["requirement_badges"] == ["Requires Age 10+"]

    rows = {row["roster_member_id"]: row for row in board["attendees"]}
    offering_id = setup["offering"].id
    assert rows[setup["young"].id]["eligibility"][offering_id] == {
        "eligible": False,
        "blockers": ["Requires Age 10+"],
    }
    assert rows[setup["older"].id]["enrolled_offering_ids"] == [offering_id]
    assert rows[setup["other"].id]["eligibility"][offering_id]["eligible"] is True


def test_enroll_route_maps_errors_to_status_codes(client, auth_headers, director, setup):
    url = f"/api/events/{setup['event'].id}/enrollments"

    response = client.post(
        url,
        json={"roster_member_id": setup["young"].id, "offering_id": setup["offering"].id},
        headers=auth_headers(director),
    )
    assert response.status_code == 409
    assert response.get_json()["blockers"] == ["Requires Age 10+"]

    response = client.post(
        url,
        json={"roster_member_id": setup["older"].id, "offering_id": setup["offering"].id},
        headers=auth_headers(director),
    )
    assert response.status_code == 201
    assert response.get_json() == {"outcome": "ENROLLED"}

    response = client.post(
        url,
        json={"roster_member_id": setup["older"].id, "offering_id": setup["offering"].id},
        headers=auth_headers(director),
    )
    assert response.status_code == 200
    assert response.get_json() == {"outcome": "ALREADY_ENROLLED"}
