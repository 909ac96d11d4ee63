"""Enrollment races against a real PostgreSQL database (row locks are a no-op on SQLite)."""
import os
import threading

import pytest

from clubhub import create_app
from clubhub.exceptions import ClassFull
from clubhub.extensions import db
from clubhub.models import ClassEnrollment
from clubhub.services.enrollment_service import EnrollmentOutcome, EnrollmentService

POSTGRES_URL = os.getenv("CLUBHUB_TEST_POSTGRES_URL")

pytestmark = [
    pytest.mark.postgres,
    pytest.mark.skipif(not POSTGRES_URL, reason="CLUBHUB_TEST_POSTGRES_URL is not set"),
]


@pytest.fixture
def app():
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": POSTGRES_URL,
            "RATELIMIT_ENABLED": False,
            "JWT_SECRET_KEY": "test-secret-key-with-enough-length-for-hs256",
        }
    )
    with app.app_context():
        db.drop_all()
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


def run_concurrently(app, calls):
    """Start every call at once, each in its own app context and session."""
    barrier = threading.Barrier(len(calls))
    results = [None] * len(calls)

    def worker(index, call):
        with app.app_context():
            barrier.wait()
            try:
                results[index] = call()
            except ClassFull as e:
                results[index] = e
            finally:
                db.session.remove()

    threads = [threading.Thread(target=worker, args=(i, call)) for i, call in enumerate(calls)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return results


def test_last_seat_goes_to_exactly_one_enroller(app, factory, admin, club, director, roster_year):
    members = [factory.member(roster_year, first_name=f"Kid{i}") for i in range(4)]
    event = factory.event(admin)
    factory.registration(event, club, members=members)
    offering = factory.offering(event, factory.catalog_item(), capacity=3)

    director_id, event_id, offering_id = director.id, event.id, offering.id
    member_ids = [member.id for member in members]

    results = run_concurrently(
        app,
        [
            (lambda member_id=member_id: EnrollmentService.enroll_attendee(
                director_id, event_id, member_id, offering_id
            ))
            for member_id in member_ids
        ],
    )

    assert results.count(EnrollmentOutcome.ENROLLED) == 3
    assert len([r for r in results if isinstance(r, ClassFull)]) == 1
    assert ClassEnrollment.query.filter_by(event_class_offering_id=offering_id).count() == 3


def test_same_attendee_enrolled_twice_at_once(app, factory, admin, club, director, roster_year):
    member = factory.member(roster_year)
    event = factory.event(admin)
    factory.registration(event, club, members=[member])
    offering = factory.offering(event, factory.catalog_item(), capacity=5)

    director_id, event_id, offering_id, member_id = director.id, event.id, offering.id, member.id

    results = run_concurrently(
        app,
        [lambda: EnrollmentService.enroll_attendee(director_id, event_id, member_id, offering_id)] * 2,
    )

    assert sorted(r.value for r in results) == ["ALREADY_ENROLLED", "ENROLLED"]
    assert ClassEnrollment.query.filter_by(roster_member_id=member_id).count() == 1
