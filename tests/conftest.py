from datetime import datetime, timedelta, timezone

import pytest
from flask_jwt_extended import create_access_token

from clubhub import create_app
from clubhub.extensions import db
from clubhub.models import (
    ClassCatalog,
    ClassRequirement,
    Club,
    ClubMembership,
    ClubRosterYear,
    Event,
    EventClassOffering,
    EventFormField,
    EventRegistration,
    MemberRequirement,
    RegistrationAttendee,
    RosterMember,
    User,
)
from clubhub.models.enums import (
    FormFieldType,
    MemberRole,
    RegistrationStatus,
    RequirementType,
    UserRole,
)


@pytest.fixture
def app():
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "RATELIMIT_ENABLED": False,
            "JWT_SECRET_KEY": "test-secret-key-with-enough-length-for-hs256",
        }
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


class Factory:
    """Builds persisted rows with sensible defaults for service and route tests."""

    def __init__(self):
        self.now = datetime.now(timezone.utc)
        self._counter = 0

    def _next(self):
        self._counter += 1
        return self._counter

    def user(self, role=UserRole.SUPER_ADMIN, club=None, **attrs):
        n = self._next()
        user = User(
            email=attrs.pop("email", f"user{n}@example.com"),
            first_name=attrs.pop("first_name", "Test"),
            last_name=attrs.pop("last_name", f"User{n}"),
            role=role,
            **attrs,
        )
        db.session.add(user)
        db.session.flush()
        if club is not None:
            db.session.add(ClubMembership(club_id=club.id, user_id=user.id, is_primary=True))
        db.session.commit()
        return user

    def club(self, name=None, code=None):
        n = self._next()
        club = Club(name=name or f"Club {n}", code=code or f"C{n}")
        db.session.add(club)
        db.session.commit()
        return club

    def roster_year(self, club, label=None, starts_on=None, ends_on=None, is_active=True):
        year = ClubRosterYear(
            club_id=club.id,
            year_label=label or str(self.now.year),
            starts_on=starts_on or self.now - timedelta(days=30),
            ends_on=ends_on or self.now + timedelta(days=300),
            is_active=is_active,
        )
        db.session.add(year)
        db.session.commit()
        return year

    def member(self, year, first_name="Sam", last_name="Member", age=12, role=MemberRole.PATHFINDER,
               honors=(), **attrs):
        member = RosterMember(
            club_roster_year_id=year.id,
            first_name=first_name,
            last_name=last_name,
            age_at_start=age,
            member_role=role,
            **attrs,
        )
        db.session.add(member)
        db.session.flush()
        for code in honors:
            db.session.add(MemberRequirement(roster_member_id=member.id, honor_code=code))
        db.session.commit()
        return member

    def event(self, creator, name="Camporee", fields=()):
        n = self._next()
        event = Event(
            name=name,
            slug=f"event-{n}",
            starts_at=self.now + timedelta(days=10),
            ends_at=self.now + timedelta(days=12),
            registration_opens_at=self.now - timedelta(days=1),
            registration_closes_at=self.now + timedelta(days=5),
            created_by_user_id=creator.id,
        )
        db.session.add(event)
        db.session.flush()
        for index, attrs in enumerate(fields):
            attrs = dict(attrs)
            attrs.setdefault("label", attrs["key"].replace("_", " ").title())
            attrs.setdefault("type", FormFieldType.SHORT_TEXT)
            attrs.setdefault("sort_order", index)
            db.session.add(EventFormField(event_id=event.id, **attrs))
        db.session.commit()
        return event

    def catalog_item(self, code="HONOR-KNOTS", title="Knot Tying", requirements=()):
        item = ClassCatalog(code=code, title=title, active=True)
        for attrs in requirements:
            item.requirements.append(ClassRequirement(**attrs))
        db.session.add(item)
        db.session.commit()
        return item

    def offering(self, event, catalog_item, capacity=10, instructor=None):
        offering = EventClassOffering(
            event_id=event.id,
            class_catalog_id=catalog_item.id,
            capacity=capacity,
            instructor_user_id=instructor.id if instructor else None,
        )
        db.session.add(offering)
        db.session.commit()
        return offering

    def registration(self, event, club, members=(), status=RegistrationStatus.SUBMITTED):
        n = self._next()
        registration = EventRegistration(
            event_id=event.id,
            club_id=club.id,
            registration_code=f"REG-TEST-{n}",
            status=status,
        )
        db.session.add(registration)
        db.session.flush()
        for member in members:
            db.session.add(
                RegistrationAttendee(event_registration_id=registration.id, roster_member_id=member.id)
            )
        db.session.commit()
        return registration


@pytest.fixture
def factory(app):
    return Factory()


@pytest.fixture
def auth_headers(app):
    def _headers(user):
        token = create_access_token(identity=str(user.id))
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def admin(factory):
    return factory.user(UserRole.SUPER_ADMIN, email="admin@example.com")


@pytest.fixture
def club(factory):
    return factory.club(name="Trailblazers", code="TRAIL")


@pytest.fixture
def director(factory, club):
    return factory.user(UserRole.CLUB_DIRECTOR, club=club, email="director@example.com")


@pytest.fixture
def roster_year(factory, club):
    return factory.roster_year(club)
