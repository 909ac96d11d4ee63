from datetime import datetime, timezone

import pytest

from clubhub.exceptions import DuplicateRosterYear, NotFoundError, UnauthorizedError, ValidationError
from clubhub.extensions import db
from clubhub.models import ClubRosterYear, RosterMember
from clubhub.models.enums import MemberRole, RolloverStatus
from clubhub.services.registration_service import resolve_roster_year
from clubhub.services.roster_service import RosterService


def test_rollover_copies_active_members_with_honors(factory, director, club, roster_year):
    factory.member(roster_year, first_name="Ana", honors=["HONOR-KNOTS"], master_guide=True)
    factory.member(roster_year, first_name="Ben")
    factory.member(roster_year, first_name="Cal", is_active=False)

    new_year = RosterService.execute_yearly_rollover(director.id, club.id, roster_year.id, "2027")

    assert new_year.year_label == "2027"
    assert new_year.is_active is True
    assert new_year.copied_from_year_id == roster_year.id
    assert new_year.starts_on.replace(tzinfo=timezone.utc) == datetime(2027, 1, 1, tzinfo=timezone.utc)
    assert new_year.ends_on.replace(tzinfo=timezone.utc) == datetime(2027, 12, 31, 23, 59, 59, tzinfo=timezone.utc)

    previous = db.session.get(ClubRosterYear, roster_year.id)
    assert previous.is_active is False

    copies = RosterMember.query.filter_by(club_roster_year_id=new_year.id).order_by(RosterMember.first_name).all()
    assert [m.first_name for m in copies] == ["Ana", "Ben"]
    assert all(m.rollover_status == RolloverStatus.CONTINUING for m in copies)
    assert copies[0].master_guide is True
    assert copies[0].completed_honor_codes == {"HONOR-KNOTS"}
    assert copies[1].completed_honor_codes == set()

    # Originals stay untouched
    assert RosterMember.query.filter_by(club_roster_year_id=roster_year.id).count() == 3


def test_non_numeric_label_uses_current_year(director, club, roster_year):
    now = datetime(2026, 10, 19, tzinfo=timezone.utc)
    new_year = RosterService.execute_yearly_rollover(director.id, club.id, roster_year.id, "Fall Term", now=now)
    assert new_year.starts_on.year == 2026


def test_duplicate_label_is_rejected_without_changes(director, club, roster_year):
    with pytest.raises(DuplicateRosterYear):
        RosterService.execute_yearly_rollover(director.id, club.id, roster_year.id, roster_year.year_label)

    assert ClubRosterYear.query.count() == 1
    assert db.session.get(ClubRosterYear, roster_year.id).is_active is True


def test_rollover_guards(factory, director, club, roster_year):
    other = factory.club()
    with pytest.raises(UnauthorizedError, match="your own club"):
        RosterService.execute_yearly_rollover(director.id, other.id, roster_year.id, "2027")

    with pytest.raises(ValidationError, match="A year label is required."):
        RosterService.execute_yearly_rollover(director.id, club.id, roster_year.id, "  ")

    foreign_year = factory.roster_year(other)
    with pytest.raises(NotFoundError, match="Previous roster year not found."):
        RosterService.execute_yearly_rollover(director.id, club.id, foreign_year.id, "2027")


def test_roster_year_resolution_prefers_current_window(factory, club):
    now = datetime(2026, 6, 1, tzinfo=timezone.utc)
    current = factory.roster_year(
        club, label="2026",
        starts_on=datetime(2026, 1, 1, tzinfo=timezone.utc),
        ends_on=datetime(2026, 12, 31, tzinfo=timezone.utc),
    )
    factory.roster_year(
        club, label="2027",
        starts_on=datetime(2027, 1, 1, tzinfo=timezone.utc),
        ends_on=datetime(2027, 12, 31, tzinfo=timezone.utc),
    )
    assert resolve_roster_year(club.id, now).id == current.id

    later = datetime(2028, 6, 1, tzinfo=timezone.utc)
    assert resolve_roster_year(club.id, later).year_label == "2027"


def test_save_roster_member_create_and_update(director, roster_year):
    member = RosterService.save_roster_member(
        director.id,
        {
            "club_roster_year_id": roster_year.id,
            "first_name": " Lia ",
            "last_name": "Stone",
            "member_role": "TLT",
            "age_at_start": "15",
            "date_of_birth": "2011-05-02",
            "dietary_restrictions": "  ",
        },
    )
    assert member.first_name == "Lia"
    assert member.member_role == MemberRole.TLT
    assert member.age_at_start == 15
    assert member.dietary_restrictions is None
    assert member.rollover_status == RolloverStatus.NEW

    updated = RosterService.save_roster_member(
        director.id,
        {
            "member_id": member.id,
            "club_roster_year_id": roster_year.id,
            "first_name": "Lia",
            "last_name": "Stone",
            "member_role": "STAFF",
        },
    )
    assert updated.id == member.id
    assert updated.member_role == MemberRole.STAFF

    with pytest.raises(ValidationError, match="Member role is required."):
        RosterService.save_roster_member(
            director.id,
            {"club_roster_year_id": roster_year.id, "first_name": "A", "last_name": "B", "member_role": "KING"},
        )


def test_roster_routes(client, auth_headers, factory, director, club, roster_year):
    factory.member(roster_year, first_name="Ana")
    headers = auth_headers(director)

    response = client.get("/api/roster", headers=headers)
    assert response.status_code == 200
    assert [m["first_name"] for m in response.get_json()["members"]] == ["Ana"]

    response = client.post(
        "/api/roster/rollover",
        json={"club_id": club.id, "previous_year_id": roster_year.id, "year_label": "2027"},
        headers=headers,
    )
    assert response.status_code == 201
    assert response.get_json()["year_label"] == "2027"

    response = client.post(
        "/api/roster/rollover",
        json={"club_id": club.id, "previous_year_id": roster_year.id, "year_label": "2027"},
        headers=headers,
    )
    assert response.status_code == 409
