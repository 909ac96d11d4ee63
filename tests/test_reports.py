from datetime import date, timedelta

import pytest

from clubhub.exceptions import NotFoundError, UnauthorizedError
from clubhub.extensions import db
from clubhub.models import ClassEnrollment, EventFormResponse
from clubhub.models.enums import FormFieldType, RegistrationStatus
from clubhub.services.report_service import (
    ReportService,
    flatten_json_strings,
    format_age,
    format_emergency_contact,
    format_response_value,
    is_truthy_av_request,
)


def test_flatten_json_strings():
    assert flatten_json_strings("Ana, Ben\nCal ,") == ["Ana", "Ben", "Cal"]
    assert flatten_json_strings(["Setup", ["Cleanup, Parking"], 3, True]) == [
        "Setup", "Cleanup", "Parking", "3", "true"
    ]
    assert flatten_json_strings({"a": 1}) == ['{"a": 1}']
    assert flatten_json_strings(None) == []


def test_response_and_contact_formatting():
    assert format_response_value(True) == "Yes"
    assert format_response_value(False) == "No"
    assert format_response_value(["Setup", "Cleanup"]) == "Setup, Cleanup"
    assert format_response_value(4) == "4"
    assert format_response_value({}) == "No response provided"
    assert format_response_value(None) == "No response provided"

    assert format_emergency_contact(" Mom ", "555") == "Mom (555)"
    assert format_emergency_contact(None, " 555 ") == "555"
    assert format_emergency_contact("", "") == "Not provided"

    assert format_age(None, 11) == "11"
    assert format_age(date(2014, 6, 2), None, today=date(2026, 6, 1)) == "11"
    assert format_age(None, None) == "Unknown"


def test_av_truthiness():
    assert is_truthy_av_request("Projector")
    assert not is_truthy_av_request(" N/A ")
    assert not is_truthy_av_request(0)
    assert not is_truthy_av_request([])
    assert is_truthy_av_request(True)


@pytest.fixture
def report_event(factory, admin, club, roster_year):
    event = factory.event(
        admin,
        name="Spring Camporee",
        fields=[
            {"key": "baptism_names", "label": "Baptism candidates"},
            {"key": "duty_first", "label": "First duty", "type": FormFieldType.MULTI_SELECT,
             "options": ["Setup", "Cleanup"]},
            {"key": "av_projector", "label": "Projector", "type": FormFieldType.BOOLEAN},
            {"key": "attendee_shirt", "label": "Shirt"},
        ],
    )
    fields = {f.key: f for f in event.dynamic_fields}

    ana = factory.member(
        roster_year, first_name="Ana", last_name="Young",
        dietary_restrictions="Vegetarian", emergency_contact_name="Mom", emergency_contact_phone="555",
    )
    ben = factory.member(roster_year, first_name="Ben", last_name="Abel", medical_flags="Asthma")
    trail = factory.registration(event, club, [ana, ben])

    other_club = factory.club(name="Acorns", code="ACORN")
    other_year = factory.roster_year(other_club)
    cal = factory.member(other_year, first_name="Cal", medical_flags="Peanut allergy")
    acorn = factory.registration(event, other_club, [cal])

    drafts = factory.club(name="Drafty", code="DRAFT")
    dee = factory.member(factory.roster_year(drafts), first_name="Dee", medical_flags="Hidden")
    draft = factory.registration(event, drafts, [dee], status=RegistrationStatus.DRAFT)

    def answer(registration, key, value, attendee=None):
        db.session.add(
            EventFormResponse(
                event_registration_id=registration.id,
                event_form_field_id=fields[key].id,
                attendee_id=attendee.id if attendee else None,
                value=value,
            )
        )

    answer(trail, "baptism_names", "Ana Young, Ben Abel")
    answer(trail, "duty_first", ["Setup"])
    answer(trail, "av_projector", True)
    answer(trail, "attendee_shirt", "M", attendee=ana)
    answer(acorn, "duty_first", ["setup", "Cleanup"])
    answer(acorn, "av_projector", False)
    answer(draft, "duty_first", ["Parking"])
    db.session.commit()
    return event


def test_operational_reports(admin, report_event):
    report = ReportService.get_operational_reports(admin.id, report_event.id)

    assert [(r["club_code"], r["response"]) for r in report["spiritual_rows"]] == [
        ("TRAIL", "Ana Young"),
        ("TRAIL", "Ben Abel"),
    ]
    assignments = {row["assignment"].lower(): [c["club_code"] for c in row["clubs"]] for row in report["duty_rows"]}
    assert assignments == {"setup": ["ACORN", "TRAIL"], "cleanup": ["ACORN"]}
    # A declined AV answer still lists the club with its detail
    assert report["av_rows"] == [
        {"club_name": "Acorns", "club_code": "ACORN", "requested_items": "Projector: false"},
        {"club_name": "Trailblazers", "club_code": "TRAIL", "requested_items": "Projector: true"},
    ]


def test_operational_csv(admin, report_event):
    export = ReportService.get_operational_csv(admin.id, report_event.id, "av")

    assert export["file_name"].startswith("spring-camporee-av-")
    assert export["file_name"].endswith(".csv")
    assert export["content"].splitlines() == [
        '"Club","Club Code","Requested Items"',
        '"Acorns","ACORN","Projector: false"',
        '"Trailblazers","TRAIL","Projector: true"',
    ]

    with pytest.raises(NotFoundError, match="Unknown report: pdf"):
        ReportService.get_operational_csv(admin.id, report_event.id, "pdf")


def test_medical_manifest_skips_drafts_and_sorts_by_last_name(admin, report_event):
    manifest = ReportService.get_medical_manifest(admin.id, report_event.id)

    assert [r["attendee_name"] for r in manifest["medical_rows"]] == ["Ben Abel", "Cal Member"]
    assert [r["attendee_name"] for r in manifest["dietary_rows"]] == ["Ana Young"]
    assert manifest["dietary_rows"][0]["emergency_contact_info"] == "Mom (555)"
    assert manifest["medical_rows"][0]["emergency_contact_info"] == "Not provided"


def test_master_attendees_csv_includes_every_status(admin, report_event):
    export = ReportService.get_master_attendees_csv(admin.id, report_event.id)
    lines = export["content"].splitlines()

    assert export["file_name"] == f"{report_event.slug}-master-attendees.csv"
    assert lines[0] == "Event,Registration Code,Registration Status,Club,Club Code,Attendee,Member Role,Age At Start"
    assert len(lines) == 5
    assert any(",DRAFT,Drafty,DRAFT,Dee Member," in line for line in lines)


def test_club_export_formats_answers_and_classes(factory, admin, director, report_event):
    item = factory.catalog_item()
    offering = factory.offering(report_event, item)
    registration = next(r for r in report_event.registrations if r.club.code == "TRAIL")
    ana = registration.attendees[0].roster_member
    db.session.add(ClassEnrollment(event_class_offering_id=offering.id, roster_member_id=ana.id))
    db.session.commit()

    export = ReportService.get_club_registration_export(director.id, report_event.id)

    assert export["attendees"] == [
        {"name": "Ana Young", "classes": ["Knot Tying"]},
        {"name": "Ben Abel", "classes": []},
    ]
    values = {(r["label"], r["attendee"]): r["value"] for r in export["responses"]}
    assert values[("First duty", None)] == "Setup"
    assert values[("Projector", None)] == "Yes"
    assert values[("Shirt", "Ana Young")] == "M"


def test_reports_are_admin_only(director, report_event):
    with pytest.raises(UnauthorizedError, match="Only super admins can access medical manifests."):
        ReportService.get_medical_manifest(director.id, report_event.id)


def test_report_routes(client, auth_headers, admin, report_event):
    headers = auth_headers(admin)

    response = client.get(f"/api/admin/events/{report_event.id}/reports/operational?format=duties", headers=headers)
    assert response.status_code == 200
    assert response.mimetype == "text/csv"
    assert "attachment" in response.headers["Content-Disposition"]

    response = client.get(f"/api/admin/events/{report_event.id}/attendees.csv", headers=headers)
    assert response.status_code == 200
    assert response.get_data(as_text=True).startswith("Event,Registration Code")


def test_dashboard_overview_counts_and_upcoming_events(factory, admin, club, roster_year, report_event):
    past = factory.event(admin, name="Winter Retreat")
    past.starts_at = factory.now - timedelta(days=40)
    past.ends_at = factory.now - timedelta(days=38)
    summit = factory.event(admin, name="Leaders Summit")
    summit.starts_at = factory.now + timedelta(days=2)
    summit.ends_at = factory.now + timedelta(days=3)
    db.session.commit()

    old_year = factory.roster_year(club, label="2019", is_active=False)
    factory.member(old_year, first_name="Gone")
    factory.member(roster_year, first_name="Quit", is_active=False)

    overview = ReportService.get_admin_dashboard_overview(admin.id)

    assert overview["total_active_clubs"] == 3
    # Ana, Ben, Cal and Dee; inactive members and years are not counted
    assert overview["total_conference_members"] == 4
    assert [(e["name"], e["registration_count"]) for e in overview["upcoming_events"]] == [
        ("Leaders Summit", 0),
        ("Spring Camporee", 3),
    ]


def test_dashboard_is_admin_only(director):
    with pytest.raises(UnauthorizedError, match="Only super admins can access the dashboard."):
        ReportService.get_admin_dashboard_overview(director.id)


def test_event_registrations_list_attendees_with_their_clubs(admin, report_event):
    result = ReportService.get_admin_event_registrations(admin.id, report_event.id)

    assert result["event"]["id"] == report_event.id
    assert [r["club"]["code"] for r in result["registrations"]] == ["DRAFT", "TRAIL", "ACORN"]
    assert [r["status"] for r in result["registrations"]] == ["DRAFT", "SUBMITTED", "SUBMITTED"]

    trail = result["registrations"][1]
    assert [(a["name"], a["club"]["code"]) for a in trail["attendees"]] == [
        ("Ana Young", "TRAIL"),
        ("Ben Abel", "TRAIL"),
    ]
    assert trail["attendees"][0]["member_role"] == "PATHFINDER"
    assert trail["attendees"][0]["checked_in_at"] is None


def test_event_registrations_unknown_event(admin, director):
    with pytest.raises(NotFoundError, match="Event not found."):
        ReportService.get_admin_event_registrations(admin.id, 999)
    with pytest.raises(UnauthorizedError):
        ReportService.get_admin_event_registrations(director.id, 999)


def test_dashboard_routes(client, auth_headers, admin, director, report_event):
    response = client.get("/api/admin/dashboard", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.get_json()["total_active_clubs"] == 3

    response = client.get(f"/api/admin/events/{report_event.id}/registrations", headers=auth_headers(admin))
    assert response.status_code == 200
    assert len(response.get_json()["registrations"]) == 3

    response = client.get("/api/admin/dashboard", headers=auth_headers(director))
    assert response.status_code == 403
