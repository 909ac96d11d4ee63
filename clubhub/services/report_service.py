"""Read-only reports and CSV exports over submitted registrations."""
import csv
import io
import json
import re
from datetime import date, datetime, timezone
from flask import current_app
from clubhub.repositories import ClassRepository, EventRepository, RegistrationRepository, RosterRepository
from clubhub.services.user_service import UserService
from clubhub.exceptions import NotFoundError
from clubhub.models.enums import RegistrationStatus

SPIRITUAL_KEYS = {"baptism_names", "bible_names"}
DUTY_KEYS = ("duty_first", "duty_second", "special_activity")
AV_DETAIL_KEYS = {"av_equipment", "av_request", "av_needs"}
AV_NEGATIVE_STRINGS = {"false", "none", "no", "n/a", "na"}
REPORTABLE_STATUSES = [RegistrationStatus.SUBMITTED, RegistrationStatus.APPROVED]


def flatten_json_strings(value):
    """Flatten a stored response value into display strings; text splits on commas and newlines."""
    if value is None:
        return []
    if isinstance(value, str):
        return [entry.strip() for entry in re.split(r"[,\n]", value) if entry.strip()]
    if isinstance(value, bool):
        return ["true" if value else "false"]
    if isinstance(value, (int, float)):
        return [str(value)]
    if isinstance(value, (list, tuple)):
        return [item for entry in value for item in flatten_json_strings(entry)]
    if isinstance(value, dict):
        return [json.dumps(value)]
    return []


def is_truthy_av_request(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value > 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        return bool(normalized) and normalized not in AV_NEGATIVE_STRINGS
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return bool(value)


def format_response_value(value) -> str:
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    if isinstance(value, dict) and value:
        return json.dumps(value)
    return "No response provided"


def format_age(date_of_birth, age_at_start, today=None) -> str:
    if isinstance(age_at_start, int):
        return str(age_at_start)
    if not date_of_birth:
        return "Unknown"
    today = today or date.today()
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return str(max(age, 0))


def format_emergency_contact(name, phone) -> str:
    name = (name or "").strip()
    phone = (phone or "").strip()
    if name and phone:
        return f"{name} ({phone})"
    return name or phone or "Not provided"


def to_csv(rows, quote_all=True) -> str:
    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        quoting=csv.QUOTE_ALL if quote_all else csv.QUOTE_MINIMAL,
        lineterminator="\n",
    )
    writer.writerows(rows)
    return buffer.getvalue().rstrip("\n")


def _report_file_name(event, kind):
    base = re.sub(r"\s+", "-", event.name.lower())
    return f"{base}-{kind}-{event.starts_at:%Y-%m-%d}-{event.ends_at:%Y-%m-%d}.csv"


def _text(value):
    value = (value or "").strip()
    return value or None


class ReportService:
    @staticmethod
    def _get_event(user_id, event_id, message):
        UserService.require_super_admin(user_id, message)
        event = EventRepository.get_event(event_id)
        if not event:
            raise NotFoundError("Event not found.")
        return event

    @staticmethod
    def get_operational_reports(user_id, event_id):
        event = ReportService._get_event(
            user_id, event_id, "Only super admins can access operational reports."
        )
        return ReportService.build_operational_reports(event)

    @staticmethod
    def build_operational_reports(event):
        """
        Spiritual milestones, duty assignments and AV requests for an event.

        Only registration-scoped answers of SUBMITTED or APPROVED registrations
        are read. Duty assignments are grouped case-insensitively.
        """
        spiritual_rows = []
        duties = {}
        av_rows = []

        # Creation order
        registrations = sorted(
            RegistrationRepository.get_for_event(event.id, REPORTABLE_STATUSES),
            key=lambda r: r.id,
        )
        for registration in registrations:
            club = {"club_name": registration.club.name, "club_code": registration.club.code}
            av_details = []
            av_requested = False

            for response in registration.form_responses:
                if response.attendee_id is not None:
                    continue
                key = response.field.key
                items = flatten_json_strings(response.value)

                if key in SPIRITUAL_KEYS:
                    for item in items:
                        spiritual_rows.append(
                            dict(club, source_key=key, source_label=response.field.label, response=item)
                        )

                if key in DUTY_KEYS:
                    for item in items:
                        entry = duties.setdefault(item.lower(), {"assignment": item, "clubs": {}})
                        entry["clubs"][registration.id] = club

                if key.startswith("av_") or key in AV_DETAIL_KEYS:
                    if is_truthy_av_request(response.value):
                        av_requested = True
                    for item in items:
                        detail = f"{response.field.label}: {item}"
                        if detail not in av_details:
                            av_details.append(detail)

            if av_requested or av_details:
                av_rows.append(
                    dict(
                        club,
                        requested_items="; ".join(av_details) if av_details else "Requested AV support",
                    )
                )

        duty_rows = sorted(
            (
                {
                    "assignment": entry["assignment"],
                    "clubs": sorted(entry["clubs"].values(), key=lambda c: c["club_name"]),
                }
                for entry in duties.values()
            ),
            key=lambda row: row["assignment"],
        )

        return {
            "event": event.to_dict(),
            "spiritual_rows": sorted(spiritual_rows, key=lambda r: (r["club_name"], r["response"])),
            "duty_rows": duty_rows,
            "av_rows": sorted(av_rows, key=lambda r: r["club_name"]),
        }

    @staticmethod
    def get_operational_csv(user_id, event_id, kind):
        event = ReportService._get_event(
            user_id, event_id, "Only super admins can access operational reports."
        )
        report = ReportService.build_operational_reports(event)

        if kind == "spiritual":
            rows = [["Club", "Club Code", "Field", "Response"]] + [
                [r["club_name"], r["club_code"], r["source_label"], r["response"]]
                for r in report["spiritual_rows"]
            ]
        elif kind == "duties":
            rows = [["Assignment", "Club", "Club Code"]] + [
                [row["assignment"], club["club_name"], club["club_code"]]
                for row in report["duty_rows"]
                for club in row["clubs"]
            ]
        elif kind == "av":
            rows = [["Club", "Club Code", "Requested Items"]] + [
                [r["club_name"], r["club_code"], r["requested_items"]] for r in report["av_rows"]
            ]
        else:
            raise NotFoundError(f"Unknown report: {kind}")

        current_app.logger.info(f"Exported {kind} report for event {event.id} ({len(rows) - 1} rows)")
        return {"file_name": _report_file_name(event, kind), "content": to_csv(rows)}

    @staticmethod
    def get_medical_manifest(user_id, event_id, today=None):
        event = ReportService._get_event(
            user_id, event_id, "Only super admins can access medical manifests."
        )

        rows = []
        for registration in RegistrationRepository.get_for_event(event.id, REPORTABLE_STATUSES):
            for attendee in registration.attendees:
                member = attendee.roster_member
                dietary = _text(member.dietary_restrictions)
                medical = _text(member.medical_flags)
                if not dietary and not medical:
                    continue
                rows.append(
                    {
                        "attendee_id": attendee.id,
                        "attendee_name": member.full_name,
                        "sort_key": (member.last_name, member.first_name),
                        "age": format_age(member.date_of_birth, member.age_at_start, today),
                        "role": member.member_role.value,
                        "club_name": registration.club.name,
                        "emergency_contact_info": format_emergency_contact(
                            member.emergency_contact_name, member.emergency_contact_phone
                        ),
                        "dietary_restrictions": dietary,
                        "medical_flags": medical,
                    }
                )

        rows.sort(key=lambda row: row["sort_key"])
        for row in rows:
            del row["sort_key"]
        return {
            "event": event.to_dict(),
            "dietary_rows": [row for row in rows if row["dietary_restrictions"]],
            "medical_rows": [row for row in rows if row["medical_flags"]],
        }

    @staticmethod
    def get_master_attendees_csv(user_id, event_id):
        event = ReportService._get_event(user_id, event_id, "Only super admins can perform this action.")

        rows = [
            [
                "Event",
                "Registration Code",
                "Registration Status",
                "Club",
                "Club Code",
                "Attendee",
                "Member Role",
                "Age At Start",
            ]
        ]
        for registration in RegistrationRepository.get_for_event(event.id):
            for attendee in registration.attendees:
                member = attendee.roster_member
                club = member.roster_year.club
                rows.append(
                    [
                        event.name,
                        registration.registration_code,
                        registration.status.value,
                        club.name,
                        club.code,
                        member.full_name,
                        member.member_role.value,
                        "" if member.age_at_start is None else str(member.age_at_start),
                    ]
                )

        return {"file_name": f"{event.slug}-master-attendees.csv", "content": to_csv(rows, quote_all=False)}

    @staticmethod
    def get_club_registration_export(user_id, event_id):
        """A director's own registration with formatted answers and class enrollments."""
        club_id = UserService.get_director_club_id(user_id)
        event = EventRepository.get_event(event_id)
        if not event:
            raise NotFoundError("Event not found.")

        registration = RegistrationRepository.find_by_event_and_club(event.id, club_id)
        if not registration:
            raise NotFoundError("Registration not found for this event.")

        member_ids = [attendee.roster_member_id for attendee in registration.attendees]
        classes_by_member = {}
        for enrollment in ClassRepository.get_enrollments_for_members(event.id, member_ids):
            classes_by_member.setdefault(enrollment.roster_member_id, []).append(
                enrollment.offering.class_catalog.title
            )

        names = {attendee.roster_member_id: attendee.roster_member.full_name for attendee in registration.attendees}
        responses = sorted(registration.form_responses, key=lambda r: (r.field.sort_order, r.id))

        return {
            "event": event.to_dict(),
            "club": registration.club.to_dict(),
            "registration_code": registration.registration_code,
            "status": registration.status.value,
            "attendees": [
                {
                    "name": names[member_id],
                    "classes": classes_by_member.get(member_id, []),
                }
                for member_id in member_ids
            ],
            "responses": [
                {
                    "label": response.field.label,
                    "attendee": names.get(response.attendee_id) if response.attendee_id else None,
                    "value": format_response_value(response.value),
                }
                for response in responses
            ],
        }

    @staticmethod
    def get_admin_dashboard_overview(user_id, now=None):
        UserService.require_super_admin(user_id, "Only super admins can access the dashboard.")
        now = now or datetime.now(timezone.utc)

        upcoming = EventRepository.get_upcoming_with_registration_counts(now)
        return {
            "total_active_clubs": RosterRepository.count_clubs(),
            "total_conference_members": RosterRepository.count_active_members(),
            "upcoming_events": [
                {**event.to_dict(), "registration_count": count} for event, count in upcoming
            ],
        }

    @staticmethod
    def get_admin_event_registrations(user_id, event_id):
        """Every registration of an event, with its attendees and the club each attendee rosters under."""
        event = ReportService._get_event(user_id, event_id, "Only super admins can perform this action.")

        registrations = []
        for registration in RegistrationRepository.get_for_event(event.id):
            attendees = []
            for attendee in registration.attendees:
                member = attendee.roster_member
                attendees.append(
                    {
                        "roster_member_id": member.id,
                        "name": member.full_name,
                        "member_role": member.member_role.value,
                        "age_at_start": member.age_at_start,
                        "checked_in_at": attendee.checked_in_at.isoformat() if attendee.checked_in_at else None,
                        "club": member.roster_year.club.to_dict(),
                    }
                )
            registrations.append(
                {
                    "id": registration.id,
                    "registration_code": registration.registration_code,
                    "status": registration.status.value,
                    "submitted_at": registration.submitted_at.isoformat() if registration.submitted_at else None,
                    "club": registration.club.to_dict(),
                    "attendees": attendees,
                }
            )

        return {"event": event.to_dict(), "registrations": registrations}
