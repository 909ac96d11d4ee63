from datetime import date, datetime, timezone
from flask import current_app
from clubhub.extensions import db
from clubhub.models import RosterMember
from clubhub.models.enums import Gender, MemberRole, RolloverStatus
from clubhub.repositories import RosterRepository
from clubhub.services.user_service import UserService
from clubhub.services.registration_service import resolve_roster_year
from clubhub.exceptions import (
    DuplicateRosterYear,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

ROSTER_PERMISSION_MESSAGE = "Only club directors can manage rosters."


def _optional_text(value):
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _optional_int(value, label):
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a valid whole number.")


class RosterService:
    @staticmethod
    def get_roster(user_id, now=None):
        club_id = UserService.get_director_club_id(user_id, ROSTER_PERMISSION_MESSAGE)
        roster_year = resolve_roster_year(club_id, now)
        if not roster_year:
            return {"roster_year": None, "members": []}
        return {
            "roster_year": roster_year.to_dict(),
            "members": [member.to_dict() for member in RosterRepository.get_active_members(roster_year.id)],
        }

    @staticmethod
    def save_roster_member(user_id, data) -> RosterMember:
        """Create a roster member, or update one when ``member_id`` is given."""
        club_id = UserService.get_director_club_id(user_id, ROSTER_PERMISSION_MESSAGE)

        if not data.get("club_roster_year_id"):
            raise ValidationError("A roster year is required.")
        roster_year = RosterRepository.find_year_for_club(data["club_roster_year_id"], club_id)
        if not roster_year:
            raise NotFoundError("Roster year not found for this club.")

        first_name = _optional_text(data.get("first_name"))
        last_name = _optional_text(data.get("last_name"))
        if not first_name:
            raise ValidationError("First name is required.")
        if not last_name:
            raise ValidationError("Last name is required.")
        try:
            member_role = MemberRole(data.get("member_role"))
        except ValueError:
            raise ValidationError("Member role is required.")

        gender = None
        if data.get("gender") in Gender.__members__:
            gender = Gender[data["gender"]]

        date_of_birth = None
        if _optional_text(data.get("date_of_birth")):
            try:
                date_of_birth = date.fromisoformat(data["date_of_birth"].strip())
            except ValueError:
                raise ValidationError("Date of birth is invalid.")

        attrs = {
            "first_name": first_name,
            "last_name": last_name,
            "member_role": member_role,
            "age_at_start": _optional_int(data.get("age_at_start"), "Age at start"),
            "date_of_birth": date_of_birth,
            "gender": gender,
            "medical_flags": _optional_text(data.get("medical_flags")),
            "dietary_restrictions": _optional_text(data.get("dietary_restrictions")),
            "is_first_time": bool(data.get("is_first_time")),
            "is_medical_personnel": bool(data.get("is_medical_personnel")),
            "master_guide": bool(data.get("master_guide")),
            "emergency_contact_name": _optional_text(data.get("emergency_contact_name")),
            "emergency_contact_phone": _optional_text(data.get("emergency_contact_phone")),
            "is_active": bool(data.get("is_active", True)),
        }

        try:
            if data.get("member_id"):
                member = RosterRepository.find_member(data["member_id"])
                if not member or member.roster_year.club_id != club_id:
                    raise NotFoundError("Roster member not found for this club.")
                for key, value in attrs.items():
                    setattr(member, key, value)
            else:
                member = RosterRepository.create_member(
                    RosterMember(
                        club_roster_year_id=roster_year.id,
                        rollover_status=RolloverStatus.NEW,
                        **attrs,
                    )
                )
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f"Roster member {member.id} saved for club {club_id}")
        return member

    @staticmethod
    def execute_yearly_rollover(user_id, club_id, previous_year_id, new_year_label, now=None):
        """
        Start a new roster year from an existing one.

        Active members of the previous year are copied as CONTINUING members
        together with their completed honors; every other year of the club is
        deactivated. A numeric label sets the calendar-year window, any other
        label uses the current year.
        """
        director_club_id = UserService.get_director_club_id(user_id, ROSTER_PERMISSION_MESSAGE)
        if director_club_id != int(club_id):
            raise UnauthorizedError("You can only rollover the roster for your own club.")

        label = (new_year_label or "").strip()
        if not label:
            raise ValidationError("A year label is required.")

        now = now or datetime.now(timezone.utc)
        year = int(label) if label.isdigit() else now.year

        try:
            previous_year = RosterRepository.find_year_for_club(previous_year_id, director_club_id)
            if not previous_year:
                raise NotFoundError("Previous roster year not found.")
            if RosterRepository.find_year_by_label(director_club_id, label):
                raise DuplicateRosterYear()

            RosterRepository.deactivate_years(director_club_id)
            new_year = RosterRepository.create_year(
                {
                    "club_id": director_club_id,
                    "year_label": label,
                    "starts_on": datetime(year, 1, 1, 0, 0, 0, tzinfo=timezone.utc),
                    "ends_on": datetime(year, 12, 31, 23, 59, 59, tzinfo=timezone.utc),
                    "copied_from_year_id": previous_year.id,
                    "is_active": True,
                }
            )

            copied = 0
            for member in RosterRepository.get_active_members(previous_year.id):
                clone = RosterRepository.create_member(
                    RosterMember(
                        club_roster_year_id=new_year.id,
                        first_name=member.first_name,
                        last_name=member.last_name,
                        date_of_birth=member.date_of_birth,
                        age_at_start=member.age_at_start,
                        gender=member.gender,
                        member_role=member.member_role,
                        medical_flags=member.medical_flags,
                        dietary_restrictions=member.dietary_restrictions,
                        is_first_time=member.is_first_time,
                        is_medical_personnel=member.is_medical_personnel,
                        master_guide=member.master_guide,
                        emergency_contact_name=member.emergency_contact_name,
                        emergency_contact_phone=member.emergency_contact_phone,
                        is_active=True,
                        rollover_status=RolloverStatus.CONTINUING,
                    )
                )
                for requirement in member.completed_requirements:
                    RosterRepository.add_member_requirement(
                        {
                            "roster_member_id": clone.id,
                            "user_id": requirement.user_id,
                            "honor_code": requirement.honor_code,
                            "completed_at": requirement.completed_at,
                            "verified_by": requirement.verified_by,
                            "notes": requirement.notes,
                        }
                    )
                copied += 1

            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(
            f"Club {director_club_id} rolled over to {label}: {copied} members copied from year {previous_year.id}"
        )
        return new_year
