from typing import List, Optional
from clubhub.extensions import db
from clubhub.models import Club, ClubRosterYear, MemberRequirement, RosterMember


class RosterRepository:
    @staticmethod
    def find_current_year(club_id: int, now) -> Optional[ClubRosterYear]:
        """Active roster year whose window contains ``now``."""
        return (
            ClubRosterYear.query.filter(
                ClubRosterYear.club_id == club_id,
                ClubRosterYear.is_active.is_(True),
                ClubRosterYear.starts_on <= now,
                ClubRosterYear.ends_on >= now,
            )
            .order_by(ClubRosterYear.starts_on.desc())
            .first()
        )

    @staticmethod
    def find_latest_active_year(club_id: int) -> Optional[ClubRosterYear]:
        return (
            ClubRosterYear.query.filter(
                ClubRosterYear.club_id == club_id,
                ClubRosterYear.is_active.is_(True),
            )
            .order_by(ClubRosterYear.starts_on.desc())
            .first()
        )

    @staticmethod
    def find_year_for_club(year_id: int, club_id: int) -> Optional[ClubRosterYear]:
        return ClubRosterYear.query.filter_by(id=year_id, club_id=club_id).first()

    @staticmethod
    def find_year_by_label(club_id: int, year_label: str) -> Optional[ClubRosterYear]:
        return ClubRosterYear.query.filter_by(club_id=club_id, year_label=year_label).first()

    @staticmethod
    def deactivate_years(club_id: int) -> int:
        return ClubRosterYear.query.filter_by(club_id=club_id, is_active=True).update(
            {"is_active": False}, synchronize_session="fetch"
        )

    @staticmethod
    def create_year(attrs) -> ClubRosterYear:
        year = ClubRosterYear(**attrs)
        db.session.add(year)
        db.session.flush()
        return year

    @staticmethod
    def get_active_members(roster_year_id: int) -> List[RosterMember]:
        return (
            RosterMember.query.filter_by(club_roster_year_id=roster_year_id, is_active=True)
            .order_by(RosterMember.last_name.asc(), RosterMember.first_name.asc())
            .all()
        )

    @staticmethod
    def find_member(roster_member_id: int) -> Optional[RosterMember]:
        return RosterMember.query.filter_by(id=roster_member_id).first()

    @staticmethod
    def create_member(member: RosterMember) -> RosterMember:
        db.session.add(member)
        db.session.flush()
        return member

    @staticmethod
    def find_completed_member_ids(honor_code: str, roster_member_ids: List[int]) -> set:
        rows = (
            MemberRequirement.query.filter(
                MemberRequirement.honor_code == honor_code,
                MemberRequirement.roster_member_id.in_(roster_member_ids),
            )
            .all()
        )
        return {row.roster_member_id for row in rows}

    @staticmethod
    def add_member_requirement(attrs) -> MemberRequirement:
        requirement = MemberRequirement(**attrs)
        db.session.add(requirement)
        return requirement

    @staticmethod
    def count_clubs() -> int:
        return Club.query.count()

    @staticmethod
    def count_active_members() -> int:
        """Active members of active roster years, across every club."""
        return (
            RosterMember.query.join(ClubRosterYear, RosterMember.club_roster_year_id == ClubRosterYear.id)
            .filter(RosterMember.is_active.is_(True), ClubRosterYear.is_active.is_(True))
            .count()
        )

    @staticmethod
    def find_linked_member_ids(user_id: int) -> List[int]:
        # A student or parent account is linked through the requirements recorded under it
        rows = (
            db.session.query(MemberRequirement.roster_member_id)
            .filter(MemberRequirement.user_id == user_id)
            .distinct()
            .all()
        )
        return sorted(row[0] for row in rows)

    @staticmethod
    def get_requirements_for_members(roster_member_ids: List[int]) -> List[MemberRequirement]:
        if not roster_member_ids:
            return []
        return (
            MemberRequirement.query.filter(MemberRequirement.roster_member_id.in_(roster_member_ids))
            .order_by(MemberRequirement.completed_at.desc(), MemberRequirement.honor_code.asc())
            .all()
        )
