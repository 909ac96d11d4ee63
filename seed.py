#!/usr/bin/env python3
"""Seed a development database and print an access token for each seeded user."""
from datetime import datetime, timezone
from clubhub import create_app
from clubhub.extensions import db
from clubhub.models import (
    ClassCatalog,
    ClassRequirement,
    Club,
    ClubRosterYear,
    RosterMember,
)
from clubhub.models.enums import MemberRole, RequirementType, RolloverStatus
from clubhub.repositories import ClassRepository, UserRepository
from clubhub.services.user_service import UserService

SAMPLE_CATALOG = [
    ("HONOR-KNOTS", "Knot Tying", [{"requirement_type": RequirementType.MIN_AGE, "min_age": 10}]),
    ("HONOR-CAMPING", "Camping Skills I", [{"requirement_type": RequirementType.MAX_AGE, "max_age": 12}]),
    (
        "HONOR-CAMPING-ADV",
        "Camping Skills II",
        [{"requirement_type": RequirementType.COMPLETED_HONOR, "required_honor_code": "HONOR-CAMPING"}],
    ),
    (
        "LEADERSHIP",
        "Leadership Training",
        [
            {"requirement_type": RequirementType.MEMBER_ROLE, "required_member_role": MemberRole.TLT},
            {"requirement_type": RequirementType.MASTER_GUIDE, "required_master_guide": True},
        ],
    ),
]


def seed_user(email, first_name, last_name, role, club=None):
    user = UserRepository.find_by_email(email)
    if user:
        return user
    return UserService.create_user(
        {"email": email, "first_name": first_name, "last_name": last_name, "role": role},
        club=club,
    )


def seed():
    app = create_app()
    with app.app_context():
        db.create_all()

        for code, title, requirements in SAMPLE_CATALOG:
            if ClassRepository.find_catalog_by_code(code):
                continue
            item = ClassCatalog(code=code, title=title, active=True)
            for attrs in requirements:
                item.requirements.append(ClassRequirement(**attrs))
            db.session.add(item)
        db.session.commit()

        club = Club.query.filter_by(code="DEMO").first()
        if not club:
            club = Club(name="Demo Pathfinder Club", code="DEMO")
            db.session.add(club)
            db.session.commit()

        year_label = str(datetime.now(timezone.utc).year)
        if not ClubRosterYear.query.filter_by(club_id=club.id, year_label=year_label).first():
            year = ClubRosterYear(
                club_id=club.id,
                year_label=year_label,
                starts_on=datetime(int(year_label), 1, 1, tzinfo=timezone.utc),
                ends_on=datetime(int(year_label), 12, 31, 23, 59, 59, tzinfo=timezone.utc),
                is_active=True,
            )
            db.session.add(year)
            db.session.flush()
            for first_name, last_name, age, role in [
                ("Ava", "Lopez", 8, MemberRole.ADVENTURER),
                ("Ben", "Lopez", 12, MemberRole.PATHFINDER),
                ("Cara", "Nguyen", 16, MemberRole.TLT),
            ]:
                db.session.add(
                    RosterMember(
                        club_roster_year_id=year.id,
                        first_name=first_name,
                        last_name=last_name,
                        age_at_start=age,
                        member_role=role,
                        rollover_status=RolloverStatus.NEW,
                    )
                )
            db.session.commit()

        users = [
            seed_user("admin@example.com", "Admin", "User", "SUPER_ADMIN"),
            seed_user("director@example.com", "Dana", "Director", "CLUB_DIRECTOR", club=club),
            seed_user("teacher@example.com", "Terry", "Teacher", "STAFF_TEACHER"),
        ]

        for user in users:
            print(f"{user.role.value:<14} {user.email:<24} {UserService.issue_token(user, expires_days=30)}")


if __name__ == "__main__":
    seed()
