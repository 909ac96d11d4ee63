from clubhub.models import Club, ClubMembership, User
from clubhub.models.enums import UserRole
from flask_jwt_extended import create_access_token
from clubhub.repositories import ClassRepository, RosterRepository, UserRepository
from clubhub.exceptions import NotFoundError, UnauthorizedError, ValidationError
from clubhub.extensions import db
from datetime import datetime, timedelta, timezone
import logging

logger = logging.getLogger(__name__)


class UserService:
    @staticmethod
    def require_role(user_id, role: UserRole, message=None) -> User:
        """Loads the acting user and raises a generic 403 unless they hold ``role``."""
        user = UserRepository.find_by_id(user_id)
        if not user or user.role != role:
            logger.warning(f"User {user_id} denied, {role.value} required")
            raise UnauthorizedError(message)
        return user

    @staticmethod
    def require_super_admin(user_id, message="Only super admins can perform this action.") -> User:
        return UserService.require_role(user_id, UserRole.SUPER_ADMIN, message)

    @staticmethod
    def get_director_club_id(user_id, message="Only club directors can perform this action.") -> int:
        UserService.require_role(user_id, UserRole.CLUB_DIRECTOR, message)

        membership = UserRepository.find_primary_membership(int(user_id))
        if not membership:
            raise NotFoundError("No club membership was found for this director.")
        return membership.club_id

    @staticmethod
    def create_user(user_data, club: Club = None, is_primary=True) -> User:
        """Creates a user (and optionally a club membership). Used by the seed script."""
        email = (user_data.get("email") or "").strip().lower()
        if not email:
            raise ValidationError("Email is required.")
        if UserRepository.find_by_email(email):
            raise ValidationError("User already exists")

        try:
            role = UserRole[str(user_data["role"]).upper()]
        except KeyError:
            raise ValidationError("Invalid role value")

        try:
            user = UserRepository.create(
                User(
                    email=email,
                    first_name=user_data["first_name"],
                    last_name=user_data["last_name"],
                    role=role,
                )
            )
            if club is not None:
                db.session.add(ClubMembership(club_id=club.id, user_id=user.id, is_primary=is_primary))
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(f"User created successfully: {user.email}")
        return user

    @staticmethod
    def issue_token(user: User, expires_days=1) -> str:
        return create_access_token(identity=str(user.id), expires_delta=timedelta(days=expires_days))

    @staticmethod
    def get_student_portal(user_id, now=None):
        """
        Completed honors and upcoming class schedule of the roster members
        linked to a student or parent account.
        """
        UserService.require_role(
            user_id, UserRole.STUDENT_PARENT, "Only students and parents can access the portal."
        )
        now = now or datetime.now(timezone.utc)

        member_ids = RosterRepository.find_linked_member_ids(int(user_id))
        if not member_ids:
            return {"completed_honors": [], "schedule": []}

        requirements = RosterRepository.get_requirements_for_members(member_ids)
        titles = ClassRepository.get_catalog_titles({r.honor_code.strip().upper() for r in requirements})
        enrollments = ClassRepository.get_upcoming_enrollments_for_members(member_ids, now)

        return {
            "completed_honors": [
                {
                    "id": requirement.id,
                    "honor_code": requirement.honor_code,
                    "honor_title": titles.get(requirement.honor_code.strip().upper(), requirement.honor_code),
                    "completed_at": requirement.completed_at.isoformat() if requirement.completed_at else None,
                    "roster_member_name": requirement.roster_member.full_name,
                }
                for requirement in requirements
            ],
            "schedule": [
                {
                    "enrollment_id": enrollment.id,
                    "event_name": enrollment.offering.event.name,
                    "class_title": enrollment.offering.class_catalog.title,
                    "starts_at": enrollment.offering.starts_at.isoformat(),
                    "ends_at": enrollment.offering.ends_at.isoformat() if enrollment.offering.ends_at else None,
                    "location": enrollment.offering.location,
                    "roster_member_name": enrollment.roster_member.full_name,
                }
                for enrollment in enrollments
            ],
        }
