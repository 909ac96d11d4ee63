from typing import Optional
from clubhub.extensions import db
from clubhub.models import ClubMembership, User


class UserRepository:
    @staticmethod
    def create(user: User) -> User:
        db.session.add(user)
        db.session.flush()
        return user

    @staticmethod
    def find_by_email(email):
        return User.query.filter_by(email=email).first()

    @staticmethod
    def find_by_id(user_id) -> Optional[User]:
        return db.session.get(User, int(user_id)) if user_id is not None else None

    @staticmethod
    def find_primary_membership(user_id: int) -> Optional[ClubMembership]:
        """A director may belong to several clubs; the primary membership wins."""
        return (
            ClubMembership.query.filter_by(user_id=user_id)
            .order_by(ClubMembership.is_primary.desc(), ClubMembership.id.asc())
            .first()
        )
