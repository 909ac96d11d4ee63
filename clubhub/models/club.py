from clubhub.extensions import db


class Club(db.Model):
    __tablename__ = "clubs"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    code = db.Column(db.String(50), unique=True, nullable=False)
    created_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now())

    memberships = db.relationship("ClubMembership", back_populates="club", lazy=True)
    roster_years = db.relationship(
        "ClubRosterYear",
        back_populates="club",
        lazy=True,
        order_by="ClubRosterYear.starts_on.desc()",
    )

    def to_dict(self):
        return {"id": self.id, "name": self.name, "code": self.code}


class ClubMembership(db.Model):
    __tablename__ = "club_memberships"

    id = db.Column(db.Integer, primary_key=True)
    club_id = db.Column(db.Integer, db.ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    is_primary = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now())

    club = db.relationship("Club", back_populates="memberships")
    user = db.relationship("User", back_populates="memberships")

    __table_args__ = (db.UniqueConstraint("club_id", "user_id", name="uq_club_membership"),)

    def __repr__(self):
        return f"<ClubMembership club_id={self.club_id} user_id={self.user_id} primary={self.is_primary}>"
