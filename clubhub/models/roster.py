from clubhub.extensions import db
from .enums import Gender, MemberRole, RolloverStatus


class ClubRosterYear(db.Model):
    __tablename__ = "club_roster_years"

    id = db.Column(db.Integer, primary_key=True)
    club_id = db.Column(db.Integer, db.ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    year_label = db.Column(db.String(20), nullable=False)
    starts_on = db.Column(db.TIMESTAMP(timezone=True), nullable=False)
    ends_on = db.Column(db.TIMESTAMP(timezone=True), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    copied_from_year_id = db.Column(db.Integer, db.ForeignKey("club_roster_years.id"), nullable=True)
    created_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now())

    club = db.relationship("Club", back_populates="roster_years")
    members = db.relationship("RosterMember", back_populates="roster_year", lazy=True)

    __table_args__ = (db.UniqueConstraint("club_id", "year_label", name="uq_club_year_label"),)

    def to_dict(self):
        return {
            "id": self.id,
            "club_id": self.club_id,
            "year_label": self.year_label,
            "starts_on": self.starts_on.isoformat() if self.starts_on else None,
            "ends_on": self.ends_on.isoformat() if self.ends_on else None,
            "is_active": self.is_active,
            "copied_from_year_id": self.copied_from_year_id,
        }


class RosterMember(db.Model):
    __tablename__ = "roster_members"

    id = db.Column(db.Integer, primary_key=True)
    club_roster_year_id = db.Column(
        db.Integer, db.ForeignKey("club_roster_years.id", ondelete="CASCADE"), nullable=False
    )
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    date_of_birth = db.Column(db.Date, nullable=True)
    age_at_start = db.Column(db.Integer, nullable=True)  # precomputed at roster-year start
    gender = db.Column(db.Enum(Gender), nullable=True)
    member_role = db.Column(db.Enum(MemberRole), nullable=False)
    medical_flags = db.Column(db.Text, nullable=True)
    dietary_restrictions = db.Column(db.Text, nullable=True)
    is_first_time = db.Column(db.Boolean, nullable=False, default=False)
    is_medical_personnel = db.Column(db.Boolean, nullable=False, default=False)
    master_guide = db.Column(db.Boolean, nullable=False, default=False)
    emergency_contact_name = db.Column(db.String(200), nullable=True)
    emergency_contact_phone = db.Column(db.String(50), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    rollover_status = db.Column(db.Enum(RolloverStatus), nullable=False, default=RolloverStatus.NEW)
    created_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now())

    roster_year = db.relationship("ClubRosterYear", back_populates="members")
    completed_requirements = db.relationship("MemberRequirement", back_populates="roster_member", lazy=True)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def completed_honor_codes(self):
        return {
            requirement.honor_code.strip().upper()
            for requirement in self.completed_requirements
            if requirement.honor_code
        }

    def to_dict(self):
        return {
            "id": self.id,
            "club_roster_year_id": self.club_roster_year_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "age_at_start": self.age_at_start,
            "member_role": self.member_role.value if self.member_role else None,
            "master_guide": self.master_guide,
            "is_active": self.is_active,
            "rollover_status": self.rollover_status.value if self.rollover_status else None,
        }

    def __repr__(self):
        return f"<RosterMember id={self.id} name='{self.full_name}' role={self.member_role}>"


class MemberRequirement(db.Model):
    __tablename__ = "member_requirements"

    id = db.Column(db.Integer, primary_key=True)
    roster_member_id = db.Column(
        db.Integer, db.ForeignKey("roster_members.id", ondelete="CASCADE"), nullable=False
    )
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    honor_code = db.Column(db.String(100), nullable=False, index=True)
    completed_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now())
    verified_by = db.Column(db.String(50), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    roster_member = db.relationship("RosterMember", back_populates="completed_requirements")

    def __repr__(self):
        return f"<MemberRequirement roster_member_id={self.roster_member_id} honor_code={self.honor_code}>"
