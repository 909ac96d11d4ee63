from clubhub.extensions import db
from .enums import RegistrationStatus


class EventRegistration(db.Model):
    __tablename__ = "event_registrations"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    club_id = db.Column(db.Integer, db.ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    registration_code = db.Column(db.String(40), unique=True, nullable=False)
    status = db.Column(db.Enum(RegistrationStatus), nullable=False, default=RegistrationStatus.DRAFT)
    submitted_at = db.Column(db.TIMESTAMP(timezone=True), nullable=True)
    approved_at = db.Column(db.TIMESTAMP(timezone=True), nullable=True)
    created_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.TIMESTAMP(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    event = db.relationship("Event", back_populates="registrations")
    club = db.relationship("Club")
    attendees = db.relationship(
        "RegistrationAttendee",
        back_populates="registration",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="RegistrationAttendee.id",
    )
    form_responses = db.relationship(
        "EventFormResponse",
        back_populates="registration",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="EventFormResponse.id",
    )

    # Makes draft saves an upsert on (event, club)
    __table_args__ = (db.UniqueConstraint("event_id", "club_id", name="uq_event_club_registration"),)

    def to_dict(self):
        return {
            "id": self.id,
            "event_id": self.event_id,
            "club_id": self.club_id,
            "registration_code": self.registration_code,
            "status": self.status.value if self.status else None,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "attendee_ids": [attendee.roster_member_id for attendee in self.attendees],
            "responses": [response.to_dict() for response in self.form_responses],
        }


class RegistrationAttendee(db.Model):
    __tablename__ = "registration_attendees"

    id = db.Column(db.Integer, primary_key=True)
    event_registration_id = db.Column(
        db.Integer, db.ForeignKey("event_registrations.id", ondelete="CASCADE"), nullable=False
    )
    roster_member_id = db.Column(db.Integer, db.ForeignKey("roster_members.id"), nullable=False)
    checked_in_at = db.Column(db.TIMESTAMP(timezone=True), nullable=True)
    created_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now())

    registration = db.relationship("EventRegistration", back_populates="attendees")
    roster_member = db.relationship("RosterMember")

    __table_args__ = (
        db.UniqueConstraint("event_registration_id", "roster_member_id", name="uq_registration_attendee"),
    )

    def __repr__(self):
        return (
            f"RegistrationAttendee("
            f"id={self.id}, "
            f"event_registration_id={self.event_registration_id}, "
            f"roster_member_id={self.roster_member_id}, "
            f"checked_in_at={self.checked_in_at}"
            f")"
        )


class EventFormResponse(db.Model):
    __tablename__ = "event_form_responses"

    id = db.Column(db.Integer, primary_key=True)
    event_registration_id = db.Column(
        db.Integer, db.ForeignKey("event_registrations.id", ondelete="CASCADE"), nullable=False
    )
    event_form_field_id = db.Column(
        db.Integer, db.ForeignKey("event_form_fields.id", ondelete="CASCADE"), nullable=False
    )
    # Null for registration-scoped answers, a roster member id for attendee-scoped ones
    attendee_id = db.Column(db.Integer, db.ForeignKey("roster_members.id"), nullable=True)
    value = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now())

    registration = db.relationship("EventRegistration", back_populates="form_responses")
    field = db.relationship("EventFormField")

    def to_dict(self):
        return {
            "field_id": self.event_form_field_id,
            "attendee_id": self.attendee_id,
            "value": self.value,
        }
