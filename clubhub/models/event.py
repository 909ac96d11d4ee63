from clubhub.extensions import db


class Event(db.Model):
    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(80), unique=True, nullable=False)
    starts_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False)
    ends_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False)
    registration_opens_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False)
    registration_closes_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False)
    location_name = db.Column(db.String(255), nullable=True)
    location_address = db.Column(db.String(255), nullable=True)
    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(
        db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.TIMESTAMP(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    dynamic_fields = db.relationship(
        "EventFormField",
        back_populates="event",
        lazy=True,
        order_by="EventFormField.sort_order",
        cascade="all, delete-orphan",
    )
    class_offerings = db.relationship("EventClassOffering", back_populates="event", lazy=True)
    registrations = db.relationship("EventRegistration", back_populates="event", lazy=True)

    def to_dict(self, include_fields=False):
        data = {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "starts_at": self.starts_at.isoformat() if self.starts_at else None,
            "ends_at": self.ends_at.isoformat() if self.ends_at else None,
            "registration_opens_at": (
                self.registration_opens_at.isoformat()
                if self.registration_opens_at
                else None
            ),
            "registration_closes_at": (
                self.registration_closes_at.isoformat()
                if self.registration_closes_at
                else None
            ),
            "location_name": self.location_name,
            "location_address": self.location_address,
        }
        if include_fields:
            data["dynamic_fields"] = [field.to_dict() for field in self.dynamic_fields]
        return data
