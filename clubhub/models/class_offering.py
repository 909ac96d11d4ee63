from clubhub.extensions import db


class EventClassOffering(db.Model):
    __tablename__ = "event_class_offerings"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    class_catalog_id = db.Column(db.Integer, db.ForeignKey("class_catalog.id"), nullable=False)
    instructor_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    capacity = db.Column(db.Integer, nullable=False, default=0)
    day_index = db.Column(db.Integer, nullable=False, default=0)
    starts_at = db.Column(db.TIMESTAMP(timezone=True), nullable=True)
    ends_at = db.Column(db.TIMESTAMP(timezone=True), nullable=True)
    location = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now())

    event = db.relationship("Event", back_populates="class_offerings")
    class_catalog = db.relationship("ClassCatalog")
    instructor = db.relationship("User")
    enrollments = db.relationship("ClassEnrollment", back_populates="offering", lazy=True)

    __table_args__ = (db.CheckConstraint("capacity >= 0", name="ck_offering_capacity"),)

    def to_dict(self):
        return {
            "id": self.id,
            "event_id": self.event_id,
            "class_catalog_id": self.class_catalog_id,
            "code": self.class_catalog.code if self.class_catalog else None,
            "title": self.class_catalog.title if self.class_catalog else None,
            "instructor_user_id": self.instructor_user_id,
            "capacity": self.capacity,
            "day_index": self.day_index,
            "starts_at": self.starts_at.isoformat() if self.starts_at else None,
            "ends_at": self.ends_at.isoformat() if self.ends_at else None,
            "location": self.location,
        }


class ClassEnrollment(db.Model):
    __tablename__ = "class_enrollments"

    id = db.Column(db.Integer, primary_key=True)
    event_class_offering_id = db.Column(
        db.Integer, db.ForeignKey("event_class_offerings.id", ondelete="CASCADE"), nullable=False
    )
    roster_member_id = db.Column(db.Integer, db.ForeignKey("roster_members.id"), nullable=False)
    enrolled_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now())
    attended_at = db.Column(db.TIMESTAMP(timezone=True), nullable=True)

    offering = db.relationship("EventClassOffering", back_populates="enrollments")
    roster_member = db.relationship("RosterMember", backref=db.backref("class_enrollments", lazy=True))

    # One seat per member per offering
    __table_args__ = (
        db.UniqueConstraint("event_class_offering_id", "roster_member_id", name="uq_offering_member_enrollment"),
    )

    def __repr__(self):
        return f"<ClassEnrollment offering_id={self.event_class_offering_id} roster_member_id={self.roster_member_id}>"
