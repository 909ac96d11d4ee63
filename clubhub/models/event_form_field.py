from clubhub.extensions import db
from .enums import FormFieldType


class EventFormField(db.Model):
    __tablename__ = "event_form_fields"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    # Non-owning back-reference to a FIELD_GROUP field of the same event
    parent_field_id = db.Column(db.Integer, db.ForeignKey("event_form_fields.id"), nullable=True)
    key = db.Column(db.String(100), nullable=False)
    label = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    type = db.Column(db.Enum(FormFieldType), nullable=False)
    options = db.Column(db.JSON, nullable=True)
    is_required = db.Column(db.Boolean, nullable=False, default=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now())

    event = db.relationship("Event", back_populates="dynamic_fields")
    parent = db.relationship("EventFormField", remote_side=[id], backref="children")

    __table_args__ = (db.UniqueConstraint("event_id", "key", name="uq_event_field_key"),)

    def to_dict(self):
        return {
            "id": self.id,
            "event_id": self.event_id,
            "parent_field_id": self.parent_field_id,
            "key": self.key,
            "label": self.label,
            "description": self.description,
            "type": self.type.value if self.type else None,
            "options": self.options,
            "is_required": self.is_required,
            "sort_order": self.sort_order,
        }

    def __repr__(self):
        return f"<EventFormField id={self.id} key={self.key} type={self.type}>"
