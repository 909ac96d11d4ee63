from typing import List, Optional
from clubhub.extensions import db
from clubhub.models import Event, EventFormField, EventRegistration


class EventRepository:
    @staticmethod
    def get_events():
        return Event.query.order_by(Event.starts_at.asc())

    @staticmethod
    def get_event(event_id: int) -> Optional[Event]:
        return Event.query.filter_by(id=event_id).first()

    @staticmethod
    def find_by_slug(slug: str) -> Optional[Event]:
        return Event.query.filter_by(slug=slug).first()

    @staticmethod
    def create_event(attrs) -> Event:
        """Adds the event to the current transaction; the caller commits."""
        event = Event(**attrs)
        db.session.add(event)
        db.session.flush()
        return event

    @staticmethod
    def create_field(attrs) -> EventFormField:
        field = EventFormField(**attrs)
        db.session.add(field)
        db.session.flush()
        return field

    @staticmethod
    def get_required_fields(event_id: int) -> List[EventFormField]:
        return (
            EventFormField.query.filter_by(event_id=event_id, is_required=True)
            .order_by(EventFormField.sort_order.asc())
            .all()
        )

    @staticmethod
    def get_upcoming_with_registration_counts(now, limit: int = 6):
        """(event, registration count) pairs for events that have not ended, soonest first."""
        return (
            db.session.query(Event, db.func.count(EventRegistration.id))
            .outerjoin(EventRegistration, EventRegistration.event_id == Event.id)
            .filter(Event.ends_at >= now)
            .group_by(Event.id)
            .order_by(Event.starts_at.asc())
            .limit(limit)
            .all()
        )
