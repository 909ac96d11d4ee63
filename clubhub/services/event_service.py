from datetime import datetime, timezone
import re
from flask import current_app
from clubhub.extensions import db
from clubhub.repositories.event_repository import EventRepository
from clubhub.repositories.class_repository import ClassRepository
from clubhub.services.user_service import UserService
from clubhub.services.field_schema import build_schema, root_fields
from clubhub.exceptions import (
    MissingFieldsError,
    NotFoundError,
    ValidationError,
)
from clubhub.models import Event
from typing import List


def parse_datetime(value, label):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} is required.")
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"{label} is invalid.")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def optional_text(value):
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def slugify_name(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower().strip())
    return slug.strip("-")[:50]


class EventService:
    @staticmethod
    def get_events() -> List[Event]:
        return EventRepository.get_events().all()

    @staticmethod
    def get_event(event_id) -> Event:
        event = EventRepository.get_event(event_id)
        if not event:
            raise NotFoundError("Event not found.")
        return event

    @staticmethod
    def build_unique_slug(name: str, now=None) -> str:
        now = now or datetime.now(timezone.utc)
        millis = int(now.timestamp() * 1000)
        base = slugify_name(name)
        if not base:
            return f"event-{millis}"
        if EventRepository.find_by_slug(base) is None:
            return base
        return f"{base}-{millis}"

    @staticmethod
    def create_event_with_fields(data, user_id) -> Event:
        """
        Create an event together with its dynamic registration fields.

        The whole field batch is validated before anything is written. Root
        fields are inserted first so children can be stored with the durable
        id of their parent group. Either everything is persisted or nothing.
        """
        user = UserService.require_super_admin(user_id, "Only super admins can create events.")

        required_fields = [
            "name",
            "starts_at",
            "ends_at",
            "registration_opens_at",
            "registration_closes_at",
        ]
        missing = [f for f in required_fields if not data.get(f)]
        if missing:
            raise MissingFieldsError(missing)

        name = optional_text(data["name"])
        if not name:
            raise ValidationError("Event name is required.")
        starts_at = parse_datetime(data["starts_at"], "Event start date")
        ends_at = parse_datetime(data["ends_at"], "Event end date")
        opens_at = parse_datetime(data["registration_opens_at"], "Registration open date")
        closes_at = parse_datetime(data["registration_closes_at"], "Registration close date")

        if ends_at <= starts_at:
            raise ValidationError("Event end date must be after start date.")
        if closes_at <= opens_at:
            raise ValidationError("Registration close date must be after registration open date.")

        fields = build_schema(data.get("dynamic_fields"))

        try:
            event = EventRepository.create_event(
                {
                    "name": name,
                    "slug": EventService.build_unique_slug(name),
                    "starts_at": starts_at,
                    "ends_at": ends_at,
                    "registration_opens_at": opens_at,
                    "registration_closes_at": closes_at,
                    "location_name": optional_text(data.get("location_name")),
                    "location_address": optional_text(data.get("location_address")),
                    "created_by_user_id": user.id,
                }
            )

            id_map = {}
            roots = root_fields(fields)
            for field in roots + [f for f in fields if not f.is_root]:
                parent_id = None
                if not field.is_root:
                    parent_id = id_map.get(field.parent_field_id)
                    if parent_id is None:
                        raise ValidationError(f"Could not resolve parent for field: {field.key}")

                created = EventRepository.create_field(
                    {
                        "event_id": event.id,
                        "parent_field_id": parent_id,
                        "key": field.key,
                        "label": field.label,
                        "description": field.description,
                        "type": field.type,
                        "options": field.options,
                        "is_required": field.is_required,
                        "sort_order": field.sort_order,
                    }
                )
                id_map[field.id] = created.id

            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(
            f"Event {event.id} ({event.slug}) created by user {user.id} with {len(fields)} dynamic fields"
        )
        return event

    @staticmethod
    def create_class_offering(event_id, data, user_id):
        UserService.require_super_admin(user_id)
        event = EventService.get_event(event_id)

        missing = [f for f in ["class_catalog_id", "capacity"] if data.get(f) is None]
        if missing:
            raise MissingFieldsError(missing)

        catalog_item = ClassRepository.get_catalog_item(data["class_catalog_id"])
        if not catalog_item:
            raise NotFoundError("Class catalog item not found.")

        try:
            capacity = int(data["capacity"])
            day_index = int(data.get("day_index") or 0)
        except (TypeError, ValueError):
            raise ValidationError("Capacity and day index must be whole numbers.")
        if capacity < 0:
            raise ValidationError("Capacity cannot be negative.")

        starts_at = parse_datetime(data["starts_at"], "Class start time") if data.get("starts_at") else None
        ends_at = parse_datetime(data["ends_at"], "Class end time") if data.get("ends_at") else None

        try:
            offering = ClassRepository.create_offering(
                {
                    "event_id": event.id,
                    "class_catalog_id": catalog_item.id,
                    "instructor_user_id": data.get("instructor_user_id"),
                    "capacity": capacity,
                    "day_index": day_index,
                    "starts_at": starts_at,
                    "ends_at": ends_at,
                    "location": optional_text(data.get("location")),
                }
            )
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(
            f"Offering {offering.id} of {catalog_item.code} added to event {event.id} (capacity {capacity})"
        )
        return offering
