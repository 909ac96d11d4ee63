from datetime import datetime, timezone

import pytest

from clubhub.exceptions import (
    InvalidParentType,
    MissingFieldsError,
    UnauthorizedError,
    ValidationError,
)
from clubhub.models import ClassCatalog, Event, EventFormField
from clubhub.models.enums import RequirementType, UserRole
from clubhub.services.catalog_service import CatalogService
from clubhub.services.event_service import EventService, parse_datetime, slugify_name


def event_payload(**overrides):
    payload = {
        "name": "Spring Camporee",
        "starts_at": "2026-04-10T18:00:00Z",
        "ends_at": "2026-04-12T12:00:00Z",
        "registration_opens_at": "2026-01-01T00:00:00Z",
        "registration_closes_at": "2026-03-31T23:59:00Z",
        "location_name": "  Lake Camp  ",
        "dynamic_fields": [
            {"id": "tmp-child", "key": "shirt_size", "label": "Shirt size", "type": "SHORT_TEXT",
             "parentFieldId": "tmp-group", "isRequired": True},
            {"id": "tmp-group", "key": "logistics", "label": "Logistics", "type": "FIELD_GROUP",
             "isRequired": True},
            {"id": "tmp-duty", "key": "duty_first", "label": "First duty", "type": "MULTI_SELECT",
             "optionsJson": '["Setup", "Cleanup"]'},
        ],
    }
    payload.update(overrides)
    return payload


def test_create_event_maps_client_parent_ids_to_stored_ids(admin):
    event = EventService.create_event_with_fields(event_payload(), admin.id)

    fields = {field.key: field for field in EventFormField.query.filter_by(event_id=event.id)}
    assert set(fields) == {"shirt_size", "logistics", "duty_first"}
    assert fields["logistics"].parent_field_id is None
    assert fields["logistics"].is_required is False
    assert fields["shirt_size"].parent_field_id == fields["logistics"].id
    assert fields["shirt_size"].is_required is True
    assert fields["duty_first"].options == ["Setup", "Cleanup"]
    assert event.slug == "spring-camporee"
    assert event.location_name == "Lake Camp"


def test_second_event_with_same_name_gets_suffixed_slug(admin):
    EventService.create_event_with_fields(event_payload(dynamic_fields=[]), admin.id)
    second = EventService.create_event_with_fields(event_payload(dynamic_fields=[]), admin.id)

    assert second.slug.startswith("spring-camporee-")
    assert second.slug != "spring-camporee"


def test_invalid_schema_persists_nothing(admin):
    payload = event_payload(
        dynamic_fields=[
            {"id": "a", "key": "first", "label": "First", "type": "SHORT_TEXT"},
            {"id": "b", "key": "second", "label": "Second", "type": "SHORT_TEXT", "parentFieldId": "a"},
        ]
    )
    with pytest.raises(InvalidParentType):
        EventService.create_event_with_fields(payload, admin.id)
    assert Event.query.count() == 0
    assert EventFormField.query.count() == 0


def test_missing_and_inverted_dates(admin):
    with pytest.raises(MissingFieldsError) as exc:
        EventService.create_event_with_fields({"name": "Camporee"}, admin.id)
    assert exc.value.fields == ["starts_at", "ends_at", "registration_opens_at", "registration_closes_at"]

    with pytest.raises(ValidationError, match="Event end date must be after start date."):
        EventService.create_event_with_fields(event_payload(ends_at="2026-04-09T00:00:00Z"), admin.id)

    with pytest.raises(ValidationError, match="Registration close date is invalid."):
        EventService.create_event_with_fields(event_payload(registration_closes_at="soon"), admin.id)


def test_only_super_admins_create_events(factory, director):
    with pytest.raises(UnauthorizedError, match="Only super admins can create events."):
        EventService.create_event_with_fields(event_payload(), director.id)


def test_create_class_offering(factory, admin):
    event = factory.event(admin)
    item = factory.catalog_item()

    offering = EventService.create_class_offering(
        event.id, {"class_catalog_id": item.id, "capacity": "12", "location": "Hall A"}, admin.id
    )
    assert offering.capacity == 12
    assert offering.day_index == 0
    assert offering.to_dict()["code"] == "HONOR-KNOTS"

    with pytest.raises(ValidationError, match="Capacity cannot be negative."):
        EventService.create_class_offering(event.id, {"class_catalog_id": item.id, "capacity": -1}, admin.id)


def test_helpers():
    assert slugify_name("  Fall Camporee 2026! ") == "fall-camporee-2026"
    assert parse_datetime("2026-04-10T18:00:00", "Start") == datetime(2026, 4, 10, 18, tzinfo=timezone.utc)


def test_catalog_create_and_replace_requirement(admin):
    item = CatalogService.create_catalog_item(
        {"code": " honor-fire ", "title": "Fire Building", "requirement_type": "MIN_AGE", "min_age": "10"},
        admin.id,
    )
    assert item.code == "HONOR-FIRE"
    assert [r.requirement_type for r in item.requirements] == [RequirementType.MIN_AGE]
    assert item.requirements[0].min_age == 10

    with pytest.raises(ValidationError, match="already exists"):
        CatalogService.create_catalog_item({"code": "HONOR-FIRE", "title": "Again"}, admin.id)

    item = CatalogService.update_catalog_item(
        item.id,
        {"code": "HONOR-FIRE", "title": "Fire Building", "requirement_type": "MASTER_GUIDE",
         "required_master_guide": "true"},
        admin.id,
    )
    assert len(item.requirements) == 1
    assert item.requirements[0].requirement_type == RequirementType.MASTER_GUIDE
    assert item.requirements[0].required_master_guide is True

    item = CatalogService.update_catalog_item(
        item.id, {"code": "HONOR-FIRE", "title": "Fire Building", "requirement_type": "NONE"}, admin.id
    )
    assert item.requirements == []
    assert ClassCatalog.query.count() == 1


def test_create_event_route(client, auth_headers, factory, admin):
    response = client.post("/api/admin/events", json=event_payload(), headers=auth_headers(admin))
    assert response.status_code == 201
    body = response.get_json()
    assert body["slug"] == "spring-camporee"
    assert [f["key"] for f in body["dynamic_fields"]] == ["shirt_size", "logistics", "duty_first"]

    teacher = factory.user(UserRole.STAFF_TEACHER)
    response = client.post("/api/admin/events", json=event_payload(), headers=auth_headers(teacher))
    assert response.status_code == 403

    bad = event_payload(dynamic_fields=[{"id": "x", "key": "k", "label": "L", "type": "DATE"}])
    response = client.post("/api/admin/events", json=bad, headers=auth_headers(admin))
    assert response.status_code == 400
    assert "unsupported type" in response.get_json()["error"]

    response = client.post("/api/admin/events", json={"name": "Only name"}, headers=auth_headers(admin))
    assert response.status_code == 400
    assert response.get_json()["fields"] == [
        "starts_at", "ends_at", "registration_opens_at", "registration_closes_at"
    ]


def test_events_require_authentication(client):
    assert client.get("/api/events").status_code == 401
