"""Reconciles a club's submitted registration payload against the event schema."""
import json
import math
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from clubhub.exceptions import InvalidRegistrationPayload
from clubhub.models.enums import FormFieldType

TRUTHY_STRINGS = {"true", "yes", "y", "on", "1"}
FALSY_STRINGS = {"false", "no", "n", "off", "0"}

logger = logging.getLogger(__name__)


@dataclass
class AssembledResponse:
    field_id: Any
    attendee_id: Any
    value: Any

    def to_dict(self):
        return {"fieldId": self.field_id, "attendeeId": self.attendee_id, "value": self.value}


@dataclass
class AssembledRegistration:
    attendee_ids: List[Any] = field(default_factory=list)
    responses: List[AssembledResponse] = field(default_factory=list)


def coerce_id(value):
    """Ids arrive as JSON strings or numbers; numeric strings become ints."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return None
        return int(trimmed) if trimmed.isdigit() else trimmed
    return None


def parse_registration_payload(raw_payload) -> dict:
    if isinstance(raw_payload, (str, bytes)):
        if not raw_payload.strip():
            raise InvalidRegistrationPayload("Registration payload is required.")
        try:
            raw_payload = json.loads(raw_payload)
        except ValueError:
            raise InvalidRegistrationPayload("Registration payload is invalid JSON.")

    if raw_payload is None:
        raise InvalidRegistrationPayload("Registration payload is required.")
    if not isinstance(raw_payload, dict):
        raise InvalidRegistrationPayload("Registration payload is malformed.")

    attendee_ids = raw_payload.get("attendeeIds")
    responses = raw_payload.get("responses")
    return {
        "attendeeIds": attendee_ids if isinstance(attendee_ids, list) else [],
        "responses": responses if isinstance(responses, list) else [],
    }


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _string_list(value) -> Optional[List[str]]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return None
    items = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, (str, int, float)):
            return None
        text = str(item).strip()
        if text:
            items.append(text)
    return items or None


def normalize_response_value(value, field_type: Optional[FormFieldType] = None):
    """
    Coerce a submitted answer into the variant its field type declares.

    Returns None when the value is "no answer" (null, empty string, empty
    list) or does not fit the declared type.
    """
    if _is_blank(value):
        return None

    if field_type is None:
        return value

    if field_type == FormFieldType.SHORT_TEXT:
        if isinstance(value, str):
            return value.strip()
        if isinstance(value, (bool, int, float)):
            return str(value)
        return None

    if field_type == FormFieldType.NUMBER:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            # NaN and infinities have no JSON encoding
            return value if math.isfinite(value) else None
        if isinstance(value, str):
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                pass
            try:
                parsed = float(text)
            except ValueError:
                return None
            return parsed if math.isfinite(parsed) else None
        return None

    if field_type == FormFieldType.BOOLEAN:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            text = value.strip().lower()
            if text in TRUTHY_STRINGS:
                return True
            if text in FALSY_STRINGS:
                return False
        return None

    if field_type in (FormFieldType.MULTI_SELECT, FormFieldType.ROSTER_MULTI_SELECT):
        return _string_list(value)

    if field_type == FormFieldType.ROSTER_SELECT:
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            return None
        return str(value).strip() or None

    # FIELD_GROUP and anything unknown cannot carry an answer
    return None


def assemble(raw_payload, valid_attendee_ids, valid_field_ids, field_types=None) -> AssembledRegistration:
    """
    Filter a submitted payload down to what this club may persist.

    - attendee ids are deduplicated (first occurrence wins) and limited to
      ``valid_attendee_ids``
    - responses for unknown fields are dropped
    - attendee-scoped responses survive only if their attendee is selected
    - blank values are dropped; with ``field_types`` (field id -> type) values
      are also coerced to their declared type

    Nothing here raises for tampered references; they are silently dropped.
    """
    payload = parse_registration_payload(raw_payload)
    valid_attendee_ids = set(valid_attendee_ids)
    valid_field_ids = set(valid_field_ids)
    field_types = field_types or {}

    attendee_ids = []
    for raw_id in payload["attendeeIds"]:
        attendee_id = coerce_id(raw_id)
        if attendee_id is None or attendee_id in attendee_ids:
            continue
        if attendee_id not in valid_attendee_ids:
            logger.warning(f"Dropping attendee {attendee_id!r} not on the club roster")
            continue
        attendee_ids.append(attendee_id)
    selected = set(attendee_ids)

    by_target = {}
    for response in payload["responses"]:
        if not isinstance(response, dict):
            continue
        field_id = coerce_id(response.get("fieldId"))
        if field_id is None or field_id not in valid_field_ids:
            continue

        attendee_id = None
        if response.get("attendeeId") is not None:
            attendee_id = coerce_id(response.get("attendeeId"))
            if attendee_id is None or attendee_id not in selected:
                continue

        value = normalize_response_value(response.get("value"), field_types.get(field_id))
        if value is None:
            by_target.pop((field_id, attendee_id), None)
            continue

        # A later answer for the same field and attendee replaces an earlier one
        by_target[(field_id, attendee_id)] = AssembledResponse(field_id, attendee_id, value)

    return AssembledRegistration(attendee_ids=attendee_ids, responses=list(by_target.values()))
