"""Dynamic registration field schema: validation, normalization and scope classification."""
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from clubhub.exceptions import (
    DuplicateFieldId,
    DuplicateFieldKey,
    InvalidOptionsPayload,
    InvalidParentType,
    MissingFieldId,
    MissingFieldKey,
    MissingFieldLabel,
    NestedGroupNotSupported,
    UnknownParentField,
    UnsupportedFieldType,
    ValidationError,
)
from clubhub.models.enums import FormFieldType

ATTENDEE_KEY_PREFIXES = ("attendee_", "member_")
ATTENDEE_DESCRIPTION_MARKER = "[attendee]"
ATTENDEE_LIST_SENTINEL = "__ATTENDEE_LIST__"


@dataclass
class NormalizedField:
    id: str
    key: str
    label: str
    type: FormFieldType
    is_required: bool
    sort_order: int
    description: Optional[str] = None
    options: Any = None
    parent_field_id: Optional[str] = None

    @property
    def is_root(self):
        return self.parent_field_id is None


def _trimmed(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _parse_multi_select_options(raw, field_key: str) -> List[str]:
    message = (
        f'Dynamic field "{field_key}" requires optionsJson to be a JSON array of non-empty strings.'
    )
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except ValueError:
            raise InvalidOptionsPayload(message)
    else:
        parsed = raw

    if not isinstance(parsed, list) or len(parsed) == 0:
        raise InvalidOptionsPayload(message)

    normalized = []
    for option in parsed:
        if not isinstance(option, str) or not option.strip():
            raise InvalidOptionsPayload(message)
        normalized.append(option.strip())
    return normalized


def _normalize_field(candidate: Dict[str, Any], index: int) -> NormalizedField:
    position = index + 1
    field_id = _trimmed(candidate.get("id"))
    key = _trimmed(candidate.get("key"))
    label = _trimmed(candidate.get("label"))
    description = _trimmed(candidate.get("description"))
    raw_parent = candidate.get("parentFieldId")
    parent_field_id = _trimmed(raw_parent) if isinstance(raw_parent, (str, int)) else ""

    if not field_id:
        raise MissingFieldId(f"Dynamic field {position} is missing an id.")
    if not key:
        raise MissingFieldKey(f"Dynamic field {position} is missing a key.")
    if not label:
        raise MissingFieldLabel(f"Dynamic field {position} is missing a label.")

    try:
        field_type = FormFieldType(candidate.get("type"))
    except ValueError:
        raise UnsupportedFieldType(
            f"Dynamic field {position} has an unsupported type. Use SHORT_TEXT, NUMBER, "
            "MULTI_SELECT, BOOLEAN, ROSTER_SELECT, ROSTER_MULTI_SELECT, or FIELD_GROUP."
        )

    options = None
    if field_type == FormFieldType.MULTI_SELECT:
        raw_options = candidate.get("optionsJson")
        if raw_options is None:
            raw_options = candidate.get("options", "")
        options = _parse_multi_select_options(raw_options, key)

    return NormalizedField(
        id=field_id,
        key=key,
        label=label,
        description=description or None,
        type=field_type,
        options=options,
        # A group is a container, never an answerable field
        is_required=False if field_type == FormFieldType.FIELD_GROUP else bool(candidate.get("isRequired")),
        sort_order=index,
        parent_field_id=parent_field_id or None,
    )


def build_schema(raw_drafts) -> List[NormalizedField]:
    """
    Validate and normalize a batch of dynamic field drafts.

    Accepts a list of draft dicts or a JSON string encoding one. Raises a
    FieldSchemaError subclass naming the offending field on the first problem.
    The result lists every root field before any child so a persistence layer
    can assign parent ids before children reference them.
    """
    if raw_drafts is None:
        return []
    if isinstance(raw_drafts, str):
        if not raw_drafts.strip():
            return []
        try:
            raw_drafts = json.loads(raw_drafts)
        except ValueError:
            raise ValidationError("Dynamic fields payload is not valid JSON.")
    if not isinstance(raw_drafts, list):
        raise ValidationError("Dynamic fields payload must be an array.")

    normalized = []
    for index, candidate in enumerate(raw_drafts):
        if not isinstance(candidate, dict):
            raise MissingFieldId(f"Dynamic field {index + 1} is missing an id.")
        normalized.append(_normalize_field(candidate, index))

    seen_keys = set()
    for field in normalized:
        if field.key in seen_keys:
            raise DuplicateFieldKey(
                f"Dynamic field keys must be unique. Duplicate key: {field.key}"
            )
        seen_keys.add(field.key)

    seen_ids = set()
    for field in normalized:
        if field.id in seen_ids:
            raise DuplicateFieldId(
                f"Dynamic field ids must be unique. Duplicate id: {field.id}"
            )
        seen_ids.add(field.id)

    by_id = {field.id: field for field in normalized}
    for field in normalized:
        if field.parent_field_id is None:
            continue
        parent = by_id.get(field.parent_field_id)
        if parent is None:
            raise UnknownParentField(f'Field "{field.key}" references an unknown parent field.')
        if parent.type != FormFieldType.FIELD_GROUP:
            raise InvalidParentType(f'Field "{field.key}" must reference a FIELD_GROUP parent.')
        if field.type == FormFieldType.FIELD_GROUP:
            raise NestedGroupNotSupported(
                f'Field "{field.key}" is a FIELD_GROUP; nested FIELD_GROUP values are not supported.'
            )

    return root_fields(normalized) + [
        field for field in normalized if field.parent_field_id is not None
    ]


def root_fields(fields) -> List[NormalizedField]:
    return [field for field in fields if field.parent_field_id is None]


def child_fields_by_parent(fields) -> Dict[str, List[NormalizedField]]:
    grouped = {}
    for field in fields:
        if field.parent_field_id is not None:
            grouped.setdefault(field.parent_field_id, []).append(field)
    return grouped


def is_attendee_specific_field(field) -> bool:
    """
    Decide whether a field is answered once per attendee.

    This is a naming convention, not a stored attribute: a reserved key
    prefix, an "[attendee]" marker in the description, a scope marker in
    object-shaped options, or the attendee-list sentinel in array options.
    Note that a field named e.g. ``member_count`` is classified as
    attendee-specific by the prefix rule.
    """
    key = getattr(field, "key", "") or ""
    description = getattr(field, "description", None)
    options = getattr(field, "options", None)

    if key.startswith(ATTENDEE_KEY_PREFIXES):
        return True

    if isinstance(description, str) and ATTENDEE_DESCRIPTION_MARKER in description.lower():
        return True

    if isinstance(options, dict):
        return options.get("attendeeSpecific") is True or options.get("scope") == "ATTENDEE"

    if isinstance(options, list):
        return ATTENDEE_LIST_SENTINEL in options

    return False
