class ClubHubError(Exception):
    """Base class for errors that are shown directly to the caller."""

    status_code = 400

    def __init__(self, message=None):
        super().__init__(message or self.default_message())
        self.message = str(self)

    def default_message(self):
        return "Request could not be completed"

    def to_dict(self):
        return {"error": self.message}


class ValidationError(ClubHubError):
    status_code = 400


class UnauthorizedError(ClubHubError):
    status_code = 403

    def default_message(self):
        return "You are not allowed to perform this action"


class NotFoundError(ClubHubError):
    status_code = 404

    def default_message(self):
        return "Not found"


class BusinessRuleError(ClubHubError):
    status_code = 409


class MissingFieldsError(ValidationError):
    def __init__(self, fields):
        super().__init__("Missing required fields")
        self.fields = fields

    def to_dict(self):
        return {"error": self.message, "fields": self.fields}


# Dynamic field schema errors


class FieldSchemaError(ValidationError):
    pass


class MissingFieldId(FieldSchemaError):
    pass


class MissingFieldKey(FieldSchemaError):
    pass


class MissingFieldLabel(FieldSchemaError):
    pass


class UnsupportedFieldType(FieldSchemaError):
    pass


class InvalidOptionsPayload(FieldSchemaError):
    pass


class DuplicateFieldKey(FieldSchemaError):
    pass


class DuplicateFieldId(FieldSchemaError):
    pass


class UnknownParentField(FieldSchemaError):
    pass


class InvalidParentType(FieldSchemaError):
    pass


class NestedGroupNotSupported(FieldSchemaError):
    pass


class InvalidRegistrationPayload(ValidationError):
    pass


# Enrollment and registration rule violations


class AttendeeNotRegistered(BusinessRuleError):
    def default_message(self):
        return "Attendee is not registered for this event under your club."


class OfferingNotFound(NotFoundError):
    def default_message(self):
        return "Class offering was not found for this event."


class PrerequisitesNotMet(BusinessRuleError):
    def __init__(self, blockers):
        self.blockers = list(blockers)
        super().__init__(
            f"Attendee does not meet class prerequisites: {', '.join(self.blockers)}."
        )

    def to_dict(self):
        return {"error": self.message, "blockers": self.blockers}


class ClassFull(BusinessRuleError):
    def default_message(self):
        return "This class is full. Please choose another class."


class RegistrationLocked(BusinessRuleError):
    def default_message(self):
        return "This registration has already been approved and can no longer be changed."


class DuplicateRosterYear(BusinessRuleError):
    def default_message(self):
        return "A roster year with this label already exists."
