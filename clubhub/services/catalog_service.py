from flask import current_app
from clubhub.extensions import db
from clubhub.models import ClassCatalog, ClassRequirement
from clubhub.models.enums import MemberRole, RequirementType
from clubhub.repositories.class_repository import ClassRepository
from clubhub.services.user_service import UserService
from clubhub.exceptions import NotFoundError, ValidationError


def _required_text(value, label):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} is required.")
    return value.strip()


def _optional_int(value, label):
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be a valid whole number.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a valid whole number.")


def _optional_bool(value):
    if value is None or value == "" or value == "NONE":
        return None
    if isinstance(value, bool):
        return value
    if value == "true":
        return True
    if value == "false":
        return False
    raise ValidationError("Boolean value is invalid.")


def parse_requirement(data):
    """Reads the single optional requirement of a catalog form; "NONE" means no requirement."""
    raw_type = data.get("requirement_type")
    if not raw_type or raw_type == "NONE":
        return None
    try:
        requirement_type = RequirementType(raw_type)
    except ValueError:
        raise ValidationError("Requirement type is invalid.")

    required_role = None
    raw_role = data.get("required_member_role")
    if raw_role and raw_role != "NONE":
        try:
            required_role = MemberRole(raw_role)
        except ValueError:
            raise ValidationError("Required member role is invalid.")

    honor_code = data.get("required_honor_code")
    return {
        "requirement_type": requirement_type,
        "min_age": _optional_int(data.get("min_age"), "Minimum age"),
        "max_age": _optional_int(data.get("max_age"), "Maximum age"),
        "required_member_role": required_role,
        "required_honor_code": honor_code.strip() or None if isinstance(honor_code, str) else None,
        "required_master_guide": _optional_bool(data.get("required_master_guide")),
    }


class CatalogService:
    @staticmethod
    def get_catalog(user_id):
        UserService.require_super_admin(user_id)
        return ClassRepository.get_catalog()

    @staticmethod
    def create_catalog_item(data, user_id) -> ClassCatalog:
        UserService.require_super_admin(user_id)

        code = _required_text(data.get("code"), "Code").upper()
        if ClassRepository.find_catalog_by_code(code):
            raise ValidationError(f"A catalog item with code {code} already exists.")

        catalog_item = ClassCatalog(
            title=_required_text(data.get("title"), "Title"),
            code=code,
            description=(data.get("description") or "").strip() or None,
            active=bool(data.get("active", True)),
        )
        requirement = parse_requirement(data)
        if requirement:
            catalog_item.requirements.append(ClassRequirement(**requirement))

        try:
            ClassRepository.create_catalog_item(catalog_item)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f"Catalog item {catalog_item.code} created")
        return catalog_item

    @staticmethod
    def update_catalog_item(class_catalog_id, data, user_id) -> ClassCatalog:
        """Updates the catalog item and replaces its requirement."""
        UserService.require_super_admin(user_id)

        catalog_item = ClassRepository.get_catalog_item(class_catalog_id)
        if not catalog_item:
            raise NotFoundError("Class catalog item not found.")

        title = _required_text(data.get("title"), "Title")
        code = _required_text(data.get("code"), "Code").upper()
        requirement = parse_requirement(data)

        try:
            catalog_item.title = title
            catalog_item.code = code
            catalog_item.description = (data.get("description") or "").strip() or None
            catalog_item.active = bool(data.get("active", catalog_item.active))
            catalog_item.requirements.clear()
            db.session.flush()
            if requirement:
                catalog_item.requirements.append(ClassRequirement(**requirement))
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f"Catalog item {catalog_item.id} updated")
        return catalog_item
