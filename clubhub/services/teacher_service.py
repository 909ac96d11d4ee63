from datetime import datetime, timezone
from flask import current_app
from clubhub.extensions import db
from clubhub.models import EventClassOffering
from clubhub.models.enums import UserRole
from clubhub.repositories import ClassRepository, RosterRepository
from clubhub.services.user_service import UserService
from clubhub.exceptions import BusinessRuleError, NotFoundError, ValidationError
from clubhub.services.response_assembler import coerce_id

TEACHER_PERMISSION_MESSAGE = "Only teaching staff can perform this action."


class TeacherService:
    @staticmethod
    def _offering_for_teacher(user_id, offering_id) -> EventClassOffering:
        teacher = UserService.require_role(user_id, UserRole.STAFF_TEACHER, TEACHER_PERMISSION_MESSAGE)
        offering = ClassRepository.get_offering(offering_id)
        if not offering or offering.instructor_user_id != teacher.id:
            raise NotFoundError("Class offering not found or not assigned to you.")
        return offering

    @staticmethod
    def get_class_roster(user_id, offering_id):
        offering = TeacherService._offering_for_teacher(user_id, offering_id)
        code = offering.class_catalog.code.strip().upper()

        students = []
        for enrollment in sorted(
            offering.enrollments,
            key=lambda e: (e.roster_member.last_name, e.roster_member.first_name),
        ):
            member = enrollment.roster_member
            students.append(
                {
                    "roster_member_id": member.id,
                    "name": member.full_name,
                    "member_role": member.member_role.value,
                    "attended_at": enrollment.attended_at.isoformat() if enrollment.attended_at else None,
                    "requirement_signed_off": code in member.completed_honor_codes,
                }
            )
        return {"offering": offering.to_dict(), "students": students}

    @staticmethod
    def update_class_attendance(user_id, offering_id, roster_member_id, attended, now=None):
        if not offering_id or not roster_member_id:
            raise ValidationError("Class offering and roster member are required.")

        offering = TeacherService._offering_for_teacher(user_id, offering_id)
        try:
            enrollment = ClassRepository.find_enrollment(offering.id, roster_member_id)
            if not enrollment:
                raise BusinessRuleError("Roster member is not enrolled in this class.")
            enrollment.attended_at = (now or datetime.now(timezone.utc)) if attended else None
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(
            f"Attendance for roster member {roster_member_id} in offering {offering.id} set to {bool(attended)}"
        )
        return enrollment

    @staticmethod
    def sign_off_requirements(user_id, offering_id, roster_member_ids, notes=None, now=None) -> int:
        """
        Record the class's catalog code as a completed honor for each selected
        student. Students who already hold the honor are skipped, so signing
        off twice creates nothing new. Returns the number of rows created.
        """
        if not offering_id:
            raise ValidationError("Class offering is required.")

        selected = []
        for raw_id in roster_member_ids or []:
            member_id = coerce_id(raw_id)
            if member_id is not None and member_id not in selected:
                selected.append(member_id)
        if not selected:
            raise ValidationError("Select at least one student to sign off requirements.")

        offering = TeacherService._offering_for_teacher(user_id, offering_id)
        catalog_item = offering.class_catalog
        now = now or datetime.now(timezone.utc)

        try:
            enrolled = {
                enrollment.roster_member_id
                for enrollment in ClassRepository.get_enrollments_for_offering(offering.id, selected)
            }
            if len(enrolled) != len(selected):
                raise BusinessRuleError("One or more selected students are not enrolled in this class.")

            already_done = RosterRepository.find_completed_member_ids(catalog_item.code, selected)
            to_create = [member_id for member_id in selected if member_id not in already_done]
            for member_id in to_create:
                RosterRepository.add_member_requirement(
                    {
                        "roster_member_id": member_id,
                        "user_id": int(user_id),
                        "honor_code": catalog_item.code,
                        "completed_at": now,
                        "verified_by": UserRole.STAFF_TEACHER.value,
                        "notes": (notes or "").strip() or f"Completed in class: {catalog_item.title}",
                    }
                )
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(
            f"{len(to_create)} requirement sign-offs for {catalog_item.code} in offering {offering.id}"
        )
        return len(to_create)
