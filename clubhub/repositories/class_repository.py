from typing import List, Optional
from clubhub.extensions import db
from clubhub.models import (
    ClassCatalog,
    ClassEnrollment,
    EventClassOffering,
)


class ClassRepository:
    @staticmethod
    def get_catalog_item(class_catalog_id: int) -> Optional[ClassCatalog]:
        return ClassCatalog.query.filter_by(id=class_catalog_id).first()

    @staticmethod
    def find_catalog_by_code(code: str) -> Optional[ClassCatalog]:
        return ClassCatalog.query.filter_by(code=code).first()

    @staticmethod
    def get_catalog() -> List[ClassCatalog]:
        return ClassCatalog.query.order_by(ClassCatalog.title.asc()).all()

    @staticmethod
    def create_catalog_item(catalog_item: ClassCatalog) -> ClassCatalog:
        db.session.add(catalog_item)
        db.session.flush()
        return catalog_item

    @staticmethod
    def create_offering(attrs) -> EventClassOffering:
        offering = EventClassOffering(**attrs)
        db.session.add(offering)
        db.session.flush()
        return offering

    @staticmethod
    def get_offering(offering_id: int) -> Optional[EventClassOffering]:
        return EventClassOffering.query.filter_by(id=offering_id).first()

    @staticmethod
    def get_offering_for_event(offering_id: int, event_id: int, lock: bool = False) -> Optional[EventClassOffering]:
        """
        With ``lock`` the offering row is read with SELECT ... FOR UPDATE, so
        concurrent enrollments into the same offering queue behind each other
        until the holder commits or rolls back.
        """
        query = EventClassOffering.query.filter_by(id=offering_id, event_id=event_id)
        if lock:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def get_offerings_for_event(event_id: int) -> List[EventClassOffering]:
        return (
            EventClassOffering.query.filter_by(event_id=event_id)
            .order_by(EventClassOffering.day_index.asc(), EventClassOffering.starts_at.asc(), EventClassOffering.id.asc())
            .all()
        )

    @staticmethod
    def find_enrollment(offering_id: int, roster_member_id: int) -> Optional[ClassEnrollment]:
        return ClassEnrollment.query.filter_by(
            event_class_offering_id=offering_id, roster_member_id=roster_member_id
        ).first()

    @staticmethod
    def count_enrollments(offering_id: int) -> int:
        return ClassEnrollment.query.filter_by(event_class_offering_id=offering_id).count()

    @staticmethod
    def count_enrollments_by_offering(event_id: int) -> dict:
        rows = (
            db.session.query(ClassEnrollment.event_class_offering_id, db.func.count(ClassEnrollment.id))
            .join(EventClassOffering, ClassEnrollment.event_class_offering_id == EventClassOffering.id)
            .filter(EventClassOffering.event_id == event_id)
            .group_by(ClassEnrollment.event_class_offering_id)
            .all()
        )
        return {offering_id: count for offering_id, count in rows}

    @staticmethod
    def get_enrollments_for_members(event_id: int, roster_member_ids: List[int]) -> List[ClassEnrollment]:
        if not roster_member_ids:
            return []
        return (
            db.session.query(ClassEnrollment)
            .join(EventClassOffering, ClassEnrollment.event_class_offering_id == EventClassOffering.id)
            .filter(
                EventClassOffering.event_id == event_id,
                ClassEnrollment.roster_member_id.in_(roster_member_ids),
            )
            .order_by(ClassEnrollment.enrolled_at.asc(), ClassEnrollment.id.asc())
            .all()
        )

    @staticmethod
    def get_enrollments_for_offering(offering_id: int, roster_member_ids: List[int] = None) -> List[ClassEnrollment]:
        query = ClassEnrollment.query.filter(ClassEnrollment.event_class_offering_id == offering_id)
        if roster_member_ids is not None:
            query = query.filter(ClassEnrollment.roster_member_id.in_(roster_member_ids))
        return query.all()

    @staticmethod
    def create_enrollment(offering_id: int, roster_member_id: int) -> ClassEnrollment:
        enrollment = ClassEnrollment(
            event_class_offering_id=offering_id, roster_member_id=roster_member_id
        )
        db.session.add(enrollment)
        db.session.flush()
        return enrollment

    @staticmethod
    def get_upcoming_enrollments_for_members(roster_member_ids: List[int], now) -> List[ClassEnrollment]:
        if not roster_member_ids:
            return []
        return (
            db.session.query(ClassEnrollment)
            .join(EventClassOffering, ClassEnrollment.event_class_offering_id == EventClassOffering.id)
            .join(ClassCatalog, EventClassOffering.class_catalog_id == ClassCatalog.id)
            .filter(
                ClassEnrollment.roster_member_id.in_(roster_member_ids),
                EventClassOffering.starts_at >= now,
            )
            .order_by(EventClassOffering.starts_at.asc(), ClassCatalog.title.asc())
            .all()
        )

    @staticmethod
    def get_catalog_titles(codes) -> dict:
        if not codes:
            return {}
        items = ClassCatalog.query.filter(ClassCatalog.code.in_(list(codes))).all()
        return {item.code: item.title for item in items}
