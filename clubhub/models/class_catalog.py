from clubhub.extensions import db
from .enums import MemberRole, RequirementType


class ClassCatalog(db.Model):
    __tablename__ = "class_catalog"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(100), unique=True, nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now())

    requirements = db.relationship(
        "ClassRequirement",
        back_populates="class_catalog",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="ClassRequirement.id",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "code": self.code,
            "title": self.title,
            "description": self.description,
            "requirements": [requirement.to_dict() for requirement in self.requirements],
        }


class ClassRequirement(db.Model):
    __tablename__ = "class_requirements"

    id = db.Column(db.Integer, primary_key=True)
    class_catalog_id = db.Column(
        db.Integer, db.ForeignKey("class_catalog.id", ondelete="CASCADE"), nullable=False
    )
    requirement_type = db.Column(db.Enum(RequirementType), nullable=False)
    min_age = db.Column(db.Integer, nullable=True)
    max_age = db.Column(db.Integer, nullable=True)
    required_member_role = db.Column(db.Enum(MemberRole), nullable=True)
    required_honor_code = db.Column(db.String(100), nullable=True)
    required_master_guide = db.Column(db.Boolean, nullable=True)

    class_catalog = db.relationship("ClassCatalog", back_populates="requirements")

    def to_dict(self):
        return {
            "requirement_type": self.requirement_type.value if self.requirement_type else None,
            "min_age": self.min_age,
            "max_age": self.max_age,
            "required_member_role": (
                self.required_member_role.value if self.required_member_role else None
            ),
            "required_honor_code": self.required_honor_code,
            "required_master_guide": self.required_master_guide,
        }
