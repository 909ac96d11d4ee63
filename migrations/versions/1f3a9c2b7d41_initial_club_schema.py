"""initial club, roster, event registration and class enrollment schema

Revision ID: 1f3a9c2b7d41
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1f3a9c2b7d41'
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum('SUPER_ADMIN', 'CLUB_DIRECTOR', 'STAFF_TEACHER', 'STUDENT_PARENT', name='userrole')
member_role = sa.Enum('PATHFINDER', 'ADVENTURER', 'TLT', 'STAFF', 'CHILD', 'DIRECTOR', 'COUNSELOR', name='memberrole')
gender = sa.Enum('MALE', 'FEMALE', name='gender')
rollover_status = sa.Enum('NEW', 'CONTINUING', name='rolloverstatus')
form_field_type = sa.Enum(
    'SHORT_TEXT', 'NUMBER', 'BOOLEAN', 'MULTI_SELECT', 'ROSTER_SELECT', 'ROSTER_MULTI_SELECT', 'FIELD_GROUP',
    name='formfieldtype',
)
registration_status = sa.Enum('DRAFT', 'SUBMITTED', 'APPROVED', 'REJECTED', name='registrationstatus')
requirement_type = sa.Enum('MIN_AGE', 'MAX_AGE', 'MEMBER_ROLE', 'COMPLETED_HONOR', 'MASTER_GUIDE', name='requirementtype')


def _timestamps(*names):
    return [
        sa.Column(name, sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False)
        for name in names
    ]


def upgrade():
    op.create_table('users',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('email', sa.String(length=255), nullable=False),
    sa.Column('first_name', sa.String(length=50), nullable=False),
    sa.Column('last_name', sa.String(length=50), nullable=False),
    sa.Column('role', user_role, nullable=False),
    *_timestamps('updated_at', 'created_at'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('email')
    )
    op.create_table('clubs',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('code', sa.String(length=50), nullable=False),
    *_timestamps('created_at'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('code')
    )
    op.create_table('club_memberships',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('club_id', sa.Integer(), nullable=False),
    sa.Column('user_id', sa.Integer(), nullable=False),
    sa.Column('is_primary', sa.Boolean(), nullable=False, server_default='false'),
    *_timestamps('created_at'),
    sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('club_id', 'user_id', name='uq_club_membership')
    )
    op.create_table('club_roster_years',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('club_id', sa.Integer(), nullable=False),
    sa.Column('year_label', sa.String(length=20), nullable=False),
    sa.Column('starts_on', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.Column('ends_on', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
    sa.Column('copied_from_year_id', sa.Integer(), nullable=True),
    *_timestamps('created_at'),
    sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['copied_from_year_id'], ['club_roster_years.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('club_id', 'year_label', name='uq_club_year_label')
    )
    op.create_table('roster_members',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('club_roster_year_id', sa.Integer(), nullable=False),
    sa.Column('first_name', sa.String(length=100), nullable=False),
    sa.Column('last_name', sa.String(length=100), nullable=False),
    sa.Column('date_of_birth', sa.Date(), nullable=True),
    sa.Column('age_at_start', sa.Integer(), nullable=True),
    sa.Column('gender', gender, nullable=True),
    sa.Column('member_role', member_role, nullable=False),
    sa.Column('medical_flags', sa.Text(), nullable=True),
    sa.Column('dietary_restrictions', sa.Text(), nullable=True),
    sa.Column('is_first_time', sa.Boolean(), nullable=False, server_default='false'),
    sa.Column('is_medical_personnel', sa.Boolean(), nullable=False, server_default='false'),
    sa.Column('master_guide', sa.Boolean(), nullable=False, server_default='false'),
    sa.Column('emergency_contact_name', sa.String(length=200), nullable=True),
    sa.Column('emergency_contact_phone', sa.String(length=50), nullable=True),
    sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
    sa.Column('rollover_status', rollover_status, nullable=False, server_default='NEW'),
    *_timestamps('created_at'),
    sa.ForeignKeyConstraint(['club_roster_year_id'], ['club_roster_years.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('member_requirements',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('roster_member_id', sa.Integer(), nullable=False),
    sa.Column('user_id', sa.Integer(), nullable=True),
    sa.Column('honor_code', sa.String(length=100), nullable=False),
    sa.Column('completed_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('verified_by', sa.String(length=50), nullable=True),
    sa.Column('notes', sa.Text(), nullable=True),
    sa.ForeignKeyConstraint(['roster_member_id'], ['roster_members.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_member_requirements_honor_code', 'member_requirements', ['honor_code'])
    op.create_table('events',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('slug', sa.String(length=80), nullable=False),
    sa.Column('starts_at', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.Column('ends_at', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.Column('registration_opens_at', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.Column('registration_closes_at', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.Column('location_name', sa.String(length=255), nullable=True),
    sa.Column('location_address', sa.String(length=255), nullable=True),
    sa.Column('created_by_user_id', sa.Integer(), nullable=False),
    *_timestamps('created_at', 'updated_at'),
    sa.ForeignKeyConstraint(['created_by_user_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('slug')
    )
    op.create_table('event_form_fields',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('event_id', sa.Integer(), nullable=False),
    sa.Column('parent_field_id', sa.Integer(), nullable=True),
    sa.Column('key', sa.String(length=100), nullable=False),
    sa.Column('label', sa.String(length=255), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('type', form_field_type, nullable=False),
    sa.Column('options', sa.JSON(), nullable=True),
    sa.Column('is_required', sa.Boolean(), nullable=False, server_default='false'),
    sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
    *_timestamps('created_at'),
    sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['parent_field_id'], ['event_form_fields.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('event_id', 'key', name='uq_event_field_key')
    )
    op.create_table('event_registrations',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('event_id', sa.Integer(), nullable=False),
    sa.Column('club_id', sa.Integer(), nullable=False),
    sa.Column('registration_code', sa.String(length=40), nullable=False),
    sa.Column('status', registration_status, nullable=False, server_default='DRAFT'),
    sa.Column('submitted_at', sa.TIMESTAMP(timezone=True), nullable=True),
    sa.Column('approved_at', sa.TIMESTAMP(timezone=True), nullable=True),
    *_timestamps('created_at', 'updated_at'),
    sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('registration_code'),
    sa.UniqueConstraint('event_id', 'club_id', name='uq_event_club_registration')
    )
    op.create_table('registration_attendees',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('event_registration_id', sa.Integer(), nullable=False),
    sa.Column('roster_member_id', sa.Integer(), nullable=False),
    sa.Column('checked_in_at', sa.TIMESTAMP(timezone=True), nullable=True),
    *_timestamps('created_at'),
    sa.ForeignKeyConstraint(['event_registration_id'], ['event_registrations.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['roster_member_id'], ['roster_members.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('event_registration_id', 'roster_member_id', name='uq_registration_attendee')
    )
    op.create_table('event_form_responses',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('event_registration_id', sa.Integer(), nullable=False),
    sa.Column('event_form_field_id', sa.Integer(), nullable=False),
    sa.Column('attendee_id', sa.Integer(), nullable=True),
    sa.Column('value', sa.JSON(), nullable=False),
    *_timestamps('created_at'),
    sa.ForeignKeyConstraint(['event_registration_id'], ['event_registrations.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['event_form_field_id'], ['event_form_fields.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['attendee_id'], ['roster_members.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('class_catalog',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('code', sa.String(length=100), nullable=False),
    sa.Column('title', sa.String(length=255), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
    *_timestamps('created_at'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('code')
    )
    op.create_table('class_requirements',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('class_catalog_id', sa.Integer(), nullable=False),
    sa.Column('requirement_type', requirement_type, nullable=False),
    sa.Column('min_age', sa.Integer(), nullable=True),
    sa.Column('max_age', sa.Integer(), nullable=True),
    sa.Column('required_member_role', member_role, nullable=True),
    sa.Column('required_honor_code', sa.String(length=100), nullable=True),
    sa.Column('required_master_guide', sa.Boolean(), nullable=True),
    sa.ForeignKeyConstraint(['class_catalog_id'], ['class_catalog.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('event_class_offerings',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('event_id', sa.Integer(), nullable=False),
    sa.Column('class_catalog_id', sa.Integer(), nullable=False),
    sa.Column('instructor_user_id', sa.Integer(), nullable=True),
    sa.Column('capacity', sa.Integer(), nullable=False, server_default='0'),
    sa.Column('day_index', sa.Integer(), nullable=False, server_default='0'),
    sa.Column('starts_at', sa.TIMESTAMP(timezone=True), nullable=True),
    sa.Column('ends_at', sa.TIMESTAMP(timezone=True), nullable=True),
    sa.Column('location', sa.String(length=255), nullable=True),
    *_timestamps('created_at'),
    sa.CheckConstraint('capacity >= 0', name='ck_offering_capacity'),
    sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['class_catalog_id'], ['class_catalog.id'], ),
    sa.ForeignKeyConstraint(['instructor_user_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('class_enrollments',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('event_class_offering_id', sa.Integer(), nullable=False),
    sa.Column('roster_member_id', sa.Integer(), nullable=False),
    sa.Column('enrolled_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('attended_at', sa.TIMESTAMP(timezone=True), nullable=True),
    sa.ForeignKeyConstraint(['event_class_offering_id'], ['event_class_offerings.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['roster_member_id'], ['roster_members.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('event_class_offering_id', 'roster_member_id', name='uq_offering_member_enrollment')
    )


def downgrade():
    op.drop_table('class_enrollments')
    op.drop_table('event_class_offerings')
    op.drop_table('class_requirements')
    op.drop_table('class_catalog')
    op.drop_table('event_form_responses')
    op.drop_table('registration_attendees')
    op.drop_table('event_registrations')
    op.drop_table('event_form_fields')
    op.drop_table('events')
    op.drop_index('ix_member_requirements_honor_code', table_name='member_requirements')
    op.drop_table('member_requirements')
    op.drop_table('roster_members')
    op.drop_table('club_roster_years')
    op.drop_table('club_memberships')
    op.drop_table('clubs')
    op.drop_table('users')
    for enum in (requirement_type, registration_status, form_field_type, rollover_status, gender, member_role, user_role):
        enum.drop(op.get_bind(), checkfirst=True)
