"""create clubs, users, specialties, progress, points and notifications tables

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19 09:12:40

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# dbv_class 는 users / requirements 두 테이블에서 공유하므로 타입은 직접 생성
user_role = postgresql.ENUM(
    'MASTER', 'OWNER', 'ADMIN', 'DIRECTOR', 'INSTRUCTOR', 'COUNSELOR', 'PARENT', 'PATHFINDER',
    name='user_role', create_type=False,
)
dbv_class = postgresql.ENUM(
    'AMIGO', 'COMPANHEIRO', 'PESQUISADOR', 'PIONEIRO', 'EXCURSIONISTA', 'GUIA',
    name='dbv_class', create_type=False,
)
requirement_type = postgresql.ENUM('TEXT', 'FILE', name='requirement_type', create_type=False)
requirement_status = postgresql.ENUM(
    'PENDING', 'APPROVED', 'REJECTED', name='requirement_status', create_type=False,
)
user_specialty_status = postgresql.ENUM(
    'IN_PROGRESS', 'WAITING_APPROVAL', 'COMPLETED', name='user_specialty_status', create_type=False,
)
points_source = postgresql.ENUM('REQUIREMENT', 'SPECIALTY', name='points_source', create_type=False)
notification_type = postgresql.ENUM(
    'INFO', 'SUCCESS', 'WARNING', 'ERROR', name='notification_type', create_type=False,
)

ENUM_TYPES = (
    user_role, dbv_class, requirement_type, requirement_status,
    user_specialty_status, points_source, notification_type,
)


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in ENUM_TYPES:
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        'clubs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('region', sa.String(length=80), nullable=True),
        sa.Column('district', sa.String(length=80), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('photo_url', sa.String(length=500), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('club_id', sa.Uuid(), nullable=True),
        sa.Column('dbv_class', dbv_class, nullable=True),
        sa.Column('points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_class_milestone', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_club_id', 'users', ['club_id'])

    op.create_table(
        'specialties',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('area', sa.String(length=80), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'requirements',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('specialty_id', sa.Uuid(), nullable=True),
        sa.Column('dbv_class', dbv_class, nullable=True),
        sa.Column('code', sa.String(length=20), nullable=True),
        sa.Column('area', sa.String(length=80), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('type', requirement_type, nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['specialty_id'], ['specialties.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_requirements_specialty_id', 'requirements', ['specialty_id'])
    op.create_index('ix_requirements_dbv_class', 'requirements', ['dbv_class'])

    op.create_table(
        'user_specialties',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('specialty_id', sa.Uuid(), nullable=False),
        sa.Column('status', user_specialty_status, nullable=False),
        sa.Column('awarded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['specialty_id'], ['specialties.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'specialty_id', name='uq_user_specialties_user_specialty'),
    )
    op.create_index('ix_user_specialties_user_id', 'user_specialties', ['user_id'])
    op.create_index('ix_user_specialties_specialty_id', 'user_specialties', ['specialty_id'])

    op.create_table(
        'user_requirements',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('requirement_id', sa.Uuid(), nullable=False),
        sa.Column('status', requirement_status, nullable=False),
        sa.Column('answer_text', sa.Text(), nullable=True),
        sa.Column('answer_file_url', sa.String(length=500), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['requirement_id'], ['requirements.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'requirement_id', name='uq_user_requirements_user_requirement'),
    )
    op.create_index('ix_user_requirements_user_id', 'user_requirements', ['user_id'])
    op.create_index('ix_user_requirements_requirement_id', 'user_requirements', ['requirement_id'])

    op.create_table(
        'points_history',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('reason', sa.String(length=255), nullable=False),
        sa.Column('source', points_source, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_points_history_user_id', 'points_history', ['user_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=150), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', notification_type, nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_notifications_user_id', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('ix_points_history_user_id', table_name='points_history')
    op.drop_table('points_history')
    op.drop_index('ix_user_requirements_requirement_id', table_name='user_requirements')
    op.drop_index('ix_user_requirements_user_id', table_name='user_requirements')
    op.drop_table('user_requirements')
    op.drop_index('ix_user_specialties_specialty_id', table_name='user_specialties')
    op.drop_index('ix_user_specialties_user_id', table_name='user_specialties')
    op.drop_table('user_specialties')
    op.drop_index('ix_requirements_dbv_class', table_name='requirements')
    op.drop_index('ix_requirements_specialty_id', table_name='requirements')
    op.drop_table('requirements')
    op.drop_table('specialties')
    op.drop_index('ix_users_club_id', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    op.drop_table('clubs')

    bind = op.get_bind()
    for enum_type in reversed(ENUM_TYPES):
        enum_type.drop(bind, checkfirst=True)
