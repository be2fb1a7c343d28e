"""create consultation queue schema

Revision ID: 4b2d7e91c0a1
Revises:
Create Date: 2026-10-19 10:12:03.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b2d7e91c0a1'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE_STATUS_SQL = "status IN ('waiting', 'called', 'in_session')"


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=True),
        sa.Column('username', sa.String(length=100), nullable=True),
        sa.Column('role', sa.Enum('patient', 'doctor', 'admin', name='user_role'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'doctors',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('specialty', sa.String(length=100), nullable=True),
        sa.Column('is_approved', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'consultation_queue',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('doctor_id', sa.Uuid(), nullable=False),
        sa.Column('patient_id', sa.Uuid(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('waiting', 'called', 'in_session', 'done', 'canceled', name='queue_status'),
            nullable=False,
        ),
        sa.Column('requested_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('called_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ended_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('canceled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('position', sa.Integer(), nullable=True),
        sa.Column('expected_minutes', sa.Integer(), nullable=True),
        sa.Column('is_free', sa.Boolean(), nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['doctor_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['patient_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_queue_doctor_status', 'consultation_queue', ['doctor_id', 'status'])
    op.create_index('idx_queue_patient_status', 'consultation_queue', ['patient_id', 'status'])
    # At most one active entry per (doctor, patient) pair
    op.create_index(
        'uq_queue_active_pair',
        'consultation_queue',
        ['doctor_id', 'patient_id'],
        unique=True,
        postgresql_where=sa.text(ACTIVE_STATUS_SQL),
    )

    op.create_table(
        'system_settings_kv',
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', sa.JSON(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('key'),
    )

    op.create_table(
        'patient_vitals',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('patient_id', sa.Uuid(), nullable=False),
        sa.Column('recorded_by', sa.Uuid(), nullable=True),
        sa.Column('vital_type', sa.String(length=50), nullable=False),
        sa.Column('value_numeric', sa.Float(), nullable=True),
        sa.Column('value2_numeric', sa.Float(), nullable=True),
        sa.Column('value_text', sa.Text(), nullable=True),
        sa.Column('unit', sa.String(length=20), nullable=True),
        sa.Column('recorded_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['patient_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['recorded_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_patient_vitals_patient', 'patient_vitals', ['patient_id', 'recorded_at'])

    op.create_table(
        'patient_files',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('patient_id', sa.Uuid(), nullable=False),
        sa.Column('consultation_id', sa.Uuid(), nullable=True),
        sa.Column('storage_path', sa.String(length=500), nullable=False),
        sa.Column('file_type', sa.String(length=50), nullable=True),
        sa.Column('mime_type', sa.String(length=100), nullable=True),
        sa.Column('size_bytes', sa.Integer(), nullable=True),
        sa.Column('public_url', sa.String(length=1000), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['patient_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['consultation_id'], ['consultation_queue.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_patient_files_patient', 'patient_files', ['patient_id', 'created_at'])


def downgrade() -> None:
    op.drop_index('idx_patient_files_patient', table_name='patient_files')
    op.drop_table('patient_files')
    op.drop_index('idx_patient_vitals_patient', table_name='patient_vitals')
    op.drop_table('patient_vitals')
    op.drop_table('system_settings_kv')
    op.drop_index('uq_queue_active_pair', table_name='consultation_queue')
    op.drop_index('idx_queue_patient_status', table_name='consultation_queue')
    op.drop_index('idx_queue_doctor_status', table_name='consultation_queue')
    op.drop_table('consultation_queue')
    op.drop_table('doctors')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    # Drop the enum types
    sa.Enum(name='queue_status').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='user_role').drop(op.get_bind(), checkfirst=True)
