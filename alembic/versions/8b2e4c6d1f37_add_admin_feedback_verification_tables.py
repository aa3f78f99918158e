"""Add admin login, feedback, contractor review and email verification tables

Revision ID: 8b2e4c6d1f37
Revises: 3f9c1a7d2b10
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '8b2e4c6d1f37'
down_revision: Union[str, Sequence[str], None] = '3f9c1a7d2b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(*names: str) -> list:
    return [
        sa.Column(name, sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False)
        for name in names
    ]


def upgrade() -> None:
    """Upgrade schema."""

    # Admin passwords are checked with crypt() in the database
    op.execute('CREATE EXTENSION IF NOT EXISTS pgcrypto')

    op.create_table('admin_users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('is_super_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_login_at', sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps('created_at', 'updated_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )

    op.create_table('admin_sessions',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('admin_user_id', sa.UUID(), nullable=False),
        sa.Column('session_token', sa.String(), nullable=False),
        sa.Column('expires_at', sa.TIMESTAMP(timezone=True), nullable=False),
        *_timestamps('created_at'),
        sa.ForeignKeyConstraint(['admin_user_id'], ['admin_users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session_token')
    )
    op.create_index(op.f('ix_admin_sessions_admin_user_id'), 'admin_sessions', ['admin_user_id'], unique=False)

    op.create_table('user_feedback',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('type', sa.String(), nullable=False, comment='liked | wishlist | bug'),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('url', sa.String(), nullable=True),
        sa.Column('user_agent', sa.String(), nullable=True),
        sa.Column('timestamp', sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps('created_at'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('contractor_installation_reviews',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('project_id', sa.UUID(), nullable=False),
        sa.Column('bid_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('overall_rating', sa.Integer(), nullable=False),
        sa.Column('quality_of_work_rating', sa.Integer(), nullable=False),
        sa.Column('professionalism_rating', sa.Integer(), nullable=False),
        sa.Column('communication_rating', sa.Integer(), nullable=False),
        sa.Column('timeliness_rating', sa.Integer(), nullable=False),
        sa.Column('used_checklist', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('checklist_completeness_rating', sa.Integer(), nullable=True),
        sa.Column('would_recommend', sa.Boolean(), nullable=False),
        sa.Column('completed_on_time', sa.Boolean(), nullable=False),
        sa.Column('stayed_within_budget', sa.Boolean(), nullable=False),
        sa.Column('critical_items_verified', sa.Boolean(), nullable=False),
        sa.Column('photo_documentation_provided', sa.Boolean(), nullable=False),
        sa.Column('issues_encountered', postgresql.ARRAY(sa.Text()), nullable=False, server_default='{}'),
        sa.Column('positive_comments', sa.Text(), nullable=True),
        sa.Column('improvement_suggestions', sa.Text(), nullable=True),
        *_timestamps('created_at', 'updated_at'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['bid_id'], ['contractor_bids.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('project_id')
    )

    op.create_table('email_verifications',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('code', sa.String(), nullable=False),
        sa.Column('expires_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('ip_address', sa.String(), nullable=True),
        sa.Column('user_agent', sa.String(), nullable=True),
        sa.Column('verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('verified_at', sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps('created_at'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_email_verifications_email'), 'email_verifications', ['email'], unique=False)

    op.create_table('verified_sessions',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('session_token', sa.String(), nullable=False),
        sa.Column('expires_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('ip_address', sa.String(), nullable=True),
        sa.Column('user_agent', sa.String(), nullable=True),
        *_timestamps('created_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session_token')
    )
    op.create_index(op.f('ix_verified_sessions_email'), 'verified_sessions', ['email'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_verified_sessions_email'), table_name='verified_sessions')
    op.drop_table('verified_sessions')
    op.drop_index(op.f('ix_email_verifications_email'), table_name='email_verifications')
    op.drop_table('email_verifications')
    op.drop_table('contractor_installation_reviews')
    op.drop_table('user_feedback')
    op.drop_index(op.f('ix_admin_sessions_admin_user_id'), table_name='admin_sessions')
    op.drop_table('admin_sessions')
    op.drop_table('admin_users')
