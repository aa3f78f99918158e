"""Create projects, uploads, extraction audit, bid and requirements tables

Revision ID: 3f9c1a7d2b10
Revises:
Create Date: 2026-02-23 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3f9c1a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(*names: str) -> list:
    return [
        sa.Column(name, sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False)
        for name in names
    ]


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table('projects',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=True),
        sa.Column('session_id', sa.String(), nullable=True),
        sa.Column('project_name', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, comment='draft | collecting_bids | analyzing | comparing | completed | cancelled'),
        sa.Column('property_zip', sa.String(), nullable=True),
        sa.Column('property_state', sa.String(), nullable=True),
        sa.Column('project_details', sa.Text(), nullable=True),
        sa.Column('selected_bid_id', sa.UUID(), nullable=True),
        sa.Column('decision_date', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('decision_notes', sa.Text(), nullable=True),
        sa.Column('is_demo', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_public_demo', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('notification_email', sa.String(), nullable=True),
        sa.Column('notify_on_completion', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('notification_sent_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('analysis_queued_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('mindpal_run_id', sa.String(), nullable=True),
        sa.Column('rerun_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('data_sharing_consent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('data_sharing_consented_at', sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps('created_at', 'updated_at'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_projects_user_id'), 'projects', ['user_id'], unique=False)

    op.create_table('pdf_uploads',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('project_id', sa.UUID(), nullable=False),
        sa.Column('file_name', sa.String(), nullable=False),
        sa.Column('file_path', sa.String(), nullable=False),
        sa.Column('file_size_bytes', sa.Integer(), nullable=True),
        sa.Column('file_hash', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, comment='uploaded | processing | extracted | verified | review_needed | failed'),
        sa.Column('mindpal_status', sa.String(), nullable=True),
        sa.Column('mindpal_run_id', sa.String(), nullable=True),
        sa.Column('extracted_bid_id', sa.UUID(), nullable=True),
        sa.Column('extraction_confidence', sa.Numeric(6, 2), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('retry_count', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps('uploaded_at'),
        sa.Column('processing_started_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('processing_completed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps('updated_at'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_pdf_uploads_project_id'), 'pdf_uploads', ['project_id'], unique=False)

    op.create_table('mindpal_extractions',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('pdf_upload_id', sa.UUID(), nullable=False),
        sa.Column('raw_json', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('parsed_successfully', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('parsing_errors', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('mapped_bid_id', sa.UUID(), nullable=True),
        sa.Column('overall_confidence', sa.Numeric(6, 2), nullable=True),
        sa.Column('field_confidences', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        *_timestamps('extracted_at'),
        sa.Column('processed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['pdf_upload_id'], ['pdf_uploads.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_mindpal_extractions_pdf_upload_id'), 'mindpal_extractions', ['pdf_upload_id'], unique=False)

    money = sa.Numeric(12, 2)
    op.create_table('contractor_bids',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('project_id', sa.UUID(), nullable=False),
        sa.Column('pdf_upload_id', sa.UUID(), nullable=True),
        sa.Column('contractor_name', sa.String(), nullable=False),
        sa.Column('contractor_company', sa.String(), nullable=True),
        sa.Column('contractor_phone', sa.String(), nullable=True),
        sa.Column('contractor_email', sa.String(), nullable=True),
        sa.Column('contractor_license', sa.String(), nullable=True),
        sa.Column('contractor_license_state', sa.String(), nullable=True),
        sa.Column('contractor_website', sa.String(), nullable=True),
        sa.Column('contractor_contact_name', sa.String(), nullable=True),
        sa.Column('contractor_address', sa.String(), nullable=True),
        sa.Column('total_bid_amount', money, nullable=False, server_default='0'),
        sa.Column('labor_cost', money, nullable=True),
        sa.Column('equipment_cost', money, nullable=True),
        sa.Column('materials_cost', money, nullable=True),
        sa.Column('permit_cost', money, nullable=True),
        sa.Column('disposal_cost', money, nullable=True),
        sa.Column('electrical_cost', money, nullable=True),
        sa.Column('total_before_rebates', money, nullable=True),
        sa.Column('estimated_rebates', money, nullable=True),
        sa.Column('total_after_rebates', money, nullable=True),
        sa.Column('estimated_days', sa.Integer(), nullable=True),
        sa.Column('start_date_available', sa.String(), nullable=True),
        sa.Column('labor_warranty_years', sa.Numeric(5, 2), nullable=True),
        sa.Column('equipment_warranty_years', sa.Numeric(5, 2), nullable=True),
        sa.Column('additional_warranty_details', sa.Text(), nullable=True),
        sa.Column('deposit_required', money, nullable=True),
        sa.Column('deposit_percentage', sa.Numeric(5, 2), nullable=True),
        sa.Column('payment_schedule', sa.Text(), nullable=True),
        sa.Column('financing_offered', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('financing_terms', sa.Text(), nullable=True),
        sa.Column('scope_summary', sa.Text(), nullable=True),
        sa.Column('inclusions', postgresql.ARRAY(sa.Text()), nullable=True),
        sa.Column('exclusions', postgresql.ARRAY(sa.Text()), nullable=True),
        sa.Column('scope_permit_included', sa.Boolean(), nullable=True),
        sa.Column('scope_disposal_included', sa.Boolean(), nullable=True),
        sa.Column('scope_electrical_included', sa.Boolean(), nullable=True),
        sa.Column('scope_ductwork_included', sa.Boolean(), nullable=True),
        sa.Column('scope_thermostat_included', sa.Boolean(), nullable=True),
        sa.Column('scope_manual_j_included', sa.Boolean(), nullable=True),
        sa.Column('scope_commissioning_included', sa.Boolean(), nullable=True),
        sa.Column('scope_air_handler_included', sa.Boolean(), nullable=True),
        sa.Column('scope_line_set_included', sa.Boolean(), nullable=True),
        sa.Column('scope_disconnect_included', sa.Boolean(), nullable=True),
        sa.Column('scope_pad_included', sa.Boolean(), nullable=True),
        sa.Column('scope_drain_line_included', sa.Boolean(), nullable=True),
        sa.Column('bid_date', sa.String(), nullable=True),
        sa.Column('valid_until', sa.String(), nullable=True),
        sa.Column('extraction_confidence', sa.String(), nullable=False, server_default='manual', comment='high | medium | low | manual'),
        sa.Column('extraction_notes', sa.Text(), nullable=True),
        sa.Column('verified_by_user', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('verified_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('user_notes', sa.Text(), nullable=True),
        sa.Column('is_favorite', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps('created_at', 'updated_at'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['pdf_upload_id'], ['pdf_uploads.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_contractor_bids_project_id'), 'contractor_bids', ['project_id'], unique=False)

    op.create_table('bid_line_items',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('bid_id', sa.UUID(), nullable=False),
        sa.Column('item_type', sa.String(), nullable=False, server_default='other'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('quantity', sa.Numeric(10, 2), nullable=False, server_default='1'),
        sa.Column('unit_price', money, nullable=True),
        sa.Column('total_price', money, nullable=True),
        sa.Column('brand', sa.String(), nullable=True),
        sa.Column('model_number', sa.String(), nullable=True),
        sa.Column('confidence', sa.String(), nullable=False, server_default='manual'),
        sa.Column('source_text', sa.Text(), nullable=True),
        sa.Column('line_order', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps('created_at'),
        sa.ForeignKeyConstraint(['bid_id'], ['contractor_bids.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_bid_line_items_bid_id'), 'bid_line_items', ['bid_id'], unique=False)

    op.create_table('bid_equipment',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('bid_id', sa.UUID(), nullable=False),
        sa.Column('equipment_type', sa.String(), nullable=True),
        sa.Column('brand', sa.String(), nullable=True),
        sa.Column('model_number', sa.String(), nullable=True),
        sa.Column('model_name', sa.String(), nullable=True),
        sa.Column('capacity_btu', sa.Integer(), nullable=True),
        sa.Column('capacity_tons', sa.Numeric(5, 2), nullable=True),
        sa.Column('seer_rating', sa.Numeric(5, 2), nullable=True),
        sa.Column('seer2_rating', sa.Numeric(5, 2), nullable=True),
        sa.Column('hspf_rating', sa.Numeric(5, 2), nullable=True),
        sa.Column('hspf2_rating', sa.Numeric(5, 2), nullable=True),
        sa.Column('eer_rating', sa.Numeric(5, 2), nullable=True),
        sa.Column('variable_speed', sa.Boolean(), nullable=True),
        sa.Column('stages', sa.Integer(), nullable=True, comment='1 single, 2 two-stage, 99 variable'),
        sa.Column('refrigerant_type', sa.String(), nullable=True),
        sa.Column('sound_level_db', sa.Numeric(5, 1), nullable=True),
        sa.Column('voltage', sa.Integer(), nullable=True),
        sa.Column('energy_star_certified', sa.Boolean(), nullable=True),
        sa.Column('energy_star_most_efficient', sa.Boolean(), nullable=True),
        sa.Column('equipment_cost', money, nullable=True),
        sa.Column('confidence', sa.String(), nullable=False, server_default='manual'),
        *_timestamps('created_at'),
        sa.ForeignKeyConstraint(['bid_id'], ['contractor_bids.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_bid_equipment_bid_id'), 'bid_equipment', ['bid_id'], unique=False)

    op.create_table('bid_faqs',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('bid_id', sa.UUID(), nullable=False),
        sa.Column('faq_key', sa.String(), nullable=True),
        sa.Column('question_text', sa.Text(), nullable=True),
        sa.Column('answer_text', sa.Text(), nullable=True),
        sa.Column('answer_confidence', sa.String(), nullable=True),
        sa.Column('is_answered', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('display_order', sa.Integer(), nullable=True),
        *_timestamps('created_at', 'updated_at'),
        sa.ForeignKeyConstraint(['bid_id'], ['contractor_bids.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_bid_faqs_bid_id'), 'bid_faqs', ['bid_id'], unique=False)

    op.create_table('bid_questions',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('bid_id', sa.UUID(), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=True),
        sa.Column('question_category', sa.String(), nullable=True),
        sa.Column('priority', sa.String(), nullable=True),
        sa.Column('is_answered', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('answer_text', sa.Text(), nullable=True),
        sa.Column('answered_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('auto_generated', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('missing_field', sa.String(), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=True),
        *_timestamps('created_at'),
        sa.ForeignKeyConstraint(['bid_id'], ['contractor_bids.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_bid_questions_bid_id'), 'bid_questions', ['bid_id'], unique=False)

    op.create_table('bid_scores',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('bid_id', sa.UUID(), nullable=False),
        sa.Column('overall_score', sa.Numeric(5, 2), nullable=True),
        sa.Column('price_score', sa.Numeric(5, 2), nullable=True),
        sa.Column('quality_score', sa.Numeric(5, 2), nullable=True),
        sa.Column('value_score', sa.Numeric(5, 2), nullable=True),
        sa.Column('completeness_score', sa.Numeric(5, 2), nullable=True),
        *_timestamps('calculated_at'),
        sa.ForeignKeyConstraint(['bid_id'], ['contractor_bids.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('bid_id')
    )

    op.create_table('project_requirements',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('project_id', sa.UUID(), nullable=False),
        sa.Column('priority_price', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('priority_warranty', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('priority_efficiency', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('priority_timeline', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('priority_reputation', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('timeline_urgency', sa.String(), nullable=False, server_default='flexible'),
        sa.Column('budget_range', sa.String(), nullable=True),
        sa.Column('specific_concerns', postgresql.ARRAY(sa.Text()), nullable=False, server_default='{}'),
        sa.Column('must_have_features', postgresql.ARRAY(sa.Text()), nullable=False, server_default='{}'),
        sa.Column('nice_to_have_features', postgresql.ARRAY(sa.Text()), nullable=False, server_default='{}'),
        sa.Column('additional_notes', sa.Text(), nullable=True),
        sa.Column('completed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps('created_at', 'updated_at'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('project_id')
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('project_requirements')
    op.drop_table('bid_scores')
    op.drop_index(op.f('ix_bid_questions_bid_id'), table_name='bid_questions')
    op.drop_table('bid_questions')
    op.drop_index(op.f('ix_bid_faqs_bid_id'), table_name='bid_faqs')
    op.drop_table('bid_faqs')
    op.drop_index(op.f('ix_bid_equipment_bid_id'), table_name='bid_equipment')
    op.drop_table('bid_equipment')
    op.drop_index(op.f('ix_bid_line_items_bid_id'), table_name='bid_line_items')
    op.drop_table('bid_line_items')
    op.drop_index(op.f('ix_contractor_bids_project_id'), table_name='contractor_bids')
    op.drop_table('contractor_bids')
    op.drop_index(op.f('ix_mindpal_extractions_pdf_upload_id'), table_name='mindpal_extractions')
    op.drop_table('mindpal_extractions')
    op.drop_index(op.f('ix_pdf_uploads_project_id'), table_name='pdf_uploads')
    op.drop_table('pdf_uploads')
    op.drop_index(op.f('ix_projects_user_id'), table_name='projects')
    op.drop_table('projects')
