"""Initial schema: users, analysis requests, status history, score matrices, results.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

Creates:
- users
- analysis_requests (soft delete via status + purge_after)
- request_status_history
- score_matrices (one column per pattern/region pair plus derived columns)
- analysis_results
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

PATTERNS = ('criativo', 'conectivo', 'forte', 'lider', 'competitivo')
REGIONS = ('head', 'eyes', 'mouth', 'torso', 'waist', 'legs')

JSON_DOCUMENT = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql')


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _int_column(name: str) -> sa.Column:
    return sa.Column(name, sa.Integer(), server_default='0', nullable=False)


def upgrade() -> None:
    # ==========================================================================
    # users
    # ==========================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('display_name', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('token_version', sa.Integer(), server_default='1', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )

    # ==========================================================================
    # analysis_requests
    # ==========================================================================
    op.create_table(
        'analysis_requests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('public_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('analysis_for', sa.String(10), nullable=False),
        sa.Column('other_reason', sa.Text(), nullable=True),
        sa.Column('priority_domain', sa.String(20), nullable=False),
        sa.Column('complaint_1', sa.Text(), nullable=False),
        sa.Column('complaint_2', sa.Text(), nullable=True),
        sa.Column('complaint_3', sa.Text(), nullable=True),
        sa.Column('had_surgery', sa.Boolean(), nullable=False),
        sa.Column('surgery_details', sa.Text(), nullable=True),
        sa.Column('had_trauma', sa.Boolean(), nullable=False),
        sa.Column('trauma_details', sa.Text(), nullable=True),
        sa.Column('used_device', sa.Boolean(), nullable=False),
        sa.Column('device_details', sa.Text(), nullable=True),
        sa.Column('front_body_photo', sa.String(500), nullable=True),
        sa.Column('back_body_photo', sa.String(500), nullable=True),
        sa.Column('serious_face_photo', sa.String(500), nullable=True),
        sa.Column('smiling_face_photo', sa.String(500), nullable=True),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('payment_reference', sa.String(255), nullable=True),
        sa.Column('status', sa.String(30), server_default='awaiting_payment', nullable=False),
        sa.Column('has_result', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('reviewer_id', sa.Uuid(), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('review_started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('purge_after', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('public_id', name='uq_analysis_requests_public_id'),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'], name='fk_analysis_requests_user_id_users', ondelete='RESTRICT'
        ),
        sa.ForeignKeyConstraint(
            ['reviewer_id'], ['users.id'], name='fk_analysis_requests_reviewer_id_users', ondelete='SET NULL'
        ),
    )
    op.create_index('idx_analysis_requests_user', 'analysis_requests', ['user_id', 'id'])
    op.create_index('idx_analysis_requests_status', 'analysis_requests', ['status', 'created_at'])
    op.create_index(
        'idx_analysis_requests_purge',
        'analysis_requests',
        ['purge_after'],
        postgresql_where=sa.text('purge_after IS NOT NULL'),
    )

    # ==========================================================================
    # request_status_history
    # ==========================================================================
    op.create_table(
        'request_status_history',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('analysis_request_id', sa.Integer(), nullable=False),
        sa.Column('from_status', sa.String(30), nullable=False),
        sa.Column('to_status', sa.String(30), nullable=False),
        sa.Column('event', sa.String(30), nullable=False),
        sa.Column('changed_by_user_id', sa.Uuid(), nullable=True),
        sa.Column('changed_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['analysis_request_id'], ['analysis_requests.id'], name='fk_request_status_history_analysis_request_id_analysis_requests', ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['changed_by_user_id'], ['users.id'], name='fk_request_status_history_changed_by_user_id_users', ondelete='SET NULL'
        ),
    )
    op.create_index(
        'idx_status_history_request', 'request_status_history', ['analysis_request_id', 'changed_at']
    )

    # ==========================================================================
    # score_matrices
    # ==========================================================================
    op.create_table(
        'score_matrices',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('analysis_request_id', sa.Integer(), nullable=False),
        *[_int_column(f'{p}_{r}') for p in PATTERNS for r in REGIONS],
        *[_int_column(f'{p}_total') for p in PATTERNS],
        *[_int_column(f'{p}_percentage') for p in PATTERNS],
        sa.Column('primary_pattern', sa.String(20), server_default='', nullable=False),
        sa.Column('secondary_pattern', sa.String(20), server_default='', nullable=False),
        sa.Column('tertiary_pattern', sa.String(20), server_default='', nullable=False),
        sa.Column('scoring_notes', sa.Text(), nullable=True),
        sa.Column('scored_by_user_id', sa.Uuid(), nullable=True),
        sa.Column('recomputed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('analysis_request_id', name='uq_score_matrices_analysis_request_id'),
        sa.ForeignKeyConstraint(
            ['analysis_request_id'], ['analysis_requests.id'], name='fk_score_matrices_analysis_request_id_analysis_requests', ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['scored_by_user_id'], ['users.id'], name='fk_score_matrices_scored_by_user_id_users', ondelete='SET NULL'
        ),
        *[
            sa.CheckConstraint(f'{p}_{r} BETWEEN 0 AND 10', name=f'ck_score_{p}_{r}_range')
            for p in PATTERNS
            for r in REGIONS
        ],
        *[
            sa.CheckConstraint(
                ' + '.join(f'{p}_{r}' for p in PATTERNS) + ' <= 10',
                name=f'ck_score_{r}_budget',
            )
            for r in REGIONS
        ],
    )

    # ==========================================================================
    # analysis_results
    # ==========================================================================
    trait_columns = []
    for slot in (1, 2, 3):
        trait_columns += [
            sa.Column(f'trait{slot}_name', sa.String(20), nullable=False),
            sa.Column(f'trait{slot}_percentage', sa.Integer(), nullable=False),
            sa.Column(f'trait{slot}_pain', JSON_DOCUMENT, nullable=False),
            sa.Column(f'trait{slot}_resource', JSON_DOCUMENT, nullable=False),
        ]

    op.create_table(
        'analysis_results',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('analysis_request_id', sa.Integer(), nullable=False),
        sa.Column('axis', sa.String(20), nullable=False),
        sa.Column('diagnosis', sa.Text(), nullable=False),
        sa.Column('blockage_explanation', sa.Text(), nullable=False),
        sa.Column('release_path', sa.Text(), nullable=False),
        *trait_columns,
        sa.Column('pain_state', sa.Text(), server_default='', nullable=False),
        sa.Column('resource_state', sa.Text(), server_default='', nullable=False),
        sa.Column('action_1', sa.Text(), nullable=True),
        sa.Column('action_1_due', sa.Date(), nullable=True),
        sa.Column('action_2', sa.Text(), nullable=True),
        sa.Column('action_2_due', sa.Date(), nullable=True),
        sa.Column('generated_by_user_id', sa.Uuid(), nullable=True),
        sa.Column('generated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('analysis_request_id', name='uq_analysis_results_analysis_request_id'),
        sa.ForeignKeyConstraint(
            ['analysis_request_id'], ['analysis_requests.id'], name='fk_analysis_results_analysis_request_id_analysis_requests', ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['generated_by_user_id'], ['users.id'], name='fk_analysis_results_generated_by_user_id_users', ondelete='SET NULL'
        ),
    )


def downgrade() -> None:
    op.drop_table('analysis_results')
    op.drop_table('score_matrices')
    op.drop_index('idx_status_history_request', table_name='request_status_history')
    op.drop_table('request_status_history')
    op.drop_index('idx_analysis_requests_purge', table_name='analysis_requests')
    op.drop_index('idx_analysis_requests_status', table_name='analysis_requests')
    op.drop_index('idx_analysis_requests_user', table_name='analysis_requests')
    op.drop_table('analysis_requests')
    op.drop_table('users')
