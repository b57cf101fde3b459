"""Initial credibility schema: facts, memberships and score tables

Revision ID: 3b1f6c2d9a4e
Revises:
Create Date: 2026-10-19 09:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b1f6c2d9a4e'
down_revision = None
branch_labels = None
depends_on = None


def _created_at():
    return sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True)


def upgrade():
    op.create_table(
        'verifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('record_hash', sa.String(length=128), nullable=False),
        sa.Column('record_id', sa.String(length=128), nullable=False),
        sa.Column('verifier_id', sa.String(length=128), nullable=False),
        sa.Column('level', sa.String(length=16), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_verifications_record_hash', 'verifications', ['record_hash'])
    op.create_index('ix_verifications_verifier_active', 'verifications', ['verifier_id', 'is_active'])

    op.create_table(
        'disputes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('record_hash', sa.String(length=128), nullable=False),
        sa.Column('record_id', sa.String(length=128), nullable=False),
        sa.Column('disputer_id', sa.String(length=128), nullable=False),
        sa.Column('severity', sa.String(length=16), nullable=False),
        sa.Column('culpability', sa.String(length=16), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_disputes_record_hash', 'disputes', ['record_hash'])
    op.create_index('ix_disputes_disputer_active', 'disputes', ['disputer_id', 'is_active'])

    op.create_table(
        'dispute_reactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('dispute_id', sa.Integer(), nullable=False),
        sa.Column('reactor_id', sa.String(length=128), nullable=False),
        sa.Column('supports_dispute', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['dispute_id'], ['disputes.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_dispute_reactions_dispute', 'dispute_reactions', ['dispute_id'])

    op.create_table(
        'record_views',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('record_hash', sa.String(length=128), nullable=False),
        sa.Column('viewer_id', sa.String(length=128), nullable=False),
        sa.Column('viewed_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_record_views_record_hash', 'record_views', ['record_hash'])

    op.create_table(
        'record_memberships',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('record_id', sa.String(length=128), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('record_id', 'user_id', 'role', name='uq_record_membership'),
    )
    op.create_index('ix_record_memberships_user_active', 'record_memberships', ['user_id', 'is_active'])
    op.create_index('ix_record_memberships_record_role', 'record_memberships', ['record_id', 'role'])

    op.create_table(
        'user_profiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('identity_verified', sa.Boolean(), nullable=False),
        sa.Column('verified_provider', sa.Boolean(), nullable=False),
        _created_at(),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'unaccepted_flags',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('record_id', sa.String(length=128), nullable=False),
        sa.Column('subject_id', sa.String(length=128), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_unaccepted_flags_subject_active', 'unaccepted_flags', ['subject_id', 'is_active'])

    op.create_table(
        'hash_scores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('record_hash', sa.String(length=128), nullable=False),
        sa.Column('record_id', sa.String(length=128), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('base_score', sa.Float(), nullable=False),
        sa.Column('verification_bonus', sa.Float(), nullable=True),
        sa.Column('implicit_review_bonus', sa.Float(), nullable=True),
        sa.Column('dispute_penalty', sa.Float(), nullable=True),
        sa.Column('stats_json', sa.JSON(), nullable=False),
        sa.Column('calculation_version', sa.Integer(), nullable=False),
        sa.Column('last_calculated', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('record_hash'),
    )
    op.create_index('ix_hash_scores_record_id', 'hash_scores', ['record_id'])

    op.create_table(
        'record_scores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('record_id', sa.String(length=128), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('hash_count', sa.Integer(), nullable=True),
        sa.Column('active_subject_count', sa.Integer(), nullable=True),
        sa.Column('calculation_version', sa.Integer(), nullable=False),
        sa.Column('last_calculated', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('record_id'),
    )

    counters = (
        'record_count',
        'total_verifications_given',
        'total_verifications_disputed',
        'total_disputes_filed',
        'total_disputes_supported',
        'total_unaccepted_flags',
    )

    op.create_table(
        'user_scores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('credibility_score', sa.Integer(), nullable=False),
        sa.Column('average_record_score', sa.Float(), nullable=True),
        *[sa.Column(name, sa.Integer(), nullable=True) for name in counters],
        sa.Column('last_calculated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('calculation_version', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'score_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('credibility_score', sa.Integer(), nullable=False),
        sa.Column('average_record_score', sa.Float(), nullable=True),
        *[sa.Column(name, sa.Integer(), nullable=True) for name in counters],
        sa.Column('calculation_version', sa.Integer(), nullable=False),
        sa.Column('triggered_by', sa.String(length=32), nullable=False),
        sa.Column('calculated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_score_history_user_calculated', 'score_history', ['user_id', 'calculated_at'])


def downgrade():
    op.drop_index('ix_score_history_user_calculated', table_name='score_history')
    op.drop_table('score_history')
    op.drop_table('user_scores')
    op.drop_table('record_scores')
    op.drop_index('ix_hash_scores_record_id', table_name='hash_scores')
    op.drop_table('hash_scores')
    op.drop_index('ix_unaccepted_flags_subject_active', table_name='unaccepted_flags')
    op.drop_table('unaccepted_flags')
    op.drop_table('user_profiles')
    op.drop_index('ix_record_memberships_record_role', table_name='record_memberships')
    op.drop_index('ix_record_memberships_user_active', table_name='record_memberships')
    op.drop_table('record_memberships')
    op.drop_index('ix_record_views_record_hash', table_name='record_views')
    op.drop_table('record_views')
    op.drop_index('ix_dispute_reactions_dispute', table_name='dispute_reactions')
    op.drop_table('dispute_reactions')
    op.drop_index('ix_disputes_disputer_active', table_name='disputes')
    op.drop_index('ix_disputes_record_hash', table_name='disputes')
    op.drop_table('disputes')
    op.drop_index('ix_verifications_verifier_active', table_name='verifications')
    op.drop_index('ix_verifications_record_hash', table_name='verifications')
    op.drop_table('verifications')
