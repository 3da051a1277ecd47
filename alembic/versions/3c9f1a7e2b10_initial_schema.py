"""initial_schema

Revision ID: 3c9f1a7e2b10
Revises:
Create Date: 2026-03-02

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c9f1a7e2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'businesses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('legal_name', sa.String(length=255), nullable=True),
        sa.Column('dba', sa.String(length=255), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('county', sa.String(length=100), nullable=False),
        sa.Column('state', sa.String(length=2), nullable=True),
        sa.Column('zip_code', sa.String(length=10), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('service_radius', sa.Float(), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column('facebook_url', sa.String(length=500), nullable=True),
        sa.Column('linkedin_url', sa.String(length=500), nullable=True),
        sa.Column('instagram_url', sa.String(length=500), nullable=True),
        sa.Column('specializations', sa.JSON(), nullable=True),
        sa.Column('niches', sa.JSON(), nullable=True),
        sa.Column('service_types', sa.JSON(), nullable=True),
        sa.Column('ownership_type', sa.String(length=30), nullable=True),
        sa.Column('owner_name', sa.String(length=255), nullable=True),
        sa.Column('owner_age', sa.Integer(), nullable=True),
        sa.Column('founded_year', sa.Integer(), nullable=True),
        sa.Column('generation', sa.Integer(), nullable=True),
        sa.Column('succession_status', sa.String(length=30), nullable=True),
        sa.Column('status', sa.String(length=30), nullable=True),
        sa.Column('qualified_at', sa.DateTime(), nullable=True),
        sa.Column('contacted_at', sa.DateTime(), nullable=True),
        sa.Column('disqualified_at', sa.DateTime(), nullable=True),
        sa.Column('disqualify_reason', sa.Text(), nullable=True),
        sa.Column('discovery_source', sa.String(length=100), nullable=True),
        sa.Column('discovery_job_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_businesses_name'), 'businesses', ['name'], unique=False)
    op.create_index(op.f('ix_businesses_city'), 'businesses', ['city'], unique=False)
    op.create_index(op.f('ix_businesses_county'), 'businesses', ['county'], unique=False)
    op.create_index(op.f('ix_businesses_status'), 'businesses', ['status'], unique=False)
    op.create_index(op.f('ix_businesses_discovery_job_id'), 'businesses', ['discovery_job_id'], unique=False)
    op.create_index('idx_business_natural_key', 'businesses', ['name', 'city', 'county'], unique=False)

    op.create_table(
        'licenses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('license_number', sa.String(length=50), nullable=False),
        sa.Column('license_type', sa.String(length=10), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('holder_name', sa.String(length=255), nullable=True),
        sa.Column('issue_date', sa.Date(), nullable=True),
        sa.Column('expiration_date', sa.Date(), nullable=True),
        sa.Column('tdlr_record_id', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_licenses_business_id'), 'licenses', ['business_id'], unique=False)
    op.create_index(op.f('ix_licenses_license_number'), 'licenses', ['license_number'], unique=False)

    op.create_table(
        'permits',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('permit_number', sa.String(length=100), nullable=True),
        sa.Column('permit_type', sa.String(length=20), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=True),
        sa.Column('issue_date', sa.Date(), nullable=True),
        sa.Column('completed_date', sa.Date(), nullable=True),
        sa.Column('project_address', sa.String(length=500), nullable=True),
        sa.Column('project_city', sa.String(length=100), nullable=True),
        sa.Column('project_value', sa.Float(), nullable=True),
        sa.Column('county', sa.String(length=100), nullable=True),
        sa.Column('source_url', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_permits_business_id'), 'permits', ['business_id'], unique=False)
    op.create_index(op.f('ix_permits_issue_date'), 'permits', ['issue_date'], unique=False)

    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('source', sa.String(length=20), nullable=True),
        sa.Column('rating', sa.Float(), nullable=True),
        sa.Column('review_count', sa.Integer(), nullable=True),
        sa.Column('average_rating', sa.Float(), nullable=True),
        sa.Column('sentiment_score', sa.Float(), nullable=True),
        sa.Column('common_themes', sa.JSON(), nullable=True),
        sa.Column('profile_url', sa.String(length=500), nullable=True),
        sa.Column('snapshot_date', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_reviews_business_id'), 'reviews', ['business_id'], unique=False)

    for table, count_column in (('employee_estimates', 'estimated_count'), ('fleet_estimates', 'vehicle_count')):
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('business_id', sa.Integer(), nullable=False),
            sa.Column(count_column, sa.Integer(), nullable=False),
            sa.Column('min_count', sa.Integer(), nullable=True),
            sa.Column('max_count', sa.Integer(), nullable=True),
            sa.Column('confidence', sa.Float(), nullable=True),
            sa.Column('source', sa.String(length=100), nullable=True),
            sa.Column('source_details', sa.JSON(), nullable=True),
            sa.Column('snapshot_date', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
            sa.ForeignKeyConstraint(['business_id'], ['businesses.id']),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index(op.f(f'ix_{table}_business_id'), table, ['business_id'], unique=False)
        op.create_index(op.f(f'ix_{table}_snapshot_date'), table, ['snapshot_date'], unique=False)

    op.create_table(
        'certifications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('issuer', sa.String(length=255), nullable=True),
        sa.Column('issue_date', sa.Date(), nullable=True),
        sa.Column('expiration_date', sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_certifications_business_id'), 'certifications', ['business_id'], unique=False)

    op.create_table(
        'association_memberships',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('association_name', sa.String(length=255), nullable=False),
        sa.Column('member_since', sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_association_memberships_business_id'), 'association_memberships', ['business_id'], unique=False)

    op.create_table(
        'business_notes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('note_type', sa.String(length=30), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_business_notes_business_id'), 'business_notes', ['business_id'], unique=False)

    op.create_table(
        'scores',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('revenue_proxy_score', sa.Integer(), nullable=False),
        sa.Column('online_weakness_score', sa.Integer(), nullable=False),
        sa.Column('acquisition_fit_score', sa.Integer(), nullable=False),
        sa.Column('growth_signals_score', sa.Integer(), nullable=False),
        sa.Column('overall_score', sa.Integer(), nullable=False),
        sa.Column('recommendation', sa.String(length=30), nullable=False),
        sa.Column('breakdown', sa.JSON(), nullable=False),
        sa.Column('config_version', sa.String(length=50), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('business_id', name='uq_scores_business_id'),
    )
    op.create_index(op.f('ix_scores_overall_score'), 'scores', ['overall_score'], unique=False)
    op.create_index(op.f('ix_scores_recommendation'), 'scores', ['recommendation'], unique=False)

    op.create_table(
        'scoring_configs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('version', sa.String(length=50), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('version'),
    )

    op.create_table(
        'research_jobs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('job_type', sa.String(length=30), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('parameters', sa.JSON(), nullable=True),
        sa.Column('progress', sa.Integer(), nullable=True),
        sa.Column('openai_response_id', sa.String(length=255), nullable=True),
        sa.Column('businesses_found', sa.Integer(), nullable=True),
        sa.Column('businesses_qualified', sa.Integer(), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_research_jobs_status'), 'research_jobs', ['status'], unique=False)

    op.create_table(
        'research_job_businesses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('research_job_id', sa.Integer(), nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['research_job_id'], ['research_jobs.id']),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('research_job_id', 'business_id', name='uq_research_job_business'),
    )
    op.create_index(op.f('ix_research_job_businesses_research_job_id'), 'research_job_businesses', ['research_job_id'], unique=False)
    op.create_index(op.f('ix_research_job_businesses_business_id'), 'research_job_businesses', ['business_id'], unique=False)


def downgrade() -> None:
    op.drop_table('research_job_businesses')
    op.drop_table('research_jobs')
    op.drop_table('scoring_configs')
    op.drop_table('scores')
    op.drop_table('business_notes')
    op.drop_table('association_memberships')
    op.drop_table('certifications')
    op.drop_table('fleet_estimates')
    op.drop_table('employee_estimates')
    op.drop_table('reviews')
    op.drop_table('permits')
    op.drop_table('licenses')
    op.drop_table('businesses')
