"""initial_schema

Revision ID: 3f1c2b7a9d10
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel

from config.settings import settings


# revision identifiers, used by Alembic.
revision: str = '3f1c2b7a9d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'candidates',
        sa.Column('id', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('candidate_number', sa.Integer(), nullable=False),
        sa.Column('first_name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('last_name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('mobile', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('phone', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('phone2', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('national_id', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('city', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('street', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('house_number', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('zip_code', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('address', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('gender', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('marital_status', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('driving_license', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('profession', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('experience', sa.Integer(), nullable=True),
        sa.Column('expected_salary', sa.Integer(), nullable=True),
        sa.Column('achievements', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('recruitment_source', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('cv_path', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('cv_content', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('candidate_number'),
        sa.UniqueConstraint('email'),
    )
    op.create_index(op.f('ix_candidates_mobile'), 'candidates', ['mobile'], unique=False)
    op.create_index(op.f('ix_candidates_national_id'), 'candidates', ['national_id'], unique=False)

    # Same expression as the full-text query in CandidateRepository.search_cv_content
    op.execute(
        "CREATE INDEX ix_candidates_cv_content_fts ON candidates "
        f"USING GIN (to_tsvector('{settings.TEXT_SEARCH_CONFIG}'::regconfig, cv_content))"
    )

    op.create_table(
        'jobs',
        sa.Column('id', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('job_code', sa.String(), nullable=True),
        sa.Column('title', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('requirements', sa.Text(), nullable=True),
        sa.Column('location', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('positions', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('job_code'),
    )

    op.create_table(
        'candidate_events',
        sa.Column('id', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('candidate_id', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('event_type', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['candidate_id'], ['candidates.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_candidate_events_candidate_id'), 'candidate_events', ['candidate_id'], unique=False)
    op.create_index(op.f('ix_candidate_events_event_type'), 'candidate_events', ['event_type'], unique=False)

    op.create_table(
        'job_applications',
        sa.Column('id', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('candidate_id', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('job_id', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('applied_at', sa.DateTime(), nullable=False),
        sa.Column('interview_date', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('client_feedback', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['candidate_id'], ['candidates.id']),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('candidate_id', 'job_id', name='uq_job_applications_candidate_job'),
    )
    op.create_index(op.f('ix_job_applications_candidate_id'), 'job_applications', ['candidate_id'], unique=False)
    op.create_index(op.f('ix_job_applications_job_id'), 'job_applications', ['job_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_job_applications_job_id'), table_name='job_applications')
    op.drop_index(op.f('ix_job_applications_candidate_id'), table_name='job_applications')
    op.drop_table('job_applications')
    op.drop_index(op.f('ix_candidate_events_event_type'), table_name='candidate_events')
    op.drop_index(op.f('ix_candidate_events_candidate_id'), table_name='candidate_events')
    op.drop_table('candidate_events')
    op.drop_table('jobs')
    op.execute("DROP INDEX IF EXISTS ix_candidates_cv_content_fts")
    op.drop_index(op.f('ix_candidates_national_id'), table_name='candidates')
    op.drop_index(op.f('ix_candidates_mobile'), table_name='candidates')
    op.drop_table('candidates')
