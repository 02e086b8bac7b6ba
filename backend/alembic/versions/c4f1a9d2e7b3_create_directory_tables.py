"""create_directory_tables

Revision ID: c4f1a9d2e7b3
Revises:
Create Date: 2026-10-18 10:12:41.208315

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = 'c4f1a9d2e7b3'
down_revision = None
branch_labels = None
depends_on = None


def profile_columns():
    # Descriptive columns shared by startups and submissions
    return [
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('short_description', sa.String(length=200), nullable=False),
        sa.Column('long_description', sa.Text(), nullable=False),
        sa.Column('logo_url', sa.String(length=500), nullable=True),
        sa.Column('founded_year', sa.Integer(), nullable=False),
        sa.Column('operating_status', sa.String(length=20), nullable=False),
        sa.Column('location', sa.String(length=100), nullable=False),
        sa.Column('tags', postgresql.ARRAY(sa.String()), nullable=False),
        sa.Column('employee_range', sa.String(length=20), nullable=True),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('social_links', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('funding_received', sa.Text(), nullable=True),
        sa.Column('pitch_deck_url', sa.String(length=500), nullable=True),
    ]


def upgrade():
    # Create startups table
    op.create_table(
        'startups',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('slug', sa.String(length=120), nullable=False),
        *profile_columns(),
        sa.Column('is_approved', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_startups_slug', 'startups', ['slug'], unique=True)
    op.create_index('ix_startups_tags', 'startups', ['tags'], postgresql_using='gin')

    # Create submissions table
    op.create_table(
        'submissions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('slug', sa.String(length=120), nullable=False),
        *profile_columns(),
        sa.Column('submitter_email', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('reviewed_by', sa.Uuid(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approved_startup_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['approved_startup_id'], ['startups.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name='valid_submission_status')
    )
    op.create_index('ix_submissions_slug', 'submissions', ['slug'])
    op.create_index('ix_submissions_status', 'submissions', ['status'])

    # Create startup_owners table
    op.create_table(
        'startup_owners',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('startup_id', sa.Uuid(), nullable=False),
        sa.Column('approved', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['startup_id'], ['startups.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'startup_id', name='uq_startup_owners_user_startup')
    )
    op.create_index('ix_startup_owners_user_id', 'startup_owners', ['user_id'])
    # At most one approved owner per startup
    op.create_index(
        'uq_startup_owners_one_approved',
        'startup_owners',
        ['startup_id'],
        unique=True,
        postgresql_where=sa.text('approved')
    )


def downgrade():
    op.drop_index('uq_startup_owners_one_approved', table_name='startup_owners')
    op.drop_index('ix_startup_owners_user_id', table_name='startup_owners')
    op.drop_table('startup_owners')
    op.drop_index('ix_submissions_status', table_name='submissions')
    op.drop_index('ix_submissions_slug', table_name='submissions')
    op.drop_table('submissions')
    op.drop_index('ix_startups_tags', table_name='startups')
    op.drop_index('ix_startups_slug', table_name='startups')
    op.drop_table('startups')
