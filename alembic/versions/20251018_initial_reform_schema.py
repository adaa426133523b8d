"""
initial reform agenda schema

Revision ID: 20251018_initial_reform_schema
Revises:
Create Date: 2025-10-18
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20251018_initial_reform_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.Column('role', sa.Enum('user', 'moderator', 'admin', name='profilerole'), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_profiles_id', 'profiles', ['id'])
    op.create_index('ix_profiles_email', 'profiles', ['email'])

    op.create_table(
        'agendas',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('sequence_id', sa.Integer(), nullable=True),
        sa.Column('title', sa.String(length=300), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('problem_statement', sa.Text(), nullable=True),
        sa.Column('problem_statement_long', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('priority', sa.String(length=20), nullable=False, server_default='Medium'),
        sa.Column('timeline', sa.String(length=50), nullable=True),
        sa.Column('key_points', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_agendas_sequence_id', 'agendas', ['sequence_id'], unique=True)
    op.create_index('ix_agendas_category', 'agendas', ['category'])

    op.create_table(
        'suggestions',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('agenda_id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('author_name', sa.String(length=200), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('reviewed_by', sa.String(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ),
        sa.ForeignKeyConstraint(['reviewed_by'], ['profiles.id'], ),
    )
    op.create_index('ix_suggestions_agenda_id', 'suggestions', ['agenda_id'])
    op.create_index('ix_suggestions_user_id', 'suggestions', ['user_id'])
    op.create_index('ix_suggestions_status', 'suggestions', ['status'])
    op.create_index('ix_suggestions_created_at', 'suggestions', ['created_at'])

    for table, constraint in (('agenda_votes', 'uq_agenda_vote_item_user'),
                              ('suggestion_votes', 'uq_suggestion_vote_item_user')):
        op.create_table(
            table,
            sa.Column('id', sa.String(), primary_key=True),
            sa.Column('item_id', sa.String(), nullable=False),
            sa.Column('user_id', sa.String(), nullable=False),
            sa.Column('vote_type', sa.String(length=10), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.UniqueConstraint('item_id', 'user_id', name=constraint),
            sa.CheckConstraint("vote_type IN ('like', 'dislike')", name=f'ck_{table}_vote_type'),
        )
        op.create_index(f'ix_{table}_item_id', table, ['item_id'])
        op.create_index(f'ix_{table}_user_id', table, ['user_id'])

    op.create_table(
        'testimonials',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('profession', sa.String(length=200), nullable=True),
        sa.Column('testimonial', sa.Text(), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=True),
        sa.Column('linkedin_url', sa.Text(), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'system_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('auto_approve_suggestions', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    )
    op.execute("INSERT INTO system_settings (id, auto_approve_suggestions) VALUES (1, false)")


def downgrade() -> None:
    op.drop_table('system_settings')
    op.drop_table('testimonials')
    for table in ('suggestion_votes', 'agenda_votes'):
        op.drop_index(f'ix_{table}_user_id', table_name=table)
        op.drop_index(f'ix_{table}_item_id', table_name=table)
        op.drop_table(table)
    op.drop_index('ix_suggestions_created_at', table_name='suggestions')
    op.drop_index('ix_suggestions_status', table_name='suggestions')
    op.drop_index('ix_suggestions_user_id', table_name='suggestions')
    op.drop_index('ix_suggestions_agenda_id', table_name='suggestions')
    op.drop_table('suggestions')
    op.drop_index('ix_agendas_category', table_name='agendas')
    op.drop_index('ix_agendas_sequence_id', table_name='agendas')
    op.drop_table('agendas')
    op.drop_index('ix_profiles_email', table_name='profiles')
    op.drop_index('ix_profiles_id', table_name='profiles')
    op.drop_table('profiles')
    sa.Enum(name='profilerole').drop(op.get_bind(), checkfirst=True)
