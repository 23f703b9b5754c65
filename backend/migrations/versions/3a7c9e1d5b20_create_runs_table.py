"""create runs table

Revision ID: 3a7c9e1d5b20
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3a7c9e1d5b20'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'runs' in insp.get_table_names():
        return
    op.create_table(
        'runs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('player_name', sa.String(length=64), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('question_count', sa.Integer(), nullable=False),
        sa.Column('correct_count', sa.Integer(), nullable=False),
        sa.Column('elapsed_seconds', sa.Float(), nullable=False),
        sa.Column('time_limit_seconds', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    with op.batch_alter_table('runs') as batch_op:
        batch_op.create_index('ix_runs_player_name', ['player_name'])
        batch_op.create_index('ix_runs_ranking', ['score', 'elapsed_seconds', 'created_at'])


def downgrade():
    with op.batch_alter_table('runs') as batch_op:
        batch_op.drop_index('ix_runs_ranking')
        batch_op.drop_index('ix_runs_player_name')
    op.drop_table('runs')
