"""Add play_history table

Revision ID: 3f1a9c2e7b10
Revises:
Create Date: 2026-10-19 09:12:31.408215

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1a9c2e7b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'play_history',
        sa.Column(
            'id',
            sa.Integer(),
            autoincrement=True,
            nullable=False,
        ),
        sa.Column(
            'user_id',
            sa.String(length=50),
            nullable=False,
        ),
        sa.Column(
            'track_url',
            sa.String(length=2048),
            nullable=False,
        ),
        sa.Column(
            'track_name',
            sa.String(length=200),
            nullable=False,
        ),
        sa.Column(
            'play_count',
            sa.Integer(),
            nullable=False,
            server_default='1',
        ),
        sa.Column(
            'last_played',
            sa.DateTime(),
            nullable=False,
        ),
        sa.Column(
            'played_in_current_session',
            sa.Boolean(),
            nullable=False,
            server_default=sa.text('false'),
        ),
        sa.Column(
            'session_id',
            sa.String(length=128),
            nullable=True,
        ),
        sa.Column(
            'created_at',
            sa.DateTime(),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'user_id',
            'track_url',
            name='uq_play_history_user_track',
        ),
    )
    op.create_index(
        op.f('ix_play_history_user_id'),
        'play_history',
        ['user_id'],
        unique=False,
    )
    op.create_index(
        'ix_play_history_user_last_played',
        'play_history',
        ['user_id', 'last_played'],
        unique=False,
    )
    op.create_index(
        'ix_play_history_user_play_count',
        'play_history',
        ['user_id', 'play_count'],
        unique=False,
    )


def downgrade():
    op.drop_index(
        'ix_play_history_user_play_count',
        table_name='play_history',
    )
    op.drop_index(
        'ix_play_history_user_last_played',
        table_name='play_history',
    )
    op.drop_index(
        op.f('ix_play_history_user_id'),
        table_name='play_history',
    )
    op.drop_table('play_history')
