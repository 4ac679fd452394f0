"""initial polling schema

Revision ID: 4b1f0c2a9d7e
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4b1f0c2a9d7e'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'rooms',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='draft'),
        sa.Column('host_session', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_table(
        'questions',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('room_id', sa.String(), sa.ForeignKey('rooms.id'), nullable=False),
        sa.Column('text', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='closed'),
        sa.Column('max_options', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('room_id', 'order_index', name='uq_questions_room_order'),
    )
    op.create_index('ix_questions_room_id', 'questions', ['room_id'])
    op.create_index(
        'uq_questions_one_open_per_room',
        'questions',
        ['room_id'],
        unique=True,
        postgresql_where=sa.text("status = 'open'"),
        sqlite_where=sa.text("status = 'open'"),
    )
    op.create_table(
        'options',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('question_id', sa.String(), sa.ForeignKey('questions.id'), nullable=False),
        sa.Column('text', sa.String(), nullable=False),
        sa.Column('normalized_text', sa.String(), nullable=False),
        sa.Column('votes_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('question_id', 'normalized_text', name='uq_options_question_text'),
    )
    op.create_index('ix_options_question_id', 'options', ['question_id'])
    op.create_table(
        'players',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('room_id', sa.String(), sa.ForeignKey('rooms.id'), nullable=False),
        sa.Column('session_token', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('has_voted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('current_question_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('room_id', 'session_token', name='uq_players_room_token'),
    )
    op.create_index('ix_players_room_id', 'players', ['room_id'])
    op.create_table(
        'votes',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('room_id', sa.String(), sa.ForeignKey('rooms.id'), nullable=False),
        sa.Column('question_id', sa.String(), sa.ForeignKey('questions.id'), nullable=False),
        sa.Column('option_id', sa.String(), sa.ForeignKey('options.id'), nullable=False),
        sa.Column('player_id', sa.String(), sa.ForeignKey('players.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('player_id', 'question_id', name='uq_votes_player_question'),
    )
    op.create_index('ix_votes_question_id', 'votes', ['question_id'])


def downgrade() -> None:
    op.drop_index('ix_votes_question_id', table_name='votes')
    op.drop_table('votes')
    op.drop_index('ix_players_room_id', table_name='players')
    op.drop_table('players')
    op.drop_index('ix_options_question_id', table_name='options')
    op.drop_table('options')
    op.drop_index('uq_questions_one_open_per_room', table_name='questions')
    op.drop_index('ix_questions_room_id', table_name='questions')
    op.drop_table('questions')
    op.drop_table('rooms')
