"""create users, problems, submissions and challenge tables

Revision ID: 20261019090000
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019090000'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables for the practice + 20-day challenge schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('username', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('student_id', sa.String(), nullable=True),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('xp', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('level', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('rank', sa.String(), nullable=False, server_default='Intern'),
        sa.Column('role', sa.String(), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('last_active', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)

    op.create_table(
        'problems',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('difficulty', sa.String(length=16), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('story', sa.Text(), nullable=False, server_default=''),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('skill', sa.String(length=255), nullable=True),
        sa.Column('examples', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('hints', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('interview_questions', sa.Text(), nullable=False, server_default='[]'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_problems_id'), 'problems', ['id'], unique=False)
    op.create_index(op.f('ix_problems_difficulty'), 'problems', ['difficulty'], unique=False)

    op.create_table(
        'submissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('problem_id', sa.Integer(), sa.ForeignKey('problems.id'), nullable=False),
        sa.Column('mode', sa.String(length=16), nullable=False, server_default='practice'),
        sa.Column('language', sa.String(length=32), nullable=False, server_default='python'),
        sa.Column('thinking', sa.Text(), nullable=False, server_default=''),
        sa.Column('code', sa.Text(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('feedback', sa.Text(), nullable=False, server_default=''),
        sa.Column('xp_gained', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_submissions_id'), 'submissions', ['id'], unique=False)
    op.create_index(op.f('ix_submissions_user_id'), 'submissions', ['user_id'], unique=False)

    op.create_table(
        'user_achievements',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('key', sa.String(length=64), nullable=False),
        sa.Column('earned_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'key', name='uq_user_achievement'),
    )
    op.create_index(op.f('ix_user_achievements_id'), 'user_achievements', ['id'], unique=False)
    op.create_index(op.f('ix_user_achievements_user_id'), 'user_achievements', ['user_id'], unique=False)

    op.create_table(
        'challenge_progress',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('schema_version', sa.Integer(), nullable=False, server_default='2'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('current_day', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('consecutive_days', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('completed_days', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('daily_challenges', sa.JSON(), nullable=False),
        sa.Column('activity_logs', sa.JSON(), nullable=False),
        sa.Column('last_activity_date', sa.Date(), nullable=True),
        sa.Column('failed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('failed_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_challenge_progress_id'), 'challenge_progress', ['id'], unique=False)
    # Unique: the upsert conflicts on user_id
    op.create_index(op.f('ix_challenge_progress_user_id'), 'challenge_progress', ['user_id'], unique=True)

    op.create_table(
        'challenge_results',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('problem_id', sa.Integer(), nullable=False),
        sa.Column('problem_title', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('difficulty', sa.String(length=16), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('day_number', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_challenge_results_id'), 'challenge_results', ['id'], unique=False)
    op.create_index(op.f('ix_challenge_results_user_id'), 'challenge_results', ['user_id'], unique=False)


def downgrade() -> None:
    """Drop every table created above."""
    op.drop_table('challenge_results')
    op.drop_table('challenge_progress')
    op.drop_table('user_achievements')
    op.drop_table('submissions')
    op.drop_table('problems')
    op.drop_table('users')
