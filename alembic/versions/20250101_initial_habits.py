"""
initial habits and completion reports

Revision ID: 20250101_initial_habits
Revises: 
Create Date: 2025-01-01 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20250101_initial_habits'
down_revision = None
branch_labels = None
depends_on = None

frequency_type = sa.Enum('WEEKLY_ON_DAYS', 'WEEKLY_X_TIMES', 'MONTHLY_X_TIMES', name='frequencytype')


def upgrade() -> None:
    op.create_table(
        'habits',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.Integer, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.String(1000), nullable=True),
        sa.Column('is_photo_allowed', sa.Boolean, nullable=False),
        sa.Column('is_harmful', sa.Boolean, nullable=False),
        sa.Column('duration_days', sa.Integer, nullable=True),
        sa.Column('frequency_type', frequency_type, nullable=False),
        sa.Column('days_of_week', sa.JSON, nullable=True),
        sa.Column('times_per_week', sa.Integer, nullable=True),
        sa.Column('times_per_month', sa.Integer, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('user_id', 'name', name='uq_habits_user_name'),
    )
    op.create_index('ix_habits_user_id', 'habits', ['user_id'])
    op.create_index('ix_habits_frequency_type', 'habits', ['frequency_type'])

    op.create_table(
        'completion_reports',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('habit_id', sa.Integer, sa.ForeignKey('habits.id'), nullable=False),
        sa.Column('report_date', sa.Date, nullable=False),
        sa.Column('completion_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('photo_url', sa.String(2048), nullable=True),
        sa.UniqueConstraint('habit_id', 'report_date', name='uq_completion_reports_habit_date'),
    )
    op.create_index('ix_completion_reports_habit_id', 'completion_reports', ['habit_id'])
    op.create_index('ix_completion_reports_report_date', 'completion_reports', ['report_date'])


def downgrade() -> None:
    op.drop_index('ix_completion_reports_report_date', table_name='completion_reports')
    op.drop_index('ix_completion_reports_habit_id', table_name='completion_reports')
    op.drop_table('completion_reports')
    op.drop_index('ix_habits_frequency_type', table_name='habits')
    op.drop_index('ix_habits_user_id', table_name='habits')
    op.drop_table('habits')
    frequency_type.drop(op.get_bind(), checkfirst=True)
