"""create workouts, exercises and completions

Revision ID: 7f3b9c21d4e8
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '7f3b9c21d4e8'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'workouts',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('is_favorite', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("length(name) >= 1", name=op.f('ck_workouts_name_not_empty')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_workouts')),
    )
    with op.batch_alter_table('workouts', schema=None) as batch_op:
        batch_op.create_index('ix_workouts_category', ['category'], unique=False)
        batch_op.create_index('ix_workouts_favorite_updated', ['is_favorite', 'updated_at'], unique=False)

    op.create_table(
        'exercises',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('workout_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('reps', sa.Integer(), nullable=True),
        sa.Column('sets', sa.Integer(), nullable=True),
        sa.Column('duration', sa.String(length=50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('order', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('reps IS NULL OR (reps >= 1 AND reps <= 1000)', name=op.f('ck_exercises_reps_range')),
        sa.CheckConstraint('sets IS NULL OR (sets >= 1 AND sets <= 100)', name=op.f('ck_exercises_sets_range')),
        sa.CheckConstraint('"order" >= 0', name=op.f('ck_exercises_order_non_negative')),
        sa.ForeignKeyConstraint(['workout_id'], ['workouts.id'], name=op.f('fk_exercises_workout_id_workouts'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_exercises')),
    )
    with op.batch_alter_table('exercises', schema=None) as batch_op:
        batch_op.create_index('ix_exercises_workout_order', ['workout_id', 'order'], unique=False)

    op.create_table(
        'workout_completions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('workout_id', sa.String(length=36), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.CheckConstraint('duration IS NULL OR (duration >= 1 AND duration <= 600)', name=op.f('ck_workout_completions_duration_range')),
        sa.ForeignKeyConstraint(['workout_id'], ['workouts.id'], name=op.f('fk_workout_completions_workout_id_workouts'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_workout_completions')),
    )
    with op.batch_alter_table('workout_completions', schema=None) as batch_op:
        batch_op.create_index('ix_workout_completions_workout_completed', ['workout_id', 'completed_at'], unique=False)


def downgrade():
    with op.batch_alter_table('workout_completions', schema=None) as batch_op:
        batch_op.drop_index('ix_workout_completions_workout_completed')
    op.drop_table('workout_completions')

    with op.batch_alter_table('exercises', schema=None) as batch_op:
        batch_op.drop_index('ix_exercises_workout_order')
    op.drop_table('exercises')

    with op.batch_alter_table('workouts', schema=None) as batch_op:
        batch_op.drop_index('ix_workouts_favorite_updated')
        batch_op.drop_index('ix_workouts_category')
    op.drop_table('workouts')
