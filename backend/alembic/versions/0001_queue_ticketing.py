"""Create counters and queues tables

Revision ID: 0001_queue_ticketing
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_queue_ticketing'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('counters',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('current_queue', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('max_queue', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_counters_id'), 'counters', ['id'], unique=False)
    op.create_index(op.f('ix_counters_name'), 'counters', ['name'], unique=False)

    op.create_table('queues',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('counter_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['counter_id'], ['counters.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_queues_id'), 'queues', ['id'], unique=False)
    op.create_index(op.f('ix_queues_number'), 'queues', ['number'], unique=False)
    op.create_index(op.f('ix_queues_status'), 'queues', ['status'], unique=False)
    op.create_index(op.f('ix_queues_counter_id'), 'queues', ['counter_id'], unique=False)
    op.create_index('ix_queues_counter_status_created', 'queues', ['counter_id', 'status', 'created_at'], unique=False)


def downgrade():
    op.drop_index('ix_queues_counter_status_created', table_name='queues')
    op.drop_index(op.f('ix_queues_counter_id'), table_name='queues')
    op.drop_index(op.f('ix_queues_status'), table_name='queues')
    op.drop_index(op.f('ix_queues_number'), table_name='queues')
    op.drop_index(op.f('ix_queues_id'), table_name='queues')
    op.drop_table('queues')
    op.drop_index(op.f('ix_counters_name'), table_name='counters')
    op.drop_index(op.f('ix_counters_id'), table_name='counters')
    op.drop_table('counters')
