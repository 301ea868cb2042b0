"""create calendar_connections and external_events tables

Revision ID: 4f1c2a9d7e30
Revises:
Create Date: 2026-10-18 10:00:00.000000

calendar_connections holds one encrypted OAuth credential set per
(user_id, provider). external_events holds the mirrored event snapshot,
replaced wholesale on every sync.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1c2a9d7e30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create both tables."""
    op.create_table(
        'calendar_connections',
        # Composite key: one connection per user and provider
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('provider', sa.String(length=50), nullable=False),

        # Encrypted tokens ("ivHex:ciphertextHex")
        sa.Column('access_token', sa.Text(), nullable=False),
        sa.Column('refresh_token', sa.Text(), nullable=True),

        # Timestamps
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),

        sa.PrimaryKeyConstraint('user_id', 'provider'),
    )

    op.create_table(
        'external_events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('provider', sa.String(length=50), nullable=False),

        # Provider-assigned id; not unique
        sa.Column('event_id', sa.String(length=1024), nullable=False),

        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('start', sa.String(length=64), nullable=False),
        sa.Column('end', sa.String(length=64), nullable=False),
        sa.Column('color', sa.String(length=32), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),

        sa.PrimaryKeyConstraint('id'),
    )

    # Every read and the snapshot delete filter on (user_id, provider)
    op.create_index(
        'ix_external_events_user_provider',
        'external_events',
        ['user_id', 'provider'],
        unique=False
    )


def downgrade() -> None:
    """Drop both tables."""
    op.drop_index('ix_external_events_user_provider', table_name='external_events')
    op.drop_table('external_events')
    op.drop_table('calendar_connections')
