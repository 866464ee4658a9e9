"""Cases table for the remote case mirror

Revision ID: 001_cases
Revises:
Create Date: 2025-10-18 00:00:00.000000

report_data holds the analysis report in its camelCase wire format.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_cases'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create cases table."""
    op.create_table(
        'cases',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('reference_number', sa.String(length=32), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('plaintiff', sa.String(length=255), nullable=True),
        sa.Column('defendant', sa.String(length=255), nullable=True),
        sa.Column('report_data', sa.JSON(), nullable=True),
        sa.Column('thumbnail_url', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_index(op.f('ix_cases_id'), 'cases', ['id'], unique=False)
    op.create_index(op.f('ix_cases_reference_number'), 'cases', ['reference_number'], unique=False)
    op.create_index(op.f('ix_cases_created_at'), 'cases', ['created_at'], unique=False)


def downgrade() -> None:
    """Drop cases table."""
    op.drop_index(op.f('ix_cases_created_at'), table_name='cases')
    op.drop_index(op.f('ix_cases_reference_number'), table_name='cases')
    op.drop_index(op.f('ix_cases_id'), table_name='cases')
    op.drop_table('cases')
