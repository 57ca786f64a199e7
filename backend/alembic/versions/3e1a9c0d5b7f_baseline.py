"""baseline

Revision ID: 3e1a9c0d5b7f
Revises: 
Create Date: 2026-10-19 09:12:40.511204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3e1a9c0d5b7f'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # No tables are mapped yet. This revision marks the starting point so
    # later schema changes are versioned instead of synchronized at startup.
    pass


def downgrade() -> None:
    pass
