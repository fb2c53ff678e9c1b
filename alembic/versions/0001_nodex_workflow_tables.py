"""create no-due workflow tables

Revision ID: 0001_nodex_workflow
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from nodex.db.tables import metadata

# revision identifiers, used by Alembic.
revision: str = "0001_nodex_workflow"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


APPLICATIONS_INDEX = "ix_applications_department_batch"


def _existing_tables() -> set:
    bind = op.get_bind()
    return set(sa.inspect(bind).get_table_names())


def _existing_indexes(table: str) -> set:
    bind = op.get_bind()
    return {ix["name"] for ix in sa.inspect(bind).get_indexes(table)}


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')
    existing = _existing_tables()
    bind = op.get_bind()
    # sorted_tables orders parents before children (profiles before applications)
    for table in metadata.sorted_tables:
        if table.name in existing:
            continue
        table.create(bind=bind)

    if APPLICATIONS_INDEX not in _existing_indexes("applications"):
        op.create_index(
            APPLICATIONS_INDEX,
            "applications",
            ["department", "batch"],
            unique=False,
        )


def downgrade() -> None:
    existing = _existing_tables()
    if "applications" in existing and APPLICATIONS_INDEX in _existing_indexes("applications"):
        op.drop_index(APPLICATIONS_INDEX, table_name="applications")
    bind = op.get_bind()
    for table in reversed(metadata.sorted_tables):
        if table.name in existing:
            table.drop(bind=bind)
