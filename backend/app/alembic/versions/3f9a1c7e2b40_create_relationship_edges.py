"""create relationship edges

Revision ID: 3f9a1c7e2b40
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f9a1c7e2b40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "relationshipedge",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("requester_id", sa.Uuid(), nullable=False),
        sa.Column("target_id", sa.Uuid(), nullable=False),
        sa.Column("pair_key", sa.String(length=80), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "pending",
                "accepted",
                name="friendshipstatus",
                native_enum=False,
                length=16,
            ),
            nullable=False,
        ),
        sa.Column("message", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("requester_id <> target_id", name="ck_edge_not_self"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_relationshipedge_pair_key", "relationshipedge", ["pair_key"], unique=True
    )
    op.create_index(
        "ix_relationshipedge_requester_id",
        "relationshipedge",
        ["requester_id"],
        unique=False,
    )
    op.create_index(
        "ix_relationshipedge_target_id", "relationshipedge", ["target_id"], unique=False
    )


def downgrade():
    op.drop_index("ix_relationshipedge_target_id", table_name="relationshipedge")
    op.drop_index("ix_relationshipedge_requester_id", table_name="relationshipedge")
    op.drop_index("ix_relationshipedge_pair_key", table_name="relationshipedge")
    op.drop_table("relationshipedge")
