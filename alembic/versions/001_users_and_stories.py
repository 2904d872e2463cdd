"""Add users (push tokens, last login, inactivity flags) and stories."""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("fcm_tokens", sa.JSON(), nullable=True),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notified_5_days", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("notified_20_days", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_last_login_at", "users", ["last_login_at"], unique=False)

    op.create_table(
        "stories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(512), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_stories_created_at", "stories", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_stories_created_at", table_name="stories")
    op.drop_table("stories")
    op.drop_index("ix_users_last_login_at", table_name="users")
    op.drop_table("users")
