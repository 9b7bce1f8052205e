"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

Accounts, password records and the tables that carry account references.
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("whatsapp_number", sa.String(length=32), nullable=True),
        sa.Column("maritime_rank", sa.String(length=100), nullable=True),
        sa.Column("current_ship_name", sa.String(length=200), nullable=True),
        sa.Column("current_ship_imo", sa.String(length=20), nullable=True),
        sa.Column("current_city", sa.String(length=100), nullable=True),
        sa.Column("current_country", sa.String(length=100), nullable=True),
        sa.Column("current_latitude", sa.String(length=32), nullable=True),
        sa.Column("current_longitude", sa.String(length=32), nullable=True),
        sa.Column("whatsapp_profile_picture_url", sa.Text(), nullable=True),
        sa.Column("whatsapp_display_name", sa.String(length=200), nullable=True),
        sa.Column("question_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("answer_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("login_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        sa.Column("password", sa.String(length=255), nullable=True),
        sa.Column(
            "is_platform_admin", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column(
            "is_archived", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("archived_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("last_updated", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_accounts_email", "accounts", ["email"], unique=True)
    op.create_index("ix_accounts_whatsapp_number", "accounts", ["whatsapp_number"])
    op.create_index("ix_accounts_is_archived", "accounts", ["is_archived"])

    op.create_table(
        "password_records",
        sa.Column("account_id", sa.String(length=64), nullable=False),
        sa.Column(
            "has_custom_password",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column("custom_password", sa.String(length=255), nullable=True),
        sa.Column(
            "liberal_login_count", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("last_liberal_login", sa.DateTime(), nullable=True),
        sa.Column("reset_code", sa.String(length=12), nullable=True),
        sa.Column("reset_code_expires_at", sa.DateTime(), nullable=True),
        sa.Column("reset_verified_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"]),
        sa.PrimaryKeyConstraint("account_id"),
    )

    op.create_table(
        "chat_connections",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("sender_id", sa.String(length=64), nullable=False),
        sa.Column("receiver_id", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["sender_id"], ["accounts.id"]),
        sa.ForeignKeyConstraint(["receiver_id"], ["accounts.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_chat_connections_sender_id", "chat_connections", ["sender_id"]
    )
    op.create_index(
        "ix_chat_connections_receiver_id", "chat_connections", ["receiver_id"]
    )

    op.create_table(
        "chat_messages",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("connection_id", sa.Integer(), nullable=True),
        sa.Column("sender_id", sa.String(length=64), nullable=False),
        sa.Column("receiver_id", sa.String(length=64), nullable=True),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["connection_id"], ["chat_connections.id"]),
        sa.ForeignKeyConstraint(["sender_id"], ["accounts.id"]),
        sa.ForeignKeyConstraint(["receiver_id"], ["accounts.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_chat_messages_sender_id", "chat_messages", ["sender_id"])
    op.create_index("ix_chat_messages_receiver_id", "chat_messages", ["receiver_id"])

    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["accounts.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_posts_user_id", "posts", ["user_id"])

    op.create_table(
        "post_likes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["post_id"], ["posts.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["accounts.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_post_likes_user_id", "post_likes", ["user_id"])
    op.create_index("ix_post_likes_post_user", "post_likes", ["post_id", "user_id"])


def downgrade():
    op.drop_index("ix_post_likes_post_user", table_name="post_likes")
    op.drop_index("ix_post_likes_user_id", table_name="post_likes")
    op.drop_table("post_likes")
    op.drop_index("ix_posts_user_id", table_name="posts")
    op.drop_table("posts")
    op.drop_index("ix_chat_messages_receiver_id", table_name="chat_messages")
    op.drop_index("ix_chat_messages_sender_id", table_name="chat_messages")
    op.drop_table("chat_messages")
    op.drop_index("ix_chat_connections_receiver_id", table_name="chat_connections")
    op.drop_index("ix_chat_connections_sender_id", table_name="chat_connections")
    op.drop_table("chat_connections")
    op.drop_table("password_records")
    op.drop_index("ix_accounts_is_archived", table_name="accounts")
    op.drop_index("ix_accounts_whatsapp_number", table_name="accounts")
    op.drop_index("ix_accounts_email", table_name="accounts")
    op.drop_table("accounts")
