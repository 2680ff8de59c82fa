"""initial wallet, transfer and settlement schema

Revision ID: 4f1c2b7d9e10
Revises:
Create Date: 2026-10-17 09:30:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "4f1c2b7d9e10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), server_default="user"),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("email", sa.String(length=100), unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.Column("last_login_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_accounts_username", "accounts", ["username"], unique=True)

    op.create_table(
        "wallets",
        sa.Column("account_id", sa.String(length=36), sa.ForeignKey("accounts.id"), primary_key=True),
        sa.Column("balance_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(length=10), nullable=False, server_default="USD"),
        sa.Column("is_frozen", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("balance_cents >= 0", name="ck_wallets_balance_non_negative"),
    )

    op.create_table(
        "transfer_intents",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("sender_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("recipient_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=False, server_default="USD"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("description", sa.String(length=255)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("settled_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_transfer_intents_sender_id", "transfer_intents", ["sender_id"])
    op.create_index("ix_transfer_intents_recipient_id", "transfer_intents", ["recipient_id"])
    op.create_index("ix_transfer_intents_amount_cents", "transfer_intents", ["amount_cents"])
    op.create_index("ix_transfer_intents_status", "transfer_intents", ["status"])
    op.create_index("ix_transfer_intents_created_at", "transfer_intents", ["created_at"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("account_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=False, server_default="USD"),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=100)),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("note", sa.Text()),
        sa.Column("transfer_id", sa.String(length=36), sa.ForeignKey("transfer_intents.id")),
        sa.Column("counterparty_id", sa.String(length=36), sa.ForeignKey("accounts.id")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_transactions_account_id", "transactions", ["account_id"])
    op.create_index("ix_transactions_status", "transactions", ["status"])
    op.create_index("ix_transactions_transfer_id", "transactions", ["transfer_id"])
    op.create_index("ix_transactions_created_at", "transactions", ["created_at"])

    op.create_table(
        "wallet_topup_orders",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("account_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=False, server_default="USD"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("payment_channel", sa.String(length=50)),
        sa.Column("reference_no", sa.String(length=100)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("confirmed_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_wallet_topup_orders_account_id", "wallet_topup_orders", ["account_id"])

    op.create_table(
        "admin_activity_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("admin_id", sa.String(length=36), sa.ForeignKey("accounts.id")),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("target_table", sa.String(length=50), nullable=False),
        sa.Column("target_id", sa.String(length=36), nullable=False),
        sa.Column("old_values", sa.Text()),
        sa.Column("new_values", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_admin_activity_logs_admin_id", "admin_activity_logs", ["admin_id"])
    op.create_index("ix_admin_activity_logs_target_id", "admin_activity_logs", ["target_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("recipient", sa.String(length=255), nullable=False),
        sa.Column("kind", sa.String(length=50), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="sent"),
        sa.Column("message", sa.Text()),
        sa.Column("payload", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_notifications_recipient", "notifications", ["recipient"])

    op.create_table(
        "settlement_runs",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("transaction_id", sa.String(length=36), nullable=False),
        sa.Column("target_status", sa.String(length=20), nullable=False),
        sa.Column("state", sa.String(length=40), nullable=False, server_default="initiated"),
        sa.Column("transfer_id", sa.String(length=36)),
        sa.Column("match_strategy", sa.String(length=20)),
        sa.Column("actor_id", sa.String(length=36)),
        sa.Column("error", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_settlement_runs_transaction_id", "settlement_runs", ["transaction_id"])
    op.create_index("ix_settlement_runs_state", "settlement_runs", ["state"])

    op.create_table(
        "settlement_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("run_id", sa.String(length=36), sa.ForeignKey("settlement_runs.id"), nullable=False),
        sa.Column("from_state", sa.String(length=40)),
        sa.Column("to_state", sa.String(length=40), nullable=False),
        sa.Column("detail", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_settlement_events_run_id", "settlement_events", ["run_id"])


def downgrade() -> None:
    op.drop_index("ix_settlement_events_run_id", table_name="settlement_events")
    op.drop_table("settlement_events")
    op.drop_index("ix_settlement_runs_state", table_name="settlement_runs")
    op.drop_index("ix_settlement_runs_transaction_id", table_name="settlement_runs")
    op.drop_table("settlement_runs")
    op.drop_index("ix_notifications_recipient", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_admin_activity_logs_target_id", table_name="admin_activity_logs")
    op.drop_index("ix_admin_activity_logs_admin_id", table_name="admin_activity_logs")
    op.drop_table("admin_activity_logs")
    op.drop_index("ix_wallet_topup_orders_account_id", table_name="wallet_topup_orders")
    op.drop_table("wallet_topup_orders")
    op.drop_index("ix_transactions_created_at", table_name="transactions")
    op.drop_index("ix_transactions_transfer_id", table_name="transactions")
    op.drop_index("ix_transactions_status", table_name="transactions")
    op.drop_index("ix_transactions_account_id", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_transfer_intents_created_at", table_name="transfer_intents")
    op.drop_index("ix_transfer_intents_status", table_name="transfer_intents")
    op.drop_index("ix_transfer_intents_amount_cents", table_name="transfer_intents")
    op.drop_index("ix_transfer_intents_recipient_id", table_name="transfer_intents")
    op.drop_index("ix_transfer_intents_sender_id", table_name="transfer_intents")
    op.drop_table("transfer_intents")
    op.drop_table("wallets")
    op.drop_index("ix_accounts_username", table_name="accounts")
    op.drop_table("accounts")
