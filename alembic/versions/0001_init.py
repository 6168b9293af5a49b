"""init tables

Revision ID: 0001_init
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


NOW = sa.text("CURRENT_TIMESTAMP")


def upgrade() -> None:
    op.create_table(
        "poker_sessions",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("buy_in_chips", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("buy_in_amount_cents", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("rebuy_chips", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("rebuy_amount_cents", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("rounding_percentage", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
    )

    op.create_table(
        "players",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column(
            "session_id",
            sa.BigInteger(),
            sa.ForeignKey("poker_sessions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("participant_key", sa.String(length=64), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("buy_in_count", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("rebuy_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("final_chips", sa.Integer(), nullable=True),
        sa.Column("open_game_wins", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("net_result_cents", sa.Integer(), nullable=True),
        sa.UniqueConstraint("session_id", "participant_key", name="uq_players_session_participant"),
    )
    op.create_index("ix_players_session_id", "players", ["session_id"])

    op.create_table(
        "payment_units",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("first_member_key", sa.String(length=64), nullable=False),
        sa.Column("second_member_key", sa.String(length=64), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.UniqueConstraint("first_member_key", "second_member_key", name="uq_payment_units_members"),
    )

    op.create_table(
        "settlement_transfers",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column(
            "session_id",
            sa.BigInteger(),
            sa.ForeignKey("poker_sessions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("from_entity_id", sa.String(length=128), nullable=False),
        sa.Column("to_entity_id", sa.String(length=128), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.UniqueConstraint("session_id", "position", name="uq_settlement_transfers_position"),
    )
    op.create_index("ix_settlement_transfers_session_id", "settlement_transfers", ["session_id"])


def downgrade() -> None:
    op.drop_index("ix_settlement_transfers_session_id", table_name="settlement_transfers")
    op.drop_table("settlement_transfers")

    op.drop_table("payment_units")

    op.drop_index("ix_players_session_id", table_name="players")
    op.drop_table("players")

    op.drop_table("poker_sessions")
