from __future__ import annotations

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


NOW = sa.text("CURRENT_TIMESTAMP")

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
Id = BigInteger().with_variant(Integer(), "sqlite")


class Base(DeclarativeBase):
    pass


class PokerSession(Base):
    __tablename__ = "poker_sessions"

    id: Mapped[int] = mapped_column(Id, primary_key=True, autoincrement=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    buy_in_chips: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default=sa.text("1"))
    # Money columns are stored in cents.
    buy_in_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=sa.text("0"))
    rebuy_chips: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default=sa.text("1"))
    rebuy_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=sa.text("0"))
    rounding_percentage: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=NOW, nullable=False)

    players: Mapped[list[Player]] = relationship(back_populates="session", cascade="all, delete-orphan")
    transfers: Mapped[list[SettlementTransfer]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="SettlementTransfer.position",
    )


class Player(Base):
    __tablename__ = "players"
    __table_args__ = (
        UniqueConstraint("session_id", "participant_key", name="uq_players_session_participant"),
        Index("ix_players_session_id", "session_id"),
    )

    id: Mapped[int] = mapped_column(Id, primary_key=True, autoincrement=True)
    session_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("poker_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Opaque caller identifier (user id, phone number...), never interpreted.
    participant_key: Mapped[str] = mapped_column(String(64), nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    buy_in_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default=sa.text("1"))
    rebuy_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=sa.text("0"))
    final_chips: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    open_game_wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=sa.text("0"))
    net_result_cents: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    session: Mapped[PokerSession] = relationship(back_populates="players")


class PaymentUnit(Base):
    __tablename__ = "payment_units"
    __table_args__ = (
        UniqueConstraint("first_member_key", "second_member_key", name="uq_payment_units_members"),
    )

    id: Mapped[int] = mapped_column(Id, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    first_member_key: Mapped[str] = mapped_column(String(64), nullable=False)
    second_member_key: Mapped[str] = mapped_column(String(64), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=sa.true())
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=NOW, nullable=False)


class SettlementTransfer(Base):
    __tablename__ = "settlement_transfers"
    __table_args__ = (
        UniqueConstraint("session_id", "position", name="uq_settlement_transfers_position"),
        Index("ix_settlement_transfers_session_id", "session_id"),
    )

    id: Mapped[int] = mapped_column(Id, primary_key=True, autoincrement=True)
    session_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("poker_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    # Participant keys or payment unit ids, exactly as the engine produced them.
    from_entity_id: Mapped[str] = mapped_column(String(128), nullable=False)
    to_entity_id: Mapped[str] = mapped_column(String(128), nullable=False)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=NOW, nullable=False)

    session: Mapped[PokerSession] = relationship(back_populates="transfers")
