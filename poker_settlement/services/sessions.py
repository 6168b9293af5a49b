from __future__ import annotations

import logging
from typing import Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from poker_settlement.cache import SettlementCache
from poker_settlement.db.models import PaymentUnit, Player, PokerSession, SettlementTransfer
from poker_settlement.money import Amount, from_cents, to_cents
from poker_settlement.services.grouping import ParticipantResult, SettlementUnit
from poker_settlement.services.results import (
    ChipsConfig,
    PlayerSheet,
    compute_session_results,
    final_results,
)
from poker_settlement.services.settlement import SettlementResult, Transfer, settle_session

logger = logging.getLogger(__name__)


async def create_session(
    session: AsyncSession,
    *,
    title: Optional[str] = None,
    buy_in: Optional[ChipsConfig] = None,
    rebuy: Optional[ChipsConfig] = None,
    rounding_percentage: Optional[int] = None,
) -> PokerSession:
    if rounding_percentage is not None and not 0 < rounding_percentage <= 100:
        raise ValueError("Rounding percentage must be between 1 and 100.")
    ps = PokerSession(
        title=(title.strip() if title and title.strip() else None),
        rounding_percentage=rounding_percentage,
    )
    if buy_in is not None:
        ps.buy_in_chips = buy_in.chips
        ps.buy_in_amount_cents = buy_in.amount_cents
    if rebuy is not None:
        ps.rebuy_chips = rebuy.chips
        ps.rebuy_amount_cents = rebuy.amount_cents
    session.add(ps)
    await session.flush()
    return ps


async def get_session(session: AsyncSession, *, session_id: int) -> Optional[PokerSession]:
    return await session.scalar(select(PokerSession).where(PokerSession.id == session_id))


async def _require_session(session: AsyncSession, session_id: int) -> PokerSession:
    ps = await get_session(session, session_id=session_id)
    if ps is None:
        raise ValueError(f"Poker session {session_id} does not exist.")
    return ps


async def _get_player(session: AsyncSession, session_id: int, participant_id: str) -> Optional[Player]:
    return await session.scalar(
        select(Player).where(Player.session_id == session_id, Player.participant_key == participant_id)
    )


async def record_player(
    session: AsyncSession,
    *,
    session_id: int,
    participant_id: str,
    display_name: str,
    buy_in_count: int = 1,
    rebuy_count: int = 0,
    final_chips: Optional[int] = None,
    open_game_wins: int = 0,
    cache: Optional[SettlementCache] = None,
) -> Player:
    """Insert or update a player's buy-ins, rebuys and chip count."""
    await _require_session(session, session_id)
    if min(buy_in_count, rebuy_count, open_game_wins) < 0 or (final_chips is not None and final_chips < 0):
        raise ValueError("Counts cannot be negative.")

    player = await _get_player(session, session_id, participant_id)
    if player is None:
        player = Player(session_id=session_id, participant_key=participant_id)
        session.add(player)
    player.display_name = display_name.strip() or participant_id
    player.buy_in_count = buy_in_count
    player.rebuy_count = rebuy_count
    player.final_chips = final_chips
    player.open_game_wins = open_game_wins
    await session.flush()

    if cache is not None:
        cache.invalidate(session_id)
    return player


async def record_result(
    session: AsyncSession,
    *,
    session_id: int,
    participant_id: str,
    display_name: str,
    net_result: Amount,
    cache: Optional[SettlementCache] = None,
) -> Player:
    """Store a final money result directly, bypassing the chip calculation."""
    await _require_session(session, session_id)

    player = await _get_player(session, session_id, participant_id)
    if player is None:
        player = Player(session_id=session_id, participant_key=participant_id)
        session.add(player)
    player.display_name = display_name.strip() or participant_id
    player.net_result_cents = to_cents(net_result)
    await session.flush()

    if cache is not None:
        cache.invalidate(session_id)
    return player


async def _list_players(session: AsyncSession, session_id: int) -> list[Player]:
    res = await session.scalars(select(Player).where(Player.session_id == session_id).order_by(Player.id.asc()))
    return list(res)


async def compute_stored_results(session: AsyncSession, *, session_id: int) -> list[ParticipantResult]:
    """
    Net results from the stored chip counts, then written back to each player.

    Players without a chip count keep whatever result was recorded for them.
    """

    ps = await _require_session(session, session_id)
    players = await _list_players(session, session_id)
    counted = [p for p in players if p.final_chips is not None]

    buy_in = ChipsConfig(chips=ps.buy_in_chips, amount=from_cents(ps.buy_in_amount_cents))
    rebuy = ChipsConfig(chips=ps.rebuy_chips, amount=from_cents(ps.rebuy_amount_cents))
    sheets = [
        PlayerSheet(
            participant_id=p.participant_key,
            display_name=p.display_name,
            buy_in_count=p.buy_in_count,
            rebuy_count=p.rebuy_count,
            final_chips=p.final_chips or 0,
            open_game_wins=p.open_game_wins,
        )
        for p in counted
    ]
    computed = compute_session_results(sheets, buy_in=buy_in, rebuy=rebuy, rounding_percentage=ps.rounding_percentage)
    if computed.open_games_count:
        logger.info(
            "Session %s needs %d open games (difference %s)",
            session_id,
            computed.open_games_count,
            from_cents(computed.difference_cents),
        )

    by_key = {p.participant_key: p for p in counted}
    for r in final_results(computed, rebuy=rebuy):
        by_key[r.participant_id].net_result_cents = r.net_cents
    await session.flush()

    return await list_results(session, session_id=session_id)


async def list_results(session: AsyncSession, *, session_id: int) -> list[ParticipantResult]:
    players = await _list_players(session, session_id)
    out: list[ParticipantResult] = []
    for p in players:
        if p.net_result_cents is None:
            # No result yet: settles as zero.
            logger.debug("Player %s in session %s has no result yet", p.participant_key, session_id)
        out.append(
            ParticipantResult(
                participant_id=p.participant_key,
                display_name=p.display_name,
                net_result=from_cents(p.net_result_cents or 0),
            )
        )
    return out


async def create_payment_unit(
    session: AsyncSession,
    *,
    name: str,
    member_ids: Sequence[str],
    active: bool = True,
) -> PaymentUnit:
    members = [m.strip() for m in member_ids]
    if len(members) != 2 or not all(members) or members[0] == members[1]:
        raise ValueError("A payment unit needs exactly two different members.")
    if not name.strip():
        raise ValueError("A payment unit needs a name.")

    unit = PaymentUnit(
        name=name.strip(),
        first_member_key=members[0],
        second_member_key=members[1],
        is_active=active,
    )
    session.add(unit)
    await session.flush()
    return unit


async def set_payment_unit_active(session: AsyncSession, *, unit_id: int, active: bool) -> Optional[PaymentUnit]:
    unit = await session.scalar(select(PaymentUnit).where(PaymentUnit.id == unit_id))
    if unit is None:
        return None
    unit.is_active = active
    await session.flush()
    return unit


async def list_settlement_units(session: AsyncSession, *, only_active: bool = True) -> list[SettlementUnit]:
    stmt = select(PaymentUnit).order_by(PaymentUnit.id.asc())
    if only_active:
        stmt = stmt.where(PaymentUnit.is_active.is_(True))
    units = (await session.scalars(stmt)).all()
    return [
        SettlementUnit(
            member_ids=(u.first_member_key, u.second_member_key),
            active=bool(u.is_active),
            unit_id=f"unit:{u.id}",
            name=u.name,
        )
        for u in units
    ]


async def store_transfers(session: AsyncSession, *, session_id: int, transfers: Sequence[Transfer]) -> None:
    """Replace the session's stored transfers with `transfers`, keeping their order."""
    await _require_session(session, session_id)
    await session.execute(delete(SettlementTransfer).where(SettlementTransfer.session_id == session_id))
    session.add_all(
        [
            SettlementTransfer(
                session_id=session_id,
                position=i,
                from_entity_id=t.from_entity_id,
                to_entity_id=t.to_entity_id,
                amount_cents=t.amount_cents,
            )
            for i, t in enumerate(transfers)
        ]
    )
    await session.flush()


async def list_transfers(session: AsyncSession, *, session_id: int) -> list[Transfer]:
    rows = await session.scalars(
        select(SettlementTransfer)
        .where(SettlementTransfer.session_id == session_id)
        .order_by(SettlementTransfer.position.asc())
    )
    return [
        Transfer(from_entity_id=r.from_entity_id, to_entity_id=r.to_entity_id, amount_cents=r.amount_cents)
        for r in rows
    ]


async def settle_stored_session(
    session: AsyncSession,
    *,
    session_id: int,
    cache: Optional[SettlementCache] = None,
) -> SettlementResult:
    if cache is not None:
        cached = cache.get(session_id)
        if cached is not None:
            return cached

    await _require_session(session, session_id)
    results = await list_results(session, session_id=session_id)
    units = await list_settlement_units(session)

    result = settle_session(results, units)
    await store_transfers(session, session_id=session_id, transfers=result.transfers)

    if cache is not None:
        cache.put(session_id, result)
    return result
