from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Sequence

from poker_settlement.money import Amount, from_cents, to_cents, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParticipantResult:
    participant_id: str
    display_name: str
    net_result: Amount  # positive won, negative lost

    @property
    def net_cents(self) -> int:
        return to_cents(self.net_result)


@dataclass(frozen=True)
class SettlementUnit:
    member_ids: tuple[str, ...]
    active: bool = True
    # Caller policy: storage id of the unit, synthesized from members when missing.
    unit_id: Optional[str] = None
    name: Optional[str] = None


class EntityKind(str, enum.Enum):
    INDIVIDUAL = "INDIVIDUAL"
    UNIT = "UNIT"


@dataclass(frozen=True)
class SettlementEntity:
    entity_id: str
    kind: EntityKind
    display_name: str
    balance_cents: int
    member_ids: tuple[str, ...] = field(default_factory=tuple)

    @property
    def balance(self) -> Decimal:
        return from_cents(self.balance_cents)


@dataclass(frozen=True)
class _UnitResolution:
    members: tuple[ParticipantResult, ...] = ()
    skip_reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.skip_reason is None


def synthesize_unit_id(member_ids: Sequence[str]) -> str:
    return "unit:" + "+".join(member_ids)


def _resolve_unit(
    unit: SettlementUnit,
    by_id: dict[str, ParticipantResult],
    consumed: set[str],
) -> _UnitResolution:
    if not unit.active:
        return _UnitResolution(skip_reason="inactive")
    ids = tuple(unit.member_ids)
    if len(ids) != 2 or ids[0] == ids[1]:
        return _UnitResolution(skip_reason="needs exactly two distinct members")
    missing = [pid for pid in ids if pid not in by_id]
    if missing:
        return _UnitResolution(skip_reason=f"members not in session: {', '.join(missing)}")
    taken = [pid for pid in ids if pid in consumed]
    if taken:
        return _UnitResolution(skip_reason=f"members already grouped: {', '.join(taken)}")
    return _UnitResolution(members=tuple(by_id[pid] for pid in ids))


def group_entities(
    results: Sequence[ParticipantResult],
    units: Sequence[SettlementUnit],
) -> list[SettlementEntity]:
    """
    Collapse participant results into settlement entities.

    Every active unit whose two members are both present and not yet
    grouped becomes one UNIT entity holding the sum of their results.
    Everyone left over becomes an INDIVIDUAL entity. Units come first in
    unit order, then individuals in result order.

    Units that cannot be honored are dropped without error.
    """

    by_id: dict[str, ParticipantResult] = {}
    ordered: list[ParticipantResult] = []
    for r in results:
        if r.participant_id in by_id:
            logger.warning("Duplicate participant id %r ignored", r.participant_id)
            continue
        by_id[r.participant_id] = r
        ordered.append(r)

    consumed: set[str] = set()
    out: list[SettlementEntity] = []

    for unit in units:
        resolution = _resolve_unit(unit, by_id, consumed)
        if not resolution.ok:
            logger.debug("Skipping settlement unit %s: %s", unit.unit_id or unit.member_ids, resolution.skip_reason)
            continue

        first, second = resolution.members
        member_ids = (first.participant_id, second.participant_id)
        out.append(
            SettlementEntity(
                entity_id=unit.unit_id or synthesize_unit_id(member_ids),
                kind=EntityKind.UNIT,
                display_name=unit.name or f"{first.display_name} & {second.display_name}",
                # Summed before rounding so two half cents make a whole one.
                balance_cents=to_cents(to_decimal(first.net_result) + to_decimal(second.net_result)),
                member_ids=member_ids,
            )
        )
        consumed.update(member_ids)

    for r in ordered:
        if r.participant_id in consumed:
            continue
        out.append(
            SettlementEntity(
                entity_id=r.participant_id,
                kind=EntityKind.INDIVIDUAL,
                display_name=r.display_name,
                balance_cents=r.net_cents,
                member_ids=(r.participant_id,),
            )
        )

    return out
