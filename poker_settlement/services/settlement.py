from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Sequence

from poker_settlement.money import EPSILON_CENTS, from_cents, within_tolerance
from poker_settlement.services.grouping import (
    ParticipantResult,
    SettlementEntity,
    SettlementUnit,
    group_entities,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transfer:
    from_entity_id: str  # debtor
    to_entity_id: str  # creditor
    amount_cents: int

    @property
    def amount(self) -> Decimal:
        return from_cents(self.amount_cents)


def compute_settlement(entities: Sequence[SettlementEntity]) -> list[Transfer]:
    """
    Greedy largest-creditor vs largest-debtor matching.

    Each round pays min(creditor, |debtor|) from the biggest debtor to the
    biggest creditor; ties go to whichever entity came first. Balances within
    one cent of zero take no part. Entities are left untouched, the running
    balances live in a working copy.
    """

    creditors: list[list] = []  # [entity_id, to_receive]
    debtors: list[list] = []  # [entity_id, to_pay]

    for e in entities:
        if e.balance_cents > EPSILON_CENTS:
            creditors.append([e.entity_id, e.balance_cents])
        elif e.balance_cents < -EPSILON_CENTS:
            debtors.append([e.entity_id, -e.balance_cents])

    out: list[Transfer] = []
    while creditors and debtors:
        # max() keeps the first of equal items, which is the tie-break we want.
        creditor = max(creditors, key=lambda x: x[1])
        debtor = max(debtors, key=lambda x: x[1])

        amt = min(creditor[1], debtor[1])
        out.append(Transfer(from_entity_id=debtor[0], to_entity_id=creditor[0], amount_cents=amt))
        creditor[1] -= amt
        debtor[1] -= amt

        creditors = [c for c in creditors if c[1] > EPSILON_CENTS]
        debtors = [d for d in debtors if d[1] > EPSILON_CENTS]

    return out


def check_zero_sum(results: Sequence[ParticipantResult]) -> int:
    """Sum of all net results in cents; zero for a consistent session. Repeated ids count once."""
    seen: set[str] = set()
    total = 0
    for r in results:
        if r.participant_id in seen:
            continue
        seen.add(r.participant_id)
        total += r.net_cents
    return total


def verify_transfers(entities: Sequence[SettlementEntity], transfers: Sequence[Transfer]) -> dict[str, int]:
    """
    Per-entity residual in cents: balance - (received - paid).

    Only entities with a non-zero residual are returned. A positive residual
    means the entity is still owed money, a negative one that it still owes.
    """

    flows: dict[str, int] = defaultdict(int)
    for t in transfers:
        flows[t.to_entity_id] += t.amount_cents
        flows[t.from_entity_id] -= t.amount_cents

    residuals: dict[str, int] = {}
    for e in entities:
        left = e.balance_cents - flows.get(e.entity_id, 0)
        if left:
            residuals[e.entity_id] = left
    return residuals


@dataclass(frozen=True)
class SettlementResult:
    entities: list[SettlementEntity]
    transfers: list[Transfer]
    imbalance_cents: int
    residuals: dict[str, int] = field(default_factory=dict)

    @property
    def is_balanced(self) -> bool:
        return within_tolerance(self.imbalance_cents) and all(within_tolerance(v) for v in self.residuals.values())

    @property
    def total_transferred_cents(self) -> int:
        return sum(t.amount_cents for t in self.transfers)

    @property
    def total_transferred(self) -> Decimal:
        return from_cents(self.total_transferred_cents)

    @property
    def entities_involved(self) -> int:
        ids = {t.from_entity_id for t in self.transfers} | {t.to_entity_id for t in self.transfers}
        return len(ids)

    def entity(self, entity_id: str) -> SettlementEntity | None:
        return next((e for e in self.entities if e.entity_id == entity_id), None)


def settle_session(
    results: Sequence[ParticipantResult],
    units: Sequence[SettlementUnit] = (),
) -> SettlementResult:
    entities = group_entities(results, units)
    transfers = compute_settlement(entities)
    imbalance = sum(e.balance_cents for e in entities)
    residuals = verify_transfers(entities, transfers)

    result = SettlementResult(
        entities=entities,
        transfers=transfers,
        imbalance_cents=imbalance,
        residuals=residuals,
    )
    if not result.is_balanced:
        logger.warning(
            "Session does not balance: imbalance=%s, unresolved=%s",
            from_cents(imbalance),
            {k: str(from_cents(v)) for k, v in residuals.items()},
        )
    logger.info("Settled %d entities with %d transfers", len(entities), len(transfers))
    return result
