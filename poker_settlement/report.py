from __future__ import annotations

from collections import defaultdict
from typing import Optional, Sequence

from poker_settlement.config import settings
from poker_settlement.money import format_amount
from poker_settlement.services.grouping import EntityKind, SettlementEntity
from poker_settlement.services.settlement import SettlementResult, Transfer


def entity_label(entity: Optional[SettlementEntity], fallback: str) -> str:
    if entity is None:
        return fallback
    if entity.kind is EntityKind.UNIT:
        return f"{entity.display_name} (unit)"
    return entity.display_name or fallback


def group_by_payer(transfers: Sequence[Transfer]) -> dict[str, list[Transfer]]:
    out: dict[str, list[Transfer]] = defaultdict(list)
    for t in transfers:
        out[t.from_entity_id].append(t)
    return dict(out)


def group_by_receiver(transfers: Sequence[Transfer]) -> dict[str, list[Transfer]]:
    out: dict[str, list[Transfer]] = defaultdict(list)
    for t in transfers:
        out[t.to_entity_id].append(t)
    return dict(out)


def render_settlement(
    result: SettlementResult,
    *,
    title: Optional[str] = None,
    currency: Optional[str] = None,
) -> str:
    cur = settings.currency_symbol if currency is None else currency

    lines: list[str] = [f"Settlement: {title}" if title else "Settlement", ""]

    if result.transfers:
        for payer_id, transfers in group_by_payer(result.transfers).items():
            payer = entity_label(result.entity(payer_id), payer_id)
            for t in transfers:
                receiver = entity_label(result.entity(t.to_entity_id), t.to_entity_id)
                lines.append(f"{payer} → {receiver}: {format_amount(t.amount_cents, currency=cur)}")
        lines.append("")
        lines.append(f"Total transferred: {format_amount(result.total_transferred_cents, currency=cur)}")
    else:
        lines.append("No payments needed.")

    if not result.is_balanced:
        lines.append("")
        lines.append(f"WARNING: results do not sum to zero ({format_amount(result.imbalance_cents, currency=cur, signed=True)}).")
        for entity_id, left in result.residuals.items():
            name = entity_label(result.entity(entity_id), entity_id)
            lines.append(f"  unresolved {name}: {format_amount(left, currency=cur, signed=True)}")

    return "\n".join(lines)
