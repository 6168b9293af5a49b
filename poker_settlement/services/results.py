from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from poker_settlement.money import Amount, from_cents, to_cents, to_decimal
from poker_settlement.services.grouping import ParticipantResult


@dataclass(frozen=True)
class ChipsConfig:
    chips: int  # chips handed out per buy-in / rebuy
    amount: Amount  # money paid for them

    @property
    def amount_cents(self) -> int:
        return to_cents(self.amount)


@dataclass(frozen=True)
class PlayerSheet:
    participant_id: str
    display_name: str
    buy_in_count: int = 1
    rebuy_count: int = 0
    final_chips: int = 0
    open_game_wins: int = 0


@dataclass(frozen=True)
class PlayerBreakdown:
    sheet: PlayerSheet
    investment_cents: int
    chips_value_cents: int
    rounded_rebuys: int
    result_before_open_games_cents: int


@dataclass(frozen=True)
class SessionResults:
    players: list[PlayerBreakdown]
    total_wins_cents: int
    total_losses_cents: int
    open_games_count: int

    @property
    def difference_cents(self) -> int:
        return abs(self.total_wins_cents - self.total_losses_cents)


@dataclass(frozen=True)
class ResultsSummary:
    winners: int
    losers: int
    breakeven: int
    top_win_cents: int
    top_loss_cents: int  # reported as a positive amount

    @property
    def top_win(self) -> Decimal:
        return from_cents(self.top_win_cents)

    @property
    def top_loss(self) -> Decimal:
        return from_cents(self.top_loss_cents)


def _validate_config(buy_in: ChipsConfig, rebuy: ChipsConfig, rounding_percentage: Optional[int]) -> None:
    if buy_in.chips <= 0 or rebuy.chips <= 0:
        raise ValueError("Chip counts per buy-in and rebuy must be positive.")
    if buy_in.amount_cents < 0 or rebuy.amount_cents < 0:
        raise ValueError("Buy-in and rebuy amounts cannot be negative.")
    if rounding_percentage is not None and not 0 < rounding_percentage <= 100:
        raise ValueError("Rounding percentage must be between 1 and 100.")


def compute_player_result(
    sheet: PlayerSheet,
    *,
    buy_in: ChipsConfig,
    rebuy: ChipsConfig,
    rounding_percentage: Optional[int] = None,
) -> PlayerBreakdown:
    """
    Money result of one player before open games.

    Chips are valued at the rebuy rate. With a rounding rule of P%, the
    value is counted in whole rebuy stacks and a partial stack counts as a
    full one once it reaches P% of the stack size.
    """

    _validate_config(buy_in, rebuy, rounding_percentage)
    if sheet.buy_in_count < 0 or sheet.rebuy_count < 0 or sheet.final_chips < 0:
        raise ValueError(f"Counts for {sheet.display_name} cannot be negative.")

    investment = sheet.buy_in_count * buy_in.amount_cents + sheet.rebuy_count * rebuy.amount_cents

    stacks, remainder = divmod(sheet.final_chips, rebuy.chips)
    if rounding_percentage is not None:
        threshold = rebuy.chips * rounding_percentage / 100
        rounded = stacks + 1 if remainder >= threshold else stacks
        chips_value = rounded * rebuy.amount_cents
    else:
        rounded = stacks
        exact = Decimal(sheet.final_chips) / Decimal(rebuy.chips) * to_decimal(rebuy.amount)
        chips_value = to_cents(exact)

    return PlayerBreakdown(
        sheet=sheet,
        investment_cents=investment,
        chips_value_cents=chips_value,
        rounded_rebuys=rounded,
        result_before_open_games_cents=chips_value - investment,
    )


def compute_session_results(
    sheets: Sequence[PlayerSheet],
    *,
    buy_in: ChipsConfig,
    rebuy: ChipsConfig,
    rounding_percentage: Optional[int] = None,
) -> SessionResults:
    players = [
        compute_player_result(s, buy_in=buy_in, rebuy=rebuy, rounding_percentage=rounding_percentage)
        for s in sheets
    ]
    wins = sum(p.result_before_open_games_cents for p in players if p.result_before_open_games_cents > 0)
    losses = sum(-p.result_before_open_games_cents for p in players if p.result_before_open_games_cents < 0)

    difference = abs(wins - losses)
    # One open game per rebuy amount of imbalance, rounded up.
    open_games = -(-difference // rebuy.amount_cents) if difference and rebuy.amount_cents else 0

    return SessionResults(
        players=players,
        total_wins_cents=wins,
        total_losses_cents=losses,
        open_games_count=open_games,
    )


def final_results(session: SessionResults, *, rebuy: ChipsConfig) -> list[ParticipantResult]:
    """Engine input: each player's result plus one rebuy amount per open game won."""
    out: list[ParticipantResult] = []
    for p in session.players:
        bonus = p.sheet.open_game_wins * rebuy.amount_cents
        out.append(
            ParticipantResult(
                participant_id=p.sheet.participant_id,
                display_name=p.sheet.display_name,
                net_result=from_cents(p.result_before_open_games_cents + bonus),
            )
        )
    return out


def summarize_results(results: Sequence[ParticipantResult]) -> ResultsSummary:
    winners = losers = breakeven = 0
    top_win = 0
    top_loss = 0
    for r in results:
        cents = r.net_cents
        if cents > 0:
            winners += 1
            top_win = max(top_win, cents)
        elif cents < 0:
            losers += 1
            top_loss = min(top_loss, cents)
        else:
            breakeven += 1
    return ResultsSummary(
        winners=winners,
        losers=losers,
        breakeven=breakeven,
        top_win_cents=top_win,
        top_loss_cents=abs(top_loss),
    )
