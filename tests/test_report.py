from poker_settlement.report import entity_label, group_by_payer, group_by_receiver, render_settlement
from poker_settlement.services.grouping import ParticipantResult, SettlementUnit
from poker_settlement.services.settlement import Transfer, settle_session

PLAYERS = [
    ParticipantResult("a", "Alice", 60),
    ParticipantResult("b", "Bob", 40),
    ParticipantResult("c", "Carol", -100),
]


def test_render_lists_every_transfer():
    text = render_settlement(settle_session(PLAYERS), title="Friday", currency="$")

    assert text.splitlines()[0] == "Settlement: Friday"
    assert "Carol → Alice: 60.00$" in text
    assert "Carol → Bob: 40.00$" in text
    assert "Total transferred: 100.00$" in text
    assert "WARNING" not in text


def test_render_names_units():
    results = [
        ParticipantResult("a", "Alice", 30),
        ParticipantResult("b", "Bob", 10),
        ParticipantResult("c", "Carol", -40),
    ]
    text = render_settlement(settle_session(results, [SettlementUnit(member_ids=("a", "b"))]), currency="")

    assert "Carol → Alice & Bob (unit): 40.00" in text


def test_render_without_transfers():
    text = render_settlement(settle_session([ParticipantResult("a", "Alice", 0)]), currency="")

    assert "No payments needed." in text


def test_render_flags_unbalanced_session():
    results = [ParticipantResult("a", "Alice", 50), ParticipantResult("b", "Bob", -40)]
    text = render_settlement(settle_session(results), currency="")

    assert "WARNING: results do not sum to zero (+10.00)." in text
    assert "unresolved Alice: +10.00" in text


def test_entity_label_falls_back_to_id():
    assert entity_label(None, "x-1") == "x-1"


def test_grouping_helpers_keep_order():
    transfers = [Transfer("c", "a", 100), Transfer("d", "a", 50), Transfer("c", "b", 25)]

    assert group_by_payer(transfers) == {"c": [transfers[0], transfers[2]], "d": [transfers[1]]}
    assert list(group_by_receiver(transfers)) == ["a", "b"]
    assert group_by_receiver(transfers)["a"] == [transfers[0], transfers[1]]
