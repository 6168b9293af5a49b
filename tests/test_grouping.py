import logging

from poker_settlement.services.grouping import (
    EntityKind,
    ParticipantResult,
    SettlementUnit,
    group_entities,
)


def _results(**nets):
    return [ParticipantResult(participant_id=pid, display_name=pid.title(), net_result=net) for pid, net in nets.items()]


# --- Individuals ---

def test_no_units_gives_individuals_in_input_order():
    """Without units every participant is its own entity, order preserved."""
    entities = group_entities(_results(c=-10, a=5, b=5), [])

    assert [e.entity_id for e in entities] == ["c", "a", "b"]
    assert all(e.kind is EntityKind.INDIVIDUAL for e in entities)
    assert [e.balance_cents for e in entities] == [-1000, 500, 500]
    assert entities[0].member_ids == ("c",)


def test_empty_input():
    assert group_entities([], []) == []


# --- Units ---

def test_unit_balance_is_sum_of_members():
    """A (+50) and B (-20) in one unit settle as a single +30 entity."""
    entities = group_entities(_results(a=50, b=-20, c=-30), [SettlementUnit(member_ids=("a", "b"))])

    unit = entities[0]
    assert unit.kind is EntityKind.UNIT
    assert unit.balance_cents == 3000
    assert str(unit.balance) == "30.00"
    assert unit.member_ids == ("a", "b")
    assert [e.entity_id for e in entities[1:]] == ["c"]


def test_unit_id_and_name_defaults():
    """Missing unit id and name are synthesized from the members."""
    entities = group_entities(_results(a=1, b=-1), [SettlementUnit(member_ids=("a", "b"))])

    assert entities[0].entity_id == "unit:a+b"
    assert entities[0].display_name == "A & B"


def test_unit_id_and_name_from_caller():
    units = [SettlementUnit(member_ids=("a", "b"), unit_id="pu-17", name="The Cohens")]
    entities = group_entities(_results(a=1, b=-1), units)

    assert entities[0].entity_id == "pu-17"
    assert entities[0].display_name == "The Cohens"


def test_units_come_before_individuals():
    entities = group_entities(_results(a=10, b=10, c=-10, d=-10), [SettlementUnit(member_ids=("c", "d"))])

    assert [e.entity_id for e in entities] == ["unit:c+d", "a", "b"]


# --- Dropped units ---

def test_inactive_unit_is_ignored():
    entities = group_entities(_results(a=10, b=-10), [SettlementUnit(member_ids=("a", "b"), active=False)])

    assert [e.entity_id for e in entities] == ["a", "b"]


def test_unit_with_missing_member_is_ignored():
    """The present member settles alone; nothing is raised."""
    entities = group_entities(_results(a=20, b=-20), [SettlementUnit(member_ids=("a", "ghost"))])

    assert [e.entity_id for e in entities] == ["a", "b"]
    assert all(e.kind is EntityKind.INDIVIDUAL for e in entities)


def test_unit_with_wrong_member_count_is_ignored():
    units = [
        SettlementUnit(member_ids=("a",)),
        SettlementUnit(member_ids=("a", "b", "c")),
        SettlementUnit(member_ids=("a", "a")),
    ]
    entities = group_entities(_results(a=10, b=-5, c=-5), units)

    assert [e.entity_id for e in entities] == ["a", "b", "c"]


def test_participant_only_joins_first_unit():
    """A member already consumed by an earlier unit blocks later units."""
    units = [SettlementUnit(member_ids=("a", "b")), SettlementUnit(member_ids=("b", "c"))]
    entities = group_entities(_results(a=10, b=10, c=-20), units)

    assert [e.entity_id for e in entities] == ["unit:a+b", "c"]


def test_duplicate_participant_keeps_first(caplog):
    results = [
        ParticipantResult("a", "Alice", 10),
        ParticipantResult("b", "Bob", -10),
        ParticipantResult("a", "Alice again", 99),
    ]
    with caplog.at_level(logging.WARNING):
        entities = group_entities(results, [])

    assert [(e.entity_id, e.balance_cents) for e in entities] == [("a", 1000), ("b", -1000)]
    assert "Duplicate participant id" in caplog.text


# --- Properties ---

def test_grouping_is_idempotent():
    results = _results(a=12.5, b=-7.25, c=-5.25, d=0)
    units = [SettlementUnit(member_ids=("b", "d"))]

    first = group_entities(results, units)
    second = group_entities(results, units)

    assert first == second


def test_inputs_are_not_modified():
    results = _results(a=10, b=-10)
    units = [SettlementUnit(member_ids=("a", "b"))]
    snapshot = (list(results), list(units))

    group_entities(results, units)

    assert (results, units) == snapshot


def test_unit_balance_rounds_the_sum_once():
    """Two half cents add up to one cent instead of rounding each to a cent first."""
    entities = group_entities(_results(a="0.005", b="0.005"), [SettlementUnit(member_ids=("a", "b"))])

    assert entities[0].balance_cents == 1
