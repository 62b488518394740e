import pytest
from decimal import Decimal
from typing import List, Tuple

from app.engine.state import EngineState, init_state, open_scenario
from app.engine.bets import (
    bettor_at,
    bettor_count,
    get_bet,
    minimum_bet_amount,
    place_bet,
    scenario_pool,
)
from app.engine.predictions import get_predictions, get_votes
from app.engine.resolutions import resolve_scenario
from app.engine.errors import AlreadyResolved, IndexOutOfBounds, InvalidAmount, WindowClosed
from app.utils import validate_pool_invariant

SCENARIO = 1


@pytest.fixture
def state() -> EngineState:
    state = init_state()
    open_scenario(state, SCENARIO, 0, 100)
    return state


def live_bet_sum(state: EngineState) -> Decimal:
    return sum((b["amount"] for b in state["scenarios"][SCENARIO]["bets"].values()), Decimal("0"))


def test_place_bet_basic(state: EngineState):
    bet, new_state, events = place_bet(state, SCENARIO, "alice", Decimal("100"), "rain", 10)

    assert bet == {"amount": Decimal("100"), "prediction": "rain", "claimed": False}
    assert new_state is state
    assert scenario_pool(state, SCENARIO) == Decimal("100")
    assert state["scenarios"][SCENARIO]["total_pool"] == Decimal("100")
    assert bettor_count(state, SCENARIO) == 1
    assert get_predictions(state, SCENARIO) == ["rain"]
    assert get_votes(state, SCENARIO, "rain") == 1
    assert events == [{
        "type": "BET_PLACED",
        "payload": {"scenario_id": SCENARIO, "caller": "alice", "amount": Decimal("100"), "prediction": "rain"},
        "ts": 10,
    }]


def test_place_bet_accepts_int_and_str_amounts(state: EngineState):
    place_bet(state, SCENARIO, "alice", 5, "rain", 1)
    place_bet(state, SCENARIO, "bob", "2.5", "rain", 1)
    assert scenario_pool(state, SCENARIO) == Decimal("7.5")


def test_place_bet_rejects_float(state: EngineState):
    with pytest.raises(TypeError, match="not float"):
        place_bet(state, SCENARIO, "alice", 1.5, "rain", 1)


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5"), 0])
def test_place_bet_invalid_amount(state: EngineState, amount):
    with pytest.raises(InvalidAmount, match="Amount must be positive"):
        place_bet(state, SCENARIO, "alice", amount, "rain", 1)
    assert bettor_count(state, SCENARIO) == 0
    assert get_predictions(state, SCENARIO) == []


def test_invalid_amount_does_not_create_scenario():
    state = init_state()
    with pytest.raises(InvalidAmount):
        place_bet(state, 9, "alice", 0, "rain", 0)
    assert state["scenarios"] == {}


@pytest.mark.parametrize("amount,message", [
    ("Infinity", "must be finite"),
    (Decimal("-Infinity"), "must be finite"),
    ("NaN", "must be finite"),
    ("abc", "not a number"),
])
def test_place_bet_rejects_non_numeric_amounts(state: EngineState, amount, message):
    place_bet(state, SCENARIO, "alice", 10, "rain", 1)
    before = dict(state["scenarios"][SCENARIO]["bets"]["alice"])

    with pytest.raises(InvalidAmount, match=message):
        place_bet(state, SCENARIO, "alice", amount, "sun", 2)

    assert get_bet(state, SCENARIO, "alice") == before
    assert get_predictions(state, SCENARIO) == ["rain"]
    assert get_votes(state, SCENARIO, "sun") == 0
    assert scenario_pool(state, SCENARIO) == Decimal("10")
    validate_pool_invariant(state["scenarios"][SCENARIO])

    # The ledger is still usable afterwards
    place_bet(state, SCENARIO, "alice", 20, "sun", 3)
    assert scenario_pool(state, SCENARIO) == Decimal("20")
    validate_pool_invariant(state["scenarios"][SCENARIO])


def test_returned_bet_is_detached_from_state(state: EngineState):
    bet, _, _ = place_bet(state, SCENARIO, "alice", 10, "rain", 1)
    bet["amount"] = Decimal("999")
    bet["claimed"] = True

    assert get_bet(state, SCENARIO, "alice") == {"amount": Decimal("10"), "prediction": "rain", "claimed": False}
    place_bet(state, SCENARIO, "alice", 5, "rain", 2)
    assert scenario_pool(state, SCENARIO) == Decimal("5")
    validate_pool_invariant(state["scenarios"][SCENARIO])


def test_place_bet_window_closed_at_end_time(state: EngineState):
    with pytest.raises(WindowClosed, match="closed at 100"):
        place_bet(state, SCENARIO, "alice", 10, "rain", 100)
    assert scenario_pool(state, SCENARIO) == Decimal("0")


def test_place_bet_last_instant_before_end(state: EngineState):
    place_bet(state, SCENARIO, "alice", 10, "rain", 99)
    assert bettor_count(state, SCENARIO) == 1


def test_unopened_scenario_reads_as_closed():
    state = init_state()
    with pytest.raises(WindowClosed):
        place_bet(state, 5, "alice", 10, "rain", 0)
    assert state["scenarios"] == {}


def test_place_bet_after_resolution(state: EngineState):
    place_bet(state, SCENARIO, "alice", 10, "rain", 1)
    resolve_scenario(state, SCENARIO, 100)
    with pytest.raises(AlreadyResolved):
        place_bet(state, SCENARIO, "bob", 10, "rain", 100)


def test_invalid_amount_checked_before_resolution(state: EngineState):
    resolve_scenario(state, SCENARIO, 100)
    with pytest.raises(InvalidAmount):
        place_bet(state, SCENARIO, "bob", 0, "rain", 100)


def test_rebet_replaces_prior_bet(state: EngineState):
    place_bet(state, SCENARIO, "alice", Decimal("100"), "rain", 1)
    place_bet(state, SCENARIO, "bob", Decimal("30"), "sun", 2)
    bet, _, _ = place_bet(state, SCENARIO, "alice", Decimal("50"), "sun", 3)

    assert get_bet(state, SCENARIO, "alice") == {"amount": Decimal("50"), "prediction": "sun", "claimed": False}
    assert bettor_count(state, SCENARIO) == 2
    assert [bettor_at(state, SCENARIO, i) for i in range(2)] == ["alice", "bob"]
    assert scenario_pool(state, SCENARIO) == Decimal("80")
    # Votes count submissions, not distinct bettors
    assert get_votes(state, SCENARIO, "rain") == 1
    assert get_votes(state, SCENARIO, "sun") == 2
    assert get_predictions(state, SCENARIO) == ["rain", "sun"]


def test_rebet_same_prediction_increments_vote_again(state: EngineState):
    place_bet(state, SCENARIO, "alice", 10, "rain", 1)
    place_bet(state, SCENARIO, "alice", 20, "rain", 2)
    assert get_votes(state, SCENARIO, "rain") == 2
    assert bettor_count(state, SCENARIO) == 1
    assert scenario_pool(state, SCENARIO) == Decimal("20")


@pytest.mark.parametrize("sequence", [
    [("a", "10", "x"), ("b", "20", "y"), ("a", "5", "y")],
    [("a", "1", "x"), ("a", "2", "x"), ("a", "3", "x")],
    [("a", "100", "x"), ("b", "0.5", "x"), ("c", "7", "z"), ("b", "99.5", "z"), ("a", "1", "z")],
])
def test_pool_equals_sum_of_live_bets(state: EngineState, sequence: List[Tuple[str, str, str]]):
    for t, (caller, amount, prediction) in enumerate(sequence):
        place_bet(state, SCENARIO, caller, amount, prediction, t)
        assert scenario_pool(state, SCENARIO) == live_bet_sum(state)
    validate_pool_invariant(state["scenarios"][SCENARIO])


def test_bettor_at_out_of_range(state: EngineState):
    place_bet(state, SCENARIO, "alice", 10, "rain", 1)
    assert bettor_at(state, SCENARIO, 0) == "alice"
    with pytest.raises(IndexOutOfBounds):
        bettor_at(state, SCENARIO, 1)
    with pytest.raises(IndexError):
        bettor_at(state, SCENARIO, -1)


def test_get_bet_missing_and_copy(state: EngineState):
    assert get_bet(state, SCENARIO, "nobody") is None
    place_bet(state, SCENARIO, "alice", 10, "rain", 1)
    bet = get_bet(state, SCENARIO, "alice")
    bet["claimed"] = True
    assert get_bet(state, SCENARIO, "alice")["claimed"] is False


def test_minimum_bet_amount_no_bettors(state: EngineState):
    assert minimum_bet_amount(state, SCENARIO) == Decimal("0")


def test_minimum_bet_amount_tracks_replacements(state: EngineState):
    place_bet(state, SCENARIO, "alice", 10, "rain", 1)
    place_bet(state, SCENARIO, "bob", 30, "sun", 2)
    assert minimum_bet_amount(state, SCENARIO) == Decimal("10")
    place_bet(state, SCENARIO, "alice", 50, "rain", 3)
    assert minimum_bet_amount(state, SCENARIO) == Decimal("30")
