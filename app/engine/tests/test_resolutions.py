import pytest
from decimal import Decimal

from app.engine.state import EngineState, init_state, open_scenario, get_scenario
from app.engine.bets import place_bet
from app.engine.interference import interfere
from app.engine.predictions import get_votes, get_interference_amount
from app.engine.resolutions import resolve_scenario, select_winner
from app.engine.errors import AlreadyResolved, WindowOpen
from app.utils import validate_scenario_state

SCENARIO = 1
END = 100


@pytest.fixture
def state() -> EngineState:
    state = init_state()
    open_scenario(state, SCENARIO, 0, END)
    return state


def bet_many(state: EngineState, prediction: str, n: int, amount: int = 10) -> None:
    for i in range(n):
        place_bet(state, SCENARIO, f"{prediction}-{i}", amount, prediction, 1)


def test_votes_decide_without_interference(state: EngineState):
    bet_many(state, "P1", 3)
    bet_many(state, "P2", 5)
    outcome, _, events = resolve_scenario(state, SCENARIO, END)

    assert outcome == "P2"
    assert state["scenarios"][SCENARIO]["resolved"] is True
    assert state["scenarios"][SCENARIO]["outcome"] == "P2"
    assert events[0]["type"] == "SCENARIO_RESOLVED"
    assert events[0]["payload"]["outcome"] == "P2"
    assert events[0]["payload"]["decided_by"] == "votes"


def test_interference_overrides_votes(state: EngineState):
    bet_many(state, "P1", 1, amount=5)
    bet_many(state, "P2", 2, amount=5)
    interfere(state, SCENARIO, "i1", 10, "P1", 2)
    interfere(state, SCENARIO, "i2", 7, "P2", 2)
    assert get_votes(state, SCENARIO, "P2") > get_votes(state, SCENARIO, "P1")

    outcome, _, events = resolve_scenario(state, SCENARIO, END)
    assert outcome == "P1"
    assert events[0]["payload"]["decided_by"] == "interference"


def test_interference_on_prediction_without_votes(state: EngineState):
    bet_many(state, "A", 4)
    interfere(state, SCENARIO, "i1", 10, "C", 2)
    outcome, _, _ = resolve_scenario(state, SCENARIO, END)
    assert outcome == "C"


def test_vote_tie_keeps_first_recorded(state: EngineState):
    bet_many(state, "B", 2)
    bet_many(state, "A", 2)
    outcome, _, _ = resolve_scenario(state, SCENARIO, END)
    assert outcome == "B"


def test_interference_tie_keeps_first_recorded(state: EngineState):
    interfere(state, SCENARIO, "i1", Decimal("2.5"), "X", 1)
    interfere(state, SCENARIO, "i2", Decimal("2.5"), "Y", 1)
    bet_many(state, "Y", 3, amount=1)
    outcome, _, _ = resolve_scenario(state, SCENARIO, END)
    assert outcome == "X"


def test_fractional_interference_compared_exactly(state: EngineState):
    interfere(state, SCENARIO, "i1", Decimal("1.000001"), "X", 1)
    interfere(state, SCENARIO, "i2", Decimal("1.000002"), "Y", 1)
    outcome, _, _ = resolve_scenario(state, SCENARIO, END)
    assert outcome == "Y"


def test_empty_prediction_list_resolves_to_empty(state: EngineState):
    outcome, _, _ = resolve_scenario(state, SCENARIO, END)
    assert outcome == ""
    assert state["scenarios"][SCENARIO]["resolved"] is True


def test_select_winner_empty():
    scenario = get_scenario(init_state(), 5)
    assert select_winner(scenario) == ""


def test_resolve_twice_fails_and_keeps_outcome(state: EngineState):
    bet_many(state, "P1", 1)
    resolve_scenario(state, SCENARIO, END)
    with pytest.raises(AlreadyResolved):
        resolve_scenario(state, SCENARIO, END + 10)
    assert state["scenarios"][SCENARIO]["outcome"] == "P1"


def test_resolve_while_window_open(state: EngineState):
    bet_many(state, "P1", 1)
    with pytest.raises(WindowOpen, match="open until 100"):
        resolve_scenario(state, SCENARIO, END - 1)
    assert state["scenarios"][SCENARIO]["resolved"] is False
    assert state["scenarios"][SCENARIO]["outcome"] == ""


def test_resolve_unopened_scenario():
    state = init_state()
    outcome, _, _ = resolve_scenario(state, 77, 0)
    assert outcome == ""
    assert state["scenarios"][77]["resolved"] is True


def test_resolution_does_not_reset_aggregates(state: EngineState):
    bet_many(state, "P1", 2)
    interfere(state, SCENARIO, "i1", 10, "P1", 2)
    resolve_scenario(state, SCENARIO, END)
    assert get_votes(state, SCENARIO, "P1") == 2
    assert get_interference_amount(state, SCENARIO, "P1") == Decimal("10")
    validate_scenario_state(state["scenarios"][SCENARIO])
