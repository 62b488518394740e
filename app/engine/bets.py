from decimal import Decimal, InvalidOperation
from typing import List, Dict, Any, Optional, Tuple

from .state import Bet, EngineState, ScenarioState, get_scenario, view_scenario
from .predictions import record_prediction, increment_vote
from .errors import InvalidAmount, AlreadyResolved, WindowClosed, IndexOutOfBounds

def to_amount(amount: int | str | Decimal, scenario_id: Optional[int] = None) -> Decimal:
    if isinstance(amount, float):
        raise TypeError("Stake amounts must be int, str or Decimal, not float")
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise InvalidAmount(f"Amount is not a number: {amount!r}", scenario_id) from None
    if not value.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {value}", scenario_id)
    return value

def validate_stake(scenario: ScenarioState, amount: Decimal, current_time: int) -> None:
    """
    Checks shared by bets and interferences, in rejection order.
    """
    scenario_id = scenario['scenario_id']
    if amount <= Decimal('0'):
        raise InvalidAmount(f"Amount must be positive, got {amount}", scenario_id)
    if scenario['resolved']:
        raise AlreadyResolved("Scenario already resolved", scenario_id)
    if current_time >= scenario['end_time']:
        raise WindowClosed(f"Betting window closed at {scenario['end_time']} (now {current_time})", scenario_id)


def place_bet(
    state: EngineState,
    scenario_id: int,
    caller: str,
    amount: int | str | Decimal,
    prediction: str,
    current_time: int
) -> Tuple[Bet, EngineState, List[Dict[str, Any]]]:
    amount = to_amount(amount, scenario_id)
    # All checks run against a read-only view so a rejection leaves no trace
    view = view_scenario(state, scenario_id)
    validate_stake(view, amount, current_time)
    prior = view['bets'].get(caller)
    new_pool = view['total_pool'] + amount - (prior['amount'] if prior is not None else Decimal('0'))

    scenario = get_scenario(state, scenario_id)
    record_prediction(scenario, prediction)
    if prior is None:
        scenario['bettors'].append(caller)

    bet: Bet = {'amount': amount, 'prediction': prediction, 'claimed': False}
    scenario['bets'][caller] = bet

    # Every submission counts as a vote, re-bets included
    increment_vote(scenario, prediction)
    scenario['total_pool'] = new_pool

    events = [{
        'type': 'BET_PLACED',
        'payload': {'scenario_id': scenario_id, 'caller': caller, 'amount': amount, 'prediction': prediction},
        'ts': current_time
    }]
    return dict(bet), state, events

# Read-only accessors

def get_bet(state: EngineState, scenario_id: int, caller: str) -> Bet | None:
    bet = view_scenario(state, scenario_id)['bets'].get(caller)
    return dict(bet) if bet is not None else None

def scenario_pool(state: EngineState, scenario_id: int) -> Decimal:
    return view_scenario(state, scenario_id)['total_pool']

def bettor_count(state: EngineState, scenario_id: int) -> int:
    return len(view_scenario(state, scenario_id)['bettors'])

def bettor_at(state: EngineState, scenario_id: int, index: int) -> str:
    bettors = view_scenario(state, scenario_id)['bettors']
    if index < 0 or index >= len(bettors):
        raise IndexOutOfBounds(f"Bettor index {index} out of range (count {len(bettors)})", scenario_id)
    return bettors[index]

def minimum_bet_amount(state: EngineState, scenario_id: int) -> Decimal:
    """
    Smallest live bet amount, or 0 when nobody has bet yet.

    Full scan over current bets so replacements are reflected immediately.
    """
    scenario = view_scenario(state, scenario_id)
    if not scenario['bettors']:
        return Decimal('0')
    return min(scenario['bets'][bettor]['amount'] for bettor in scenario['bettors'])
