from decimal import Decimal
from typing import Callable, List, Dict, Any, Tuple

from .state import EngineState, ScenarioState, get_scenario, view_scenario
from .errors import NotResolved, AlreadyClaimed, LosingPrediction, TransferFailed
from app.utils import floor_amount, AMOUNT_DECIMALS

# Moves value to a recipient; returns False (or raises) when it cannot complete
CreditTransfer = Callable[[str, Decimal], bool]

def total_winning_bets(scenario: ScenarioState) -> Decimal:
    return sum(
        (bet['amount'] for bet in scenario['bets'].values() if bet['prediction'] == scenario['outcome']),
        Decimal('0')
    )

def total_winning_interference(scenario: ScenarioState) -> Decimal:
    return sum(
        (i['amount'] for i in scenario['interferences'].values() if i['prediction'] == scenario['outcome']),
        Decimal('0')
    )

def compute_bet_winnings(scenario: ScenarioState, amount: Decimal, decimals: int = AMOUNT_DECIMALS) -> Decimal:
    """
    Pro-rata share of the bet pool for a winning bet of `amount`.

    When interference is on record the interference pool is added to the
    distributable pool. Interferers draw on that same interference pool
    separately, so the two groups' claims are not disjoint.
    """
    winning = total_winning_bets(scenario)
    if winning == Decimal('0'):
        return floor_amount(Decimal('0'), decimals)
    pool = scenario['total_pool']
    if scenario['interference_pool'] > Decimal('0'):
        pool = pool + scenario['interference_pool']
    return floor_amount(pool * amount / winning, decimals)

def compute_interference_winnings(scenario: ScenarioState, amount: Decimal, decimals: int = AMOUNT_DECIMALS) -> Decimal:
    winning = total_winning_interference(scenario)
    if winning == Decimal('0'):
        return floor_amount(Decimal('0'), decimals)
    return floor_amount(scenario['interference_pool'] * amount / winning, decimals)

def _claim(
    state: EngineState,
    scenario_id: int,
    caller: str,
    transfer: CreditTransfer,
    records_key: str,
    compute: Callable[[ScenarioState, Decimal, int], Decimal],
    event_type: str,
    current_time: int,
    decimals: int
) -> Tuple[Decimal, EngineState, List[Dict[str, Any]]]:
    scenario = view_scenario(state, scenario_id)
    if not scenario['resolved']:
        raise NotResolved("Scenario not resolved", scenario_id)

    record = scenario[records_key].get(caller)
    if record is not None and record['claimed']:
        raise AlreadyClaimed(f"{caller} already claimed", scenario_id)
    if record is None or record['prediction'] != scenario['outcome']:
        raise LosingPrediction(f"{caller} did not predict {scenario['outcome']!r}", scenario_id)

    scenario = get_scenario(state, scenario_id)
    # Flag before transfer: a reentrant claim from inside transfer() sees AlreadyClaimed
    record['claimed'] = True
    winnings = compute(scenario, record['amount'], decimals)

    try:
        delivered = transfer(caller, winnings)
    except Exception as e:
        record['claimed'] = False
        raise TransferFailed(f"Transfer of {winnings} to {caller} failed: {e}", scenario_id) from e
    if not delivered:
        record['claimed'] = False
        raise TransferFailed(f"Transfer of {winnings} to {caller} failed", scenario_id)

    events = [{
        'type': event_type,
        'payload': {'scenario_id': scenario_id, 'caller': caller, 'amount': winnings, 'prediction': record['prediction']},
        'ts': current_time
    }]
    return winnings, state, events

def claim_winnings(
    state: EngineState,
    scenario_id: int,
    caller: str,
    transfer: CreditTransfer,
    current_time: int = 0,
    decimals: int = AMOUNT_DECIMALS
) -> Tuple[Decimal, EngineState, List[Dict[str, Any]]]:
    return _claim(state, scenario_id, caller, transfer, 'bets', compute_bet_winnings,
                  'WINNINGS_CLAIMED', current_time, decimals)

def claim_interference_winnings(
    state: EngineState,
    scenario_id: int,
    caller: str,
    transfer: CreditTransfer,
    current_time: int = 0,
    decimals: int = AMOUNT_DECIMALS
) -> Tuple[Decimal, EngineState, List[Dict[str, Any]]]:
    return _claim(state, scenario_id, caller, transfer, 'interferences', compute_interference_winnings,
                  'INTERFERENCE_WINNINGS_CLAIMED', current_time, decimals)
