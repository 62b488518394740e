from decimal import Decimal
from typing import List, Dict, Any, Tuple

from .state import Interference, EngineState, get_scenario, view_scenario
from .predictions import record_prediction, add_interference_amount
from .bets import to_amount, validate_stake, minimum_bet_amount
from .errors import BelowMinimum, IndexOutOfBounds

def interfere(
    state: EngineState,
    scenario_id: int,
    caller: str,
    amount: int | str | Decimal,
    prediction: str,
    current_time: int
) -> Tuple[Interference, EngineState, List[Dict[str, Any]]]:
    amount = to_amount(amount, scenario_id)
    view = view_scenario(state, scenario_id)
    validate_stake(view, amount, current_time)
    floor = minimum_bet_amount(state, scenario_id)
    if amount < floor:
        raise BelowMinimum(f"Interference {amount} below minimum bet {floor}", scenario_id)
    prior = view['interferences'].get(caller)
    new_pool = view['interference_pool'] + amount - (prior['amount'] if prior is not None else Decimal('0'))

    scenario = get_scenario(state, scenario_id)
    record_prediction(scenario, prediction)
    if prior is None:
        scenario['interferers'].append(caller)

    interference: Interference = {'amount': amount, 'prediction': prediction, 'claimed': False}
    scenario['interferences'][caller] = interference

    # Votes untouched; only the per-prediction interference aggregate moves
    add_interference_amount(scenario, prediction, amount)
    scenario['interference_pool'] = new_pool

    events = [{
        'type': 'INTERFERENCE_ADDED',
        'payload': {'scenario_id': scenario_id, 'caller': caller, 'amount': amount, 'prediction': prediction},
        'ts': current_time
    }]
    return dict(interference), state, events


# Read-only accessors

def get_interference(state: EngineState, scenario_id: int, caller: str) -> Interference | None:
    interference = view_scenario(state, scenario_id)['interferences'].get(caller)
    return dict(interference) if interference is not None else None

def interference_pool(state: EngineState, scenario_id: int) -> Decimal:
    return view_scenario(state, scenario_id)['interference_pool']

def interferer_count(state: EngineState, scenario_id: int) -> int:
    return len(view_scenario(state, scenario_id)['interferers'])

def interferer_at(state: EngineState, scenario_id: int, index: int) -> str:
    interferers = view_scenario(state, scenario_id)['interferers']
    if index < 0 or index >= len(interferers):
        raise IndexOutOfBounds(f"Interferer index {index} out of range (count {len(interferers)})", scenario_id)
    return interferers[index]
