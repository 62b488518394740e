from typing_extensions import TypedDict
from typing import List, Dict, Any
from decimal import Decimal

class Bet(TypedDict):
    amount: Decimal
    prediction: str
    claimed: bool

class Interference(TypedDict):
    amount: Decimal
    prediction: str
    claimed: bool

class ScenarioState(TypedDict):
    scenario_id: int
    start_time: int
    end_time: int
    resolved: bool
    outcome: str
    total_pool: Decimal  # Single stored value behind both scenario_pool() and the summary's totalPool
    interference_pool: Decimal
    predictions: List[str]  # Insertion order, distinct
    votes: Dict[str, int]
    interference_amounts: Dict[str, Decimal]
    bettors: List[str]
    interferers: List[str]
    bets: Dict[str, Bet]
    interferences: Dict[str, Interference]

class ScenarioSummary(TypedDict):
    scenario_id: int
    start_time: int
    end_time: int
    resolved: bool
    outcome: str
    total_pool: Decimal

class EngineState(TypedDict):
    scenarios: Dict[int, ScenarioState]

def init_state() -> EngineState:
    """
    Initialize an empty engine state.
    """
    return {'scenarios': {}}

def new_scenario(scenario_id: int) -> ScenarioState:
    # Unset fields read as zero/empty
    return {
        'scenario_id': scenario_id,
        'start_time': 0,
        'end_time': 0,
        'resolved': False,
        'outcome': '',
        'total_pool': Decimal('0'),
        'interference_pool': Decimal('0'),
        'predictions': [],
        'votes': {},
        'interference_amounts': {},
        'bettors': [],
        'interferers': [],
        'bets': {},
        'interferences': {},
    }

def get_scenario(state: EngineState, scenario_id: int) -> ScenarioState:
    """
    Get the scenario record, creating it on first reference.
    """
    scenarios = state['scenarios']
    if scenario_id not in scenarios:
        scenarios[scenario_id] = new_scenario(scenario_id)
    return scenarios[scenario_id]

def view_scenario(state: EngineState, scenario_id: int) -> ScenarioState:
    """
    Read-only lookup: an unreferenced scenario reads as empty without being stored.
    """
    scenario = state['scenarios'].get(scenario_id)
    if scenario is None:
        return new_scenario(scenario_id)
    return scenario

def open_scenario(state: EngineState, scenario_id: int, start_time: int, end_time: int) -> ScenarioState:
    """
    Administrative bootstrap: set a scenario's time window.

    Participant operations never call this; it stands in for the external
    path that assigns a scenario its identity and window.
    """
    if end_time < start_time:
        raise ValueError(f"end_time {end_time} precedes start_time {start_time}")
    scenario = view_scenario(state, scenario_id)
    if scenario['resolved']:
        raise ValueError(f"Scenario {scenario_id} is resolved and cannot be reopened")
    scenario = get_scenario(state, scenario_id)
    scenario['start_time'] = start_time
    scenario['end_time'] = end_time
    return scenario

def scenario_summary(state: EngineState, scenario_id: int) -> ScenarioSummary:
    scenario = view_scenario(state, scenario_id)
    return {
        'scenario_id': scenario_id,
        'start_time': scenario['start_time'],
        'end_time': scenario['end_time'],
        'resolved': scenario['resolved'],
        'outcome': scenario['outcome'],
        'total_pool': scenario['total_pool'],
    }

def _stake_to_json(record: Dict[str, Any]) -> Dict[str, Any]:
    return {'amount': str(record['amount']), 'prediction': record['prediction'], 'claimed': record['claimed']}

def _stake_from_json(record: Dict[str, Any]) -> Dict[str, Any]:
    return {'amount': Decimal(record['amount']), 'prediction': record['prediction'], 'claimed': bool(record['claimed'])}

def serialize_state(state: EngineState) -> Dict[str, Any]:
    """
    Serialize state to JSON-compatible dict, converting int keys and Decimals to str.
    """
    scenarios = {}
    for scenario_id, scenario in state['scenarios'].items():
        scenarios[str(scenario_id)] = {
            'scenario_id': scenario['scenario_id'],
            'start_time': scenario['start_time'],
            'end_time': scenario['end_time'],
            'resolved': scenario['resolved'],
            'outcome': scenario['outcome'],
            'total_pool': str(scenario['total_pool']),
            'interference_pool': str(scenario['interference_pool']),
            'predictions': list(scenario['predictions']),
            'votes': dict(scenario['votes']),
            'interference_amounts': {k: str(v) for k, v in scenario['interference_amounts'].items()},
            'bettors': list(scenario['bettors']),
            'interferers': list(scenario['interferers']),
            'bets': {k: _stake_to_json(v) for k, v in scenario['bets'].items()},
            'interferences': {k: _stake_to_json(v) for k, v in scenario['interferences'].items()},
        }
    return {'scenarios': scenarios}

def deserialize_state(json_dict: Dict[str, Any]) -> EngineState:
    """
    Deserialize from JSON dict, converting str keys to int and amounts to Decimal.
    """
    scenarios: Dict[int, ScenarioState] = {}
    for key, raw in json_dict.get('scenarios', {}).items():
        scenario_id = int(key)
        scenarios[scenario_id] = {
            'scenario_id': scenario_id,
            'start_time': int(raw['start_time']),
            'end_time': int(raw['end_time']),
            'resolved': bool(raw['resolved']),
            'outcome': raw['outcome'],
            'total_pool': Decimal(raw['total_pool']),
            'interference_pool': Decimal(raw['interference_pool']),
            'predictions': list(raw['predictions']),
            'votes': {k: int(v) for k, v in raw['votes'].items()},
            'interference_amounts': {k: Decimal(v) for k, v in raw['interference_amounts'].items()},
            'bettors': list(raw['bettors']),
            'interferers': list(raw['interferers']),
            'bets': {k: _stake_from_json(v) for k, v in raw['bets'].items()},
            'interferences': {k: _stake_from_json(v) for k, v in raw['interferences'].items()},
        }
    return {'scenarios': scenarios}
