from decimal import Decimal
from typing import List, Dict, Any, Tuple

import numpy as np

from .state import EngineState, ScenarioState, get_scenario, view_scenario
from .errors import AlreadyResolved, WindowOpen

def select_winner(scenario: ScenarioState) -> str:
    """
    Pick the winning prediction for a scenario.

    With any interference on record the per-prediction interference totals
    decide; otherwise vote counts do. np.argmax returns the first maximum, so
    ties go to the earliest-recorded prediction.
    """
    predictions = scenario['predictions']
    if not predictions:
        return ''

    if scenario['interference_pool'] > Decimal('0'):
        # Object dtype keeps exact Decimal comparison
        weights = np.array(
            [scenario['interference_amounts'].get(p, Decimal('0')) for p in predictions],
            dtype=object
        )
    else:
        weights = np.array([scenario['votes'].get(p, 0) for p in predictions], dtype=np.int64)

    return predictions[int(np.argmax(weights))]

def resolve_scenario(
    state: EngineState,
    scenario_id: int,
    current_time: int
) -> Tuple[str, EngineState, List[Dict[str, Any]]]:
    scenario = view_scenario(state, scenario_id)
    if scenario['resolved']:
        raise AlreadyResolved("Scenario already resolved", scenario_id)
    if current_time < scenario['end_time']:
        raise WindowOpen(f"Betting window open until {scenario['end_time']} (now {current_time})", scenario_id)

    scenario = get_scenario(state, scenario_id)
    outcome = select_winner(scenario)
    scenario['outcome'] = outcome
    scenario['resolved'] = True

    events = [{
        'type': 'SCENARIO_RESOLVED',
        'payload': {
            'scenario_id': scenario_id,
            'outcome': outcome,
            'decided_by': 'interference' if scenario['interference_pool'] > Decimal('0') else 'votes',
            'total_pool': scenario['total_pool'],
            'interference_pool': scenario['interference_pool']
        },
        'ts': current_time
    }]
    return outcome, state, events
