from decimal import Decimal
from typing import List

from .state import ScenarioState, EngineState, view_scenario

def record_prediction(scenario: ScenarioState, prediction: str) -> bool:
    """
    Append prediction to the scenario's list if it is not already there.

    Returns True when the prediction is new.
    """
    if prediction in scenario['predictions']:
        return False
    scenario['predictions'].append(prediction)
    return True

def increment_vote(scenario: ScenarioState, prediction: str) -> int:
    votes = scenario['votes'].get(prediction, 0) + 1
    scenario['votes'][prediction] = votes
    return votes

def add_interference_amount(scenario: ScenarioState, prediction: str, amount: Decimal) -> Decimal:
    total = scenario['interference_amounts'].get(prediction, Decimal('0')) + amount
    scenario['interference_amounts'][prediction] = total
    return total

# Read-only accessors

def get_votes(state: EngineState, scenario_id: int, prediction: str) -> int:
    return view_scenario(state, scenario_id)['votes'].get(prediction, 0)

def get_interference_amount(state: EngineState, scenario_id: int, prediction: str) -> Decimal:
    return view_scenario(state, scenario_id)['interference_amounts'].get(prediction, Decimal('0'))

def get_predictions(state: EngineState, scenario_id: int) -> List[str]:
    return list(view_scenario(state, scenario_id)['predictions'])

def prediction_count(state: EngineState, scenario_id: int) -> int:
    return len(view_scenario(state, scenario_id)['predictions'])
