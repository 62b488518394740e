import json
import logging
import time
from decimal import Decimal, ROUND_DOWN, getcontext
from typing import Any, Dict

getcontext().prec = 50

AMOUNT_DECIMALS = 6

def get_current_time() -> int:
    return int(time.time())

def floor_amount(amount: Decimal, decimals: int = AMOUNT_DECIMALS) -> Decimal:
    """
    Quantize toward zero; payouts are never rounded up.
    """
    return amount.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_DOWN)

def setup_logging(level: str = 'INFO') -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

def serialize_json(data: Dict[str, Any]) -> str:
    def default_handler(obj: Any) -> Any:
        if isinstance(obj, Decimal):
            return str(obj)
        raise TypeError(f"Object of type {type(obj)} is not JSON serializable")
    return json.dumps(data, default=default_handler, indent=2, sort_keys=True)

def deserialize_json(json_str: str) -> Dict[str, Any]:
    return json.loads(json_str)

# State validation functions for ledger invariants

def validate_pool_invariant(scenario: Dict[str, Any]) -> None:
    """
    Validate that total_pool equals the sum of live bets and that
    interference_pool equals the sum of live interferences.

    Args:
        scenario: ScenarioState dictionary to validate

    Raises:
        ValueError: If either pool has drifted from its records
    """
    bet_sum = sum((Decimal(str(b['amount'])) for b in scenario['bets'].values()), Decimal('0'))
    if Decimal(str(scenario['total_pool'])) != bet_sum:
        raise ValueError(f"Pool violation: total_pool({scenario['total_pool']}) != sum of bets({bet_sum})")

    interference_sum = sum((Decimal(str(i['amount'])) for i in scenario['interferences'].values()), Decimal('0'))
    if Decimal(str(scenario['interference_pool'])) != interference_sum:
        raise ValueError(
            f"Pool violation: interference_pool({scenario['interference_pool']}) != sum of interferences({interference_sum})"
        )

def validate_scenario_state(scenario: Dict[str, Any]) -> None:
    """
    Validate all scenario invariants.

    Checks:
    - Pools match their live records
    - Predictions are distinct
    - Bettor and interferer lists match the record keys
    - Interference aggregates never total less than the live pool
    - A resolved outcome is one of the recorded predictions

    Raises:
        ValueError: If any invariant is violated
    """
    validate_pool_invariant(scenario)

    predictions = scenario['predictions']
    if len(set(predictions)) != len(predictions):
        raise ValueError(f"Duplicate predictions: {predictions}")

    if set(scenario['bettors']) != set(scenario['bets']) or len(scenario['bettors']) != len(scenario['bets']):
        raise ValueError("Bettor list does not match bet records")
    if set(scenario['interferers']) != set(scenario['interferences']) or len(scenario['interferers']) != len(scenario['interferences']):
        raise ValueError("Interferer list does not match interference records")

    aggregate = sum((Decimal(str(v)) for v in scenario['interference_amounts'].values()), Decimal('0'))
    if aggregate < Decimal(str(scenario['interference_pool'])):
        raise ValueError(f"Interference aggregates({aggregate}) below interference_pool({scenario['interference_pool']})")

    if scenario['resolved']:
        if predictions and scenario['outcome'] not in predictions:
            raise ValueError(f"Outcome {scenario['outcome']!r} is not a recorded prediction")
        if not predictions and scenario['outcome'] != '':
            raise ValueError(f"Outcome {scenario['outcome']!r} set with no predictions")
    elif scenario['outcome'] != '':
        raise ValueError("Outcome set on an unresolved scenario")
