import argparse
import json
import logging
import sys
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

from app.config import get_engine_params
from app.services.market import MarketService
from app.utils import serialize_json, setup_logging

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {
    'open': ('scenario_id',),
    'bet': ('scenario_id', 'caller', 'prediction', 'amount'),
    'interfere': ('scenario_id', 'caller', 'prediction', 'amount'),
    'resolve': ('scenario_id',),
    'claim': ('scenario_id', 'caller'),
    'claim_interference': ('scenario_id', 'caller'),
}

OPERATIONS = tuple(REQUIRED_FIELDS)


class ReplayClock:
    """Clock driven by the `time` field of each logged operation."""

    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now


class CreditLedger:
    """Credit transfer that records every payment it makes."""

    def __init__(self):
        self.credits: Dict[str, Decimal] = {}

    def __call__(self, recipient: str, amount: Decimal) -> bool:
        self.credits[recipient] = self.credits.get(recipient, Decimal('0')) + amount
        return True


def load_operations(path: str) -> List[Dict[str, Any]]:
    # Decimal parsing keeps amounts exact
    operations = json.loads(Path(path).read_text(encoding='utf-8'), parse_float=Decimal)
    if not isinstance(operations, list):
        raise ValueError("Operation log must be a JSON list")
    for i, op in enumerate(operations):
        if not isinstance(op, dict):
            raise ValueError(f"Operation {i}: expected an object, got {type(op).__name__}")
        if op.get('op') not in OPERATIONS:
            raise ValueError(f"Operation {i}: unknown op {op.get('op')!r}")
        missing = [field for field in REQUIRED_FIELDS[op['op']] if field not in op]
        if missing:
            raise ValueError(f"Operation {i} ({op['op']}): missing field(s) {', '.join(missing)}")
    return operations


def apply_operation(service: MarketService, clock: ReplayClock, op: Dict[str, Any]) -> Any:
    if 'time' in op:
        clock.now = int(op['time'])
    kind = op['op']
    scenario_id = int(op['scenario_id'])
    if kind == 'open':
        return service.open_scenario(scenario_id, op.get('start'), op.get('end'))
    if kind == 'bet':
        return service.place_bet(op['caller'], scenario_id, op['prediction'], op['amount'])
    if kind == 'interfere':
        return service.interfere(op['caller'], scenario_id, op['prediction'], op['amount'])
    if kind == 'resolve':
        return service.resolve_scenario(op.get('caller', ''), scenario_id)
    if kind == 'claim':
        return service.claim_winnings(op['caller'], scenario_id)
    return service.claim_interference_winnings(op['caller'], scenario_id)


def replay(operations: List[Dict[str, Any]], strict: bool = False) -> Dict[str, Any]:
    """
    Replay an operation log against a fresh engine.

    Rejected operations are collected rather than aborting the run unless
    strict is set.
    """
    clock = ReplayClock()
    ledger = CreditLedger()
    service = MarketService(ledger, clock=clock)
    rejections = []

    # EngineError is a ValueError; bad admin windows and float amounts raise the plain builtins
    for i, op in enumerate(operations):
        try:
            apply_operation(service, clock, op)
        except (ValueError, TypeError) as e:
            if strict:
                raise
            rejections.append({'index': i, 'op': op['op'], 'error': type(e).__name__, 'message': str(e)})

    service.validate()
    scenario_ids = sorted(service.state['scenarios'])
    return {
        'service': service,
        'scenarios': [service.describe(scenario_id) for scenario_id in scenario_ids],
        'credits': dict(sorted(ledger.credits.items())),
        'rejections': rejections,
    }


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Replay a JSON operation log and print resulting scenario state.")
    parser.add_argument("log", help="Path to a JSON list of operations")
    parser.add_argument("--strict", action="store_true", help="Abort on the first rejected operation")
    parser.add_argument("--save", help="Write the resulting engine snapshot to this path")
    parser.add_argument("--log-level", default=None, help="Logging level (default from MARKET_LOG_LEVEL)")
    args = parser.parse_args(argv)

    setup_logging(args.log_level or get_engine_params()['log_level'])

    try:
        result = replay(load_operations(args.log), strict=args.strict)
    except (ValueError, TypeError, OSError) as e:
        logger.error(f"Replay failed: {e}")
        return 1

    if args.save:
        result['service'].save(args.save)

    report = {k: v for k, v in result.items() if k != 'service'}
    print(serialize_json(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
