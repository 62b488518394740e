import logging
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from app.config import EngineParams, get_engine_params
from app.engine import bets, interference, payouts, predictions, resolutions
from app.engine.errors import EngineError
from app.engine.payouts import CreditTransfer
from app.engine.state import (
    Bet, Interference, EngineState, ScenarioSummary, init_state, open_scenario, scenario_summary
)
from app.db.queries import fetch_engine_state, save_engine_state
from app.services.realtime import publish_events
from app.utils import get_current_time, validate_scenario_state

logger = logging.getLogger(__name__)

Clock = Callable[[], int]

class MarketService:
    """
    Participant-facing surface of the settlement engine.

    Caller identity, attached value and current time are explicit inputs; the
    engine state is an in-memory keyed store that can be snapshotted to disk.
    Every accepted operation's events are published to realtime observers.
    """

    def __init__(
        self,
        transfer: CreditTransfer,
        clock: Clock = get_current_time,
        state: Optional[EngineState] = None,
        params: Optional[EngineParams] = None
    ):
        self.transfer = transfer
        self.clock = clock
        self.state: EngineState = state if state is not None else init_state()
        self.params: EngineParams = params if params is not None else get_engine_params()

    def _run(self, operation: str, fn: Callable[[], tuple], scenario_id: int) -> Any:
        try:
            result, self.state, events = fn()
        except (EngineError, TypeError) as e:
            logger.warning(f"{operation} rejected for scenario {scenario_id}: {e}")
            raise
        publish_events(events)
        return result

    # Administrative bootstrap

    def open_scenario(self, scenario_id: int, start_time: Optional[int] = None, end_time: Optional[int] = None) -> ScenarioSummary:
        start = self.clock() if start_time is None else start_time
        end = start + self.params['default_window_seconds'] if end_time is None else end_time
        try:
            open_scenario(self.state, scenario_id, start, end)
        except ValueError as e:
            logger.warning(f"openScenario rejected for scenario {scenario_id}: {e}")
            raise
        logger.info(f"Opened scenario {scenario_id} window [{start}, {end})")
        return scenario_summary(self.state, scenario_id)

    # Participant operations

    def place_bet(self, caller: str, scenario_id: int, prediction: str, value: int | str | Decimal) -> Bet:
        now = self.clock()
        bet = self._run('placeBet', lambda: bets.place_bet(self.state, scenario_id, caller, value, prediction, now), scenario_id)
        logger.info(f"Bet {bet['amount']} on {prediction!r} by {caller} in scenario {scenario_id}")
        return bet

    def interfere(self, caller: str, scenario_id: int, prediction: str, value: int | str | Decimal) -> Interference:
        now = self.clock()
        record = self._run('interfere', lambda: interference.interfere(self.state, scenario_id, caller, value, prediction, now), scenario_id)
        logger.info(f"Interference {record['amount']} on {prediction!r} by {caller} in scenario {scenario_id}")
        return record

    def resolve_scenario(self, caller: str, scenario_id: int) -> str:
        now = self.clock()
        outcome = self._run('resolveScenario', lambda: resolutions.resolve_scenario(self.state, scenario_id, now), scenario_id)
        logger.info(f"Scenario {scenario_id} resolved to {outcome!r} (triggered by {caller})")
        return outcome

    def claim_winnings(self, caller: str, scenario_id: int) -> Decimal:
        now = self.clock()
        amount = self._run(
            'claimWinnings',
            lambda: payouts.claim_winnings(self.state, scenario_id, caller, self.transfer, now, self.params['amount_decimals']),
            scenario_id
        )
        logger.info(f"Paid {amount} bet winnings to {caller} for scenario {scenario_id}")
        return amount

    def claim_interference_winnings(self, caller: str, scenario_id: int) -> Decimal:
        now = self.clock()
        amount = self._run(
            'claimInterferenceWinnings',
            lambda: payouts.claim_interference_winnings(self.state, scenario_id, caller, self.transfer, now, self.params['amount_decimals']),
            scenario_id
        )
        logger.info(f"Paid {amount} interference winnings to {caller} for scenario {scenario_id}")
        return amount

    # Read-only accessors

    def get_scenario(self, scenario_id: int) -> ScenarioSummary:
        return scenario_summary(self.state, scenario_id)

    def get_bet(self, scenario_id: int, caller: str) -> Optional[Bet]:
        return bets.get_bet(self.state, scenario_id, caller)

    def get_interference(self, scenario_id: int, caller: str) -> Optional[Interference]:
        return interference.get_interference(self.state, scenario_id, caller)

    def get_scenario_pool(self, scenario_id: int) -> Decimal:
        return bets.scenario_pool(self.state, scenario_id)

    def get_interference_pool(self, scenario_id: int) -> Decimal:
        return interference.interference_pool(self.state, scenario_id)

    def get_prediction_votes(self, scenario_id: int, prediction: str) -> int:
        return predictions.get_votes(self.state, scenario_id, prediction)

    def get_prediction_interference(self, scenario_id: int, prediction: str) -> Decimal:
        return predictions.get_interference_amount(self.state, scenario_id, prediction)

    def get_bettor_count(self, scenario_id: int) -> int:
        return bets.bettor_count(self.state, scenario_id)

    def get_bettor(self, scenario_id: int, index: int) -> str:
        return bets.bettor_at(self.state, scenario_id, index)

    def get_interferer_count(self, scenario_id: int) -> int:
        return interference.interferer_count(self.state, scenario_id)

    def get_interferer(self, scenario_id: int, index: int) -> str:
        return interference.interferer_at(self.state, scenario_id, index)

    def get_predictions(self, scenario_id: int) -> List[str]:
        return predictions.get_predictions(self.state, scenario_id)

    def get_prediction_count(self, scenario_id: int) -> int:
        return predictions.prediction_count(self.state, scenario_id)

    def get_minimum_bet_amount(self, scenario_id: int) -> Decimal:
        return bets.minimum_bet_amount(self.state, scenario_id)

    # Snapshots

    def validate(self) -> None:
        for scenario in self.state['scenarios'].values():
            validate_scenario_state(scenario)

    def save(self, path: Optional[str] = None) -> None:
        self.validate()
        save_engine_state(self.state, path or self.params['snapshot_path'])

    @classmethod
    def load(cls, transfer: CreditTransfer, path: Optional[str] = None, clock: Clock = get_current_time,
             params: Optional[EngineParams] = None) -> 'MarketService':
        params = params if params is not None else get_engine_params()
        state = fetch_engine_state(path or params['snapshot_path'])
        service = cls(transfer, clock=clock, state=state, params=params)
        service.validate()
        return service

    def describe(self, scenario_id: int) -> Dict[str, Any]:
        """Summary plus per-prediction aggregates, for reports and the replay CLI."""
        summary = dict(self.get_scenario(scenario_id))
        summary['interference_pool'] = self.get_interference_pool(scenario_id)
        summary['predictions'] = [
            {
                'prediction': p,
                'votes': self.get_prediction_votes(scenario_id, p),
                'interference': self.get_prediction_interference(scenario_id, p),
            }
            for p in self.get_predictions(scenario_id)
        ]
        summary['bettors'] = self.get_bettor_count(scenario_id)
        summary['interferers'] = self.get_interferer_count(scenario_id)
        return summary
