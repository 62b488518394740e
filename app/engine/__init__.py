from .state import (
    Bet,
    Interference,
    ScenarioState,
    ScenarioSummary,
    EngineState,
    init_state,
    open_scenario,
    scenario_summary,
    serialize_state,
    deserialize_state,
)
from .errors import (
    EngineError,
    InvalidAmount,
    AlreadyResolved,
    WindowClosed,
    WindowOpen,
    BelowMinimum,
    NotResolved,
    AlreadyClaimed,
    LosingPrediction,
    IndexOutOfBounds,
    TransferFailed,
)
from .bets import place_bet
from .interference import interfere
from .resolutions import resolve_scenario
from .payouts import claim_winnings, claim_interference_winnings, CreditTransfer
