from typing_extensions import TypedDict
import os
from dotenv import load_dotenv

ENV_PREFIX = 'MARKET_'

def load_env() -> dict[str, str]:
    # Try to load from .env file (for local development)
    load_dotenv()

    optional_vars = ['AMOUNT_DECIMALS', 'LOG_LEVEL', 'SNAPSHOT_PATH', 'DEFAULT_WINDOW_SECONDS']
    env_vars = {}

    for key in optional_vars:
        value = os.getenv(ENV_PREFIX + key)
        if value is not None:
            env_vars[key] = value

    return env_vars

class EngineParams(TypedDict):
    amount_decimals: int
    log_level: str
    snapshot_path: str
    default_window_seconds: int

def get_default_engine_params() -> EngineParams:
    return EngineParams(
        amount_decimals=6,
        log_level='INFO',
        snapshot_path='engine_state.json',
        default_window_seconds=3600,
    )

def get_engine_params() -> EngineParams:
    """
    Defaults overlaid with MARKET_* environment variables.
    """
    params = get_default_engine_params()
    env = load_env()

    if 'AMOUNT_DECIMALS' in env:
        decimals = int(env['AMOUNT_DECIMALS'])
        if decimals < 0:
            raise ValueError(f"MARKET_AMOUNT_DECIMALS must be non-negative, got {decimals}")
        params['amount_decimals'] = decimals
    if 'LOG_LEVEL' in env:
        params['log_level'] = env['LOG_LEVEL'].upper()
    if 'SNAPSHOT_PATH' in env:
        params['snapshot_path'] = env['SNAPSHOT_PATH']
    if 'DEFAULT_WINDOW_SECONDS' in env:
        window = int(env['DEFAULT_WINDOW_SECONDS'])
        if window <= 0:
            raise ValueError(f"MARKET_DEFAULT_WINDOW_SECONDS must be >0, got {window}")
        params['default_window_seconds'] = window

    return params
