import argparse
from typing import List, Dict, Any

import pandas as pd

from app.db.queries import fetch_engine_state
from app.engine.state import EngineState

STAKE_COLUMNS = ['scenario_id', 'kind', 'participant', 'amount', 'prediction', 'claimed']
SCENARIO_COLUMNS = ['scenario_id', 'start_time', 'end_time', 'resolved', 'outcome', 'total_pool', 'interference_pool']

def stake_rows(state: EngineState) -> List[Dict[str, Any]]:
    rows = []
    for scenario_id, scenario in sorted(state['scenarios'].items()):
        # List order is first-stake order
        for bettor in scenario['bettors']:
            bet = scenario['bets'][bettor]
            rows.append({
                'scenario_id': scenario_id,
                'kind': 'BET',
                'participant': bettor,
                'amount': str(bet['amount']),
                'prediction': bet['prediction'],
                'claimed': bet['claimed']
            })
        for interferer in scenario['interferers']:
            record = scenario['interferences'][interferer]
            rows.append({
                'scenario_id': scenario_id,
                'kind': 'INTERFERENCE',
                'participant': interferer,
                'amount': str(record['amount']),
                'prediction': record['prediction'],
                'claimed': record['claimed']
            })
    return rows

def export_stakes_csv(state: EngineState, filename: str) -> None:
    df = pd.DataFrame(stake_rows(state), columns=STAKE_COLUMNS)
    df.to_csv(filename, index=False)

def export_scenarios_csv(state: EngineState, filename: str) -> None:
    rows = [
        {
            'scenario_id': scenario_id,
            'start_time': s['start_time'],
            'end_time': s['end_time'],
            'resolved': s['resolved'],
            'outcome': s['outcome'],
            'total_pool': str(s['total_pool']),
            'interference_pool': str(s['interference_pool'])
        }
        for scenario_id, s in sorted(state['scenarios'].items())
    ]
    df = pd.DataFrame(rows, columns=SCENARIO_COLUMNS)
    df.to_csv(filename, index=False)

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Export an engine snapshot to CSV.")
    parser.add_argument("--snapshot", help="Snapshot path (default from MARKET_SNAPSHOT_PATH)")
    parser.add_argument("--stakes", default="stakes.csv", help="Output file for bets and interferences")
    parser.add_argument("--scenarios", default="scenarios.csv", help="Output file for scenario summaries")
    args = parser.parse_args()

    state = fetch_engine_state(args.snapshot)
    export_stakes_csv(state, args.stakes)
    export_scenarios_csv(state, args.scenarios)
    print(f"Exported {len(state['scenarios'])} scenarios to {args.scenarios} and {args.stakes}")
