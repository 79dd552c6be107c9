#!/usr/bin/env python
"""
Start the Travel Pricing API with uvicorn.

Usage:
    python scripts/run_api.py
    python scripts/run_api.py --port 9000 --data-dir /srv/pricing-data --no-reload
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path


def main():
    parser = argparse.ArgumentParser(description="Run the Travel Pricing API")
    parser.add_argument('--host', default='0.0.0.0')
    parser.add_argument('--port', type=int, default=8000)
    parser.add_argument('--data-dir', default=None, help="Directory holding the pricing CSV/JSON files")
    parser.add_argument('--no-reload', action='store_true', help="Disable auto-reload on code changes")
    args = parser.parse_args()

    project_root = Path(__file__).parent.parent
    env = os.environ.copy()
    src_path = str(project_root / 'src')
    env['PYTHONPATH'] = os.pathsep.join(p for p in (src_path, env.get('PYTHONPATH')) if p)
    if args.data_dir:
        env['TRAVEL_PRICING_DATA_DIR'] = str(Path(args.data_dir).resolve())

    command = [
        sys.executable, '-m', 'uvicorn', 'travel_pricing.api.main:app',
        '--host', args.host, '--port', str(args.port),
    ]
    if not args.no_reload:
        command.append('--reload')

    print(f"Starting Travel Pricing API on {args.host}:{args.port}...")
    try:
        subprocess.run(command, env=env, cwd=project_root)
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
