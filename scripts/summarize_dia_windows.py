"""
Summarize the DIA isolation windows of a timsTOF run.

Usage:
    python scripts/summarize_dia_windows.py sample.d
    python scripts/summarize_dia_windows.py sample.d --even 2
    python scripts/summarize_dia_windows.py sample.d --uniform 100 50 --window --csv windows.csv
"""

import argparse
import logging
from pathlib import Path

import pandas as pd

from timsio import open_run
from timsio.io import (
    Even,
    QuadrupoleSplitting,
    TimsIOError,
    Uniform,
    WindowSplitting,
)


logger = logging.getLogger(__name__)


def build_splitting_strategy(args: argparse.Namespace):
    """Splitting strategy from the command line, or None for raw window groups."""
    if args.even is not None:
        strategy = Even(args.even)
    elif args.uniform is not None:
        strategy = Uniform(*args.uniform)
    else:
        return None
    if args.window:
        return WindowSplitting(strategy)
    return QuadrupoleSplitting(strategy)


def settings_to_dataframe(quadrupole_settings) -> pd.DataFrame:
    """One row per isolation sub-window."""
    rows = []
    for settings in quadrupole_settings:
        for scan_start, scan_end, isolation_mz, isolation_width, nce in settings.sub_windows():
            rows.append({
                'index': settings.index,
                'scan_start': scan_start,
                'scan_end': scan_end,
                'isolation_mz': isolation_mz,
                'isolation_width': isolation_width,
                'collision_energy': nce,
            })
    return pd.DataFrame(rows)


def main() -> int:
    parser = argparse.ArgumentParser(description="Summarize DIA isolation windows of a timsTOF run")
    parser.add_argument('path', type=Path, help=".d folder or analysis.tdf file")
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--even', type=int, metavar='N', help="Split every range into N windows")
    group.add_argument('--uniform', type=int, nargs=2, metavar=('SPAN', 'STEP'),
                       help="Windows of SPAN scans every STEP scans")
    parser.add_argument('--window', action='store_true',
                        help="Split whole window groups instead of sub-windows")
    parser.add_argument('--csv', type=Path, help="Write the table to a CSV file")
    parser.add_argument('-v', '--verbose', action='store_true')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        run = open_run(args.path)
        summary = run.summary()
        if summary['acquisition_mode'] != 'diaPASEF':
            print(f"{args.path.name} is {summary['acquisition_mode']}, no DIA windows to show")
            return 1
        settings = run.quadrupole_settings(build_splitting_strategy(args))
    except (TimsIOError, FileNotFoundError, ValueError) as e:
        logger.error(f"Cannot summarize {args.path}: {e}")
        return 1

    df = settings_to_dataframe(settings)
    print(f"\n=== {args.path.name} ===")
    print(f"Frames: {summary['n_frames']} {summary['frame_type_counts']}")
    print(f"Window groups: {summary['n_window_groups']}")
    print(f"Isolation windows: {len(df)}")
    with pd.option_context('display.max_rows', 50, 'display.width', 120):
        print(df)

    if args.csv is not None:
        df.to_csv(args.csv, index=False)
        print(f"Saved {len(df)} rows to {args.csv}")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
