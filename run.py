#!/usr/bin/env python3
"""
CLI entry point for running structural output runs.

Usage:
    python run.py config.yaml

Creates a new timestamped run folder, copies the YAML into it, and writes
all monitor output (history CSV, HDF5 volume snapshots) into that folder.
The original YAML remains in place for easy re-running.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from datetime import datetime
from pathlib import Path


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run a structural solver with screen/history/volume output from YAML config.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python run.py config.yaml
    python run.py configs/beam_3d_nonlinear.yaml

Creates a new run folder in the same directory as the YAML, named
<yaml_stem>_YYYY-MM-DD_HH:MM:SS, copies the YAML into it, and writes all
outputs there.
        """,
    )
    parser.add_argument(
        "config",
        type=Path,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    logging.captureWarnings(True)

    config_path = args.config.resolve()
    if not config_path.exists():
        print(f"Error: Configuration file not found: {config_path}", file=sys.stderr)
        return 1

    try:
        from feaout.config import load_config
        from feaout.runner import run_simulation

        print(f"Loading configuration: {config_path}")
        config = load_config(config_path)

        timestamp = datetime.now().strftime("%Y-%m-%d_%H:%M:%S")
        run_dir = config_path.parent / f"{config_path.stem}_{timestamp}"
        run_dir.mkdir(parents=True, exist_ok=True)

        dest_yaml = run_dir / config_path.name
        shutil.copy2(str(config_path), str(dest_yaml))
        print(f"Run folder: {run_dir} (copied config to {dest_yaml.name})")

        config.output.directory = str(run_dir)
        output = run_simulation(config)

        final = output.history.get_value(output.conv_field)
        print(f"Run complete. Outputs in {run_dir}. Final {output.conv_field}: {final}")
        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
