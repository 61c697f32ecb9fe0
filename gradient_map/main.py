#!/usr/bin/env python3
"""
Gradient Map

Estimates a smoothed scalar field (e.g. temperature) over a floorplan from
sparse sensor readings and renders it as a heat map.

Usage:
    gradient-map --config configs/house.yaml [options]

Examples:
    gradient-map --config configs/house.yaml
    gradient-map --config configs/house.yaml --gif --out-dir results/
    gradient-map --config configs/house.yaml --no-csv --no-snapshot --quiet
    gradient-map --config configs/house.yaml --steps 2000 --tolerance 0.001
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import load_config
from .errors import ConfigurationError
from .model.engine import HeatmapEngine
from .export.csv_writer import CSVWriter, write_field_matrix
from .export.region_cache import RegionCache
from .export.visualizer import Visualizer
from .export.reporter import Reporter


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Gradient map: field estimation over a floorplan',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    gradient-map --config configs/house.yaml
    gradient-map --config configs/house.yaml --gif --out-dir results/
    gradient-map --config configs/house.yaml --no-csv --no-snapshot --quiet
    gradient-map --config configs/house.yaml --steps 2000 --tolerance 0.001
        """
    )

    # Required arguments
    parser.add_argument('--config', type=Path, required=True,
                        help='Path to YAML configuration file')

    # Optional overrides
    parser.add_argument('--steps', type=int, default=None,
                        help='Override max relaxation steps')
    parser.add_argument('--tolerance', type=float, default=None,
                        help='Override convergence tolerance')
    parser.add_argument('--seed-value', type=float, default=None,
                        help='Override initial value of cells without a sensor')
    parser.add_argument('--out-dir', type=Path, default=Path('./output'),
                        help='Output directory for exports (default: ./output)')
    parser.add_argument('--cache', type=Path, default=None,
                        help='Region map cache file (overrides config)')

    # Export toggles
    parser.add_argument('--csv', dest='csv', action='store_true', default=None,
                        help='Enable CSV export (default)')
    parser.add_argument('--no-csv', dest='csv', action='store_false',
                        help='Disable CSV export')

    parser.add_argument('--snapshot', dest='snapshot', action='store_true', default=None,
                        help='Enable final snapshot (default)')
    parser.add_argument('--no-snapshot', dest='snapshot', action='store_false',
                        help='Disable final snapshot')

    parser.add_argument('--gif', action='store_true', default=False,
                        help='Enable GIF animation export')

    parser.add_argument('--quiet', action='store_true', default=False,
                        help='Suppress stdout output')
    parser.add_argument('--verbose', action='store_true', default=False,
                        help='Log debug diagnostics')

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else
        (logging.ERROR if args.quiet else logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # Load configuration
    try:
        config = load_config(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    # Apply CLI overrides
    if args.steps is not None:
        config.field.max_steps = args.steps
    if args.tolerance is not None:
        config.field.tolerance = args.tolerance
    if args.seed_value is not None:
        config.field.seed_value = args.seed_value
    if args.csv is not None:
        config.csv_enabled = args.csv
    if args.snapshot is not None:
        config.snapshot_enabled = args.snapshot
    if args.gif:
        config.gif_enabled = True
    if args.cache is not None:
        config.cache_path = args.cache
    config.quiet = args.quiet
    config.out_dir = args.out_dir

    if not config.quiet:
        print("Initializing gradient map...")
        print(f"  Floorplan: {config.floorplan.width}x{config.floorplan.height}")
        print(f"  Sensors: {len(config.sensors)}")
        print(f"  Max steps: {config.field.max_steps}")

    region_cache = RegionCache(config.cache_path) if config.cache_path else None
    try:
        engine = HeatmapEngine.from_config(config, region_cache=region_cache)
        engine.compute_regions()
        engine.initialize_field()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not config.quiet and engine.region_map is not None:
        unassigned = engine.region_map.unassigned_count(engine.floorplan)
        print(f"  Regions: {len(engine.region_map.region_sizes())} "
              f"({unassigned} unassigned cells)")

    # Initialize exporters
    csv_writer = None
    if config.csv_enabled:
        csv_writer = CSVWriter(config.out_dir / 'field_log.csv')
        csv_writer.open()

    visualizer = Visualizer(engine.floorplan, engine.sensors.ordered(),
                            config.render, engine.gradient)
    reporter = Reporter(str(args.config), config.field.tolerance,
                        config.render.legend_scale)

    # Main relaxation loop
    if not config.quiet:
        print("\nRelaxing field...")

    final_snapshot = engine.snapshot()
    if csv_writer:
        csv_writer.append(final_snapshot)
    if config.gif_enabled:
        visualizer.buffer_frame(final_snapshot)

    try:
        for _ in range(config.field.max_steps):
            snapshot = engine.step_field()
            final_snapshot = snapshot
            converged = engine.is_converged(config.field.tolerance)

            if csv_writer:
                csv_writer.append(snapshot)

            # Buffer GIF frame (every N steps to reduce memory)
            if config.gif_enabled and (snapshot.step % 5 == 0 or converged):
                visualizer.buffer_frame(snapshot)

            reporter.update(snapshot)

            # Progress indicator
            if not config.quiet and snapshot.step % 100 == 0:
                print(f"  Step {snapshot.step}: max change "
                      f"{snapshot.metrics['max_change']:.4g}")

            if converged:
                break

    except KeyboardInterrupt:
        if not config.quiet:
            print("\nRelaxation interrupted by user.")

    # Cleanup and final exports
    if csv_writer:
        csv_writer.close()
        matrix_path = config.out_dir / 'field_final.csv'
        write_field_matrix(final_snapshot.field, matrix_path)
        if not config.quiet:
            print(f"\nCSV saved: {config.out_dir / 'field_log.csv'}")
            print(f"Final field saved: {matrix_path}")

    if config.snapshot_enabled:
        snapshot_path = config.out_dir / 'final_field.png'
        visualizer.save_snapshot(final_snapshot, snapshot_path)
        if not config.quiet:
            print(f"Snapshot saved: {snapshot_path}")

    if config.gif_enabled:
        gif_path = config.out_dir / 'relaxation.gif'
        if not config.quiet:
            print(f"Generating GIF ({len(visualizer.frames)} frames)...")
        visualizer.generate_gif(gif_path, fps=10)
        if not config.quiet:
            print(f"Animation saved: {gif_path}")

    # Print summary report
    if not config.quiet:
        report = reporter.generate_summary(
            final_snapshot,
            engine.get_summary(),
            config.out_dir,
            config.csv_enabled,
            config.snapshot_enabled,
            config.gif_enabled
        )
        print(report)

    return 0


if __name__ == '__main__':
    sys.exit(main())
