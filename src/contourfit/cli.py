"""
Command-line interface for Contour Fit.

Provides commands for fitting polygons to contours stored in JSON files.
"""

import argparse
import sys

from contourfit.config import load_config, save_default_config, validate_config
from contourfit.tracer import configure_tracer, get_tracer


def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Contour Fit: fit polygons to closed pixel contours",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Fit command
    fit_parser = subparsers.add_parser("fit", help="Fit polygons to contours")
    fit_parser.add_argument(
        "--contours", "-i",
        required=True,
        help="JSON file with contours",
    )
    fit_parser.add_argument(
        "--out", "-o",
        required=True,
        help="Output JSON file for fit results",
    )
    fit_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    fit_parser.add_argument(
        "--convex",
        action="store_true",
        help="Assume contours are convex",
    )
    fit_parser.add_argument(
        "--max-sides",
        type=int,
        default=None,
        help="Maximum number of polygon sides",
    )
    fit_parser.add_argument(
        "--min-sides",
        type=int,
        default=None,
        help="Minimum number of polygon sides",
    )
    fit_parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    fit_parser.add_argument(
        "--trace-level",
        default=None,
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level",
    )
    fit_parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    fit_parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )

    # Init config command
    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="contourfit_config.yaml",
        help="Output path for config file",
    )

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "fit":
        return handle_fit(args)
    elif args.command == "init-config":
        return handle_init_config(args)

    return 0


def handle_fit(args):
    """Handle the fit command."""
    tracer = get_tracer()

    try:
        config = load_config(args.config)

        tracing = config.tracing
        configure_tracer(
            enabled=args.trace or tracing.enabled,
            level=args.trace_level or tracing.level,
            file_path=args.trace_file or tracing.file_path,
            json_output=args.trace_json or tracing.json_output,
        )

        split_merge = config.split_merge
        if args.convex:
            split_merge.convex = True
        if args.max_sides is not None:
            split_merge.max_sides = args.max_sides
        if args.min_sides is not None:
            split_merge.min_sides = args.min_sides
        validate_config(split_merge)

        from contourfit.io.contour_io import load_contours, save_fit_results
        from contourfit.pipeline import fit_contours

        with tracer.span("cli_fit", module="cli"):
            contours = load_contours(args.contours)
            report = fit_contours(contours, split_merge)
            save_fit_results(report, args.out)

        # Print summary
        print(f"\nFit completed.")
        print(f"  Contours processed: {len(report.fits)}")
        print(f"  Failed fits: {report.failure_count}")
        for fit in report.fits:
            if fit.best is not None:
                print(f"  - {fit.contour_id}: {fit.best.num_sides} sides, score={fit.best.score:.2f}")
            else:
                print(f"  - {fit.contour_id}: no fit")
        print(f"\nResults saved to: {args.out}")

        return 1 if report.failure_count else 0

    except Exception as e:
        tracer.event(f"Fit failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1

    finally:
        tracer.close()


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
