#!/usr/bin/env python3
"""assets: CLI for the incremental asset pipeline.

Usage:
    python scripts/assets.py <command> [options]

Commands:
    manifest   Generate and save the asset manifest only.
    detect     Detect asset changes against the saved manifest.
    process    Process changed assets (and their dependents), then update the manifest.
    validate   Validate assets, icon models and themes.

Exit codes:
    0  success
    1  operation failed, or validation found errors
    2  invalid usage
"""

import argparse
import sys
from pathlib import Path

# Ensure project root is on sys.path so app/*, pipeline/* etc. are importable
# when the script is invoked from any working directory.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.config import PipelineConfig  # noqa: E402
from app.utils.logging import configure_logging  # noqa: E402
from pipeline.orchestrator import AssetOrchestrator  # noqa: E402

COMMANDS = ("manifest", "detect", "process", "validate")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assets",
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("command", choices=COMMANDS, help="Operation to run.")
    parser.add_argument(
        "--source-dir", "-s",
        metavar="DIR",
        help="Source assets directory (env ASSET_SOURCE_DIR, default: assets).",
    )
    parser.add_argument(
        "--output-dir", "-o",
        metavar="DIR",
        help="Output directory (env ASSET_OUTPUT_DIR, default: dist/assets).",
    )
    parser.add_argument(
        "--manifest", "-m",
        dest="manifest_path",
        metavar="PATH",
        help="Manifest file path (env ASSET_MANIFEST_PATH, default: asset-manifest.json).",
    )
    parser.add_argument(
        "--models-dir",
        metavar="DIR",
        help="Directory with file/folder icon model files (env ASSET_MODELS_DIR, default: src/models).",
    )
    parser.add_argument("--no-skip", action="store_true", help="Process all assets, not just changed ones.")
    parser.add_argument("--no-dependencies", action="store_true", help="Don't process dependent assets.")
    parser.add_argument("--no-validate", action="store_true", help="Skip output validation after processing.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Detailed output and debug events.")
    parser.add_argument("--silent", action="store_true", help="Suppress report output.")
    parser.add_argument("--log-file", metavar="PATH", help="Export report entries as JSON to this file.")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return int(exc.code) if exc.code is not None else 2

    if args.verbose and args.silent:
        print("ERROR: --verbose and --silent are mutually exclusive", file=sys.stderr)
        return 2

    configure_logging(verbose=args.verbose)
    config = PipelineConfig.from_env(
        source_dir=args.source_dir,
        output_dir=args.output_dir,
        manifest_path=args.manifest_path,
        models_dir=args.models_dir,
        skip_unchanged=not args.no_skip,
        process_dependencies=not args.no_dependencies,
        validate_output=not args.no_validate,
        verbose=args.verbose,
        silent=args.silent,
        log_file=args.log_file,
    )
    orchestrator = AssetOrchestrator(config)

    try:
        if args.command == "manifest":
            orchestrator.generate_manifest()
        elif args.command == "detect":
            orchestrator.detect_changes()
        elif args.command == "process":
            result = orchestrator.process_assets()
            if result is not None and result.errors:
                return 1
        else:
            result = orchestrator.validate_assets()
            if not result.valid:
                return 1
    except Exception as exc:  # noqa: BLE001
        print(f"ERROR: {args.command} failed: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
