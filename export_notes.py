#!/usr/bin/env python3
"""
Linked Note Exporter - Main CLI Entry Point

This script collects a note from a wiki-style markdown vault together with
every note it links to (up to a configurable nesting level) and the media
those notes embed, and packages them into a single zip archive.
"""

import argparse
import logging
import sys
import time

import yaml

from config_loader import ConfigLoader, get_nested
from exporters import ZipArchiver
from logger import LOGGER_NAME, log_config, log_section, setup_logging
from models import ExportSettings
from orchestrator import ExportReport, TraversalEngine

__version__ = "1.0.0"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="Export a note, the notes it links to and their media into a zip archive",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export using config.yaml
  python export_notes.py --config config.yaml

  # Start from another note, two levels deep
  python export_notes.py --start "Project Index" --max-depth 2

  # Preview which notes would be collected
  python export_notes.py --dry-run -v

  # Verbose logging
  python export_notes.py -vv
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--config',
        type=str,
        default='config.yaml',
        help='Path to configuration YAML file (default: config.yaml)'
    )

    parser.add_argument(
        '--start',
        type=str,
        help='Start note name (overrides parseFilePath)'
    )

    parser.add_argument(
        '--max-depth',
        type=int,
        help='Maximum nesting level (overrides levelNesting)'
    )

    parser.add_argument(
        '-o', '--output',
        type=str,
        help='Archive path (overrides export.archive_path)'
    )

    parser.add_argument(
        '--dry-run',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Resolve and list linked notes without copying anything'
    )

    parser.add_argument(
        '--keep-staging',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Keep the staging directory after the archive is written'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write log output to this file'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG)'
    )

    return parser


def check_staging_directory(settings: ExportSettings, logger: logging.Logger) -> bool:
    """Refuse to run over a staging directory that already holds files."""
    if settings.dry_run:
        return True

    root = settings.layout.root
    if root.exists() and any(root.iterdir()):
        logger.error(
            f"Staging directory {root} already exists and is not empty. "
            f"Remove it or set export.staging_directory to another path."
        )
        return False

    return True


def run_export(settings: ExportSettings, logger: logging.Logger) -> int:
    """Execute the traversal, archive the staging tree and print the report."""
    start_time = time.time()

    engine = TraversalEngine(settings)
    try:
        stats = engine.run()
    except OSError as e:
        logger.error(f"Failed to prepare export directory {settings.layout.root}: {e}")
        return EXIT_FAILURE

    archive_path = None
    if settings.dry_run:
        logger.info("Dry-run complete. No files copied, no archive written.")
    else:
        log_section("Packaging export")
        archiver = ZipArchiver()
        try:
            archive_path = archiver.archive(settings.layout.root, settings.archive_path)
            if settings.keep_staging:
                logger.info(f"Keeping staging directory {settings.layout.root}")
            else:
                archiver.remove_tree(settings.layout.root)
        except OSError as e:
            logger.error(f"Archiving failed: {e}")
            return EXIT_FAILURE

    report_generator = ExportReport()
    report = report_generator.generate_report(
        stats,
        duration=time.time() - start_time,
        archive_path=archive_path,
        dry_run=settings.dry_run
    )
    print("\n" + report_generator.format_console_report(report))

    if settings.report_path:
        report_generator.export_json_report(report, settings.report_path)

    if stats.missing:
        logger.warning(f"{len(stats.missing)} linked note(s) could not be found")

    return EXIT_OK


def main(argv=None) -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    setup_logging(verbosity=args.verbose)
    logger = logging.getLogger(f'{LOGGER_NAME}.export_notes')

    try:
        log_section("Linked Note Exporter")
        logger.info(f"Version: {__version__}")

        logger.info(f"Loading configuration from {args.config}")
        config = ConfigLoader.load(args.config)

        # CLI takes precedence
        config = ConfigLoader.merge_with_args(config, args)
        ConfigLoader.validate(config)

        setup_logging(
            verbosity=args.verbose,
            log_file=get_nested(config, 'logging.file'),
            level=get_nested(config, 'logging.level')
        )

        log_config(config)
        settings = ConfigLoader.build_settings(config)

        if not check_staging_directory(settings, logger):
            return EXIT_CONFIG_ERROR

        return run_export(settings, logger)

    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except yaml.YAMLError as e:
        print(f"ERROR: Invalid configuration file: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except ValueError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except KeyboardInterrupt:
        print("\nExport interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED
    except Exception as e:
        print(f"ERROR: Unexpected error: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
