from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import CensusConfig, ConfigError, load_config
from ..excel.reader import MissingSheetError, SheetHeaderError, read_census_file
from ..logging.init import log_summary, setup_logging
from ..services.header_matcher import match_headers, unmapped_headers
from ..services.pipeline import PipelineError, process_all, scan_census_files
from ..services.summary import render_summary_line

"""CLI entrypoint.

    python -m census_formatter.cli [--config PATH] [--debug] [--inspect-data]

Exit codes: 0 every file valid (or no files), 2 at least one file invalid or
failed, 1 fatal (configuration or source directory problem).
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _load_env_file(path: Path) -> None:
    """Load .env so CENSUS_CONFIG can be set there. Existing variables win."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="census_formatter",
        description="Normalize benefits census workbooks into the MASTER CENSUS layout",
    )
    p.add_argument("--config", type=Path, default=None, help="Config YAML (default: config/census.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--inspect-data", action="store_true",
        help="Print each workbook's headers, inferred mapping and first rows then exit",
    )
    return p.parse_args(argv)


def _inspect_data(cfg: CensusConfig, logger: logging.Logger) -> int:
    try:
        files = scan_census_files(Path(cfg.source_directory))
    except PipelineError as e:
        logger.error(f"inspect: {e}")
        return EXIT_FATAL
    if not files:
        print("inspect: no .xlsx files")
        return EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        try:
            sheet = read_census_file(f, cfg.sheet_name, cfg.header_row)
        except (SheetHeaderError, MissingSheetError, OSError, ValueError) as e:
            print(f"  read_error: {e}")
            continue
        mapping = match_headers(sheet.headers)
        print(f"  SHEET: {sheet.sheet_name} rows={len(sheet.rows)} cols={sheet.headers}")
        print(f"  mapping={mapping}")
        print(f"  unmapped={unmapped_headers(sheet.headers, mapping)}")
        safe_rows = [
            {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in r.items()}
            for r in sheet.rows[:3]
        ]
        print("    sample_rows=", safe_rows)
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"))
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg, logger)

    logger.info(f"Processing files from: {cfg.source_directory}")
    try:
        result = process_all(cfg)
    except PipelineError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.invalid_files or result.failed_files:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
