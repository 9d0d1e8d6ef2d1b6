"""Command-line interface for fit2walking.

Run:
    fit2walking --censor home.txt activity.fit > maps/activity.json
    python -m fit2walking --output-dir maps/ *.fit
"""

import argparse
import logging
from concurrent.futures import Future, ProcessPoolExecutor
from pathlib import Path
from typing import List, Optional, Sequence

from fit2walking.config.logging import setup_logging
from fit2walking.config.settings import settings
from fit2walking.data_ingestion.record_adapter import resolve_timezone
from fit2walking.errors import CensorFileError, Fit2WalkingError
from fit2walking.feature_engineering.censor import CensorPolygon, load_censor_file
from fit2walking.map_document import WalkingMap
from fit2walking.pipeline import convert_file

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fit2walking",
        description="Convert FIT activity files into walking map documents (GeoJSON tracks).",
    )
    parser.add_argument(
        "--events",
        action="store_true",
        help="dump every decoded message to stderr",
    )
    parser.add_argument(
        "--no-records",
        dest="show_records",
        action="store_false",
        help="with --events, do not dump position ('record') messages",
    )
    parser.add_argument(
        "--censor",
        metavar="FILE",
        action="append",
        default=[],
        help="censor polygon file; points inside it are removed (repeatable)",
    )
    parser.add_argument(
        "--output-dir",
        metavar="DIR",
        type=Path,
        help="write <name>.json per input file here instead of printing to stdout",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=1,
        help="number of files processed in parallel (default: 1)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=settings.LOG_LEVEL,
        help=f"logging level (default: {settings.LOG_LEVEL})",
    )
    parser.add_argument("files", metavar="FITFILE", nargs="+", type=Path)
    return parser


def _emit(document: WalkingMap, fit_file: Path, output_dir: Optional[Path]) -> None:
    if output_dir is None:
        print(document.to_json())
    else:
        document.save(output_dir / f"{fit_file.stem}.json")


def _run_sequential(args: argparse.Namespace, polygons: List[CensorPolygon]) -> int:
    exit_code = 0
    for fit_file in args.files:
        try:
            document = convert_file(
                fit_file,
                censor_polygons=polygons,
                config=settings,
                dump_events=args.events,
                dump_position_records=args.show_records,
            )
        except Fit2WalkingError as e:
            logger.error(f"Failed to convert {fit_file}: {e}")
            exit_code = 1
            continue
        _emit(document, fit_file, args.output_dir)
    return exit_code


def _run_parallel(args: argparse.Namespace, polygons: List[CensorPolygon]) -> int:
    exit_code = 0
    with ProcessPoolExecutor(max_workers=args.jobs) as executor:
        futures: List[Future] = [
            executor.submit(convert_file, fit_file, polygons, settings) for fit_file in args.files
        ]
        # results are emitted in input order
        for fit_file, future in zip(args.files, futures):
            try:
                document = future.result()
            except Fit2WalkingError as e:
                logger.error(f"Failed to convert {fit_file}: {e}")
                exit_code = 1
                continue
            _emit(document, fit_file, args.output_dir)
    return exit_code


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.jobs < 1:
        parser.error("--jobs must be at least 1")

    setup_logging(args.log_level)

    try:
        resolve_timezone(settings.TIMEZONE)
        polygons = [load_censor_file(path) for path in args.censor]
    except (CensorFileError, ValueError) as e:
        logger.error(str(e))
        return 1

    if args.jobs > 1 and args.events:
        logger.warning("--events dumps are only available sequentially; ignoring --jobs")
        args.jobs = 1

    if args.jobs > 1:
        return _run_parallel(args, polygons)
    return _run_sequential(args, polygons)
