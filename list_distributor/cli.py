"""Command line interface for ingesting and inspecting distributed contact lists."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict

from .config import ConfigurationError, load_agents, load_configuration
from .errors import IngestionError, MissingFileError, UnsupportedFormatError
from .factory import build_service
from .ingestion.exporters import export_assignments
from .orchestrator import IngestionService, error_response, success_response

LOGGER = logging.getLogger(__name__)


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Distribute uploaded contact lists evenly across active agents",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        required=True,
        help="Path to the configuration file (YAML or JSON)",
    )
    common.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )

    ingest = subparsers.add_parser("ingest", parents=[common], help="Upload one or more CSV/XLSX/XLS files")
    ingest.add_argument("files", nargs="+", help="Contact list files to distribute")
    ingest.add_argument("--uploaded-by", required=True, help="Identifier of the uploading user")
    ingest.add_argument(
        "--mode",
        choices=["sequential", "concurrent"],
        default="sequential",
        help="Whether to ingest files sequentially or concurrently",
    )
    ingest.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Maximum number of workers to use in concurrent mode",
    )

    subparsers.add_parser("lists", parents=[common], help="Show every stored list, newest first")

    show = subparsers.add_parser("show", parents=[common], help="Show a single stored list")
    show.add_argument("list_id", help="Identifier of the list")

    export = subparsers.add_parser("export", parents=[common], help="Write a list's assignments to CSV or XLSX")
    export.add_argument("list_id", help="Identifier of the list")
    export.add_argument("output", help="Destination file (.csv or .xlsx)")

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _ingest_file(service: IngestionService, path: Path, uploaded_by: str) -> Dict[str, Any]:
    if not path.is_file():
        return {"file": str(path), **error_response(MissingFileError(f"File not found: {path}"))}
    try:
        with path.open("rb") as handle:
            result = service.ingest(handle, path.name, uploaded_by)
    except Exception as exc:  # every failure becomes a response for this file
        return {"file": str(path), **error_response(exc)}
    return {"file": str(path), **success_response(result)}


def run_ingest(service: IngestionService, args: argparse.Namespace) -> int:
    paths = [Path(name) for name in args.files]
    if args.mode == "concurrent" and len(paths) > 1:
        with ThreadPoolExecutor(max_workers=args.max_workers) as executor:
            responses = list(executor.map(lambda path: _ingest_file(service, path, args.uploaded_by), paths))
    else:
        responses = [_ingest_file(service, path, args.uploaded_by) for path in paths]

    _emit(responses)
    failures = [response for response in responses if not response["success"]]
    logging.info("Ingested %s of %s files", len(responses) - len(failures), len(responses))
    return 1 if failures else 0


def run_lists(service: IngestionService) -> int:
    results = service.list_results()
    _emit({"success": True, "count": len(results), "data": [result.as_dict() for result in results]})
    return 0


def run_show(service: IngestionService, list_id: str) -> int:
    try:
        result = service.get_result(list_id)
    except IngestionError as exc:
        _emit(error_response(exc))
        return 1
    _emit(success_response(result, status=200))
    return 0


def run_export(service: IngestionService, config: Dict[str, Any], list_id: str, output: str) -> int:
    try:
        result = service.get_result(list_id)
    except IngestionError as exc:
        _emit(error_response(exc))
        return 1
    try:
        destination = export_assignments(result, output, agents=load_agents(config))
    except ValueError as exc:
        _emit(error_response(UnsupportedFormatError(str(exc))))
        return 1
    logging.info("Assignments for list %s written to %s", list_id, destination.resolve())
    return 0


def _emit(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False) + "\n")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    try:
        config = load_configuration(args.config)
        service = build_service(config)
    except ConfigurationError as exc:
        LOGGER.error("%s", exc)
        return 2

    if args.command == "ingest":
        return run_ingest(service, args)
    if args.command == "lists":
        return run_lists(service)
    if args.command == "show":
        return run_show(service, args.list_id)
    return run_export(service, config, args.list_id, args.output)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
