import argparse
import json
import sys
from collections.abc import Sequence
from dataclasses import asdict
from pathlib import Path

from textvision.config.settings import Settings
from textvision.documents.models import ProcessingOptions, UploadedDocument
from textvision.documents.validation import validate_document
from textvision.logging.logger import Log
from textvision.pipeline.events import ProgressEvent
from textvision.pipeline.orchestrator import build_orchestrator

EXIT_OK = 0
EXIT_INVALID_INPUT = 2


def _parse_args(argv: Sequence[str] | None, settings: Settings) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="textvision",
        description="Extract text from a PDF or image and print the result as JSON.",
    )
    parser.add_argument("file", type=Path, help="PDF or image file to process")
    parser.add_argument(
        "--max-pages",
        type=int,
        default=settings.max_pages,
        help=f"maximum number of PDF pages to recognize (default: {settings.max_pages})",
    )
    parser.add_argument(
        "--media-type",
        default=None,
        help="override the media type guessed from the file extension",
    )
    args = parser.parse_args(argv)
    if not args.file.is_file():
        parser.error(f"file not found: {args.file}")
    if args.max_pages < 1:
        parser.error("--max-pages must be at least 1")
    return args


def _log_progress(event: ProgressEvent) -> None:
    Log.info(f"[{event.status}] {event.message}")


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: load settings -> validate file -> run the OCR pipeline -> print JSON."""
    settings = Settings()
    Log.configure(settings.log_level)
    args = _parse_args(argv, settings)

    document = UploadedDocument.from_path(args.file, media_type=args.media_type)
    report = validate_document(
        document,
        max_bytes=settings.max_document_bytes,
        warn_bytes=settings.large_document_warning_bytes,
    )
    for warning in report.warnings:
        Log.warning(f"'{document.filename}': {warning}")
    if not report.is_valid:
        for error in report.errors:
            Log.error(f"'{document.filename}': {error}")
        return EXIT_INVALID_INPUT

    orchestrator = build_orchestrator(settings)
    result = orchestrator.process(
        document,
        ProcessingOptions(max_pages=args.max_pages, progress_callback=_log_progress),
    )
    json.dump(asdict(result), sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
