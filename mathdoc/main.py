import argparse
import asyncio
import sys
from pathlib import Path

from mathdoc.config.settings import Settings
from mathdoc.errors.classifier import ErrorClassifier
from mathdoc.errors.exceptions import MathdocError
from mathdoc.jobs.models import UploadFile
from mathdoc.jobs.options import SubmitOptions
from mathdoc.jobs.progress import LoggingProgressReporter
from mathdoc.jobs.service import DocumentJobService, build_service
from mathdoc.jobs.validation import IMAGE_TYPES
from mathdoc.logging.logger import Log


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mathdoc",
        description="Convert a document or image with the remote OCR service.",
    )
    parser.add_argument("file", type=Path)
    parser.add_argument(
        "--format",
        dest="formats",
        action="append",
        help="Output format to fetch (repeatable), e.g. mmd, html, docx",
    )
    parser.add_argument("--page-range", default=None, help='e.g. "1-3" or "all"')
    parser.add_argument(
        "--lines", action="store_true", help="Also fetch and analyze the lines data"
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace, service: DocumentJobService, log: Log) -> None:
    upload = UploadFile.from_path(args.file)
    options = SubmitOptions(
        formats=tuple(args.formats) if args.formats else None,
        page_range=args.page_range,
    )
    progress = LoggingProgressReporter(log)

    async with service.api:
        if upload.mime_type in IMAGE_TYPES:
            result = await service.process_image(upload, options, progress)
            print(result.markdown or result.latex)
            return

        document = await service.process_document(upload, options, progress)
        print(f"Job {document.job.id}: {document.job.status.value}")
        for fmt, content in document.files.items():
            size = len(content)
            kind = "bytes" if isinstance(content, bytes) else "chars"
            print(f"  {fmt}: {size} {kind}")
        if args.lines:
            analysis = await service.analyze_lines(document.job.id, progress=progress)
            print(analysis.summary)


def main(argv: list[str] | None = None) -> int:
    """Entry point: load settings -> build service -> run one conversion."""
    args = parse_args(argv)
    settings = Settings()
    log = Log.configure(settings.log_level)
    service = build_service(settings)

    try:
        asyncio.run(run(args, service, log))
    except MathdocError as exc:
        classified = ErrorClassifier().classify(exc)
        print(f"Error: {classified.user_message}", file=sys.stderr)
        if classified.suggested_action:
            print(f"Suggestion: {classified.suggested_action}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error: cannot read {args.file}: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
