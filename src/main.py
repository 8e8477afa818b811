from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from config.settings import Settings
from notice_processor import FileResult, NoticeProcessor

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Development application notice extraction CLI. "
        "Reads register PDFs and writes the applications found as JSON.",
    )
    parser.add_argument("--file", type=str, help="Path to the PDF file for processing.")
    parser.add_argument(
        "--batch",
        "--directory",
        dest="batch_dir",
        type=str,
        nargs="?",
        const="",
        help="Path to directory for batch processing of multiple PDF files "
        "(without a value: the configured input_dir).",
    )
    parser.add_argument("--url", type=str, help="URL of a PDF document to download and process.")
    parser.add_argument(
        "--output",
        type=str,
        help="Optional path to store results (a file for --file/--url, a directory for --batch). "
        "Defaults to the configured output directory.",
    )
    parser.add_argument(
        "--strategy",
        type=str,
        choices=["auto", "sections", "table"],
        default=None,
        help="Page layout strategy: labelled sections, one row per application, "
        "or auto-detect per page (default: configured extraction_strategy).",
    )
    return parser


def setup_logging(settings: Settings) -> logging.Logger:
    """Configure logger with console and rotating file handlers."""
    logger = logging.getLogger("notice_extract")
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    logger.propagate = False

    log_dir: Path = settings.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_filename = f"app_{datetime.now().strftime('%Y-%m-%d_%H-%M-%S')}.log"
    log_path = log_dir / log_filename

    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=settings.log_max_size_mb * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logger.level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logger.level)

    logger.handlers.clear()
    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logger.debug("Logging initialized. Log file: %s", log_path)
    return logger


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for CLI execution."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings()
    logger = setup_logging(settings)

    if args.batch_dir is not None:
        batch_path = Path(args.batch_dir) if args.batch_dir else settings.input_dir
        if not batch_path.exists():
            logger.error("Batch directory '%s' not found.", batch_path)
            return 1
        if not batch_path.is_dir():
            logger.error("Batch path '%s' is not a directory.", batch_path)
            return 1

        try:
            return _run_batch(batch_path, args.output, args.strategy, settings, logger)
        except Exception as exc:
            logger.error("Batch processing failed: %s", exc, exc_info=logger.level == logging.DEBUG)
            return 1

    if args.url:
        try:
            return _run_url(args.url, args.output, args.strategy, settings, logger)
        except Exception as exc:
            logger.error("Processing failed: %s", exc, exc_info=logger.level == logging.DEBUG)
            return 1

    if not args.file:
        logger.info("No input provided. Use --file, --url or --batch to specify input.")
        return 0

    input_path = Path(args.file)
    if not input_path.exists():
        logger.error("Input file '%s' not found.", input_path)
        return 1

    try:
        return _run_file(input_path, args.output, args.strategy, settings, logger)
    except Exception as exc:
        logger.error("Processing failed: %s", exc, exc_info=logger.level == logging.DEBUG)
        return 1


def _run_file(
    input_path: Path,
    output_path: Optional[str],
    strategy: Optional[str],
    settings: Settings,
    logger: logging.Logger,
) -> int:
    """Extract the applications of a single PDF file."""
    logger.info("Processing %s...", input_path)
    processor = NoticeProcessor(settings=settings, logger=logger, strategy=strategy)
    result = processor.process_file(
        input_path=input_path,
        output_path=Path(output_path) if output_path else None,
    )
    _log_file_result(result, logger)
    return 0


def _run_url(
    url: str,
    output_path: Optional[str],
    strategy: Optional[str],
    settings: Settings,
    logger: logging.Logger,
) -> int:
    """Download a PDF document and extract its applications."""
    processor = NoticeProcessor(settings=settings, logger=logger, strategy=strategy)
    try:
        result = processor.process_url(
            url=url,
            output_path=Path(output_path) if output_path else None,
        )
    finally:
        processor.close()
    _log_file_result(result, logger)
    return 0


def _log_file_result(result: FileResult, logger: logging.Logger) -> None:
    logger.info("=== Extraction Summary ===")
    logger.info("Total processing time: %.3f seconds", result.duration_seconds)
    logger.info("Pages processed: %d", result.pages_processed)
    logger.info("Applications found: %d", result.records_found)
    logger.info("Final output: %s", result.output_path)
    if result.pages_failed > 0:
        logger.warning("%d page(s) could not be decoded", result.pages_failed)


def _run_batch(
    batch_dir: Path,
    output_path: Optional[str],
    strategy: Optional[str],
    settings: Settings,
    logger: logging.Logger,
) -> int:
    """Run batch processing on a directory of PDF files."""
    logger.info("Starting batch processing of directory: %s", batch_dir)

    output_path_obj = Path(output_path) if output_path else None
    processor = NoticeProcessor(settings=settings, logger=logger, strategy=strategy)

    try:
        result = processor.process_directory(input_dir=batch_dir, output_dir=output_path_obj)

        logger.info("=== Batch Processing Complete ===")
        logger.info("Total files processed: %d", result.total_files)
        logger.info("Successful: %d", result.successful_files)
        logger.info("Failed: %d", result.failed_files)
        logger.info("Total time: %.3f seconds", result.total_duration_seconds)

        if result.total_files > 0:
            logger.info(
                "Average time per file: %.3f seconds",
                result.total_duration_seconds / result.total_files,
            )

        if result.summary_path:
            logger.info("Batch summary saved to: %s", result.summary_path)

        # Return error code if any files failed
        return 1 if result.failed_files > 0 else 0
    finally:
        processor.close()


if __name__ == "__main__":
    sys.exit(main())
