from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Optional, Set
from urllib.parse import urlparse

from config.settings import Settings
from document_fetcher import DocumentFetcher
from models.notice_data import Record, dataclass_to_dict
from page_extractor import PageExtractor, PageResult
from pdf_decoder import PageDecodeError, PdfDecoder
from utils.json_utils import convert_json_types
from utils.memory_monitor import MemoryMonitor


@dataclass
class DocumentResult:
    """Records and metrics for one processed document."""

    source_url: str
    page_count: int
    records: List[Record] = field(default_factory=list)
    page_results: List[PageResult] = field(default_factory=list)
    pages_failed: int = 0
    duplicates_removed: int = 0
    duration_seconds: float = 0.0

    @property
    def pages_processed(self) -> int:
        return len(self.page_results)


@dataclass(frozen=True)
class FileResult:
    """Result information for a single document in batch processing."""

    filename: str
    success: bool
    duration_seconds: float
    error_message: Optional[str] = None
    records_found: int = 0
    pages_processed: int = 0
    pages_failed: int = 0
    output_path: Optional[Path] = None


@dataclass(frozen=True)
class BatchResult:
    """Result information for batch processing."""

    total_files: int
    successful_files: int
    failed_files: int
    total_duration_seconds: float
    file_results: List[FileResult]
    summary_path: Optional[Path] = None


class NoticeProcessor:
    """Extract development application records from notice documents.

    Documents are processed one page at a time: every page is decoded from a
    fresh copy of the document and released before the next one, so memory
    stays bounded by the largest page rather than the whole document.
    """

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        strategy: Optional[str] = None,
        decoder: Optional[PdfDecoder] = None,
        page_extractor: Optional[PageExtractor] = None,
        fetcher: Optional[DocumentFetcher] = None,
    ) -> None:
        self._settings = settings
        self._logger = logger
        self._memory_monitor = MemoryMonitor(logger)
        self._decoder = decoder or PdfDecoder(settings, logger)
        self._page_extractor = page_extractor or PageExtractor(settings, logger, strategy)
        self._fetcher = fetcher

    def close(self) -> None:
        """Release the HTTP session, if one was opened."""
        if self._fetcher is not None:
            self._fetcher.close()
            self._fetcher = None

    def process_document(self, data: bytes, source_url: str) -> DocumentResult:
        """Extract the records of a whole document.

        Pages that fail to decode are skipped. Records are de-duplicated by
        application number, keeping the first occurrence.

        Args:
            data: PDF document bytes
            source_url: URL (or file URI) attached to every record

        Returns:
            DocumentResult

        Raises:
            DocumentDecodeError: If the document cannot be read at all
        """
        start_time = time.perf_counter()
        page_count = self._decoder.page_count(data)
        result = DocumentResult(source_url=source_url, page_count=page_count)

        limit = min(page_count, self._settings.max_pages)
        if page_count > limit:
            self._logger.warning(
                "Document reports %d pages; only the first %d are processed",
                page_count,
                limit,
            )
        self._logger.info("Document has %d page(s): %s", page_count, source_url)

        seen: Set[str] = set()
        for page_number in range(1, limit + 1):
            mem_start = self._log_page_memory(f"before page {page_number}")
            try:
                page = self._decoder.decode_page(data, page_number, page_count)
            except PageDecodeError as exc:
                result.pages_failed += 1
                self._logger.warning("Skipping page %d of %s: %s", page_number, source_url, exc)
                continue

            page_result = self._page_extractor.extract(page, source_url)
            del page
            result.page_results.append(page_result)

            for record in page_result.records:
                if record.identifier in seen:
                    result.duplicates_removed += 1
                    self._logger.debug(
                        "Duplicate application \"%s\" on page %d ignored",
                        record.identifier,
                        page_number,
                    )
                    continue
                seen.add(record.identifier)
                result.records.append(record)

            self._logger.info(
                "  Page %d/%d: %d record(s) using %s layout",
                page_number,
                page_count,
                len(page_result.records),
                page_result.strategy,
            )
            if mem_start is not None:
                self._memory_monitor.log_memory_delta(mem_start, f"page {page_number}")

        result.duration_seconds = time.perf_counter() - start_time
        self._logger.info(
            "Extracted %d application(s) from %s in %.3f seconds",
            len(result.records),
            source_url,
            result.duration_seconds,
        )
        return result

    def process_file(self, input_path: Path, output_path: Optional[Path] = None) -> FileResult:
        """Process a PDF file and write its JSON result.

        Raises:
            FileNotFoundError: If the input file does not exist
            DocumentDecodeError: If the document cannot be read
        """
        if not input_path.exists():
            raise FileNotFoundError(f"Input file '{input_path}' does not exist")

        file_start = time.perf_counter()
        data = input_path.read_bytes()
        result = self.process_document(data, input_path.resolve().as_uri())
        destination = output_path or self._build_output_path(input_path.stem)
        self.write_result(result, destination)

        return FileResult(
            filename=input_path.name,
            success=True,
            duration_seconds=time.perf_counter() - file_start,
            records_found=len(result.records),
            pages_processed=result.pages_processed,
            pages_failed=result.pages_failed,
            output_path=destination,
        )

    def process_url(self, url: str, output_path: Optional[Path] = None) -> FileResult:
        """Download a document and process it.

        Raises:
            DocumentFetchError: If the download fails
            DocumentDecodeError: If the document cannot be read
        """
        if self._fetcher is None:
            self._fetcher = DocumentFetcher(self._settings, self._logger)

        file_start = time.perf_counter()
        data = self._fetcher.fetch(url)
        result = self.process_document(data, url)

        name = PurePosixPath(urlparse(url).path).name or "document.pdf"
        destination = output_path or self._build_output_path(Path(name).stem)
        self.write_result(result, destination)

        return FileResult(
            filename=name,
            success=True,
            duration_seconds=time.perf_counter() - file_start,
            records_found=len(result.records),
            pages_processed=result.pages_processed,
            pages_failed=result.pages_failed,
            output_path=destination,
        )

    def process_directory(
        self, input_dir: Path, output_dir: Optional[Path] = None
    ) -> BatchResult:
        """Process every PDF in a directory; a failing document does not stop the batch.

        Args:
            input_dir: Directory containing PDF documents
            output_dir: Optional output directory (defaults to settings.output_dir)

        Returns:
            BatchResult with aggregated metrics
        """
        start_time = time.perf_counter()

        if not input_dir.exists():
            raise FileNotFoundError(f"Input directory '{input_dir}' does not exist")

        pdf_files = sorted(
            f for f in input_dir.iterdir() if f.is_file() and f.suffix.lower() == ".pdf"
        )
        if not pdf_files:
            self._logger.warning("No PDF files found in directory '%s'", input_dir)
            return BatchResult(
                total_files=0,
                successful_files=0,
                failed_files=0,
                total_duration_seconds=time.perf_counter() - start_time,
                file_results=[],
            )

        self._logger.info("Found %d PDF files in '%s'", len(pdf_files), input_dir)
        initial_memory = self._memory_monitor.log_memory("batch start", level="INFO")
        target_dir = output_dir or self._settings.output_dir

        file_results: List[FileResult] = []
        for pdf_file in pdf_files:
            self._logger.info("Processing %s...", pdf_file.name)
            file_start = time.perf_counter()
            try:
                file_result = self.process_file(
                    pdf_file, target_dir / f"{pdf_file.stem}-records.json"
                )
            except Exception as e:
                file_results.append(
                    FileResult(
                        filename=pdf_file.name,
                        success=False,
                        duration_seconds=time.perf_counter() - file_start,
                        error_message=str(e),
                    )
                )
                self._logger.error("✗ %s failed: %s", pdf_file.name, e)
                self._logger.debug("Traceback for %s", pdf_file.name, exc_info=True)
                continue

            file_results.append(file_result)
            self._logger.info(
                "✓ %s completed in %.3f seconds (%d records)",
                pdf_file.name,
                file_result.duration_seconds,
                file_result.records_found,
            )
            self._memory_monitor.release(pdf_file.name)

        self._memory_monitor.log_memory_delta(initial_memory, "batch total", level="INFO")

        total_duration = time.perf_counter() - start_time
        successful = sum(1 for r in file_results if r.success)
        batch_result = BatchResult(
            total_files=len(file_results),
            successful_files=successful,
            failed_files=len(file_results) - successful,
            total_duration_seconds=total_duration,
            file_results=file_results,
        )
        summary_path = self._save_batch_summary(batch_result, target_dir)
        batch_result = BatchResult(
            total_files=batch_result.total_files,
            successful_files=batch_result.successful_files,
            failed_files=batch_result.failed_files,
            total_duration_seconds=batch_result.total_duration_seconds,
            file_results=batch_result.file_results,
            summary_path=summary_path,
        )

        self._logger.info("=== Batch Processing Summary ===")
        self._logger.info("Total files: %d", batch_result.total_files)
        self._logger.info("Successful: %d", batch_result.successful_files)
        self._logger.info("Failed: %d", batch_result.failed_files)
        self._logger.info("Total time: %.3f seconds", total_duration)
        self._logger.info("Summary report: %s", summary_path)

        return batch_result

    def write_result(self, result: DocumentResult, destination: Path) -> Path:
        """Write a document result as JSON ``{document_info, records, processing_metrics}``."""
        destination.parent.mkdir(parents=True, exist_ok=True)
        with open(destination, "w", encoding="utf-8") as f:
            json.dump(
                self.build_output(result),
                f,
                ensure_ascii=False,
                indent=2,
                default=convert_json_types,
            )
        self._logger.info("Results written to %s", destination)
        return destination

    def build_output(self, result: DocumentResult) -> Dict[str, Any]:
        return {
            "document_info": {
                "source_url": result.source_url,
                "processing_date": datetime.now().strftime("%Y-%m-%dT%H:%M:%S"),
                "page_count": result.page_count,
                "pages_processed": result.pages_processed,
                "pages_failed": result.pages_failed,
                "strategy": self._page_extractor.strategy,
            },
            "records": dataclass_to_dict(result.records),
            "processing_metrics": {
                "duration_seconds": round(result.duration_seconds, 3),
                "records_found": len(result.records),
                "duplicates_removed": result.duplicates_removed,
                "pages": [
                    {
                        "page_number": page.page_number,
                        "strategy": page.strategy,
                        "cells": page.cells,
                        "elements": page.elements,
                        "sections": page.sections,
                        "records": len(page.records),
                        "dropped": page.dropped,
                    }
                    for page in result.page_results
                ],
            },
        }

    def _build_output_path(self, stem: str) -> Path:
        return self._settings.output_dir / f"{stem}-records.json"

    def _log_page_memory(self, label: str) -> Optional[float]:
        if not self._settings.log_memory_per_page:
            return None
        return self._memory_monitor.log_memory(label)

    def _save_batch_summary(self, batch_result: BatchResult, output_dir: Path) -> Path:
        """Save batch processing summary to JSON file."""
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        summary_file = output_dir / f"batch_summary_{timestamp}.json"

        summary_data = {
            "batch_info": {
                "processing_date": datetime.now().strftime("%Y-%m-%dT%H:%M:%S"),
                "total_files": batch_result.total_files,
                "successful_files": batch_result.successful_files,
                "failed_files": batch_result.failed_files,
                "total_duration_seconds": round(batch_result.total_duration_seconds, 3),
                "average_duration_seconds": round(
                    batch_result.total_duration_seconds / batch_result.total_files
                    if batch_result.total_files > 0 else 0, 3
                ),
            },
            "file_results": [
                {
                    "filename": r.filename,
                    "success": r.success,
                    "duration_seconds": round(r.duration_seconds, 3),
                    "records_found": r.records_found,
                    "pages_processed": r.pages_processed,
                    "pages_failed": r.pages_failed,
                    "output_path": r.output_path,
                    "error_message": r.error_message,
                }
                for r in batch_result.file_results
            ],
        }

        with open(summary_file, "w", encoding="utf-8") as f:
            json.dump(summary_data, f, ensure_ascii=False, indent=2, default=convert_json_types)

        return summary_file
