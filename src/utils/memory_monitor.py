"""Process memory tracking for page-by-page document decoding."""
from __future__ import annotations

import gc
import logging

import psutil


class MemoryMonitor:
    """Report resident memory of the current process through the logger."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger
        self._process = psutil.Process()

    def get_memory_mb(self) -> float:
        """Current resident set size in MB."""
        return self._process.memory_info().rss / 1024 / 1024

    def log_memory(self, label: str = "", level: str = "DEBUG") -> float:
        """Log current memory usage with an optional label and return it."""
        mem_mb = self.get_memory_mb()
        log_method = getattr(self._logger, level.lower())
        log_method("Memory usage%s: %.1f MB", f" {label}" if label else "", mem_mb)
        return mem_mb

    def log_memory_delta(self, start_mb: float, label: str = "", level: str = "DEBUG") -> float:
        """Log the change since ``start_mb`` and return the current usage."""
        current_mb = self.get_memory_mb()
        log_method = getattr(self._logger, level.lower())
        log_method(
            "Memory delta%s: %+.1f MB (from %.1f to %.1f MB)",
            f" {label}" if label else "",
            current_mb - start_mb,
            start_mb,
            current_mb,
        )
        return current_mb

    def release(self, label: str = "") -> float:
        """Run the garbage collector, then log and return memory usage."""
        gc.collect()
        return self.log_memory(f"after gc ({label})" if label else "after gc")
