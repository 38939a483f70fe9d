"""
================================================================================
Allure Report Utilities
================================================================================

This module provides utilities for enhancing Allure test reports with
additional information, image attachments, and report processing.

Features:
- Attachment helpers (text, JSON, PNG files)
- Environment properties for the report
- Report post-processing
- Summary generation

================================================================================
"""

import json
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import allure
from loguru import logger


# ================================================================================
# Attachment Helpers
# ================================================================================

def attach_json(data: Any, name: str = "Data"):
    """
    Attach JSON data to Allure report.

    Args:
        data: Data to attach (will be JSON serialized)
        name: Attachment name
    """
    json_str = json.dumps(data, indent=2, default=str)
    allure.attach(
        json_str,
        name=name,
        attachment_type=allure.attachment_type.JSON
    )


def attach_text(text: str, name: str = "Text"):
    """
    Attach text content to Allure report.

    Args:
        text: Text to attach
        name: Attachment name
    """
    allure.attach(
        text,
        name=name,
        attachment_type=allure.attachment_type.TEXT
    )


def attach_image_file(path: Union[str, Path], name: str):
    """
    Attach a PNG file from disk to Allure report.

    Missing files are logged and skipped so that reporting never masks the
    real test outcome.

    Args:
        path: PNG file path
        name: Attachment name
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"Cannot attach '{name}': file not found at {path}")
        return
    allure.attach.file(
        str(path),
        name=name,
        attachment_type=allure.attachment_type.PNG
    )


def write_environment_properties(results_dir: Union[str, Path], properties: Dict[str, Any]) -> Path:
    """
    Write environment.properties for the Allure "Environment" widget.

    Args:
        results_dir: Allure results directory
        properties: Key/value pairs such as browser and headless mode

    Returns:
        Path of the written file
    """
    results_dir = Path(results_dir)
    results_dir.mkdir(parents=True, exist_ok=True)
    path = results_dir / "environment.properties"
    lines = [f"{key}={value}" for key, value in sorted(properties.items())]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.debug(f"Allure environment written: {path}")
    return path


# ================================================================================
# Report Processing
# ================================================================================

_COUNTED_STATUSES = ("passed", "failed", "broken", "skipped")


@dataclass
class TestResultSummary:
    """Summary of test execution results."""
    __test__ = False

    total: int = 0
    passed: int = 0
    failed: int = 0
    broken: int = 0
    skipped: int = 0
    unknown: int = 0
    duration_ms: int = 0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def pass_rate(self) -> float:
        """Calculate pass rate percentage."""
        if self.total == 0:
            return 0.0
        return (self.passed / self.total) * 100

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "broken": self.broken,
            "skipped": self.skipped,
            "unknown": self.unknown,
            "pass_rate": f"{self.pass_rate:.2f}%",
            "duration_ms": self.duration_ms,
            "timestamp": self.timestamp,
        }


class AllureReportProcessor:
    """
    Summarizes Allure results and renders the HTML report.

    Usage:
        processor = AllureReportProcessor("reports/allure-results")
        if processor.generate_report():
            processor.log_summary()
    """

    def __init__(self, results_dir: Union[str, Path], report_dir: Optional[Union[str, Path]] = None):
        self.results_dir = Path(results_dir)
        self.report_dir = Path(report_dir) if report_dir else self.results_dir.parent / "allure-report"

    def parse_results(self) -> List[Dict[str, Any]]:
        """Load every ``*-result.json``; unreadable files are logged and skipped."""
        results = []
        for result_file in sorted(self.results_dir.glob("*-result.json")):
            try:
                results.append(json.loads(result_file.read_text(encoding="utf-8")))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Skipping unreadable result {result_file.name}: {e}")
        return results

    def generate_summary(self) -> TestResultSummary:
        summary = TestResultSummary()
        for result in self.parse_results():
            summary.total += 1
            status = result.get("status")
            if status in _COUNTED_STATUSES:
                setattr(summary, status, getattr(summary, status) + 1)
            else:
                summary.unknown += 1
            summary.duration_ms += result.get("stop", 0) - result.get("start", 0)
        return summary

    def generate_report(self) -> bool:
        """
        Run ``allure generate`` over the results directory.

        Returns:
            True if the report was written, False when the CLI is missing or fails
        """
        cmd = ["allure", "generate", str(self.results_dir), "-o", str(self.report_dir), "--clean"]
        try:
            completed = subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError:
            logger.error("Allure command not found. Install allure-commandline to build the HTML report.")
            return False

        if completed.returncode != 0:
            logger.error(f"allure generate exited with {completed.returncode}: {completed.stderr.strip()}")
            return False

        logger.info(f"Allure report generated at {self.report_dir}")
        return True

    def log_summary(self) -> TestResultSummary:
        summary = self.generate_summary()
        logger.info(
            f"Results: {summary.total} total, {summary.passed} passed, {summary.failed} failed, "
            f"{summary.broken} broken, {summary.skipped} skipped "
            f"({summary.pass_rate:.2f}% pass rate, {summary.duration_ms / 1000:.2f}s)"
        )
        return summary


# ================================================================================
# Convenience Functions
# ================================================================================

def generate_allure_report(
    results_dir: Union[str, Path],
    output_dir: Optional[Union[str, Path]] = None,
    open_report: bool = False,
) -> bool:
    """
    Build the HTML report, log the run summary and optionally open it.

    Returns:
        True if the report was generated
    """
    processor = AllureReportProcessor(results_dir, output_dir)
    if not processor.generate_report():
        return False

    processor.log_summary()
    if open_report:
        subprocess.run(["allure", "open", str(processor.report_dir)])
    return True
