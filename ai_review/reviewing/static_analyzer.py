"""Pattern-based static analysis used when the AI reviewer is unavailable."""

from __future__ import annotations

import re
from typing import Any, Protocol

from ai_review.reviewing.models import Issue, IssueSeverity, ReviewFile, UNKNOWN


class FileAnalyzer(Protocol):
    """Anything that can turn one file into heuristic issues."""

    def analyze(self, file: ReviewFile) -> list[Issue]: ...


class StaticAnalyzer:
    """
    Heuristic reviewer with no semantic understanding.

    Each rule fires at most once per file:
    - ``eval(`` or assignment to ``innerHTML``: HIGH security issue
    - credential-like identifier assigned a string literal: HIGH security issue
    - ``console.log(`` outside test files: LOW standards issue
    - more lines than the threshold: MEDIUM standards issue
    """

    DANGEROUS_CALL_PATTERN = re.compile(r"\beval\s*\(|\.innerHTML\s*\+?=(?!=)")

    CREDENTIAL_PATTERN = re.compile(
        r"""\b[\w-]*(?:password|passwd|pwd|secret|api[_-]?key|access[_-]?token|auth[_-]?token|private[_-]?key)[\w-]*"""
        r"""["']?\s*[:=]\s*["'][^"'\n]+["']""",
        re.I,
    )

    CONSOLE_LOG_PATTERN = re.compile(r"\bconsole\.log\s*\(")

    TEST_FILE_PATTERN = re.compile(
        r"(?:\.(?:test|spec)\.|(?:^|[\\/])(?:tests?|__tests__)[\\/]|(?:^|[\\/])test_[^\\/]*$)",
        re.I,
    )

    def __init__(self, large_file_line_threshold: int = 50) -> None:
        """
        Initialize analyzer.

        Args:
            large_file_line_threshold: Files with more lines than this are flagged.
        """
        self.large_file_line_threshold = large_file_line_threshold

    def analyze(self, file: ReviewFile | Any) -> list[Issue]:
        """
        Run every heuristic rule over one file.

        Args:
            file: ReviewFile or mapping with ``path`` and ``content``.

        Returns:
            Issues found; empty when the file has no usable content.
        """
        review_file = ReviewFile.coerce(file)
        content = review_file.content
        if not content:
            return []

        path = review_file.path or UNKNOWN
        issues: list[Issue] = []

        if self.DANGEROUS_CALL_PATTERN.search(content):
            issues.append(Issue(
                severity=IssueSeverity.HIGH,
                category="Security",
                description="Potential security vulnerability detected",
                location=path,
                recommendation="Avoid using eval() or innerHTML with user input",
            ))

        if self.CREDENTIAL_PATTERN.search(content):
            issues.append(Issue(
                severity=IssueSeverity.HIGH,
                category="Security",
                description="Potential hardcoded credentials detected",
                location=path,
                recommendation="Use environment variables for sensitive data",
            ))

        if self.CONSOLE_LOG_PATTERN.search(content) and not self.is_test_file(path):
            issues.append(Issue(
                severity=IssueSeverity.LOW,
                category="Standards",
                description="Console.log statement found in production code",
                location=path,
                recommendation="Remove or replace with proper logging",
            ))

        if len(content.split("\n")) > self.large_file_line_threshold:
            issues.append(Issue(
                severity=IssueSeverity.MEDIUM,
                category="Standards",
                description="Large function or file detected",
                location=path,
                recommendation="Consider breaking down into smaller, more manageable functions",
            ))

        return issues

    def is_test_file(self, path: str) -> bool:
        """Whether ``path`` looks like a test file."""
        return bool(self.TEST_FILE_PATTERN.search(path))
