"""Review data model shared by the AI path and every fallback path."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

UNKNOWN = "unknown"


class IssueSeverity(str, Enum):
    """Severity level of a review issue."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


@dataclass(frozen=True)
class Issue:
    """A single review finding."""

    severity: IssueSeverity
    category: str
    description: str
    location: str | None = None
    recommendation: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "severity": self.severity.value,
            "category": self.category,
            "description": self.description,
        }
        if self.location is not None:
            data["location"] = self.location
        if self.recommendation is not None:
            data["recommendation"] = self.recommendation
        return data


@dataclass(frozen=True)
class ReviewSummary:
    """Summary block of a structured review result."""

    total_issues: int
    high_severity_count: int = 0
    medium_severity_count: int = 0
    low_severity_count: int = 0
    fallback_used: bool = False
    fallback_type: str | None = None
    bypass_reason: str | None = None
    error: str | None = None

    @classmethod
    def from_issues(
        cls,
        issues: list[Issue],
        fallback_type: str | None = None,
        bypass_reason: str | None = None,
        error: str | None = None,
    ) -> ReviewSummary:
        """Build a summary whose counts match the given issues."""
        return cls(
            total_issues=len(issues),
            high_severity_count=sum(1 for i in issues if i.severity == IssueSeverity.HIGH),
            medium_severity_count=sum(1 for i in issues if i.severity == IssueSeverity.MEDIUM),
            low_severity_count=sum(1 for i in issues if i.severity == IssueSeverity.LOW),
            fallback_used=fallback_type is not None,
            fallback_type=fallback_type,
            bypass_reason=bypass_reason,
            error=error,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "total_issues": self.total_issues,
            "high_severity_count": self.high_severity_count,
            "medium_severity_count": self.medium_severity_count,
            "low_severity_count": self.low_severity_count,
            "fallback_used": self.fallback_used,
            "fallback_type": self.fallback_type,
        }
        if self.bypass_reason is not None:
            data["bypass_reason"] = self.bypass_reason
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class StructuredReviewResult:
    """
    Issue list plus summary produced by a review.

    The primary AI path and every terminal fallback emit this same shape,
    so downstream publishing never needs to know which path produced it.
    """

    issues: list[Issue] = field(default_factory=list)
    summary: ReviewSummary = field(default_factory=lambda: ReviewSummary(total_issues=0))
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_ai_review(
        cls,
        issues: list[Issue] | None,
        metadata: dict[str, Any] | None = None,
    ) -> StructuredReviewResult:
        """Wrap issues returned by the AI completion caller."""
        issue_list = list(issues or [])
        return cls(
            issues=issue_list,
            summary=ReviewSummary.from_issues(issue_list),
            metadata=dict(metadata or {}),
        )

    @property
    def fallback_used(self) -> bool:
        """Whether a fallback path produced this result."""
        return self.summary.fallback_used

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "issues": [issue.to_dict() for issue in self.issues],
            "summary": self.summary.to_dict(),
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class ReviewContext:
    """
    Pass-through description of the change under review.

    Only ``target_branch`` influences fallback behavior; the rest is echoed
    into result metadata for traceability.
    """

    repository: str = UNKNOWN
    target_branch: str = UNKNOWN
    commit_sha: str = UNKNOWN
    author: str = UNKNOWN
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> ReviewContext:
        """
        Build a context from a loosely shaped mapping.

        Accepts both snake_case and camelCase keys. Missing or empty values
        become ``"unknown"``.
        """
        if not isinstance(data, Mapping):
            return cls()

        def pick(*keys: str) -> str:
            for key in keys:
                value = data.get(key)
                if value:
                    return str(value)
            return UNKNOWN

        known = {
            "repository", "target_branch", "targetBranch", "branch",
            "commit_sha", "commitSha", "commit", "author",
        }
        return cls(
            repository=pick("repository"),
            target_branch=pick("target_branch", "targetBranch", "branch"),
            commit_sha=pick("commit_sha", "commitSha", "commit"),
            author=pick("author"),
            extra={k: v for k, v in data.items() if k not in known},
        )

    @classmethod
    def coerce(cls, value: ReviewContext | Mapping[str, Any] | None) -> ReviewContext:
        """Return ``value`` as a ReviewContext, tolerating anything."""
        if isinstance(value, ReviewContext):
            return value
        return cls.from_mapping(value)

    def to_metadata(self) -> dict[str, str]:
        """Context subset echoed into fallback results."""
        return {
            "repository": self.repository,
            "branch": self.target_branch,
            "commit": self.commit_sha,
            "author": self.author,
        }


@dataclass(frozen=True)
class ReviewPrompt:
    """Prompt sent to the AI completion caller."""

    system: str = ""
    user: str = ""

    @classmethod
    def coerce(cls, value: ReviewPrompt | Mapping[str, Any] | None) -> ReviewPrompt:
        """Return ``value`` as a ReviewPrompt, tolerating anything."""
        if isinstance(value, ReviewPrompt):
            return value
        if isinstance(value, Mapping):
            return cls(
                system=str(value.get("system") or ""),
                user=str(value.get("user") or ""),
            )
        return cls()

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for serialization."""
        return {"system": self.system, "user": self.user}


@dataclass(frozen=True)
class ReviewFile:
    """A changed file handed to degraded-mode analysis."""

    path: str | None = None
    content: str | None = None

    @classmethod
    def coerce(cls, value: Any) -> ReviewFile:
        """Return ``value`` as a ReviewFile; unusable values become empty files."""
        if isinstance(value, ReviewFile):
            return value
        if isinstance(value, Mapping):
            path = value.get("path")
            content = value.get("content")
        else:
            path = getattr(value, "path", None)
            content = getattr(value, "content", None)
        return cls(
            path=path if isinstance(path, str) else None,
            content=content if isinstance(content, str) else None,
        )

    @classmethod
    def coerce_many(cls, files: Any) -> list[ReviewFile]:
        """
        Normalize a loosely shaped file collection.

        A single file (ReviewFile or mapping) becomes a one-element list.
        Strings, bytes and other non-iterables become an empty list.
        """
        if isinstance(files, (ReviewFile, Mapping)):
            return [cls.coerce(files)]
        if files is None or isinstance(files, (str, bytes)):
            return []
        try:
            items = list(files)
        except TypeError:
            return []
        return [cls.coerce(item) for item in items]
