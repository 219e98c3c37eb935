"""
BoxCad - Result Types for Build Transparency

Structured outcome of a build, differentiating between:
- SUCCESS: model exported on the primary kernel path
- WARNING: model exported, but a fallback strategy (pipe sweep, primitive solid) was needed
- EMPTY: nothing to export (inner-cavity debug export for square corners or cylinders)
- ERROR: build aborted, no artifact

Usage:
    from boxcad.result_types import BuildResult

    result = try_build_model(params, session)
    if result.is_error:
        print(result.message)
        for line in result.trace_lines:
            print(line)
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional

from loguru import logger


class ResultStatus(Enum):
    SUCCESS = auto()
    WARNING = auto()
    EMPTY = auto()
    ERROR = auto()


@dataclass
class OperationResult:
    """
    Unified result type for pipeline operations.

    Attributes:
        status: ResultStatus indicating outcome type
        value: The result value (STEP bytes, ExportedModel) - None for ERROR/EMPTY
        message: Single user-facing description
        details: Additional context (fallback used, exception type, ...)
        warnings: Non-fatal issues encountered
    """
    status: ResultStatus
    value: Any = None
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def success(cls, value: Any, message: str = "Build completed successfully", **kwargs) -> "OperationResult":
        return cls(status=ResultStatus.SUCCESS, value=value, message=message, **kwargs)

    @classmethod
    def warning(cls, value: Any, message: str, fallback_used: Optional[str] = None,
                warnings: Optional[List[str]] = None, **kwargs) -> "OperationResult":
        """WARNING result: value is usable, but a fallback was taken."""
        details = {}
        if fallback_used:
            details["fallback_used"] = fallback_used
        return cls(
            status=ResultStatus.WARNING,
            value=value,
            message=message,
            details=details,
            warnings=warnings or [],
            **kwargs,
        )

    @classmethod
    def empty(cls, message: str = "Nothing to export", reason: Optional[str] = None, **kwargs) -> "OperationResult":
        details = {"reason": reason} if reason else {}
        return cls(status=ResultStatus.EMPTY, value=None, message=message, details=details, **kwargs)

    @classmethod
    def error(cls, message: str, exception: Optional[Exception] = None,
              context: Optional[Dict[str, Any]] = None, **kwargs) -> "OperationResult":
        details = dict(context or {})
        if exception is not None:
            details["exception_type"] = type(exception).__name__
            details["exception_message"] = str(exception)
        return cls(status=ResultStatus.ERROR, value=None, message=message, details=details, **kwargs)

    @property
    def is_success(self) -> bool:
        """SUCCESS, or WARNING with a value."""
        return self.status == ResultStatus.SUCCESS or (
            self.status == ResultStatus.WARNING and self.value is not None
        )

    @property
    def is_error(self) -> bool:
        return self.status == ResultStatus.ERROR

    @property
    def is_empty(self) -> bool:
        return self.status == ResultStatus.EMPTY

    def log(self, context: str = "") -> "OperationResult":
        """Log with the level matching the status; returns self for chaining."""
        prefix = f"[{context}] " if context else ""

        if self.status == ResultStatus.SUCCESS:
            logger.success(f"{prefix}{self.message}")
        elif self.status == ResultStatus.WARNING:
            logger.warning(f"{prefix}{self.message}")
            for warn in self.warnings:
                logger.warning(f"{prefix}  - {warn}")
        elif self.status == ResultStatus.EMPTY:
            logger.info(f"{prefix}{self.message}")
            if "reason" in self.details:
                logger.debug(f"{prefix}  Reason: {self.details['reason']}")
        elif self.status == ResultStatus.ERROR:
            logger.error(f"{prefix}{self.message}")
            if "exception_type" in self.details:
                logger.error(
                    f"{prefix}  Exception: {self.details['exception_type']}: "
                    f"{self.details.get('exception_message', '')}"
                )
        return self

    def to_report_dict(self) -> Dict[str, Any]:
        report = {"status": self.status.name, "message": self.message}
        if self.details:
            report["details"] = self.details
        if self.warnings:
            report["warnings"] = self.warnings
        if self.value is not None:
            report["value_type"] = type(self.value).__name__
        return report


@dataclass
class BuildResult(OperationResult):
    """
    Result of a full model build.

    trace_lines holds the diagnostic trace at the time of failure
    (oldest first), so errors can be reported without re-running the kernel.
    """
    fallbacks_used: List[str] = field(default_factory=list)
    trace_lines: List[str] = field(default_factory=list)

    @property
    def byte_count(self) -> int:
        data = getattr(self.value, "step", self.value)
        return len(data) if isinstance(data, (bytes, bytearray)) else 0

    def to_report_dict(self) -> Dict[str, Any]:
        report = super().to_report_dict()
        if self.fallbacks_used:
            report["fallbacks_used"] = list(self.fallbacks_used)
        if self.byte_count:
            report["byte_count"] = self.byte_count
        if self.trace_lines:
            report["trace"] = list(self.trace_lines)
        return report
