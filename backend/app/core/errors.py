"""Error Hierarchy — typed, categorized exceptions for all Revisio failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Every code has a localized user-facing message in core/language_strings.py
    - to_response() only exposes the localized message — self.message stays in logs
    - Upstream errors that are safe to retry never carry a committed charge

Design Decisions:
    - Single hierarchy with RevisioError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - http_status lives on the error, not in the route: one mapping, no per-route drift
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone

from app.core.domain_types import Locale
from app.core.language_strings import get_error_message


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    gen_type: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class RevisioError(Exception):
    """Base exception for all Revisio errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def message_params(self) -> dict[str, object]:
        """Placeholders for the localized message template."""
        return {}

    def user_message(self, locale: Locale) -> str:
        return get_error_message(self.code, locale, **self.message_params())

    def to_response(self, locale: Locale = Locale.FR) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.user_message(locale),
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Request Errors (400-level) ─────────────────────────────────

class AuthenticationError(RevisioError):
    """Missing, malformed, expired or unverifiable bearer credential."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Authentication failed: {reason}",
            "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )
        self.reason = reason


class ValidationError(RevisioError):
    """Request input missing or malformed."""
    def __init__(
        self, message: str, field: str,
        code: str = "VALIDATION_ERROR", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field


class QuotaExceededError(RevisioError):
    """Free-tier daily limit reached."""
    def __init__(self, limit: int, context: ErrorContext | None = None):
        super().__init__(
            f"Daily generation limit reached ({limit})",
            "QUOTA_EXCEEDED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.INFO, context, 429,
        )
        self.limit = limit

    def message_params(self) -> dict[str, object]:
        return {"limit": self.limit}


class InvalidCodeError(RevisioError):
    """Activation code does not exist."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Activation code does not exist",
            "INVALID_CODE", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.INFO, context, 404,
        )


class CodeAlreadyUsedError(RevisioError):
    """Activation code exists but was already redeemed."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Activation code already redeemed",
            "CODE_ALREADY_USED", ErrorCategory.CONFLICT,
            ErrorSeverity.INFO, context, 404,
        )


class UpstreamThrottledError(RevisioError):
    """Generation provider rate-limited the call. Caller should back off."""
    def __init__(
        self, message: str, retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"Provider rate limit: {message}",
            "UPSTREAM_THROTTLED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.WARNING, ctx, 429,
        )


class UpstreamExhaustedError(RevisioError):
    """Provider credits or billing quota exhausted. Not user-recoverable."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Provider quota exhausted: {message}",
            "UPSTREAM_EXHAUSTED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 402,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class ProfileNotFoundError(RevisioError):
    """Entitlement record missing for an authenticated user."""
    def __init__(self, user_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_id = user_id
        super().__init__(
            f"Profile for user '{user_id}' not found",
            "PROFILE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 500,
        )


class UpstreamUnavailableError(RevisioError):
    """Provider unreachable, timed out or returned a malformed response."""
    def __init__(
        self, message: str, api_error_type: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Provider unavailable ({api_error_type}): {message}",
            "UPSTREAM_UNAVAILABLE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 500,
        )
        self.api_error_type = api_error_type


class EmptyResultError(RevisioError):
    """Provider call succeeded but returned no text."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Provider returned empty content",
            "EMPTY_RESULT", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 500,
        )


class PersistenceError(RevisioError):
    """No generated sheet could be stored."""
    def __init__(self, attempted: int, context: ErrorContext | None = None):
        super().__init__(
            f"0 of {attempted} sheet(s) persisted",
            "PERSISTENCE_FAILED", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.attempted = attempted


class TierUpgradeError(RevisioError):
    """Code claimed but the tier upgrade failed — needs operator remediation."""
    def __init__(
        self, user_id: str, code: str, reason: str,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.user_id = user_id
        ctx.debug_info = {"code": code, "reason": reason}
        super().__init__(
            f"Activation code '{code}' claimed by '{user_id}' "
            f"but tier upgrade failed: {reason}",
            "TIER_UPGRADE_FAILED", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, ctx, 500,
        )


class DatabaseError(RevisioError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation
