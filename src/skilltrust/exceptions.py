"""SkillTrust exception hierarchy.

All public exceptions inherit from SkillTrustError, giving callers a single
base class to catch when they want to handle any SkillTrust-specific failure
without swallowing unrelated errors.
"""


class SkillTrustError(Exception):
    """Base exception for all SkillTrust errors."""


class FeedbackValidationError(SkillTrustError):
    """Raised when a feedback entry violates its invariants.

    Covers empty identifiers and values outside the 0-100 range. The
    ingestion boundary normally rejects these; inside the engine they are
    only raised in strict mode.
    """


class ConfigError(SkillTrustError):
    """Raised when a scoring configuration is invalid.

    Covers out-of-range discount factors, non-positive windows or
    half-lives, and unknown keys in configuration files.
    """


class SnapshotError(SkillTrustError):
    """Raised when a feedback snapshot cannot be loaded.

    Covers unreadable files, malformed JSON/YAML, and records missing
    required fields.
    """


class ScoringError(SkillTrustError):
    """Raised when a score cannot be produced for a request.

    Covers unknown subjects and unsupported lens names.
    """
