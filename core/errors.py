"""
core/errors.py
────────────────────────────────────────────────────────────────────────
Error taxonomy shared by the core, the services and the HTTP layer.

* InvalidInput             → caller's fault, reported as a client error
* UnparseablePlan          → recovered locally, never reaches HTTP
* CollaboratorUnavailable  → database / Gemini unreachable, retryable
"""
from __future__ import annotations


class InvalidInput(RuntimeError):
    """Missing, non-numeric or out-of-range input."""


class UnparseablePlan(RuntimeError):
    """Generator output could not be read as a list of day plans."""


class CollaboratorUnavailable(RuntimeError):
    """Persistence or text generation failed in a way worth retrying."""

    retry_after: int = 5


class GeneratorUnavailable(CollaboratorUnavailable):
    pass


class GeneratorQuotaExceeded(GeneratorUnavailable):
    retry_after = 60


class PersistenceUnavailable(CollaboratorUnavailable):
    pass
