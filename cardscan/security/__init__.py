from cardscan.security.policy import (
    TEST_CARD_NUMBERS,
    SecurityIssue,
    Severity,
    ValidationResult,
    evaluate,
)
from cardscan.security.purge import (
    DirectoryTraceStore,
    MappingTraceStore,
    TraceStore,
    purge_transient_traces,
)
from cardscan.security.record import CryptoFailure, SecureRecord

__all__ = [
    "TEST_CARD_NUMBERS",
    "CryptoFailure",
    "DirectoryTraceStore",
    "MappingTraceStore",
    "SecureRecord",
    "SecurityIssue",
    "Severity",
    "TraceStore",
    "ValidationResult",
    "evaluate",
    "purge_transient_traces",
]
