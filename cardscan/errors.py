from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from cardscan.security.policy import ValidationResult


class FailureKind(str, Enum):
    CAMERA_UNAVAILABLE = "CAMERA_UNAVAILABLE"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    PROCESSING_ERROR = "PROCESSING_ERROR"
    LOW_CONFIDENCE = "LOW_CONFIDENCE"
    INCOMPLETE_DATA = "INCOMPLETE_DATA"
    USER_CANCELLED = "USER_CANCELLED"
    TEST_CARD_NOT_ALLOWED = "TEST_CARD_NOT_ALLOWED"
    SECURITY_VALIDATION_FAILED = "SECURITY_VALIDATION_FAILED"
    CRYPTO_FAILURE = "CRYPTO_FAILURE"


REASONS = {
    FailureKind.CAMERA_UNAVAILABLE: "The camera is not available.",
    FailureKind.PERMISSION_DENIED: "Camera permission was denied.",
    FailureKind.PROCESSING_ERROR: "The image could not be processed.",
    FailureKind.LOW_CONFIDENCE: "Scan confidence is too low.",
    FailureKind.INCOMPLETE_DATA: "The card details are incomplete.",
    FailureKind.USER_CANCELLED: "The scan was cancelled.",
    FailureKind.TEST_CARD_NOT_ALLOWED: "Test cards are not allowed.",
    FailureKind.SECURITY_VALIDATION_FAILED: "Security validation failed.",
    FailureKind.CRYPTO_FAILURE: "The card details could not be secured.",
}

RECOVERY = {
    FailureKind.CAMERA_UNAVAILABLE: "Check that the device camera is working.",
    FailureKind.PERMISSION_DENIED: "Allow camera access in the device settings.",
    FailureKind.PROCESSING_ERROR: "Try again or use a different image.",
    FailureKind.LOW_CONFIDENCE: "Improve the lighting and hold the card steady.",
    FailureKind.INCOMPLETE_DATA: "Make sure both the card number and expiry date are visible.",
    FailureKind.TEST_CARD_NOT_ALLOWED: "Use a real card.",
    FailureKind.SECURITY_VALIDATION_FAILED: "Check that the card is valid.",
    FailureKind.CRYPTO_FAILURE: "Try scanning again.",
}


@dataclass
class ScanFailure:
    kind: FailureKind
    confidence: Optional[float] = None
    validation: Optional[ValidationResult] = None
    trace: Dict[str, object] = field(default_factory=dict)

    ok = False

    @property
    def description(self) -> str:
        if self.kind is FailureKind.LOW_CONFIDENCE and self.confidence is not None:
            return f"Scan confidence is too low: {int(self.confidence * 100)}%"
        if self.kind is FailureKind.SECURITY_VALIDATION_FAILED and self.validation is not None:
            return self.validation.warning_message or REASONS[self.kind]
        return REASONS[self.kind]

    @property
    def recovery_suggestion(self) -> Optional[str]:
        return RECOVERY.get(self.kind)

    def to_dict(self) -> Dict[str, object]:
        return {
            "ok": False,
            "kind": self.kind.value,
            "description": self.description,
            "recovery_suggestion": self.recovery_suggestion,
            "confidence": self.confidence,
            "validation": self.validation.to_dict() if self.validation else None,
            "trace": self.trace,
        }


__all__ = ["FailureKind", "REASONS", "RECOVERY", "ScanFailure"]
