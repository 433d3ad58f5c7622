from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Union

from cardscan.config import ScanConfig
from cardscan.errors import FailureKind, ScanFailure
from cardscan.models import CardBrand, TextFragment
from cardscan.ocr.base import (
    BackendUnavailable,
    CameraUnavailable,
    FragmentSource,
    PermissionDenied,
    RecognitionError,
    ScanCancelled,
)
from cardscan.reconstruct import Reconstruction, reconstruct
from cardscan.security.policy import SecurityIssue, Severity, ValidationResult, evaluate
from cardscan.security.purge import TraceStore, purge_transient_traces
from cardscan.security.record import CryptoFailure, SecureRecord
from cardscan.validator import format_card_number, identify_brand

LOGGER = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "IDLE"
    AWAITING_FRAGMENTS = "AWAITING_FRAGMENTS"
    RECONSTRUCTING = "RECONSTRUCTING"
    VALIDATING = "VALIDATING"
    SECURING = "SECURING"
    POLICY_CHECKING = "POLICY_CHECKING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


_STAGE_ORDER = [
    PipelineState.IDLE,
    PipelineState.AWAITING_FRAGMENTS,
    PipelineState.RECONSTRUCTING,
    PipelineState.VALIDATING,
    PipelineState.SECURING,
    PipelineState.POLICY_CHECKING,
    PipelineState.SUCCEEDED,
]
_TERMINAL = {PipelineState.SUCCEEDED, PipelineState.FAILED}


@dataclass
class ScanSuccess:
    card_number: str = field(repr=False)
    expiry_date: str = field(repr=False)
    brand: CardBrand
    confidence: float
    secure_record: SecureRecord
    validation_result: Optional[ValidationResult] = None
    cardholder_name: Optional[str] = field(default=None, repr=False)
    trace: Dict[str, object] = field(default_factory=dict)

    ok = True

    def to_dict(self) -> Dict[str, object]:
        return {
            "ok": True,
            "masked_card_number": self.secure_record.masked_card_number(),
            "brand": self.brand.value,
            "confidence": round(self.confidence, 4),
            "validation": self.validation_result.to_dict() if self.validation_result else None,
            "has_cardholder_name": self.cardholder_name is not None,
            "trace": self.trace,
        }


ScanOutcome = Union[ScanSuccess, ScanFailure]


class ScanPipeline:
    """One scan attempt, from recognised fragments to a sealed, checked result.

    Stages run strictly in order and each either advances or ends the attempt
    in ``FAILED``. An instance serves a single attempt; concurrent attempts use
    separate instances.
    """

    def __init__(
        self,
        config: ScanConfig | None = None,
        *,
        trace_stores: Sequence[TraceStore] = (),
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.config = config or ScanConfig()
        self.trace_stores = list(trace_stores)
        self.clock = clock
        self.state = PipelineState.IDLE
        self.history: List[PipelineState] = [PipelineState.IDLE]

    def _advance(self, state: PipelineState) -> None:
        if self.state in _TERMINAL:
            raise RuntimeError(f"Pipeline already finished in {self.state.value}")
        if state is not PipelineState.FAILED:
            expected = _STAGE_ORDER[_STAGE_ORDER.index(self.state) + 1]
            if state is not expected:
                raise RuntimeError(f"Illegal transition {self.state.value} -> {state.value}")
        LOGGER.debug("Pipeline %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _fail(self, kind: FailureKind, **context) -> ScanFailure:
        self._advance(PipelineState.FAILED)
        failure = ScanFailure(kind=kind, **context)
        LOGGER.info("Scan failed: %s", kind.value)
        return failure

    def _start(self) -> None:
        if self.state is not PipelineState.IDLE:
            raise RuntimeError("ScanPipeline instances serve a single scan attempt")
        self._advance(PipelineState.AWAITING_FRAGMENTS)

    def cancel(self) -> ScanFailure:
        if self.state is PipelineState.IDLE:
            self._advance(PipelineState.AWAITING_FRAGMENTS)
        return self._fail(FailureKind.USER_CANCELLED)

    def scan(self, source: FragmentSource, image) -> ScanOutcome:
        """Ask a recognition collaborator for fragments, then run the attempt."""
        self._start()
        try:
            fragments = list(source.recognize(image))
        except CameraUnavailable:
            return self._fail(FailureKind.CAMERA_UNAVAILABLE)
        except PermissionDenied:
            return self._fail(FailureKind.PERMISSION_DENIED)
        except ScanCancelled:
            return self._fail(FailureKind.USER_CANCELLED)
        except (BackendUnavailable, RecognitionError) as exc:
            LOGGER.warning("Recognition backend %s failed: %s", getattr(source, "name", "?"), exc)
            return self._fail(FailureKind.PROCESSING_ERROR)
        return self._process(fragments)

    def run(self, fragments: Sequence[TextFragment]) -> ScanOutcome:
        self._start()
        return self._process(list(fragments))

    def _process(self, fragments: List[TextFragment]) -> ScanOutcome:
        if not fragments:
            return self._fail(FailureKind.PROCESSING_ERROR)

        self._advance(PipelineState.RECONSTRUCTING)
        result: Reconstruction = reconstruct(fragments, self.config.reconstruct)
        trace = result.trace
        if result.confidence < self.config.confidence_threshold:
            return self._fail(FailureKind.LOW_CONFIDENCE, confidence=result.confidence, trace=trace)
        if not result.is_complete:
            return self._fail(FailureKind.INCOMPLETE_DATA, confidence=result.confidence, trace=trace)

        self._advance(PipelineState.VALIDATING)
        brand = identify_brand(result.card_number)
        trace["brand"] = brand.value

        self._advance(PipelineState.SECURING)
        try:
            record = SecureRecord.create(result.card_number, result.expiry_date, result.cardholder_name)
        except CryptoFailure as exc:
            LOGGER.error("Could not seal scan result: %s", exc)
            return self._fail(FailureKind.CRYPTO_FAILURE, confidence=result.confidence, trace=trace)

        self._advance(PipelineState.POLICY_CHECKING)
        validation: Optional[ValidationResult] = None
        if self.config.security_validation_enabled:
            validation = evaluate(
                record,
                today=self.clock(),
                flag_repeated_digits=self.config.flag_repeated_digits,
            )
            if not self.config.allow_test_cards and SecurityIssue.TEST_CARD_DETECTED in validation.issues:
                record.wipe()
                return self._fail(
                    FailureKind.TEST_CARD_NOT_ALLOWED,
                    confidence=result.confidence,
                    validation=validation,
                    trace=trace,
                )
            if validation.has_severity(Severity.HIGH):
                record.wipe()
                return self._fail(
                    FailureKind.SECURITY_VALIDATION_FAILED,
                    confidence=result.confidence,
                    validation=validation,
                    trace=trace,
                )

        self._advance(PipelineState.SUCCEEDED)
        success = ScanSuccess(
            card_number=format_card_number(result.card_number),
            expiry_date=result.expiry_date.text,
            brand=brand,
            confidence=result.confidence,
            secure_record=record,
            validation_result=validation,
            cardholder_name=result.cardholder_name,
            trace=trace,
        )
        LOGGER.info("Scan succeeded: %s %s", brand.value, record.masked_card_number())
        if self.config.purge_on_success and self.trace_stores:
            purge_transient_traces(self.trace_stores)
        return success


__all__ = ["PipelineState", "ScanOutcome", "ScanPipeline", "ScanSuccess"]
