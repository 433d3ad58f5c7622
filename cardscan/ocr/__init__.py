from cardscan.ocr.base import (
    BackendUnavailable,
    CameraUnavailable,
    FragmentSource,
    OCRWord,
    PermissionDenied,
    RecognitionError,
    ScanCancelled,
    fragments_from_words,
)

__all__ = [
    "BackendUnavailable",
    "CameraUnavailable",
    "FragmentSource",
    "OCRWord",
    "PermissionDenied",
    "RecognitionError",
    "ScanCancelled",
    "fragments_from_words",
]
