from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol, Sequence, Tuple

from cardscan.models import TextFragment

BBox = Tuple[float, float, float, float]


class CameraUnavailable(RuntimeError):
    """Raised by a capture collaborator when no camera can be used."""


class PermissionDenied(PermissionError):
    """Raised by a capture collaborator when camera access was refused."""


class ScanCancelled(RuntimeError):
    """Raised when the user aborted the scan before recognition finished."""


class BackendUnavailable(RuntimeError):
    """Raised when a text recognition backend cannot run on the current platform."""


class RecognitionError(RuntimeError):
    """Raised when a text recognition backend failed on an image."""


@dataclass
class OCRWord:
    text: str
    bbox: BBox
    confidence: float


class FragmentSource(Protocol):
    name: str

    def is_available(self) -> bool: ...

    def recognize(self, image) -> Sequence[TextFragment]: ...


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def fragments_from_words(words: Sequence[OCRWord], width: float, height: float) -> List[TextFragment]:
    """Convert pixel-space words (top-left origin) into normalised fragments.

    The returned positions use a bottom-left origin so a larger ``y`` is
    higher in the frame.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Frame size must be positive, got {width}x{height}")
    fragments: List[TextFragment] = []
    for word in words:
        text = (word.text or "").strip()
        if not text:
            continue
        x1, y1, x2, y2 = word.bbox
        center_x = _clamp((x1 + x2) / 2.0 / width)
        center_y = _clamp(1.0 - (y1 + y2) / 2.0 / height)
        fragments.append(
            TextFragment(text=text, confidence=_clamp(float(word.confidence)), position=(center_x, center_y))
        )
    return fragments


__all__ = [
    "BBox",
    "BackendUnavailable",
    "CameraUnavailable",
    "FragmentSource",
    "OCRWord",
    "PermissionDenied",
    "RecognitionError",
    "ScanCancelled",
    "fragments_from_words",
]
