ENGINE_VERSION = "cardscan-0.1.0"

from cardscan.config import ScanConfig, load_scan_config
from cardscan.errors import FailureKind, ScanFailure
from cardscan.models import CardBrand, ExpiryDate, TextFragment, supported_brands
from cardscan.pipeline import PipelineState, ScanPipeline, ScanSuccess
from cardscan.reconstruct import Reconstruction, reconstruct
from cardscan.security import (
    CryptoFailure,
    SecureRecord,
    SecurityIssue,
    Severity,
    ValidationResult,
    evaluate,
    purge_transient_traces,
)
from cardscan.validator import (
    extract_digits,
    format_card_number,
    identify_brand,
    is_valid_card_number,
)

__all__ = [
    "ENGINE_VERSION",
    "CardBrand",
    "CryptoFailure",
    "ExpiryDate",
    "FailureKind",
    "PipelineState",
    "Reconstruction",
    "ScanConfig",
    "ScanFailure",
    "ScanPipeline",
    "ScanSuccess",
    "SecureRecord",
    "SecurityIssue",
    "Severity",
    "TextFragment",
    "ValidationResult",
    "evaluate",
    "extract_digits",
    "format_card_number",
    "identify_brand",
    "is_valid_card_number",
    "load_scan_config",
    "purge_transient_traces",
    "reconstruct",
    "supported_brands",
]
