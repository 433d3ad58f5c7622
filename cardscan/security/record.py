from __future__ import annotations

import logging
import os
from typing import Dict, Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from cardscan.models import ExpiryDate
from cardscan.validator import mask_card_number

LOGGER = logging.getLogger(__name__)

KEY_BITS = 256
NONCE_BYTES = 12
TAG_BYTES = 16

CARD_NUMBER_FIELD = "card_number"
EXPIRY_DATE_FIELD = "expiry_date"
CARDHOLDER_NAME_FIELD = "cardholder_name"


class CryptoFailure(RuntimeError):
    """Raised when the underlying cipher cannot create a key or seal a field."""


class SecureRecord:
    """Card fields sealed with AES-GCM under a key owned by this record alone.

    Plaintext is only available through the ``decrypted_*`` accessors and the
    masked card number; the key itself is never exposed. Every field is sealed
    with its own nonce and bound to its field name, so ciphertexts cannot be
    swapped between fields.
    """

    __slots__ = ("__key", "_sealed")

    def __init__(self, key: bytearray, sealed: Dict[str, bytes]) -> None:
        self.__key: Optional[bytearray] = key
        self._sealed: Dict[str, bytes] = sealed

    @classmethod
    def create(
        cls,
        card_number: str,
        expiry_date: Union[ExpiryDate, str],
        cardholder_name: str | None = None,
    ) -> "SecureRecord":
        try:
            key = bytearray(AESGCM.generate_key(bit_length=KEY_BITS))
        except Exception as exc:
            raise CryptoFailure("Unable to generate record key") from exc

        fields = {CARD_NUMBER_FIELD: card_number, EXPIRY_DATE_FIELD: str(expiry_date)}
        if cardholder_name is not None:
            fields[CARDHOLDER_NAME_FIELD] = cardholder_name
        try:
            sealed = {name: _seal(key, name, value) for name, value in fields.items()}
        except Exception as exc:
            raise CryptoFailure("Unable to seal card fields") from exc
        return cls(key, sealed)

    def decrypted_card_number(self) -> Optional[str]:
        return self._open(CARD_NUMBER_FIELD)

    def decrypted_expiry_date(self) -> Optional[str]:
        return self._open(EXPIRY_DATE_FIELD)

    def decrypted_cardholder_name(self) -> Optional[str]:
        return self._open(CARDHOLDER_NAME_FIELD)

    def masked_card_number(self) -> Optional[str]:
        card_number = self.decrypted_card_number()
        if card_number is None:
            return None
        return mask_card_number(card_number)

    @property
    def is_wiped(self) -> bool:
        return self.__key is None

    def wipe(self) -> None:
        key = self.__key
        if key is not None:
            for idx in range(len(key)):
                key[idx] = 0
        self.__key = None
        self._sealed = {}

    def _open(self, name: str) -> Optional[str]:
        key = self.__key
        sealed = self._sealed.get(name)
        if key is None or sealed is None:
            return None
        if len(sealed) < NONCE_BYTES + TAG_BYTES:
            LOGGER.debug("Sealed %s is truncated", name)
            return None
        nonce, ciphertext = sealed[:NONCE_BYTES], sealed[NONCE_BYTES:]
        try:
            plaintext = AESGCM(bytes(key)).decrypt(nonce, ciphertext, name.encode("ascii"))
            return plaintext.decode("utf-8")
        except (InvalidTag, ValueError) as exc:
            LOGGER.debug("Unable to open sealed %s: %s", name, type(exc).__name__)
            return None

    def __repr__(self) -> str:
        return f"SecureRecord(fields={sorted(self._sealed)}, wiped={self.is_wiped})"

    def __reduce_ex__(self, protocol):
        raise TypeError("SecureRecord cannot be copied or serialised")


def _seal(key: bytearray, name: str, value: str) -> bytes:
    nonce = os.urandom(NONCE_BYTES)
    return nonce + AESGCM(bytes(key)).encrypt(nonce, value.encode("utf-8"), name.encode("ascii"))


__all__ = ["CryptoFailure", "SecureRecord"]
