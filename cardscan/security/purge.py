from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable, List, MutableMapping, Protocol

LOGGER = logging.getLogger(__name__)

TRACE_MARKERS = ("card", "credit", "scan", "ocr")


class TraceStore(Protocol):
    """External cache that may hold leftovers of a scan."""

    name: str

    def keys(self) -> Iterable[str]: ...

    def remove(self, key: str) -> None: ...


class MappingTraceStore:
    name = "mapping"

    def __init__(self, mapping: MutableMapping[str, object]) -> None:
        self.mapping = mapping

    def keys(self) -> List[str]:
        return list(self.mapping.keys())

    def remove(self, key: str) -> None:
        self.mapping.pop(key, None)


class DirectoryTraceStore:
    name = "directory"

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def keys(self) -> List[str]:
        if not self.directory.is_dir():
            return []
        return sorted(entry.name for entry in self.directory.iterdir())

    def remove(self, key: str) -> None:
        target = self.directory / key
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        else:
            target.unlink(missing_ok=True)


def is_transient_trace(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in TRACE_MARKERS)


def purge_transient_traces(stores: Iterable[TraceStore]) -> int:
    """Remove scan-related entries from every store and return how many went.

    Safe to call repeatedly; a store that fails to drop an entry is logged and
    the remaining entries and stores are still processed.
    """
    removed = 0
    for store in stores:
        for key in list(store.keys()):
            if not is_transient_trace(key):
                continue
            try:
                store.remove(key)
            except OSError as exc:
                LOGGER.warning("Could not purge %s from %s store: %s", key, store.name, exc)
                continue
            removed += 1
    if removed:
        LOGGER.info("Purged %d transient scan traces", removed)
    return removed


__all__ = [
    "TRACE_MARKERS",
    "DirectoryTraceStore",
    "MappingTraceStore",
    "TraceStore",
    "is_transient_trace",
    "purge_transient_traces",
]
