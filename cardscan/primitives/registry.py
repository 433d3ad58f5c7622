from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, Optional, Sequence

from cardscan.models import TextFragment

if TYPE_CHECKING:
    from cardscan.primitives.card_number import ReconstructConfig

StrategyFunc = Callable[
    [Sequence[TextFragment], "ReconstructConfig", Dict[str, object]],
    Optional[str],
]

# Insertion order is search order.
_REGISTRY: Dict[str, StrategyFunc] = {}


def register_strategy(name: str) -> Callable[[StrategyFunc], StrategyFunc]:
    def decorator(func: StrategyFunc) -> StrategyFunc:
        if name in _REGISTRY:
            raise ValueError(f"Strategy already registered: {name}")
        _REGISTRY[name] = func
        return func

    return decorator


def get_strategy(name: str) -> StrategyFunc:
    try:
        return _REGISTRY[name]
    except KeyError as exc:
        raise ValueError(f"Unknown strategy: {name}") from exc


def list_strategies() -> Dict[str, StrategyFunc]:
    return dict(_REGISTRY)


__all__ = ["StrategyFunc", "register_strategy", "get_strategy", "list_strategies"]
