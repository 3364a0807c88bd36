"""
Per-run generation state shared by a generator and its bound field functions.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Set


@dataclass
class GenState:
    """Mutable state for one generation run."""

    counter: int = 0
    prev_cache_for_dup: Dict[str, Set[Any]] = field(default_factory=dict)
    prev_cache_cardinality: Dict[str, List[Any]] = field(default_factory=dict)

    @classmethod
    def for_fields(cls, names: Iterable[str]) -> 'GenState':
        """Create a state with empty caches for every given field name."""
        state = cls()
        for name in names:
            state.register(name)
        return state

    def register(self, name: str) -> None:
        # Registering twice must not drop values already produced.
        self.prev_cache_for_dup.setdefault(name, set())
        self.prev_cache_cardinality.setdefault(name, [])
