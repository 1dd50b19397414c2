"""Key bindings for the selector's normal mode."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class KeyBinding:
    """One action reachable from one or more key tokens.

    ``structural`` bindings read or reshape the tree and are locked out while
    a reload is in flight.
    """

    keys: tuple[str, ...]
    action: Callable[[], object]
    hint: str = ""
    structural: bool = False


class KeyMap:
    """Key token to binding table; later bindings win for a shared key."""

    def __init__(self, bindings: Iterable[KeyBinding] = ()) -> None:
        self._by_key: dict[str, KeyBinding] = {}
        for binding in bindings:
            self.bind(binding)

    def bind(self, binding: KeyBinding) -> None:
        for key in binding.keys:
            self._by_key[key] = binding

    def lookup(self, key: str) -> KeyBinding | None:
        return self._by_key.get(key)

    def is_structural(self, key: str) -> bool:
        binding = self._by_key.get(key)
        return binding is not None and binding.structural

    def dispatch(self, key: str) -> bool:
        """Run the action bound to ``key``; returns whether one was bound."""
        binding = self._by_key.get(key)
        if binding is None:
            return False
        binding.action()
        return True


__all__ = ["KeyBinding", "KeyMap"]
