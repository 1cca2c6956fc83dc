"""
Named registries for pluggable solvers and output monitors.

Usage:
    from feaout.registry import register_monitor, get_monitor

    @register_monitor("screen")
    class ScreenMonitor(Monitor):
        ...

    monitor_cls = get_monitor("screen")

Output *fields* are not registered here; see :mod:`feaout.fields`.
"""

from typing import Any, Callable, TypeVar

T = TypeVar("T", bound=Callable[..., Any])


class Registry:
    """Registry of named classes or factories."""

    def __init__(self, kind: str):
        self.kind = kind
        self._entries: dict[str, Callable[..., Any]] = {}

    def register(self, name: str) -> Callable[[T], T]:
        """Decorator registering a class or factory under ``name``."""
        def decorator(obj: T) -> T:
            if name in self._entries:
                raise ValueError(f"{self.kind} '{name}' is already registered")
            self._entries[name] = obj
            return obj
        return decorator

    def get(self, name: str) -> Callable[..., Any]:
        """Look up a registered entry; unknown names list the alternatives."""
        try:
            return self._entries[name]
        except KeyError:
            available = ", ".join(self.list_available())
            raise KeyError(
                f"Unknown {self.kind}: '{name}'. Available: {available}"
            ) from None

    def list_available(self) -> list[str]:
        return sorted(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries


SOLVERS = Registry("solver")
MONITORS = Registry("monitor")


def register_solver(name: str) -> Callable[[T], T]:
    """Decorator to register a solver."""
    return SOLVERS.register(name)


def get_solver(name: str) -> Callable[..., Any]:
    """Get a registered solver by name."""
    return SOLVERS.get(name)


def register_monitor(name: str) -> Callable[[T], T]:
    """Decorator to register a monitor."""
    return MONITORS.register(name)


def get_monitor(name: str) -> Callable[..., Any]:
    """Get a registered monitor by name."""
    return MONITORS.get(name)
