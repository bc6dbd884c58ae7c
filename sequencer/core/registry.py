"""Registration of the named steps a sequence can run."""
from __future__ import annotations

from typing import Callable, Dict, Iterable, List

from .stage import StageCallable, StageDefinition


class StageRegistry:
    """Maps step names to their definitions in registration order."""

    def __init__(self) -> None:
        self._stages: Dict[str, StageDefinition] = {}

    def register(self, name: str, func: StageCallable, description: str = "") -> StageCallable:
        """Add *func* under *name*; names are unique."""

        if name in self._stages:
            raise ValueError(f"Stage '{name}' is already registered")
        self._stages[name] = StageDefinition(
            name=name,
            callable=func,
            description=description,
            module=func.__module__,
        )
        return func

    def get(self, name: str) -> StageDefinition:
        try:
            return self._stages[name]
        except KeyError as exc:
            raise KeyError(f"Stage '{name}' is not registered") from exc

    def __contains__(self, name: str) -> bool:
        return name in self._stages

    def names(self) -> List[str]:
        return list(self._stages)

    def missing(self, names: Iterable[str]) -> List[str]:
        """Return the entries of *names* that have no registration."""

        return [name for name in names if name not in self._stages]

    def describe(self) -> List[str]:
        """One ``name: description (module)`` line per registered step."""

        return [
            f"{definition.name}: {definition.description} ({definition.module})"
            for definition in self._stages.values()
        ]


registry = StageRegistry()


def register_stage(name: str, description: str = "") -> Callable[[StageCallable], StageCallable]:
    """Register the decorated function on the shared :data:`registry`."""

    def decorator(func: StageCallable) -> StageCallable:
        return registry.register(name, func, description=description)

    return decorator
