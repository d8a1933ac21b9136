"""Approximator registry: register and create function approximators by name."""

from __future__ import annotations

from typing import Any, Callable, Type

from deepframe.agents.base import FunctionApproximator

_REGISTRY: dict[str, Type[FunctionApproximator]] = {}


def register(name: str) -> Callable:
    """Decorator to register an approximator class under *name*."""

    def wrapper(cls: Type[FunctionApproximator]) -> Type[FunctionApproximator]:
        if not (isinstance(cls, type) and issubclass(cls, FunctionApproximator)):
            raise TypeError(f"'{name}' must subclass FunctionApproximator, got {cls!r}")
        if name in _REGISTRY:
            raise ValueError(f"Approximator '{name}' is already registered")
        _REGISTRY[name] = cls
        return cls

    return wrapper


def create_approximator(name: str, **kwargs: Any) -> FunctionApproximator:
    """Instantiate a registered approximator by name."""
    if name not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY)) or "(none)"
        raise ValueError(f"Unknown approximator '{name}'. Available: {available}")
    return _REGISTRY[name](**kwargs)


def available_approximators() -> list[str]:
    """Return sorted list of registered approximator names."""
    return sorted(_REGISTRY)


# Built-in approximators register themselves on import.
from deepframe.agents import frame_predictor  # noqa: E402,F401
