"""Observability for shared middleware operations."""

from shared_kernel.middleware.observability.context_propagation_probe import (
    ContextPropagationProbe,
    DefaultContextPropagationProbe,
)

__all__ = [
    "ContextPropagationProbe",
    "DefaultContextPropagationProbe",
]
