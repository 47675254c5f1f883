"""Transform registry.

IR transforms are registered by name so the pipeline can be configured with a
list of names instead of hard-coded imports.  Register a transform once; the
pipeline looks it up automatically.

Usage::

    from graftql.compile.registry import TransformRegistry

    @TransformRegistry.register("strip_client_fields")
    def strip_client_fields(context: CompilerContext) -> CompilerContext:
        ...
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import ClassVar

import structlog

from graftql.compile.context import CompilerContext
from graftql.errors import CompilationError

logger = structlog.get_logger(__name__)

#: A transform maps a compiler context to a new compiler context.
IRTransform = Callable[[CompilerContext], CompilerContext]


class TransformRegistry:
    """Registry mapping transform names to :data:`IRTransform` callables.

    Example::

        @TransformRegistry.register("requisite_fields")
        def transform(context):
            ...

        context = TransformRegistry.apply(context, ["requisite_fields"])
    """

    _transforms: ClassVar[dict[str, IRTransform]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[IRTransform], IRTransform]:
        """Decorator that registers a transform under ``name``.

        Args:
            name: The transform name (e.g. ``"requisite_fields"``).

        Returns:
            A decorator that registers and returns the transform.
        """

        def decorator(transform: IRTransform) -> IRTransform:
            cls._transforms[name] = transform
            return transform

        return decorator

    @classmethod
    def register_transform(cls, name: str, transform: IRTransform) -> None:
        """Register a transform without using the decorator form."""
        cls._transforms[name] = transform

    @classmethod
    def get(cls, name: str) -> IRTransform:
        """Return the transform registered for ``name``.

        Raises:
            CompilationError: If no transform is registered for ``name``.
        """
        transform = cls._transforms.get(name)
        if transform is None:
            registered = sorted(cls._transforms)
            raise CompilationError(
                f"Unknown transform: '{name}'. Registered transforms: {registered}."
            )
        return transform

    @classmethod
    def apply(cls, context: CompilerContext, names: Iterable[str]) -> CompilerContext:
        """Run the named transforms in order, threading the context through.

        Args:
            context: The input compiler context.
            names: Transform names, applied left to right.

        Returns:
            The context produced by the last transform.
        """
        for name in names:
            context = cls.get(name)(context)
            logger.debug("transform_applied", transform=name, documents=len(context))
        return context

    @classmethod
    def registered_transforms(cls) -> list[str]:
        """Return the sorted list of registered transform names."""
        return sorted(cls._transforms)
