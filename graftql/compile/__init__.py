"""graftql compile layer: CompilerContext and the transform registry."""
from graftql.compile.context import CompilerContext, DocumentNode
from graftql.compile.registry import IRTransform, TransformRegistry

__all__ = [
    "CompilerContext",
    "DocumentNode",
    "IRTransform",
    "TransformRegistry",
]
