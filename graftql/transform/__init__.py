"""graftql IR transforms."""
from graftql.transform.requisite_fields import RequisiteFieldTransform, transform
from graftql.transform.visitor import IRVisitor

__all__ = [
    "IRVisitor",
    "RequisiteFieldTransform",
    "transform",
]
