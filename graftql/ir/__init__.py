"""graftql intermediate representation: nodes, metadata, selection helpers."""
from graftql.ir.metadata import IDENTITY, Metadata, merge_metadata
from graftql.ir.nodes import (
    Argument,
    BatchRequest,
    Condition,
    Document,
    Fragment,
    FragmentSpread,
    InlineFragment,
    LinkedField,
    Request,
    ScalarField,
    Selection,
    VariableDefinition,
    document_from_dict,
)
from graftql.ir.printer import print_document
from graftql.ir.selections import TYPENAME_KEY

__all__ = [
    "IDENTITY",
    "Metadata",
    "merge_metadata",
    "Argument",
    "BatchRequest",
    "Condition",
    "Document",
    "Fragment",
    "FragmentSpread",
    "InlineFragment",
    "LinkedField",
    "Request",
    "ScalarField",
    "Selection",
    "VariableDefinition",
    "document_from_dict",
    "print_document",
    "TYPENAME_KEY",
]
