"""Pydantic models for the graftql intermediate representation.

The IR is a closed sum type.  Every node carries a literal ``kind`` tag and
the selection and document unions are pydantic discriminated unions on that
tag, so a document round-trips through JSON without losing its variant and an
unknown ``kind`` is rejected at validation time.

Selections::

    ScalarField | LinkedField | InlineFragment | Condition | FragmentSpread

Documents (the roots held by a CompilerContext)::

    Fragment | Request | BatchRequest

Nodes are frozen.  Transforms build new nodes with ``model_copy(update=...)``
and never mutate a node another pass may still hold.
"""
from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from graftql.ir.metadata import Metadata

OperationKind = Literal["query", "mutation", "subscription"]


class Argument(BaseModel):
    """A field argument bound to a literal value or to a variable.

    Attributes:
        name: Argument name.
        value: Literal JSON value (ignored when ``variable`` is set).
        variable: Name of the operation variable supplying the value.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    value: Any = None
    variable: str | None = None


class VariableDefinition(BaseModel):
    """An operation variable: ``$name: Type = default``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    type: str
    default_value: Any = None


class ScalarField(BaseModel):
    """A leaf field selection."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["ScalarField"] = "ScalarField"
    alias: str | None = None
    name: str
    args: list[Argument] = Field(default_factory=list)
    type: str
    metadata: Metadata | None = None

    @property
    def response_key(self) -> str:
        return self.alias or self.name


class LinkedField(BaseModel):
    """A field selecting into a composite type.

    Attributes:
        alias: Optional response alias.
        name: Schema field name.
        args: Field arguments.
        type: Type reference of the field (may be wrapped, e.g. ``[Artwork]``).
        selections: Ordered child selections.
        metadata: Optional selection flags.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["LinkedField"] = "LinkedField"
    alias: str | None = None
    name: str
    args: list[Argument] = Field(default_factory=list)
    type: str
    selections: list[Selection] = Field(default_factory=list)
    metadata: Metadata | None = None

    @property
    def response_key(self) -> str:
        return self.alias or self.name


class InlineFragment(BaseModel):
    """``... on TypeCondition { ... }``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["InlineFragment"] = "InlineFragment"
    type_condition: str
    selections: list[Selection] = Field(default_factory=list)
    metadata: Metadata | None = None


class Condition(BaseModel):
    """Selections included only when a boolean variable matches.

    Attributes:
        condition: Name of the boolean variable.
        passing_value: ``True`` for ``@include``, ``False`` for ``@skip``.
        selections: Ordered child selections.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["Condition"] = "Condition"
    condition: str
    passing_value: bool = True
    selections: list[Selection] = Field(default_factory=list)
    metadata: Metadata | None = None


class FragmentSpread(BaseModel):
    """``...FragmentName``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["FragmentSpread"] = "FragmentSpread"
    name: str
    metadata: Metadata | None = None


class Fragment(BaseModel):
    """A named fragment definition.

    Fragments are never persisted: they carry no independently executable
    text.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["Fragment"] = "Fragment"
    name: str
    type: str
    selections: list[Selection] = Field(default_factory=list)
    metadata: Metadata | None = None


class Request(BaseModel):
    """An executable operation.

    Attributes:
        name: Operation name.
        operation: Operation type.
        type: Root type the operation selects from.
        variables: Variable definitions, in declaration order.
        selections: Ordered root selections.
        text: Printed operation text sent to the server.  Cleared when the
            operation is persisted.
        id: Persisted query id, set in place of ``text``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["Request"] = "Request"
    name: str
    operation: OperationKind = "query"
    type: str = "Query"
    variables: list[VariableDefinition] = Field(default_factory=list)
    selections: list[Selection] = Field(default_factory=list)
    text: str | None = None
    id: str | None = None
    metadata: Metadata | None = None


class BatchRequest(BaseModel):
    """Several operations emitted into a single artifact."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["BatchRequest"] = "BatchRequest"
    name: str
    requests: list[Request] = Field(default_factory=list)
    metadata: Metadata | None = None


Selection = Annotated[
    Union[ScalarField, LinkedField, InlineFragment, Condition, FragmentSpread],
    Field(discriminator="kind"),
]

Document = Annotated[
    Union[Fragment, Request, BatchRequest],
    Field(discriminator="kind"),
]

#: Nodes that own an ordered list of selections.
SelectionParent = Union[LinkedField, InlineFragment, Condition, Fragment, Request]

# Resolve forward references created by the recursive selection types.
LinkedField.model_rebuild()
InlineFragment.model_rebuild()
Condition.model_rebuild()
Fragment.model_rebuild()
Request.model_rebuild()
BatchRequest.model_rebuild()

document_adapter: TypeAdapter[Fragment | Request | BatchRequest] = TypeAdapter(Document)


def document_from_dict(data: dict[str, Any]) -> Fragment | Request | BatchRequest:
    """Validate a plain mapping into the matching document variant."""
    return document_adapter.validate_python(data)
