"""Pydantic models for the read-only GraphQL type system.

The ``TypeSystem`` is produced by the caller (schema loading and validation
are not graftql's concern) and shared by every transform.  All lookups are
pure reads; the models are frozen so no component can mutate the schema
another component is aliasing.

Type references are plain GraphQL type strings such as ``"ID!"``,
``"[Artwork]"`` or ``"Node"``.  Use :func:`named_type` to strip the list and
non-null wrappers.
"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TypeKind = Literal["OBJECT", "INTERFACE", "UNION", "SCALAR", "ENUM", "INPUT_OBJECT"]

COMPOSITE_KINDS: frozenset[str] = frozenset({"OBJECT", "INTERFACE", "UNION"})
ABSTRACT_KINDS: frozenset[str] = frozenset({"INTERFACE", "UNION"})


def named_type(type_ref: str) -> str:
    """Strip list and non-null wrappers from a type reference.

    ``"[Artwork!]!"`` becomes ``"Artwork"``.
    """
    return type_ref.replace("[", "").replace("]", "").replace("!", "").strip()


class FieldInfo(BaseModel):
    """A field declared on an object or interface type.

    Attributes:
        name: Field name.
        type: GraphQL type reference (e.g. ``'ID!'``, ``'[Artwork]'``).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    type: str

    @property
    def named_type(self) -> str:
        """Returns the unwrapped type name of this field."""
        return named_type(self.type)


class TypeInfo(BaseModel):
    """A named type in the schema.

    Attributes:
        name: Type name.
        kind: GraphQL type kind.
        fields: Declared fields (objects and interfaces only).
        interfaces: Interfaces this object or interface implements.
        possible_types: Member types (unions only).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    kind: TypeKind
    fields: list[FieldInfo] = Field(default_factory=list)
    interfaces: list[str] = Field(default_factory=list)
    possible_types: list[str] = Field(default_factory=list)

    @property
    def is_composite(self) -> bool:
        return self.kind in COMPOSITE_KINDS

    @property
    def is_abstract(self) -> bool:
        return self.kind in ABSTRACT_KINDS

    @property
    def can_have_selections(self) -> bool:
        """True for object and interface types, which declare fields."""
        return self.kind in ("OBJECT", "INTERFACE")

    def get_field(self, name: str) -> FieldInfo | None:
        """Returns the FieldInfo named ``name``, or ``None``."""
        for field in self.fields:
            if field.name == name:
                return field
        return None


class TypeSystem(BaseModel):
    """The validated schema every transform reads from.

    Attributes:
        types: All named types.
        query_type: Name of the query root type.
        mutation_type: Name of the mutation root type, if any.
        subscription_type: Name of the subscription root type, if any.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    types: list[TypeInfo]
    query_type: str = "Query"
    mutation_type: str | None = None
    subscription_type: str | None = None

    def get_type(self, name: str) -> TypeInfo | None:
        """Returns the TypeInfo for the given (unwrapped) name, or ``None``."""
        for type_info in self.types:
            if type_info.name == name:
                return type_info
        return None

    def resolve(self, type_ref: str) -> TypeInfo | None:
        """Returns the TypeInfo for a possibly-wrapped type reference."""
        return self.get_type(named_type(type_ref))

    def has_field(self, type_name: str, field_name: str) -> bool:
        """True when ``type_name`` declares a field named ``field_name``."""
        type_info = self.get_type(type_name)
        return type_info is not None and type_info.get_field(field_name) is not None

    def possible_types(self, abstract_name: str) -> list[TypeInfo]:
        """Returns the concrete object types an abstract type may resolve to.

        Union members are returned in declaration order; interface
        implementations in schema order.
        """
        abstract = self.get_type(abstract_name)
        if abstract is None or not abstract.is_abstract:
            return []
        if abstract.kind == "UNION":
            members = [self.get_type(name) for name in abstract.possible_types]
            return [m for m in members if m is not None]
        return [
            t for t in self.types
            if t.kind == "OBJECT" and abstract_name in t.interfaces
        ]

    def implements_interface(self, type_name: str, interface_name: str) -> bool:
        """True when ``type_name`` declares that it implements ``interface_name``."""
        type_info = self.get_type(type_name)
        return type_info is not None and interface_name in type_info.interfaces

    def may_implement(self, abstract_name: str, interface_name: str) -> bool:
        """True when any possible type of ``abstract_name`` implements the interface."""
        return any(
            interface_name in t.interfaces for t in self.possible_types(abstract_name)
        )

    @property
    def type_names(self) -> list[str]:
        """Returns all type names in the schema."""
        return [t.name for t in self.types]
