"""Identity field name resolution.

The identity field is the field whose value uniquely identifies an entity for
client-side normalization.  Its name is inflected from the node-like
interface: the ``Node`` interface must declare exactly one field of the
``ID`` scalar type, and that field's name becomes the identity field name for
the whole schema.  Schemas without a ``Node`` interface use ``id``.

Types that do not declare the inflected field may still carry the default
``id`` field; :meth:`IdentityFieldResolver.identity_field_for` falls back to
it.
"""
from __future__ import annotations

from graftql.errors import SchemaAmbiguityError
from graftql.schema.type_system import FieldInfo, TypeSystem

NODE_INTERFACE = "Node"
ID_SCALAR = "ID"
DEFAULT_ID_FIELD = "id"


class IdentityFieldResolver:
    """Resolves identity field names against a schema, once per schema.

    Args:
        schema: The type system to resolve against.

    Raises:
        SchemaAmbiguityError: If the ``Node`` interface declares zero or more
            than one field of type ``ID``.
    """

    def __init__(self, schema: TypeSystem) -> None:
        self._schema = schema
        node_field = node_id_field_definition(schema)
        self._field_name = node_field.name if node_field else DEFAULT_ID_FIELD

    @property
    def field_name(self) -> str:
        """The schema-wide identity field name (custom or default)."""
        return self._field_name

    @property
    def candidate_names(self) -> list[str]:
        """Identity names to try, custom first, then the default."""
        if self._field_name == DEFAULT_ID_FIELD:
            return [DEFAULT_ID_FIELD]
        return [self._field_name, DEFAULT_ID_FIELD]

    def identity_field_for(self, type_name: str) -> FieldInfo | None:
        """Return the identity field a type declares, or ``None``.

        The inflected custom name wins over the default ``id`` when a type
        declares both.
        """
        type_info = self._schema.get_type(type_name)
        if type_info is None:
            return None
        for name in self.candidate_names:
            field = type_info.get_field(name)
            if field is not None:
                return field
        return None

    def implements_node(self, type_name: str) -> bool:
        return self._schema.implements_interface(type_name, NODE_INTERFACE)


def node_id_field_definition(schema: TypeSystem) -> FieldInfo | None:
    """Return the single ``ID`` field of the ``Node`` interface.

    Returns ``None`` when the schema has no ``Node`` interface.

    Raises:
        SchemaAmbiguityError: If ``Node`` declares zero or several ID fields.
    """
    node = schema.get_type(NODE_INTERFACE)
    if node is None or node.kind != "INTERFACE":
        return None
    id_fields = [f for f in node.fields if f.named_type == ID_SCALAR]
    if len(id_fields) != 1:
        raise SchemaAmbiguityError(NODE_INTERFACE, [f.name for f in id_fields])
    return id_fields[0]
