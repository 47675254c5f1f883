"""graftql schema models: TypeSystem and identity field resolution."""
from graftql.schema.identity import (
    DEFAULT_ID_FIELD,
    ID_SCALAR,
    NODE_INTERFACE,
    IdentityFieldResolver,
    node_id_field_definition,
)
from graftql.schema.type_system import FieldInfo, TypeInfo, TypeSystem, named_type

__all__ = [
    "DEFAULT_ID_FIELD",
    "ID_SCALAR",
    "NODE_INTERFACE",
    "IdentityFieldResolver",
    "node_id_field_definition",
    "FieldInfo",
    "TypeInfo",
    "TypeSystem",
    "named_type",
]
