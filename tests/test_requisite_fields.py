"""Unit tests for the requisite field transform."""

from __future__ import annotations

import pytest

from graftql import transform_documents
from graftql.compile.context import CompilerContext
from graftql.compile.registry import TransformRegistry
from graftql.errors import CompilationError, SchemaAmbiguityError
from graftql.ir.metadata import Metadata
from graftql.ir.nodes import (
    BatchRequest,
    Condition,
    Fragment,
    FragmentSpread,
    InlineFragment,
    LinkedField,
    Request,
    ScalarField,
)
from graftql.schema.type_system import TypeSystem
from graftql.transform.requisite_fields import transform
from tests.fixtures import load_type_system

SCHEMA = load_type_system()
CUSTOM_SCHEMA = load_type_system("custom_id_schema")


def _scalar(name: str, type: str = "String", **kwargs) -> ScalarField:
    return ScalarField(name=name, type=type, **kwargs)


def _query(*selections, name: str = "TestQuery") -> Request:
    return Request(name=name, selections=list(selections))


def _run(schema: TypeSystem, *documents) -> CompilerContext:
    return transform(CompilerContext.from_documents(schema, documents))


def _root_field(context: CompilerContext, name: str = "TestQuery") -> LinkedField:
    return context.get(name).selections[0]


def _names(selections) -> list[str]:
    out = []
    for s in selections:
        if isinstance(s, InlineFragment):
            out.append(f"... on {s.type_condition}")
        elif isinstance(s, Condition):
            out.append(f"@{s.condition}")
        else:
            out.append(s.name)
    return out


# ---------------------------------------------------------------------------
# Identity on concrete and interface types
# ---------------------------------------------------------------------------


def test_appends_identity_and_typename_to_node_interface_selection():
    query = _query(LinkedField(name="story", type="Node", selections=[_scalar("lastName")]))
    story = _root_field(_run(SCHEMA, query))
    assert _names(story.selections) == ["__typename", "lastName", "id"]
    id_field = story.selections[2]
    assert id_field.type == "ID!"
    assert id_field.metadata.is_identity is True


def test_second_run_is_a_no_op():
    query = _query(LinkedField(name="story", type="Node", selections=[_scalar("lastName")]))
    once = _run(SCHEMA, query)
    twice = transform(once)
    assert twice.documents() == once.documents()


def test_existing_identity_selection_is_flagged_not_duplicated():
    existing = _scalar("id", type="ID!", metadata=Metadata.from_mapping({"custom": True}))
    query = _query(LinkedField(name="me", type="User", selections=[existing, _scalar("name")]))
    me = _root_field(_run(SCHEMA, query))
    assert _names(me.selections) == ["id", "name"]
    assert me.selections[0].metadata.to_mapping() == {"custom": True, "isIdentity": True}


def test_aliased_identity_does_not_count():
    aliased = _scalar("id", type="ID!", alias="key")
    query = _query(LinkedField(name="me", type="User", selections=[aliased]))
    me = _root_field(_run(SCHEMA, query))
    assert _names(me.selections) == ["id", "id"]
    assert me.selections[0].alias == "key"
    assert me.selections[0].metadata is None
    assert me.selections[1].alias is None


def test_type_without_identity_field_is_left_alone():
    query = _query(
        LinkedField(
            name="me",
            type="User",
            selections=[LinkedField(name="address", type="Address", selections=[_scalar("city")])],
        )
    )
    address = _root_field(_run(SCHEMA, query)).selections[0]
    assert _names(address.selections) == ["city"]


def test_nested_linked_fields_are_transformed():
    query = _query(
        LinkedField(
            name="me",
            type="User",
            selections=[LinkedField(name="friends", type="[User]", selections=[_scalar("name")])],
        )
    )
    me = _root_field(_run(SCHEMA, query))
    assert _names(me.selections) == ["friends", "id"]
    assert _names(me.selections[0].selections) == ["name", "id"]


def test_fragment_root_gets_identity():
    fragment = Fragment(name="UserView_user", type="User", selections=[_scalar("name")])
    result = _run(SCHEMA, fragment).get("UserView_user")
    assert _names(result.selections) == ["name", "id"]


def test_fragment_root_on_abstract_type_gets_no_typename():
    fragment = Fragment(name="ActorView_actor", type="Actor", selections=[_scalar("name")])
    result = _run(SCHEMA, fragment).get("ActorView_actor")
    assert _names(result.selections) == ["name", "... on Node"]


def test_selections_inside_inline_fragments_and_conditions():
    query = _query(
        LinkedField(
            name="node",
            type="Node",
            selections=[
                InlineFragment(
                    type_condition="User",
                    selections=[
                        LinkedField(name="friends", type="[User]", selections=[_scalar("name")])
                    ],
                ),
                Condition(
                    condition="withStory",
                    selections=[LinkedField(name="author", type="Actor", selections=[])],
                ),
            ],
        )
    )
    node = _root_field(_run(SCHEMA, query))
    assert _names(node.selections) == ["__typename", "... on User", "@withStory", "id"]
    friends = node.selections[1].selections[0]
    author = node.selections[2].selections[0]
    assert _names(friends.selections) == ["name", "id"]
    assert _names(author.selections) == ["__typename", "... on Node"]


def test_batch_request_members_are_transformed():
    batch = BatchRequest(
        name="Batch",
        requests=[
            _query(LinkedField(name="me", type="User", selections=[]), name="First"),
            _query(LinkedField(name="story", type="Node", selections=[]), name="Second"),
        ],
    )
    result = _run(SCHEMA, batch).get("Batch")
    assert _names(result.requests[0].selections[0].selections) == ["id"]
    assert _names(result.requests[1].selections[0].selections) == ["__typename", "id"]


def test_fragment_spreads_are_preserved():
    query = _query(
        LinkedField(name="me", type="User", selections=[FragmentSpread(name="UserView_user")])
    )
    me = _root_field(_run(SCHEMA, query))
    assert isinstance(me.selections[0], FragmentSpread)
    assert _names(me.selections) == ["UserView_user", "id"]


# ---------------------------------------------------------------------------
# Discriminator on abstract types
# ---------------------------------------------------------------------------


def test_typename_added_first_on_interface():
    query = _query(LinkedField(name="actor", type="Actor", selections=[_scalar("name")]))
    actor = _root_field(_run(SCHEMA, query))
    assert _names(actor.selections) == ["__typename", "name", "... on Node"]
    assert actor.selections[0].type == "String!"


def test_existing_typename_is_moved_first_not_duplicated():
    query = _query(
        LinkedField(
            name="story",
            type="Node",
            selections=[_scalar("lastName"), _scalar("__typename", type="String!")],
        )
    )
    story = _root_field(_run(SCHEMA, query))
    assert _names(story.selections) == ["__typename", "lastName", "id"]


def test_aliased_typename_is_sorted_first_but_unaliased_one_is_added():
    aliased = _scalar("__typename", type="String!", alias="kind")
    query = _query(LinkedField(name="actor", type="Actor", selections=[_scalar("name"), aliased]))
    actor = _root_field(_run(SCHEMA, query))
    keys = [getattr(s, "alias", None) or _names([s])[0] for s in actor.selections]
    assert keys == ["kind", "__typename", "name", "... on Node"]


def test_union_gets_node_fragment_and_member_fragments():
    query = _query(LinkedField(name="search", type="[SearchResult]", selections=[]))
    search = _root_field(_run(SCHEMA, query))
    assert _names(search.selections) == ["__typename", "... on Node", "... on Robot"]
    for fragment in search.selections[1:]:
        (id_field,) = fragment.selections
        assert id_field.name == "id"
        assert id_field.metadata.is_identity is True


def test_union_without_identity_members_gets_only_typename():
    query = _query(LinkedField(name="media", type="[Media]", selections=[]))
    media = _root_field(_run(SCHEMA, query))
    assert _names(media.selections) == ["__typename"]


def test_union_fragments_not_duplicated_on_second_run():
    query = _query(LinkedField(name="search", type="[SearchResult]", selections=[]))
    once = _run(SCHEMA, query)
    twice = transform(once)
    assert twice.documents() == once.documents()


def test_existing_member_fragment_is_reused():
    existing = InlineFragment(
        type_condition="Robot",
        selections=[_scalar("model"), _scalar("id", type="ID!")],
    )
    query = _query(LinkedField(name="search", type="[SearchResult]", selections=[existing]))
    search = _root_field(_run(SCHEMA, query))
    assert _names(search.selections) == ["__typename", "... on Robot", "... on Node"]
    robot = search.selections[1]
    assert _names(robot.selections) == ["model", "id"]
    assert robot.selections[1].metadata.is_identity is True


# ---------------------------------------------------------------------------
# Custom identity field
# ---------------------------------------------------------------------------


def test_custom_identity_on_union_without_node_members():
    query = _query(
        LinkedField(
            name="artwork",
            type="Artwork",
            selections=[_scalar("__typename", type="String!")],
        )
    )
    artwork = _root_field(_run(CUSTOM_SCHEMA, query))
    assert _names(artwork.selections) == ["__typename", "... on Painting", "... on Statue"]
    for fragment in artwork.selections[1:]:
        assert _names(fragment.selections) == ["__id"]


def test_custom_identity_on_object():
    query = _query(LinkedField(name="artist", type="Artist", selections=[_scalar("name")]))
    artist = _root_field(_run(CUSTOM_SCHEMA, query))
    assert _names(artist.selections) == ["name", "__id"]


def test_custom_identity_keeps_existing_default_id():
    existing = _scalar("id", type="ID!")
    query = _query(LinkedField(name="artist", type="Artist", selections=[existing]))
    artist = _root_field(_run(CUSTOM_SCHEMA, query))
    assert _names(artist.selections) == ["id", "__id"]
    assert artist.selections[0].metadata is None
    assert artist.selections[1].metadata.is_identity is True


def test_custom_identity_mixed_union():
    query = _query(
        LinkedField(
            name="gallery",
            type="Gallery",
            selections=[LinkedField(name="exhibits", type="[Exhibit]", selections=[])],
        )
    )
    exhibits = _root_field(_run(CUSTOM_SCHEMA, query)).selections[0]
    assert _names(exhibits.selections) == [
        "__typename",
        "... on Node",
        "... on Painting",
        "... on Sketch",
    ]
    assert _names(exhibits.selections[1].selections) == ["__id"]
    assert _names(exhibits.selections[3].selections) == ["id"]



# ---------------------------------------------------------------------------
# Idempotence and duplicate-free output
# ---------------------------------------------------------------------------


def _artwork_query():
    return _query(LinkedField(name="artwork", type="Artwork", selections=[]), name="ArtworkQuery")


def _exhibits_query():
    return _query(
        LinkedField(
            name="gallery",
            type="Gallery",
            selections=[LinkedField(name="exhibits", type="[Exhibit]", selections=[])],
        ),
        name="ExhibitsQuery",
    )


def _actor_fragment():
    return Fragment(
        name="ActorView_actor",
        type="Actor",
        selections=[
            _scalar("name"),
            InlineFragment(type_condition="User", selections=[_scalar("name")]),
        ],
    )


def _search_query():
    return _query(
        LinkedField(
            name="search",
            type="[SearchResult]",
            selections=[
                InlineFragment(
                    type_condition="Robot",
                    selections=[_scalar("model"), _scalar("id", type="ID!", alias="robotId")],
                ),
                Condition(
                    condition="withUser",
                    selections=[
                        InlineFragment(
                            type_condition="User",
                            selections=[LinkedField(name="friends", type="[User]")],
                        )
                    ],
                ),
            ],
        ),
        name="SearchQuery",
    )


_CASES = [
    pytest.param(CUSTOM_SCHEMA, _artwork_query(), id="custom-identity-union"),
    pytest.param(CUSTOM_SCHEMA, _exhibits_query(), id="mixed-node-union"),
    pytest.param(SCHEMA, _actor_fragment(), id="fragment-on-interface"),
    pytest.param(SCHEMA, _search_query(), id="union-with-nested-conditions"),
]


def _selection_lists(selections):
    yield selections
    for selection in selections:
        yield from _selection_lists(getattr(selection, "selections", []))


def _duplicate_keys(selections) -> list[str]:
    seen, duplicates = set(), []
    for selection in selections:
        if isinstance(selection, ScalarField) and selection.alias is None:
            key = selection.name
        elif isinstance(selection, InlineFragment):
            inner = sorted(
                s.name for s in selection.selections if isinstance(s, ScalarField) and s.alias is None
            )
            key = f"... on {selection.type_condition} {inner}"
        else:
            continue
        if key in seen:
            duplicates.append(key)
        seen.add(key)
    return duplicates


@pytest.mark.parametrize("schema,document", _CASES)
def test_transform_is_idempotent(schema, document):
    once = _run(schema, document)
    assert transform(once).documents() == once.documents()


@pytest.mark.parametrize("schema,document", _CASES)
def test_transform_output_has_no_duplicate_selections(schema, document):
    (result,) = _run(schema, document).documents()
    for selections in _selection_lists(result.selections):
        assert _duplicate_keys(selections) == []

# ---------------------------------------------------------------------------
# Errors and registration
# ---------------------------------------------------------------------------


def test_ambiguous_node_fails_before_visiting():
    schema = TypeSystem.model_validate(
        {
            "types": [
                {"name": "ID", "kind": "SCALAR"},
                {"name": "Query", "kind": "OBJECT", "fields": []},
                {
                    "name": "Node",
                    "kind": "INTERFACE",
                    "fields": [{"name": "id", "type": "ID!"}, {"name": "key", "type": "ID"}],
                },
            ]
        }
    )
    with pytest.raises(SchemaAmbiguityError):
        _run(schema, _query())


def test_linked_field_on_scalar_type_raises():
    query = _query(LinkedField(name="me", type="String", selections=[]))
    with pytest.raises(CompilationError):
        _run(SCHEMA, query)


def test_transform_does_not_mutate_input_context():
    query = _query(LinkedField(name="story", type="Node", selections=[_scalar("lastName")]))
    context = CompilerContext.from_documents(SCHEMA, [query])
    transform(context)
    assert context.get("TestQuery") is query
    assert _names(query.selections[0].selections) == ["lastName"]


def test_registered_by_name():
    assert "requisite_fields" in TransformRegistry.registered_transforms()
    query = _query(LinkedField(name="me", type="User", selections=[]))
    result = transform_documents([query], SCHEMA)
    assert _names(_root_field(result).selections) == ["id"]
