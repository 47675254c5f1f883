"""Unit tests for IR models, metadata merging, and printing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from graftql.ir.metadata import IDENTITY, Metadata, merge_metadata
from graftql.ir.nodes import (
    Argument,
    BatchRequest,
    Condition,
    Fragment,
    FragmentSpread,
    InlineFragment,
    LinkedField,
    Request,
    ScalarField,
    VariableDefinition,
    document_from_dict,
)
from graftql.ir.printer import print_document
from graftql.ir.selections import sort_discriminator_first, unaliased_selection_index


def _scalar(name: str, alias: str | None = None, metadata: Metadata | None = None) -> ScalarField:
    return ScalarField(name=name, alias=alias, type="String", metadata=metadata)


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


def test_metadata_from_mapping_splits_known_flags():
    metadata = Metadata.from_mapping({"custom": True, "isIdentity": True})
    assert metadata.is_identity is True
    assert metadata.extensions == {"custom": True}


def test_metadata_to_mapping_omits_unset_flags():
    assert Metadata.from_mapping({"custom": True}).to_mapping() == {"custom": True}


def test_merge_preserves_existing_extensions():
    existing = Metadata.from_mapping({"custom": True})
    merged = existing.merge(IDENTITY)
    assert merged.to_mapping() == {"custom": True, "isIdentity": True}


def test_merge_does_not_reset_flags_not_set_on_incoming():
    existing = Metadata(is_identity=True)
    merged = existing.merge(Metadata(extensions={"custom": 1}))
    assert merged.is_identity is True
    assert merged.extensions == {"custom": 1}


def test_merge_incoming_extensions_win():
    existing = Metadata(extensions={"a": 1, "b": 1})
    merged = existing.merge(Metadata(extensions={"b": 2}))
    assert merged.extensions == {"a": 1, "b": 2}


def test_merge_metadata_with_missing_existing():
    assert merge_metadata(None, IDENTITY) is IDENTITY


def test_metadata_is_frozen():
    with pytest.raises(ValidationError):
        IDENTITY.is_identity = False


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


def test_document_from_dict_dispatches_on_kind():
    node = document_from_dict(
        {
            "kind": "Request",
            "name": "StoryQuery",
            "selections": [
                {
                    "kind": "LinkedField",
                    "name": "story",
                    "type": "Node",
                    "selections": [{"kind": "ScalarField", "name": "lastName", "type": "String"}],
                }
            ],
        }
    )
    assert isinstance(node, Request)
    assert isinstance(node.selections[0], LinkedField)
    assert isinstance(node.selections[0].selections[0], ScalarField)


def test_unknown_selection_kind_rejected():
    with pytest.raises(ValidationError):
        document_from_dict(
            {
                "kind": "Fragment",
                "name": "F",
                "type": "User",
                "selections": [{"kind": "Directive", "name": "x"}],
            }
        )


def test_node_round_trips_through_json():
    node = Fragment(
        name="UserView_user",
        type="User",
        selections=[_scalar("id", metadata=IDENTITY), FragmentSpread(name="Other_user")],
    )
    assert document_from_dict(node.model_dump(mode="json")) == node


# ---------------------------------------------------------------------------
# Selection helpers
# ---------------------------------------------------------------------------


def test_unaliased_selection_ignores_aliases():
    selections = [_scalar("id", alias="key"), _scalar("name")]
    assert unaliased_selection_index(selections, "id") == -1
    assert unaliased_selection_index(selections, "name") == 1


def test_sort_discriminator_first_is_stable():
    selections = [_scalar("b"), _scalar("a"), _scalar("__typename"), _scalar("c")]
    names = [s.name for s in sort_discriminator_first(selections)]
    assert names == ["__typename", "b", "a", "c"]


# ---------------------------------------------------------------------------
# Printer
# ---------------------------------------------------------------------------


def test_print_request():
    node = Request(
        name="ArtistQuery",
        selections=[
            LinkedField(
                name="artist",
                type="Artist",
                args=[
                    Argument(name="slug", value="banksy"),
                    Argument(name="size", variable="size"),
                ],
                selections=[
                    _scalar("name"),
                    _scalar("name", alias="title"),
                    InlineFragment(type_condition="Node", selections=[_scalar("__id")]),
                    Condition(condition="withBio", selections=[_scalar("bio")]),
                    Condition(condition="short", passing_value=False, selections=[]),
                ],
            )
        ],
    )
    assert print_document(node) == (
        "query ArtistQuery {\n"
        '  artist(slug: "banksy", size: $size) {\n'
        "    name\n"
        "    title: name\n"
        "    ... on Node {\n"
        "      __id\n"
        "    }\n"
        "    ... @include(if: $withBio) {\n"
        "      bio\n"
        "    }\n"
        "    ... @skip(if: $short) {\n"
        "    }\n"
        "  }\n"
        "}"
    )


def test_print_request_with_variable_definitions():
    node = Request(
        name="SearchQuery",
        variables=[
            VariableDefinition(name="term", type="String!"),
            VariableDefinition(name="filters", type="[Filter!]", default_value=[{"kind": "ART"}]),
            VariableDefinition(name="withBio", type="Boolean", default_value=False),
        ],
        selections=[_scalar("a")],
    )
    assert print_document(node) == (
        'query SearchQuery($term: String!, $filters: [Filter!] = [{kind: "ART"}], '
        "$withBio: Boolean = false) {\n  a\n}"
    )


def test_print_fragment_with_spread():
    node = Fragment(name="A_user", type="User", selections=[FragmentSpread(name="B_user")])
    assert print_document(node) == "fragment A_user on User {\n  ...B_user\n}"


def test_print_batch_request_joins_operations():
    batch = BatchRequest(
        name="Batch",
        requests=[
            Request(name="First", selections=[_scalar("a")]),
            Request(name="Second", operation="mutation", type="Mutation", selections=[_scalar("b")]),
        ],
    )
    assert print_document(batch) == "query First {\n  a\n}\n\nmutation Second {\n  b\n}"
