"""Unit tests for the default tag finder and SourceFile snapshots."""

from __future__ import annotations

import pytest

from graftql.errors import ParseError
from graftql.extract.tags import (
    SourceFile,
    TagFinderOptions,
    content_hash,
    find_graphql_tags,
    module_name_for,
)

_OPTIONS = TagFinderOptions()
_NO_VALIDATION = TagFinderOptions(validate_names=False)

_ARTIST_SOURCE = '''\
from graftql import graphql

Q = graphql("query ArtistQuery { artist { name } }")

container = create_container(artist=graphql("""
    fragment Artist_artist on Artist { name }
"""))
'''


def test_finds_tags_in_source_order():
    tags = find_graphql_tags(_ARTIST_SOURCE, "app/Artist.py", _OPTIONS)
    assert [t.key_name for t in tags] == ["Q", "artist"]
    assert tags[0].template == "query ArtistQuery { artist { name } }"
    assert "fragment Artist_artist" in tags[1].template


def test_tag_position_is_one_based():
    tags = find_graphql_tags(_ARTIST_SOURCE, "app/Artist.py", _OPTIONS)
    assert (tags[0].line, tags[0].column) == (3, 14)
    assert tags[1].line == 5


def test_quoted_key_binding():
    text = "fragments = {'user': graphql('fragment Profile_user on User { name }')}"
    (tag,) = find_graphql_tags(text, "Profile.py", _OPTIONS)
    assert tag.key_name == "user"


def test_operation_name_must_start_with_module_name():
    text = 'Q = graphql("query OtherQuery { me { id } }")'
    with pytest.raises(ParseError) as exc_info:
        find_graphql_tags(text, "Artist.py", _OPTIONS)
    assert exc_info.value.source == "Artist.py"
    assert exc_info.value.line == 1


def test_keyed_fragment_must_match_key():
    text = 'container(user=graphql("fragment Artist_artist on User { id }"))'
    with pytest.raises(ParseError, match="Artist_user"):
        find_graphql_tags(text, "Artist.py", _OPTIONS)


def test_validation_can_be_disabled():
    text = 'Q = graphql("query OtherQuery { me { id } }")'
    assert len(find_graphql_tags(text, "Artist.py", _NO_VALIDATION)) == 1


def test_module_name_override():
    text = 'Q = graphql("query ScreenQuery { me { id } }")'
    options = TagFinderOptions(module_name="Screen")
    assert len(find_graphql_tags(text, "other.py", options)) == 1


def test_module_name_for_strips_extensions():
    assert module_name_for("src/ArtistView.screen.py") == "ArtistView"


def test_source_file_read(tmp_path):
    (tmp_path / "a.py").write_text("graphql")
    snapshot = SourceFile.read(tmp_path, "a.py")
    assert snapshot.exists
    assert snapshot.hash == content_hash("graphql")


def test_source_file_read_missing(tmp_path):
    snapshot = SourceFile.read(tmp_path, "missing.py")
    assert not snapshot.exists
    assert snapshot.hash is None
