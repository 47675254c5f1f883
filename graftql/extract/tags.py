"""Source files, extracted tags, and the default tag finder.

A *tag* is a GraphQL template embedded in application source through a call
to ``graphql(...)``::

    ArtistQuery = graphql('''
        query ArtistQuery {
          artist(slug: "banksy") { name }
        }
    ''')

    container = create_container(user=graphql('''
        fragment ArtistView_user on User { name }
    '''))

The name bound by ``name = graphql(...)`` or ``"name": graphql(...)`` becomes
the tag's ``key_name``.
"""
from __future__ import annotations

import hashlib
import re
from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from graftql.errors import ParseError, SourceIOError

_TAG_PATTERN = re.compile(
    r"""(?:(?P<key>\w+)\s*=\s*|["'](?P<qkey>\w+)["']\s*:\s*)?"""
    r"""\bgraphql\(\s*[rR]?(?P<quote>\"\"\"|'''|"|')(?P<template>.*?)(?P=quote)\s*\)""",
    re.DOTALL,
)
_DEFINITION_PATTERN = re.compile(r"\b(query|mutation|subscription|fragment)\s+([_A-Za-z]\w*)")


class SourceFile(BaseModel):
    """Immutable snapshot of a source file for one compile pass.

    Attributes:
        rel_path: Path relative to the source root; the file's identity.
        exists: Whether the file existed when the snapshot was taken.
        hash: md5 hex digest of the file's bytes (``None`` when missing).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    rel_path: str
    exists: bool = True
    hash: str | None = None

    @classmethod
    def read(cls, base_dir: Path | str, rel_path: str) -> SourceFile:
        """Snapshot ``base_dir / rel_path``.

        Raises:
            SourceIOError: If the file exists but cannot be read.
        """
        path = Path(base_dir) / rel_path
        if not path.is_file():
            return cls(rel_path=rel_path, exists=False)
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise SourceIOError(str(path), str(exc)) from exc
        return cls(rel_path=rel_path, exists=True, hash=content_hash(content))


class ExtractedTag(BaseModel):
    """A template found in a source file.

    Attributes:
        template: Raw GraphQL text.
        key_name: Name the template is bound to, if any.
        line: 1-based line of the template's first character.
        column: 1-based column of the template's first character.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    template: str
    key_name: str | None = None
    line: int = 1
    column: int = 1


class TagFinderOptions(BaseModel):
    """Options passed to a tag finder.

    Attributes:
        validate_names: Enforce that definition names are prefixed with the
            module name.  This is the only option that affects the tag cache
            key.
        module_name: Override for the module name (defaults to the file stem).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    validate_names: bool = True
    module_name: str | None = None


#: ``(text, path, options) -> tags``.  Must be pure: equal inputs, equal output.
TagFinder = Callable[[str, str, TagFinderOptions], list[ExtractedTag]]


def content_hash(content: bytes | str) -> str:
    """Return the md5 hex digest used to identify file contents."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.md5(content).hexdigest()


def find_graphql_tags(text: str, path: str, options: TagFinderOptions) -> list[ExtractedTag]:
    """Find every ``graphql(...)`` template in Python source ``text``.

    Args:
        text: Source file contents.
        path: Path of the file, used for the module name and error context.
        options: Finder options.

    Returns:
        Tags in source order.

    Raises:
        ParseError: If ``options.validate_names`` is set and a definition name
            does not follow the module naming convention.
    """
    tags: list[ExtractedTag] = []
    for match in _TAG_PATTERN.finditer(text):
        offset = match.start("template")
        line = text.count("\n", 0, offset) + 1
        column = offset - (text.rfind("\n", 0, offset) + 1) + 1
        tag = ExtractedTag(
            template=match.group("template"),
            key_name=match.group("key") or match.group("qkey"),
            line=line,
            column=column,
        )
        if options.validate_names:
            _validate_names(tag, options.module_name or module_name_for(path), path)
        tags.append(tag)
    return tags


def module_name_for(path: str) -> str:
    """``src/ArtistView.screen.py`` -> ``ArtistView``."""
    return Path(path).name.split(".", 1)[0]


def _validate_names(tag: ExtractedTag, module_name: str, path: str) -> None:
    for match in _DEFINITION_PATTERN.finditer(tag.template):
        keyword, name = match.groups()
        if keyword == "fragment" and tag.key_name:
            expected = f"{module_name}_{tag.key_name}"
            if name != expected:
                raise ParseError(
                    f"Expected fragment in '{path}' to be named '{expected}', got '{name}'.",
                    source=path,
                    line=tag.line,
                    column=tag.column,
                )
        elif not name.startswith(module_name):
            raise ParseError(
                f"Expected {keyword} name '{name}' in '{path}' to start with "
                f"module name '{module_name}'.",
                source=path,
                line=tag.line,
                column=tag.column,
            )
