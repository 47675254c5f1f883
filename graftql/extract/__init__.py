"""graftql extraction layer: source files -> tags -> IR documents."""
from graftql.extract.source_parser import ParseReport, QueryParser, SourceModuleParser
from graftql.extract.tag_cache import CacheStats, TagCache, cache_key
from graftql.extract.tags import (
    ExtractedTag,
    SourceFile,
    TagFinder,
    TagFinderOptions,
    content_hash,
    find_graphql_tags,
)

__all__ = [
    "ParseReport",
    "QueryParser",
    "SourceModuleParser",
    "CacheStats",
    "TagCache",
    "cache_key",
    "ExtractedTag",
    "SourceFile",
    "TagFinder",
    "TagFinderOptions",
    "content_hash",
    "find_graphql_tags",
]
