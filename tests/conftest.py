"""Shared pytest fixtures for graftql unit tests."""
from __future__ import annotations

import pytest

from graftql.codegen.directory import CodegenDirectory
from graftql.codegen.writer import ArtifactWriter
from graftql.schema.type_system import TypeSystem
from tests.fixtures import load_type_system


@pytest.fixture(scope="session")
def schema() -> TypeSystem:
    """Schema whose ``Node`` interface declares ``id``."""
    return load_type_system()


@pytest.fixture(scope="session")
def custom_id_schema() -> TypeSystem:
    """Schema whose ``Node`` interface declares ``__id``."""
    return load_type_system("custom_id_schema")


@pytest.fixture
def directory(tmp_path) -> CodegenDirectory:
    return CodegenDirectory(tmp_path / "__generated__")


@pytest.fixture
def writer(directory: CodegenDirectory) -> ArtifactWriter:
    return ArtifactWriter(directory)
