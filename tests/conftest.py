"""
Pytest configuration for contract-gate test suite.

Fixtures and helpers shared across all tests.
"""

import json
from pathlib import Path

import pytest

from contract_gate.contracts import ContractStore
from contract_gate.routing import EndpointResolver, HostIndex
from contract_gate.validation import RequestValidator


SAMPLE_SPECS_DIR = Path(__file__).parent.parent / "api_specs"


def album_document():
    """Contract for api.example.com with base path /v1."""
    return {
        "openapi": "3.0.3",
        "info": {"title": "Albums", "version": "1.0"},
        "servers": [{"url": "https://api.example.com/v1"}],
        "paths": {
            "/albums/{id}/tracks": {
                "get": {
                    "operationId": "getAlbumTracks",
                    "parameters": [
                        {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}},
                        {"name": "market", "in": "query", "schema": {"type": "string"}},
                        {"name": "limit", "in": "query", "schema": {"type": "integer"}},
                        {"name": "offset", "in": "query", "schema": {"type": "integer"}},
                    ],
                }
            },
            "/albums/{id}": {
                "get": {"operationId": "getAlbum"},
            },
            "/albums/latest": {
                "post": {"operationId": "refreshLatest"},
            },
            "/search": {
                "get": {
                    "operationId": "search",
                    "parameters": [
                        {"name": "type", "in": "query", "required": True, "schema": {"type": "string"}},
                        {"name": "explicit", "in": "query", "schema": {"type": "boolean"}},
                        {"name": "ids", "in": "query", "schema": {"type": "array"}},
                        {"name": "score", "in": "query", "schema": {"type": "number"}},
                        {"name": "Authorization", "in": "header", "required": True,
                         "schema": {"type": "string"}},
                    ],
                }
            },
            "/playlists": {
                "post": {
                    "operationId": "createPlaylist",
                    "requestBody": {
                        "required": True,
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/Playlist"}
                            }
                        },
                    },
                }
            },
        },
        "components": {
            "schemas": {
                "Playlist": {
                    "type": "object",
                    "required": ["name"],
                    "properties": {
                        "name": {"type": "string"},
                        "public": {"type": "boolean"},
                        "position": {"type": "integer"},
                        "rating": {"type": "number"},
                        "tags": {"type": "array", "items": {"type": "string"}},
                        "owner": {
                            "type": "object",
                            "properties": {"id": {"type": "string"}},
                        },
                        "notes": {"description": "free-form, no declared type"},
                    },
                }
            }
        },
    }


def write_document(directory: Path, name: str, document) -> Path:
    """Write a contract document as JSON and return its path."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(json.dumps(document))
    return path


@pytest.fixture
def contracts_dir(tmp_path):
    """Directory holding the album contract."""
    directory = tmp_path / "contracts"
    write_document(directory, "albums.json", album_document())
    return directory


@pytest.fixture
def store(contracts_dir):
    """Contract store over the album contract."""
    return ContractStore(contracts_dir)


@pytest.fixture
def host_index(store):
    """Host index over the album contract."""
    return HostIndex.build(store.contracts)


@pytest.fixture
def resolver(host_index):
    """Endpoint resolver over the album contract."""
    return EndpointResolver(host_index)


@pytest.fixture
def validator():
    """Request validator."""
    return RequestValidator()
