"""
Tests for the token metadata registry.
"""

from __future__ import annotations

import json

import pytest

from catcore.errors import TokenNotFound
from catcore.registry import TokenRegistry


def test_add_and_find(metadata) -> None:
    registry = TokenRegistry()
    registry.add(metadata)

    assert registry.find(metadata.token_id) == metadata
    assert registry.find("other_0") is None
    assert len(registry) == 1


def test_persists_to_file(tmp_path, metadata) -> None:
    path = tmp_path / "tokens.json"
    TokenRegistry(path).add(metadata)

    stored = json.loads(path.read_text())
    assert stored[0]["tokenId"] == metadata.token_id
    assert stored[0]["info"]["minterMd5"] == metadata.minter_md5

    reloaded = TokenRegistry(path)
    assert reloaded.find(metadata.token_id) == metadata


def test_missing_file_is_empty(tmp_path) -> None:
    assert len(TokenRegistry(tmp_path / "absent.json")) == 0


def test_loads_existing_file(tmp_path, metadata) -> None:
    path = tmp_path / "tokens.json"
    path.write_text(json.dumps([metadata.model_dump(mode="json", by_alias=True)]))

    registry = TokenRegistry(path)

    assert registry.path == path
    assert registry.find(metadata.token_id) == metadata


@pytest.mark.asyncio
async def test_resolve_local_first(ledger, registry, metadata) -> None:
    assert await registry.resolve(metadata.token_id, ledger) == metadata
    assert ledger.calls == []


@pytest.mark.asyncio
async def test_resolve_caches_backend_result(ledger, make_metadata) -> None:
    remote = make_metadata(token_id="remote_0")
    ledger.metadata[remote.token_id] = remote
    registry = TokenRegistry()

    assert await registry.resolve("remote_0", ledger) == remote
    assert await registry.resolve("remote_0", ledger) == remote
    assert ledger.calls == ["get_token_metadata"]


@pytest.mark.asyncio
async def test_resolve_unknown(ledger) -> None:
    with pytest.raises(TokenNotFound) as exc_info:
        await TokenRegistry().resolve("missing_0", ledger)
    assert exc_info.value.token_id == "missing_0"
