"""
Local store of deployed token metadata.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger
from pydantic import TypeAdapter

from catcore.backends.base import LedgerBackend
from catcore.errors import TokenNotFound
from catcore.models import TokenMetadata

_METADATA_LIST = TypeAdapter(list[TokenMetadata])


class TokenRegistry:
    """
    Token metadata keyed by token id.

    Backed by a JSON file when ``path`` is given, in-memory otherwise.
    """

    def __init__(self, path: Path | None = None):
        self.path = path
        self._tokens: dict[str, TokenMetadata] = {}
        if path is not None and path.exists():
            self._load(path)

    def _load(self, path: Path) -> None:
        tokens = _METADATA_LIST.validate_json(path.read_bytes())
        self._tokens = {token.token_id: token for token in tokens}
        logger.debug(f"Loaded {len(self._tokens)} tokens from {path}")

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = _METADATA_LIST.dump_json(list(self._tokens.values()), by_alias=True, indent=2)
        self.path.write_bytes(data)

    def add(self, metadata: TokenMetadata) -> TokenMetadata:
        self._tokens[metadata.token_id] = metadata
        self._save()
        return metadata

    def find(self, token_id: str) -> TokenMetadata | None:
        return self._tokens.get(token_id)

    async def resolve(self, token_id: str, backend: LedgerBackend) -> TokenMetadata:
        """Local lookup first, then the backend's token index. Backend hits are cached."""
        metadata = self.find(token_id)
        if metadata is not None:
            return metadata

        metadata = await backend.get_token_metadata(token_id)
        if metadata is None:
            logger.error(f"No token found for tokenId: {token_id}")
            raise TokenNotFound(token_id)

        return self.add(metadata)

    def __len__(self) -> int:
        return len(self._tokens)
