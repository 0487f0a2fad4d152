from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .parsing import parse_key_set
from ...domain.exceptions import ConfigurationError
from ...domain.value_objects import VerificationKey
from ...logging import get_logger

logger = get_logger(__name__)


class LocalKeySet:
    """
    Static key set loaded once (typically at startup) and read-only afterwards.
    """

    def __init__(self, keys: Mapping[str, VerificationKey]) -> None:
        self._keys: Mapping[str, VerificationKey] = MappingProxyType(dict(keys))

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "LocalKeySet":
        return cls(parse_key_set(document))

    @classmethod
    def from_file(cls, path: str | Path) -> "LocalKeySet":
        """
        Load a JWKS JSON file.

        Raises:
            ConfigurationError if the file is unreadable or not a JWKS object.
        """
        try:
            document = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ConfigurationError(f"Cannot load key set from {path}: {exc}") from exc

        if not isinstance(document, Mapping):
            raise ConfigurationError(f"Key set file {path} is not a JWKS object")

        key_set = cls.from_document(document)
        logger.info("jwks.loaded", path=str(path), keys=len(key_set))
        return key_set

    def __len__(self) -> int:
        return len(self._keys)

    async def get_key(self, key_id: str) -> Optional[VerificationKey]:
        return self._keys.get(key_id)
