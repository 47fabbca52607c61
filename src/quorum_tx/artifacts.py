"""Loading of compiled contract byte code."""

from __future__ import annotations

import logging
import string
from pathlib import Path

from .exceptions import PayloadEncodingError

logger = logging.getLogger(__name__)

_HEX_DIGITS = frozenset(string.hexdigits)


class ArtifactStore:
    """Read ``<Name>.bin`` files produced by ``solc --bin``.

    The package ships only the Solidity sources in ``quorum_tx/sol``; the
    compiled output lives in a directory supplied by the caller.
    """

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)
        self._cache: dict[str, str] = {}

    @property
    def directory(self) -> Path:
        return self._directory

    def bytecode(self, name: str) -> str:
        """Return ``0x`` prefixed creation byte code for ``name``."""

        if name in self._cache:
            return self._cache[name]

        resource = self._directory / f"{name}.bin"
        try:
            raw = resource.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Unable to read artifact %s from %s", name, self._directory)
            raise PayloadEncodingError(
                f"Can't find resource {name}.bin",
                resource=str(resource),
                details={"error": str(exc)},
            ) from exc

        code = raw.strip()
        if code.startswith("0x"):
            code = code[2:]
        if not code or len(code) % 2 or not _HEX_DIGITS.issuperset(code):
            raise PayloadEncodingError(
                f"Resource {name}.bin does not contain hex byte code",
                resource=str(resource),
            )

        self._cache[name] = f"0x{code}"
        return self._cache[name]
