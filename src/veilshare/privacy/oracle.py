"""Encryption oracle interface and a local AES-GCM implementation.

The registry never reads plaintexts back. It asks the oracle to wrap an
integer into an opaque ``Handle``, to let the registry keep using that
handle (``allow_self``), and to let specific principals decrypt it
(``allow_principal``). Handles are capability tokens: the registry stores
and forwards them and never branches on their contents.

``LocalEncryptionOracle`` is a self-contained collaborator for running the
registry without an external confidential-computation service:
- AES-256-GCM (from ``cryptography``) over the big-endian plaintext
- The bit width is bound into the ciphertext as associated data
- An in-memory access list per handle
"""

from __future__ import annotations

import base64
import logging
import os
import uuid
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..core.config import SUPPORTED_BIT_WIDTHS
from ..core.exceptions import AuthorizationError, ConfigException, OracleError

logger = logging.getLogger(__name__)

NONCE_SIZE = 12
KEY_SIZE = 32

# Principal the oracle records for allow_self grants
REGISTRY_PRINCIPAL = "veilshare:registry"


@dataclass(frozen=True)
class Handle:
    """Opaque reference to a wrapped value.

    Attributes:
        handle_id: Identifier issued by the oracle.
        blob: Opaque ciphertext bytes. Never interpreted by the registry.
    """

    handle_id: str
    blob: bytes

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON storage."""
        return {
            "handle_id": self.handle_id,
            "blob": base64.b64encode(self.blob).decode(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Handle:
        """Deserialize from dictionary."""
        return cls(
            handle_id=data["handle_id"],
            blob=base64.b64decode(data["blob"]),
        )

    def __repr__(self) -> str:
        return f"Handle({self.handle_id!r})"


@runtime_checkable
class EncryptionOracleClient(Protocol):
    """Operations the registry needs from the confidential-computation collaborator."""

    def wrap(self, plaintext: int, bit_width: int) -> Handle:
        """Wrap a plaintext integer of the given width into an opaque handle."""
        ...

    def allow_self(self, handle: Handle) -> None:
        """Grant the registry permanent use of a handle."""
        ...

    def allow_principal(self, handle: Handle, principal: str) -> None:
        """Grant a principal decryption capability over a handle. Idempotent."""
        ...


class LocalEncryptionOracle:
    """In-process EncryptionOracleClient backed by AES-256-GCM.

    The access list lives in memory; decryption is only possible through
    ``decrypt`` for principals that were allowed on the handle.
    """

    def __init__(self, key: bytes | None = None):
        if key is None:
            key = AESGCM.generate_key(bit_length=256)
        if len(key) != KEY_SIZE:
            raise ConfigException(f"Oracle key must be {KEY_SIZE} bytes, got {len(key)}")
        self._aesgcm = AESGCM(key)
        self._acl: dict[str, set[str]] = {}

    @classmethod
    def from_config(cls) -> LocalEncryptionOracle:
        """Build an oracle using VEILSHARE_ORACLE_KEY when it is set."""
        from ..core.config import get_config

        try:
            key = get_config().oracle_key_bytes
        except ValueError as e:
            raise ConfigException(f"Invalid oracle key: {e}", missing_vars=["VEILSHARE_ORACLE_KEY"]) from e
        return cls(key=key)

    def wrap(self, plaintext: int, bit_width: int) -> Handle:
        if bit_width not in SUPPORTED_BIT_WIDTHS:
            raise OracleError(f"Unsupported bit width: {bit_width}")
        if isinstance(plaintext, bool) or not isinstance(plaintext, int):
            raise OracleError(f"Plaintext must be an integer, got {type(plaintext).__name__}")
        if plaintext < 0 or plaintext >= 1 << bit_width:
            raise OracleError(f"Plaintext does not fit in {bit_width} bits")

        nonce = os.urandom(NONCE_SIZE)
        data = plaintext.to_bytes(bit_width // 8, "big")
        ciphertext = self._aesgcm.encrypt(nonce, data, _width_tag(bit_width))

        handle = Handle(handle_id=str(uuid.uuid4()), blob=nonce + ciphertext)
        self._acl[handle.handle_id] = set()
        logger.debug(f"Wrapped {bit_width}-bit value into handle {handle.handle_id}")
        return handle

    def allow_self(self, handle: Handle) -> None:
        self.allow_principal(handle, REGISTRY_PRINCIPAL)

    def allow_principal(self, handle: Handle, principal: str) -> None:
        # Handles restored from a snapshot get their access list rebuilt here
        self._acl.setdefault(handle.handle_id, set()).add(principal)

    def is_allowed(self, handle: Handle, principal: str) -> bool:
        return principal in self._acl.get(handle.handle_id, ())

    def allowed_principals(self, handle: Handle) -> set[str]:
        return set(self._acl.get(handle.handle_id, ()))

    def decrypt(self, handle: Handle, principal: str) -> int:
        """Recover the plaintext behind a handle for an allowed principal.

        Raises:
            AuthorizationError: If the principal was never allowed on the handle.
            OracleError: If the blob was not produced under this oracle's key.
        """
        if not self.is_allowed(handle, principal):
            raise AuthorizationError("Principal not allowed on handle", principal=principal)

        nonce, ciphertext = handle.blob[:NONCE_SIZE], handle.blob[NONCE_SIZE:]
        # Ciphertext carries a 16-byte tag after the plaintext bytes
        bit_width = (len(ciphertext) - 16) * 8
        try:
            data = self._aesgcm.decrypt(nonce, ciphertext, _width_tag(bit_width))
        except InvalidTag as e:
            raise OracleError(f"Handle {handle.handle_id} failed authentication") from e
        return int.from_bytes(data, "big")


def _width_tag(bit_width: int) -> bytes:
    return f"veilshare-u{bit_width}".encode()
