"""The platform authority: the single elevated principal."""

from __future__ import annotations

from dataclasses import dataclass

from ..core.exceptions import AuthorizationError
from ..core.guards import GuardResult, check


@dataclass(frozen=True)
class PlatformAuthority:
    """Principal fixed when the platform is initialized.

    Every owner-only check is ``caller == authority.principal``.
    """

    principal: str

    def __post_init__(self) -> None:
        if not self.principal:
            raise ValueError("Platform authority principal must be non-empty")

    def is_authority(self, principal: str) -> bool:
        return principal == self.principal

    def guard(self, caller: str, message: str = "Not authorized") -> GuardResult:
        return check(
            self.is_authority(caller),
            message,
            lambda: AuthorizationError(message, principal=caller),
        )

    def guard_owner_or_authority(self, caller: str, owner: str, message: str = "Not authorized") -> GuardResult:
        """Pass when the caller owns the record or is the authority."""
        return check(
            caller == owner or self.is_authority(caller),
            message,
            lambda: AuthorizationError(message, principal=caller),
        )
