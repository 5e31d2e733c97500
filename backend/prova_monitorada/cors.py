"""
Origin admission policy for cross-origin requests.

An origin is admitted when it is absent or empty (curl, mobile apps,
server-to-server calls), when it equals one of the literal allowed origins,
or when it ends with one of the allowed domain suffixes. Matching is byte-exact: no case
folding, no trailing-slash normalization.
"""

from typing import Iterable, Optional, Tuple

from prova_monitorada.config import Settings


class OriginPolicy:
    """Literal allow-list plus domain-suffix rules."""

    def __init__(self, origins: Iterable[str], suffixes: Iterable[str] = ()):
        self.origins: Tuple[str, ...] = tuple(origins)
        self.suffixes: Tuple[str, ...] = tuple(suffixes)

    @classmethod
    def from_settings(cls, settings: Settings) -> "OriginPolicy":
        return cls(settings.cors_allowed_origins, settings.cors_allowed_suffixes)

    def allows(self, origin: Optional[str]) -> bool:
        if not origin:
            return True
        if origin in self.origins:
            return True
        return any(origin.endswith(suffix) for suffix in self.suffixes)

    def __repr__(self) -> str:
        return f"OriginPolicy(origins={list(self.origins)!r}, suffixes={list(self.suffixes)!r})"
