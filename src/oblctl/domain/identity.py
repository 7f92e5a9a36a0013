"""Identity references for parties on the ledger network.

A party is either well-known (:class:`Party`, carries a legal name) or
anonymous (:class:`AnonymousParty`, key only). Both compare equal when
they share an owning key, so a confidential identity and the well-known
party that owns the same key are the same participant.
"""

from __future__ import annotations

from dataclasses import dataclass

import base58

# Attribute order used when rendering a legal name.
_NAME_ATTRIBUTES: tuple[tuple[str, str], ...] = (
    ("O", "organisation"),
    ("L", "locality"),
    ("C", "country"),
)

NULL_KEY = bytes(32)


def encode_key(key: bytes) -> str:
    """Base-58 encode a public key for display and wire transfer."""
    return base58.b58encode(key).decode("ascii")


def decode_key(text: str) -> bytes:
    """Decode a base-58 public key. Raises ValueError on invalid input."""
    return base58.b58decode(text.strip())


@dataclass(frozen=True, slots=True)
class PartyName:
    """X.500-style legal name, e.g. ``O=PartyA, L=London, C=GB``."""

    organisation: str
    locality: str | None = None
    country: str | None = None

    @classmethod
    def parse(cls, text: str) -> PartyName:
        """Parse ``O=..., L=..., C=...``; a bare string is taken as the organisation."""
        text = text.strip()
        if "=" not in text:
            if not text:
                raise ValueError("Party name cannot be empty")
            return cls(organisation=text)

        fields: dict[str, str] = {}
        keys = dict(_NAME_ATTRIBUTES)
        for part in text.split(","):
            key, sep, value = part.partition("=")
            key = key.strip().upper()
            if not sep or key not in keys:
                raise ValueError(f"Unrecognised name attribute in {text!r}: {part.strip()!r}")
            fields[keys[key]] = value.strip()

        if not fields.get("organisation"):
            raise ValueError(f"Party name {text!r} has no organisation (O=)")
        return cls(**fields)

    def __str__(self) -> str:
        parts = []
        for attr, field_name in _NAME_ATTRIBUTES:
            value = getattr(self, field_name)
            if value:
                parts.append(f"{attr}={value}")
        return ", ".join(parts)


@dataclass(frozen=True, slots=True, eq=False)
class AbstractParty:
    """Base for identity references; equality is by owning key."""

    owning_key: bytes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AbstractParty):
            return NotImplemented
        return self.owning_key == other.owning_key

    def __hash__(self) -> int:
        return hash(self.owning_key)


@dataclass(frozen=True, slots=True, eq=False)
class AnonymousParty(AbstractParty):
    """Key-only identity whose owner is not disclosed."""

    def __str__(self) -> str:
        return encode_key(self.owning_key)


@dataclass(frozen=True, slots=True, eq=False, kw_only=True)
class Party(AbstractParty):
    """Well-known party with a resolvable legal name."""

    name: PartyName

    def anonymise(self) -> AnonymousParty:
        return AnonymousParty(self.owning_key)

    def __str__(self) -> str:
        return str(self.name)


NULL_PARTY = AnonymousParty(NULL_KEY)


def display_name(identity: AbstractParty) -> str:
    """Organisation name for a well-known party, else the base-58 key."""
    if isinstance(identity, Party):
        return identity.name.organisation
    return encode_key(identity.owning_key)
