"""
Credential kinds for DoorFlow person credentials.

DoorFlow credential types fall into three kinds, told apart by their
label and slug:

- Card (cards, fobs): the card number is required
- PIN: a PIN code, or "******" to have DoorFlow generate one
- Mobile (HID Mobile, PassFlow, Apple/Google Wallet): invitation-based,
  no value is sent

Each kind is its own type carrying only the fields it needs.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

# Value DoorFlow treats as "generate a PIN for me"
AUTO_GENERATE_PIN = "******"

MOBILE_KEYWORDS = ("mobile", "hid mobile", "passflow", "apple", "google", "wallet")


class CredentialError(ValueError):
    """Raised when credential input does not fit the credential kind."""

    pass


class CredentialKind(str, Enum):
    """Categories of DoorFlow credential types."""

    CARD = "card"
    PIN = "pin"
    MOBILE = "mobile"


def credential_kind(label: str, slug: str = "") -> CredentialKind:
    """
    Categorize a credential type from its label and slug.

    PIN is checked first, then the mobile keywords; anything else is a card.

    Example:
        >>> credential_kind("PIN Code", "pin")
        <CredentialKind.PIN: 'pin'>
        >>> credential_kind("PassFlow", "passflow")
        <CredentialKind.MOBILE: 'mobile'>
        >>> credential_kind("Proximity Card", "prox")
        <CredentialKind.CARD: 'card'>
    """
    label = (label or "").lower()
    slug = (slug or "").lower()

    if "pin" in label or "pin" in slug:
        return CredentialKind.PIN

    if any(kw in label or kw in slug for kw in MOBILE_KEYWORDS):
        return CredentialKind.MOBILE

    return CredentialKind.CARD


@dataclass(frozen=True)
class CardCredential:
    """Card or fob credential; the number is required."""

    value: str
    kind = CredentialKind.CARD

    def api_value(self) -> Optional[str]:
        return self.value


@dataclass(frozen=True)
class PinCredential:
    """PIN credential; value None means DoorFlow generates the PIN."""

    value: Optional[str] = None
    kind = CredentialKind.PIN

    @property
    def auto_generate(self) -> bool:
        return self.value is None

    def api_value(self) -> Optional[str]:
        return AUTO_GENERATE_PIN if self.value is None else self.value


@dataclass(frozen=True)
class MobileCredential:
    """Mobile credential; DoorFlow sends an invitation, no value is used."""

    kind = CredentialKind.MOBILE

    def api_value(self) -> Optional[str]:
        return None


Credential = Union[CardCredential, PinCredential, MobileCredential]


def build_credential(
    kind: CredentialKind, value: Optional[str] = None, auto_generate: bool = False
) -> Credential:
    """
    Build the credential variant for a kind, validating the input.

    Args:
        kind: Category of the chosen credential type
        value: Card number or PIN; ignored for mobile credentials
        auto_generate: For PINs, let DoorFlow choose the code

    Returns:
        CardCredential, PinCredential or MobileCredential

    Raises:
        CredentialError: If a card has no number, or a PIN has neither a
                         value nor auto_generate, or a PIN is not digits
    """
    value = (value or "").strip() or None

    if kind is CredentialKind.CARD:
        if value is None:
            raise CredentialError("Please enter a card number")
        return CardCredential(value)

    if kind is CredentialKind.PIN:
        if auto_generate:
            return PinCredential()
        if value is None:
            raise CredentialError("Please enter a PIN or select auto-generate")
        if not value.isdigit():
            raise CredentialError("PIN must contain digits only")
        return PinCredential(value)

    return MobileCredential()
