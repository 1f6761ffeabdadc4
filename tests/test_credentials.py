"""
Unit tests for DoorFlow credential kinds.
"""

import pytest

from doorflow_sync.sync.credentials import (
    AUTO_GENERATE_PIN,
    CardCredential,
    CredentialError,
    CredentialKind,
    MobileCredential,
    PinCredential,
    build_credential,
    credential_kind,
)


class TestCredentialKind:
    """Tests for categorizing credential types."""

    @pytest.mark.parametrize(
        "label,slug",
        [("PIN Code", "pin"), ("Keypad", "door-pin"), ("pin", "")],
    )
    def test_pin(self, label, slug):
        """Test PIN types are detected from label or slug."""
        assert credential_kind(label, slug) is CredentialKind.PIN

    @pytest.mark.parametrize(
        "label,slug",
        [
            ("HID Mobile", "hid_mobile"),
            ("PassFlow", "passflow"),
            ("Apple Wallet", "apple_wallet"),
            ("Google Wallet", "google"),
        ],
    )
    def test_mobile(self, label, slug):
        """Test mobile and wallet types are detected."""
        assert credential_kind(label, slug) is CredentialKind.MOBILE

    def test_card_is_default(self):
        """Test anything else is a card."""
        assert credential_kind("Proximity Card", "prox") is CredentialKind.CARD
        assert credential_kind("", "") is CredentialKind.CARD

    def test_pin_checked_before_mobile(self):
        """Test a mobile PIN type counts as a PIN."""
        assert credential_kind("Mobile PIN", "") is CredentialKind.PIN


class TestBuildCredential:
    """Tests for build_credential."""

    def test_card_requires_number(self):
        """Test cards need a number."""
        with pytest.raises(CredentialError, match="card number"):
            build_credential(CredentialKind.CARD, "  ")

    def test_card(self):
        """Test a card carries its number."""
        credential = build_credential(CredentialKind.CARD, " 12345 ")
        assert credential == CardCredential("12345")
        assert credential.api_value() == "12345"

    def test_pin_value(self):
        """Test an explicit PIN is sent as-is."""
        credential = build_credential(CredentialKind.PIN, "4321")
        assert isinstance(credential, PinCredential)
        assert not credential.auto_generate
        assert credential.api_value() == "4321"

    def test_pin_auto_generate(self):
        """Test auto-generate sends the placeholder value."""
        credential = build_credential(CredentialKind.PIN, "9999", auto_generate=True)
        assert credential.auto_generate
        assert credential.api_value() == AUTO_GENERATE_PIN

    def test_pin_requires_value_or_auto(self):
        """Test a PIN needs a value or auto-generate."""
        with pytest.raises(CredentialError, match="auto-generate"):
            build_credential(CredentialKind.PIN)

    def test_pin_digits_only(self):
        """Test non-numeric PINs are rejected."""
        with pytest.raises(CredentialError, match="digits"):
            build_credential(CredentialKind.PIN, "12ab")

    def test_mobile_ignores_value(self):
        """Test mobile credentials never send a value."""
        credential = build_credential(CredentialKind.MOBILE, "ignored")
        assert isinstance(credential, MobileCredential)
        assert credential.api_value() is None

    def test_credential_error_is_value_error(self):
        """Test callers can catch ValueError."""
        assert issubclass(CredentialError, ValueError)
