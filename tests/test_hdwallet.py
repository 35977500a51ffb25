"""Tests for mnemonics, derivation paths and HD key derivation."""

import pytest
from bip_utils import Bip32PathParser

from terrasign.errors import DerivationFailure, InvalidMnemonic, InvalidPath
from terrasign.hdwallet import (
    DEFAULT_PATH,
    HARDENED_OFFSET,
    DerivationPath,
    derive,
    derive_from_seed,
    derive_with_recovery,
    generate_mnemonic,
    harden,
    is_valid_mnemonic,
    mnemonic_to_seed,
    validate_mnemonic,
)
from terrasign.signing.base import KeyAlgorithm
from terrasign.utils.secrets import SecretBytes

from conftest import ABANDON_MNEMONIC, NOTICE_MNEMONIC, WONDER_MNEMONIC


class TestMnemonic:
    """Tests for BIP39 mnemonic handling."""

    def test_generate_default_length(self):
        mnemonic = generate_mnemonic()
        assert len(mnemonic.split()) == 24
        assert is_valid_mnemonic(mnemonic)

    def test_generate_twelve_words(self):
        mnemonic = generate_mnemonic(12)
        assert len(mnemonic.split()) == 12
        assert is_valid_mnemonic(mnemonic)

    def test_generate_unsupported_length(self):
        with pytest.raises(ValueError):
            generate_mnemonic(13)

    def test_validate_normalizes_whitespace_and_case(self):
        messy = "  " + ABANDON_MNEMONIC.upper().replace(" ", "   ") + "\n"
        assert validate_mnemonic(messy) == ABANDON_MNEMONIC

    def test_unknown_word_rejected(self):
        words = ABANDON_MNEMONIC.split()
        words[3] = "notaword"
        with pytest.raises(InvalidMnemonic):
            validate_mnemonic(" ".join(words))

    def test_bad_checksum_rejected(self):
        """Twelve valid words with a wrong checksum word."""
        with pytest.raises(InvalidMnemonic):
            validate_mnemonic(" ".join(["abandon"] * 12))

    def test_wrong_length_rejected(self):
        with pytest.raises(InvalidMnemonic):
            validate_mnemonic("abandon abandon abandon")

    def test_error_message_does_not_echo_mnemonic(self):
        words = WONDER_MNEMONIC.split()
        words[-1] = "zzzz"
        with pytest.raises(InvalidMnemonic) as exc_info:
            validate_mnemonic(" ".join(words))
        assert "caution" not in str(exc_info.value)

    def test_seed_vector(self):
        with mnemonic_to_seed(NOTICE_MNEMONIC) as seed:
            assert seed.reveal().hex() == (
                "a2ae8846397b55d266af35acdbb18ba1d005f7ddbdd4ca7a804df83352eaf373"
                "f274ba0dc8ac1b2b25f19dfcb7fa8b30a240d2c6039d88963defc2f626003b2f"
            )

    def test_seed_bip39_reference_vector(self):
        with mnemonic_to_seed(ABANDON_MNEMONIC) as seed:
            assert seed.reveal().hex() == (
                "5eb00bbddcf069084889a8ab9155568165f5c453ccb85e70811aaed6f6da5fc1"
                "9a5ac40b389cd370d086206dec8aa6c43daea6690f20ad3d8d48b2d2ce9e38e4"
            )

    def test_passphrase_changes_seed(self):
        plain = mnemonic_to_seed(ABANDON_MNEMONIC)
        salted = mnemonic_to_seed(ABANDON_MNEMONIC, "TREZOR")
        assert plain != salted

    def test_seed_is_wiped_after_context(self):
        with mnemonic_to_seed(ABANDON_MNEMONIC) as seed:
            pass
        assert seed.wiped


class TestDerivationPath:
    """Tests for path parsing and construction."""

    def test_default_path(self):
        assert str(DEFAULT_PATH) == "m/44'/330'/0'/0/0"

    def test_parse_round_trip(self):
        path = DerivationPath.parse("m/44'/330'/2'/0/7")
        assert path.indices == (harden(44), harden(330), harden(2), 0, 7)
        assert str(path) == "m/44'/330'/2'/0/7"

    def test_parse_h_notation(self):
        assert DerivationPath.parse("m/44h/330H/0'/0/0") == DEFAULT_PATH

    def test_bip44_builder(self):
        path = DerivationPath.bip44(account=1, index=5)
        assert str(path) == "m/44'/330'/1'/0/5"

    def test_slip10_builder_all_hardened(self):
        path = DerivationPath.slip10(118, account=0, index=3)
        assert all(index >= HARDENED_OFFSET for index in path.indices)
        assert str(path) == "m/44'/118'/0'/0'/3'"

    @pytest.mark.parametrize(
        "text",
        [
            "44'/330'",
            "0/0",
            "m/44'/abc",
            "m//0",
            "m/0/",
            "m/2147483648",
            "m/2147483648'",
            "m/4294967296",
            "m/-1",
            "x/0",
        ],
    )
    def test_parse_invalid(self, text):
        with pytest.raises(InvalidPath):
            DerivationPath.parse(text)

    def test_matches_bip_utils_parser(self):
        text = "m/44'/330'/2'/0/7"
        path = DerivationPath.parse(text)
        assert list(path.indices) == Bip32PathParser.Parse(text).ToList()
        assert path.to_bip32().ToStr() == text

    def test_raw_index_bounds(self):
        DerivationPath((0xFFFFFFFF,))
        with pytest.raises(InvalidPath):
            DerivationPath((0x100000000,))
        with pytest.raises(InvalidPath):
            DerivationPath(("0",))

    def test_harden_out_of_range(self):
        with pytest.raises(InvalidPath):
            harden(HARDENED_OFFSET)

    def test_with_index_bumped_keeps_hardened_flag(self):
        bumped = DEFAULT_PATH.with_index_bumped(3)
        assert str(bumped) == "m/44'/330'/1'/0/0"

    def test_with_index_bumped_normal_level(self):
        assert str(DEFAULT_PATH.with_index_bumped(5)) == "m/44'/330'/0'/0/1"

    def test_with_index_bumped_overflow(self):
        path = DerivationPath((0x7FFFFFFF,))
        with pytest.raises(InvalidPath):
            path.with_index_bumped(1)

    def test_with_index_bumped_bad_depth(self):
        with pytest.raises(InvalidPath):
            DEFAULT_PATH.with_index_bumped(6)


class TestDerivation:
    """Tests for private key derivation."""

    def test_golden_private_key(self):
        key = derive(WONDER_MNEMONIC)
        assert key.reveal().hex() == (
            "4804e2bdce36d413206ccf47cc4c64db2eff924e7cc9e90339fa7579d2bd9d5b"
        )

    def test_abandon_reference_key(self):
        key = derive(ABANDON_MNEMONIC, path="m/44'/330'/0'/0/0")
        assert key.reveal().hex() == (
            "05be413bb5bd1fb67757251976dd43adf0d4db27d1a5444b4f6ef754ef939b10"
        )

    def test_deterministic(self):
        first = derive(ABANDON_MNEMONIC, path="m/44'/330'/0'/0/0")
        second = derive(ABANDON_MNEMONIC, path=DEFAULT_PATH)
        assert first == second
        assert len(first) == 32

    def test_from_seed_matches_mnemonic(self):
        with mnemonic_to_seed(ABANDON_MNEMONIC) as seed:
            from_seed = derive_from_seed(seed.reveal())
        assert from_seed == derive(ABANDON_MNEMONIC)

    def test_index_changes_key(self):
        first = derive(ABANDON_MNEMONIC, path=DerivationPath.bip44(index=0))
        second = derive(ABANDON_MNEMONIC, path=DerivationPath.bip44(index=1))
        assert first != second

    def test_passphrase_changes_key(self):
        assert derive(ABANDON_MNEMONIC) != derive(ABANDON_MNEMONIC, passphrase="extra")

    def test_returns_secret_bytes(self):
        key = derive(ABANDON_MNEMONIC)
        assert isinstance(key, SecretBytes)
        assert key.reveal().hex() not in repr(key)

    def test_invalid_mnemonic_propagates(self):
        with pytest.raises(InvalidMnemonic):
            derive("abandon abandon abandon")

    def test_ed25519_requires_hardened_path(self):
        with pytest.raises(InvalidPath):
            derive(ABANDON_MNEMONIC, path=DEFAULT_PATH, algorithm=KeyAlgorithm.ED25519)

    def test_ed25519_hardened_path(self):
        path = DerivationPath.slip10(330)
        key = derive(ABANDON_MNEMONIC, path=path, algorithm=KeyAlgorithm.ED25519)
        assert len(key) == 32
        assert key != derive(ABANDON_MNEMONIC, path=path.with_index_bumped(5), algorithm=KeyAlgorithm.ED25519)


class TestDerivationRecovery:
    """Tests for retrying with the next index after an invalid child."""

    def test_success_returns_requested_path(self):
        path, key = derive_with_recovery(ABANDON_MNEMONIC)
        assert path == DEFAULT_PATH
        assert key == derive(ABANDON_MNEMONIC)

    def test_bumps_failing_depth(self, monkeypatch):
        from terrasign.hdwallet import derivation

        real_derive = derivation.derive
        calls = []

        def flaky_derive(mnemonic, passphrase, path, algorithm):
            calls.append(path)
            if len(calls) == 1:
                raise DerivationFailure(depth=5, index=path.indices[4])
            return real_derive(mnemonic, passphrase, path, algorithm)

        monkeypatch.setattr(derivation, "derive", flaky_derive)
        path, key = derive_with_recovery(ABANDON_MNEMONIC)

        assert str(path) == "m/44'/330'/0'/0/1"
        assert key == real_derive(ABANDON_MNEMONIC, "", path, KeyAlgorithm.SECP256K1)

    def test_gives_up_after_max_attempts(self, monkeypatch):
        from terrasign.hdwallet import derivation

        def always_fail(mnemonic, passphrase, path, algorithm):
            raise DerivationFailure(depth=4, index=path.indices[3])

        monkeypatch.setattr(derivation, "derive", always_fail)
        with pytest.raises(DerivationFailure) as exc_info:
            derive_with_recovery(ABANDON_MNEMONIC, max_attempts=3)
        assert exc_info.value.depth == 4

    @pytest.mark.parametrize("attempts", [0, -1])
    def test_rejects_non_positive_attempts(self, attempts):
        with pytest.raises(ValueError):
            derive_with_recovery(ABANDON_MNEMONIC, max_attempts=attempts)
