"""Tests for the bech32 address codec."""

import pytest

from terrasign.address import AddressCodec, decode, encode, encode_digest, is_valid_address
from terrasign.errors import AddressError, ChecksumMismatch, UnknownPrefix
from terrasign.hdwallet import DerivationPath
from terrasign.signing import KeyAlgorithm, signing_key_from_mnemonic

from conftest import ABANDON_MNEMONIC, ISLAND_ADDRESS, SELL_ADDRESS, WONDER_MNEMONIC

BECH32_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"


@pytest.fixture
def wonder_key():
    return signing_key_from_mnemonic(WONDER_MNEMONIC)


@pytest.fixture
def codec():
    return AddressCodec("terra")


class TestEncode:
    """Tests for address and public key encoding."""

    def test_island_address(self, island_key):
        assert encode(island_key.public_key(), "terra") == ISLAND_ADDRESS

    def test_sell_address(self, sell_key):
        assert encode(sell_key.public_key(), "terra") == SELL_ADDRESS

    def test_wonder_account_address(self, codec, wonder_key):
        assert codec.account_address(wonder_key.public_key()) == (
            "terra1jnzv225hwl3uxc5wtnlgr8mwy6nlt0vztv3qqm"
        )

    def test_wonder_account_public_key(self, codec, wonder_key):
        assert codec.application_public_key(wonder_key.public_key()) == (
            "terrapub1addwnpepqt8ha594svjn3nvfk4ggfn5n8xd3sm3cz6ztxyugwcuqzsuuhhfq5nwzrf9"
        )

    def test_wonder_operator_public_key(self, codec, wonder_key):
        assert codec.operator_public_key(wonder_key.public_key()) == (
            "terravaloperpub1addwnpepqt8ha594svjn3nvfk4ggfn5n8xd3sm3cz6ztxyugwcuqzsuuhhfq5y7accr"
        )

    def test_abandon_reference_address(self, codec):
        key = signing_key_from_mnemonic(ABANDON_MNEMONIC, path="m/44'/330'/0'/0/0")
        assert codec.account_address(key.public_key()) == (
            "terra1amdttz2937a3dytmxmkany53pp6ma6dy4vsllv"
        )

    def test_default_path_address_is_stable(self, codec):
        first = signing_key_from_mnemonic(ABANDON_MNEMONIC)
        second = signing_key_from_mnemonic(ABANDON_MNEMONIC, path="m/44'/330'/0'/0/0")
        address = codec.account_address(first.public_key())

        assert address == codec.account_address(second.public_key())
        assert address.startswith("terra1")
        assert is_valid_address(address, "terra")

    def test_operator_address_shares_digest(self, codec, wonder_key):
        operator = codec.operator_address(wonder_key.public_key())
        assert operator.startswith("terravaloper1")
        assert codec.operator_from_account(codec.account_address(wonder_key.public_key())) == operator

    def test_prefixes(self, codec):
        assert codec.account_pub_prefix == "terrapub"
        assert codec.validator_prefix == "terravaloper"
        assert codec.validator_pub_prefix == "terravaloperpub"
        assert codec.consensus_prefix == "terravalcons"
        assert codec.consensus_pub_prefix == "terravalconspub"

    def test_ed25519_consensus_address(self, codec):
        key = signing_key_from_mnemonic(
            ABANDON_MNEMONIC,
            path=DerivationPath.slip10(330),
            algorithm=KeyAlgorithm.ED25519,
        )
        address = codec.consensus_address(key.public_key())
        prefix, digest = decode(address, "terravalcons")
        assert prefix == "terravalcons"
        assert digest == key.public_key().address_digest()
        assert len(digest) == 20

    def test_prefix_from_settings(self, monkeypatch):
        from terrasign.config import get_settings

        monkeypatch.setenv("BECH32_PREFIX", "mars")
        get_settings.cache_clear()
        assert AddressCodec.from_settings().prefix == "mars"


class TestDecode:
    """Tests for address decoding and validation."""

    def test_round_trip(self):
        digest = bytes(range(20))
        prefix, data = decode(encode_digest("terra", digest))
        assert prefix == "terra"
        assert data == digest

    def test_uppercase_accepted(self):
        prefix, _ = decode(ISLAND_ADDRESS.upper(), "terra")
        assert prefix == "terra"

    def test_wrong_prefix(self):
        with pytest.raises(UnknownPrefix) as exc_info:
            decode(ISLAND_ADDRESS, "cosmos")
        assert exc_info.value.expected == "cosmos"
        assert exc_info.value.actual == "terra"

    def test_every_single_substitution_rejected(self):
        """Any one-character change in the data part fails the checksum."""
        data_start = len("terra1")
        for position in range(data_start, len(ISLAND_ADDRESS)):
            current = ISLAND_ADDRESS[position]
            replacement = BECH32_CHARSET[(BECH32_CHARSET.index(current) + 1) % 32]
            mutated = ISLAND_ADDRESS[:position] + replacement + ISLAND_ADDRESS[position + 1:]
            with pytest.raises(AddressError):
                decode(mutated, "terra")

    @pytest.mark.parametrize(
        "address",
        ["", "terra", "1qqqqqq", "terra1", "terra1bbbbbbb", "terra1n3g37dsdlv7ryqftlkef8mhgqj4ny7p8v78lg8"],
    )
    def test_malformed(self, address):
        with pytest.raises(ChecksumMismatch):
            decode(address)

    def test_is_valid_address(self):
        assert is_valid_address(ISLAND_ADDRESS)
        assert is_valid_address(ISLAND_ADDRESS, "terra")
        assert not is_valid_address(ISLAND_ADDRESS, "cosmos")
        assert not is_valid_address(ISLAND_ADDRESS[:-1] + "q")

    def test_is_valid_address_requires_20_bytes(self):
        assert not is_valid_address(encode_digest("terra", bytes(32)))

    def test_decode_account(self, codec, island_key):
        assert codec.decode_account(ISLAND_ADDRESS) == island_key.public_key().address_digest()
