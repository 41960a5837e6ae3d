import pytest
from pycardano import Address, Network, VerificationKeyHash

from hoskdog.utils import addresses


def test_is_supported_prefix():
    assert addresses.is_supported_prefix("addr1qxyz")
    assert addresses.is_supported_prefix("stake1uxyz")
    assert not addresses.is_supported_prefix("addr_test1qxyz")
    assert not addresses.is_supported_prefix(None)


def test_normalize_cardano_address():
    assert addresses.normalize_cardano_address("  addr1qxyz ") == "addr1qxyz"
    with pytest.raises(ValueError):
        addresses.normalize_cardano_address("   ")
    with pytest.raises(ValueError):
        addresses.normalize_cardano_address("0xabc")


def test_address_network_id():
    assert addresses.address_network_id("addr1qxyz") == 1
    assert addresses.address_network_id("addr_test1qxyz") == 0
    assert addresses.address_network_id("stake_test1uxyz") == 0


def test_hex_to_bech32_round_trip():
    mainnet = Address(payment_part=VerificationKeyHash(bytes(range(28))), network=Network.MAINNET)
    testnet = Address(payment_part=VerificationKeyHash(bytes(range(28))), network=Network.TESTNET)

    assert addresses.hex_to_bech32_address(mainnet.to_primitive().hex()) == str(mainnet)
    assert addresses.hex_to_bech32_address(testnet.to_primitive().hex()).startswith("addr_test1")


def test_hex_to_bech32_rejects_bad_input():
    with pytest.raises(ValueError):
        addresses.hex_to_bech32_address("zz")
    with pytest.raises(ValueError):
        addresses.hex_to_bech32_address("")


def test_parse_address_rejects_garbage():
    with pytest.raises(ValueError):
        addresses.parse_address("addr1notbech32")

