"""
Tests for AbiDecoder.
"""

import pytest
from eth_abi import encode
from eth_utils import to_checksum_address

from txdecode.abi.decoder import AbiDecoder
from txdecode.abi.types import parse_signature
from txdecode.utils.exceptions import DecodeError

from conftest import RECIPIENT


@pytest.fixture
def decoder():
    return AbiDecoder()


def types_of(signature):
    return parse_signature(signature).types


def word(value: int) -> bytes:
    return value.to_bytes(32, 'big')


class TestStaticDecoding:
    def test_transfer_arguments(self, decoder):
        data = encode(["address", "uint256"], [RECIPIENT, 1_000_000])
        values = decoder.decode(types_of("transfer(address,uint256)"), data)
        assert values == [to_checksum_address(RECIPIENT), 1_000_000]

    def test_no_parameters_no_data(self, decoder):
        assert decoder.decode((), b"") == []

    def test_no_parameters_with_data_rejected(self, decoder):
        with pytest.raises(DecodeError):
            decoder.decode((), word(1))

    def test_short_head_rejected(self, decoder):
        with pytest.raises(DecodeError) as exc_info:
            decoder.decode(types_of("f(address,uint256)"), word(1), "f(address,uint256)")
        assert exc_info.value.details["signature"] == "f(address,uint256)"
        assert exc_info.value.details["argument_length"] == 32

    def test_trailing_bytes_tolerated(self, decoder):
        values = decoder.decode(types_of("f(uint256)"), word(7) + word(8))
        assert values == [7]

    def test_bool_out_of_range_rejected(self, decoder):
        with pytest.raises(DecodeError):
            decoder.decode(types_of("f(bool)"), word(2))

    def test_dirty_address_padding_rejected(self, decoder):
        with pytest.raises(DecodeError):
            decoder.decode(types_of("f(address)"), b"\xff" * 32)

    def test_fixed_bytes_and_signed(self, decoder):
        data = encode(["bytes4", "int8"], [b"\xde\xad\xbe\xef", -5])
        values = decoder.decode(types_of("f(bytes4,int8)"), data)
        assert values == [b"\xde\xad\xbe\xef", -5]


class TestDynamicDecoding:
    def test_string_and_bytes(self, decoder):
        data = encode(["string", "bytes"], ["hello", b"\x01\x02"])
        assert decoder.decode(types_of("f(string,bytes)"), data) == ["hello", b"\x01\x02"]

    def test_arrays_become_lists(self, decoder):
        data = encode(["address[]"], [[RECIPIENT, RECIPIENT]])
        values = decoder.decode(types_of("f(address[])"), data)
        assert values == [[to_checksum_address(RECIPIENT)] * 2]

    def test_tuples_stay_tuples(self, decoder):
        data = encode(["(address,bool,bytes)[]"], [[(RECIPIENT, True, b"\xaa")]])
        values = decoder.decode(types_of("aggregate3((address,bool,bytes)[])"), data)
        assert values == [[(to_checksum_address(RECIPIENT), True, b"\xaa")]]

    def test_offset_pointing_into_head_rejected(self, decoder):
        # A bytes parameter whose offset points at its own head word
        data = word(0) + word(1) + b"\x01" + b"\x00" * 31
        with pytest.raises(DecodeError) as exc_info:
            decoder.decode(types_of("f(bytes)"), data)
        assert "points back" in exc_info.value.message

    def test_offset_past_end_rejected(self, decoder):
        data = word(0x1000) + word(0)
        with pytest.raises(DecodeError) as exc_info:
            decoder.decode(types_of("f(bytes)"), data)
        assert "out of range" in exc_info.value.message

    def test_length_past_end_rejected(self, decoder):
        # Offset is fine but the declared length runs off the buffer
        data = word(32) + word(100) + b"\x00" * 32
        with pytest.raises(DecodeError):
            decoder.decode(types_of("f(bytes)"), data)
