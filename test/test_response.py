#!/usr/bin/env python3
"""Unit tests for confidential call response parsing."""

import pytest
from hexbytes import HexBytes
from web3 import Web3

from suave_ccr.errors import MissingFieldError
from suave_ccr.record import EMPTY_BYTES_HASH
from suave_ccr.response import ConfidentialCallResponse

from conftest import RESPONSE_TRANSACTION


class TestConfidentialCallResponse:
    """Tests for ConfidentialCallResponse.from_transaction."""

    def test_parse_response(self):
        """Test parsing a response transaction returned by a kettle."""
        response = ConfidentialCallResponse.from_transaction(RESPONSE_TRANSACTION)

        assert response.transaction == RESPONSE_TRANSACTION
        assert response.confidential_compute_result == HexBytes(
            "0x0000000000000000000000000000000000000000000000000000000001ccb310"
        )

        record = response.request_record
        assert record.chain_id == 0x1008C45
        assert record.gas == 0xF4240
        assert record.gas_price == 0x8C9ACA00
        assert record.nonce == 0x45
        assert record.input == HexBytes(
            "0x50723553000000000000000000000000000000000000000000000000000000000000002000000000000000000000000000000000000000000000000000000000000000074554485553445400"
        )
        assert record.kettle_address == Web3.to_checksum_address(
            "0x03493869959c866713c33669ca118e774a30a0e5"
        )
        assert record.to == Web3.to_checksum_address("0xc803334c79650708daf3a3462ac4b48296b1352a")
        assert record.confidential_inputs_hash == EMPTY_BYTES_HASH

    def test_request_record_signature(self):
        record = ConfidentialCallResponse.from_transaction(RESPONSE_TRANSACTION).request_record

        assert record.is_signed
        assert record.signature.v == 0
        assert record.signature.r == 0xC1C5071F78C6F6B6380EBC4957DD4F6C74BDF5BE742AD0D62D2D75F510E33660
        assert record.signature.s == 0x5DE5C97F9C5EE5C5DAD3BB0D591E581F48CD947E998D32500BB73DE24DD7A6F9

    @pytest.mark.parametrize("key", ["confidentialComputeResult", "requestRecord"])
    def test_missing_key(self, key):
        tx = {k: v for k, v in RESPONSE_TRANSACTION.items() if k != key}

        with pytest.raises(MissingFieldError) as exc_info:
            ConfidentialCallResponse.from_transaction(tx)

        assert exc_info.value.field_name == key

    def test_response_is_immutable(self):
        response = ConfidentialCallResponse.from_transaction(RESPONSE_TRANSACTION)

        with pytest.raises(AttributeError):
            response.confidential_compute_result = HexBytes(b"")
