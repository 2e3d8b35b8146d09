"""
Tests for the verified ABI client.
"""

import json

import pytest
import requests

from txdecode.core.selector import Selector
from txdecode.sources.etherscan import VerifiedAbiClient, find_function
from txdecode.utils.exceptions import AuthRequiredError, LookupUnavailableError, RateLimitedError

from conftest import APPROVE_ABI_ITEM, CONTRACT, TRANSFER_ABI_ITEM, make_response

EVENT_ITEM = {
    "type": "event",
    "name": "Transfer",
    "inputs": [
        {"name": "from", "type": "address", "indexed": True},
        {"name": "to", "type": "address", "indexed": True},
        {"name": "value", "type": "uint256", "indexed": False},
    ],
}


def ok_payload(items):
    return {"status": "1", "message": "OK", "result": json.dumps(items)}


def notok_payload(result):
    return {"status": "0", "message": "NOTOK", "result": result}


@pytest.fixture
def client(mock_session):
    return VerifiedAbiClient(api_key="TESTKEY", session=mock_session)


class TestFetchAbi:
    def test_returns_function_entries_only(self, client, mock_session):
        mock_session.get.return_value = make_response(200, ok_payload([TRANSFER_ABI_ITEM, EVENT_ITEM]))

        items = client.fetch_abi(1, CONTRACT)

        assert items == [TRANSFER_ABI_ITEM]
        _, kwargs = mock_session.get.call_args
        assert kwargs["params"] == {
            "chainid": 1,
            "module": "contract",
            "action": "getabi",
            "address": CONTRACT,
            "apikey": "TESTKEY",
        }
        assert kwargs["timeout"] == 10.0

    def test_missing_key_is_auth_required(self, mock_session):
        with pytest.raises(AuthRequiredError) as exc_info:
            VerifiedAbiClient(session=mock_session).fetch_abi(1, CONTRACT)
        assert exc_info.value.error_code == "AuthRequired"
        mock_session.get.assert_not_called()

    def test_invalid_key_is_auth_required(self, client, mock_session):
        mock_session.get.return_value = make_response(200, notok_payload("Invalid API Key (#err2)|x"))
        with pytest.raises(AuthRequiredError):
            client.fetch_abi(1, CONTRACT)

    def test_missing_key_message_is_auth_required(self, client, mock_session):
        mock_session.get.return_value = make_response(200, notok_payload("Missing/Invalid API Key"))
        with pytest.raises(AuthRequiredError):
            client.fetch_abi(1, CONTRACT)

    def test_rate_limit_text(self, client, mock_session):
        mock_session.get.return_value = make_response(
            200, notok_payload("Max calls per sec rate limit reached (5/sec)")
        )
        with pytest.raises(RateLimitedError) as exc_info:
            client.fetch_abi(1, CONTRACT)
        assert exc_info.value.details["chain_id"] == 1

    def test_http_429(self, client, mock_session):
        mock_session.get.return_value = make_response(429)
        with pytest.raises(RateLimitedError):
            client.fetch_abi(1, CONTRACT)

    def test_unverified_contract(self, client, mock_session):
        mock_session.get.return_value = make_response(
            200, notok_payload("Contract source code not verified")
        )
        assert client.fetch_abi(1, CONTRACT) is None

    def test_other_error_is_unavailable(self, client, mock_session):
        mock_session.get.return_value = make_response(200, notok_payload("Query Timeout occured"))
        with pytest.raises(LookupUnavailableError):
            client.fetch_abi(1, CONTRACT)

    def test_server_error_is_unavailable(self, client, mock_session):
        mock_session.get.return_value = make_response(503)
        with pytest.raises(LookupUnavailableError):
            client.fetch_abi(1, CONTRACT)

    def test_timeout_is_unavailable(self, client, mock_session):
        mock_session.get.side_effect = requests.Timeout()
        with pytest.raises(LookupUnavailableError):
            client.fetch_abi(1, CONTRACT)

    def test_unparsable_abi_is_unavailable(self, client, mock_session):
        mock_session.get.return_value = make_response(200, {"status": "1", "message": "OK", "result": "[{"})
        with pytest.raises(LookupUnavailableError):
            client.fetch_abi(1, CONTRACT)


class TestFindFunction:
    def test_finds_matching_selector(self):
        entry = find_function([APPROVE_ABI_ITEM, TRANSFER_ABI_ITEM], Selector.from_hex("0xa9059cbb"),
                              chain_id=1, address=CONTRACT)
        assert entry.signature == "transfer(address,uint256)"
        assert entry.param_names == ("_to", "_value")
        assert entry.chain_id == 1
        assert entry.address == CONTRACT

    def test_no_match(self):
        assert find_function([APPROVE_ABI_ITEM], Selector.from_hex("0xa9059cbb")) is None

    def test_skips_unparsable_items(self):
        broken = {"type": "function", "name": "broken", "inputs": [{"name": "x", "type": "uint7"}]}
        entry = find_function([broken, TRANSFER_ABI_ITEM], Selector.from_hex("0xa9059cbb"))
        assert entry.name == "transfer"

    def test_unnamed_inputs_get_positional_names(self):
        item = {
            "type": "function",
            "name": "transfer",
            "inputs": [{"name": "", "type": "address"}, {"name": "", "type": "uint256"}],
        }
        entry = find_function([item], Selector.from_hex("0xa9059cbb"))
        assert entry.param_names == ("param0", "param1")
