"""
Tests for the public signature directory clients, driven through a mocked
requests session.
"""

import pytest
import requests

from txdecode.core.resolver import SignatureResolver
from txdecode.core.selector import Selector
from txdecode.sources.cache import MemoryCache
from txdecode.sources.directory import (
    FourByteDirectoryClient,
    OpenChainDirectoryClient,
    get_directory_client,
)
from txdecode.utils.exceptions import LookupUnavailableError

from conftest import make_response

TRANSFER = Selector.from_hex("0xa9059cbb")


def fourbyte_payload(*entries):
    return {
        "count": len(entries),
        "next": None,
        "previous": None,
        "results": [
            {"id": id_, "text_signature": text, "hex_signature": "0xa9059cbb"}
            for id_, text in entries
        ],
    }


class TestFourByte:
    def test_lookup_orders_oldest_first(self, mock_session):
        mock_session.get.return_value = make_response(200, fourbyte_payload(
            (31780, "many_msg_babbage(bytes1)"),
            (145, "transfer(address,uint256)"),
        ))
        client = FourByteDirectoryClient(session=mock_session)

        assert client.fetch_signatures(TRANSFER) == [
            "transfer(address,uint256)",
            "many_msg_babbage(bytes1)",
        ]
        _, kwargs = mock_session.get.call_args
        assert kwargs["params"] == {"hex_signature": "0xa9059cbb", "ordering": "created_at"}
        assert kwargs["timeout"] == 5.0

    def test_lookup_drops_signatures_with_wrong_hash(self, mock_session):
        mock_session.get.return_value = make_response(200, fourbyte_payload(
            (1, "transfer(address,uint256)"),
            (2, "approve(address,uint256)"),
            (3, "garbage((("),
        ))
        candidates = FourByteDirectoryClient(session=mock_session).lookup(TRANSFER)

        assert [c.signature for c in candidates] == ["transfer(address,uint256)"]
        assert candidates[0].source == "4byte"

    def test_lookup_collapses_equivalent_spellings(self, mock_session):
        mock_session.get.return_value = make_response(200, fourbyte_payload(
            (1, "transfer(address,uint256)"),
            (2, "transfer(address, uint)"),
        ))
        candidates = FourByteDirectoryClient(session=mock_session).lookup(TRANSFER)
        assert len(candidates) == 1

    def test_empty_results(self, mock_session):
        mock_session.get.return_value = make_response(200, fourbyte_payload())
        assert FourByteDirectoryClient(session=mock_session).lookup(TRANSFER) == []

    def test_not_found_is_empty(self, mock_session):
        mock_session.get.return_value = make_response(404, {"detail": "Not found."})
        assert FourByteDirectoryClient(session=mock_session).lookup(TRANSFER) == []

    def test_server_error_is_unavailable(self, mock_session):
        mock_session.get.return_value = make_response(502)
        with pytest.raises(LookupUnavailableError) as exc_info:
            FourByteDirectoryClient(session=mock_session).lookup(TRANSFER)
        assert exc_info.value.details["source"] == "4byte"

    def test_timeout_is_unavailable(self, mock_session):
        mock_session.get.side_effect = requests.Timeout("read timed out")
        with pytest.raises(LookupUnavailableError):
            FourByteDirectoryClient(session=mock_session, timeout=0.1).lookup(TRANSFER)

    def test_connection_error_is_unavailable(self, mock_session):
        mock_session.get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(LookupUnavailableError):
            FourByteDirectoryClient(session=mock_session).lookup(TRANSFER)

    def test_invalid_json_is_unavailable(self, mock_session):
        mock_session.get.return_value = make_response(200, json_error=True)
        with pytest.raises(LookupUnavailableError):
            FourByteDirectoryClient(session=mock_session).lookup(TRANSFER)

    def test_missing_results_is_unavailable(self, mock_session):
        mock_session.get.return_value = make_response(200, {"detail": "odd"})
        with pytest.raises(LookupUnavailableError):
            FourByteDirectoryClient(session=mock_session).lookup(TRANSFER)


class TestOpenChain:
    def test_lookup(self, mock_session):
        mock_session.get.return_value = make_response(200, {
            "ok": True,
            "result": {
                "event": {},
                "function": {
                    "0xa9059cbb": [
                        {"name": "transfer(address,uint256)", "filtered": False},
                        {"name": "join_tg_invmru_haha_fd06787(address,bool)", "filtered": True},
                    ],
                },
            },
        })
        candidates = OpenChainDirectoryClient(session=mock_session).lookup(TRANSFER)

        assert [c.signature for c in candidates] == ["transfer(address,uint256)"]
        assert candidates[0].source == "openchain"
        _, kwargs = mock_session.get.call_args
        assert kwargs["params"] == {"function": "0xa9059cbb", "filter": "true"}

    def test_unknown_selector(self, mock_session):
        mock_session.get.return_value = make_response(200, {
            "ok": True, "result": {"event": {}, "function": {"0xa9059cbb": None}},
        })
        assert OpenChainDirectoryClient(session=mock_session).lookup(TRANSFER) == []

    def test_not_ok_is_unavailable(self, mock_session):
        mock_session.get.return_value = make_response(200, {"ok": False, "error": "invalid selector"})
        with pytest.raises(LookupUnavailableError):
            OpenChainDirectoryClient(session=mock_session).lookup(TRANSFER)

    @pytest.mark.parametrize("result", [
        {"function": ["junk"]},
        ["junk"],
        None,
    ])
    def test_malformed_result_is_unavailable(self, mock_session, result):
        mock_session.get.return_value = make_response(200, {"ok": True, "result": result})
        with pytest.raises(LookupUnavailableError, match="no function map"):
            OpenChainDirectoryClient(session=mock_session).lookup(TRANSFER)

    def test_malformed_result_leaves_selector_unresolved(self, mock_session):
        mock_session.get.return_value = make_response(200, {"ok": True, "result": {"function": ["junk"]}})
        directory = OpenChainDirectoryClient(session=mock_session)

        resolution = SignatureResolver(MemoryCache(), directory=directory).resolve("0x12345678")

        assert not resolution.resolved
        assert isinstance(resolution.source_errors[0], LookupUnavailableError)


class TestFactory:
    def test_by_name(self, mock_session):
        assert isinstance(get_directory_client("4byte", session=mock_session), FourByteDirectoryClient)
        client = get_directory_client("openchain", timeout=2.0, session=mock_session)
        assert isinstance(client, OpenChainDirectoryClient)
        assert client.timeout == 2.0

    def test_unknown_name(self, mock_session):
        with pytest.raises(ValueError):
            get_directory_client("etherface", session=mock_session)
