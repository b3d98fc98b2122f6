"""
Tests for gateway-based IPFS retrieval.
"""

import json
from unittest.mock import Mock, patch

import pytest
import requests

from agent_registry_ens.core.contracts import DEFAULT_IPFS_GATEWAYS
from agent_registry_ens.core.ipfs_client import IPFSClient


def _response(text):
    response = Mock()
    response.text = text
    return response


class TestIPFSClient:
    def test_default_gateways(self):
        assert IPFSClient().gateways == DEFAULT_IPFS_GATEWAYS

    def test_falls_back_to_next_gateway(self):
        client = IPFSClient(gateways=["https://a.example/ipfs/", "https://b.example/ipfs"])
        with patch("agent_registry_ens.core.ipfs_client.requests.get") as get:
            get.side_effect = [requests.ConnectionError("down"), _response("data")]
            assert client.get("ipfs://bafycid") == "data"

        assert [c.args[0] for c in get.call_args_list] == [
            "https://a.example/ipfs/bafycid",
            "https://b.example/ipfs/bafycid",
        ]

    def test_all_gateways_fail(self):
        client = IPFSClient(gateways=["https://a.example/ipfs/"])
        with patch("agent_registry_ens.core.ipfs_client.requests.get") as get:
            get.side_effect = requests.Timeout("slow")
            with pytest.raises(RuntimeError, match="all IPFS gateways"):
                client.get("bafycid")

    def test_registration_file(self):
        client = IPFSClient(gateways=["https://a.example/ipfs/"])
        payload = {"name": "Agent", "endpoints": [{"name": "ENS", "endpoint": "agent.eth", "version": "1.0"}]}
        with patch("agent_registry_ens.core.ipfs_client.requests.get") as get:
            get.return_value = _response(json.dumps(payload))
            registration = client.getRegistrationFile("bafycid")

        assert registration.name == "Agent"
        assert registration.endpoints[0].value == "agent.eth"
        assert registration.endpoints[0].meta == {"version": "1.0"}
