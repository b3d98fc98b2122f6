"""
Tests for SDK configuration, agent loading and ENS verification wiring.
"""

import base64
import json
from unittest.mock import Mock, patch

import pytest

from agent_registry_ens import SDK
from agent_registry_ens.core.contracts import DEFAULT_REGISTRIES, IDENTITY_REGISTRY_ABI
from agent_registry_ens.core.ens_verification import (
    build_agent_registry_record_key,
    encode_agent_registry_value,
)

SEPOLIA = 11155111
OWNER = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
REGISTRY = DEFAULT_REGISTRIES[SEPOLIA]["IDENTITY"]
VERIFIED_REGISTRY = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"


class DummyResolver:
    def __init__(self, records):
        self._records = records

    def get_text(self, key):
        return self._records.get(key)


class DummyProvider:
    def __init__(self, names):
        self._names = names

    def get_resolver(self, name):
        records = self._names.get(name)
        return DummyResolver(records) if records is not None else None


def _registration_uri(data):
    encoded = base64.b64encode(json.dumps(data).encode("utf-8")).decode("ascii")
    return f"data:application/json;base64,{encoded}"


@pytest.fixture
def web3_client():
    client = Mock()
    client.get_contract.side_effect = lambda address, abi: Mock(address=address)
    return client


def _contract_calls(token_uri, agent_name=b""):
    def call(contract, method, *args):
        if method == "tokenURI":
            return token_uri
        if method == "ownerOf":
            return OWNER
        if method == "getMetadata":
            return agent_name
        raise AssertionError(f"unexpected call {method}")
    return call


class TestRegistryConfiguration:
    def test_default_registry(self, web3_client):
        sdk = SDK(chainId=SEPOLIA, rpcUrl="http://localhost:8545", web3Client=web3_client)

        assert sdk.registries() == {"IDENTITY": REGISTRY}
        assert sdk.identity_registry.address == REGISTRY
        web3_client.get_contract.assert_called_once_with(REGISTRY, IDENTITY_REGISTRY_ABI)

    def test_registry_is_cached(self, web3_client):
        sdk = SDK(chainId=SEPOLIA, rpcUrl="http://localhost:8545", web3Client=web3_client)
        assert sdk.identity_registry is sdk.identity_registry
        assert web3_client.get_contract.call_count == 1

    def test_override(self, web3_client):
        override = "0x0000000000000000000000000000000000000001"
        sdk = SDK(
            chainId=SEPOLIA,
            rpcUrl="http://localhost:8545",
            registryOverrides={SEPOLIA: {"IDENTITY": override}},
            web3Client=web3_client,
        )
        assert sdk.identity_registry.address == override

    def test_unknown_chain(self, web3_client):
        sdk = SDK(chainId=31337, rpcUrl="http://localhost:8545", web3Client=web3_client)
        assert sdk.registries() == {}
        with pytest.raises(ValueError, match="No identity registry address"):
            sdk.identity_registry

    def test_builds_web3_client_from_rpc_url(self):
        with patch("agent_registry_ens.core.sdk.Web3Client") as client_cls:
            sdk = SDK(chainId=SEPOLIA, rpcUrl="http://rpc.example")
        client_cls.assert_called_once_with("http://rpc.example")
        assert sdk.web3_client is client_cls.return_value

    def test_ipfs_gateways(self, web3_client):
        sdk = SDK(
            chainId=SEPOLIA,
            rpcUrl="http://localhost:8545",
            ipfsGateways=["https://gw.example/ipfs/"],
            web3Client=web3_client,
        )
        assert sdk.ipfs_client.gateways == ["https://gw.example/ipfs/"]


class TestLoadAgent:
    def test_hydrates_ens_name_from_chain(self, web3_client):
        uri = _registration_uri({
            "name": "Agent",
            "description": "desc",
            "endpoints": [
                {"name": "ENS", "endpoint": "stale.eth"},
                {"name": "agentWallet", "endpoint": "eip155:1:0x0"},
            ],
        })
        web3_client.call_contract.side_effect = _contract_calls(uri, b"agent.eth")
        sdk = SDK(chainId=SEPOLIA, rpcUrl="http://localhost:8545", web3Client=web3_client)

        agent = sdk.loadAgent(f"{SEPOLIA}:7")

        assert agent.agentId == f"{SEPOLIA}:7"
        assert agent.agentURI == uri
        assert agent.name == "Agent"
        assert agent.ensEndpoint == "agent.eth"
        assert agent.registration_file.owners == [OWNER]

    def test_keeps_registration_ens_without_on_chain_name(self, web3_client):
        uri = _registration_uri({"name": "Agent", "endpoints": [{"name": "ENS", "endpoint": "file.eth"}]})
        web3_client.call_contract.side_effect = _contract_calls(uri)
        sdk = SDK(chainId=SEPOLIA, rpcUrl="http://localhost:8545", web3Client=web3_client)

        assert sdk.loadAgent(7).ensEndpoint == "file.eth"

    def test_ignores_non_utf8_on_chain_name(self, web3_client):
        uri = _registration_uri({"name": "Agent", "endpoints": [{"name": "ENS", "endpoint": "file.eth"}]})
        web3_client.call_contract.side_effect = _contract_calls(uri, b"\xff\xfe")
        sdk = SDK(chainId=SEPOLIA, rpcUrl="http://localhost:8545", web3Client=web3_client)

        agent = sdk.loadAgent(7)

        assert agent.ensEndpoint == "file.eth"
        assert agent.registration_file.owners == [OWNER]

    def test_ipfs_registration_file(self, web3_client):
        web3_client.call_contract.side_effect = _contract_calls("ipfs://bafycid")
        sdk = SDK(
            chainId=SEPOLIA,
            rpcUrl="http://localhost:8545",
            ipfsGateways=["https://gw.example/ipfs/"],
            web3Client=web3_client,
        )

        with patch("agent_registry_ens.core.ipfs_client.requests.get") as get:
            get.return_value.text = json.dumps({"name": "Pinned"})
            agent = sdk.loadAgent(7)

        get.assert_called_once_with("https://gw.example/ipfs/bafycid", timeout=10)
        assert agent.name == "Pinned"
        assert agent.agentURI == "ipfs://bafycid"

    def test_http_registration_file(self, web3_client):
        web3_client.call_contract.side_effect = _contract_calls("https://agent.example/reg.json")
        sdk = SDK(chainId=SEPOLIA, rpcUrl="http://localhost:8545", web3Client=web3_client)

        with patch("agent_registry_ens.core.sdk.requests.get") as get:
            get.return_value.text = json.dumps({"name": "Remote"})
            agent = sdk.loadAgent("7")

        get.assert_called_once_with("https://agent.example/reg.json", timeout=10)
        assert agent.name == "Remote"

    def test_wrong_chain(self, web3_client):
        sdk = SDK(chainId=SEPOLIA, rpcUrl="http://localhost:8545", web3Client=web3_client)
        with pytest.raises(ValueError, match="not on current chain"):
            sdk.loadAgent("1:7")

    def test_token_uri_failure(self, web3_client):
        web3_client.call_contract.side_effect = RuntimeError("execution reverted")
        sdk = SDK(chainId=SEPOLIA, rpcUrl="http://localhost:8545", web3Client=web3_client)
        with pytest.raises(ValueError, match="Failed to load agent"):
            sdk.loadAgent(7)

    def test_unsupported_uri(self, web3_client):
        web3_client.call_contract.side_effect = _contract_calls("ftp://agent.example/reg.json")
        sdk = SDK(chainId=SEPOLIA, rpcUrl="http://localhost:8545", web3Client=web3_client)
        with pytest.raises(ValueError, match="Unsupported URI scheme"):
            sdk.loadAgent(7)


class TestENSVerification:
    def _sdk(self, web3_client, names):
        web3_client.ens_provider = DummyProvider(names)
        return SDK(
            chainId=SEPOLIA,
            rpcUrl="http://localhost:8545",
            registryOverrides={SEPOLIA: {"IDENTITY": VERIFIED_REGISTRY}},
            web3Client=web3_client,
        )

    def test_get_agent_registry_record(self, web3_client):
        key = build_agent_registry_record_key(SEPOLIA)
        sdk = self._sdk(web3_client, {"agent.eth": {key: encode_agent_registry_value(VERIFIED_REGISTRY, 7)}})

        record = sdk.getAgentRegistryRecord("agent.eth")

        assert record.chain_reference == SEPOLIA
        assert record.agent_id == 7
        assert record.address == VERIFIED_REGISTRY

    def test_get_agent_registry_record_other_chain(self, web3_client):
        sdk = self._sdk(web3_client, {"agent.eth": {}})
        assert sdk.getAgentRegistryRecord("agent.eth", chainId=1) is None

    def test_verify_ens_name(self, web3_client):
        key = build_agent_registry_record_key(SEPOLIA)
        sdk = self._sdk(web3_client, {"agent.eth": {key: encode_agent_registry_value(VERIFIED_REGISTRY, 7)}})

        assert sdk.verifyENSName(f"{SEPOLIA}:7", "agent.eth") is True
        assert sdk.verifyENSName(f"{SEPOLIA}:8", "agent.eth") is False
        assert sdk.verifyENSName(f"{SEPOLIA}:7", "missing.eth") is False

    def test_verify_ens_name_bare_token_id(self, web3_client):
        key = build_agent_registry_record_key(SEPOLIA)
        sdk = self._sdk(web3_client, {"agent.eth": {key: encode_agent_registry_value(VERIFIED_REGISTRY, 7)}})

        assert sdk.verifyENSName("7", "agent.eth") is True
        assert sdk.verifyENSName(7, "agent.eth") is True
        assert sdk.verifyENSName(8, "agent.eth") is False

    def test_loaded_agent_verifies(self, web3_client):
        key = build_agent_registry_record_key(SEPOLIA)
        sdk = self._sdk(web3_client, {"agent.eth": {key: encode_agent_registry_value(VERIFIED_REGISTRY, 7)}})
        web3_client.call_contract.side_effect = _contract_calls(_registration_uri({}), b"agent.eth")

        assert sdk.loadAgent(7).verifyENSName() is True


class TestCreateAgent:
    def test_create_agent(self, web3_client):
        sdk = SDK(chainId=SEPOLIA, rpcUrl="http://localhost:8545", web3Client=web3_client)

        agent = sdk.createAgent("Agent", "An agent").setENS("agent.eth")

        assert agent.agentId is None
        assert agent.name == "Agent"
        assert agent.ensEndpoint == "agent.eth"
        assert agent.verifyENSName() is False
