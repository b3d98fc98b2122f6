"""
Main SDK class for the agent registry ENS SDK.
"""

from __future__ import annotations

import base64
import json
import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

import requests

from .models import (
    AgentId, ChainId, Address, URI,
    EndpointType, Endpoint, RegistrationFile,
)
from .web3_client import Web3Client
from .contracts import IDENTITY_REGISTRY_ABI, DEFAULT_REGISTRIES
from .agent import Agent
from .ens_verification import AgentRegistryRecord, DEFAULT_NAMESPACE, load_agent_registry_record
from .id_format import format_agent_id, parse_agent_id
from .ipfs_client import IPFSClient

logger = logging.getLogger(__name__)


class SDK:
    """Main SDK class: registry lookup, agent loading and ENS verification."""

    def __init__(
        self,
        chainId: ChainId,
        rpcUrl: str,
        registryOverrides: Optional[Dict[ChainId, Dict[str, Address]]] = None,
        ipfsGateways: Optional[List[str]] = None,
        web3Client: Optional[Any] = None,
        httpTimeout: int = 10,
    ):
        """Initialize the SDK.

        Args:
            chainId: Chain the identity registry lives on
            rpcUrl: JSON-RPC endpoint (also used for ENS lookups)
            registryOverrides: Per-chain registry addresses, e.g. {11155111: {"IDENTITY": "0x..."}}
            ipfsGateways: Gateway base URLs used to fetch `ipfs://` registration files
            web3Client: Preconfigured client; skips creating one from rpcUrl
            httpTimeout: Timeout in seconds for registration file fetches
        """
        self.chainId = chainId
        self.rpcUrl = rpcUrl
        self.web3_client = web3Client if web3Client is not None else Web3Client(rpcUrl)

        # Registry addresses
        self.registry_overrides = registryOverrides or {}
        self._registries = self._resolve_registries()
        self._identity_registry = None

        self.ipfs_client = IPFSClient(gateways=ipfsGateways, timeout=httpTimeout)
        self._http_timeout = httpTimeout

    def _resolve_registries(self) -> Dict[str, Address]:
        """Resolve registry addresses for current chain."""
        registries = DEFAULT_REGISTRIES.get(self.chainId, {}).copy()
        if self.chainId in self.registry_overrides:
            registries.update(self.registry_overrides[self.chainId])
        return registries

    @property
    def identity_registry(self):
        """Get identity registry contract."""
        if self._identity_registry is None:
            address = self._registries.get("IDENTITY")
            if not address:
                raise ValueError(f"No identity registry address for chain {self.chainId}")
            self._identity_registry = self.web3_client.get_contract(
                address, IDENTITY_REGISTRY_ABI
            )
        return self._identity_registry

    def chain_id(self) -> ChainId:
        """Get current chain ID."""
        return self.chainId

    def registries(self) -> Dict[str, Address]:
        """Get resolved addresses for current chain."""
        return self._registries.copy()

    # Agent lifecycle methods
    def createAgent(
        self,
        name: str,
        description: str,
        image: Optional[URI] = None,
    ) -> Agent:
        """Create a new agent (off-chain object in memory)."""
        registration_file = RegistrationFile(
            name=name,
            description=description,
            image=image,
            updatedAt=int(time.time())
        )
        return Agent(sdk=self, registration_file=registration_file)

    def loadAgent(self, agentId: AgentId) -> Agent:
        """Load a registered agent from the identity registry and its registration file."""
        agentId = str(agentId)
        if ":" in agentId:
            chain_id, token_id = parse_agent_id(agentId)
            if chain_id != self.chainId:
                raise ValueError(f"Agent {agentId} is not on current chain {self.chainId}")
        else:
            token_id = int(agentId)

        try:
            token_uri = self.web3_client.call_contract(
                self.identity_registry, "tokenURI", token_id
            )
        except Exception as e:
            raise ValueError(f"Failed to load agent {agentId}: {e}") from e

        registration_file = self._load_registration_file(token_uri) if token_uri else RegistrationFile()
        registration_file.agentId = format_agent_id(self.chainId, token_id)
        registration_file.agentURI = token_uri or None

        self._hydrate_agent_data(registration_file, token_id)
        return Agent(sdk=self, registration_file=registration_file)

    def _load_registration_file(self, uri: str) -> RegistrationFile:
        """Load registration file from URI."""
        if uri.startswith("ipfs://"):
            return self.ipfs_client.getRegistrationFile(uri)

        if uri.startswith("http://") or uri.startswith("https://"):
            response = requests.get(uri, timeout=self._http_timeout)
            response.raise_for_status()
            content = response.text
        elif uri.startswith("data:"):
            header, _, payload = uri.partition(",")
            if header.endswith(";base64"):
                content = base64.b64decode(payload).decode("utf-8")
            else:
                content = unquote(payload)
        else:
            raise ValueError(f"Unsupported URI scheme: {uri}")

        return RegistrationFile.from_dict(json.loads(content))

    def _hydrate_agent_data(self, registration_file: RegistrationFile, token_id: int) -> None:
        """Hydrate owner and on-chain ENS name."""
        owner = self.web3_client.call_contract(
            self.identity_registry, "ownerOf", token_id
        )
        registration_file.owners = [owner]

        try:
            name_bytes = self.web3_client.call_contract(
                self.identity_registry, "getMetadata", token_id, "agentName"
            )
        except Exception as e:
            logger.debug(f"No on-chain agentName for token {token_id}: {e}")
            return

        if not name_bytes:
            return

        try:
            ens_name = bytes(name_bytes).decode("utf-8")
        except UnicodeDecodeError as e:
            logger.debug(f"Ignoring non UTF-8 agentName for token {token_id}: {e}")
            return

        # On-chain agentName wins over the registration file
        registration_file.endpoints = [
            ep for ep in registration_file.endpoints
            if ep.type != EndpointType.ENS
        ]
        registration_file.endpoints.append(
            Endpoint(type=EndpointType.ENS, value=ens_name, meta={"version": "1.0"})
        )

    # ENS verification
    def getAgentRegistryRecord(
        self,
        ensName: str,
        chainId: Optional[ChainId] = None,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> Optional[AgentRegistryRecord]:
        """Load the ENSIP-25 agent-registry record an ENS name publishes for a chain."""
        target_chain = chainId if chainId is not None else self.chainId
        return load_agent_registry_record(
            self.web3_client.ens_provider, ensName, target_chain, namespace
        )

    def verifyENSName(self, agentId: AgentId, ensName: str) -> bool:
        """Check that `ensName` publishes a registry record pointing at `agentId`.

        A bare token id is taken to be on the SDK's current chain, as in `loadAgent`.
        """
        agentId = str(agentId)
        if ":" not in agentId:
            agentId = f"{self.chainId}:{agentId}"
        registration_file = RegistrationFile(agentId=agentId)
        return Agent(sdk=self, registration_file=registration_file).verifyENSName(ensName)
