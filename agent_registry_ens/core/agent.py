"""
Agent class for managing individual agents.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, List, Optional
from typing import TYPE_CHECKING
from .models import (
    AgentId, URI, Timestamp,
    EndpointType, Endpoint, RegistrationFile
)
from .ens_verification import (
    load_agent_registry_record,
    record_matches_agent,
)
from .id_format import parse_agent_id

if TYPE_CHECKING:
    from .sdk import SDK

logger = logging.getLogger(__name__)


class Agent:
    """Represents an individual agent with its registration data."""

    def __init__(self, sdk: "SDK", registration_file: RegistrationFile):
        """Initialize agent with SDK and registration file."""
        self.sdk = sdk
        self.registration_file = registration_file

    # Read-only properties for direct access
    @property
    def agentId(self) -> Optional[AgentId]:
        """Get agent ID (read-only)."""
        return self.registration_file.agentId

    @property
    def agentURI(self) -> Optional[URI]:
        """Get agent URI (read-only)."""
        return self.registration_file.agentURI

    @property
    def name(self) -> str:
        return self.registration_file.name

    @property
    def description(self) -> str:
        return self.registration_file.description

    @property
    def image(self) -> Optional[URI]:
        return self.registration_file.image

    @property
    def active(self) -> bool:
        return self.registration_file.active

    @property
    def endpoints(self) -> List[Endpoint]:
        """Get agent endpoints list (read-only - use setter methods to modify)."""
        return self.registration_file.endpoints

    @property
    def metadata(self) -> Dict[str, Any]:
        return self.registration_file.metadata

    @property
    def updatedAt(self) -> Timestamp:
        return self.registration_file.updatedAt

    @property
    def ensEndpoint(self) -> Optional[str]:
        """Get ENS endpoint value (read-only)."""
        for endpoint in self.registration_file.endpoints:
            if endpoint.type == EndpointType.ENS:
                return endpoint.value
        return None

    def registrationFile(self) -> RegistrationFile:
        """Get the compiled registration file."""
        return self.registration_file

    def updateInfo(
        self,
        name: Optional[str] = None,
        description: Optional[str] = None,
        image: Optional[URI] = None
    ) -> 'Agent':
        """Update basic agent information."""
        if name is not None:
            self.registration_file.name = name
        if description is not None:
            self.registration_file.description = description
        if image is not None:
            self.registration_file.image = image

        self.registration_file.updatedAt = int(time.time())
        return self

    # ENS management
    def setENS(self, name: str, version: str = "1.0") -> 'Agent':
        """Set the ENS name advertised in the registration file."""
        # Remove existing ENS endpoints
        self.registration_file.endpoints = [
            ep for ep in self.registration_file.endpoints
            if ep.type != EndpointType.ENS
        ]

        self.registration_file.endpoints.append(
            Endpoint(type=EndpointType.ENS, value=name, meta={"version": version})
        )
        self.registration_file.updatedAt = int(time.time())
        return self

    def removeENS(self) -> 'Agent':
        """Remove the ENS endpoint, if any."""
        self.registration_file.endpoints = [
            ep for ep in self.registration_file.endpoints
            if ep.type != EndpointType.ENS
        ]
        self.registration_file.updatedAt = int(time.time())
        return self

    def _ens_provider(self) -> Any:
        web3_client = getattr(self.sdk, "web3_client", None)
        if web3_client is None:
            return None
        provider = getattr(web3_client, "ens_provider", None)
        if provider is None:
            provider = getattr(web3_client, "w3", None)
        return provider

    def verifyENSName(self, ens_name: Optional[str] = None) -> bool:
        """
        Verify the agent's ENS name against ENSIP-25 registry records.

        Fetches the `agent-registry:<chain>` text record for the agent's chain,
        decodes it and compares it against the agent ID and the SDK's identity
        registry address. Returns False on any mismatch or missing data.
        """
        # Fast fail if the agent is missing ENS info or is not registered yet.
        ens_name = ens_name or self.ensEndpoint
        agent_id = self.registration_file.agentId
        if not ens_name or not agent_id:
            return False

        try:
            chain_id, token_id = parse_agent_id(agent_id)
        except ValueError:
            logger.debug(f"Cannot verify ENS name, unparsable agent ID {agent_id!r}")
            return False

        provider = self._ens_provider()
        if provider is None:
            return False

        record = load_agent_registry_record(provider, ens_name, chain_id)
        if not record:
            return False

        # Compare against the exact registry contract the SDK talks to.
        try:
            registry_address = self.sdk.identity_registry.address
        except Exception as e:
            logger.debug(f"Identity registry lookup failed during ENS verification: {e}")
            return False

        matches = record_matches_agent(
            record,
            {
                "chainId": chain_id,
                "registryAddress": registry_address,
                "agentId": token_id,
            },
        )
        if not matches:
            logger.debug(f"ENS record on {ens_name} does not match agent {agent_id}")
        return matches

    # Utility methods
    def toJson(self) -> str:
        """Convert registration file to JSON."""
        try:
            registry_address = self.sdk.identity_registry.address
        except ValueError:
            registry_address = None
        return json.dumps(self.registration_file.to_dict(
            chain_id=self.sdk.chain_id(),
            identity_registry_address=registry_address
        ), indent=2)
