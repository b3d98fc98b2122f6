"""
Agent registry ENS SDK: ENSIP-25 verification for ERC-8004 agents.
"""

from .core.agent import Agent
from .core.ens_verification import (
    AgentRegistryRecord,
    AgentRegistryRecordInput,
    CAIP_NAMESPACE_CODES,
    build_agent_registry_record,
    build_agent_registry_record_key,
    decode_agent_registry_value,
    encode_agent_registry_value,
    encode_erc7930_chain_identifier,
    fetch_agent_registry_record,
    load_agent_registry_record,
    record_matches_agent,
)
from .core.id_format import format_agent_id, parse_agent_id
from .core.models import Endpoint, EndpointType, RegistrationFile
from .core.sdk import SDK

__version__ = "0.1.0"

__all__ = [
    "SDK",
    "Agent",
    "AgentRegistryRecord",
    "AgentRegistryRecordInput",
    "CAIP_NAMESPACE_CODES",
    "Endpoint",
    "EndpointType",
    "RegistrationFile",
    "build_agent_registry_record",
    "build_agent_registry_record_key",
    "decode_agent_registry_value",
    "encode_agent_registry_value",
    "encode_erc7930_chain_identifier",
    "fetch_agent_registry_record",
    "format_agent_id",
    "load_agent_registry_record",
    "parse_agent_id",
    "record_matches_agent",
]
