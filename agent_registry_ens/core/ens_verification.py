"""
Utilities used by `Agent.verifyENSName()` to read and validate ENSIP-25 records.

We fetch the ENS text key `agent-registry:<7930 chain id>`,
decode the value (`<EIP55 registry address><agentIdLength><agentIdHex>`), then
compare the decoded registry + token id against what the SDK expects.
"""

from __future__ import annotations

import logging
import string
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Mapping, Optional, Protocol, Tuple

from eth_utils import (
    big_endian_to_int,
    decode_hex,
    int_to_big_endian,
    is_checksum_address,
    is_checksum_formatted_address,
    to_checksum_address,
)

# Currently restricted to EVM (eip155) namespaces; future namespaces can be added here.
CAIP_NAMESPACE_CODES: Mapping[str, int] = MappingProxyType({"eip155": 0x0000})
CAIP_VERSION = 1
DEFAULT_NAMESPACE = "eip155"

RECORD_KEY_PREFIX = "agent-registry:"
ADDRESS_SECTION_LENGTH = 42  # 0x + 40 hex chars for EVM addresses
MAX_AGENT_ID_BYTES = 0xFF

logger = logging.getLogger(__name__)


class TextResolver(Protocol):
    """Resolver bound to a single ENS name."""

    def get_text(self, key: str) -> Optional[str]:
        ...


class NameResolutionProvider(Protocol):
    """Anything that can hand out a resolver for an ENS name."""

    def get_resolver(self, name: str) -> Optional[TextResolver]:
        ...


@dataclass(frozen=True)
class AgentRegistryRecordInput:
    """Values a name owner publishes when binding an ENS name to an agent."""

    chain_id: int
    registry_address: str
    agent_id: int
    namespace: str = DEFAULT_NAMESPACE


@dataclass(frozen=True)
class AgentRegistryRecord:
    """Decoded representation of the ENS registry record."""

    version: int
    chain_type: int
    chain_reference: int
    address: str
    agent_id: int


def _normalize_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError(f"Unsupported numeric type: {type(value)!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text[:2].lower() == "0x":
            digits, base, allowed = text[2:], 16, string.hexdigits
        else:
            digits, base, allowed = text, 10, string.digits
        # int() alone would also take underscores and non-ASCII digits
        if not digits or not all(ch in allowed for ch in digits):
            raise ValueError(f"Invalid integer string: {value!r}")
        return int(digits, base)
    raise TypeError(f"Unsupported numeric type: {type(value)!r}")


def _require_namespace(namespace: str) -> int:
    try:
        return CAIP_NAMESPACE_CODES[namespace]
    except (KeyError, TypeError):
        raise ValueError(f"Unsupported CAIP namespace: {namespace}") from None


def _normalize_address(address: Any) -> str:
    """EIP-55 normalize, rejecting mixed-case input with a bad checksum."""
    if not isinstance(address, str):
        raise TypeError("Address must be a string")
    if is_checksum_formatted_address(address) and not is_checksum_address(address):
        raise ValueError(f"Invalid EIP-55 checksum for address {address}")
    return to_checksum_address(address)


def _chain_reference_bytes(chain_id: int) -> bytes:
    if chain_id < 0:
        raise ValueError("Chain reference must be non-negative")
    # int_to_big_endian(0) yields a single zero byte, matching the minimal encoding.
    return int_to_big_endian(chain_id)


def encode_erc7930_chain_identifier(chain_id: Any, namespace: str = DEFAULT_NAMESPACE) -> str:
    """Encode the ERC-7930 chain identifier (no address), as lowercase hex without leading 0x."""
    chain_type = _require_namespace(namespace)
    chain_reference_bytes = _chain_reference_bytes(_normalize_int(chain_id))
    if len(chain_reference_bytes) > 0xFF:
        raise ValueError("Chain reference does not fit in 255 bytes")

    version_bytes = CAIP_VERSION.to_bytes(2, "big")
    chain_type_bytes = chain_type.to_bytes(2, "big")
    chain_reference_length = len(chain_reference_bytes).to_bytes(1, "big")
    # addrLen=0 per ERC-7930 because the chain identifier envelope does not include an address.
    address_length = (0).to_bytes(1, "big")

    payload = (
        version_bytes
        + chain_type_bytes
        + chain_reference_length
        + chain_reference_bytes
        + address_length
    )
    return payload.hex()


def build_agent_registry_record_key(
    chain_id: Any, namespace: str = DEFAULT_NAMESPACE
) -> str:
    """
    Build key: `agent-registry:<hex 7930 chain id>` (EVM only).
    See ERC-7930 for chain id binary envelope (addrLen=0), hex-encoded.
    """
    _require_namespace(namespace)
    normalized_chain_id = _normalize_int(chain_id)
    envelope_hex = encode_erc7930_chain_identifier(normalized_chain_id, namespace)
    return f"{RECORD_KEY_PREFIX}{envelope_hex}"


def encode_agent_registry_value(registry_address: str, agent_id: Any) -> str:
    """
    Encode value text: `<EIP55 address><agentIdLen><agentId>`.

    Agent id zero is written as zero bytes (`00` length, empty payload).
    """
    agent_id = _normalize_int(agent_id)
    if agent_id < 0:
        raise ValueError("Agent ID must be non-negative")

    agent_bytes = int_to_big_endian(agent_id) if agent_id else b""
    if len(agent_bytes) > MAX_AGENT_ID_BYTES:
        raise ValueError("Agent ID does not fit in 255 bytes")

    address = _normalize_address(registry_address)
    return f"{address}{len(agent_bytes):02x}{agent_bytes.hex()}"


def build_agent_registry_record(record: AgentRegistryRecordInput) -> Tuple[str, str]:
    """Return the `(key, value)` text record pair for publishing on an ENS name."""
    key = build_agent_registry_record_key(record.chain_id, record.namespace)
    value = encode_agent_registry_value(record.registry_address, record.agent_id)
    return key, value


def decode_agent_registry_value(value: str) -> AgentRegistryRecord:
    """
    Decode value text: `<EIP55 address><agentIdLen><agentId>`.
    Validates minimum length and hex sizes; normalizes address via EIP-55.
    """
    if not isinstance(value, str):
        raise TypeError("Agent registry value must be a string")

    if not value.startswith("0x"):
        raise ValueError("Agent registry segment must start with 0x")

    # Require checksum address (42 chars) + at least one byte for agentId length.
    if len(value) < ADDRESS_SECTION_LENGTH + 2:
        raise ValueError("Agent registry record value too short")

    # Split the payload into `<address><len><agentId>` per ENSIP-25.
    address_text = value[:ADDRESS_SECTION_LENGTH]
    length_hex = value[ADDRESS_SECTION_LENGTH : ADDRESS_SECTION_LENGTH + 2]
    if not all(ch in string.hexdigits for ch in length_hex):
        raise ValueError("Invalid agent ID length")
    agent_id_length = int(length_hex, 16)

    agent_hex = value[ADDRESS_SECTION_LENGTH + 2 :].lower()
    if not all(ch in string.hexdigits for ch in agent_hex):
        raise ValueError("Agent ID must be valid hex")
    try:
        agent_bytes = decode_hex(agent_hex)
    except ValueError as exc:
        raise ValueError("Agent ID must be valid hex") from exc

    if len(agent_bytes) != agent_id_length:
        raise ValueError("Agent ID length does not match payload")

    agent_id = big_endian_to_int(agent_bytes) if agent_bytes else 0
    normalized_address = _normalize_address(address_text)

    return AgentRegistryRecord(
        version=CAIP_VERSION,
        chain_type=CAIP_NAMESPACE_CODES[DEFAULT_NAMESPACE],
        chain_reference=0,
        address=normalized_address,
        agent_id=agent_id,
    )


def _as_name_provider(provider: Any) -> Optional[NameResolutionProvider]:
    if provider is None:
        return None
    if callable(getattr(provider, "get_resolver", None)):
        return provider

    # A web3.Web3 instance; ENS lookups go through its `ens` module.
    ens_api = getattr(provider, "ens", None)
    if ens_api is None:
        return None

    from .web3_client import Web3ENSProvider

    return Web3ENSProvider(ens_api)


def fetch_agent_registry_record(
    provider: Any,
    ens_name: str,
    record_key: str,
) -> Optional[str]:
    """
    Resolve the raw text record for the given ENS name and record key.
    Returns None if missing or if the resolver lookup fails.
    """
    normalized_key = record_key.lower()

    name_provider = _as_name_provider(provider)
    if name_provider is None:
        logger.debug("Provider has no ENS support; cannot resolve %s", ens_name)
        return None

    try:
        resolver = name_provider.get_resolver(ens_name)
    except Exception as exc:
        logger.debug("Failed to get ENS resolver for %s: %s", ens_name, exc)
        return None

    if resolver is None:
        logger.debug("No ENS resolver set for %s", ens_name)
        return None

    try:
        return resolver.get_text(normalized_key)
    except Exception as exc:
        logger.debug(
            "Failed to fetch ENS text record %s for %s: %s",
            normalized_key,
            ens_name,
            exc,
        )
        return None


def load_agent_registry_record(
    provider: Any,
    ens_name: str,
    chain_id: Any,
    namespace: str = DEFAULT_NAMESPACE,
) -> Optional[AgentRegistryRecord]:
    """
    Load and decode an ENS agent-registry record for a specific chain.

    Args:
        provider: A `NameResolutionProvider` or a web3.py `Web3` instance.
        ens_name: ENS name to inspect (e.g., `agent.eth`).
        chain_id: Chain identifier encoded in the ENSIP key (eip155 only).
        namespace: CAIP namespace (defaults to `eip155`; other namespaces not yet supported).

    Returns:
        The decoded record with `chain_reference` set to `chain_id`, or None when
        the record is missing, unreachable or malformed.
    """
    # Build the ENS text key that points to the agent registry payload.
    record_key = build_agent_registry_record_key(chain_id, namespace)
    chain_reference = _normalize_int(chain_id)

    value = fetch_agent_registry_record(provider, ens_name, record_key)
    if not value:
        logger.debug("ENS text record %s missing for %s", record_key, ens_name)
        return None

    try:
        decoded = decode_agent_registry_value(value)
    except (ValueError, TypeError) as exc:
        logger.debug(
            "Failed to decode ENS text record %s for %s: %s",
            record_key,
            ens_name,
            exc,
        )
        return None

    return replace(decoded, chain_reference=chain_reference)


def record_matches_agent(
    record: AgentRegistryRecord,
    expected: Mapping[str, Any],
) -> bool:
    """Compare a decoded record against expected agent data (EVM only)."""
    # Only the eip155 code is defined; multi-namespace support must compare
    # against the requested namespace instead of this constant.
    if record.version != CAIP_VERSION or record.chain_type != CAIP_NAMESPACE_CODES[DEFAULT_NAMESPACE]:
        return False

    try:
        expected_chain_id = _normalize_int(expected.get("chainId"))
        expected_agent_id = _normalize_int(expected.get("agentId"))
    except (ValueError, TypeError):
        return False

    # The ENS record must be anchored to the same chain, registry contract, and token id.
    if record.chain_reference != expected_chain_id:
        return False

    try:
        expected_address = _normalize_address(expected.get("registryAddress"))
    except (ValueError, TypeError):
        return False

    if record.address != expected_address:
        return False

    if record.agent_id != expected_agent_id:
        return False

    return True
