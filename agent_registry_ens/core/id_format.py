"""
Agent identifier helpers: `<chainId>:<tokenId>`.
"""

from __future__ import annotations

from typing import Tuple

from .models import AgentId


def _parse_part(part: str, label: str, agent_id: str) -> int:
    if not (part.isascii() and part.isdigit()):
        raise ValueError(f"Invalid {label} in agent ID: {agent_id}")
    return int(part, 10)


def parse_agent_id(agent_id: AgentId) -> Tuple[int, int]:
    """Split `"8453:1234"` into `(8453, 1234)`."""
    if not isinstance(agent_id, str) or ":" not in agent_id:
        raise ValueError(f"Agent ID must be of the form <chainId>:<tokenId>, got: {agent_id!r}")

    chain_part, token_part = agent_id.split(":", 1)
    return (
        _parse_part(chain_part, "chain ID", agent_id),
        _parse_part(token_part, "token ID", agent_id),
    )


def format_agent_id(chain_id: int, token_id: int) -> AgentId:
    if chain_id < 0 or token_id < 0:
        raise ValueError("Chain ID and token ID must be non-negative")
    return f"{chain_id}:{token_id}"
