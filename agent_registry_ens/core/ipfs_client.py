"""
Read-only IPFS client that fetches registration files through public gateways.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import requests

from .contracts import DEFAULT_IPFS_GATEWAYS
from .models import RegistrationFile

logger = logging.getLogger(__name__)


class IPFSClient:
    """Client for IPFS retrieval over HTTP gateways."""

    def __init__(self, gateways: Optional[List[str]] = None, timeout: int = 10):
        """Initialize IPFS client.

        Args:
            gateways: Gateway base URLs ending in `/ipfs/`, tried in order
            timeout: Per-gateway request timeout in seconds
        """
        self.gateways = list(gateways) if gateways else list(DEFAULT_IPFS_GATEWAYS)
        self.timeout = timeout

    def get(self, cid: str) -> str:
        """Get data from IPFS by CID."""
        # Extract CID from IPFS URL if needed
        if cid.startswith("ipfs://"):
            cid = cid[7:]

        for gateway in self.gateways:
            url = f"{gateway.rstrip('/')}/{cid}"
            try:
                response = requests.get(url, timeout=self.timeout)
                response.raise_for_status()
                return response.text
            except requests.RequestException as e:
                logger.debug(f"IPFS gateway {gateway} failed for {cid}: {e}")
                continue

        raise RuntimeError(f"Failed to retrieve {cid} from all IPFS gateways")

    def get_json(self, cid: str) -> Dict[str, Any]:
        """Get JSON data from IPFS by CID."""
        return json.loads(self.get(cid))

    def getRegistrationFile(self, cid: str) -> RegistrationFile:
        """Get registration file from IPFS by CID."""
        return RegistrationFile.from_dict(self.get_json(cid))
