import os
import logging
from typing import Optional

import requests
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Ensure environment variables from .env are loaded when this module is imported.
load_dotenv()


def open_session(token: Optional[str] = None) -> requests.Session:
    """Open a requests session configured for JSON-RPC calls.

    Parameters
    ----------
    token : Optional[str]
        Bearer token for RPC providers that require one. Falls back to the
        ``CHAIN_RPC_TOKEN`` environment variable.

    Returns
    -------
    requests.Session
        Session with JSON headers (and authorization, when configured).
    """
    session = requests.Session()
    session.headers.update(
        {"Accept": "application/json", "Content-Type": "application/json"}
    )
    token = token or os.environ.get("CHAIN_RPC_TOKEN")
    if token:
        # Never log the token value
        logger.debug("Using bearer token for RPC session")
        session.headers["Authorization"] = f"Bearer {token}"
    return session


def parse_hex_quantity(value: str) -> int:
    """Decode a JSON-RPC hex quantity such as ``"0x1b4"``."""
    if not isinstance(value, str) or not value.startswith("0x"):
        raise ValueError(f"Not a hex quantity: {value!r}")
    return int(value, 16)
