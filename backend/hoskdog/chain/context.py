"""Utility helpers for managing shared Blockfrost chain contexts."""

import logging
from typing import Dict, Optional

from blockfrost import ApiError, ApiUrls
from pycardano import BlockFrostChainContext, ChainContext

from hoskdog.config import is_mainnet, network_name

LOGGER = logging.getLogger(__name__)

_CONTEXTS: Dict[str, ChainContext] = {}


class ChainNotConfigured(RuntimeError):
    """Raised when a chain context is requested without a Blockfrost key."""


def _build_context(project_id: str) -> ChainContext:
    """Create a Blockfrost-backed chain context for the configured network."""
    base_url = ApiUrls.mainnet.value if is_mainnet() else ApiUrls.preprod.value
    LOGGER.info("Initializing Blockfrost chain context for %s", network_name())
    return BlockFrostChainContext(project_id=project_id, base_url=base_url)


def get_context(project_id: Optional[str]) -> ChainContext:
    """Return the shared chain context for ``project_id``, creating it if needed."""
    if not project_id:
        raise ChainNotConfigured("Blockfrost API key not set. See .env.example")

    if project_id not in _CONTEXTS:
        try:
            _CONTEXTS[project_id] = _build_context(project_id)
        except ApiError as exc:
            LOGGER.exception("Unable to initialize Blockfrost context: %s", exc)
            raise RuntimeError("Failed to connect to Blockfrost") from exc

    return _CONTEXTS[project_id]


def reset_contexts() -> None:
    """Drop cached chain contexts so the next request rebuilds them."""
    if _CONTEXTS:
        LOGGER.info("Dropping %d cached chain contexts", len(_CONTEXTS))
    _CONTEXTS.clear()


__all__ = ["ChainNotConfigured", "get_context", "reset_contexts"]
