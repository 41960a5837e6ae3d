"""Relationship intelligence and beneficial ownership endpoints."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List

from fastapi import APIRouter, HTTPException

from hoskdog.analysis.relationships import (
    analyze_address_relationships,
    analyze_beneficial_ownership,
    generate_network_graph,
)
from hoskdog.ingest.koios_client import KoiosError
from hoskdog.models import (
    AddressListRequest,
    AnalysisResponse,
    AnalyzeRequest,
    DistributionResponse,
    GraphResponse,
    OwnershipResponse,
)
from hoskdog.utils.addresses import normalize_cardano_address
from hoskdog.utils.errors import failure

LOGGER = logging.getLogger(__name__)

MAX_OWNERSHIP_ADDRESSES = 20
MAX_DISTRIBUTION_ADDRESSES = 50

router = APIRouter(tags=["relationships"])


def _require_address(payload: AnalyzeRequest, check_prefix: bool = True) -> str:
    if not (payload.address or "").strip():
        raise HTTPException(
            status_code=400,
            detail={"error": "Wallet address is required", "usage": 'POST { "address": "addr1..." }'},
        )
    if not check_prefix:
        return payload.address.strip()
    try:
        return normalize_cardano_address(payload.address)
    except ValueError as exc:
        raise HTTPException(
            status_code=400,
            detail={"error": "Invalid Cardano address format", "details": str(exc)},
        ) from exc


def _require_addresses(payload: AddressListRequest, limit: int, error: str) -> List[str]:
    addresses = payload.addresses
    if not addresses:
        raise HTTPException(
            status_code=400,
            detail={
                "error": "Array of wallet addresses is required",
                "usage": 'POST { "addresses": ["addr1...", "addr1..."] }',
            },
        )
    if len(addresses) > limit:
        raise HTTPException(status_code=400, detail={"error": error, "provided": len(addresses)})

    normalized: List[str] = []
    invalid: List[str] = []
    for address in addresses:
        try:
            normalized.append(normalize_cardano_address(address))
        except ValueError:
            invalid.append(address)
    if invalid:
        raise HTTPException(
            status_code=400,
            detail={"error": "Invalid address format detected", "invalidAddresses": invalid[:5]},
        )
    return normalized


@router.post("/relationships/analyze", response_model=AnalysisResponse)
def analyze_relationships(payload: AnalyzeRequest) -> AnalysisResponse:
    """Analyse connections, clusters and risk for a single address."""
    address = _require_address(payload)
    LOGGER.info("Analyzing relationships for address: %s (depth: %d)", address, payload.depth)

    try:
        analysis = analyze_address_relationships(address, payload.depth)
    except KoiosError as exc:
        LOGGER.error("Relationship analysis failed for %s: %s", address, exc)
        raise failure(502, "Failed to analyze relationships", exc) from exc

    return AnalysisResponse(data=analysis)


@router.post("/relationships/graph", response_model=GraphResponse)
def relationship_graph(payload: AnalyzeRequest) -> GraphResponse:
    """Return nodes and edges for visualising an address's relationships."""
    address = _require_address(payload, check_prefix=False)
    LOGGER.info("Generating network graph for: %s", address)

    try:
        analysis = analyze_address_relationships(address, payload.depth)
    except KoiosError as exc:
        LOGGER.error("Network graph generation failed for %s: %s", address, exc)
        raise failure(502, "Failed to generate network graph", exc) from exc

    graph = generate_network_graph(analysis)
    return GraphResponse(
        data=graph,
        metadata={
            "address": address,
            "depth": payload.depth,
            "node_count": len(graph["nodes"]),
            "edge_count": len(graph["edges"]),
            "generated_at": datetime.now(timezone.utc).isoformat(),
        },
    )


@router.post("/ownership/beneficial", response_model=OwnershipResponse, response_model_exclude_none=True)
def beneficial_ownership(payload: AddressListRequest) -> OwnershipResponse:
    """Look for shared counterparties and control patterns across addresses."""
    addresses = _require_addresses(
        payload,
        MAX_OWNERSHIP_ADDRESSES,
        f"Too many addresses. Maximum {MAX_OWNERSHIP_ADDRESSES} allowed",
    )
    LOGGER.info("Analyzing beneficial ownership for %d addresses", len(addresses))

    try:
        ownership = analyze_beneficial_ownership(addresses)
    except KoiosError as exc:
        LOGGER.error("Beneficial ownership analysis failed: %s", exc)
        raise failure(502, "Failed to analyze beneficial ownership", exc) from exc

    return OwnershipResponse(data=ownership)


@router.post("/ownership/distribution", response_model=DistributionResponse)
def ownership_distribution(payload: AddressListRequest) -> DistributionResponse:
    """Summarise how concentrated connections are across the supplied addresses."""
    addresses = _require_addresses(
        payload,
        MAX_DISTRIBUTION_ADDRESSES,
        f"Too many addresses. Maximum {MAX_DISTRIBUTION_ADDRESSES} allowed for distribution analysis",
    )
    LOGGER.info("Analyzing distribution for %d addresses", len(addresses))

    try:
        ownership = analyze_beneficial_ownership(addresses)
    except KoiosError as exc:
        LOGGER.error("Distribution analysis failed: %s", exc)
        raise failure(502, "Failed to analyze distribution", exc) from exc

    metrics = ownership["distribution_metrics"]
    return DistributionResponse(
        data={
            "address_count": len(addresses),
            "distribution_metrics": metrics,
            "beneficial_owner_count": len(ownership["beneficial_owners"]),
            "control_pattern_count": len(ownership["control_patterns"]),
            "summary": {
                "is_highly_concentrated": metrics["concentration"] > 50,
                "is_diverse": metrics["diversity"] > 50,
                "has_centralization": len(metrics["centralized_addresses"]) > 0,
            },
        }
    )


@router.get("/relationships/health")
def relationships_health() -> Dict[str, object]:
    return {
        "status": "OK",
        "service": "Relationship Intelligence & Beneficial Ownership Analysis",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "endpoints": [
            "POST /api/relationships/analyze",
            "POST /api/relationships/graph",
            "POST /api/ownership/beneficial",
            "POST /api/ownership/distribution",
        ],
    }


__all__ = ["router"]
