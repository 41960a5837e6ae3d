"""Pydantic schemas for the relationship intelligence and ownership APIs."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field

from .base import CamelModel


class AnalyzeRequest(CamelModel):
    """Single-address analysis request."""

    address: Optional[str] = Field(None, description="Bech32 address starting with addr1 or stake1")
    depth: int = Field(2, ge=1, le=5, description="Requested analysis depth (echoed, single hop)")


class AddressListRequest(CamelModel):
    """Batch request for ownership and distribution analysis."""

    addresses: Optional[List[str]] = None


class Connection(CamelModel):
    """Edge from the analysed address to a counterparty (or transaction)."""

    target: str
    strength: int = Field(..., ge=1)
    first_seen: Optional[int] = None
    last_seen: Optional[int] = None
    type: Literal["counterparty", "transaction"]


class Cluster(CamelModel):
    id: str
    type: str
    addresses: List[str]
    size: int
    risk_level: str


class AnalysisMetadata(CamelModel):
    analyzed_at: str
    total_connections: int = 0
    unique_addresses: int = 0
    transaction_count: int = 0
    first_seen: Optional[int] = None
    last_seen: Optional[int] = None
    source: str = "counterparty"


class RelationshipAnalysis(CamelModel):
    address: str
    depth: int
    connections: List[Connection]
    clusters: List[Cluster]
    risk_score: int = Field(..., ge=0, le=100)
    metadata: AnalysisMetadata


class AnalysisResponse(CamelModel):
    success: bool = True
    data: RelationshipAnalysis


class GraphNode(CamelModel):
    id: str
    label: str
    type: str
    connections: Optional[int] = None
    strength: Optional[int] = None


class GraphEdge(CamelModel):
    source: str
    target: str
    weight: int
    type: str


class NetworkGraph(CamelModel):
    nodes: List[GraphNode]
    edges: List[GraphEdge]
    clusters: List[Cluster]


class GraphMetadata(CamelModel):
    address: str
    depth: int
    node_count: int
    edge_count: int
    generated_at: str


class GraphResponse(CamelModel):
    success: bool = True
    data: NetworkGraph
    metadata: GraphMetadata


class BeneficialOwner(CamelModel):
    address: str
    likelihood: float = Field(..., ge=0.0, le=100.0)
    strength: int
    connected_addresses: List[str]
    type: Literal["strong", "moderate"]


class ControlPattern(CamelModel):
    type: Literal["hub", "synchronized"]
    description: str
    address: Optional[str] = None
    connection_count: Optional[int] = None
    addresses: Optional[List[str]] = None
    confidence: Optional[float] = None


class CentralizedAddress(CamelModel):
    address: str
    connections: int


class DistributionMetrics(CamelModel):
    concentration: float = 0.0
    diversity: float = 0.0
    centralized_addresses: List[CentralizedAddress] = Field(default_factory=list)


class OwnershipMetadata(CamelModel):
    analyzed_at: str
    address_count: int


class OwnershipAnalysis(CamelModel):
    addresses: List[str]
    beneficial_owners: List[BeneficialOwner]
    control_patterns: List[ControlPattern]
    distribution_metrics: DistributionMetrics
    metadata: OwnershipMetadata


class OwnershipResponse(CamelModel):
    success: bool = True
    data: OwnershipAnalysis


class DistributionSummary(CamelModel):
    is_highly_concentrated: bool
    is_diverse: bool
    has_centralization: bool


class DistributionData(CamelModel):
    address_count: int
    distribution_metrics: DistributionMetrics
    beneficial_owner_count: int
    control_pattern_count: int
    summary: DistributionSummary


class DistributionResponse(CamelModel):
    success: bool = True
    data: DistributionData


__all__ = [
    "AddressListRequest",
    "AnalysisResponse",
    "AnalyzeRequest",
    "BeneficialOwner",
    "Cluster",
    "Connection",
    "ControlPattern",
    "DistributionData",
    "DistributionMetrics",
    "DistributionResponse",
    "DistributionSummary",
    "GraphMetadata",
    "GraphResponse",
    "NetworkGraph",
    "OwnershipAnalysis",
    "OwnershipResponse",
    "RelationshipAnalysis",
]
