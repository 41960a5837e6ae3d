"""Relationship intelligence and beneficial-ownership heuristics.

Everything here is rebuilt per request from the address history that Koios
returns: a single-hop graph of counterparties, frequency-tier clusters, an
additive risk score, and cross-address heuristics (shared counterparties,
hubs, synchronized activity, connection concentration).
"""

from __future__ import annotations

import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from hoskdog.ingest.koios_client import (
    KoiosError,
    TransactionParties,
    TransactionRecord,
    fetch_address_transactions,
    fetch_transaction_parties,
)

LOGGER = logging.getLogger(__name__)

TIMING_WINDOW_SECONDS = 3600
HUB_CONNECTION_THRESHOLD = 10
HIGH_FREQUENCY_STRENGTH = 5
MAX_PARALLEL_ANALYSES = 8

CLUSTER_TIERS = (
    ("high-frequency", "frequent-interaction", "medium", lambda strength: strength >= 3),
    ("medium-frequency", "moderate-interaction", "low", lambda strength: strength == 2),
    ("low-frequency", "rare-interaction", "low", lambda strength: strength == 1),
)


def _graph_rows(
    source: str,
    transactions: Sequence[TransactionRecord],
    parties: Optional[Dict[str, TransactionParties]],
    now: int,
) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    unresolved = 0
    for tx in transactions:
        timestamp = tx.block_time or now

        if parties is None:
            # Without resolved inputs/outputs only the transaction itself is known.
            rows.append({"target": tx.tx_hash, "tx_hash": tx.tx_hash, "timestamp": timestamp, "type": "transaction"})
            continue

        tx_parties = parties.get(tx.tx_hash)
        if tx_parties is None:
            unresolved += 1
            continue

        for counterparty in tx_parties.addresses:
            if counterparty == source:
                continue
            rows.append({"target": counterparty, "tx_hash": tx.tx_hash, "timestamp": timestamp, "type": "counterparty"})

    if unresolved:
        LOGGER.warning("Koios returned no UTxOs for %d of %d transactions of %s", unresolved, len(transactions), source)
    return rows


def build_relationship_graph(
    source: str,
    transactions: Sequence[TransactionRecord],
    parties: Optional[Dict[str, TransactionParties]] = None,
    now: Optional[int] = None,
) -> Dict[str, Any]:
    """Build the single-hop connection graph for ``source``.

    ``strength`` is the number of distinct transactions shared with a target.
    Timestamps are block times in seconds. With ``parties`` given, transactions
    missing from it contribute no connections; with ``parties=None`` every
    transaction becomes a connection of type ``transaction``.
    """
    now = int(now if now is not None else time.time())
    graph: Dict[str, Any] = {
        "source": source,
        "connections": [],
        "transaction_count": len(transactions),
        "first_seen": None,
        "last_seen": None,
    }

    if transactions:
        times = [tx.block_time or now for tx in transactions]
        graph["first_seen"] = int(min(times))
        graph["last_seen"] = int(max(times))

    rows = _graph_rows(source, transactions, parties, now)
    if not rows:
        return graph

    df = pd.DataFrame(rows)
    grouped = df.groupby("target", sort=False).agg(
        strength=("tx_hash", "nunique"),
        first_seen=("timestamp", "min"),
        last_seen=("timestamp", "max"),
        type=("type", "first"),
    )

    graph["connections"] = [
        {
            "target": str(target),
            "strength": int(row["strength"]),
            "first_seen": int(row["first_seen"]),
            "last_seen": int(row["last_seen"]),
            "type": str(row["type"]),
        }
        for target, row in grouped.iterrows()
    ]
    return graph


def identify_clusters(graph: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Bucket connections into frequency tiers, omitting empty tiers."""
    clusters: List[Dict[str, Any]] = []
    for cluster_id, cluster_type, risk_level, matches in CLUSTER_TIERS:
        members = [c["target"] for c in graph["connections"] if matches(c["strength"])]
        if not members:
            continue
        clusters.append(
            {
                "id": cluster_id,
                "type": cluster_type,
                "addresses": members,
                "size": len(members),
                "risk_level": risk_level,
            }
        )
    return clusters


def calculate_risk_score(graph: Dict[str, Any]) -> int:
    """Additive 0-100 score from connection volume, repetition and history length."""
    score = 0
    connection_count = len(graph["connections"])

    if connection_count > 30:
        score += 20
    elif connection_count > 15:
        score += 10

    high_frequency = sum(1 for c in graph["connections"] if c["strength"] >= HIGH_FREQUENCY_STRENGTH)
    if high_frequency > 5:
        score += 30
    elif high_frequency > 2:
        score += 15

    if graph["transaction_count"] < 5:
        score += 10

    return min(score, 100)


def analyze_address_relationships(address: str, depth: int = 2) -> Dict[str, Any]:
    """Fetch history for ``address`` and return its relationship analysis."""
    transactions = fetch_address_transactions(address)

    parties: Optional[Dict[str, TransactionParties]] = None
    if transactions:
        try:
            parties = fetch_transaction_parties([tx.tx_hash for tx in transactions])
        except KoiosError as exc:
            LOGGER.warning("Falling back to transaction-level connections for %s: %s", address, exc)

    graph = build_relationship_graph(address, transactions, parties)
    connections = graph["connections"]

    return {
        "address": address,
        "depth": depth,
        "connections": connections,
        "clusters": identify_clusters(graph),
        "risk_score": calculate_risk_score(graph),
        "metadata": {
            "analyzed_at": datetime.now(timezone.utc).isoformat(),
            "total_connections": len(connections),
            "unique_addresses": len({c["target"] for c in connections}),
            "transaction_count": graph["transaction_count"],
            "first_seen": graph["first_seen"],
            "last_seen": graph["last_seen"],
            "source": "counterparty" if parties is not None else "transaction",
        },
    }


def identify_beneficial_owners(analyses: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Targets shared by at least two analysed addresses, most likely first."""
    occurrences: Dict[str, Dict[str, Any]] = {}
    for analysis in analyses:
        for connection in analysis["connections"]:
            if connection.get("type") == "transaction":
                continue
            entry = occurrences.setdefault(
                connection["target"],
                {"address": connection["target"], "occurrences": 0, "total_strength": 0, "connected": []},
            )
            entry["occurrences"] += 1
            entry["total_strength"] += connection["strength"]
            entry["connected"].append(analysis["address"])

    total = len(analyses)
    owners = [
        {
            "address": data["address"],
            "likelihood": min(data["occurrences"] / total * 100, 100.0),
            "strength": data["total_strength"],
            "connected_addresses": data["connected"],
            "type": "strong" if data["occurrences"] >= total * 0.5 else "moderate",
        }
        for data in occurrences.values()
        if data["occurrences"] >= 2
    ]
    owners.sort(key=lambda owner: owner["likelihood"], reverse=True)
    return owners


def group_by_transaction_timing(
    analyses: Sequence[Dict[str, Any]],
    window: int = TIMING_WINDOW_SECONDS,
) -> List[Dict[str, Any]]:
    """Group addresses whose mean last-seen time lies within one window.

    Confidence falls linearly with the spread of member times relative to
    the window: identical times give 1.0, a spread of a full window gives 0.
    """
    groups: List[Dict[str, Any]] = []
    for analysis in analyses:
        connections = analysis["connections"]
        if not connections:
            continue

        avg_time = float(np.mean([c.get("last_seen") or 0 for c in connections]))
        for group in groups:
            if abs(group["avg_time"] - avg_time) < window:
                group["addresses"].append(analysis["address"])
                group["times"].append(avg_time)
                group["avg_time"] = float(np.mean(group["times"]))
                break
        else:
            groups.append({"addresses": [analysis["address"]], "times": [avg_time], "avg_time": avg_time})

    result: List[Dict[str, Any]] = []
    for group in groups:
        if len(group["addresses"]) < 2:
            continue
        spread = float(np.std(group["times"]))
        confidence = min(1.0, max(0.0, 1.0 - spread / window))
        result.append(
            {
                "addresses": group["addresses"],
                "avg_time": group["avg_time"],
                "confidence": round(confidence, 4),
            }
        )
    return result


def identify_control_patterns(analyses: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    patterns: List[Dict[str, Any]] = []

    for analysis in analyses:
        count = len(analysis["connections"])
        if count > HUB_CONNECTION_THRESHOLD:
            patterns.append(
                {
                    "type": "hub",
                    "address": analysis["address"],
                    "connection_count": count,
                    "description": "Address with high number of connections (potential hub)",
                }
            )

    for group in group_by_transaction_timing(analyses):
        patterns.append(
            {
                "type": "synchronized",
                "addresses": group["addresses"],
                "description": "Addresses with synchronized transaction patterns",
                "confidence": group["confidence"],
            }
        )

    return patterns


def calculate_distribution_metrics(analyses: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """Concentration, diversity and the most connected 20% of addresses."""
    metrics: Dict[str, Any] = {"concentration": 0.0, "diversity": 0.0, "centralized_addresses": []}
    if not analyses:
        return metrics

    counts = np.array([len(a["connections"]) for a in analyses], dtype=float)
    total = float(counts.sum())
    if total > 0:
        metrics["concentration"] = float(counts.max() / total * 100)

    unique_targets = {c["target"] for a in analyses for c in a["connections"]}
    metrics["diversity"] = len(unique_targets) / len(analyses) * 10

    ranked = sorted(
        ({"address": a["address"], "connections": len(a["connections"])} for a in analyses),
        key=lambda item: item["connections"],
        reverse=True,
    )
    top = max(1, math.ceil(len(ranked) * 0.2))
    metrics["centralized_addresses"] = ranked[:top]
    return metrics


def analyze_beneficial_ownership(addresses: Sequence[str]) -> Dict[str, Any]:
    """Analyse every address (depth 1) and combine the cross-address heuristics."""
    addresses = list(addresses)
    workers = max(1, min(MAX_PARALLEL_ANALYSES, len(addresses)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        analyses = list(pool.map(lambda addr: analyze_address_relationships(addr, 1), addresses))

    owners = identify_beneficial_owners(analyses)
    patterns = identify_control_patterns(analyses)
    metrics = calculate_distribution_metrics(analyses)

    LOGGER.info(
        "Beneficial ownership analysis for %d addresses: %d candidates, %d patterns",
        len(addresses),
        len(owners),
        len(patterns),
    )

    return {
        "addresses": addresses,
        "beneficial_owners": owners,
        "control_patterns": patterns,
        "distribution_metrics": metrics,
        "metadata": {
            "analyzed_at": datetime.now(timezone.utc).isoformat(),
            "address_count": len(addresses),
        },
    }


def _label(value: str) -> str:
    return value[:12] + "..." if len(value) > 12 else value


def generate_network_graph(analysis: Dict[str, Any]) -> Dict[str, Any]:
    """Nodes and weighted edges for visualising one relationship analysis."""
    nodes: List[Dict[str, Any]] = [
        {
            "id": analysis["address"],
            "label": _label(analysis["address"]),
            "type": "primary",
            "connections": len(analysis["connections"]),
        }
    ]
    edges: List[Dict[str, Any]] = []

    for connection in analysis["connections"]:
        nodes.append(
            {
                "id": connection["target"],
                "label": _label(connection["target"]),
                "type": "connected",
                "strength": connection["strength"],
            }
        )
        edges.append(
            {
                "source": analysis["address"],
                "target": connection["target"],
                "weight": connection["strength"],
                "type": connection["type"],
            }
        )

    return {"nodes": nodes, "edges": edges, "clusters": analysis["clusters"]}


__all__ = [
    "analyze_address_relationships",
    "analyze_beneficial_ownership",
    "build_relationship_graph",
    "calculate_distribution_metrics",
    "calculate_risk_score",
    "generate_network_graph",
    "group_by_transaction_timing",
    "identify_beneficial_owners",
    "identify_clusters",
    "identify_control_patterns",
]
