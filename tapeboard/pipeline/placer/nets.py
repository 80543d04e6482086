"""Connectivity graph used to order and score placements."""

from __future__ import annotations

from dataclasses import dataclass

from tapeboard.pipeline.design.models import ComponentInstance, ConnectionDef


@dataclass
class NetEdge:
    """An edge in the connectivity graph between two instances."""
    net: str
    other_iid: str
    my_pad: str
    other_pad: str


def build_net_graph(connections: list[ConnectionDef]) -> dict[str, list[NetEdge]]:
    """Build connectivity: instance_id -> [NetEdge, ...].

    Each connection contributes one edge in each direction.  Connections
    between two pads of the same instance add nothing.
    """
    graph: dict[str, list[NetEdge]] = {}
    for conn in connections:
        a, b = conn.source, conn.target
        if a.instance_id == b.instance_id:
            continue
        graph.setdefault(a.instance_id, []).append(
            NetEdge(conn.net, b.instance_id, a.pad_id, b.pad_id))
        graph.setdefault(b.instance_id, []).append(
            NetEdge(conn.net, a.instance_id, b.pad_id, a.pad_id))
    return graph


def component_degree(net_graph: dict[str, list[NetEdge]]) -> dict[str, int]:
    """Count the unique neighbours of each instance.

    Higher degree means the instance is a hub; hubs are placed first so
    their satellites can cluster around them.
    """
    return {iid: len({e.other_iid for e in edges}) for iid, edges in net_graph.items()}


def keep_together_groups(instances: list[ComponentInstance]) -> dict[str, list[str]]:
    """group name -> member instance ids, in instance order."""
    groups: dict[str, list[str]] = {}
    for inst in instances:
        if inst.constraint is not None and inst.constraint.group:
            groups.setdefault(inst.constraint.group, []).append(inst.id)
    return groups


def build_placement_groups(
    instance_ids: list[str],
    net_graph: dict[str, list[NetEdge]],
    area_map: dict[str, float],
    keep_together: dict[str, list[str]] | None = None,
) -> list[list[str]]:
    """Partition and order instances for group-aware placement.

    1. Connected components of the net graph, with keep-together
       groups treated as fully connected.
    2. Within each component, BFS from the highest-degree node; ties
       broken by footprint area (largest first), then by input order.
    3. Components sorted so the one holding the largest part is
       placed first.

    Returns ordered groups; placing them in sequence, member by member,
    keeps tightly connected parts adjacent.
    """
    if not instance_ids:
        return []

    # Keep-together members behave as if wired to one another.
    adjacency: dict[str, list[str]] = {
        iid: [e.other_iid for e in edges] for iid, edges in net_graph.items()
    }
    for members in (keep_together or {}).values():
        for a in members:
            for b in members:
                if a != b:
                    adjacency.setdefault(a, []).append(b)

    degrees = component_degree(net_graph)
    position = {iid: i for i, iid in enumerate(instance_ids)}

    def rank(i: str) -> tuple[int, float, int]:
        return (-degrees.get(i, 0), -area_map.get(i, 0.0), position.get(i, 0))

    visited_global: set[str] = set()
    raw_groups: list[list[str]] = []
    for seed in instance_ids:
        if seed in visited_global:
            continue
        queue = [seed]
        reached = {seed}
        while queue:
            current = queue.pop(0)
            for other in adjacency.get(current, []):
                if other not in reached:
                    reached.add(other)
                    queue.append(other)
        members = [i for i in instance_ids if i in reached]
        visited_global.update(members)
        raw_groups.append(members)

    def _bfs_order(members: list[str]) -> list[str]:
        member_set = set(members)
        seed = min(members, key=rank)
        order: list[str] = []
        queue = [seed]
        seen = {seed}
        while queue:
            queue.sort(key=rank)
            current = queue.pop(0)
            order.append(current)
            for other in adjacency.get(current, []):
                if other in member_set and other not in seen:
                    seen.add(other)
                    queue.append(other)
        return order

    ordered = [_bfs_order(members) for members in raw_groups]
    ordered.sort(key=lambda g: (-max(area_map.get(i, 0.0) for i in g), position[g[0]]))
    return ordered
