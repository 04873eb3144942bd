"""Greedy proximity clustering of posts for map markers."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from proximity.utils.geo import AnnotatedRecord, distance_miles

CLUSTER_RADIUS_MILES = 0.1

T = TypeVar("T")


@dataclass
class Cluster(Generic[T]):
    latitude: float
    longitude: float
    posts: list[AnnotatedRecord[T]] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.posts)


def build_clusters(
    records: Sequence[AnnotatedRecord[T]],
    merge_radius_miles: float = CLUSTER_RADIUS_MILES,
) -> list[Cluster[T]]:
    """Group records into clusters, one pass in input order.

    Each unassigned record seeds a cluster and pulls in every other unassigned
    record within ``merge_radius_miles`` of the seed. Membership is only ever
    tested against the seed, so the result depends on input order: A-B and B-C
    may be close while A-C is not, and seeding from A leaves C on its own.
    The cluster position is the mean of its members' coordinates.
    """

    clusters: list[Cluster[T]] = []
    assigned: set[int] = set()

    for i, seed in enumerate(records):
        if i in assigned:
            continue
        members = [seed]
        assigned.add(i)
        for j, other in enumerate(records):
            if j in assigned:
                continue
            if distance_miles(seed.coordinate, other.coordinate) <= merge_radius_miles:
                members.append(other)
                assigned.add(j)

        n = len(members)
        clusters.append(
            Cluster(
                latitude=sum(m.latitude for m in members) / n,
                longitude=sum(m.longitude for m in members) / n,
                posts=members,
            )
        )

    return clusters


__all__ = ["CLUSTER_RADIUS_MILES", "Cluster", "build_clusters"]
