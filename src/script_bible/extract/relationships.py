"""Coarse relationship inference for the local extraction pass.

The local engine has no language understanding, so relationships only
record that characters share the manuscript (``first_pair``) or share a
scene (``scene_cooccurrence``).
"""

from collections.abc import Mapping, Sequence

import networkx as nx

from ..config import get_settings
from ..models.entities import Character, Relationship, Scene
from .patterns import CHINESE_SCRIPT, PatternTable
from .resolver import PLACEHOLDER_ID


POLICIES = ("first_pair", "scene_cooccurrence")


class RelationshipInferencer:
    """Derives relationships from the finished character set."""

    def __init__(self, policy: str | None = None, table: PatternTable | None = None):
        """Initialize the inferencer.

        Args:
            policy: "first_pair" or "scene_cooccurrence" (default from config)
            table: Pattern table providing relationship labels
        """
        self.policy = policy or get_settings().relationship_policy
        if self.policy not in POLICIES:
            raise ValueError(f"Unknown relationship policy: {self.policy}")
        self.table = table or CHINESE_SCRIPT

    def infer(
        self,
        characters: Sequence[Character],
        scenes: Sequence[Scene] = (),
        scene_mentions: Mapping[str, Sequence[str]] | None = None,
    ) -> list[Relationship]:
        """Infer relationships.

        Args:
            characters: Characters in appearance order
            scenes: Scenes in appearance order
            scene_mentions: scene id -> names mentioned in that scene

        Returns:
            Relationships, empty when fewer than two real characters exist
        """
        names = [c.name for c in characters if c.id != PLACEHOLDER_ID]
        if len(names) < 2:
            return []

        if self.policy == "scene_cooccurrence" and scene_mentions:
            relationships = self._by_scene(names, scenes, scene_mentions)
            if relationships:
                return relationships

        return [self._first_pair(names)]

    def _first_pair(self, names: list[str]) -> Relationship:
        return Relationship(
            source=names[0],
            target=names[1],
            type=self.table.cooccurrence_type,
            description=self.table.cooccurrence_description,
        )

    def build_graph(
        self,
        scenes: Sequence[Scene],
        scene_mentions: Mapping[str, Sequence[str]],
    ) -> nx.Graph:
        """Build an undirected co-occurrence graph weighted by shared scenes."""
        graph = nx.Graph()

        for scene in scenes:
            mentioned = list(scene_mentions.get(scene.id, ()))
            for name in mentioned:
                graph.add_node(name)
            for i, a in enumerate(mentioned):
                for b in mentioned[i + 1:]:
                    if graph.has_edge(a, b):
                        graph[a][b]["weight"] += 1
                        graph[a][b]["scenes"].append(scene.name)
                    else:
                        # Keep first-seen direction for the emitted edge
                        graph.add_edge(a, b, weight=1, scenes=[scene.name], order=(a, b))

        return graph

    def _by_scene(
        self,
        names: list[str],
        scenes: Sequence[Scene],
        scene_mentions: Mapping[str, Sequence[str]],
    ) -> list[Relationship]:
        graph = self.build_graph(scenes, scene_mentions)
        rank = {name: i for i, name in enumerate(names)}

        edges = [
            data for _, _, data in graph.edges(data=True)
            if all(n in rank for n in data["order"])
        ]
        edges.sort(key=lambda d: (rank[d["order"][0]], rank[d["order"][1]]))

        relationships = []
        for data in edges:
            source, target = data["order"]
            shared = "、".join(data["scenes"])
            relationships.append(Relationship(
                source=source,
                target=target,
                type=self.table.cooccurrence_type,
                description=self.table.scene_cooccurrence_template.format(
                    count=data["weight"], scenes=shared
                ),
            ))

        return relationships
