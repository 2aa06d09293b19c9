"""
Relationship graph and statistics over compiler type descriptors.
"""

from enum import Enum
from typing import Dict, Iterable, List, Tuple

from ..core.type_descriptors import TypeDescriptor
from ..core.types import EdgeStats, GraphLink, NodeStats, TypeGraph

EDGE_STATS_LIMIT = 20
NODE_STATS_LIMIT = 100


class LinkKind(str, Enum):
    """Kind of relation a graph edge represents (source holds the relation)."""
    # one to many
    ALIAS_TYPE_ARGUMENT = 'aliasTypeArgument'
    INTERSECTION = 'intersection'
    TYPE_ARGUMENT = 'typeArgument'
    UNION = 'union'

    # one to one
    INSTANTIATED = 'instantiated'
    SUBSTITUTION_BASE = 'substitutionBase'
    CONSTRAINT = 'constraint'
    INDEXED_ACCESS_OBJECT = 'indexedAccessObject'
    INDEXED_ACCESS_INDEX = 'indexedAccessIndex'
    CONDITIONAL_CHECK = 'conditionalCheck'
    CONDITIONAL_EXTENDS = 'conditionalExtends'
    CONDITIONAL_TRUE = 'conditionalTrue'
    CONDITIONAL_FALSE = 'conditionalFalse'
    KEYOF = 'keyof'
    EVOLVING_ARRAY_ELEMENT = 'evolvingArrayElement'
    EVOLVING_ARRAY_FINAL = 'evolvingArrayFinal'
    REVERSE_MAPPED_SOURCE = 'reverseMappedSource'
    REVERSE_MAPPED_MAPPED = 'reverseMappedMapped'
    REVERSE_MAPPED_CONSTRAINT = 'reverseMappedConstraint'
    ALIAS = 'alias'


class NodeStatKind(str, Enum):
    TYPE_ARGUMENTS = 'typeArguments'
    UNION_TYPES = 'unionTypes'
    INTERSECTION_TYPES = 'intersectionTypes'
    ALIAS_TYPE_ARGUMENTS = 'aliasTypeArguments'


# Edge emission order per descriptor: single relations, then arrays
SINGLE_RELATIONS: List[Tuple[str, LinkKind]] = [
    ('instantiated_type', LinkKind.INSTANTIATED),
    ('substitution_base_type', LinkKind.SUBSTITUTION_BASE),
    ('constraint_type', LinkKind.CONSTRAINT),
    ('indexed_access_object_type', LinkKind.INDEXED_ACCESS_OBJECT),
    ('indexed_access_index_type', LinkKind.INDEXED_ACCESS_INDEX),
    ('conditional_check_type', LinkKind.CONDITIONAL_CHECK),
    ('conditional_extends_type', LinkKind.CONDITIONAL_EXTENDS),
    ('conditional_true_type', LinkKind.CONDITIONAL_TRUE),
    ('conditional_false_type', LinkKind.CONDITIONAL_FALSE),
    ('keyof_type', LinkKind.KEYOF),
    ('evolving_array_element_type', LinkKind.EVOLVING_ARRAY_ELEMENT),
    ('evolving_array_final_type', LinkKind.EVOLVING_ARRAY_FINAL),
    ('reverse_mapped_source_type', LinkKind.REVERSE_MAPPED_SOURCE),
    ('reverse_mapped_mapped_type', LinkKind.REVERSE_MAPPED_MAPPED),
    ('reverse_mapped_constraint_type', LinkKind.REVERSE_MAPPED_CONSTRAINT),
    ('alias_type', LinkKind.ALIAS),
]

ARRAY_RELATIONS: List[Tuple[str, LinkKind]] = [
    ('alias_type_arguments', LinkKind.ALIAS_TYPE_ARGUMENT),
    ('intersection_types', LinkKind.INTERSECTION),
    ('union_types', LinkKind.UNION),
    ('type_arguments', LinkKind.TYPE_ARGUMENT),
]

NODE_STAT_FIELDS: List[Tuple[NodeStatKind, str]] = [
    (NodeStatKind.TYPE_ARGUMENTS, 'type_arguments'),
    (NodeStatKind.UNION_TYPES, 'union_types'),
    (NodeStatKind.INTERSECTION_TYPES, 'intersection_types'),
    (NodeStatKind.ALIAS_TYPE_ARGUMENTS, 'alias_type_arguments'),
]


def iter_relations(descriptor: TypeDescriptor) -> Iterable[Tuple[int, LinkKind]]:
    """Yield (target_id, kind) for every populated relation, in emission order."""
    for attr, kind in SINGLE_RELATIONS:
        target = getattr(descriptor, attr)
        if target is not None:
            yield target, kind

    for attr, kind in ARRAY_RELATIONS:
        targets = getattr(descriptor, attr)
        if targets:
            for target in targets:
                yield target, kind


class TypeGraphBuilder:
    """Builds a TypeGraph from a parsed type descriptor snapshot."""

    def build(self, descriptors: List[TypeDescriptor]) -> TypeGraph:
        """
        Build nodes, links and aggregated statistics.

        Args:
            descriptors: Parsed types.json entries; id 0 is skipped

        Returns:
            TypeGraph dictionary
        """
        nodes = self._build_nodes(descriptors)
        paths = {d.id: d.path for d in descriptors if d.id != 0}
        links = self._build_links(descriptors, nodes)

        link_count_by_kind = {kind.value: 0 for kind in LinkKind}
        for link in links:
            link_count_by_kind[link['kind']] += 1

        return {
            'nodes': nodes,
            'links': links,
            'edge_stats': self._build_edge_stats(links, paths),
            'node_stats': self._build_node_stats(descriptors),
            'node_count': len(nodes),
            'link_count_by_kind': link_count_by_kind,
        }

    @staticmethod
    def _build_nodes(descriptors: List[TypeDescriptor]) -> Dict[int, str]:
        nodes = {}
        for descriptor in descriptors:
            if descriptor.id == 0:
                continue
            nodes[descriptor.id] = descriptor.display_name
        return nodes

    @staticmethod
    def _build_links(descriptors: List[TypeDescriptor], nodes: Dict[int, str]) -> List[GraphLink]:
        links: List[GraphLink] = []
        for descriptor in descriptors:
            if descriptor.id not in nodes:
                continue
            for target, kind in iter_relations(descriptor):
                # Dangling references are dropped
                if target not in nodes:
                    continue
                links.append({'source': descriptor.id, 'target': target, 'kind': kind.value})
        return links

    @staticmethod
    def _rank(groups: Dict[int, Dict[int, None]], paths: Dict[int, str]) -> Tuple[int, List[tuple]]:
        # Stable, so ties keep first-seen order
        ranked = sorted(groups.items(), key=lambda item: len(item[1]), reverse=True)
        max_size = len(ranked[0][1]) if ranked else 0
        return max_size, [
            (type_id, list(members), paths.get(type_id))
            for type_id, members in ranked[:EDGE_STATS_LIMIT]
        ]

    def _build_edge_stats(self, links: List[GraphLink], paths: Dict[int, str]) -> Dict[str, EdgeStats]:
        """
        Per kind, rank targets by how many distinct sources point at them, and
        sources by how many distinct targets they point at.

        Both `max` values and counts are taken before the lists are cut to
        EDGE_STATS_LIMIT entries. `link_count` counts every link of the kind.
        """
        # dicts keep insertion order, so the inner dicts are ordered sets
        sources_by_kind: Dict[str, Dict[int, Dict[int, None]]] = {kind.value: {} for kind in LinkKind}
        targets_by_kind: Dict[str, Dict[int, Dict[int, None]]] = {kind.value: {} for kind in LinkKind}
        link_counts = {kind.value: 0 for kind in LinkKind}

        for link in links:
            kind = link['kind']
            sources_by_kind[kind].setdefault(link['target'], {})[link['source']] = None
            targets_by_kind[kind].setdefault(link['source'], {})[link['target']] = None
            link_counts[kind] += 1

        edge_stats = {}
        for kind in sources_by_kind:
            by_target = sources_by_kind[kind]
            by_source = targets_by_kind[kind]
            max_sources, ranked_targets = self._rank(by_target, paths)
            max_targets, ranked_sources = self._rank(by_source, paths)
            edge_stats[kind] = {
                'max': max_sources,
                'count': len(by_target),
                'link_count': link_counts[kind],
                'links': ranked_targets,
                'by_source': {
                    'max': max_targets,
                    'count': len(by_source),
                    'links': ranked_sources,
                },
            }
        return edge_stats

    @staticmethod
    def _build_node_stats(descriptors: List[TypeDescriptor]) -> Dict[str, NodeStats]:
        """
        Rank nodes by the raw length of each of the four array relations.

        `max` and `count` are taken before the list is cut to NODE_STATS_LIMIT
        entries.
        """
        node_stats = {}
        for kind, attr in NODE_STAT_FIELDS:
            entries = []
            for descriptor in descriptors:
                if descriptor.id == 0:
                    continue
                count = len(getattr(descriptor, attr) or [])
                if count > 0:
                    entries.append((descriptor.id, descriptor.display_name, count, descriptor.path))

            entries.sort(key=lambda entry: entry[2], reverse=True)
            node_stats[kind.value] = {
                'max': entries[0][2] if entries else 0,
                'count': len(entries),
                'nodes': entries[:NODE_STATS_LIMIT],
            }
        return node_stats


def build_type_graph(descriptors: List[TypeDescriptor]) -> TypeGraph:
    return TypeGraphBuilder().build(descriptors)
