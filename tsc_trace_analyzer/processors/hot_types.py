"""
Expansion of hotspot type ids into trees of related types.
"""

from typing import Dict, Iterable, List, Tuple

from ..core.type_descriptors import TypeDescriptor
from ..core.types import HotSpot, HotType
from .type_graph import iter_relations

TypeRegistry = Dict[int, TypeDescriptor]

MISSING_TYPE_ID = -1


def create_type_registry(descriptors: Iterable[TypeDescriptor]) -> TypeRegistry:
    """Index a type snapshot by id, leaving out the id 0 placeholder."""
    return {d.id: d for d in descriptors if d.id != 0}


def _hot_type_node(type_id: int, type_registry: TypeRegistry) -> HotType:
    descriptor = type_registry.get(type_id)
    if descriptor is not None:
        return {
            'id': type_id,
            'name': descriptor.display_name,
            'flags': list(descriptor.flags),
            'children': [],
        }
    if type_id == MISSING_TYPE_ID:
        name = "[Type Not Found]"
    else:
        name = f"[Type {type_id} Not Found]"
    return {'id': type_id, 'name': name, 'flags': [], 'children': []}


def get_hot_type(type_id: int, type_registry: TypeRegistry) -> HotType:
    """
    Expand a type id into the tree of every type it references.

    Children follow the relation order of the type graph. A type already on
    the path from the root is still listed, but its children are not
    expanded again. Ids missing from the registry become leaf placeholders
    named "[Type N Not Found]".

    Args:
        type_id: Type to expand
        type_registry: Output of create_type_registry()

    Returns:
        HotType tree rooted at type_id
    """
    root = _hot_type_node(type_id, type_registry)
    # (node, ids of its ancestors)
    stack: List[Tuple[HotType, Tuple[int, ...]]] = [(root, ())]

    while stack:
        node, ancestors = stack.pop()
        descriptor = type_registry.get(node['id'])
        if descriptor is None or node['id'] in ancestors:
            continue

        path = ancestors + (node['id'],)
        for child_id, _ in iter_relations(descriptor):
            child = _hot_type_node(child_id, type_registry)
            node['children'].append(child)
            stack.append((child, path))

    return root


def expand_hotspot_types(hotspots: List[HotSpot], type_registry: TypeRegistry) -> List[HotSpot]:
    """
    Attach `type_trees` to every frame that carries type ids, in place.

    Returns:
        The same hotspot list
    """
    stack = list(hotspots)
    while stack:
        frame = stack.pop()
        if frame['types'] is not None:
            frame['type_trees'] = [get_hot_type(type_id, type_registry) for type_id in frame['types']]
        stack.extend(frame['children'])
    return hotspots
