"""
Type descriptor model for the compiler's types.json dump.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .errors import TypesParseError

# JSON key -> attribute, for relations pointing at a single type id
SINGLE_RELATION_FIELDS = {
    'instantiatedType': 'instantiated_type',
    'substitutionBaseType': 'substitution_base_type',
    'constraintType': 'constraint_type',
    'indexedAccessObjectType': 'indexed_access_object_type',
    'indexedAccessIndexType': 'indexed_access_index_type',
    'conditionalCheckType': 'conditional_check_type',
    'conditionalExtendsType': 'conditional_extends_type',
    'conditionalTrueType': 'conditional_true_type',
    'conditionalFalseType': 'conditional_false_type',
    'keyofType': 'keyof_type',
    'evolvingArrayElementType': 'evolving_array_element_type',
    'evolvingArrayFinalType': 'evolving_array_final_type',
    'reverseMappedSourceType': 'reverse_mapped_source_type',
    'reverseMappedMappedType': 'reverse_mapped_mapped_type',
    'reverseMappedConstraintType': 'reverse_mapped_constraint_type',
    'aliasType': 'alias_type',
}

# JSON key -> attribute, for relations pointing at a list of type ids
ARRAY_RELATION_FIELDS = {
    'aliasTypeArguments': 'alias_type_arguments',
    'intersectionTypes': 'intersection_types',
    'unionTypes': 'union_types',
    'typeArguments': 'type_arguments',
}

LOCATION_FIELDS = {
    'firstDeclaration': 'first_declaration',
    'referenceLocation': 'reference_location',
    'destructuringPattern': 'destructuring_pattern',
}

NAME_FIELDS = {
    'display': 'display',
    'symbolName': 'symbol_name',
    'intrinsicName': 'intrinsic_name',
}


@dataclass
class TypeDescriptor:
    """One entry of types.json. Id 0 is the placeholder slot."""
    id: int
    flags: List[str] = field(default_factory=list)
    display: Optional[str] = None
    symbol_name: Optional[str] = None
    intrinsic_name: Optional[str] = None

    instantiated_type: Optional[int] = None
    substitution_base_type: Optional[int] = None
    constraint_type: Optional[int] = None
    indexed_access_object_type: Optional[int] = None
    indexed_access_index_type: Optional[int] = None
    conditional_check_type: Optional[int] = None
    conditional_extends_type: Optional[int] = None
    conditional_true_type: Optional[int] = None
    conditional_false_type: Optional[int] = None
    keyof_type: Optional[int] = None
    evolving_array_element_type: Optional[int] = None
    evolving_array_final_type: Optional[int] = None
    reverse_mapped_source_type: Optional[int] = None
    reverse_mapped_mapped_type: Optional[int] = None
    reverse_mapped_constraint_type: Optional[int] = None
    alias_type: Optional[int] = None

    alias_type_arguments: Optional[List[int]] = None
    intersection_types: Optional[List[int]] = None
    union_types: Optional[List[int]] = None
    type_arguments: Optional[List[int]] = None

    first_declaration: Optional[Dict[str, Any]] = None
    reference_location: Optional[Dict[str, Any]] = None
    destructuring_pattern: Optional[Dict[str, Any]] = None

    @property
    def display_name(self) -> str:
        """
        Human-readable name, first match wins:

        1. exactly one flag and a non-empty display string (a literal)
        2. symbol name
        3. intrinsic name
        4. "<anonymous>"
        """
        if len(self.flags) == 1 and self.display:
            return self.display
        if self.symbol_name is not None:
            return self.symbol_name
        if self.intrinsic_name is not None:
            return self.intrinsic_name
        return '<anonymous>'

    @property
    def path(self) -> Optional[str]:
        """Best-known file path: declaration, then reference, then destructuring pattern."""
        for location in (self.first_declaration, self.reference_location, self.destructuring_pattern):
            if location is not None:
                return location.get('path')
        return None


def with_placeholder(records: List[Dict]) -> List[Dict]:
    """
    Prepend the id 0 placeholder record unless the list already starts with one.

    The compiler numbers types from 1; the placeholder keeps list positions
    aligned with type ids.
    """
    if records and isinstance(records[0], dict) and records[0].get('id') == 0:
        return records
    return [{'id': 0, 'flags': []}] + records


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_type_descriptor(record: Dict) -> TypeDescriptor:
    """
    Validate one types.json record.

    Unknown keys are ignored. A single relation of -1 means "absent".

    Raises:
        TypesParseError: If a known field has the wrong shape
    """
    if not isinstance(record, dict):
        raise TypesParseError("type must be an object")

    type_id = record.get('id')
    if not _is_int(type_id) or type_id < 0:
        raise TypesParseError("id must be a non-negative integer")

    flags = record.get('flags', [])
    if not isinstance(flags, list) or not all(isinstance(f, str) for f in flags):
        raise TypesParseError(f"type {type_id} flags must be an array of strings")

    values: Dict[str, Any] = {'id': type_id, 'flags': list(flags)}

    for key, attr in NAME_FIELDS.items():
        value = record.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise TypesParseError(f"type {type_id} {key} must be a string")
        values[attr] = value

    for key, attr in SINGLE_RELATION_FIELDS.items():
        value = record.get(key)
        if value is None or value == -1:
            continue
        if not _is_int(value):
            raise TypesParseError(f"type {type_id} {key} must be a type id")
        values[attr] = value

    for key, attr in ARRAY_RELATION_FIELDS.items():
        value = record.get(key)
        if value is None:
            continue
        if not isinstance(value, list) or not all(_is_int(v) for v in value):
            raise TypesParseError(f"type {type_id} {key} must be an array of type ids")
        values[attr] = list(value)

    for key, attr in LOCATION_FIELDS.items():
        value = record.get(key)
        if value is None:
            continue
        if not isinstance(value, dict) or not isinstance(value.get('path'), str):
            raise TypesParseError(f"type {type_id} {key}.path must be a string")
        values[attr] = value

    return TypeDescriptor(**values)


def parse_type_descriptors(records: Iterable[Dict]) -> List[TypeDescriptor]:
    """
    Parse every types.json record, aborting on the first invalid one.

    Args:
        records: Raw records, index 0 being the placeholder slot

    Returns:
        List of TypeDescriptor in input order

    Raises:
        TypesParseError: Carrying the index of the offending record
    """
    descriptors = []
    for index, record in enumerate(records):
        try:
            descriptors.append(parse_type_descriptor(record))
        except TypesParseError as e:
            raise TypesParseError(str(e), index) from None
    return descriptors
