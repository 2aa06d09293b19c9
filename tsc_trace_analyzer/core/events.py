"""
Trace event model and the fixed per-kind event schemas of a compiler trace.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional


class EventPhase(str, Enum):
    """Trace event phase (the `ph` field)."""
    BEGIN = 'B'
    END = 'E'
    COMPLETE = 'X'
    INSTANT = 'I'
    METADATA = 'M'


class EventScope(str, Enum):
    """Scope of an instant event (the `s` field)."""
    THREAD = 'thread'
    GLOBAL = 'global'
    PROCESS = 'process'

    @classmethod
    def parse(cls, value: Any) -> Optional['EventScope']:
        """Accept both the short trace form ('t', 'g', 'p') and full names."""
        if not isinstance(value, str):
            return None
        for scope in cls:
            if value == scope.value or value == scope.value[0]:
                return scope
        return None


@dataclass
class TraceEvent:
    """One validated record of the trace log."""
    name: str
    cat: str
    ph: EventPhase
    pid: int
    tid: int
    ts: float
    dur: Optional[float] = None
    scope: Optional[EventScope] = None
    args: Dict[str, Any] = field(default_factory=dict)

    def num_arg(self, key: str, default: float = 0.0) -> float:
        """Numeric argument, or `default` when missing or not a number."""
        value = self.args.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return default
        return float(value)

    def str_arg(self, key: str) -> Optional[str]:
        value = self.args.get(key)
        return value if isinstance(value, str) else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the raw trace.json record shape."""
        record = {
            'name': self.name,
            'cat': self.cat,
            'ph': self.ph.value,
            'pid': self.pid,
            'tid': self.tid,
            'ts': self.ts,
        }
        if self.dur is not None:
            record['dur'] = self.dur
        if self.scope is not None:
            record['s'] = self.scope.value[0]
        record['args'] = self.args
        return record


# Phase groups used by the schemas below
DURATION = frozenset({EventPhase.BEGIN, EventPhase.END})
COMPLETE = frozenset({EventPhase.COMPLETE})
INSTANT = frozenset({EventPhase.INSTANT})
METADATA = frozenset({EventPhase.METADATA})

# Argument field kinds understood by the event parser
STRING = 'string'
NUMBER = 'number'
POSITIVE = 'positive'
BOOLEAN = 'boolean'
PRESENT = 'present'
ARRAY = 'array'
TYPE_IDS = 'type_ids'
VARIANCES = 'variances'


@dataclass(frozen=True)
class EventSchema:
    """Fixed shape of one event kind."""
    cat: str
    phases: FrozenSet[EventPhase]
    args: Dict[str, str] = field(default_factory=dict)
    optional_args: Dict[str, str] = field(default_factory=dict)
    requires_scope: bool = False


_CODE_RANGE = {'kind': NUMBER, 'pos': NUMBER, 'end': NUMBER}
_SESSION_FILE = {'file': STRING, 'configFilePath': STRING}


def _depth_limit(args: Dict[str, str], optional_args: Dict[str, str] = None) -> EventSchema:
    return EventSchema('checkTypes', INSTANT, args, optional_args or {}, requires_scope=True)


EVENT_SCHEMAS: Dict[str, EventSchema] = {
    # Metadata
    'TracingStartedInBrowser': EventSchema('disabled-by-default-devtools.timeline', METADATA),
    'process_name': EventSchema('__metadata', METADATA, {'name': STRING}),
    'thread_name': EventSchema('__metadata', METADATA, {'name': STRING}),

    # Parse
    'createSourceFile': EventSchema('parse', DURATION, {'path': STRING}),
    'parseJsonSourceFileConfigFileContent': EventSchema('parse', COMPLETE, {'path': STRING}),

    # Program
    'createProgram': EventSchema('program', DURATION, {'configFilePath': STRING}),
    'findSourceFile': EventSchema('program', COMPLETE, {'fileName': STRING}),
    'processRootFiles': EventSchema('program', COMPLETE, {'count': POSITIVE}),
    'processTypeReferenceDirective': EventSchema('program', COMPLETE, {'directive': STRING}),
    'processTypeReferences': EventSchema('program', COMPLETE, {'count': POSITIVE}),
    'resolveLibrary': EventSchema('program', COMPLETE, {'resolveFrom': STRING}),
    'resolveModuleNamesWorker': EventSchema('program', COMPLETE, {'containingFileName': STRING}),
    'resolveTypeReferenceDirectiveNamesWorker': EventSchema(
        'program', COMPLETE, {'containingFileName': STRING}
    ),
    'shouldProgramCreateNewSourceFiles': EventSchema(
        'program', INSTANT, {'hasOldProgram': PRESENT}, requires_scope=True
    ),
    'tryReuseStructureFromOldProgram': EventSchema('program', COMPLETE),

    # Bind
    'bindSourceFile': EventSchema('bind', DURATION, {'path': STRING}),

    # Check
    'checkExpression': EventSchema('check', COMPLETE, _CODE_RANGE, {'path': STRING}),
    'checkSourceFile': EventSchema('check', DURATION, {'path': STRING}),
    'checkVariableDeclaration': EventSchema('check', COMPLETE, {**_CODE_RANGE, 'path': STRING}),
    'checkDeferredNode': EventSchema('check', COMPLETE, {**_CODE_RANGE, 'path': STRING}),
    'checkSourceFileNodes': EventSchema('check', COMPLETE, {'path': STRING}),

    # Check types
    'checkTypeParameterDeferred': EventSchema(
        'checkTypes', COMPLETE, {'parent': POSITIVE, 'id': POSITIVE}
    ),
    'getVariancesWorker': EventSchema(
        'checkTypes', COMPLETE, {'arity': POSITIVE, 'id': POSITIVE, 'results': VARIANCES}
    ),
    'structuredTypeRelatedTo': EventSchema(
        'checkTypes', COMPLETE, {'sourceId': POSITIVE, 'targetId': POSITIVE}
    ),

    # Check types: depth limits
    'checkCrossProductUnion_DepthLimit': _depth_limit({'typeIds': TYPE_IDS, 'size': POSITIVE}),
    'checkTypeRelatedTo_DepthLimit': _depth_limit({
        'sourceId': NUMBER, 'targetId': NUMBER, 'depth': POSITIVE, 'targetDepth': POSITIVE,
    }),
    'getTypeAtFlowNode_DepthLimit': _depth_limit({'flowId': POSITIVE}),
    'instantiateType_DepthLimit': _depth_limit({
        'typeId': NUMBER, 'instantiationDepth': NUMBER, 'instantiationCount': POSITIVE,
    }),
    'recursiveTypeRelatedTo_DepthLimit': _depth_limit({
        'sourceId': NUMBER, 'targetId': NUMBER, 'depth': POSITIVE, 'targetDepth': POSITIVE,
        'sourceIdStack': ARRAY, 'targetIdStack': ARRAY,
    }),
    'removeSubtypes_DepthLimit': _depth_limit({'typeIds': TYPE_IDS}),
    'traceUnionsOrIntersectionsTooLarge_DepthLimit': _depth_limit(
        {'sourceId': NUMBER, 'sourceSize': POSITIVE, 'targetId': NUMBER, 'targetSize': POSITIVE},
        {'pos': NUMBER, 'end': NUMBER},
    ),
    'typeRelatedToDiscriminatedType_DepthLimit': _depth_limit({
        'sourceId': NUMBER, 'targetId': NUMBER, 'numCombinations': POSITIVE,
    }),

    # Emit
    'emit': EventSchema('emit', DURATION),
    'emitBuildInfo': EventSchema('emit', DURATION | COMPLETE),
    'emitDeclarationFileOrBundle': EventSchema(
        'emit', COMPLETE, {'declarationFilePath': STRING}
    ),
    'emitJsFileOrBundle': EventSchema('emit', COMPLETE, {'jsFilePath': STRING}),
    'transformNodes': EventSchema('emit', COMPLETE, {'path': STRING}),

    # Session (language service)
    'cancellationThrown': EventSchema('session', INSTANT, {'kind': STRING}),
    'commandCanceled': EventSchema('session', INSTANT, {'seq': NUMBER, 'command': STRING}),
    'commandError': EventSchema(
        'session', INSTANT, {'seq': NUMBER, 'command': STRING, 'message': STRING}
    ),
    'createConfiguredProject': EventSchema('session', INSTANT, {'configFilePath': STRING}),
    'createdDocumentRegistryBucket': EventSchema(
        'session', INSTANT, {'configFilePath': STRING, 'key': STRING}
    ),
    'documentRegistryBucketOverlap': EventSchema(
        'session', INSTANT, {'path': STRING, 'key1': STRING, 'key2': STRING}
    ),
    'executeCommand': EventSchema('session', DURATION, {'seq': NUMBER, 'command': STRING}),
    'finishCachingPerDirectoryResolution': EventSchema('session', INSTANT, requires_scope=True),
    'getPackageJsonAutoImportProvider': EventSchema('session', COMPLETE),
    'getUnresolvedImports': EventSchema('session', COMPLETE, {'count': NUMBER}),
    'loadConfiguredProject': EventSchema('session', DURATION, {'configFilePath': STRING}),
    'regionSemanticCheck': EventSchema('session', DURATION, _SESSION_FILE),
    'request': EventSchema('session', INSTANT, {'seq': NUMBER, 'command': STRING}),
    'response': EventSchema(
        'session', INSTANT, {'seq': NUMBER, 'command': STRING, 'success': BOOLEAN}
    ),
    'semanticCheck': EventSchema('session', DURATION, _SESSION_FILE),
    'stepAction': EventSchema('session', INSTANT, {'seq': NUMBER}, requires_scope=True),
    'stepCanceled': EventSchema('session', INSTANT, {'seq': NUMBER}),
    'stepError': EventSchema('session', INSTANT, {'seq': NUMBER, 'message': STRING}),
    'suggestionCheck': EventSchema('session', DURATION, _SESSION_FILE),
    'syntacticCheck': EventSchema('session', DURATION, _SESSION_FILE),
    'updateGraph': EventSchema('session', DURATION, {'name': STRING, 'kind': PRESENT}),
}
