from sls_avro.core.types._result_types import (
    CachedSchema,
    DecodedRecord,
    Frame,
    OutputRecord,
    SkipReason,
    Skipped,
)
from sls_avro.core.types._value_types import (
    AvroNode,
    MappingNode,
    ScalarNode,
    SequenceNode,
    to_node,
    to_python,
)

__all__ = [
    # _result_types
    "CachedSchema",
    "DecodedRecord",
    "Frame",
    "OutputRecord",
    "SkipReason",
    "Skipped",
    # _value_types
    "AvroNode",
    "MappingNode",
    "ScalarNode",
    "SequenceNode",
    "to_node",
    "to_python",
]
