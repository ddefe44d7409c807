"""Document tree addressing and editor JSON I/O.

Exports
-------
node_size, sequence_size, document_size
    Position-unit sizes of nodes and documents.
walk, iter_boundaries
    Pre-order traversal with positions.
find_node, text_content, assign_ids
    Identifier lookup and subtree helpers.
clamp_position, clamp_range
    Bound positions into a document.
resolve_range, content_between, replace_at_path
    Map position ranges onto a parent's children.
node_from_json, node_to_json, check_limits
    Editor JSON conversion and ceiling checks.
"""

from .json_io import (
    check_limits,
    decoration_to_json,
    node_from_json,
    node_to_json,
    proposal_to_json,
    step_from_json,
    step_to_json,
)
from .positions import (
    DOC_CONTENT_START,
    ResolvedRange,
    assign_ids,
    clamp_position,
    clamp_range,
    content_between,
    document_size,
    find_node,
    iter_boundaries,
    node_size,
    replace_at_path,
    resolve_range,
    sequence_size,
    text_content,
    walk,
)

__all__ = [
    "DOC_CONTENT_START",
    "ResolvedRange",
    "assign_ids",
    "check_limits",
    "clamp_position",
    "clamp_range",
    "content_between",
    "decoration_to_json",
    "document_size",
    "find_node",
    "iter_boundaries",
    "node_from_json",
    "node_size",
    "node_to_json",
    "proposal_to_json",
    "replace_at_path",
    "resolve_range",
    "sequence_size",
    "step_from_json",
    "step_to_json",
    "text_content",
    "walk",
]
