"""Node signature computation for alignment matching.

Computes a :class:`NodeSignature` fingerprint for each child node so the
quadratic middle-region scan compares short digests instead of walking
subtrees.  Two nodes with identical signatures have identical type,
attrs, marks and content.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field

from docdelta.document.json_io import node_to_json
from docdelta.models import Node


@dataclass(frozen=True)
class NodeSignature:
    """Structural fingerprint of a node used for alignment matching.

    Attributes
    ----------
    node_type:
        The node type string (e.g. ``"paragraph"``).
    content_hash:
        MD5 hex digest of the node's canonical JSON, including attrs,
        marks, DiffMark and the full subtree.
    node:
        The node itself.  Equal digests are confirmed with ``Node.__eq__``;
        the JSON form maps tuple and list attrs to the same text.
    """

    node_type: str
    content_hash: str
    node: Node | None = field(default=None, repr=False, hash=False)


def _md5_json(data: dict) -> str:
    # Sorted keys give a deterministic serialisation; not a security hash.
    payload = json.dumps(data, sort_keys=True, ensure_ascii=False, default=str)
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


def compute_signature(node: Node) -> NodeSignature:
    """Compute the signature of *node*.

    Parameters
    ----------
    node:
        Any node, branch or text leaf.

    Returns
    -------
    NodeSignature
        A frozen dataclass suitable for equality comparison and hashing.
    """
    return NodeSignature(
        node_type=node.type,
        content_hash=_md5_json(node_to_json(node)),
        node=node,
    )


def compute_signatures(nodes: list[Node] | tuple[Node, ...]) -> list[NodeSignature]:
    """Compute signatures for every node in *nodes*, preserving order."""
    return [compute_signature(node) for node in nodes]
