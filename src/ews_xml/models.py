"""Node model exposed by the XML cursor.

Plain dataclasses so the package stays usable without any model library.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class NodeType(str, Enum):
    """Kinds of nodes the cursor can be positioned on."""
    NONE = "none"
    ELEMENT = "element"
    END_ELEMENT = "end_element"
    TEXT = "text"


@dataclass
class XmlNode:
    """Current cursor position.

    For ``ELEMENT`` nodes that have neither text nor children ``is_empty`` is
    true and no matching ``END_ELEMENT`` node is produced.
    """
    node_type: NodeType = NodeType.NONE
    namespace_uri: str = ""
    local_name: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    value: Optional[str] = None
    is_empty: bool = False
    depth: int = 0

    def describe(self) -> str:
        """Short human readable description used in error messages."""
        if self.node_type == NodeType.TEXT:
            return f"text {self.value!r}"
        if self.node_type == NodeType.NONE:
            return "end of document"
        kind = "start element" if self.node_type == NodeType.ELEMENT else "end element"
        if self.namespace_uri:
            return f"{kind} {{{self.namespace_uri}}}{self.local_name}"
        return f"{kind} {self.local_name}"
