"""Streaming XML cursor and writer for EWS-style SOAP payloads.

This package provides the node-at-a-time reader every EWS response reader is
built on, plus the symmetric writer used to build requests and updates.

Basic usage:
    from ews_xml import XmlReader, XmlNamespace

    reader = XmlReader(response_bytes)
    reader.read_to_descendant(XmlNamespace.MESSAGES, "ResponseMessages")
"""

from .__version__ import __version__, __author__, __description__
from .constants import NAMESPACE_PREFIXES, XmlNamespace
from .errors import XmlParseError
from .models import NodeType, XmlNode
from .reader import XmlReader
from .utils import ValueConverter, XmlUtils
from .writer import XmlWriter

# Public API
__all__ = [
    '__version__',
    '__author__',
    '__description__',

    'XmlReader',
    'XmlWriter',
    'XmlNode',
    'NodeType',
    'XmlParseError',
    'XmlNamespace',
    'NAMESPACE_PREFIXES',

    'ValueConverter',
    'XmlUtils',
]
