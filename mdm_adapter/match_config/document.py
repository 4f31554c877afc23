# -*- coding: utf-8 -*-
"""
Remote configuration document wrapper.

The upstream MDM service owns the match configuration XML. This module
parses it into an ElementTree while remembering the namespace prefixes it
declared, so the document can be written back without ``ns0:`` rewriting.
Elements are addressed by local name so a default namespace is tolerated.
"""

from __future__ import annotations

import io
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, List, Union

from mdm_adapter.exceptions import DocumentStructureError, ErrorKind

SCORING_ELEMENT = "scoring"
ATTRIBUTE_ELEMENT = "attribute"


def local_name(tag: str) -> str:
    """Strip a ``{namespace}`` prefix from an ElementTree tag."""
    if tag[:1] == "{":
        return tag.rsplit("}", 1)[1]
    return tag


def format_decimal(value: float) -> str:
    """Locale-independent round-trippable decimal text."""
    return repr(float(value))


@dataclass
class ConfigurationDocument:
    """A parsed match configuration owned by the upstream service.

    Attributes:
        root: Root element of the document.
        namespaces: ``prefix -> uri`` declarations seen while parsing.
    """

    root: ET.Element
    namespaces: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_xml(cls, payload: Union[str, bytes]) -> ConfigurationDocument:
        """Parse raw XML text.

        Raises:
            DocumentStructureError: If the payload has no root element or
                is not well-formed XML.
        """
        if isinstance(payload, str):
            payload = payload.encode("utf-8")

        namespaces: Dict[str, str] = {}
        try:
            events = ET.iterparse(io.BytesIO(payload), events=("start-ns",))
            for _, (prefix, uri) in events:
                namespaces.setdefault(prefix, uri)
            root = events.root
        except ET.ParseError as e:
            raise DocumentStructureError(
                ErrorKind.MISSING_ROOT_ELEMENT,
                context={"parse_error": str(e)},
            )

        if root is None:
            raise DocumentStructureError(ErrorKind.MISSING_ROOT_ELEMENT)

        return cls(root=root, namespaces=namespaces)

    def scoring_element(self) -> ET.Element:
        """Return the single ``scoring`` child of the root element.

        Raises:
            DocumentStructureError: If there is no scoring section or more
                than one.
        """
        sections = [
            child for child in self.root
            if local_name(child.tag) == SCORING_ELEMENT
        ]
        if not sections:
            raise DocumentStructureError(ErrorKind.MISSING_SCORING_SECTION)
        if len(sections) > 1:
            raise DocumentStructureError(
                ErrorKind.MULTIPLE_SCORING_SECTIONS,
                context={"count": len(sections)},
            )
        return sections[0]

    def attribute_elements(self) -> List[ET.Element]:
        """Return the ``attribute`` children of the scoring section in document order."""
        return [
            child for child in self.scoring_element()
            if local_name(child.tag) == ATTRIBUTE_ELEMENT
        ]

    def to_bytes(self) -> bytes:
        """Serialize back to UTF-8 XML with the original namespace prefixes.

        The default namespace is passed per call. Named prefixes go through
        ``ET.register_namespace``, which is process-wide in ElementTree.
        """
        for prefix, uri in self.namespaces.items():
            if not prefix or re.match(r"ns\d+$", prefix):
                continue
            ET.register_namespace(prefix, uri)

        default = self.namespaces.get("")
        if default is not None and all(
            element.tag.startswith("{%s}" % default) for element in self.root.iter()
        ):
            return ET.tostring(
                self.root,
                encoding="utf-8",
                xml_declaration=True,
                default_namespace=default,
            )
        return ET.tostring(self.root, encoding="utf-8", xml_declaration=True)


__all__ = [
    "ConfigurationDocument",
    "local_name",
    "format_decimal",
    "SCORING_ELEMENT",
    "ATTRIBUTE_ELEMENT",
]
