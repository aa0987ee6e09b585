# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Reader for ``api-versions.xml`` inventories of a built artifact."""

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path

from flaggedapis.reader import ReaderError
from flaggedapis.symbol import (
    INTERNAL_DELIMITER,
    Symbol,
    create_class,
    create_field,
    create_method,
    to_internal_format,
)

logger = logging.getLogger(__name__)

_METHOD_SIGNATURE_SPLIT = re.compile(r"[()]")


class ApiVersionsReader:
    """Read the classes, fields and methods listed in an API versions file."""

    def read(self, path: Path) -> set[Symbol]:
        """Read symbols from an API versions XML file.

        Args:
            path: Path to ``api-versions.xml``.

        Returns:
            Symbols present in the built artifact.

        Raises:
            ReaderError: If the file cannot be read or is not valid.
        """
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise ReaderError(f"Unable to read API versions '{path}': {exc}") from exc
        symbols = self.parse(data)
        logger.info(f"Read API versions (path={path} symbols={len(symbols)})")
        return symbols

    def parse(self, data: bytes) -> set[Symbol]:
        """Parse symbols from API versions XML content.

        Raises:
            ReaderError: If the XML is malformed or misses required attributes.
        """
        try:
            root = ET.fromstring(data)
        except ET.ParseError as exc:
            raise ReaderError(f"Bad XML: {exc}") from exc

        output: set[Symbol] = set()
        for cls in root.iter("class"):
            output.add(self._class_symbol(cls))

        for parent in root.iter():
            for child in parent:
                if child.tag == "field":
                    output.add(self._field_symbol(parent, child))
                elif child.tag == "method":
                    output.add(self._method_symbol(parent, child))
        return output

    def _class_symbol(self, cls: ET.Element) -> Symbol:
        class_name = _require(cls, "Bad XML: <class> element without name attribute")
        superclass: str | None = None
        interfaces: set[str] = set()
        for child in cls:
            if child.tag == "extends":
                superclass = _require(
                    child, "Bad XML: <extends> element without name attribute"
                )
            elif child.tag == "implements":
                interfaces.add(
                    _require(child, "Bad XML: <implements> element without name attribute")
                )
        return create_class(class_name, superclass, interfaces)

    def _field_symbol(self, parent: ET.Element, field: ET.Element) -> Symbol:
        field_name = _require(field, "Bad XML: <field> element without name attribute")
        class_name = _require(parent, "Bad XML: top level <field> element")
        return create_field(class_name, field_name)

    def _method_symbol(self, parent: ET.Element, method: ET.Element) -> Symbol:
        signature = _require(method, "Bad XML: <method> element without name attribute")
        parts = _METHOD_SIGNATURE_SPLIT.split(signature)
        if len(parts) != 3:
            raise ReaderError(f"Bad XML: method signature '{signature}'")
        method_name, method_args, _ = parts
        class_name = to_internal_format(
            _require(
                parent,
                "Bad XML: top level <method> element, "
                "or <class> element missing name attribute",
            )
        )
        if method_name == "<init>":
            method_name = class_name.rsplit(INTERNAL_DELIMITER, 1)[-1]
        return create_method(class_name, f"{method_name}({method_args})")


def _require(element: ET.Element, message: str) -> str:
    value = element.get("name")
    if value is None:
        raise ReaderError(message)
    return value
