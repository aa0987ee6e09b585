# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Reader for API signature text files (``current.txt``).

Only the parts of the format needed to identify flagged declarations are
understood: package and class blocks, class headers with their supertypes,
and ``ctor``/``method``/``field``/``enum_constant`` member lines. Parameter
types are encoded the way method descriptors are written in the JVM class
file format, with generic arguments erased.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from flaggedapis.flag import Flag
from flaggedapis.reader import FlaggedSymbol, ReaderError
from flaggedapis.symbol import create_class, create_field, create_method

logger = logging.getLogger(__name__)

FLAGGED_API_ANNOTATIONS = frozenset({"FlaggedApi", "android.annotation.FlaggedApi"})
JAVA_OBJECT = "java.lang.Object"
JAVA_ENUM = "java.lang.Enum"
JAVA_ANNOTATION = "java.lang.annotation.Annotation"

PRIMITIVE_DESCRIPTORS: dict[str, str] = {
    "boolean": "Z",
    "byte": "B",
    "char": "C",
    "short": "S",
    "int": "I",
    "long": "J",
    "float": "F",
    "double": "D",
    "void": "V",
}

_PACKAGE_RE = re.compile(r"^package\s+(?P<name>[\w.]+)\s*\{$")
_CLASS_RE = re.compile(
    r"^(?:[\w-]+\s+)*?(?P<kind>class|interface|@interface|enum)\s+"
    r"(?P<name>[\w.$]+)(?P<rest>.*?)\s*\{$"
)
_MEMBER_KEYWORDS = ("ctor", "method", "field", "enum_constant", "property")
_FLAG_ARGUMENT_RE = re.compile(r'^\(\s*(?:value\s*=\s*)?"(?P<flag>(?:[^"\\]|\\.)*)"\s*\)$')
_IGNORED_PARAMETER_WORDS = frozenset({"final", "optional", "vararg"})


@dataclass
class _ClassDecl:
    qualified_name: str
    superclass: str | None
    interfaces: list[str]
    type_parameters: dict[str, str]
    flag: Flag | None
    line_no: int


@dataclass
class _ParseState:
    path: str
    package: str | None = None
    current: _ClassDecl | None = None
    classes: dict[str, _ClassDecl] = field(default_factory=dict)
    output: set[FlaggedSymbol] = field(default_factory=set)


class ApiSignatureReader:
    """Read symbols annotated with ``@FlaggedApi`` from an API signature file."""

    def read(self, path: Path) -> set[FlaggedSymbol]:
        """Read flagged symbols from an API signature file.

        Args:
            path: Path to the signature file, usually ``current.txt``.

        Returns:
            Pairs of flagged symbol and flag.

        Raises:
            ReaderError: If the file cannot be read or parsed.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ReaderError(f"Unable to read API signature '{path}': {exc}") from exc
        flagged = self.parse(text, path=str(path))
        logger.info(f"Read API signature (path={path} flagged={len(flagged)})")
        return flagged

    def parse(self, text: str, path: str = "<memory>") -> set[FlaggedSymbol]:
        """Parse flagged symbols from API signature text.

        Args:
            text: Signature file content.
            path: Name used in error messages.

        Returns:
            Pairs of flagged symbol and flag.

        Raises:
            ReaderError: If the content is structurally invalid.
        """
        state = _ParseState(path=path)
        for line_no, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line or line.startswith("//"):
                continue
            if state.package is None:
                self._parse_package(state, line, line_no)
            elif state.current is None:
                if line == "}":
                    state.package = None
                else:
                    self._parse_class(state, state.package, line, line_no)
            elif line == "}":
                state.current = None
            else:
                self._parse_member(state, state.current, line, line_no)

        if state.package is not None or state.current is not None:
            raise ReaderError(f"{path}: unexpected end of file inside a block")

        for decl in state.classes.values():
            if decl.flag is None:
                continue
            symbol = create_class(
                decl.qualified_name,
                decl.superclass,
                _all_interfaces(decl, state.classes),
            )
            state.output.add((symbol, decl.flag))
        return state.output

    def _parse_package(self, state: _ParseState, line: str, line_no: int) -> None:
        _, stripped = _strip_annotations(line)
        match = _PACKAGE_RE.match(_normalize_ws(stripped))
        if match is None:
            raise _error(state, line_no, f"expected package declaration: {line}")
        state.package = match.group("name")

    def _parse_class(
        self, state: _ParseState, package: str, line: str, line_no: int
    ) -> None:
        annotations, stripped = _strip_annotations(line)
        match = _CLASS_RE.match(_normalize_ws(stripped))
        if match is None:
            raise _error(state, line_no, f"expected class declaration: {line}")
        kind = match.group("kind")
        relative_name = match.group("name")
        qualified_name = f"{package}.{relative_name}"
        rest = match.group("rest").strip()

        type_parameters = _enclosing_type_parameters(state.classes, qualified_name)
        if rest.startswith("<"):
            end = _matching_close(rest, 0)
            type_parameters.update(
                _parse_type_parameters(rest[: end + 1], type_parameters)
            )
            rest = rest[end + 1 :]

        extends, implements = _parse_supertypes(rest)
        if kind in ("interface", "@interface"):
            superclass = None
            interfaces = extends + implements
            if kind == "@interface":
                interfaces.append(JAVA_ANNOTATION)
        else:
            default = JAVA_ENUM if kind == "enum" else JAVA_OBJECT
            superclass = extends[0] if extends else default
            interfaces = extends[1:] + implements

        decl = _ClassDecl(
            qualified_name=qualified_name,
            superclass=superclass,
            interfaces=interfaces,
            type_parameters=type_parameters,
            flag=_flag_or_none(state, annotations, line_no),
            line_no=line_no,
        )
        state.classes[qualified_name] = decl
        state.current = decl

    def _parse_member(
        self, state: _ParseState, decl: _ClassDecl, line: str, line_no: int
    ) -> None:
        keyword, _, body = line.partition(" ")
        if keyword not in _MEMBER_KEYWORDS:
            raise _error(state, line_no, f"expected class member: {line}")
        if keyword == "property":
            return
        annotations, stripped = _strip_annotations(body)
        flag = _flag_or_none(state, annotations, line_no)
        if flag is None:
            return

        stripped = _normalize_ws(stripped)
        if keyword in ("field", "enum_constant"):
            declaration = stripped.split("=", 1)[0].rstrip("; ")
            if not declaration:
                raise _error(state, line_no, f"unable to parse field: {line}")
            state.output.add(
                (create_field(decl.qualified_name, declaration.split(" ")[-1]), flag)
            )
            return

        symbol = create_method(
            decl.qualified_name,
            _method_signature(state, decl, keyword, stripped, line_no),
        )
        state.output.add((symbol, flag))


def _method_signature(
    state: _ParseState, decl: _ClassDecl, keyword: str, text: str, line_no: int
) -> str:
    """Build ``name(<encoded parameters>)`` from a ctor or method line."""
    open_index = _find_top_level(text, "(")
    if open_index < 0:
        raise _error(state, line_no, f"unable to parse {keyword}: {text}")
    close_index = _matching_close(text, open_index)
    head = text[:open_index].strip()
    parameters = text[open_index + 1 : close_index]

    type_parameters = dict(decl.type_parameters)
    generic = re.search(r"(?:^|\s)<", head)
    if generic is not None:
        start = generic.end() - 1
        end = _matching_close(head, start)
        type_parameters.update(
            _parse_type_parameters(head[start : end + 1], type_parameters)
        )
        head = head[:start] + head[end + 1 :]

    if keyword == "ctor":
        name = decl.qualified_name.rsplit(".", 1)[-1]
    else:
        name = head.split()[-1] if head else ""
    if not name:
        raise _error(state, line_no, f"unable to parse {keyword} name: {text}")

    encoded = "".join(
        _descriptor(parameter, type_parameters)
        for parameter in _split_top_level(parameters)
        if parameter.strip()
    )
    return f"{name}({encoded})"


def _descriptor(parameter: str, type_parameters: dict[str, str]) -> str:
    """Encode one parameter type, e.g. ``int[]`` as ``[I``."""
    text = parameter.split("=", 1)[0].strip()
    words = [w for w in _erase_generics(text).split() if w not in _IGNORED_PARAMETER_WORDS]
    if not words:
        return ""
    type_text = words[0].rstrip("?!")

    dimensions = 0
    if type_text.endswith("..."):
        dimensions += 1
        type_text = type_text[:-3].rstrip("?!")
    while type_text.endswith("[]"):
        dimensions += 1
        type_text = type_text[:-2].rstrip("?!")

    if type_text in type_parameters:
        type_text = type_parameters[type_text]
    primitive = PRIMITIVE_DESCRIPTORS.get(type_text)
    base = primitive if primitive is not None else f"L{type_text.replace('.', '/')};"
    return "[" * dimensions + base


def _parse_type_parameters(
    text: str, enclosing: dict[str, str] | None = None
) -> dict[str, str]:
    """Map type variable names to their erasure, from ``<T, U extends B>``.

    Bounds naming an earlier variable of the same list, or a variable in
    ``enclosing`` (the class or outer class type parameters), are resolved to
    that variable's erasure.
    """
    enclosing = enclosing or {}
    erasures: dict[str, str] = {}
    for item in _split_top_level(text[1:-1]):
        words = item.split()
        if not words:
            continue
        bound = JAVA_OBJECT
        if len(words) > 2 and words[1] == "extends":
            first = item.split("extends", 1)[1].split("&", 1)[0]
            bound = _erase_generics(first).strip().rstrip("?!") or JAVA_OBJECT
        erasures[words[0]] = erasures.get(bound, enclosing.get(bound, bound))
    return erasures


def _parse_supertypes(rest: str) -> tuple[list[str], list[str]]:
    extends: list[str] = []
    implements: list[str] = []
    target: list[str] | None = None
    for word in _erase_generics(rest).replace(",", " ").split():
        if word == "extends":
            target = extends
        elif word == "implements":
            target = implements
        elif target is not None:
            target.append(word.rstrip("?!"))
    return extends, implements


def _enclosing_type_parameters(
    classes: dict[str, _ClassDecl], qualified_name: str
) -> dict[str, str]:
    type_parameters: dict[str, str] = {}
    parts = qualified_name.split(".")
    for end in range(1, len(parts)):
        outer = classes.get(".".join(parts[:end]))
        if outer is not None:
            type_parameters.update(outer.type_parameters)
    return type_parameters


def _all_interfaces(decl: _ClassDecl, classes: dict[str, _ClassDecl]) -> set[str]:
    """Collect the interfaces of ``decl`` and of its supertypes known in the file."""
    seen: set[str] = set()
    interfaces: set[str] = set()
    pending = [decl.qualified_name]
    while pending:
        name = pending.pop()
        if name in seen:
            continue
        seen.add(name)
        known = classes.get(name)
        if known is None:
            continue
        interfaces.update(known.interfaces)
        pending.extend(known.interfaces)
        if known.superclass is not None:
            pending.append(known.superclass)
    interfaces.discard(decl.qualified_name)
    return interfaces


def _flag_or_none(state: _ParseState, annotations: list[str], line_no: int) -> Flag | None:
    for annotation in annotations:
        name, _, arguments = annotation[1:].partition("(")
        if name.strip() not in FLAGGED_API_ANNOTATIONS:
            continue
        match = _FLAG_ARGUMENT_RE.match(f"({arguments}".strip())
        if match is None:
            logger.warning(
                f"Skipping @FlaggedApi without a string literal "
                f"(path={state.path} line={line_no} annotation={annotation})"
            )
            return None
        return Flag(match.group("flag"))
    return None


def _strip_annotations(text: str) -> tuple[list[str], str]:
    """Split ``text`` into its annotations and the remaining declaration.

    String and character literals are skipped so an ``@`` inside a constant
    value is not mistaken for an annotation.
    """
    annotations: list[str] = []
    kept: list[str] = []
    index = 0
    while index < len(text):
        ch = text[index]
        if ch in "\"'":
            end = _literal_end(text, index)
            kept.append(text[index:end])
            index = end
            continue
        if ch == "@" and not text.startswith("@interface", index):
            end = index + 1
            while end < len(text) and (text[end].isalnum() or text[end] in "_."):
                end += 1
            if end < len(text) and text[end] == "(":
                end = _matching_close(text, end) + 1
            annotations.append(text[index:end])
            index = end
            continue
        kept.append(ch)
        index += 1
    return annotations, "".join(kept)


def _literal_end(text: str, start: int) -> int:
    quote = text[start]
    index = start + 1
    while index < len(text):
        if text[index] == "\\":
            index += 2
            continue
        if text[index] == quote:
            return index + 1
        index += 1
    return len(text)


def _matching_close(text: str, start: int) -> int:
    """Return the index of the bracket closing the one at ``start``."""
    pairs = {"(": ")", "<": ">"}
    opening = text[start]
    closing = pairs[opening]
    depth = 0
    index = start
    while index < len(text):
        ch = text[index]
        if ch in "\"'":
            index = _literal_end(text, index)
            continue
        if ch == opening:
            depth += 1
        elif ch == closing:
            depth -= 1
            if depth == 0:
                return index
        index += 1
    raise ReaderError(f"Unbalanced '{opening}' in declaration: {text}")


def _find_top_level(text: str, target: str) -> int:
    depth = 0
    for index, ch in enumerate(text):
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
        elif ch == target and depth == 0:
            return index
    return -1


def _split_top_level(text: str) -> list[str]:
    """Split on commas that are not nested in ``<>`` or ``()``."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in text:
        if ch in "<(":
            depth += 1
        elif ch in ">)":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return parts


def _erase_generics(text: str) -> str:
    kept: list[str] = []
    depth = 0
    for ch in text:
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
        elif depth == 0:
            kept.append(ch)
    return "".join(kept)


def _normalize_ws(value: str) -> str:
    return re.sub(r"\s+", " ", value).strip()


def _error(state: _ParseState, line_no: int, message: str) -> ReaderError:
    return ReaderError(f"{state.path}:{line_no}: {message}")
