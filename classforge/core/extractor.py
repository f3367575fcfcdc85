"""
Member extraction from rendered template text.

Templates written by extensions contain plain class members, for example::

    /**
     * The name.
     */
    public $name = 'bob';

    public function getName()
    {
        return $this->name;
    }

The extractor renders a template, recognises those property and method
blocks and turns them into ``Property`` and ``Method`` entries on a
definition. Members are recognised by layout: four-space indented
declarations, doc comments closed by ``     */`` and method bodies closed
by a ``    }`` line.
"""

import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..logging_config import get_logger
from .definition import Definition, Method, Property
from .literals import parse_literal

logger = get_logger(__name__)

RenderFunc = Callable[[str, Dict[str, Any]], str]

_DOC_COMMENT = r"(?P<doc_comment>^ {4}/\*\*\n(?:(?!\*/)[\s\S])*? {5}\*/)\n"

PROPERTY_PATTERN = re.compile(
    r"(?:" + _DOC_COMMENT + r")?"
    r"^ {4}(?P<static>static )?"
    r"(?P<visibility>public|protected|private)"
    r"\s+\$(?P<name>[a-zA-Z0-9_]+)"
    r"(?:\s*=\s*(?P<value>[^;]*?))?"
    r"\s*;",
    re.MULTILINE,
)

METHOD_PATTERN = re.compile(
    r"(?:" + _DOC_COMMENT + r")?"
    r"^ {4}(?P<static>static )?"
    r"(?P<visibility>public|protected|private)"
    r"\s+function\s+(?P<name>[a-zA-Z0-9_]+)"
    r"\((?P<arguments>[^\n]*?)\)[ \t]*\n"
    r" {4}\{(?P<code>[\s\S]*?)\n {4}\}",
    re.MULTILINE,
)


def _strip_blank_lines(code: str) -> str:
    lines = code.split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines)


def extract_properties(text: str) -> Tuple[List[Property], str]:
    """Find property declarations in ``text``.

    Returns:
        The properties in order of appearance and the text with every
        matched declaration removed.
    """
    properties = []
    for match in PROPERTY_PATTERN.finditer(text):
        raw_value = match.group("value")
        value = parse_literal(raw_value) if raw_value else None
        properties.append(
            Property(
                match.group("visibility"),
                match.group("name"),
                value,
                static=bool(match.group("static")),
                doc_comment=match.group("doc_comment") or None,
            )
        )
    return properties, PROPERTY_PATTERN.sub("", text)


def extract_methods(text: str) -> Tuple[List[Method], str]:
    """Find method declarations in ``text``.

    Returns:
        The methods in order of appearance and the text with every matched
        declaration removed.
    """
    methods = []
    for match in METHOD_PATTERN.finditer(text):
        methods.append(
            Method(
                match.group("visibility"),
                match.group("name"),
                match.group("arguments"),
                _strip_blank_lines(match.group("code")),
                static=bool(match.group("static")),
                doc_comment=match.group("doc_comment") or None,
            )
        )
    return methods, METHOD_PATTERN.sub("", text)


class MemberExtractor:
    """Renders templates and attaches the members found to a definition."""

    def __init__(self, render: RenderFunc):
        """
        Args:
            render: ``render(template_text, variables) -> text``; must fail
                on undefined variables.
        """
        self._render = render

    def extract(
        self, definition: Definition, template: str, variables: Dict[str, Any]
    ):
        """Render ``template`` and add its properties, then its methods.

        The text left over once the members are removed is discarded.
        """
        rendered = self._render(template, variables)
        properties, residual = extract_properties(rendered)
        methods, residual = extract_methods(residual)

        for property in properties:
            definition.add_property(property)
        for method in methods:
            definition.add_method(method)

        logger.debug(
            "Extracted %d properties and %d methods into %s",
            len(properties),
            len(methods),
            definition.name,
        )
