"""Whole-content converters for Hamlet, Cassius and Julius 0.6 templates"""

import re
from typing import Protocol

from hamlet6to7.migrator.models import FileKind

_IDENT = r"[A-Za-z_][\w']*"
REFERENCE = rf"{_IDENT}(?:\.{_IDENT})*"

_REFERENCE_RE = re.compile(REFERENCE)
_IDENT_RE = re.compile(_IDENT)

# 0.7 interpolation prefixes keyed by the named group that matched
_PREFIXES = {"var": "#", "query": "@?", "url": "@", "embed": "^"}

_QUERY = rf"@\?(?P<query>{REFERENCE})@"
_URL = rf"@(?P<url>{REFERENCE})@"
_EMBED = rf"\^(?P<embed>{REFERENCE})\^"

_STATEMENT = re.compile(
    r"(?P<indent>[ \t]*)\$(?P<keyword>forall|maybe|if|elseif|else|nothing)"
    r"(?P<rest>(?:[ \t].*)?)"
)
_COMMENT = re.compile(r"[ \t]*\$#.*")

_ATTRIBUTE = r"![\w:-]+(?:=(?:\"[^\"]*\"|[^\s!\"]+))?"
_TAG_LINE = re.compile(
    rf"(?P<indent>[ \t]*)"
    rf"(?P<head>(?:%[\w:-]+|\.[\w-]+|#[\w-]+)(?:\.[\w-]+|#[\w-]+|{_ATTRIBUTE})*)"
    r"(?:[ \t](?P<content>.*))?"
)
_TAG_TOKEN = re.compile(
    r"%(?P<name>[\w:-]+)"
    r"|\.(?P<cls>[\w-]+)"
    r"|#(?P<id>[\w-]+)"
    r"|!(?P<attr>[\w:-]+)(?:=(?P<value>\"[^\"]*\"|[^\s!\"]+))?"
)


def convert_reference(reference: str) -> str:
    """Rewrite a 0.6 dotted reference as Haskell function application.

    ``a.b`` becomes ``a b`` and ``a.b.c`` becomes ``a (b c)``. A chain with a
    capitalised segment is a qualified name and is returned unchanged.
    """
    parts = reference.split(".")
    if len(parts) == 1 or any(part[:1].isupper() for part in parts):
        return reference
    applied = parts[-1]
    for part in reversed(parts[:-1]):
        if " " in applied:
            applied = f"({applied})"
        applied = f"{part} {applied}"
    return applied


class TemplateConverter(Protocol):
    """Converter interface for one template language."""

    def convert(self, content: str) -> str:
        """Return ``content`` rewritten in the 0.7 syntax."""
        ...


class InterpolationConverter:
    """Rewrites delimited 0.6 interpolations to the ``#{...}`` family."""

    def __init__(self, pattern: str) -> None:
        self.pattern = re.compile(pattern)

    def convert_interpolations(self, text: str) -> str:
        def replace(match: re.Match[str]) -> str:
            group = match.lastgroup
            assert group is not None
            return f"{_PREFIXES[group]}{{{convert_reference(match.group(group))}}}"

        return self.pattern.sub(replace, text)

    def convert(self, content: str) -> str:
        return self.convert_interpolations(content)


class CassiusConverter(InterpolationConverter):
    """Cassius: ``$var$`` and ``@url@`` interpolations"""

    def __init__(self) -> None:
        super().__init__(rf"\$(?P<var>{REFERENCE})\$|{_QUERY}|{_URL}")


class JuliusConverter(InterpolationConverter):
    """Julius: ``%var%``, ``@url@`` and ``^widget^`` interpolations"""

    def __init__(self) -> None:
        super().__init__(rf"%(?P<var>{REFERENCE})%|{_QUERY}|{_URL}|{_EMBED}")


class HamletConverter(InterpolationConverter):
    """Hamlet: interpolations, ``%tag`` lines and ``$forall``/``$maybe`` bindings.

    Works line by line; indentation and ``\\r\\n`` endings are kept as they are.
    """

    def __init__(self) -> None:
        super().__init__(rf"\$(?P<var>{REFERENCE})\$|{_QUERY}|{_URL}|{_EMBED}")

    def convert(self, content: str) -> str:
        return "\n".join(self.convert_line(line) for line in content.split("\n"))

    def convert_line(self, line: str) -> str:
        body, eol = (line[:-1], "\r") if line.endswith("\r") else (line, "")

        if _COMMENT.fullmatch(body):
            return line

        statement = _STATEMENT.fullmatch(body)
        if statement:
            return self._convert_statement(statement) + eol

        tag = _TAG_LINE.fullmatch(body)
        if tag:
            return self._convert_tag(tag) + eol

        return self.convert_interpolations(body) + eol

    def _convert_statement(self, match: re.Match[str]) -> str:
        indent, keyword = match.group("indent"), match.group("keyword")
        args = match.group("rest").split()

        if keyword in ("forall", "maybe") and len(args) == 2:
            source, binding = args
            if _REFERENCE_RE.fullmatch(source) and _IDENT_RE.fullmatch(binding):
                return f"{indent}${keyword} {binding} <- {convert_reference(source)}"

        if keyword in ("if", "elseif") and len(args) == 1:
            if _REFERENCE_RE.fullmatch(args[0]):
                return f"{indent}${keyword} {convert_reference(args[0])}"

        return match.group(0)

    def _convert_tag(self, match: re.Match[str]) -> str:
        name = None
        pieces: list[str] = []
        for token in _TAG_TOKEN.finditer(match.group("head")):
            if token.group("name"):
                name = token.group("name")
            elif token.group("cls"):
                pieces.append(f".{token.group('cls')}")
            elif token.group("id"):
                pieces.append(f"#{token.group('id')}")
            elif token.group("value") is None:
                pieces.append(token.group("attr"))
            else:
                value = self.convert_interpolations(token.group("value"))
                pieces.append(f"{token.group('attr')}={value}")

        opening = " ".join(([name] if name else []) + pieces)
        content = self.convert_interpolations(match.group("content") or "")
        return f"{match.group('indent')}<{opening}>{content}"


_CONVERTERS: dict[str, TemplateConverter] = {
    "hamlet": HamletConverter(),
    "xhamlet": HamletConverter(),
    "cassius": CassiusConverter(),
    "julius": JuliusConverter(),
}

_KIND_QUASI_QUOTERS = {
    FileKind.HAMLET: "hamlet",
    FileKind.CASSIUS: "cassius",
    FileKind.JULIUS: "julius",
}


def get_converter(quasi_quoter: str) -> TemplateConverter:
    """Converter for a quasi-quoter name such as ``hamlet`` or ``julius``."""
    try:
        return _CONVERTERS[quasi_quoter]
    except KeyError:
        raise ValueError(f"No converter for quasi-quoter '{quasi_quoter}'") from None


def converter_for_kind(kind: FileKind) -> TemplateConverter:
    """Converter for a standalone template file kind."""
    if kind not in _KIND_QUASI_QUOTERS:
        raise ValueError(f"{kind.name} files are not whole-content templates")
    return _CONVERTERS[_KIND_QUASI_QUOTERS[kind]]
