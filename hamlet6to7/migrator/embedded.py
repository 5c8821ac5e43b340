"""Rewriting of quasi-quoted template blocks embedded in Haskell source"""

import re
from collections import Counter
from dataclasses import dataclass, field

from hamlet6to7.migrator.converters import get_converter
from hamlet6to7.migrator.errors import MalformedMarkerError
from hamlet6to7.migrator.models import MarkerKind, MarkerPattern
from hamlet6to7.utils.logger import LoggerMixin

QUASI_QUOTERS = ("hamlet", "xhamlet", "cassius", "julius")

_QQ = "|".join(QUASI_QUOTERS)
_MACRO = "|".join(qq.upper() for qq in QUASI_QUOTERS)

BLOCK_CLOSE = "|]"

LEGACY_OPENER = MarkerPattern(
    kind=MarkerKind.LEGACY_OPENER,
    pattern=re.compile(rf"\[\$(?P<qq>{_QQ})\|"),
    replacement="[{qq}|",
)

MACRO_OPENER = MarkerPattern(
    kind=MarkerKind.MACRO_OPENER,
    pattern=re.compile(rf"\[(?P<macro>{_MACRO})\|"),
    replacement="[{qq}|",
)

CONDITIONAL_GUARD = MarkerPattern(
    kind=MarkerKind.CONDITIONAL_GUARD,
    pattern=re.compile(
        r"[ \t]*#[ \t]*(?:ifdef[ \t]+GHC7"
        r"|if[ \t]+(?:GHC7|defined[ \t]*\(?[ \t]*GHC7[ \t]*\)?"
        r"|__GLASGOW_HASKELL__[ \t]*>=[ \t]*700))[ \t]*"
    ),
    replacement="{modern}",
)

MACRO_CONDITIONAL = MarkerPattern(
    kind=MarkerKind.MACRO_CONDITIONAL,
    pattern=re.compile(
        rf"[ \t]*#[ \t]*define[ \t]+(?P<macro>{_MACRO})[ \t]+\$?(?P<qq>{_QQ})[ \t]*"
    ),
    replacement="",
)

MARKER_PATTERNS = (LEGACY_OPENER, MACRO_OPENER, CONDITIONAL_GUARD, MACRO_CONDITIONAL)

# Openers that are already 0.7 style unless a resolved guard says otherwise
_MODERN_OPENER = re.compile(rf"\[(?P<qq>{_QQ})\|")

_DIRECTIVE = re.compile(r"[ \t]*#[ \t]*(?P<directive>if|ifdef|ifndef|elif|else|endif)\b")


@dataclass
class _GuardResolution:
    """Guard-resolved text with bookkeeping for the block pass."""

    text: str
    # output line index -> 1-based line in the original content
    origins: list[int]
    # offsets of modern openers that came from a guard with a legacy branch
    forced_legacy: set[int] = field(default_factory=set)


class EmbeddedSourceRewriter(LoggerMixin):
    """Applies the four marker rules to Haskell source text.

    Guards are resolved first, line by line; quasi-quoted blocks are then
    scanned in one pass. Text outside the recognized spans is copied through
    unchanged.
    """

    def rewrite(self, content: str) -> tuple[str, Counter[MarkerKind]]:
        counts: Counter[MarkerKind] = Counter()
        resolution = self._resolve_guards(content, counts)
        rewritten = self._rewrite_blocks(resolution, counts)
        if counts:
            self.logger.debug("Rewrote embedded markers", counts=dict(counts))
        return rewritten, counts

    def _resolve_guards(
        self, content: str, counts: Counter[MarkerKind]
    ) -> _GuardResolution:
        lines = [line for line in re.split(r"(?<=\n)", content) if line]
        output: list[str] = []
        origins: list[int] = []
        forced: set[int] = set()
        offset = 0

        index = 0
        while index < len(lines):
            span = None
            if CONDITIONAL_GUARD.pattern.fullmatch(_strip_eol(lines[index])):
                span = _find_guard_span(lines, index)

            if span is None:
                output.append(lines[index])
                origins.append(index + 1)
                offset += len(lines[index])
                index += 1
                continue

            else_index, end_index = span
            modern = lines[index + 1 : else_index]
            legacy = lines[else_index + 1 : end_index]

            if _is_macro_conditional(modern, legacy):
                counts[MarkerKind.MACRO_CONDITIONAL] += 1
            else:
                counts[MarkerKind.CONDITIONAL_GUARD] += 1
                legacy_text = "".join(legacy)
                force = bool(
                    LEGACY_OPENER.pattern.search(legacy_text)
                    or MACRO_OPENER.pattern.search(legacy_text)
                )
                for position, line in enumerate(modern, start=index + 2):
                    if force:
                        forced.update(
                            offset + m.start() for m in _MODERN_OPENER.finditer(line)
                        )
                    output.append(line)
                    origins.append(position)
                    offset += len(line)

            index = end_index + 1

        return _GuardResolution("".join(output), origins, forced)

    def _rewrite_blocks(
        self, resolution: _GuardResolution, counts: Counter[MarkerKind]
    ) -> str:
        text = resolution.text
        output: list[str] = []
        position = 0

        while True:
            opener = _next_opener(text, position)
            if opener is None:
                output.append(text[position:])
                break

            kind, match = opener
            if kind is None and match.start() in resolution.forced_legacy:
                kind = MarkerKind.CONDITIONAL_GUARD

            output.append(text[position : match.start()])
            close = text.find(BLOCK_CLOSE, match.end())

            if close == -1:
                if kind is None:
                    # unterminated modern block, not ours to fix
                    output.append(text[match.start() :])
                    break
                line = resolution.origins[text.count("\n", 0, match.start())]
                raise MalformedMarkerError(
                    None, line, f"unterminated quasi-quote '{match.group(0)}'"
                )

            if kind is None:
                output.append(text[match.start() : close + len(BLOCK_CLOSE)])
            else:
                source_body = text[match.end() : close]
                if _spans_directive(source_body):
                    line = resolution.origins[text.count("\n", 0, match.start())]
                    raise MalformedMarkerError(
                        None,
                        line,
                        f"quasi-quote '{match.group(0)}' runs across "
                        "an unrecognized conditional",
                    )
                qq = _quasi_quoter(match)
                body = get_converter(qq).convert(source_body)
                output.append(LEGACY_OPENER.replacement.format(qq=qq))
                output.append(body)
                output.append(BLOCK_CLOSE)
                if kind is not MarkerKind.CONDITIONAL_GUARD:
                    counts[kind] += 1

            position = close + len(BLOCK_CLOSE)

        return "".join(output)


def _strip_eol(line: str) -> str:
    return line.rstrip("\r\n")


def _spans_directive(body: str) -> bool:
    # the text on the opener's own line belongs to the template
    return any(_DIRECTIVE.match(line) for line in body.split("\n")[1:])


def _find_guard_span(lines: list[str], start: int) -> tuple[int, int] | None:
    """Locate ``#else``/``#endif`` for the guard at ``start``.

    Guards containing nested conditionals or ``#elif`` are not recognized.
    """
    else_index = None
    for index in range(start + 1, len(lines)):
        directive = _DIRECTIVE.match(lines[index])
        if directive is None:
            continue
        name = directive.group("directive")
        if name == "else" and else_index is None:
            else_index = index
        elif name == "endif":
            return (else_index, index) if else_index is not None else None
        else:
            return None
    return None


def _is_macro_conditional(modern: list[str], legacy: list[str]) -> bool:
    def defines_only(branch: list[str]) -> bool:
        lines = [_strip_eol(line) for line in branch if line.strip()]
        if not lines:
            return False
        for line in lines:
            match = MACRO_CONDITIONAL.pattern.fullmatch(line)
            if match is None or match.group("macro") != match.group("qq").upper():
                return False
        return True

    return defines_only(modern) and defines_only(legacy)


def _next_opener(
    text: str, position: int
) -> tuple[MarkerKind | None, re.Match[str]] | None:
    """Earliest opener at or after ``position``; kind ``None`` means 0.7 style."""
    candidates: list[tuple[MarkerKind | None, re.Match[str]]] = []
    for kind, pattern in (
        (MarkerKind.LEGACY_OPENER, LEGACY_OPENER.pattern),
        (MarkerKind.MACRO_OPENER, MACRO_OPENER.pattern),
        (None, _MODERN_OPENER),
    ):
        match = pattern.search(text, position)
        if match is not None:
            candidates.append((kind, match))
    if not candidates:
        return None
    return min(candidates, key=lambda candidate: candidate[1].start())


def _quasi_quoter(match: re.Match[str]) -> str:
    groups = match.groupdict()
    if groups.get("macro"):
        return groups["macro"].lower()
    return groups["qq"]
