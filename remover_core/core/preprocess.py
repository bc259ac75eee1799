"""
Source scanner (directive locator)

• Walks C# source with a state machine, like a lexer's first pass
• Recognises // and /* */ comments, char literals and every string flavour:
  regular, verbatim @"", raw triple-quoted, interpolated $"" / $@"" / $$ raw
  (including strings nested inside interpolation holes)
• A directive is a line whose first non-blank char is '#' at top-level code
• Evaluates #if/#elif/#else/#endif against the defined symbols; lines in
  branches not taken are disabled text and are never lexed
• Produces cleaned code: same length as the input, with comments, literals,
  directive lines and disabled text blanked (newlines kept)
"""

import re
import traceback
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from remover_core.core.condition_parser import (
    ConditionSyntaxError,
    evaluate,
    parse_condition,
)
from remover_core.core.directives import (
    Diagnostic,
    Directive,
    DirectiveKind,
    TextSpan,
    kind_for_keyword,
    line_and_column,
)
from remover_core.utils.log import get_logger

logger = get_logger("locator")

_LINE_BLANKS = " \t\f\v\u00a0\ufeff"
_NOT_NEWLINE = re.compile(r"[^\n]")
_KEYWORD = re.compile(r"[A-Za-z_]+")


def _blank(text: str) -> str:
    return _NOT_NEWLINE.sub(" ", text)


@dataclass(frozen=True)
class ScanResult:
    directives: Tuple[Directive, ...]
    disabled_spans: Tuple[TextSpan, ...]
    diagnostics: Tuple[Diagnostic, ...]
    cleaned: str


class _StringFrame:
    __slots__ = ("start", "verbatim", "raw_quotes", "interpolated", "dollars",
                 "in_hole", "brace_depth")

    def __init__(self, start, verbatim=False, raw_quotes=0, interpolated=False, dollars=0):
        self.start = start
        self.verbatim = verbatim
        self.raw_quotes = raw_quotes
        self.interpolated = interpolated
        self.dollars = dollars
        self.in_hole = False
        self.brace_depth = 0


class _ConditionalFrame:
    __slots__ = ("parent_active", "taken", "active", "seen_else", "opener")

    def __init__(self, parent_active, taken, opener):
        self.parent_active = parent_active
        self.taken = taken
        self.active = taken
        self.seen_else = False
        self.opener = opener


class _SourceScanner:

    def __init__(self, code: str, defined_symbols: Iterable[str]):
        self.code = code
        self.n = len(code)
        self.i = 0
        self.out: List[str] = []
        self.defined = set(defined_symbols)
        self.frames: List[_StringFrame] = []
        self.conditionals: List[_ConditionalFrame] = []
        self.directives: List[Directive] = []
        self.disabled: List[TextSpan] = []
        self.diagnostics: List[Diagnostic] = []
        self._disabled_start: Optional[int] = None
        self._line_pos = 0
        self._line_no = 1

    # ---------------- helpers ----------------

    def _line_at(self, offset: int) -> int:
        if offset < self._line_pos:
            self._line_pos, self._line_no = 0, 1
        self._line_no += self.code.count("\n", self._line_pos, offset)
        self._line_pos = offset
        return self._line_no

    def _diag(self, offset: int, message: str, severity: str = "error"):
        line, col = line_and_column(self.code, offset)
        self.diagnostics.append(Diagnostic(line, col, message, severity))
        logger.debug(f"scanner diagnostic ({line},{col}) {severity}: {message}")

    def _emit(self, end: int, blank: bool = True):
        chunk = self.code[self.i:end]
        self.out.append(_blank(chunk) if blank else chunk)
        self.i = end

    def _active(self) -> bool:
        return self.conditionals[-1].active if self.conditionals else True

    def _at_line_start(self) -> bool:
        return self.i == 0 or self.code[self.i - 1] == "\n"

    def _run_length(self, pos: int, ch: str) -> int:
        j = pos
        while j < self.n and self.code[j] == ch:
            j += 1
        return j - pos

    # ---------------- main loop ----------------

    def run(self) -> ScanResult:
        while self.i < self.n:
            if not self.frames and self._at_line_start():
                if self._try_directive():
                    continue
                if not self._active():
                    self._disabled_line()
                    continue
            if self.frames and not self.frames[-1].in_hole:
                self._string_step()
            else:
                self._code_step()
        self._finish()
        cleaned = "".join(self.out)
        return ScanResult(
            directives=tuple(self.directives),
            disabled_spans=tuple(self.disabled),
            diagnostics=tuple(self.diagnostics),
            cleaned=cleaned,
        )

    def _finish(self):
        self._close_disabled(self.n)
        for frame in reversed(self.frames):
            if frame.raw_quotes:
                self._diag(frame.start, "Unterminated raw string literal")
            elif frame.verbatim:
                self._diag(frame.start, "Unterminated verbatim string literal")
            else:
                self._diag(frame.start, "Newline in constant")
        self.frames.clear()
        for frame in reversed(self.conditionals):
            self._diag(frame.opener.start, "#endif directive expected")

    # ---------------- disabled text ----------------

    def _disabled_line(self):
        if self._disabled_start is None:
            self._disabled_start = self.i
        nl = self.code.find("\n", self.i)
        self._emit(self.n if nl < 0 else nl + 1)

    def _close_disabled(self, end: int):
        if self._disabled_start is not None and end > self._disabled_start:
            self.disabled.append(TextSpan(self._disabled_start, end))
        self._disabled_start = None

    # ---------------- directives ----------------

    def _try_directive(self) -> bool:
        code = self.code
        j = self.i
        while j < self.n and code[j] in _LINE_BLANKS:
            j += 1
        if j >= self.n or code[j] != "#":
            return False

        start = self.i
        nl = code.find("\n", j)
        text_end = self.n if nl < 0 else nl
        line_end = self.n if nl < 0 else nl + 1
        end = text_end
        if end > j and code[end - 1] == "\r":
            end -= 1

        self._close_disabled(start)

        k = j + 1
        while k < end and code[k] in _LINE_BLANKS:
            k += 1
        m = _KEYWORD.match(code, k, end)
        keyword = m.group(0) if m else ""
        rest = code[m.end():end] if m else code[k:end]
        kind = kind_for_keyword(keyword)

        condition_text = None
        condition = None
        if kind in (DirectiveKind.IF, DirectiveKind.ELIF):
            condition_text = _strip_comment(rest).strip()
            try:
                condition = parse_condition(condition_text)
            except ConditionSyntaxError as e:
                self._diag(j, f"Invalid preprocessor expression: {e}")

        active = self._apply_conditional(kind, condition, start)
        directive = Directive(
            kind=kind,
            keyword=keyword,
            start=start,
            end=end,
            line_end=line_end,
            line=self._line_at(start),
            text=code[j:end].rstrip(),
            condition_text=condition_text,
            condition=condition,
            active=active,
        )
        self.directives.append(directive)
        if self.conditionals and kind is DirectiveKind.IF:
            self.conditionals[-1].opener = directive

        if active and kind is DirectiveKind.OTHER:
            self._apply_other(keyword, _strip_comment(rest).strip(), j)

        logger.debug(
            f"directive #{keyword} line={directive.line} active={active} "
            f"condition={condition_text!r}"
        )
        self._emit(text_end)
        return True

    def _apply_conditional(self, kind, condition, start) -> bool:
        """Update the conditional stack; return whether the directive itself is live."""
        if kind is DirectiveKind.IF:
            parent = self._active()
            taken = parent and condition is not None and evaluate(condition, self.defined)
            # opener is patched with the real Directive right after construction
            self.conditionals.append(_ConditionalFrame(parent, taken, None))
            return parent

        if kind is DirectiveKind.OTHER:
            return self._active()

        if not self.conditionals:
            self._diag(start, f"Unexpected preprocessor directive #{kind.value}")
            return True

        frame = self.conditionals[-1]
        if kind is DirectiveKind.ENDIF:
            self.conditionals.pop()
            return frame.parent_active

        if frame.seen_else:
            self._diag(start, f"Unexpected preprocessor directive #{kind.value} after #else")
        if kind is DirectiveKind.ELIF:
            branch = (frame.parent_active and not frame.taken
                      and condition is not None and evaluate(condition, self.defined))
        else:
            branch = frame.parent_active and not frame.taken
            frame.seen_else = True
        frame.active = branch
        frame.taken = frame.taken or branch
        return frame.parent_active

    def _apply_other(self, keyword, rest, offset):
        if keyword == "define" and rest:
            self.defined.add(rest.split()[0])
        elif keyword == "undef" and rest:
            self.defined.discard(rest.split()[0])
        elif keyword == "error":
            self._diag(offset, f"#error: '{rest}'")
        elif keyword == "warning":
            self._diag(offset, f"#warning: '{rest}'", severity="warning")

    # ---------------- code ----------------

    def _code_step(self):
        code = self.code
        c = code[self.i]
        two = code[self.i:self.i + 2]

        if two == "//":
            nl = code.find("\n", self.i)
            self._emit(self.n if nl < 0 else nl)
            return

        if two == "/*":
            close = code.find("*/", self.i + 2)
            if close < 0:
                self._diag(self.i, "End-of-file found, '*/' expected")
                self._emit(self.n)
            else:
                self._emit(close + 2)
            return

        if c == "'":
            self._char_literal()
            return

        if c in '$@"' and self._try_string_start():
            return

        frame = self.frames[-1] if self.frames else None
        if frame is not None and c == "{":
            frame.brace_depth += 1
        elif frame is not None and c == "}":
            if frame.brace_depth == 0:
                width = min(self._run_length(self.i, "}"), max(frame.dollars, 1))
                frame.in_hole = False
                self._emit(self.i + width)
                return
            frame.brace_depth -= 1

        self._emit(self.i + 1, blank=False)

    def _char_literal(self):
        code = self.code
        j = self.i + 1
        while j < self.n:
            ch = code[j]
            if ch == "\\":
                j += 2
                continue
            if ch == "'":
                j += 1
                break
            if ch == "\n":
                self._diag(self.i, "Newline in constant")
                break
            j += 1
        self._emit(min(j, self.n))

    def _try_string_start(self) -> bool:
        code = self.code
        j = self.i
        dollars = 0
        while j < self.n and code[j] == "$":
            dollars += 1
            j += 1
        verbatim = False
        if j < self.n and code[j] == "@":
            verbatim = True
            j += 1
            while j < self.n and code[j] == "$":
                dollars += 1
                j += 1
        if j >= self.n or code[j] != '"':
            return False

        quotes = self._run_length(j, '"')
        if not verbatim and quotes >= 3:
            frame = _StringFrame(self.i, raw_quotes=quotes,
                                 interpolated=dollars > 0, dollars=dollars)
            self.frames.append(frame)
            self._emit(j + quotes)
            return True
        if not verbatim and quotes == 2:
            self._emit(j + 2)
            return True

        frame = _StringFrame(self.i, verbatim=verbatim,
                             interpolated=dollars > 0, dollars=dollars)
        self.frames.append(frame)
        self._emit(j + 1)
        return True

    # ---------------- strings ----------------

    def _string_step(self):
        code = self.code
        frame = self.frames[-1]
        c = code[self.i]
        nxt = code[self.i + 1] if self.i + 1 < self.n else ""

        if frame.raw_quotes:
            if c == '"':
                run = self._run_length(self.i, '"')
                if run >= frame.raw_quotes:
                    self.frames.pop()
                self._emit(self.i + run)
                return
            if frame.interpolated and c == "{":
                run = self._run_length(self.i, "{")
                if run >= frame.dollars:
                    frame.in_hole = True
                    frame.brace_depth = 0
                self._emit(self.i + run)
                return
            self._emit(self.i + 1)
            return

        if frame.interpolated and c == "{":
            if nxt == "{":
                self._emit(self.i + 2)
            else:
                frame.in_hole = True
                frame.brace_depth = 0
                self._emit(self.i + 1)
            return

        if frame.verbatim:
            if c == '"':
                if nxt == '"':
                    self._emit(self.i + 2)
                else:
                    self.frames.pop()
                    self._emit(self.i + 1)
                return
            self._emit(self.i + 1)
            return

        if c == "\\" and nxt and nxt != "\n":
            self._emit(self.i + 2)
        elif c == '"':
            self.frames.pop()
            self._emit(self.i + 1)
        elif c == "\n":
            self._diag(frame.start, "Newline in constant")
            self.frames.pop()
        else:
            self._emit(self.i + 1)


def _strip_comment(text: str) -> str:
    idx = text.find("//")
    return text if idx < 0 else text[:idx]


# ---------------------------------------------------------
# Public API
# ---------------------------------------------------------

def scan_source(code: str, defined_symbols: Iterable[str] = ()) -> ScanResult:
    """
    Locate directives, disabled text and lexical problems in C# source.
    Pure function of its inputs.
    """
    logger.info("scan_source started")
    try:
        result = _SourceScanner(code, defined_symbols).run()
        logger.info(
            f"scan_source finished: directives={len(result.directives)} "
            f"disabled={len(result.disabled_spans)} diagnostics={len(result.diagnostics)}"
        )
        return result
    except Exception as e:
        logger.error("scan_source failed: %s", e)
        logger.debug(traceback.format_exc())
        raise
