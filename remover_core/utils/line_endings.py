from enum import Enum


class LineEnding(Enum):
    LF = "\n"
    CRLF = "\r\n"

    @property
    def newline(self) -> str:
        return self.value


def detect(content: str) -> LineEnding:
    """Majority line ending; mixed or tied files fall back to LF."""
    crlf = content.count("\r\n")
    lf = content.count("\n") - crlf
    return LineEnding.CRLF if crlf > lf else LineEnding.LF
