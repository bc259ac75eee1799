"""Detection of tool-generated C# sources, which are skipped by default."""

import os
from typing import Optional

_GENERATED_SUFFIXES = (".g.cs", ".g.i.cs", ".designer.cs", ".generated.cs")
_GENERATED_PREFIXES = ("temporarygeneratedfile_",)
_HEADER_MARKERS = ("<auto-generated", "<autogenerated")

# only the file header is inspected
_HEADER_CHARS = 2048


def is_generated_name(path: str) -> bool:
    name = os.path.basename(path).lower()
    return name.endswith(_GENERATED_SUFFIXES) or name.startswith(_GENERATED_PREFIXES)


def is_generated_file(path: str, content: Optional[str] = None) -> bool:
    if is_generated_name(path):
        return True
    if content is None:
        return False
    header = content[:_HEADER_CHARS].lower()
    return any(marker in header for marker in _HEADER_MARKERS)
