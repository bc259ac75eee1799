from pathlib import Path
from typing import Tuple, Union

UTF8_BOM = b"\xef\xbb\xbf"


def read_with_bom(path: Union[str, Path]) -> Tuple[str, bool]:
    """
    Decode a file as strict UTF-8.
    Returns (content without BOM, whether the file started with one).
    """
    data = Path(path).read_bytes()
    has_bom = data.startswith(UTF8_BOM)
    if has_bom:
        data = data[len(UTF8_BOM):]
    return data.decode("utf-8"), has_bom


def write_with_bom(path: Union[str, Path], content: str, include_bom: bool) -> None:
    payload = content.encode("utf-8")
    with open(path, "wb") as f:
        if include_bom:
            f.write(UTF8_BOM)
        f.write(payload)
