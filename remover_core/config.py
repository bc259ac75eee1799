"""Processing options and project-level defaults for the conditional remover."""

import re
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, Optional, Tuple

DEFAULT_TARGET_SYMBOL = "NET8_0_OR_GREATER"

# greppable token carried by every injected #error marker
REVIEW_SENTINEL = "NET8_REVIEW_REQUIRED"

CONFIG_SECTION = "cond-remover"

_NET_PLAIN = re.compile(r"NET(\d)")
_NET_UNDERSCORE = re.compile(r"NET_(\d)")


def symbol_aliases(symbol: str) -> Tuple[str, ...]:
    """The symbol plus its NETn <-> NET_n spelling, without duplicates."""
    with_underscore = _NET_PLAIN.sub(r"NET_\1", symbol)
    without_underscore = _NET_UNDERSCORE.sub(r"NET\1", symbol)
    return tuple(dict.fromkeys((symbol, with_underscore, without_underscore)))


def scan_symbols(target_symbols: Iterable[str], additional_defines: Iterable[str] = ()) -> Tuple[str, ...]:
    """Symbols defined while scanning: every target alias plus the extra defines."""
    return tuple(dict.fromkeys(tuple(target_symbols) + tuple(additional_defines)))


@dataclass(frozen=True)
class ProcessingOptions:
    dry_run: bool = False
    verbose: bool = False
    include_generated: bool = False
    create_backup: bool = False
    parallel: bool = False
    report_path: Optional[str] = None
    fail_on_review: bool = False
    target_symbol: str = DEFAULT_TARGET_SYMBOL
    additional_defines: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def target_symbols_with_aliases(self) -> Tuple[str, ...]:
        return symbol_aliases(self.target_symbol)

    @property
    def preprocessor_symbols(self) -> Tuple[str, ...]:
        return scan_symbols(self.target_symbols_with_aliases, self.additional_defines)


def find_pyproject(start: Path) -> Optional[Path]:
    current = start.resolve()
    if current.is_file():
        current = current.parent
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def load_config(start: Path) -> dict:
    """Read [tool.cond-remover] from the nearest pyproject.toml, or {}."""
    path = find_pyproject(start)
    if path is None:
        return {}
    with open(path, "rb") as f:
        data = tomllib.load(f)
    return data.get("tool", {}).get(CONFIG_SECTION, {})


def apply_config(options: ProcessingOptions, config: dict) -> ProcessingOptions:
    """Fill options from project config; only keys present in config are used."""
    changes = {}
    if "target" in config:
        changes["target_symbol"] = str(config["target"])
    if "define" in config:
        defines = config["define"]
        if isinstance(defines, str):
            defines = [defines]
        changes["additional_defines"] = tuple(str(d) for d in defines)
    if "include-generated" in config:
        changes["include_generated"] = bool(config["include-generated"])
    if "backup" in config:
        changes["create_backup"] = bool(config["backup"])
    return replace(options, **changes)
