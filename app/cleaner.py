import os
import tempfile
from dataclasses import replace

from remover_core.config import ProcessingOptions
from remover_core.remover import process_file


def clean_cs_code(code: bytes, filename: str = "input.cs", options: ProcessingOptions = None):
    """Run the dry-run file pipeline on uploaded source and serialise the result."""
    options = replace(options or ProcessingOptions(), dry_run=True, create_backup=False,
                      parallel=False)
    with tempfile.NamedTemporaryFile(delete=False, suffix=".cs") as f:
        f.write(code)
        temp_path = f.name

    try:
        result = process_file(temp_path, options)
        data = result.to_dict(include_preview=True)
        data["file_path"] = filename
        data["target_symbol"] = options.target_symbol
        return data

    finally:
        os.remove(temp_path)
