import os
import shutil
from datetime import datetime

from remover_core.utils.log import get_logger

logger = get_logger("backup")


def create_backup(file_path: str) -> str:
    """Copy file_path to <file>.bak, or <file>.<timestamp>.bak when that exists."""
    backup_path = f"{file_path}.bak"
    if os.path.exists(backup_path):
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup_path = f"{file_path}.{stamp}.bak"
    shutil.copyfile(file_path, backup_path)
    logger.debug(f"backup created: {backup_path}")
    return backup_path


def restore_backup(backup_path: str, original_path: str) -> None:
    if os.path.exists(backup_path):
        shutil.copyfile(backup_path, original_path)
        logger.info(f"restored {original_path} from {backup_path}")


def cleanup_backup(backup_path: str) -> None:
    if os.path.exists(backup_path):
        os.remove(backup_path)
        logger.debug(f"backup removed: {backup_path}")
