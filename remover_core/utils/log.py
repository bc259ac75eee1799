import logging
import os
from pathlib import Path


LOG_DIR_ENV = "COND_REMOVER_LOG_DIR"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


# ---------------------------------------------------------
# Force logging to project-root/logs/remover.log
# ---------------------------------------------------------
def ensure_logging():
    override = os.environ.get(LOG_DIR_ENV)
    if override:
        logs_dir = Path(override)
    else:
        project_root = Path(__file__).resolve().parents[2]
        logs_dir = project_root / "logs"

    root = logging.getLogger()
    if not root.handlers:
        logs_dir.mkdir(parents=True, exist_ok=True)
        logging.basicConfig(
            filename=str(logs_dir / "remover.log"),
            level=logging.INFO,
            format=LOG_FORMAT,
        )


def get_logger(stage: str) -> logging.Logger:
    ensure_logging()
    return logging.getLogger(f"cond_remover.{stage}")
