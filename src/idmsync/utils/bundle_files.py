import json
import logging
from pathlib import Path

from ..core.errors import SyncError
from ..core.models import ExportBundle

logger = logging.getLogger(__name__)


def save_bundle(bundle: ExportBundle, path: Path) -> Path:
    """Write an export bundle as indented JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        path.write_text(json.dumps(bundle.to_dict(), indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise SyncError(f"Error writing export file {path}", e) from e
    logger.info("Saved %d config entities to %s", len(bundle.entities), path)
    return path


def load_bundle(path: Path) -> ExportBundle:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        bundle = ExportBundle.from_dict(data)
    except (OSError, ValueError) as e:
        raise SyncError(f"Error reading export file {path}", e) from e
    logger.info("Loaded %d config entities from %s", len(bundle.entities), path)
    return bundle


__all__ = ["save_bundle", "load_bundle"]
