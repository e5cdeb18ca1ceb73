import logging
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Tuple

from tqdm import tqdm

from ..config import DEFAULT_EXPORT_WORKERS, SyncContext
from .catalog import Catalog
from .models import ConfigStore, Entity, ExportBundle, ExportMetadata
from .policy import SuppressionPolicy

logger = logging.getLogger(__name__)


class ExportOrchestrator:
    """
    Builds an export bundle from every config entity in the store.

    The bulk listing already returns bodies, but each entity is fetched again
    by id so per-entity failures can be classified individually. Export is
    best effort: only a failure of the listing itself is raised.
    """

    def __init__(
        self,
        catalog: Catalog,
        store: ConfigStore,
        context: SyncContext,
        policy: Optional[SuppressionPolicy] = None,
        max_workers: Optional[int] = DEFAULT_EXPORT_WORKERS,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._context = context
        self._policy = policy or SuppressionPolicy()
        # 0 opts into one worker per entity.
        self._max_workers = DEFAULT_EXPORT_WORKERS if max_workers is None else max_workers

    def _pool_size(self, total: int) -> int:
        if self._max_workers == 0:
            return total
        return min(self._max_workers, total)

    def _fetch(self, entity_id: str) -> Tuple[str, Optional[Entity]]:
        try:
            return entity_id, self._store.get_entity(entity_id)
        except Exception as e:
            if self._policy.is_benign_read_failure(entity_id, e, self._context.deployment_type):
                logger.debug("Skipping config entity %s (expected failure: %s)", entity_id, e)
            else:
                logger.error("Error getting config entity %s: %s", entity_id, e)
            return entity_id, None

    def export_all(self) -> ExportBundle:
        configurations = self._catalog.list_entities()
        entity_ids: List[str] = []
        for entity in configurations:
            entity_id = entity.get("_id")
            if not entity_id:
                logger.warning("Skipping config entity without an _id: %r", entity)
                continue
            entity_ids.append(str(entity_id))

        bundle = ExportBundle(
            meta=ExportMetadata.now(
                origin=self._context.origin,
                exported_by=self._context.exported_by,
                tool_version=self._context.tool_version,
            )
        )
        results: Dict[str, Entity] = {}

        if entity_ids:
            workers = self._pool_size(len(entity_ids))
            logger.debug("Exporting %d config entities with %d worker(s)", len(entity_ids), workers)
            with tqdm(
                total=len(entity_ids),
                desc="Exporting config entities",
                unit="entity",
                disable=not sys.stdout.isatty(),
            ) as bar, ThreadPoolExecutor(max_workers=workers, thread_name_prefix="idmsync-export") as pool:
                futures = [pool.submit(self._fetch, entity_id) for entity_id in entity_ids]
                for fut in as_completed(futures):
                    entity_id, body = fut.result()
                    bar.set_postfix_str(entity_id, refresh=False)
                    bar.update(1)
                    if body is not None:
                        results[str(body.get("_id") or entity_id)] = body

        bundle.entities = results
        logger.info("Exported %d of %d config entities.", len(results), len(entity_ids))
        return bundle


__all__ = ["ExportOrchestrator"]
