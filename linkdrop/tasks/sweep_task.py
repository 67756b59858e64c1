"""
Sweep Task

Celery beat task for periodic removal of expired artifacts and lapsed
short links. Thin wrapper that delegates to application services.
"""

import logging
from typing import Any, Dict

from flask import current_app

from linkdrop.application.artifact_service import ArtifactService
from linkdrop.domain.artifacts import ArtifactStore
from linkdrop.domain.link_registry import LinkRegistry

logger = logging.getLogger(__name__)

SWEEP_TASK_NAME = "linkdrop.tasks.sweep_expired_artifacts"


def run_sweep(
    artifact_store: ArtifactStore,
    artifact_service: ArtifactService,
    link_registry: LinkRegistry,
) -> Dict[str, Any]:
    """
    Remove artifacts expired by time or quota, then purge lapsed short links.

    A failure on one artifact is recorded and the sweep moves on.

    Returns:
        dict: Sweep statistics with counts and errors
    """
    logger.info("Starting expiry sweep")

    stats = {
        "artifacts_removed": 0,
        "blobs_removed": 0,
        "short_links_purged": 0,
        "errors": [],
    }

    try:
        expired = artifact_store.find_expired()
    except Exception as e:
        error_msg = f"Error listing expired artifacts: {e}"
        stats["errors"].append(error_msg)
        logger.error(error_msg, exc_info=True)
        expired = []

    for record in expired:
        try:
            blob_deleted = artifact_service.remove(record, cause="sweep")
            stats["artifacts_removed"] += 1
            if blob_deleted:
                stats["blobs_removed"] += 1
        except Exception as e:
            error_msg = f"Error removing artifact {record.id}: {e}"
            stats["errors"].append(error_msg)
            logger.error(error_msg, exc_info=True)

    try:
        stats["short_links_purged"] = link_registry.purge_expired()
    except Exception as e:
        error_msg = f"Error purging short links: {e}"
        stats["errors"].append(error_msg)
        logger.error(error_msg, exc_info=True)

    logger.info(
        f"Sweep completed - Artifacts: {stats['artifacts_removed']}, "
        f"Blobs: {stats['blobs_removed']}, "
        f"Short links: {stats['short_links_purged']}, "
        f"Errors: {len(stats['errors'])}"
    )
    if stats["errors"]:
        logger.warning(f"Sweep errors: {stats['errors']}")

    return stats


def register_sweep_task(celery):
    """
    Register the sweep task on a Celery instance.

    The task body resolves services from the Flask app's container; the
    Celery ContextTask provides the app context.
    """

    @celery.task(bind=True, name=SWEEP_TASK_NAME)
    def sweep_expired_artifacts(self):
        container = current_app.container
        return run_sweep(
            container.resolve(ArtifactStore),
            container.resolve(ArtifactService),
            container.resolve(LinkRegistry),
        )

    return sweep_expired_artifacts
