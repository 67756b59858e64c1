"""
Logging Event Handler

Infrastructure event handler for logging domain events.
Domain layer remains unaware of logging infrastructure.
"""

import logging

from linkdrop.domain.events import (
    AccessDeniedEvent,
    ArtifactDeletedEvent,
    ArtifactUploadedEvent,
    DomainEvent,
    DownloadGrantedEvent,
    ShortLinkCreatedEvent,
)


class LoggingEventHandler:
    """
    Subscribes to domain events and logs them.

    Short ids are truncated; passwords and retrieval URLs never reach
    the log.
    """

    def __init__(self, logger: logging.Logger):
        """
        Args:
            logger: Python logging.Logger instance
        """
        self.logger = logger

    def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event by logging it.

        Args:
            event: Domain event to log
        """
        try:
            if isinstance(event, ArtifactUploadedEvent):
                self._handle_uploaded(event)
            elif isinstance(event, ShortLinkCreatedEvent):
                self._handle_short_link(event)
            elif isinstance(event, DownloadGrantedEvent):
                self._handle_download_granted(event)
            elif isinstance(event, AccessDeniedEvent):
                self._handle_access_denied(event)
            elif isinstance(event, ArtifactDeletedEvent):
                self._handle_deleted(event)
            else:
                self.logger.debug(
                    f"Unhandled event: {event.__class__.__name__} "
                    f"(aggregate_id={event.aggregate_id})"
                )
        except Exception as e:
            # Log handler errors but don't fail the operation
            self.logger.error(
                f"Error in logging event handler for {event.__class__.__name__}: {e}",
                exc_info=True,
            )

    def _handle_uploaded(self, event: ArtifactUploadedEvent) -> None:
        self.logger.info(
            f"Artifact uploaded: id={event.aggregate_id}, owner={event.owner_id or 'anonymous'}, "
            f"size={event.size}, password={'yes' if event.has_password else 'no'}, "
            f"short_id={event.short_id[:4]}..."
        )

    def _handle_short_link(self, event: ShortLinkCreatedEvent) -> None:
        self.logger.debug(f"Short link created: {event.aggregate_id[:4]}...")

    def _handle_download_granted(self, event: DownloadGrantedEvent) -> None:
        limit = event.download_limit if event.download_limit is not None else "unlimited"
        self.logger.info(
            f"Download granted: id={event.aggregate_id}, "
            f"count={event.download_count}/{limit}"
        )

    def _handle_access_denied(self, event: AccessDeniedEvent) -> None:
        self.logger.info(
            f"Access denied: id={event.aggregate_id}, path={event.path}, reason={event.reason}"
        )

    def _handle_deleted(self, event: ArtifactDeletedEvent) -> None:
        level = logging.INFO if event.blob_deleted else logging.WARNING
        self.logger.log(
            level,
            f"Artifact deleted: id={event.aggregate_id}, cause={event.cause}, "
            f"blob_deleted={event.blob_deleted}",
        )
