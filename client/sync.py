"""
Background sync worker: replays queued fixes once connectivity returns.
"""
from client.api import LocationApi
from client.offline_queue import OfflineQueue
from core.logger import logger
import config


class BackgroundSync:
    """
    Replays the offline queue on the sync-location tag.

    Entries are sent one after another, each with its own token. The drained
    entries are removed only after every send completed; a failure leaves them
    queued, so entries already sent in that run are sent again next time.
    """

    def __init__(self, api: LocationApi, queue: OfflineQueue, tag: str = config.SYNC_TAG):
        self.api = api
        self.queue = queue
        self.tag = tag

    def handle_sync(self, tag: str) -> bool:
        """
        Sync event entry point.

        Returns:
            True if the tag was ours and the replay completed
        """
        if tag != self.tag:
            return False
        return self.replay()

    def on_online(self) -> bool:
        """Connectivity came back."""
        return self.handle_sync(self.tag)

    def replay(self) -> bool:
        """
        Send every queued fix, then remove the sent entries.

        Fixes queued while the replay is running are left for the next run.

        Returns:
            True if all entries were sent and removed from the queue
        """
        entries = self.queue.drain_all()
        if not entries:
            return True

        try:
            for entry in entries:
                response = self.api.push_location(entry.fix, entry.token)
                if response.is_error:
                    logger.warning(f"Queued fix {entry.id} rejected: HTTP {response.status_code}")
        except Exception as e:
            logger.error(f"Location sync failed: {e}")
            return False

        self.queue.remove(entry.id for entry in entries)
        logger.info(f"Location sync replayed {len(entries)} queued fixes")
        return True
