import logging

from fleet.domain.errors import RemoteOperationFailed
from fleet.domain.ports import DaemonClient

logger = logging.getLogger(__name__)


class ImagePuller:
    """
    Pulls an image to completion on a remote daemon.

    The daemon reports a pull as a stream of progress events. Callers only
    care whether the image ended up on the host, so every event is drained
    here and only the outcome is surfaced: `pull` returns once the stream is
    exhausted, or raises RemoteOperationFailed on the first error event.
    """

    async def pull(self, daemon: DaemonClient, image: str) -> None:
        last_status = None
        async for event in daemon.pull_events(image):
            error = event.get("error")
            if error:
                detail = event.get("errorDetail", {}).get("message") or error
                logger.error("Pull of %s failed: %s", image, detail)
                raise RemoteOperationFailed(f"pull {image} failed: {detail}")
            last_status = event.get("status", last_status)

        logger.info("Pulled %s (%s)", image, last_status or "no status reported")
