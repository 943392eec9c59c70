"""Replace-all save of a spot working set."""

import logging
import time
from collections import Counter
from typing import Callable, Optional, Sequence

from ..exceptions import SaveInProgressError
from ..metrics import record_save, update_saved_spots
from ..state.models import SaveResult, Spot, SpotScope
from ..store.base import SpotStore
from ..store.codec import spot_to_row

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "There was an error saving the parking spot configuration."

SaveCallback = Callable[[list[Spot]], None]


def duplicate_spot_ids(spots: Sequence[Spot]) -> list[str]:
    """Ids used by more than one spot, in first-seen order."""
    counts = Counter(spot.id for spot in spots)
    return [spot_id for spot_id, count in counts.items() if count > 1]


class SpotSaver:
    """
    Persists a working set by replacing every stored row of its scope.

    Only one save may run at a time; callers should disable their save
    trigger while `is_saving` is true. Failures of either phase are
    reported as one failed SaveResult and never retried.
    """

    def __init__(self, store: SpotStore, on_save: Optional[SaveCallback] = None):
        """
        Initialize the saver.

        Args:
            store: Persistence collaborator
            on_save: Called once with the saved spots after each successful save;
                errors it raises are logged and do not fail the save
        """
        self.store = store
        self.on_save = on_save
        self._saving = False

    @property
    def is_saving(self) -> bool:
        return self._saving

    async def save(self, spots: Sequence[Spot], scope: SpotScope) -> SaveResult:
        """
        Replace the stored spots of a scope with the given spots.

        Args:
            spots: Full working set to store
            scope: (area, camera) key to replace

        Returns:
            SaveResult with the saved count, or a failed result

        Raises:
            SaveInProgressError: If a save is already running
        """
        if self._saving:
            raise SaveInProgressError(
                f"A save for area {scope.area_id}, camera {scope.camera_id} is already running"
            )

        snapshot = list(spots)

        # Ids are only unique at generation time; renames are not re-checked
        duplicates = duplicate_spot_ids(snapshot)
        if duplicates:
            logger.warning(f"Saving spots with duplicate ids: {duplicates}")

        rows = [spot_to_row(spot, scope) for spot in snapshot]

        self._saving = True
        start = time.monotonic()
        try:
            await self.store.replace_all(scope, rows)
        except Exception as e:
            record_save(False, time.monotonic() - start)
            logger.error(f"Error saving spots: {e}")
            return SaveResult(success=False, message=SAVE_FAILED_MESSAGE)
        finally:
            self._saving = False

        record_save(True, time.monotonic() - start)
        update_saved_spots(scope.area_id, scope.camera_id, len(snapshot))
        logger.info(
            f"Saved {len(snapshot)} parking spot(s) for area {scope.area_id}, "
            f"camera {scope.camera_id}"
        )

        # Rows are already stored at this point
        if self.on_save:
            try:
                self.on_save(snapshot)
            except Exception as e:
                logger.error(f"Save callback failed: {e}")

        return SaveResult(
            success=True,
            saved_count=len(snapshot),
            spots=snapshot,
            message=f"Successfully saved {len(snapshot)} parking spots.",
        )
