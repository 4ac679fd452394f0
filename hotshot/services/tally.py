import asyncio
import logging
from typing import Awaitable, Callable, Optional

from hotshot.models import Option
from hotshot.services.change_feed import Subscription
from hotshot.services.store import RoomStore

logger = logging.getLogger("voting")

SnapshotCallback = Callable[[Optional[str], list[Option]], Awaitable[None]]


def sort_options(options: list[Option]) -> list[Option]:
    """Highest tally first; equal tallies keep insertion order."""
    return sorted(options, key=lambda option: -option.votes_count)


async def fetch_options(store: RoomStore, question_id: str) -> list[Option]:
    rows = await store.select(
        Option,
        order_by=(Option.created_at, Option.id),
        question_id=question_id,
    )
    return sort_options(rows)


class LiveTallyView:
    """Keeps a sorted option snapshot of one question fresh from the change feed.

    Any insert/update/delete on the question's options triggers a full refetch;
    events that pile up while a refetch runs are folded into the next one.
    """

    def __init__(self, store: RoomStore, on_change: Optional[SnapshotCallback] = None):
        self.store = store
        self.on_change = on_change
        self.question_id: Optional[str] = None
        self.options: list[Option] = []
        self._subscription: Optional[Subscription] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self.question_id is not None

    async def activate(self, question_id: str) -> None:
        if question_id == self.question_id:
            return
        await self.deactivate()
        self.question_id = question_id
        # Subscribe before the first fetch so no change slips between them
        self._subscription = self.store.subscribe("options", question_id=question_id)
        try:
            await self.refresh()
        except BaseException:
            await self.deactivate()
            raise
        self._task = asyncio.create_task(self._listen(self._subscription))
        logger.debug("Tally view activated question=%s", question_id)

    async def deactivate(self) -> None:
        if self._subscription:
            self._subscription.close()
            self._subscription = None
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("Tally listener failed question=%s", self.question_id)
            self._task = None
        if self.question_id is not None:
            logger.debug("Tally view deactivated question=%s", self.question_id)
        self.question_id = None
        self.options = []

    async def refresh(self) -> None:
        if self.question_id is None:
            return
        self.options = await fetch_options(self.store, self.question_id)
        if self.on_change:
            await self.on_change(self.question_id, self.options)

    async def _listen(self, subscription: Subscription) -> None:
        async for _event in subscription:
            subscription.drain()
            try:
                await self.refresh()
            except Exception:
                # Keep listening; the next change retries the refetch
                logger.exception("Tally refresh failed question=%s", self.question_id)
