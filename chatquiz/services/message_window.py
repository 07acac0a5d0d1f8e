"""
Message Window Repository
Random anchor selection and contiguous message windows around an anchor
"""
import logging
from enum import Enum
from typing import List, Optional

from chatquiz.core.seeded_random import SeededRandom
from chatquiz.db.message_store import MessageStore
from chatquiz.models.message import Message, MessageFilter
from chatquiz.models.metadata import CorpusMetadata
from chatquiz.services.retry import InsufficientMessages, NoMatchingMessage

logger = logging.getLogger(__name__)


class WindowMode(str, Enum):
    ENDING_AT = "ending_at"
    STARTING_AT = "starting_at"


class MessageWindowRepository:
    """
    Query contract shared by every variant generator.

    Both operations await the store. Retryable outcomes raise subclasses of
    RetryGeneration; store failures propagate unchanged.
    """

    def __init__(self, store: MessageStore, metadata: CorpusMetadata):
        self.store = store
        self.metadata = metadata

    async def get_random_anchor(
        self,
        rng: SeededRandom,
        message_filter: Optional[MessageFilter] = None
    ) -> Message:
        """
        Get a random message subject to the filter

        A random id is drawn over the full id range, then a random scan
        direction, so selective filters are not biased towards the start of
        the id range.

        Raises:
            NoMatchingMessage: If nothing matches in the drawn direction
        """
        message_id = rng.range_int(
            self.metadata.min_message_id,
            self.metadata.max_message_id + 1
        )
        ascending = rng.boolean()

        anchor = await self.store.find_anchor(ascending, message_id, message_filter)
        if anchor is None:
            logger.debug(
                f"🔁 No anchor {'>=' if ascending else '<='} {message_id} "
                f"matching {message_filter}"
            )
            raise NoMatchingMessage(f"No message matches from id {message_id}")
        return anchor

    async def get_window(
        self,
        anchor: Message,
        mode: WindowMode,
        length: int
    ) -> List[Message]:
        """
        Get a window of messages that starts or ends with the anchor

        Results are always in ascending timestamp order, ties broken by id.

        Raises:
            InsufficientMessages: If fewer than length messages exist
        """
        ascending = mode == WindowMode.STARTING_AT
        messages = await self.store.find_window(ascending, anchor, length)

        if len(messages) < length:
            logger.debug(
                f"🔁 Window {mode.value} message {anchor.id} has "
                f"{len(messages)}/{length} messages"
            )
            raise InsufficientMessages(
                f"Only {len(messages)} of {length} messages available"
            )

        window = list(messages[:length])
        if not ascending:
            window.reverse()
        return window
