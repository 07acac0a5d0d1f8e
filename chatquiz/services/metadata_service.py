"""
Metadata Service
Computes the corpus metadata snapshot used to bound random draws
"""
import logging

from chatquiz.db.message_store import MessageStore
from chatquiz.models.metadata import CorpusMetadata

logger = logging.getLogger(__name__)

REQUIRED_PARTICIPANTS = 2


class MetadataError(Exception):
    """Base exception for corpus metadata errors"""
    pass


class EmptyCorpusError(MetadataError):
    """Raised when the store holds no messages"""
    pass


class ParticipantCountError(MetadataError):
    """Raised when the corpus does not have exactly two participants"""
    pass


class MissingReactionsError(MetadataError):
    """Raised when reactions are required but none were imported"""
    pass


async def compute_metadata(
    store: MessageStore,
    require_reactions: bool = False
) -> CorpusMetadata:
    """
    Compute metadata about all messages, participants and reactions.
    Should be called once on startup.

    Args:
        store: Message store to aggregate over
        require_reactions: Fail when no reactions exist (react variant enabled)

    Returns:
        Immutable CorpusMetadata snapshot

    Raises:
        EmptyCorpusError: If there are no messages
        ParticipantCountError: If there are not exactly two participants
        MissingReactionsError: If reactions are required but none exist
    """
    message_range = await store.aggregate_message_range()
    if message_range is None:
        raise EmptyCorpusError("No messages to generate questions")

    names = sorted(await store.distinct_participant_names())
    if len(names) != REQUIRED_PARTICIPANTS:
        raise ParticipantCountError(
            f"Only two participants are supported (found {len(names)})"
        )

    reactions = sorted(await store.distinct_reactions())
    if require_reactions and not reactions:
        raise MissingReactionsError("No reactions to generate questions")

    metadata = CorpusMetadata(
        min_message_id=message_range.min_id,
        max_message_id=message_range.max_id,
        min_timestamp=message_range.min_timestamp,
        max_timestamp=message_range.max_timestamp,
        distinct_platforms=sorted(await store.distinct_platforms()),
        distinct_participant_names=names,
        distinct_reactions=reactions
    )

    logger.info(
        f"📊 Corpus metadata: ids {metadata.min_message_id}-{metadata.max_message_id}, "
        f"{metadata.min_timestamp.isoformat()} to {metadata.max_timestamp.isoformat()}, "
        f"platforms={metadata.distinct_platforms}, "
        f"{len(metadata.distinct_reactions)} distinct reactions"
    )
    return metadata
