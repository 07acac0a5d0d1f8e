"""
Message Store
Read-only storage port for the question engine and its MongoDB adapter
FILE: chatquiz/db/message_store.py

Messages collection schema:
    {
        "id": int,                  # import order, unique
        "timestamp": datetime,
        "participant": str,
        "platform": str,            # e.g. "INSTAGRAM", "MESSENGER"
        "text": str,
        "words": int,
        "medias": [{"uri": str}],
        "reactions": [{"reaction": str, "participant": str}]
    }

Participants collection schema:
    {"name": str}
"""
from typing import Any, Dict, List, Optional, Protocol
import logging

from motor.motor_asyncio import AsyncIOMotorDatabase

from chatquiz.models.message import Message, MessageFilter, Reaction
from chatquiz.models.metadata import MessageRange

logger = logging.getLogger(__name__)


class MessageStore(Protocol):
    """
    Storage operations required by the question engine.
    All operations are reads; the engine never writes.
    """

    async def find_anchor(
        self,
        ascending: bool,
        id_bound: int,
        message_filter: Optional[MessageFilter] = None
    ) -> Optional[Message]:
        """First message by id at-or-after (ascending) or at-or-before id_bound"""
        ...

    async def find_window(
        self,
        ascending: bool,
        bound: Message,
        limit: int,
        message_filter: Optional[MessageFilter] = None
    ) -> List[Message]:
        """
        Up to limit messages at-or-after (ascending) or at-or-before the
        bound's (timestamp, id), in query order
        """
        ...

    async def aggregate_message_range(self) -> Optional[MessageRange]:
        ...

    async def distinct_platforms(self) -> List[str]:
        ...

    async def distinct_participant_names(self) -> List[str]:
        ...

    async def distinct_reactions(self) -> List[str]:
        ...

    async def ping(self) -> bool:
        ...


def build_filter_query(message_filter: Optional[MessageFilter]) -> Dict[str, Any]:
    """Translate a MessageFilter into a MongoDB query document"""
    query: Dict[str, Any] = {}
    if message_filter is None:
        return query

    if message_filter.platform is not None:
        query["platform"] = message_filter.platform
    if message_filter.min_words is not None:
        query["words"] = {"$gte": message_filter.min_words}
    if message_filter.has_reactions:
        query["reactions.0"] = {"$exists": True}

    return query


def document_to_message(doc: Dict[str, Any]) -> Message:
    """
    Convert a stored message document

    Raises:
        pydantic.ValidationError: If the document violates the message schema
    """
    return Message(
        id=doc["id"],
        timestamp=doc["timestamp"],
        participant=doc["participant"],
        platform=doc["platform"],
        text=doc.get("text") or "",
        words=doc.get("words", 0),
        medias=[media["uri"] for media in doc.get("medias", [])],
        reactions=[Reaction(**reaction) for reaction in doc.get("reactions", [])]
    )


class MongoMessageStore:
    """MongoDB adapter that satisfies the MessageStore contract"""

    PROJECTION = {"_id": 0}

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        messages_collection: str = "messages",
        participants_collection: str = "participants"
    ):
        self.db = db
        self.messages = db[messages_collection]
        self.participants = db[participants_collection]

    async def ensure_indexes(self) -> None:
        """Indexes backing anchor and window queries"""
        await self.messages.create_index("id", unique=True)
        await self.messages.create_index([("timestamp", 1), ("id", 1)])
        logger.info("✓ Message indexes ensured")

    async def find_anchor(
        self,
        ascending: bool,
        id_bound: int,
        message_filter: Optional[MessageFilter] = None
    ) -> Optional[Message]:
        query = build_filter_query(message_filter)
        query["id"] = {"$gte": id_bound} if ascending else {"$lte": id_bound}

        doc = await self.messages.find_one(
            query,
            self.PROJECTION,
            sort=[("id", 1 if ascending else -1)]
        )
        if doc is None:
            return None
        return document_to_message(doc)

    async def find_window(
        self,
        ascending: bool,
        bound: Message,
        limit: int,
        message_filter: Optional[MessageFilter] = None
    ) -> List[Message]:
        if ascending:
            bound_query = {"$or": [
                {"timestamp": bound.timestamp, "id": {"$gte": bound.id}},
                {"timestamp": {"$gt": bound.timestamp}},
            ]}
        else:
            bound_query = {"$or": [
                {"timestamp": bound.timestamp, "id": {"$lte": bound.id}},
                {"timestamp": {"$lt": bound.timestamp}},
            ]}

        filter_query = build_filter_query(message_filter)
        query = {"$and": [bound_query, filter_query]} if filter_query else bound_query

        direction = 1 if ascending else -1
        cursor = self.messages.find(query, self.PROJECTION).sort(
            [("timestamp", direction), ("id", direction)]
        ).limit(limit)

        messages = []
        async for doc in cursor:
            messages.append(document_to_message(doc))
        return messages

    async def aggregate_message_range(self) -> Optional[MessageRange]:
        pipeline = [
            {
                "$group": {
                    "_id": None,
                    "min_id": {"$min": "$id"},
                    "max_id": {"$max": "$id"},
                    "min_timestamp": {"$min": "$timestamp"},
                    "max_timestamp": {"$max": "$timestamp"}
                }
            }
        ]
        result = await self.messages.aggregate(pipeline).to_list(length=1)
        if not result:
            return None

        stats = result[0]
        stats.pop("_id", None)
        return MessageRange(**stats)

    async def distinct_platforms(self) -> List[str]:
        return sorted(await self.messages.distinct("platform"))

    async def distinct_participant_names(self) -> List[str]:
        return sorted(await self.participants.distinct("name"))

    async def distinct_reactions(self) -> List[str]:
        return sorted(await self.messages.distinct("reactions.reaction"))

    async def ping(self) -> bool:
        try:
            await self.db.command("ping")
            return True
        except Exception as e:
            logger.error(f"❌ MongoDB ping failed: {e}")
            return False
