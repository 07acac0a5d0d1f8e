"""
JSON Message Store
In-memory corpus snapshot loaded from a JSON export, for local runs and tests

File format:
    {
        "participants": ["Alex", "Sam"],
        "messages": [
            {
                "id": 1,
                "timestamp": "2024-03-05T21:14:00Z",
                "participant": "Sam",
                "platform": "MESSENGER",
                "text": "are you coming tonight",
                "medias": [],
                "reactions": [{"reaction": "😂", "participant": "Alex"}]
            }
        ]
    }

"words" is computed from the text when a message omits it.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from chatquiz.models.message import Message, MessageFilter
from chatquiz.models.metadata import MessageRange

logger = logging.getLogger(__name__)


def count_words(text: str) -> int:
    return len(text.split())


def message_matches(message: Message, message_filter: Optional[MessageFilter]) -> bool:
    if message_filter is None:
        return True
    if message_filter.platform is not None and message.platform != message_filter.platform:
        return False
    if message_filter.min_words is not None and message.words < message_filter.min_words:
        return False
    if message_filter.has_reactions and not message.reactions:
        return False
    return True


class JsonMessageStore:
    """Read-only in-memory store that satisfies the MessageStore contract"""

    def __init__(self, messages: Iterable[Message], participants: Iterable[str]):
        self._by_id = sorted(messages, key=lambda m: m.id)
        self._by_time = sorted(self._by_id, key=lambda m: m.sort_key)
        self._participants = sorted(set(participants))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JsonMessageStore":
        messages = []
        for raw in data.get("messages", []):
            raw = dict(raw)
            raw.setdefault("words", count_words(raw.get("text") or ""))
            messages.append(Message(**raw))

        participants = data.get("participants")
        if participants is None:
            participants = {message.participant for message in messages}

        return cls(messages, participants)

    @classmethod
    def from_file(cls, path: str) -> "JsonMessageStore":
        corpus_path = Path(path)
        with corpus_path.open("r", encoding="utf-8") as f:
            data = json.load(f)

        store = cls.from_dict(data)
        logger.info(
            f"📂 Loaded corpus from {corpus_path} "
            f"({len(store._by_id)} messages, {len(store._participants)} participants)"
        )
        return store

    async def find_anchor(
        self,
        ascending: bool,
        id_bound: int,
        message_filter: Optional[MessageFilter] = None
    ) -> Optional[Message]:
        candidates = self._by_id if ascending else reversed(self._by_id)
        for message in candidates:
            if ascending and message.id < id_bound:
                continue
            if not ascending and message.id > id_bound:
                continue
            if message_matches(message, message_filter):
                return message
        return None

    async def find_window(
        self,
        ascending: bool,
        bound: Message,
        limit: int,
        message_filter: Optional[MessageFilter] = None
    ) -> List[Message]:
        if ascending:
            candidates = [m for m in self._by_time if m.sort_key >= bound.sort_key]
        else:
            candidates = [m for m in reversed(self._by_time) if m.sort_key <= bound.sort_key]

        window = [m for m in candidates if message_matches(m, message_filter)]
        return window[:limit]

    async def aggregate_message_range(self) -> Optional[MessageRange]:
        if not self._by_id:
            return None
        return MessageRange(
            min_id=self._by_id[0].id,
            max_id=self._by_id[-1].id,
            min_timestamp=self._by_time[0].timestamp,
            max_timestamp=self._by_time[-1].timestamp
        )

    async def distinct_platforms(self) -> List[str]:
        return sorted({m.platform for m in self._by_id})

    async def distinct_participant_names(self) -> List[str]:
        return list(self._participants)

    async def distinct_reactions(self) -> List[str]:
        return sorted({r.reaction for m in self._by_id for r in m.reactions})

    async def ping(self) -> bool:
        return True
