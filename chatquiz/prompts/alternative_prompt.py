"""
Alternative Prompt Builder
Constructs prompts asking the model for a wrong-but-plausible choice
"""
from typing import Iterable, List

from chatquiz.models.message import Message

MEDIA_PLACEHOLDER = "<media/>"

TRANSCRIPT_INSTRUCTIONS = [
    "You will be given a sequence of messages in <messages></messages>.",
    "Each line begins with the participant name, followed by the message.",
    f"The message may contain the {MEDIA_PLACEHOLDER} tag to indicate that it is a media message.",
]

TEXT_RULES = [
    "The alternative must only consist of text.",
    f"Do not include links or the {MEDIA_PLACEHOLDER} tag.",
    "Do not include the participant name.",
    "Do not include any new lines.",
    "Keep the alternative informal, potentially omitting punctuation as necessary.",
    "Return ONLY the alternative, with no explanation.",
]


def format_transcript(window: Iterable[Message]) -> str:
    """One line per message: participant name, then text or the media placeholder"""
    return "\n".join(
        f"{message.participant}: {message.text or MEDIA_PLACEHOLDER}"
        for message in window
    )


def _join(instructions: List[str], *sections: str) -> str:
    return "\n".join([" ".join(instructions), "", *sections])


def build_reaction_prompt(
    window: List[Message],
    answer: str,
    distinct_reactions: List[str]
) -> str:
    """
    Build a prompt for an alternative reaction to the last message.

    Args:
        window: Messages shown to the player, oldest first
        answer: The actual reaction on the last message
        distinct_reactions: Reactions used anywhere in the corpus

    Returns:
        A formatted prompt string for the model
    """
    instructions = TRANSCRIPT_INSTRUCTIONS + [
        "You will be given a reaction to the last message in <reaction></reaction>.",
        "You will be given a set of commonly used reactions in <reactions></reactions>.",
        "Provide an alternative reaction to the one in the last message.",
        "Try to only choose from the given reactions.",
        "Take into account the context of the messages and the existing reaction.",
        "Return ONLY a single emoji.",
    ]
    return _join(
        instructions,
        f"<messages>\n{format_transcript(window)}\n</messages>",
        "",
        f"<reaction>\n{answer}\n</reaction>",
        "",
        "<reactions>\n" + "\n".join(distinct_reactions) + "\n</reactions>",
    )


def build_continue_prompt(window: List[Message]) -> str:
    """Build a prompt for an alternative to the last message, in the conversation's style."""
    instructions = TRANSCRIPT_INSTRUCTIONS + [
        "Provide an alternative to the last message, matching the surrounding style and tone.",
        "The alternative must be similar to the last message in length and content.",
        *TEXT_RULES,
        "Remember that you are not responding to the last message, only giving an alternative to it.",
    ]
    return _join(instructions, f"<messages>\n{format_transcript(window)}\n</messages>")


def build_next_prompt(window: List[Message]) -> str:
    """Build a prompt for an alternative last message from the same participant."""
    instructions = TRANSCRIPT_INSTRUCTIONS + [
        "Provide an alternative to the last message, matching the surrounding style and tone.",
        "The last message is on the line before </messages>.",
        "Assume the alternative is from the same participant as the one in the last message.",
        *TEXT_RULES,
    ]
    return _join(instructions, f"<messages>\n{format_transcript(window)}\n</messages>")
