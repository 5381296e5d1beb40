import re

_NEWLINES = re.compile(r"\r\n|\r|\n")
_LEADING_MENTION = re.compile(r"^(?:<@[A-Za-z0-9]+(?:\|[^>]*)?>|@\S+)\s*")


def convert_newlines(text: str, replacement: str = " ") -> str:
    """Replace every line break variant with ``replacement`` and trim both ends."""
    result = _NEWLINES.sub(replacement, text)
    return result.strip(" ").strip(replacement).strip(" ")


def normalize_command(text: str) -> str:
    """Reduce an app mention to the command the user typed after the bot mention."""
    command = convert_newlines(text)
    while True:
        stripped = _LEADING_MENTION.sub("", command, count=1)
        if stripped == command:
            break
        command = stripped.strip(" ")
    return command


def emoji_added_message(name: str) -> str:
    return f"{name} :{name}: was added!"


def channel_added_message(channel_id: str) -> str:
    return f"A new channel <{channel_id}> was added!"
