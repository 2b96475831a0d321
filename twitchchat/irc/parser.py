"""Chat line parsing.

Only channel chat messages are decomposed. Anything else, including lines
that look like chat but are structurally off, comes back unstructured.
"""

from __future__ import annotations

import re

from ..errors import ParsingError
from .models import ParsedLine

# Coarse signature: " PRIVMSG #" followed later by " :"
_CHAT_SIGNATURE = re.compile(r" PRIVMSG #.+ :")
_SEGMENT_MARKER = " PRIVMSG #"


def parse_line(raw_line: str) -> ParsedLine:
    """Parse one raw line (without its CRLF terminator).

    Never raises for string input: a line that matches the coarse signature
    but not the fine structure is returned unstructured.
    """
    if not _CHAT_SIGNATURE.search(raw_line):
        return ParsedLine.unstructured(raw_line)
    try:
        channel, user, message = _extract_chat_fields(raw_line)
    except ParsingError:
        return ParsedLine.unstructured(raw_line)
    return ParsedLine.chat(raw_line, channel=channel, user=user, message=message)


def _extract_chat_fields(raw_line: str) -> tuple[str, str, str]:
    marker_at = raw_line.index(_SEGMENT_MARKER)
    prefix = raw_line[:marker_at]
    rest = raw_line[marker_at + len(_SEGMENT_MARKER) :]

    channel, sep, trailing = rest.partition(" ")
    if not channel:
        raise ParsingError("empty channel name", data={"raw": raw_line})
    if not sep or not trailing.startswith(":"):
        raise ParsingError("channel not followed by ' :'", data={"raw": raw_line})
    message = trailing[1:]

    user = _extract_user(prefix)
    return channel, user, message


def _extract_user(prefix: str) -> str:
    # ":nick!nick@nick.tmi.twitch.tv" -> "nick"
    if not prefix.startswith(":"):
        raise ParsingError("missing leading ':' in prefix", data={"prefix": prefix})
    user, bang, _ = prefix[1:].partition("!")
    if not bang or not user or " " in user:
        raise ParsingError("malformed sender in prefix", data={"prefix": prefix})
    return user
