"""
Configuration constants for the Twitch chat client

The connect timeout can be overridden through the environment variable of the
same name; the server endpoint is configured through ``ChatConfig``. The
gateway literals at the bottom are fixed by the Twitch IRC service.
"""

import os


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Gateway endpoint (plain TCP, no TLS)
IRC_SERVER = "irc.chat.twitch.tv"
IRC_PORT = 6667

# Upper bound for opening the TCP connection; reads have no timeout
IRC_CONNECT_TIMEOUT = _get_env_float("IRC_CONNECT_TIMEOUT", 30.0)

# Line encoding used on the wire
IRC_ENCODING = "utf-8"
IRC_LINE_TERMINATOR = "\r\n"

# Gateway literals
TMI_HOST = "tmi.twitch.tv"
PING_LINE = f"PING :{TMI_HOST}"
PONG_LINE = f"PONG :{TMI_HOST}"
WELCOME_TEMPLATE = ":" + TMI_HOST + " 001 {username} :Welcome, GLHF!"
NAMES_TEMPLATE = (
    ":{username}." + TMI_HOST + " 353 {username} = #{channel} :{username}"
)
CHAT_MESSAGE_TEMPLATE = (
    ":{username}!{username}@{username}." + TMI_HOST + " PRIVMSG #{channel} :{text}"
)
