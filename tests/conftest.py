import pytest

from tests.fixtures.irc_fixtures import FakeTransport, StateRecorder
from twitchchat.irc import TwitchChatSession


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def recorder() -> StateRecorder:
    return StateRecorder()


@pytest.fixture
def session(transport, recorder) -> TwitchChatSession:
    s = TwitchChatSession("bob", "oauth:secret", transport=transport)
    s.add_state_listener(recorder)
    return s


@pytest.fixture
def channel_session(transport, recorder) -> TwitchChatSession:
    s = TwitchChatSession("bob", "oauth:secret", "Chan", transport=transport)
    s.add_state_listener(recorder)
    return s
