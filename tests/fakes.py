"""Test doubles for the Anthropic client."""

from types import SimpleNamespace

import anthropic
import httpx


def api_error() -> anthropic.APIError:
    return anthropic.APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"))


class FakeMessages:
    """Returns queued responses in order; raises a connection error once they run out."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if not self.responses:
            raise api_error()
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=response)])


class FakeAnthropic:
    def __init__(self, responses=()):
        self.messages = FakeMessages(responses)

    @property
    def calls(self):
        return self.messages.calls
