"""
Points Sink Doubles

ScriptedSink is an httpx.MockTransport handler that answers with a scripted
sequence of responses and records every request it receives. Script entries
are status codes or exception classes (raised as transport errors).
"""

import json

import httpx

SINK_URL = "http://points.test/points"


class ScriptedSink:
    """Answers requests from a script; the last entry repeats forever."""

    def __init__(self, *script):
        self.script = list(script) or [200]
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.script)) - 1
        entry = self.script[index]

        if isinstance(entry, type) and issubclass(entry, Exception):
            raise entry("scripted transport failure", request=request)
        return httpx.Response(entry, text=f"sink says {entry}")

    @property
    def calls(self) -> int:
        return len(self.requests)

    def bodies(self) -> list[dict]:
        return [json.loads(request.content) for request in self.requests]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport())
