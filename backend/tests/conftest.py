"""Shared test configuration: fake GitHub transport and fake Gemini replies."""

import base64
import json

import httpx
import pytest

from api.router import limiter
from config import settings
from services import gemini_client


def encode_content(text: str) -> str:
    """Base64 wrapped at 60 columns, the way the contents API returns it."""
    raw = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return "\n".join(raw[i:i + 60] for i in range(0, len(raw), 60))


class FakeGitHub:
    """In-memory stand-in for the GitHub REST API.

    ``readme`` / ``files`` values: str -> 200 with content, int -> that status,
    list -> directory listing. ``trees`` maps branch -> list of blob paths
    or a status code. Anything unset is a 404.
    """

    def __init__(self, owner: str = "octo", name: str = "demo") -> None:
        self.prefix = f"/repos/{owner}/{name}"
        self.readme: str | int | None = None
        self.trees: dict[str, list[str] | int] = {}
        self.tree_dirs: list[str] = []
        self.files: dict[str, str | int | list] = {}
        self.requests: list[httpx.Request] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def requested_paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == f"{self.prefix}/readme":
            return self._content_response(self.readme)

        tree_prefix = f"{self.prefix}/git/trees/"
        if path.startswith(tree_prefix):
            tree = self.trees.get(path[len(tree_prefix):])
            if tree is None:
                return httpx.Response(404, json={"message": "Not Found"})
            if isinstance(tree, int):
                return httpx.Response(tree, json={"message": "error"})
            entries = [{"path": p, "type": "blob"} for p in tree]
            entries += [{"path": d, "type": "tree"} for d in self.tree_dirs]
            return httpx.Response(200, json={"tree": entries, "truncated": False})

        contents_prefix = f"{self.prefix}/contents/"
        if path.startswith(contents_prefix):
            return self._content_response(self.files.get(path[len(contents_prefix):]))

        return httpx.Response(404, json={"message": "Not Found"})

    @staticmethod
    def _content_response(value) -> httpx.Response:
        if value is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if isinstance(value, int):
            return httpx.Response(value, json={"message": "error"})
        if isinstance(value, list):
            return httpx.Response(200, json=[{"name": n, "type": "file"} for n in value])
        return httpx.Response(200, json={"content": encode_content(value), "encoding": "base64"})


class FakeGemini:
    """Replaces gemini_client.generate_json with queued raw text replies."""

    def __init__(self) -> None:
        self.replies: list[str | Exception] = []
        self.calls: list[dict] = []

    def reply_with(self, value) -> None:
        """Queue a reply: a dict (serialized), raw text, or an exception."""
        self.replies.append(json.dumps(value) if isinstance(value, dict) else value)

    async def generate_json(self, prompt, temperature=0.3, max_output_tokens=2048):
        self.calls.append(
            {"prompt": prompt, "temperature": temperature, "max_output_tokens": max_output_tokens}
        )
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            return gemini_client.JSONReply(error=f"upstream_error: {reply}")
        return gemini_client.parse_json_reply(reply)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """No real credentials and no inbound rate limiting during tests."""
    monkeypatch.setattr(settings, "gemini_api_key", "")
    monkeypatch.setattr(settings, "github_token", "")
    monkeypatch.setattr(limiter, "enabled", False)


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def fake_gemini(monkeypatch) -> FakeGemini:
    fake = FakeGemini()
    monkeypatch.setattr(settings, "gemini_api_key", "test-key")
    monkeypatch.setattr(gemini_client, "generate_json", fake.generate_json)
    return fake
