"""Test helpers: HTTP doubles and .env writing."""

from __future__ import annotations

from pathlib import Path

import requests


class FakeResponse:
    """Minimal stand-in for a streamed requests.Response."""

    def __init__(
        self, content: bytes = b"", status: int = 200, fail_after: int | None = None
    ) -> None:
        self.content = content
        self.status = status
        self.fail_after = fail_after

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc: object) -> bool:
        return False

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} Server Error")

    def iter_content(self, chunk_size: int = 1):
        for index in range(0, len(self.content), chunk_size):
            if self.fail_after is not None and index >= self.fail_after:
                raise requests.ConnectionError("connection reset mid-transfer")
            yield self.content[index : index + chunk_size]


class FakeSession:
    """Serves scripted outcomes per URL; the last outcome repeats."""

    def __init__(self, outcomes: dict[str, list[object]] | None = None) -> None:
        self.outcomes = {url: list(items) for url, items in (outcomes or {}).items()}
        self.calls: list[str] = []

    def get(self, url: str, **kwargs: object) -> FakeResponse:
        self.calls.append(url)
        scripted = self.outcomes.get(url)
        if not scripted:
            raise requests.ConnectionError(f"no route to {url}")
        outcome = scripted.pop(0) if len(scripted) > 1 else scripted[0]
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, FakeResponse):
            return outcome
        if isinstance(outcome, int):
            return FakeResponse(status=outcome)
        return FakeResponse(outcome)

    def close(self) -> None:
        pass

    def count(self, url: str) -> int:
        return self.calls.count(url)


def no_sleep(seconds: float) -> None:
    pass


def write_env(path: Path, values: dict[str, str]) -> Path:
    path.write_text("".join(f"{key}={value}\n" for key, value in values.items()))
    return path
