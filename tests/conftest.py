from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from settings import Settings

BASE_URL = "http://webtrak.test/WebTrak/sea2/data/"


@dataclass
class FakeWebTrak:
    """In-memory stand-in for the WebTrak data endpoints."""

    start_handle: int
    chunks: Dict[int, List[str]] = field(default_factory=dict)
    end_handle: Optional[int] = None
    discovery_body: Optional[str] = None
    status_code: int = 200
    requested: List[str] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requested.append(path)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="<error>unavailable</error>")
        if "/handle/" in path:
            return httpx.Response(200, text=self._discovery())

        handle = int(path.rsplit("/", 1)[-1])
        entries = self.chunks.get(handle)
        if entries is None:
            return httpx.Response(200, text="<error>unknown handle</error>")
        payload = "\n".join(entries)
        return httpx.Response(
            200,
            text=f'<response><data startHandle="{handle}" endHandle="{handle}">\n{payload}\n</data></response>',
        )

    def fetched_handles(self) -> List[int]:
        return [int(path.rsplit("/", 1)[-1]) for path in self.requested if "/handle/" not in path]

    def client(self) -> httpx.Client:
        return httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(self.handler))

    def _discovery(self) -> str:
        if self.discovery_body is not None:
            return self.discovery_body
        end = self.end_handle if self.end_handle is not None else self.start_handle + len(self.chunks)
        return f'<response><data startHandle="{self.start_handle}" endHandle="{end}"></data></response>'


@pytest.fixture()
def make_settings(tmp_path: Path) -> Callable[..., Settings]:
    def factory(**overrides) -> Settings:
        values = dict(
            base_url=BASE_URL,
            output_dir=str(tmp_path / "out"),
            utc_offset="-0700",
            backfill_start=date(2013, 6, 10),
            timeout=5.0,
            retries=0,
            max_empty_batches=3,
            log_level="INFO",
        )
        values.update(overrides)
        return Settings(**values)

    return factory


def noise(time: str, station: str = "NMT01", level: str = "64.3") -> str:
    return f"noise,{time},{station},1,0,{level}"


def radar(time: str, flight: str = "ASA123") -> str:
    return f"radar,{time},{flight},47.45,-122.30,1200"
