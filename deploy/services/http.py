"""HTTP download client.

- HttpClient: protocol (injectable for tests)
- RealHttpClient: urllib implementation
- MockHttpClient: canned responses for tests
"""

from __future__ import annotations

import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from deploy import __version__
from deploy.core.result import Err, Ok, Result

__all__ = ["HttpClient", "HttpError", "MockHttpClient", "RealHttpClient"]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        """Download url to dest, creating parent directories."""
        ...


class RealHttpClient:
    """HTTP client using urllib with system certificates."""

    def __init__(self, timeout: float = 60.0, user_agent: str = f"deploy/{__version__}") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        try:
            req = urllib.request.Request(url, headers={"User-Agent": self.user_agent})
            dest.parent.mkdir(parents=True, exist_ok=True)
            with (
                urllib.request.urlopen(
                    req, timeout=self.timeout, context=self._ssl_context
                ) as response,
                open(dest, "wb") as f,
            ):
                while chunk := response.read(64 * 1024):
                    f.write(chunk)
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Download timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        return Ok(dest)


class MockHttpClient:
    """Mock HTTP client for testing.

    Usage:
        client = MockHttpClient()
        client.set_download("https://example.com/tool", b"binary")
    """

    def __init__(self) -> None:
        self._downloads: dict[str, bytes | HttpError] = {}
        self.calls: list[tuple[str, Path]] = []

    def set_download(self, url: str, response: bytes | HttpError) -> None:
        self._downloads[url] = response

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        self.calls.append((url, dest))
        response = self._downloads.get(url)
        if response is None:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        if isinstance(response, HttpError):
            return Err(response)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(response)
        return Ok(dest)
