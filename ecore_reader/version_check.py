from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Tuple

import requests

LOGGER = logging.getLogger(__name__)

RELEASES_URL = "https://api.github.com/repos/STARIONGROUP/EcoreNetto/releases/latest"
USER_AGENT = "ecore-reader"


@dataclass(frozen=True)
class GitHubRelease:
    html_url: str
    tag_name: str
    body: str = ""

    @classmethod
    def from_json(cls, data: dict) -> "GitHubRelease":
        return cls(
            html_url=data.get("html_url", ""),
            tag_name=data.get("tag_name", ""),
            body=data.get("body") or "",
        )


def query_latest_release(session: requests.Session | None = None, timeout: float = 2.0) -> GitHubRelease | None:
    """Ask GitHub for the latest published release; ``None`` when it cannot be determined."""
    if session is None:
        with requests.Session() as session:
            return query_latest_release(session, timeout)
    try:
        response = session.get(RELEASES_URL, headers={"User-Agent": USER_AGENT}, timeout=timeout)
        response.raise_for_status()
        return GitHubRelease.from_json(response.json())
    except requests.Timeout:
        LOGGER.warning("Contacting the GitHub API at %s timed out", RELEASES_URL)
    except (requests.RequestException, ValueError) as exc:
        LOGGER.error("Unable to query the latest release from %s: %s", RELEASES_URL, exc)
    return None


def _version_key(version: str) -> Tuple[int, ...]:
    numbers = re.findall(r"\d+", version.lstrip("vV").split("-", 1)[0])
    return tuple(int(number) for number in numbers)


def is_newer_version(current: str, published: str) -> bool:
    if current is None:
        raise ValueError("current must not be None")
    if published is None:
        raise ValueError("published must not be None")
    return _version_key(published) > _version_key(current)
