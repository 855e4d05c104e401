# === FILE: site_spider/config.py ===
"""
Loading and validation of the SiteSpider configuration.
The schema is described with Pydantic; files may be YAML or JSON.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, HttpUrl

DEFAULT_FETCH_INTERVAL: float = 1.0
DEFAULT_JITTER: float = 1.0
DEFAULT_MAX_CRAWL_DELAY: float = 60.0
DEFAULT_ROBOT_USER_AGENT: str = "SiteSpiderBot (site_spider)"
DEFAULT_USER_AGENT: str = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class SpiderConfig(BaseModel):
    """Settings for one crawl. Read once at crawl start, immutable afterwards."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: HttpUrl = Field(..., description="Seed URL; also the crawl boundary.")
    max_depth: int = Field(-1, ge=-1, description="Maximum BFS distance, -1 for no limit.")
    workers: int = Field(1, ge=1, description="Concurrent fetch workers per BFS layer.")
    fetch_interval: float = Field(
        DEFAULT_FETCH_INTERVAL, ge=0, description="Minimum pause after each fetch (seconds)."
    )
    jitter: float = Field(
        DEFAULT_JITTER, ge=0, description="Upper bound of the random extra pause (seconds)."
    )
    respect_robots: bool = Field(True, description="Honour the site's robots.txt.")
    max_crawl_delay: float = Field(
        DEFAULT_MAX_CRAWL_DELAY, ge=0, description="Upper bound for a robots.txt Crawl-delay (seconds)."
    )
    restrict_to_scheme: bool = Field(False, description="Only crawl the seed URL's scheme.")
    check_external_links: bool = Field(True, description="HEAD-check links that leave the site.")
    robot_user_agent: str = Field(
        DEFAULT_ROBOT_USER_AGENT, min_length=1, description="Agent matched against robots.txt."
    )
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="User-Agent header.")
    timeout: float = Field(10.0, gt=0, description="Per-request timeout (seconds).")
    retry_times: int = Field(2, ge=0, description="Retries on 429/5xx and connection errors.")

    def with_fetch_interval(self, interval: float) -> SpiderConfig:
        """Copy with both interval and jitter set to *interval*.

        Pauses then fall between ``interval`` and ``2 * interval``.
        """
        return self.model_copy(update={"fetch_interval": interval, "jitter": interval})


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Malformed YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Malformed JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> SpiderConfig:
    """
    Read a YAML or JSON file and return a validated SpiderConfig.
    Raises FileNotFoundError when the file (or the default one) is missing.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return SpiderConfig(**data)
