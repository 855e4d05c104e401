# site_spider/crawler/robots.py
"""
Parser and checker for robots.txt rules, and the gate the crawler consults.

Matching follows RFC 9309: the longest matching rule wins, ``Allow`` wins a
tie, ``*`` matches any run of characters and a trailing ``$`` anchors the end.
An empty ``Disallow`` allows everything.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from site_spider.logger import logger

__all__ = ("RobotsGroup", "RobotsTxtRules", "RobotsGate")

_Directive = Tuple[str, str]
_WILDCARD_RE = re.compile(r"(\*|\$)")


@dataclass
class RobotsGroup:
    """The rules that apply to one set of user agents."""

    agents: List[str] = field(default_factory=list)
    directives: List[_Directive] = field(default_factory=list)
    crawl_delay: Optional[float] = None
    _regex_cache: Dict[str, re.Pattern[str]] = field(default_factory=dict, repr=False)

    def test(self, path: str) -> bool:
        """True if *path* may be fetched under this group."""
        path = path or "/"
        best_len = -1
        allow: Optional[bool] = None
        for directive, pattern in self.directives:
            if not self._match_path(path, pattern):
                continue
            length = len(_WILDCARD_RE.sub("", pattern))
            if length > best_len or (length == best_len and directive == "allow"):
                best_len = length
                allow = directive == "allow"
        return True if allow is None else allow

    def _match_path(self, path: str, pattern: str) -> bool:
        regex = self._regex_cache.get(pattern)
        if regex is None:
            anchored = pattern.endswith("$")
            body = pattern[:-1] if anchored else pattern
            esc = re.escape(body).replace(r"\*", ".*")
            regex = re.compile(f"^{esc}" + ("$" if anchored else ""))
            self._regex_cache[pattern] = regex
        return bool(regex.match(path))


class RobotsTxtRules:
    """A parsed robots.txt file: an ordered list of :class:`RobotsGroup`."""

    def __init__(self, text: str) -> None:
        self.groups: List[RobotsGroup] = []
        self._parse(text)

    def find_group(self, user_agent: str) -> Optional[RobotsGroup]:
        """Group whose agent token is the longest prefix of *user_agent*, else ``*``."""
        ua = user_agent.lower()
        best: Optional[RobotsGroup] = None
        best_len = 0
        for group in self.groups:
            for agent in group.agents:
                if agent != "*" and ua.startswith(agent) and len(agent) > best_len:
                    best, best_len = group, len(agent)
        if best is not None:
            return best
        for group in self.groups:
            if "*" in group.agents:
                return group
        return None

    def can_fetch(self, user_agent: str, path: str) -> bool:
        group = self.find_group(user_agent)
        return True if group is None else group.test(path)

    def _parse(self, text: str) -> None:
        current: Optional[RobotsGroup] = None
        # a leading BOM would hide the first User-agent line
        for raw in text.lstrip("\ufeff").splitlines():
            line = raw.split("#", 1)[0].strip()
            if not line or ":" not in line:
                continue
            key, _, val = line.partition(":")
            key = key.lower().strip()
            val = val.strip()
            if key == "user-agent":
                # consecutive User-agent lines share one group
                if current is None or current.directives or current.crawl_delay is not None:
                    current = RobotsGroup()
                    self.groups.append(current)
                current.agents.append(val.lower())
                continue
            if key not in ("allow", "disallow", "crawl-delay"):
                continue
            if current is None:
                current = RobotsGroup(agents=["*"])
                self.groups.append(current)
            if key == "crawl-delay":
                try:
                    current.crawl_delay = float(val)
                except ValueError:
                    logger.debug("Ignoring bad Crawl-delay %r", val)
            elif key == "disallow" and val == "":
                continue
            else:
                current.directives.append((key, val))


class RobotsGate:
    """Allow/deny answers for the crawl; allows everything when no group is loaded."""

    def __init__(self, group: Optional[RobotsGroup] = None) -> None:
        self._group = group

    @classmethod
    def from_text(cls, text: str, user_agent: str) -> RobotsGate:
        return cls(RobotsTxtRules(text).find_group(user_agent))

    @property
    def loaded(self) -> bool:
        return self._group is not None

    @property
    def crawl_delay(self) -> Optional[float]:
        return None if self._group is None else self._group.crawl_delay

    def allowed(self, path: str) -> bool:
        if self._group is None:
            return True
        return self._group.test(path)
