"""Connection URI parsing and redaction utilities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import parse_qs, unquote, urlencode, urlsplit

from ..errors import InvalidConfiguration


@dataclass
class DSNConfig:
    scheme: str
    username: Optional[str]
    password: Optional[str]
    hosts: List[str]
    database: Optional[str]
    query: dict[str, str] = field(default_factory=dict)

    def redacted(self) -> str:
        """
        Return the URI with credentials redacted but structure preserved.
        """

        netloc = ""
        if self.username:
            netloc += self.username
            if self.password:
                netloc += ":***"
            netloc += "@"
        netloc += ",".join(self.hosts)

        result = f"{self.scheme}://{netloc}"
        if self.database:
            result += f"/{self.database}"
        if self.query:
            result += f"?{urlencode(self.query)}"
        return result


def parse_dsn(dsn: str) -> DSNConfig:
    """
    Parse a document-store URI such as ``mongodb://user:pw@h1:27017,h2/app?w=1``.

    Multiple comma-separated hosts are kept in order; ports stay attached to
    their host.
    """

    parsed = urlsplit(dsn)
    if not parsed.scheme:
        raise InvalidConfiguration(f"Connection URI is missing a scheme: {dsn!r}")
    credentials, _, host_part = parsed.netloc.rpartition("@")
    username = password = None
    if credentials:
        user, _, secret = credentials.partition(":")
        username = unquote(user) or None
        password = unquote(secret) or None
    hosts = [host for host in host_part.split(",") if host]
    query = {k: v[0] for k, v in parse_qs(parsed.query).items()}
    return DSNConfig(
        scheme=parsed.scheme,
        username=username,
        password=password,
        hosts=hosts,
        database=parsed.path.lstrip("/") or None,
        query=query,
    )
