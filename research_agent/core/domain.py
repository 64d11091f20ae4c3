"""
Domain preferences for web research.

Default include/exclude domain lists and extra agent instructions are read from
the environment once and cached. Call reset_domain_configuration_cache() after
changing the environment (tests do this).
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

_LIST_SPLIT = re.compile(r"[,\n]")
_SCHEME = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


@dataclass(frozen=True)
class DomainConfiguration:
    default_include_domains: list[str] = field(default_factory=list)
    default_exclude_domains: list[str] = field(default_factory=list)
    agent_instructions: str | None = None


_cached: DomainConfiguration | None = None


def _first_env_value(keys: list[str]) -> str | None:
    for key in keys:
        value = os.environ.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def _split_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [part.strip() for part in _LIST_SPLIT.split(raw) if part.strip()]


def _to_hostname(value: str) -> str:
    """Reduce 'HTTPS://docs.example.com/faq' or 'example.com:443' to a bare hostname."""
    candidate = value.strip()
    if not candidate:
        return ""
    if not _SCHEME.match(candidate):
        candidate = "http://" + candidate
    try:
        host = urlsplit(candidate).hostname or ""
    except ValueError:
        return ""
    return host.strip().lower().rstrip(".")


def normalise_domain_list(value: Any) -> list[str]:
    """
    Accept a list of strings or a comma/newline separated string and return
    bare lowercase hostnames. Blanks and non-string items are dropped.
    """
    if not value:
        return []
    if isinstance(value, str):
        items = _split_list(value)
    elif isinstance(value, (list, tuple)):
        items = [item for item in value if isinstance(item, str)]
    else:
        return []
    out: list[str] = []
    for item in items:
        host = _to_hostname(item)
        if host and host not in out:
            out.append(host)
    return out


def _build_domain_configuration() -> DomainConfiguration:
    include_raw = _first_env_value(["DEFAULT_INCLUDE_DOMAINS", "NEXT_PUBLIC_DEFAULT_INCLUDE_DOMAINS"])
    exclude_raw = _first_env_value(["DEFAULT_EXCLUDE_DOMAINS", "NEXT_PUBLIC_DEFAULT_EXCLUDE_DOMAINS"])
    instructions_raw = _first_env_value(["DOMAIN_AGENT_INSTRUCTIONS", "NEXT_PUBLIC_DOMAIN_AGENT_INSTRUCTIONS"])
    config = DomainConfiguration(
        default_include_domains=_split_list(include_raw),
        default_exclude_domains=_split_list(exclude_raw),
        agent_instructions=(instructions_raw or "").strip() or None,
    )
    logger.info(
        "[domain] loaded include=%d exclude=%d instructions=%s",
        len(config.default_include_domains),
        len(config.default_exclude_domains),
        bool(config.agent_instructions),
    )
    return config


def get_domain_configuration() -> DomainConfiguration:
    global _cached
    if _cached is None:
        _cached = _build_domain_configuration()
    return _cached


def reset_domain_configuration_cache() -> None:
    global _cached
    _cached = None


def append_domain_instructions(base_prompt: str) -> str:
    """Append configured domain-specific instructions to a system prompt."""
    configuration = get_domain_configuration()
    if not configuration.agent_instructions:
        return base_prompt
    trimmed = base_prompt.rstrip()
    separator = "\n\n" if trimmed else ""
    return f"{trimmed}{separator}Domain-specific instructions:\n{configuration.agent_instructions}"
