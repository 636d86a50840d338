"""Registry client: resolves agent names to raw agent.yaml bytes over HTTP.

The registry is a static file tree (by default a GitHub raw URL)::

    registry.json              index of AgentInfo objects
    agents/<name>.yaml         full agent definitions
    <name>/SKILL.md            standalone skills

A standalone skill is wrapped in a minimal agent definition so the rest
of the pipeline only ever sees agent.yaml bytes.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import httpx
import yaml
from ax_core.errors import NetworkError, NotFoundError
from ax_core.logging import get_logger

from ax_schema.types import AgentInfo
from ax_schema.validator import is_safe_name

logger = get_logger("schema.registry")

_VERSION_LINE = re.compile(r"""^version:\s*["']?([^"'#\r\n]+?)["']?\s*(?:#.*)?$""", re.MULTILINE)
_DEFAULT_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True, slots=True)
class FetchedDefinition:
    """Raw definition bytes as returned by the registry."""

    name: str
    raw: bytes
    version: str
    url: str


class RegistryClient:
    """Fetches agent definitions and the agent index from a registry.

    Failures are not retried: an unreachable registry raises
    :class:`NetworkError`, a missing agent :class:`NotFoundError`.

    Example usage::

        client = RegistryClient("https://example.com/registry")
        fetched = client.fetch_agent("rust-architect")
        definition = parse(fetched.raw)
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.Client | None = None,
        timeout: float = _DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            headers={"User-Agent": "ax/1.2 (agent package manager)"},
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> RegistryClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def fetch_index(self) -> list[AgentInfo]:
        """Fetch ``registry.json`` and return the listed agents."""
        url = f"{self._base_url}/registry.json"
        response = self._get(url)
        if response.status_code == 404:
            msg = f"Registry index not found at {url}"
            raise NotFoundError(msg)
        _raise_for_status(response, url)

        try:
            data = response.json()
        except ValueError as exc:
            msg = f"Registry index at {url} is not valid JSON"
            raise NetworkError(msg) from exc

        entries = data.get("agents", []) if isinstance(data, dict) else data
        if not isinstance(entries, list):
            msg = f"Registry index at {url} is not a list of agents"
            raise NetworkError(msg)

        return [
            AgentInfo(
                name=str(entry["name"]),
                version=str(entry.get("version", "")),
                description=str(entry.get("description", "")),
                author=str(entry.get("author", "")),
            )
            for entry in entries
            if isinstance(entry, dict) and entry.get("name")
        ]

    def fetch_agent(self, name: str) -> FetchedDefinition:
        """Fetch an agent definition, falling back to a standalone skill.

        Raises:
            NotFoundError: If neither ``agents/<name>.yaml`` nor
                ``<name>/SKILL.md`` exists.
            NetworkError: On transport failures or server errors.
            ValueError: If *name* is not a safe registry name.
        """
        if not is_safe_name(name):
            msg = f"Invalid agent name: {name!r}"
            raise ValueError(msg)

        agent_url = f"{self._base_url}/agents/{name}.yaml"
        response = self._get(agent_url)
        if response.status_code != 404:
            _raise_for_status(response, agent_url)
            raw = response.content
            logger.info("Fetched agent '%s' from %s", name, agent_url)
            return FetchedDefinition(
                name=name, raw=raw, version=_peek_version(raw), url=agent_url,
            )

        skill_url = f"{self._base_url}/{name}/SKILL.md"
        response = self._get(skill_url)
        if response.status_code == 404:
            msg = f"Agent or skill '{name}' not found in registry"
            raise NotFoundError(msg)
        _raise_for_status(response, skill_url)

        logger.info("Wrapping standalone skill '%s' from %s", name, skill_url)
        raw = skill_md_to_agent_yaml(name, response.text)
        return FetchedDefinition(
            name=name, raw=raw, version=_peek_version(raw), url=skill_url,
        )

    def _get(self, url: str) -> httpx.Response:
        try:
            return self._client.get(url)
        except httpx.HTTPError as exc:
            msg = f"Failed to connect to registry ({url}): {exc}"
            raise NetworkError(msg) from exc


def skill_md_to_agent_yaml(name: str, skill_md: str) -> bytes:
    """Wrap a SKILL.md document in a minimal agent.yaml document."""
    meta, body = _split_frontmatter(skill_md)
    skill_name = str(meta.get("name") or name)
    description = meta.get("description")

    skill: dict[str, Any] = {"name": skill_name, "content": body}
    if description:
        skill["description"] = str(description)

    document = {
        "name": name,
        "version": "1.0.0",
        "description": str(description) if description else f"Skill: {name}",
        "author": "community",
        "identity": {
            "icon": "📚",
            "system_prompt": f"You have the {name} skill installed.",
        },
        "skills": [skill],
    }
    return yaml.safe_dump(
        document, sort_keys=False, allow_unicode=True
    ).encode("utf-8")


def _split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Split SKILL.md into (frontmatter mapping, body).

    Documents without frontmatter, or whose frontmatter is not a YAML
    mapping, are treated as body only.
    """
    if not text.startswith("---"):
        return {}, text

    rest = text[3:]
    closing_idx = rest.find("\n---")
    if closing_idx == -1:
        return {}, text

    frontmatter = rest[:closing_idx]
    body = rest[closing_idx + 4 :].lstrip("\r\n")
    try:
        meta = yaml.safe_load(frontmatter)
    except yaml.YAMLError:
        return {}, body
    return (meta if isinstance(meta, dict) else {}), body


def _peek_version(raw: bytes) -> str:
    """Read the top-level ``version:`` line without parsing the document."""
    match = _VERSION_LINE.search(raw.decode("utf-8", errors="replace"))
    return match.group(1).strip() if match else "unknown"


def _raise_for_status(response: httpx.Response, url: str) -> None:
    if response.is_success:
        return
    msg = f"Registry returned HTTP {response.status_code} for {url}"
    raise NetworkError(msg)
