"""AMP validator rules provider.

Downloads the published validator rules (`v0/validator.json`) or rebuilds
them from a previously fetched raw payload. ValidatorRules keeps the raw
JSON next to the parsed views so callers can persist it.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import httpx

from core.amp_urls import AMP_VALIDATOR_RULES_URL
from core.errors import ExternalServiceError, ValidationError

USER_AGENT = "amp-runtime-parameters"


class ValidatorRules:
    """Parsed view over the raw validator rules JSON."""

    def __init__(self, raw: Mapping[str, Any]) -> None:
        if not isinstance(raw, Mapping):
            raise ValidationError("Validator rules must be a JSON object")
        tags = raw.get("tags")
        if not isinstance(tags, list):
            raise ValidationError("Validator rules have no 'tags' list")

        self.raw: Dict[str, Any] = dict(raw)
        self.tags: List[Dict[str, Any]] = [t for t in tags if isinstance(t, dict)]
        self.errors = _index_errors(raw.get("errors") or [])
        self.extensions = _collect_extensions(self.tags)

    def get_tags_for_format(self, fmt: str) -> List[Dict[str, Any]]:
        wanted = (fmt or "").strip().upper()
        return [t for t in self.tags if wanted in (t.get("htmlFormat") or [])]

    def get_extension(self, fmt: str, name: str) -> Optional[Dict[str, Any]]:
        wanted = (fmt or "").strip().upper()
        ext = self.extensions.get((name or "").strip().lower())
        if ext is None or wanted not in ext["htmlFormat"]:
            return None
        return ext

    def error_format(self, code: str) -> Optional[str]:
        entry = self.errors.get(code)
        return entry.get("format") if entry else None

    def __repr__(self) -> str:
        return f"ValidatorRules(tags={len(self.tags)}, extensions={len(self.extensions)})"


def _index_errors(errors: Any) -> Dict[str, Dict[str, Any]]:
    out: Dict[str, Dict[str, Any]] = {}
    for err in errors if isinstance(errors, list) else []:
        if isinstance(err, dict) and isinstance(err.get("code"), str):
            out[err["code"]] = {"format": err.get("format"), "specificity": err.get("specificity")}
    return out


def _collect_extensions(tags: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    # An extension is declared by a SCRIPT tag carrying an extensionSpec
    out: Dict[str, Dict[str, Any]] = {}
    for tag in tags:
        spec = tag.get("extensionSpec")
        if not isinstance(spec, dict) or not spec.get("name"):
            continue
        name = str(spec["name"]).lower()
        entry = out.setdefault(
            name,
            {"name": name, "version": [], "htmlFormat": [], "latestVersion": spec.get("latestVersion")},
        )
        for v in spec.get("version") or []:
            if v not in entry["version"]:
                entry["version"].append(v)
        for f in tag.get("htmlFormat") or []:
            if f not in entry["htmlFormat"]:
                entry["htmlFormat"].append(f)
    return out


class ValidatorRulesProvider:
    def __init__(
        self,
        *,
        url: str = AMP_VALIDATOR_RULES_URL,
        timeout: float = 20.0,
        verify: bool = True,
    ) -> None:
        self._url = url
        self._timeout = float(timeout)
        self._verify = bool(verify)

    async def fetch(self, *, rules: Optional[Any] = None) -> ValidatorRules:
        """Return validator rules, downloading them unless `rules` is given."""
        if rules is not None:
            return ValidatorRules(rules)
        return ValidatorRules(await self._download())

    async def _download(self) -> Any:
        try:
            async with self._create_client() as client:
                resp = await client.get(self._url)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(f"Validator rules returned an error: {e}") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Failed to download validator rules: {e}") from e
        except ValueError as e:
            raise ValidationError(f"Validator rules at {self._url} are not JSON") from e

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            timeout=self._timeout,
            verify=self._verify,
            follow_redirects=True,
        )
