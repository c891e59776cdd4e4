from __future__ import annotations

import logging
from typing import Optional

from clients.validator_rules import ValidatorRules
from core.errors import ValidationError
from core.interfaces import Cache, RulesProvider

logger = logging.getLogger(__name__)

KEY_VALIDATOR_RULES = "validator-rules"


class RuleResolver:
    """Resolve validator rules through a permanent cache entry.

    Only the raw JSON is cached; the provider rebuilds ValidatorRules from
    it without touching the network. A cached payload that no longer
    parses is replaced by a fresh download. Provider failures propagate.
    """

    def __init__(
        self,
        *,
        cache: Cache,
        provider: RulesProvider,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self._cache = cache
        self._provider = provider
        self._log = log or logger

    async def resolve_rules(self) -> ValidatorRules:
        raw_rules = await self._cache.get(KEY_VALIDATOR_RULES)
        if raw_rules is not None:
            try:
                return await self._provider.fetch(rules=raw_rules)
            except ValidationError as e:
                self._log.warning("Discarding unreadable cached validator rules: %s", e)

        rules = await self._provider.fetch()
        await self._cache.set(KEY_VALIDATOR_RULES, rules.raw)
        return rules
