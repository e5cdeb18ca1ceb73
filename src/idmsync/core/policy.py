"""
Known-failure classification.

Which store errors are expected (and therefore only logged) depends on the
entity id and on the kind of deployment being talked to. The tables live here
as data so they can be replaced from a JSON file without touching the
orchestrators.

Matching on HTTP message text is a compatibility risk: the store does not
guarantee those strings. Rules therefore prefer a machine ``code`` when both
the rule and the error carry one, and only fall back to message text
otherwise.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from ..config import CLOUD_DEPLOYMENT
from .errors import StoreOperationError, SyncError

logger = logging.getLogger(__name__)

READ = "read"
WRITE = "write"

CLOUD_UNAVAILABLE_MESSAGES = (
    "This operation is not available in ForgeRock Identity Cloud.",
    "this operation is not available in the managed-identity cloud offering",
)

# Ids that legitimately do not exist on some deployments.
KNOWN_UNAVAILABLE_ENTITIES = (
    "script",
    "notificationFactory",
    "apiVersion",
    "metrics",
    "repo.init",
    "endpoint/validateQueryFilter",
    "endpoint/oauthproxy",
    "external.rest",
    "scheduler",
    "org.apache.felix.fileinstall/openidm",
    "cluster",
    "endpoint/mappingDetails",
    "fieldPolicy/teammember",
)

LEGACY_FILEINSTALL_MESSAGE = "No configuration exists for id org.apache.felix.fileinstall/openidm"

# Root realm system templates the cloud offering refuses to overwrite.
PROTECTED_ENTITIES = (
    "emailTemplate/frEmailUpdated",
    "emailTemplate/frForgotUsername",
    "emailTemplate/frOnboarding",
    "emailTemplate/frPasswordUpdated",
    "emailTemplate/frProfileUpdated",
    "emailTemplate/frResetPassword",
    "emailTemplate/frUsernameUpdated",
)


CATEGORIES = ("client_error", "server_error", "other")


def _frozen(values: Any, key: str = "values") -> FrozenSet[str]:
    """A single string counts as one value; anything else must be a list."""
    if values is None:
        return frozenset()
    if isinstance(values, str):
        return frozenset({values})
    if not isinstance(values, (list, tuple)) or not all(isinstance(v, str) for v in values):
        raise ValueError(f"Rule field '{key}' must be a string or a list of strings, got {values!r}")
    return frozenset(values)


@dataclass(frozen=True)
class SuppressionRule:
    """
    One known-benign failure. Every populated field has to match; empty
    fields match anything.
    """

    name: str
    operation: str
    status: Optional[int] = None
    reasons: FrozenSet[str] = field(default_factory=frozenset)
    messages: FrozenSet[str] = field(default_factory=frozenset)
    codes: FrozenSet[str] = field(default_factory=frozenset)
    entity_ids: FrozenSet[str] = field(default_factory=frozenset)
    deployment_types: FrozenSet[str] = field(default_factory=frozenset)
    category: Optional[str] = None

    def matches(
        self,
        entity_id: str,
        error: StoreOperationError,
        deployment_type: Optional[str],
        case_sensitive: bool = True,
    ) -> bool:
        if self.status is not None and error.status != self.status:
            return False
        if self.category is not None and error.category != self.category:
            return False
        if self.entity_ids and entity_id not in self.entity_ids:
            return False
        if self.deployment_types and deployment_type not in self.deployment_types:
            return False
        if self.reasons and not _text_in(error.reason, self.reasons, case_sensitive):
            return False
        if self.codes:
            if error.code:
                return _text_in(error.code, self.codes, case_sensitive)
            # no machine code on the error: only message text can still match
            if not self.messages:
                return False
        if self.messages and not _text_in(error.http_message, self.messages, case_sensitive):
            return False
        return True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SuppressionRule":
        operation = data.get("operation", READ)
        if operation not in (READ, WRITE):
            raise ValueError(f"Rule operation must be '{READ}' or '{WRITE}', got {operation!r}")
        status = data.get("status")
        category = data.get("category")
        if category is not None and category not in CATEGORIES:
            raise ValueError(f"Rule category must be one of {', '.join(CATEGORIES)}, got {category!r}")
        return cls(
            name=str(data.get("name") or "unnamed"),
            operation=operation,
            status=int(status) if status is not None else None,
            reasons=_frozen(data.get("reasons"), "reasons"),
            messages=_frozen(data.get("messages"), "messages"),
            codes=_frozen(data.get("codes"), "codes"),
            entity_ids=_frozen(data.get("entity_ids"), "entity_ids"),
            deployment_types=_frozen(data.get("deployment_types"), "deployment_types"),
            category=category,
        )


def _text_in(value: Optional[str], candidates: FrozenSet[str], case_sensitive: bool) -> bool:
    if value is None:
        return False
    if case_sensitive:
        return value in candidates
    folded = value.casefold()
    return any(folded == c.casefold() for c in candidates)


DEFAULT_RULES = (
    SuppressionRule(
        name="cloud-unavailable-operation",
        operation=READ,
        status=403,
        messages=frozenset(CLOUD_UNAVAILABLE_MESSAGES),
    ),
    SuppressionRule(
        name="known-unavailable-entity",
        operation=READ,
        status=404,
        reasons=frozenset({"Not Found"}),
        entity_ids=frozenset(KNOWN_UNAVAILABLE_ENTITIES),
    ),
    SuppressionRule(
        name="legacy-fileinstall-config",
        operation=READ,
        status=404,
        messages=frozenset({LEGACY_FILEINSTALL_MESSAGE}),
    ),
    SuppressionRule(
        name="cloud-protected-entity",
        operation=WRITE,
        status=403,
        category="client_error",
        entity_ids=frozenset(PROTECTED_ENTITIES),
        deployment_types=frozenset({CLOUD_DEPLOYMENT}),
    ),
)


class SuppressionPolicy:
    """Decides whether a per-entity store failure is expected."""

    def __init__(self, rules: Iterable[SuppressionRule] = DEFAULT_RULES, case_sensitive: bool = True) -> None:
        self.rules: List[SuppressionRule] = list(rules)
        self.case_sensitive = case_sensitive

    def match(
        self,
        operation: str,
        entity_id: str,
        error: BaseException,
        deployment_type: Optional[str] = None,
    ) -> Optional[SuppressionRule]:
        """Return the first rule covering this failure, or None."""
        if not isinstance(error, StoreOperationError):
            return None
        for rule in self.rules:
            if rule.operation != operation:
                continue
            if rule.matches(entity_id, error, deployment_type, self.case_sensitive):
                return rule
        return None

    def is_benign_read_failure(self, entity_id: str, error: BaseException, deployment_type: Optional[str] = None) -> bool:
        return self.match(READ, entity_id, error, deployment_type) is not None

    def is_benign_write_failure(self, entity_id: str, error: BaseException, deployment_type: Optional[str] = None) -> bool:
        return self.match(WRITE, entity_id, error, deployment_type) is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], case_sensitive: Optional[bool] = None) -> "SuppressionPolicy":
        """
        Build a policy from ``{"case_sensitive": bool, "rules": [...]}``.
        ``"extend_defaults": true`` appends the rules to the built-in table
        instead of replacing it.
        """
        raw_rules = data.get("rules")
        if not isinstance(raw_rules, list):
            raise ValueError("Policy must contain a 'rules' list")
        rules = [SuppressionRule.from_dict(r) for r in raw_rules]
        if data.get("extend_defaults"):
            rules = list(DEFAULT_RULES) + rules
        if case_sensitive is None:
            case_sensitive = bool(data.get("case_sensitive", True))
        return cls(rules, case_sensitive=case_sensitive)


def load_policy(path: Optional[Path] = None, case_sensitive: Optional[bool] = None) -> SuppressionPolicy:
    """
    Load a policy file, or the built-in tables when no path is given.

    An explicit ``case_sensitive`` (CLI flag or environment) wins over the
    file's ``case_sensitive`` key; with neither, matching is case-sensitive.
    """
    if path is None:
        return SuppressionPolicy(case_sensitive=True if case_sensitive is None else case_sensitive)
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("Policy file must contain a JSON object")
        policy = SuppressionPolicy.from_dict(data, case_sensitive=case_sensitive)
        if case_sensitive is not None and "case_sensitive" in data and bool(data["case_sensitive"]) != case_sensitive:
            logger.info("Ignoring case_sensitive=%s from %s, overridden by settings", data["case_sensitive"], path)
    except (OSError, ValueError) as e:
        raise SyncError(f"Error loading suppression policy {path}", e) from e
    logger.info("Loaded %d suppression rule(s) from %s", len(policy.rules), path)
    return policy


__all__ = [
    "READ",
    "WRITE",
    "KNOWN_UNAVAILABLE_ENTITIES",
    "PROTECTED_ENTITIES",
    "DEFAULT_RULES",
    "SuppressionRule",
    "SuppressionPolicy",
    "load_policy",
]
