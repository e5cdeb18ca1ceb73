"""
Script hook checks run before a config entity is imported.

A script hook is any object nested in a config entity that carries both a
``type`` and a ``source`` key, e.g. ``{"type": "text/javascript", "source":
"..."}`` under ``onCreate`` of a managed object. Only JavaScript hooks are
parsed; groovy and file based hooks are accepted as they are.
"""

import logging
from typing import Any, List

import esprima
from esprima.error_handler import Error as ScriptSyntaxError

logger = logging.getLogger(__name__)

JAVASCRIPT_TYPE = "text/javascript"


def find_script_hooks(data: Any) -> List[dict]:
    """Collect every script hook object under ``data`` (depth first)."""
    hooks: List[dict] = []

    def _walk(node: Any) -> None:
        if isinstance(node, dict):
            for value in node.values():
                if isinstance(value, dict) and "type" in value and "source" in value:
                    hooks.append(value)
                else:
                    _walk(value)
        elif isinstance(node, list):
            for item in node:
                _walk(item)

    _walk(data)
    return hooks


def _source_text(source: Any) -> str:
    if isinstance(source, list):
        return "\n".join(str(line) for line in source)
    return str(source)


def is_script_valid(source: str) -> bool:
    try:
        esprima.parseScript(source)
    except ScriptSyntaxError as e:
        logger.error("Invalid script hook syntax: %s", e)
        return False
    return True


def are_script_hooks_valid(entity: Any) -> bool:
    """True when every JavaScript hook in the entity parses."""
    for hook in find_script_hooks(entity):
        if hook.get("type") != JAVASCRIPT_TYPE or not hook.get("source"):
            continue
        if not is_script_valid(_source_text(hook["source"])):
            return False
    return True


__all__ = ["find_script_hooks", "is_script_valid", "are_script_hooks_valid", "JAVASCRIPT_TYPE"]
