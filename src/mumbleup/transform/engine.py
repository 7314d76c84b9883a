"""Whole-document rewriting on top of the rule table."""

from __future__ import annotations

import logging

from mumbleup.config.fields import ConfigurationSet
from mumbleup.transform.rules import (
    Action,
    Dialect,
    Policy,
    Rule,
    bound_values,
    emit,
    line_ending,
    match_rule,
)

logger = logging.getLogger(__name__)


def _active_keys(
    lines: list[str],
    rules: tuple[Rule, ...],
    dialect: Dialect,
    bound: dict[str, str],
) -> set[str]:
    """Keys that already have an uncommented directive line."""
    found: set[str] = set()
    for line in lines:
        match = match_rule(line, rules, dialect, bound=bound)
        if match is not None:
            found.add(match.rule.key)
    return found


def _dominant_ending(lines: list[str]) -> str:
    for line in lines:
        ending = line_ending(line)
        if ending:
            return ending
    return "\n"


def rewrite_lines(
    lines: list[str],
    rules: tuple[Rule, ...],
    config: ConfigurationSet,
    dialect: Dialect,
) -> list[str]:
    """Apply `rules` to every line and return the new document.

    Lines keep their own endings. Unrecognized lines pass through unchanged.
    A key is written at most once: later active duplicates are dropped.
    Port mappings are never collapsed.
    For dialects that append, a key with no line at all is added at the end
    when its rule emits a value.
    """
    bound = bound_values(lines, rules, dialect)
    active = _active_keys(lines, rules, dialect, bound)
    commented_keys = frozenset(r.key for r in rules) - active

    output: list[str] = []
    written: set[str] = set()

    for line in lines:
        match = match_rule(line, rules, dialect, commented_keys, bound)
        if match is None:
            output.append(line)
            continue

        key = match.rule.key
        if key in written and match.rule.policy is not Policy.PORT_BIND:
            if not match.commented:
                logger.debug("Dropping duplicate directive for %s", key)
                continue
            output.append(line)
            continue

        replacement = emit(match, line, config, dialect)
        output.extend(replacement)
        # A commented default left as is does not claim the key.
        if not match.commented or replacement != [line]:
            written.add(key)

    if dialect.append_missing:
        missing = [
            rule
            for rule in rules
            if rule.key not in written and rule.key not in active
        ]
        ending = _dominant_ending(lines)
        for rule in missing:
            action, value = rule.resolve(config)
            if action is not Action.EMIT:
                continue
            if output and not line_ending(output[-1]):
                output[-1] += ending
            output.append(rule.render("", value, dialect) + ending)
            written.add(rule.key)
            logger.debug("Appended directive for %s", rule.key)

    return output


def rewrite_text(
    text: str,
    rules: tuple[Rule, ...],
    config: ConfigurationSet,
    dialect: Dialect,
) -> str:
    """String form of `rewrite_lines`."""
    return "".join(rewrite_lines(text.splitlines(keepends=True), rules, config, dialect))
