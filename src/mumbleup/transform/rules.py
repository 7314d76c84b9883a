"""Declarative rewrite rules for line-oriented configuration files.

A rule pairs a directive key with a rewrite policy. `apply_rules` takes a
single line and returns the lines to emit in its place (zero or one), so
each rule can be exercised without a whole file.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from mumbleup.config.fields import ConfigurationSet


class Policy(Enum):
    """How a recognized directive is rewritten."""

    FORCE_SET = "force-set"
    SUBSTITUTE_IF_PRESENT = "substitute-if-present"
    CONDITIONAL_GROUP = "conditional-group"
    DROP_ALWAYS = "drop-always"
    PORT_BIND = "port-bind"


class Action(Enum):
    """Outcome of resolving a rule against a ConfigurationSet."""

    EMIT = "emit"
    KEEP = "keep"
    DROP = "drop"


# "N:N" and "N:N/udp" list items, same number on both sides.
_PORT_PAIR = re.compile(
    r"^(?P<prefix>\s*-\s*)(?P<quote>[\"']?)(?P<port>\d+):(?P=port)"
    r"(?P<suffix>/udp)?(?P=quote)\s*$"
)


@dataclass(frozen=True)
class Match:
    """A rule that matched a line, with what the dialect captured."""

    rule: Rule
    prefix: str
    commented: bool = False


class Dialect:
    """Recognition and rendering of directive lines for one file format."""

    name: str = ""
    append_missing: bool = False

    def match(self, line: str, key: str, commented: bool = False) -> str | None:
        """Return the line prefix if `line` is a directive for `key`."""
        raise NotImplementedError

    def render(self, prefix: str, key: str, value: str) -> str:
        """Render a directive line without line ending."""
        raise NotImplementedError

    def value(self, line: str, key: str) -> str | None:
        """Return the value of an active directive for `key`, or None."""
        raise NotImplementedError


class ComposeDialect(Dialect):
    """Environment list items inside a compose service: `      - KEY=VALUE`."""

    name = "compose"

    def match(self, line: str, key: str, commented: bool = False) -> str | None:
        if commented:
            return None
        m = re.match(rf"^(\s*-\s*){re.escape(key)}=", line)
        return m.group(1) if m else None

    def render(self, prefix: str, key: str, value: str) -> str:
        return f"{prefix}{key}={value}"

    def value(self, line: str, key: str) -> str | None:
        m = re.match(rf"^\s*-\s*{re.escape(key)}=(.*)$", line.rstrip("\r\n"))
        return m.group(1).strip() if m else None


class IniDialect(Dialect):
    """Flat `key=value` files where defaults ship as `#key=value` comments."""

    name = "ini"
    append_missing = True

    def match(self, line: str, key: str, commented: bool = False) -> str | None:
        pattern = rf"^[#;]\s*{re.escape(key)}=" if commented else rf"^{re.escape(key)}="
        return "" if re.match(pattern, line) else None

    def render(self, prefix: str, key: str, value: str) -> str:
        return f"{key}={value}"

    def value(self, line: str, key: str) -> str | None:
        m = re.match(rf"^{re.escape(key)}=(.*)$", line.rstrip("\r\n"))
        return m.group(1).strip().strip('"') if m else None


COMPOSE = ComposeDialect()
INI = IniDialect()


def quote_value(value: str) -> str:
    """Wrap a value in double quotes, escaping what would end the string."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


@dataclass(frozen=True)
class Rule:
    """A directive key and the policy that rewrites it.

    `field` names the ConfigurationSet entry that supplies the value and
    `value` is a fixed value that wins over it. `gate` is the boolean field
    governing a conditional group. `keep_empty` makes a conditional rule
    emit `KEY=` instead of dropping the line when its value is empty.
    `suffix` selects the port-bind variant ("" or "/udp"). A port-bind rule
    only rewrites pairs of the port currently named by the `source`
    directive, or of `default` when the document has none.
    """

    key: str
    policy: Policy
    field: str | None = None
    value: str | None = None
    gate: str | None = None
    keep_empty: bool = False
    quote: bool = False
    suffix: str = ""
    source: str | None = None
    default: str = ""

    def match(
        self,
        line: str,
        dialect: Dialect,
        commented: bool = False,
        bound: Mapping[str, str] | None = None,
    ) -> str | None:
        """Return the captured prefix if this rule recognizes `line`."""
        if self.policy is Policy.PORT_BIND:
            if commented:
                return None
            m = _PORT_PAIR.match(line.rstrip("\r\n"))
            if m is None or (m.group("suffix") or "") != self.suffix:
                return None
            if m.group("port") != (bound or {}).get(self.key, self.default):
                return None
            return m.group("prefix")
        return dialect.match(line, self.key, commented)

    def resolve(self, config: ConfigurationSet) -> tuple[Action, str]:
        """Decide what happens to a matching line under `config`."""
        value = self.value if self.value is not None else config.value(self.field or "")

        if self.policy is Policy.DROP_ALWAYS:
            return Action.DROP, ""
        if self.policy is Policy.FORCE_SET:
            return Action.EMIT, value
        if self.policy is Policy.SUBSTITUTE_IF_PRESENT:
            return (Action.EMIT, value) if value else (Action.KEEP, "")
        if self.policy is Policy.PORT_BIND:
            return (Action.EMIT, value) if value else (Action.KEEP, "")
        if self.policy is Policy.CONDITIONAL_GROUP:
            if self.gate is not None and not config.flag(self.gate):
                return Action.DROP, ""
            if value or self.keep_empty:
                return Action.EMIT, value
            return Action.DROP, ""
        raise ValueError(f"Unknown policy: {self.policy}")

    def render(self, prefix: str, value: str, dialect: Dialect) -> str:
        """Render the replacement line (without line ending)."""
        if self.policy is Policy.PORT_BIND:
            return f'{prefix}"{value}:{value}{self.suffix}"'
        if self.quote and value:
            value = quote_value(value)
        return dialect.render(prefix, self.key, value)


def line_ending(line: str) -> str:
    """Return the line terminator of `line` ("" for an unterminated last line)."""
    if line.endswith("\r\n"):
        return "\r\n"
    if line.endswith("\n") or line.endswith("\r"):
        return line[-1]
    return ""


def bound_values(
    lines: list[str], rules: tuple[Rule, ...], dialect: Dialect
) -> dict[str, str]:
    """Read the current value of each rule's `source` directive.

    The first active directive wins. A source that is missing or not a
    plain number leaves the rule on its default.
    """
    bound: dict[str, str] = {}
    for rule in rules:
        if rule.source is None:
            continue
        bound[rule.key] = rule.default
        for line in lines:
            value = dialect.value(line, rule.source)
            if value is None:
                continue
            if re.fullmatch(r"[0-9]+", value):
                bound[rule.key] = value
            break
    return bound


def match_rule(
    line: str,
    rules: tuple[Rule, ...],
    dialect: Dialect,
    commented_keys: frozenset[str] = frozenset(),
    bound: Mapping[str, str] | None = None,
) -> Match | None:
    """Find the first rule recognizing `line`.

    Keys in `commented_keys` are also recognized in their commented form.
    `bound` carries the values read by `bound_values`.
    """
    for rule in rules:
        prefix = rule.match(line, dialect, bound=bound)
        if prefix is not None:
            return Match(rule, prefix)
        if rule.key in commented_keys:
            prefix = rule.match(line, dialect, commented=True)
            if prefix is not None:
                return Match(rule, prefix, commented=True)
    return None


def emit(match: Match, line: str, config: ConfigurationSet, dialect: Dialect) -> list[str]:
    """Lines to write in place of `line` for an already-matched rule."""
    action, value = match.rule.resolve(config)
    if action is Action.EMIT:
        return [match.rule.render(match.prefix, value, dialect) + line_ending(line)]
    # Commented defaults are documentation: only ever uncommented, never removed.
    if action is Action.KEEP or match.commented:
        return [line]
    return []


def apply_rules(
    line: str,
    rules: tuple[Rule, ...],
    config: ConfigurationSet,
    dialect: Dialect = COMPOSE,
    commented_keys: frozenset[str] = frozenset(),
    bound: Mapping[str, str] | None = None,
) -> list[str]:
    """Return the lines that replace `line` (0 or 1 of them)."""
    match = match_rule(line, rules, dialect, commented_keys, bound)
    if match is None:
        return [line]
    return emit(match, line, config, dialect)
