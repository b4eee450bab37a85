"""Selection of a user's primary (institutional) email address.

Rules come from a tab-delimited file in which the first column names the action:

    #       comment, ignored
    domain  (or "!")  a preferred domain suffix, most preferred first
    sub     (or "$")  a regular expression and its replacement

For example::

    domain  @lancaster.ac.uk
    domain  @lancaster.edu.gh
    sub     @lancs\\.ac\\.uk$   @lancaster.ac.uk

An optional map file links addresses that cannot be matched by rule. Each line ends
with a comma-separated field holding all of one person's addresses joined by ";".
Every address in the group maps to the group's own primary address.
"""

from __future__ import annotations

import csv
import re
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

log = getLogger(__name__)

DOMAIN_ACTIONS = frozenset({"domain", "!"})
SUBSTITUTION_ACTIONS = frozenset({"sub", "$"})

_MAP_DELIMITER = re.compile(r"\s*;\s*")

Substitution = tuple[re.Pattern[str], str]


class EmailSelector:
    """Picks the preferred address from a list using domain and substitution rules."""

    def __init__(
        self,
        *,
        domains: Iterable[str] = (),
        substitutions: Iterable[tuple[re.Pattern[str] | str, str]] = (),
        mapping: Mapping[str, str] | None = None,
    ) -> None:
        self.domains: list[str] = [domain.lower() for domain in domains if domain]
        self.substitutions: list[Substitution] = [
            (re.compile(pattern) if isinstance(pattern, str) else pattern, replacement)
            for pattern, replacement in substitutions
        ]
        self.mapping: dict[str, str] = dict(mapping or {})

    @classmethod
    def from_files(
        cls,
        rules_path: str | Path | None = None,
        map_path: str | Path | None = None,
    ) -> EmailSelector:
        selector = cls()
        selector.load_rules(rules_path)
        selector.load_map(map_path)
        return selector

    def clear(self) -> None:
        """Forget all mapped addresses."""
        self.mapping.clear()

    def load_rules(self, path: str | Path | None) -> None:
        """Replace the domain and substitution rules with those in `path`."""
        self.domains = []
        self.substitutions = []
        if not path:
            return
        with Path(path).open(newline="", encoding="utf-8") as handle:
            for row in csv.reader(handle, delimiter="\t"):
                self._add_rule(row)
        log.debug(
            "Loaded %d domain and %d substitution rules from %s",
            len(self.domains),
            len(self.substitutions),
            path,
        )

    def load_map(self, path: str | Path | None) -> None:
        """Replace the address map with the groups listed in `path`."""
        self.mapping = {}
        if not path:
            return
        with Path(path).open(encoding="utf-8") as handle:
            for line in handle:
                self._add_map_group(line.rstrip())
        log.debug("Loaded %d mapped email addresses from %s", len(self.mapping), path)

    def select_primary(self, emails: Sequence[str], *, use_map: bool = True) -> str | None:
        """Return the preferred address from `emails`.

        Addresses are domain-matched as given, then again after substitution. If both
        fail, the map is consulted (when `use_map`). Failing that, the first address
        wins.
        """
        addresses = [email for email in emails if email]
        result = self._match_domain(addresses)
        if result is not None:
            return result
        result = self._match_domain(self._substitute(addresses))
        if result is not None:
            return result
        if use_map:
            result = self._match_map(addresses)
            if result is not None:
                return result
        return addresses[0] if addresses else None

    def _add_rule(self, row: Sequence[str]) -> None:
        action = (row[0] if row else "").strip().lower()
        if not action or action.startswith("#"):
            return
        if action in DOMAIN_ACTIONS:
            domain = (row[1] if len(row) > 1 else "").strip().lower()
            if domain:
                self.domains.append(domain)
        elif action in SUBSTITUTION_ACTIONS:
            pattern = row[1] if len(row) > 1 else ""
            replacement = row[2] if len(row) > 2 else ""
            if pattern:
                self.substitutions.append((re.compile(pattern), replacement))
        else:
            log.warning("Ignoring unknown email rule action %r", action)

    def _add_map_group(self, line: str) -> None:
        field = line.rpartition(",")[2]
        emails = [email for email in _MAP_DELIMITER.split(field.strip()) if email]
        # a single address has nothing to map to
        if len(emails) < 2:
            return
        primary = self.select_primary(emails, use_map=False)
        for email in emails:
            if email != primary and primary is not None:
                self.mapping[email] = primary

    def _match_domain(self, emails: Sequence[str]) -> str | None:
        # domains are in order of preference, so the first domain with a match wins
        for domain in self.domains:
            for email in emails:
                if email.lower().endswith(domain):
                    return email
        return None

    def _substitute(self, emails: Sequence[str]) -> list[str]:
        if not self.substitutions:
            return list(emails)
        result: list[str] = []
        for email in emails:
            for pattern, replacement in self.substitutions:
                email = pattern.sub(replacement, email)
            result.append(email)
        return result

    def _match_map(self, emails: Sequence[str]) -> str | None:
        for email in emails:
            mapped = self.mapping.get(email)
            if mapped:
                return mapped
        return None
