"""
Classification of the portal's response page after submitting the form.

The portal answers with HTML, not a status code, so the outcome is read
from keywords in the page.  Rules are evaluated in priority order and the
first match wins; anything unmatched is "unrecognized".

Known limitation: these are substring heuristics kept compatible with the
portal's historical wording.  "salah" or the lokasi + tidak pair can match
unrelated text on the page.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, TypeAdapter

from autocheckin.schemas.checkin import Outcome

logger = logging.getLogger(__name__)


class ClassificationRule(BaseModel):
    kind: str
    success: bool
    message: str
    message_with_time: str | None = None
    any_of: tuple[str, ...] = ()
    all_of: tuple[str, ...] = ()
    url_any_of: tuple[str, ...] = ()

    def matches(self, content: str, url: str) -> bool:
        if any(p in content for p in self.any_of):
            return True
        if any(p in url for p in self.url_any_of):
            return True
        return bool(self.all_of) and all(p in content for p in self.all_of)

    def render(self, checkin_time: str | None) -> str:
        if checkin_time and self.message_with_time:
            return self.message_with_time.format(time=checkin_time)
        return self.message


DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    # Landing on the dashboard also means login + check-in went through
    ClassificationRule(
        kind="success",
        success=True,
        message="Check-in berhasil!",
        message_with_time="Check-in berhasil! ({time})",
        any_of=(
            "Berhasil", "berhasil", "Sukses", "sukses", "Selamat", "tercatat",
            "Data Absensi", "Check Out", "MITRA",
        ),
        url_any_of=("/home", "/dashboard"),
    ),
    ClassificationRule(
        kind="already_done",
        success=True,
        message="Sudah check-in sebelumnya",
        message_with_time="Sudah check-in ({time})",
        any_of=("sudah absen", "Sudah Absen", "sudah tercatat", "sudah melakukan"),
    ),
    ClassificationRule(
        kind="invalid_credentials",
        success=False,
        message="NIP atau Password salah",
        any_of=("salah", "Salah", "invalid", "Invalid"),
    ),
    ClassificationRule(
        kind="too_early",
        success=False,
        message="Belum waktunya check-in",
        any_of=("belum waktunya", "tidak dalam jam"),
    ),
    ClassificationRule(
        kind="location_issue",
        success=False,
        message="Masalah lokasi/koordinat",
        all_of=("lokasi", "tidak"),
    ),
)

UNRECOGNIZED = "unrecognized"

_rules_adapter = TypeAdapter(list[ClassificationRule])


def load_rules(path: str | Path) -> tuple[ClassificationRule, ...]:
    """Read an ordered rule table from a JSON file (a list of rule objects)."""
    with Path(path).open(encoding="utf-8") as fh:
        rules = _rules_adapter.validate_python(json.load(fh))
    logger.info("Loaded %d classification rules from %s", len(rules), path)
    return tuple(rules)


def match_rule(
    content: str,
    url: str = "",
    rules: tuple[ClassificationRule, ...] = DEFAULT_RULES,
) -> ClassificationRule | None:
    return next((rule for rule in rules if rule.matches(content, url)), None)


def classify(
    content: str,
    url: str = "",
    title: str = "",
    checkin_time: str | None = None,
    rules: tuple[ClassificationRule, ...] = DEFAULT_RULES,
) -> Outcome:
    rule = match_rule(content, url, rules)
    if rule is None:
        return Outcome(
            success=False,
            kind=UNRECOGNIZED,
            message=f"Response tidak dikenali: {title}",
        )
    return Outcome(
        success=rule.success,
        kind=rule.kind,
        message=rule.render(checkin_time),
        checkin_time=checkin_time if rule.success else None,
    )
