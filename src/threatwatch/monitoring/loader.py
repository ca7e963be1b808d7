# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Load monitoring rules from a YAML file.

Expected layout::

    rules:
      - id: ransomware-watch        # optional
        name: Ransomware groups
        match_type: keyword
        pattern: "lockbit|blackcat"
        severity: critical
        cooldown_minutes: 30
        sources:
          - name: Ransomwatch
            source_type: ransomwatch
        actions:
          - type: slack
            config:
              webhook_url: https://hooks.slack.com/services/...
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from threatwatch.core.exceptions import RuleLoadError
from threatwatch.models.rule import RuleDraft

logger = logging.getLogger("threatwatch.monitoring.loader")


def load_rules_file(path: str | Path) -> list[tuple[str | None, RuleDraft]]:
    """Parse *path* into ``(rule_id, draft)`` pairs.

    Raises :class:`RuleLoadError` if the file is missing, is not valid YAML
    or has no ``rules`` list.  Individual entries that fail validation are
    skipped with a warning.
    """
    filepath = Path(path)
    try:
        raw_text = filepath.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read rules file {filepath}: {exc}"
        raise RuleLoadError(msg) from exc

    try:
        data = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML syntax in {filepath.name}: {exc}"
        raise RuleLoadError(msg) from exc

    if not isinstance(data, dict) or not isinstance(data.get("rules"), list):
        msg = f"Expected a top-level 'rules' list in {filepath.name}"
        raise RuleLoadError(msg)

    loaded: list[tuple[str | None, RuleDraft]] = []
    for index, entry in enumerate(data["rules"]):
        if not isinstance(entry, dict):
            logger.warning("Rule #%d in %s is not a mapping, skipping", index, filepath.name)
            continue
        entry = dict(entry)
        rule_id = entry.pop("id", None)
        try:
            draft = RuleDraft.model_validate(entry)
        except ValidationError as exc:
            logger.warning("Schema validation failed for rule #%d in %s: %s", index, filepath.name, exc)
            continue
        loaded.append((str(rule_id) if rule_id is not None else None, draft))

    logger.info("Loaded %d monitoring rules from %s", len(loaded), filepath)
    return loaded
