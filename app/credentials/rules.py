"""
Filename password rules.

A JSON file of {name_rule, bank, password} entries. Passwords of rules
whose glob matches an uploaded filename are tried after the user's own
credentials, in file order.
"""

import json
import re
from pathlib import Path
from typing import Optional

import structlog
from pydantic import BaseModel

logger = structlog.get_logger(__name__)


class FilenameRule(BaseModel):
    name_rule: str                   # glob: * and ? wildcards
    bank: str = ""
    password: str

    def matches(self, filename: str) -> bool:
        return re.match(glob_to_regex(self.name_rule), filename) is not None


def glob_to_regex(glob: str) -> str:
    """Anchored regex for a glob using only * and ?."""
    pattern = re.escape(glob).replace(r'\*', '.*').replace(r'\?', '.')
    return f"^{pattern}$"


def load_filename_rules(path: Optional[str]) -> list[FilenameRule]:
    if not path:
        return []
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("filename_rules_unreadable", path=path, error=str(e))
        return []
    rules = [FilenameRule.model_validate(item) for item in raw]
    logger.info("filename_rules_loaded", path=path, count=len(rules))
    return rules


def passwords_for_file(rules: list[FilenameRule], filename: str) -> list[str]:
    return [rule.password for rule in rules if rule.matches(filename)]
