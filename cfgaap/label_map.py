"""
User label aliases for CFGAAP.

Extends the built-in account taxonomy with user-specific line-item labels
(e.g. a company's own chart-of-accounts names) using a persistent JSON file.
Labels are matched by their canonical key, so case, spacing and punctuation
differences do not matter.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .taxonomy import AccountCategory, canonical_key, parse_category, resolve_builtin_label

logger = logging.getLogger(__name__)


@dataclass
class LabelMap:
    """
    Maps user labels to account categories.

    User aliases take precedence over the built-in labels, so a label that
    means something different in a particular set of books can be redirected.

    Attributes:
        version: Schema version of the label map file.
        aliases: Dictionary mapping the label as written to its category.
    """

    version: int = 1
    aliases: dict[str, AccountCategory] = field(default_factory=dict)

    # Canonical-key index (not persisted)
    _index: dict[str, AccountCategory] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self):
        """Build the canonical-key index."""
        self._rebuild_index()

    def _rebuild_index(self) -> None:
        self._index = {}
        for label, category in self.aliases.items():
            key = canonical_key(label)
            if not key:
                logger.warning(f"Ignoring alias with no letters or digits: '{label}'")
                continue
            self._index[key] = category

    @classmethod
    def load(cls, path: Path) -> "LabelMap":
        """
        Load a label map from a JSON file.

        Args:
            path: Path to the label map JSON file.

        Returns:
            LabelMap instance loaded from the file (empty if the file is missing).

        Raises:
            json.JSONDecodeError: If the file is not valid JSON.
            ValueError: If an alias names an unknown category.
        """
        logger.info(f"Loading label map from {path}")

        if not path.exists():
            logger.warning(f"Label map file not found: {path}")
            logger.warning("Using built-in labels only")
            return cls()

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        version = data.get("version", 1)

        aliases = {}
        for label, category_name in data.get("aliases", {}).items():
            aliases[label] = parse_category(category_name)

        label_map = cls(version=version, aliases=aliases)

        logger.info(f"Loaded {len(aliases)} label aliases")

        return label_map

    def save(self, path: Path) -> None:
        """
        Save the label map to a JSON file.

        Args:
            path: Path where the label map JSON file should be written.
        """
        logger.info(f"Saving label map to {path}")

        data = {
            "version": self.version,
            "aliases": {
                label: category.value
                for label, category in sorted(self.aliases.items())
            }
        }

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        logger.info("Label map saved successfully")

    def add_alias(self, label: str, category_name: str) -> AccountCategory:
        """
        Add or update a user alias.

        Args:
            label: Label as it appears in the user's statements.
            category_name: Category value, name or any recognized label.

        Returns:
            The category the label now resolves to.

        Raises:
            ValueError: If the category is unknown or the label is blank.
        """
        if not canonical_key(label):
            raise ValueError(f"Label '{label}' has no letters or digits")

        category = parse_category(category_name)
        self.aliases[label] = category
        self._rebuild_index()

        logger.debug(f"Mapped label '{label}' to {category.value}")
        return category

    def resolve(self, label: str) -> Optional[AccountCategory]:
        """
        Resolve a label to its category.

        Resolution order:
        1. User aliases
        2. Built-in taxonomy labels
        3. None if no match found
        """
        key = canonical_key(label)
        if key in self._index:
            return self._index[key]
        return resolve_builtin_label(label)
