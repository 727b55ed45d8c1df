"""Content registry -- loads and serves unit templates, statuses and house bonuses.

Content is loaded from JSON documents that validate as a
:class:`~effect_engine.ir.content_set.ContentSet`.  Anything malformed
(unknown variant, unknown field, dangling status or template reference)
is rejected here, before any battle starts.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from effect_engine.errors import ContentError
from effect_engine.ir.content_set import ContentSet
from effect_engine.ir.modifiers import HouseBonus
from effect_engine.ir.status_effects import StatusDefinition
from effect_engine.ir.units import UnitTemplate

logger = logging.getLogger(__name__)

# Default paths relative to the project root.
_PROJECT_ROOT = Path(__file__).resolve().parents[4]  # src/effect_engine/sim/content -> root
_DEFAULT_CONTENT_PATH = _PROJECT_ROOT / "data" / "sample" / "content.json"


class ContentRegistry:
    """Single source of truth for battle content during simulation.

    Usage::

        registry = ContentRegistry()
        registry.load_file("data/sample/content.json")

        template = registry.get_template("squire")
        status = registry.get_status_def("shield")
    """

    def __init__(self) -> None:
        self.templates: dict[str, UnitTemplate] = {}
        self.status_defs: dict[str, StatusDefinition] = {}
        self.bonuses: list[HouseBonus] = []

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_file(self, path: str | Path | None = None) -> ContentSet:
        """Load and validate a content document from a JSON file.

        Parameters
        ----------
        path:
            Path to the JSON file.  Defaults to
            ``data/sample/content.json`` relative to the project root.

        Raises
        ------
        ContentError
            If the file is not valid JSON or fails validation.
        """
        if path is None:
            path = _DEFAULT_CONTENT_PATH
        path = Path(path)

        with open(path) as f:
            try:
                raw = json.load(f)
            except json.JSONDecodeError as exc:
                raise ContentError(f"{path}: not valid JSON: {exc}") from exc

        content_set = self.parse(raw, source=str(path))
        self.load_content_set(content_set)
        return content_set

    @staticmethod
    def parse(raw: dict, source: str = "<content>") -> ContentSet:
        """Validate a raw document into a :class:`ContentSet`.

        Raises
        ------
        ContentError
            Wrapping the pydantic validation error.
        """
        try:
            return ContentSet.model_validate(raw)
        except ValidationError as exc:
            raise ContentError(f"{source}: invalid content:\n{exc}") from exc

    def load_content_set(self, content_set: ContentSet) -> None:
        """Add every definition from *content_set*.

        Later definitions replace earlier ones with the same name.
        """
        for status in content_set.statuses:
            if status.name in self.status_defs:
                logger.warning("Status %r redefined", status.name)
            self.status_defs[status.name] = status
        for template in content_set.units:
            if template.name in self.templates:
                logger.warning("Unit template %r redefined", template.name)
            self.templates[template.name] = template
        self.bonuses.extend(content_set.bonuses)
        logger.debug(
            "Registry now holds %d template(s), %d status(es), %d bonus(es)",
            len(self.templates), len(self.status_defs), len(self.bonuses),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_template(self, name: str) -> UnitTemplate | None:
        """Return the :class:`UnitTemplate` called *name*, or ``None``."""
        return self.templates.get(name)

    def get_status_def(self, name: str) -> StatusDefinition | None:
        """Return the :class:`StatusDefinition` called *name*, or ``None``."""
        return self.status_defs.get(name)

    def list_template_names(self) -> list[str]:
        return list(self.templates.keys())

    def require_templates(self, names: list[str]) -> list[UnitTemplate]:
        """Look up every template in *names*, in order.

        Raises
        ------
        ContentError
            Naming every template that is not loaded.
        """
        missing = [name for name in names if name not in self.templates]
        if missing:
            raise ContentError(f"Unknown unit template(s): {', '.join(missing)}")
        return [self.templates[name] for name in names]
