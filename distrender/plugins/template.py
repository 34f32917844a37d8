"""Process template files in a distribution.

Templates are selected by a file finder (or by their ``.tt`` suffix),
renamed with a substitution expression, rendered, and either injected as new
files or, in ``replace`` mode, used to overwrite a file of the same name once
gathering is finished. In ``prune`` mode the source templates are removed
from the distribution.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..core.models import TEMPLATE_SUFFIX, DistFile, TemplateConfig
from ..dist.distribution import Distribution
from ..rendering.context import build_context
from ..rendering.engine import render_text
from ..rendering.substitution import parse_substitution

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingReplace:
    """A template whose output overwrites an existing file at munge time."""

    template: DistFile
    target: DistFile


class TemplatePlugin:
    """Gatherer, injector, pruner and munger for template files."""

    def __init__(self, dist: Distribution, config: TemplateConfig | None = None) -> None:
        self.dist = dist
        self.config = config or TemplateConfig()
        self.plugin_name = self.config.plugin_name
        self._rename = parse_substitution(self.config.output_regex)
        self._variables: dict[str, Any] | None = None
        self._munge_list: list[PendingReplace] = []
        self._prune_list: list[DistFile] = []

    @property
    def variables(self) -> dict[str, Any]:
        if self._variables is None:
            self._variables = build_context(self.dist, self.config.var)
        return self._variables

    @property
    def pending_replacements(self) -> list[PendingReplace]:
        return list(self._munge_list)

    @property
    def pending_prunes(self) -> list[DistFile]:
        return list(self._prune_list)

    def log(self, message: str) -> None:
        logger.info(f"[{self.plugin_name}] {message}")

    def select_templates(self) -> list[DistFile]:
        if self.config.finder is not None:
            return self.dist.find_files(self.config.finder)
        return [f for f in self.dist.files if f.name.endswith(TEMPLATE_SUFFIX)]

    def output_name(self, template: DistFile) -> str:
        return self._rename.apply(template.name)

    def render(self, template: DistFile) -> str:
        return render_text(
            template.content,
            self.variables,
            trim=self.config.trim,
            name=template.name,
        )

    def gather_files(self) -> None:
        """Render selected templates and inject the results into the dist."""
        self._variables = build_context(self.dist, self.config.var)

        for template in self.select_templates():
            filename = self.output_name(template)
            self.log(f"processing {template.name} => {filename}")
            if filename == template.name:
                logger.warning(
                    f"[{self.plugin_name}] output name of {template.name} is unchanged"
                )

            existing = self.dist.find_by_name(filename)
            if self.config.replace and existing is not None:
                self._munge_list.append(PendingReplace(template, existing))
            else:
                self.add_file(DistFile(name=filename, content=self.render(template)))

            if self.config.prune:
                self._prune_list.append(template)

    def add_file(self, file: DistFile) -> None:
        self.dist.add_file(file, added_by=self.plugin_name)

    def munge_files(self) -> None:
        """Overwrite files recorded for replacement, then prune."""
        for item in self._munge_list:
            self.log(f"replacing {item.target.name} with rendered {item.template.name}")
            item.target.content = self.render(item.template)
        self._munge_list.clear()
        self.prune_files()

    def prune_files(self) -> None:
        """Remove processed templates from the dist when pruning is enabled."""
        for template in self._prune_list:
            self.log(f"pruning {template.name}")
            self.dist.prune_file(template)
        self._prune_list.clear()
