"""
Adds template-declared members to a class definition.
"""

from pathlib import Path
from typing import Optional

from ..core.extension import ClassExtension, HookContext


class TemplateMembersExtension(ClassExtension):
    """Renders templates and extracts their properties and methods.

    Options:
        templates: template source, or list of them (required). With
            ``template_dir`` set, an entry naming a file in that directory
            is replaced by the file's content.
        template_dir: directory holding template files
        definition: container key of the definition to extend; defaults to
            the config class name
        variables: extra template variables
    """

    def setup(self):
        self.add_required_option("templates")
        self.add_options({"template_dir": None, "definition": None, "variables": {}})

    def get_template_directory(self) -> Optional[Path]:
        template_dir = self.get_option("template_dir")
        return Path(template_dir) if template_dir else None

    def class_process(self, ctx: HookContext):
        templates = self.get_option("templates")
        if isinstance(templates, str):
            templates = [templates]

        definition = ctx.container.get(self.get_option("definition") or ctx.class_name)
        for template in templates:
            self.process_template(
                definition,
                self._source(template),
                ctx,
                self.get_option("variables") or {},
            )

    def _source(self, template: str) -> str:
        template_dir = self.get_template_directory()
        if template_dir is None or "\n" in template:
            return template
        path = template_dir / template
        return path.read_text(encoding="utf-8") if path.is_file() else template
