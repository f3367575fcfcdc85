"""Shared fixtures and helper extensions."""

from typing import List

import pytest

from classforge.core import ClassExtension, Definition, Extension, Output


class RecordingExtension(Extension):
    """Global extension appending ``(label, hook, class_name)`` to a list."""

    def setup(self):
        self.add_required_option("log")
        self.add_options({"label": "ext", "proposals": None})

    def _record(self, hook, ctx):
        self.get_option("log").append((self.get_option("label"), hook, ctx.class_name))

    def new_class_extensions(self, ctx):
        self._record("new_class_extensions", ctx)
        return (self.get_option("proposals") or {}).get(ctx.class_name)

    def new_config_classes(self, ctx):
        self._record("new_config_classes", ctx)

    def config_class_process(self, ctx):
        self._record("config_class_process", ctx)

    def pre_global_process(self, ctx):
        self._record("pre_global_process", ctx)

    def class_process(self, ctx):
        self._record("class_process", ctx)

    def post_global_process(self, ctx):
        self._record("post_global_process", ctx)


class RecordingClassExtension(ClassExtension):
    """Class extension that records hooks and proposes a fixed list."""

    def setup(self):
        self.add_required_option("log")
        self.add_options({"label": "class_ext", "proposals": []})

    def _record(self, hook, ctx):
        self.get_option("log").append((self.get_option("label"), hook, ctx.class_name))

    def new_class_extensions(self, ctx):
        self._record("new_class_extensions", ctx)
        return self.get_option("proposals")

    def class_process(self, ctx):
        self._record("class_process", ctx)


class DefiningExtension(Extension):
    """Creates an empty definition per config class."""

    def setup(self):
        self.add_required_option("output_dir")
        self.add_option("overwrite", False)

    def class_process(self, ctx):
        ctx.container.set(
            ctx.class_name,
            Definition(
                ctx.class_name,
                Output(self.get_option("output_dir"), self.get_option("overwrite")),
            ),
        )


@pytest.fixture
def log() -> List[tuple]:
    return []


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "out"
