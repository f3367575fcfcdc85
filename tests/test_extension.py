import pytest

from classforge.core import (
    ClassExtension,
    Definition,
    Extension,
    HookContext,
    MissingOptionsError,
    OptionNotFoundError,
    Phase,
)


class OptionsExtension(ClassExtension):
    def setup(self):
        self.add_options({"color": "red", "size": 1})
        self.add_required_options(["name", "kind"])


def make(**options):
    options.setdefault("name", "n")
    options.setdefault("kind", "k")
    return OptionsExtension(options)


def context(**kwargs):
    kwargs.setdefault("config_classes", {})
    return HookContext(Phase.CLASS, **kwargs)


def test_defaults_and_given_options():
    extension = make(size=3)

    assert extension.get_option("color") == "red"
    assert extension.get_option("size") == 3
    assert extension.options == {"color": "red", "size": 3, "name": "n", "kind": "k"}


def test_options_property_is_a_copy():
    extension = make()
    extension.options["color"] = "blue"

    assert extension.get_option("color") == "red"


def test_unknown_option_at_construction():
    with pytest.raises(OptionNotFoundError) as info:
        make(shape="round")

    assert info.value.name == "shape"
    assert isinstance(info.value, LookupError)


def test_unknown_option_get_and_set():
    extension = make()

    with pytest.raises(OptionNotFoundError):
        extension.get_option("nope")
    with pytest.raises(OptionNotFoundError):
        extension.set_option("nope", 1)


def test_all_missing_required_options_reported():
    with pytest.raises(MissingOptionsError) as info:
        OptionsExtension({"color": "green"})

    assert info.value.missing == ["name", "kind"]
    assert "name, kind" in str(info.value)


def test_defaults_fill_declared_options_only():
    extension = OptionsExtension(
        {"kind": "k"}, defaults={"name": "from-default", "unrelated": 1}
    )

    assert extension.get_option("name") == "from-default"
    assert not extension.has_option("unrelated")


def test_explicit_option_wins_over_default():
    extension = OptionsExtension({"name": "n", "kind": "k"}, defaults={"name": "d"})

    assert extension.get_option("name") == "n"


def test_hooks_are_noops_by_default():
    extension = Extension()
    ctx = context()

    assert extension.new_class_extensions(ctx) is None
    assert extension.new_config_classes(ctx) is None
    assert extension.config_class_process(ctx) is None
    assert extension.class_process(ctx) is None
    assert extension.pre_global_process(ctx) is None
    assert extension.post_global_process(ctx) is None


def test_process_template_adds_members():
    extension = make(color="blue")
    definition = Definition("Model\\Article")
    ctx = context(
        class_name="Model\\Article",
        config_class={"fields": ["title", "body"]},
        config_classes={"Model\\Article": {"fields": ["title", "body"]}},
    )
    template = (
        "{% for field in config_class.fields %}"
        "    protected ${{ field }};\n"
        "{% endfor %}"
        "    public function getColor()\n"
        "    {\n"
        "        return '{{ options.color }}{{ suffix }}';\n"
        "    }\n"
    )

    try:
        extension.process_template(definition, template, ctx, {"suffix": "!"})
    finally:
        extension.close()

    assert [p.name for p in definition.properties] == ["title", "body"]
    assert definition.properties[0].visibility == "protected"
    assert definition.methods[0].name == "getColor"
    assert "return 'blue!';" in definition.methods[0].code


def test_template_variables():
    extension = make()
    ctx = context(class_name="A", config_class={"x": 1}, config_classes={"A": {"x": 1}})

    variables = extension.template_variables(ctx)

    assert variables["class"] == "A"
    assert variables["class_name"] == "A"
    assert variables["config_class"] == {"x": 1}
    assert variables["options"]["name"] == "n"
    assert variables["extension"] is extension


def test_close_removes_template_cache():
    extension = make()
    extension.template_engine.render("x", {})
    cache_dir = extension.template_engine.cache_dir

    extension.close()
    extension.close()

    assert not cache_dir.exists()


def test_context_manager():
    with make() as extension:
        extension.template_engine.render("x", {})
        cache_dir = extension.template_engine.cache_dir
    assert not cache_dir.exists()


def test_configure_template_engine_hook():
    class Shouting(ClassExtension):
        def configure_template_engine(self, environment):
            environment.filters["shout"] = lambda value: value.upper() + "!"

    with Shouting() as extension:
        assert extension.template_engine.render("{{ 'hi' | shout }}", {}) == "HI!"
