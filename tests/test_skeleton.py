import pytest

from classforge.core import GLOBAL, ConfigurationError, Pipeline, dump_definition
from classforge.extensions import SkeletonExtension, TemplateMembersExtension
from classforge.extensions.skeleton import doc_comment


@pytest.fixture
def skeleton(output_dir):
    return SkeletonExtension({"output_dir": str(output_dir)})


def generate(extension, config_classes):
    return Pipeline([extension], config_classes).generate_containers()


def test_definition_from_config_class(skeleton):
    containers = generate(
        skeleton,
        {
            "Model\\Article": {
                "extends": "Model\\Base\\Article",
                "implements": "\\Countable",
                "abstract": True,
                "doc": "Article.",
                "constants": {"TYPE": "article"},
                "properties": {
                    "title": None,
                    "tags": {"value": ["a"], "visibility": "public", "static": True},
                },
                "methods": {
                    "getTitle": {"code": "return $this->title;"},
                    "count": {"abstract": True},
                },
            }
        },
    )

    definition = containers["Model\\Article"].get("Model\\Article")
    assert dump_definition(definition) == (
        "<?php\n"
        "\n"
        "namespace Model;\n"
        "\n"
        "/**\n"
        " * Article.\n"
        " */\n"
        "abstract class Article extends \\Model\\Base\\Article implements \\Countable\n"
        "{\n"
        "    const TYPE = 'article';\n"
        "\n"
        "    protected $title;\n"
        "    static public $tags = array(\n"
        "        0 => 'a',\n"
        "    );\n"
        "\n"
        "    public function getTitle()\n"
        "    {\n"
        "        return $this->title;\n"
        "    }\n"
        "\n"
        "    abstract public function count();\n"
        "}"
    )


def test_namespace_option_and_separators(output_dir):
    extension = SkeletonExtension({"output_dir": str(output_dir), "namespace": "App\\"})

    containers = generate(extension, {"Model.User": {}})

    assert containers["Model.User"].get("Model.User").name == "App\\Model\\User"


def test_embedded_classes_become_config_classes(skeleton):
    containers = generate(
        skeleton,
        {"Article": {"embedded": {"Comment": {"properties": {"body": ""}}}}, "User": {}},
    )

    assert list(containers) == [GLOBAL, "Article", "User", "Comment"]
    assert containers["Comment"].get("Comment").get_property("body").value == ""


def test_embedded_must_be_a_mapping(skeleton):
    with pytest.raises(ConfigurationError, match='"embedded" key of the config class "Article"'):
        generate(skeleton, {"Article": {"embedded": ["Comment"]}})

    with pytest.raises(ConfigurationError, match='embedded class "Comment"'):
        generate(skeleton, {"Article": {"embedded": {"Comment": "x"}}})


@pytest.mark.parametrize("key", ["properties", "constants", "methods"])
def test_member_keys_must_be_mappings(skeleton, key):
    with pytest.raises(ConfigurationError, match=f'"{key}" key of the config class "A"'):
        generate(skeleton, {"A": {key: ["x"]}})


def test_method_settings_must_be_a_mapping(skeleton):
    with pytest.raises(ConfigurationError, match='method "run"'):
        generate(skeleton, {"A": {"methods": {"run": "return 1;"}}})


def test_templates_add_members(skeleton):
    template = (
        "    /**\n"
        "     * Class name.\n"
        "     */\n"
        "    public $className = '{{ class_name }}';\n"
        "\n"
        "    public function describe()\n"
        "    {\n"
        "        return '{{ config_class.label }}';\n"
        "    }\n"
    )

    containers = generate(skeleton, {"User": {"label": "A user", "templates": template}})

    definition = containers["User"].get("User")
    assert definition.get_property("className").value == "User"
    assert definition.get_property("className").doc_comment == (
        "    /**\n     * Class name.\n     */"
    )
    assert definition.get_method("describe").code == "        return 'A user';"


def test_templates_from_directory(output_dir, tmp_path):
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "id.tpl").write_text("    protected $id = 0;\n")
    extension = SkeletonExtension(
        {"output_dir": str(output_dir), "template_dir": str(templates)}
    )

    containers = generate(extension, {"User": {"templates": ["id.tpl"]}})

    assert containers["User"].get("User").get_property("id").value == 0


def test_template_members_proposed_only_when_templates_given(skeleton):
    containers = generate(skeleton, {"Plain": {}})

    assert containers["Plain"].get("Plain").properties == []
    proposed = skeleton.new_class_extensions(
        _context({"templates": "    public $a;\n"})
    )
    assert isinstance(proposed[0], TemplateMembersExtension)
    assert skeleton.new_class_extensions(_context({})) is None


def _context(config_class):
    from classforge.core import HookContext, Phase

    return HookContext(
        Phase.NEW_CLASS_EXTENSIONS, {"X": config_class}, "X", config_class
    )


def test_index_class_in_global_container(output_dir):
    extension = SkeletonExtension(
        {"output_dir": str(output_dir), "index_class": "ClassIndex"}
    )

    containers = generate(extension, {"A": {}, "B": {"embedded": {"C": {}}}})

    index = containers[GLOBAL].get("ClassIndex")
    assert index.final
    assert index.get_constant("CLASSES").value == ["A", "B", "C"]


def test_full_run_writes_files(output_dir):
    extension = SkeletonExtension({"output_dir": str(output_dir)})

    Pipeline([extension], {"Model\\User": {"properties": {"name": "bob"}}}).process()

    assert (output_dir / "Model" / "User.php").read_text() == (
        "<?php\n\nnamespace Model;\n\nclass User\n{\n    protected $name = 'bob';\n}"
    )


def test_doc_comment_helper():
    assert doc_comment("One\nTwo", "    ") == "    /**\n     * One\n     * Two\n     */"
    assert doc_comment("/** kept */") == "/** kept */"


def test_index_class_dumped_without_final_keyword(output_dir):
    extension = SkeletonExtension(
        {"output_dir": str(output_dir), "index_class": "ClassIndex"}
    )

    containers = generate(extension, {"A": {}})

    assert dump_definition(containers[GLOBAL].get("ClassIndex")) == (
        "<?php\n"
        "\n"
        "/**\n"
        " * Index of the generated classes.\n"
        " */\n"
        "class ClassIndex\n"
        "{\n"
        "    const CLASSES = array(\n"
        "        0 => 'A',\n"
        "    );\n"
        "\n"
        "}"
    )
