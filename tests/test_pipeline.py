import dataclasses

import pytest

from classforge.core import (
    GLOBAL,
    ClassExtension,
    ConfigurationError,
    CycleError,
    Definition,
    Extension,
    NotFoundError,
    Pipeline,
)

from .conftest import DefiningExtension, RecordingClassExtension, RecordingExtension


class ProposingExtension(Extension):
    """Proposes config classes through the ``propose`` callable option."""

    def setup(self):
        self.add_required_option("propose")
        self.add_option("log")

    def new_config_classes(self, ctx):
        return self.get_option("propose")(ctx)

    def config_class_process(self, ctx):
        if self.get_option("log") is not None:
            self.get_option("log").append((ctx.class_name, dict(ctx.config_class)))


class ForeverClassExtension(ClassExtension):
    """Always proposes a brand new instance of itself."""

    calls = 0

    def new_class_extensions(self, ctx):
        ForeverClassExtension.calls += 1
        return [ForeverClassExtension()]


class ProposeOnce(Extension):
    def setup(self):
        self.add_required_option("proposals")

    def new_class_extensions(self, ctx):
        return self.get_option("proposals")


def test_containers_global_first_then_classes(log):
    pipeline = Pipeline([RecordingExtension({"log": log})], {"A": {}, "B": {}})

    containers = pipeline.generate_containers()

    assert list(containers) == [GLOBAL, "A", "B"]


def test_hook_order(log):
    e1 = RecordingExtension({"log": log, "label": "e1"})
    e2 = RecordingExtension({"log": log, "label": "e2"})

    Pipeline([e1, e2], {"A": {}, "B": {}}).generate_containers()

    # every new_config_classes call is followed by a sweep that expands the
    # config classes still without a chain, so B is handled inside A's walk
    expected = [
        ("e1", "new_class_extensions", "A"),
        ("e2", "new_class_extensions", "A"),
        ("e1", "new_config_classes", "A"),
        ("e1", "new_class_extensions", "B"),
        ("e2", "new_class_extensions", "B"),
        ("e1", "new_config_classes", "B"),
        ("e2", "new_config_classes", "B"),
        ("e2", "new_config_classes", "A"),
    ]
    for name in ("A", "B"):
        expected += [("e1", "config_class_process", name), ("e2", "config_class_process", name)]
    expected += [("e1", "pre_global_process", None), ("e2", "pre_global_process", None)]
    for name in ("A", "B"):
        expected += [("e1", "class_process", name), ("e2", "class_process", name)]
    expected += [("e1", "post_global_process", None), ("e2", "post_global_process", None)]
    assert log == expected


def test_class_extensions_expanded_depth_first(log):
    c2 = RecordingClassExtension({"log": log, "label": "c2"})
    c1 = RecordingClassExtension({"log": log, "label": "c1", "proposals": [c2]})
    e1 = RecordingExtension({"log": log, "label": "e1", "proposals": {"A": [c1]}})
    e2 = RecordingExtension({"log": log, "label": "e2"})

    Pipeline([e1, e2], {"A": {}}).generate_containers()

    asked = [label for label, hook, _ in log if hook == "new_class_extensions"]
    processed = [label for label, hook, _ in log if hook == "class_process"]
    assert asked == ["e1", "c1", "c2", "e2"]
    assert processed == ["e1", "e2", "c1", "c2"]


def test_global_extension_instances_shared_by_every_chain(log):
    chains = {}

    class ChainRecorder(Extension):
        def new_class_extensions(self, ctx):
            chains[ctx.class_name] = ctx.chain

    extension = ChainRecorder()
    Pipeline([extension], {"A": {}, "B": {}}).generate_containers()

    assert chains["A"][0] is extension
    assert chains["B"][0] is extension


def test_same_class_extension_may_serve_several_classes(log):
    shared = RecordingClassExtension({"log": log, "label": "shared"})
    e = RecordingExtension({"log": log, "proposals": {"A": [shared], "B": [shared]}})

    Pipeline([e], {"A": {}, "B": {}}).generate_containers()

    assert ("shared", "class_process", "A") in log
    assert ("shared", "class_process", "B") in log


def test_pre_and_post_global_see_global_container(output_dir):
    class Globals(Extension):
        def pre_global_process(self, ctx):
            ctx.container.set("Pre", Definition("Pre"))

        def class_process(self, ctx):
            assert not ctx.container.exists("Pre")

        def post_global_process(self, ctx):
            ctx.container.set("Post", Definition("Post"))

    containers = Pipeline([Globals()], {"A": {}}).generate_containers()

    assert [name for name, _ in containers[GLOBAL].all()] == ["Pre", "Post"]
    assert containers["A"].size() == 0


def test_proposing_a_global_extension_is_rejected():
    extension = ProposeOnce({"proposals": [Extension()]})

    with pytest.raises(ConfigurationError, match="instance of Extension"):
        Pipeline([extension], {"A": {}}).generate_containers()


def test_proposing_a_non_extension_is_rejected():
    extension = ProposeOnce({"proposals": ["nope"]})

    with pytest.raises(ConfigurationError, match="not an instance of ClassExtension"):
        Pipeline([extension], {"A": {}}).generate_containers()


def test_self_proposal_is_a_cycle():
    class Selfish(ClassExtension):
        def new_class_extensions(self, ctx):
            return [self]

    with pytest.raises(CycleError):
        Pipeline([ProposeOnce({"proposals": [Selfish()]})], {"A": {}}).generate_containers()


def test_mutual_class_extension_cycle():
    class Ping(ClassExtension):
        partner = None

        def new_class_extensions(self, ctx):
            return [self.partner]

    a, b = Ping(), Ping()
    a.partner, b.partner = b, a

    with pytest.raises(CycleError):
        Pipeline([ProposeOnce({"proposals": [a]})], {"A": {}}).generate_containers()


def test_fresh_instance_proposals_stop_at_max_depth():
    counts = []
    for _ in range(2):
        ForeverClassExtension.calls = 0
        pipeline = Pipeline(
            [ProposeOnce({"proposals": [ForeverClassExtension()]})],
            {"A": {}},
            max_depth=5,
        )
        with pytest.raises(CycleError, match="max depth 5"):
            pipeline.generate_containers()
        counts.append(ForeverClassExtension.calls)

    assert counts == [4, 4]


def test_invalid_max_depth():
    with pytest.raises(ConfigurationError):
        Pipeline(max_depth=0)


def test_proposed_config_classes_expanded_after_pending_ones():
    asked = []

    def propose(ctx):
        asked.append(ctx.class_name)
        if ctx.class_name == "A":
            return {"A_child": {"from": "A"}}

    containers = Pipeline(
        [ProposingExtension({"propose": propose})], {"A": {}, "B": {}}
    ).generate_containers()

    assert asked == ["A", "B", "A_child"]
    assert list(containers) == [GLOBAL, "A", "B", "A_child"]


def test_proposals_of_later_classes_follow_set_order():
    asked = []

    def propose(ctx):
        asked.append(ctx.class_name)
        return {"A": {"A1": {}}, "B": {"B1": {}}, "A1": {"A2": {}}}.get(ctx.class_name)

    containers = Pipeline(
        [ProposingExtension({"propose": propose})], {"A": {}, "B": {}}
    ).generate_containers()

    assert asked == ["A", "B", "A1", "B1", "A2"]
    assert list(containers) == [GLOBAL, "A", "B", "A1", "B1", "A2"]


def test_many_classes_do_not_count_as_depth():
    def propose(ctx):
        if ctx.class_name == "root":
            return {f"child{i}": {} for i in range(10)}

    config_classes = {f"input{i}": {} for i in range(10)}
    config_classes["root"] = {}

    containers = Pipeline(
        [ProposingExtension({"propose": propose})], config_classes, max_depth=3
    ).generate_containers()

    assert len(containers) == 1 + 11 + 10


def test_self_proposed_config_class_is_a_cycle():
    def propose(ctx):
        return {ctx.class_name: {}}

    with pytest.raises(CycleError):
        Pipeline([ProposingExtension({"propose": propose})], {"A": {}}).generate_containers()


def test_mutual_config_class_cycle():
    def propose(ctx):
        return {"B": {}} if ctx.class_name == "A" else {"A": {}}

    with pytest.raises(CycleError) as info:
        Pipeline([ProposingExtension({"propose": propose})], {"A": {}}).generate_containers()

    assert info.value.path == ["A", "B", "A"]


def test_ever_new_config_classes_stop_at_max_depth():
    def propose(ctx):
        return {ctx.class_name + "x": {}}

    pipeline = Pipeline(
        [ProposingExtension({"propose": propose})], {"A": {}}, max_depth=3
    )

    with pytest.raises(CycleError, match="max depth 3"):
        pipeline.generate_containers()


def test_reproposed_existing_class_is_overwritten_not_reexpanded():
    seen = []

    def propose(ctx):
        if ctx.class_name == "A":
            return {"B": {"v": 2}}

    extension = ProposingExtension({"propose": propose, "log": seen})
    containers = Pipeline([extension], {"B": {"v": 1}, "A": {}}).generate_containers()

    assert list(containers) == [GLOBAL, "B", "A"]
    assert ("B", {"v": 2}) in seen


def test_config_class_mutation_visible_later_and_frozen_afterwards(log):
    results = {}

    class Mutator(Extension):
        def config_class_process(self, ctx):
            ctx.config_class["touched"] = True

        def class_process(self, ctx):
            results["touched"] = ctx.config_class["touched"]
            try:
                ctx.config_class["late"] = True
            except TypeError:
                results["frozen"] = True

    Pipeline([Mutator()], {"A": {}}).generate_containers()

    assert results == {"touched": True, "frozen": True}


def test_input_config_classes_not_mutated():
    class Mutator(Extension):
        def config_class_process(self, ctx):
            ctx.config_class["fields"].append("extra")

    config_classes = {"A": {"fields": ["id"]}}
    Pipeline([Mutator()], config_classes).generate_containers()

    assert config_classes == {"A": {"fields": ["id"]}}


def test_hook_context_is_frozen():
    errors = []

    class Tamper(Extension):
        def class_process(self, ctx):
            try:
                ctx.class_name = "other"
            except dataclasses.FrozenInstanceError as e:
                errors.append(e)

    Pipeline([Tamper()], {"A": {}}).generate_containers()

    assert len(errors) == 1


def test_failure_aborts_and_releases_template_cache():
    cache_dirs = []

    class Failing(Extension):
        def class_process(self, ctx):
            self.template_engine.render("x", {})
            cache_dirs.append(self.template_engine.cache_dir)
            raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        Pipeline([Failing()], {"A": {}}).generate_containers()

    assert len(cache_dirs) == 1
    assert not cache_dirs[0].exists()


def test_process_writes_nothing_on_failure(output_dir):
    class Failing(Extension):
        def post_global_process(self, ctx):
            raise RuntimeError("boom")

    pipeline = Pipeline(
        [DefiningExtension({"output_dir": str(output_dir)}), Failing()], {"A": {}}
    )

    with pytest.raises(RuntimeError):
        pipeline.process()

    assert not output_dir.exists()


def test_process_writes_definitions(output_dir):
    pipeline = Pipeline(
        [DefiningExtension({"output_dir": str(output_dir)})], {"Model\\A": {}, "B": {}}
    )

    report = pipeline.process()

    assert sorted(report.written) == sorted(
        [output_dir / "Model" / "A.php", output_dir / "B.php"]
    )
    assert (output_dir / "Model" / "A.php").read_text().startswith("<?php\n\nnamespace Model;")


def test_run_replaces_inputs(log):
    pipeline = Pipeline([RecordingExtension({"log": log})], {"A": {}})

    containers = pipeline.run({"X": {}})

    assert list(containers) == [GLOBAL, "X"]


def test_global_name_is_reserved():
    with pytest.raises(ConfigurationError):
        Pipeline(config_classes={GLOBAL: {}})

    def propose(ctx):
        return {GLOBAL: {}}

    with pytest.raises(ConfigurationError):
        Pipeline([ProposingExtension({"propose": propose})], {"A": {}}).generate_containers()


def test_config_class_accessors():
    pipeline = Pipeline()
    pipeline.set_config_class("A", {"x": 1})

    assert pipeline.has_config_class("A")
    assert pipeline.get_config_class("A") == {"x": 1}
    assert pipeline.config_classes == {"A": {"x": 1}}
    with pytest.raises(NotFoundError) as info:
        pipeline.get_config_class("B")
    assert info.value.kind == "config class"


def test_add_extension_requires_global_extension():
    pipeline = Pipeline()

    with pytest.raises(ConfigurationError):
        pipeline.add_extension(ClassExtension())

    extension = Extension()
    pipeline.add_extension(extension)
    assert pipeline.extensions == [extension]
