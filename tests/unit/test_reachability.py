"""
可达性分析与最小化任务单元测试
"""

import zipfile
from itertools import combinations
from pathlib import Path

import pytest

from classpack.build.minifier import Minifier
from classpack.build.reachability import compute_removable, reachable_units
from classpack.build.repackager import ArchiveRepackager
from classpack.build.unit_graph import Unit, UnitGraph
from classpack.config.schema import MinifyModel
from jar_builder import build_class, class_member


def make_graph(edges):
    """edges: {类名: [引用的类名]}"""
    graph = UnitGraph()
    for name, references in edges.items():
        graph.add(Unit(name, Path("test.jar"), set(references)))
    return graph


CHAIN = {
    "a.A": ["a.B"],
    "a.B": ["a.C", "java.lang.Object"],
    "a.C": [],
    "a.D": ["a.C"],
    "a.E": ["a.E"],
}


class TestReachableUnits:
    """reachable_units 测试"""

    def test_transitive_closure(self):
        graph = make_graph(CHAIN)
        assert reachable_units(graph, ["a.A"]) == {"a.A", "a.B", "a.C"}

    def test_references_outside_graph_not_followed(self):
        graph = make_graph(CHAIN)
        assert "java.lang.Object" not in reachable_units(graph, ["a.A"])

    def test_cycle(self):
        graph = make_graph({"a.A": ["a.B"], "a.B": ["a.A"], "a.C": []})
        assert reachable_units(graph, ["a.B"]) == {"a.A", "a.B"}

    def test_unknown_entry_point_is_reachable(self):
        graph = make_graph(CHAIN)
        assert reachable_units(graph, ["x.Missing"]) == {"x.Missing"}

    def test_no_entry_points(self):
        assert reachable_units(make_graph(CHAIN), []) == set()


class TestComputeRemovable:
    """compute_removable 测试"""

    def test_removable(self):
        result = compute_removable(make_graph(CHAIN), ["a.A"])
        assert result.removable == frozenset({"a.D", "a.E"})
        assert result.is_removable("a.D")
        assert not result.is_removable("a.A")
        assert result.unresolved == []

    def test_everything_removable_without_entry_points(self):
        graph = make_graph(CHAIN)
        assert compute_removable(graph, []).removable == frozenset(graph.names())

    def test_unresolved_entry_points(self):
        result = compute_removable(make_graph(CHAIN), ["x.Missing", "a.D"])
        assert result.unresolved == ["x.Missing"]
        assert result.removable == frozenset({"a.A", "a.B", "a.E"})

    def test_removable_is_immutable(self):
        result = compute_removable(make_graph(CHAIN), ["a.A"])
        assert isinstance(result.removable, frozenset)

    def test_entry_points_never_removable(self):
        graph = make_graph(CHAIN)
        names = sorted(CHAIN)
        for size in range(len(names) + 1):
            for entry_points in combinations(names, size):
                removable = compute_removable(graph, entry_points).removable
                assert not removable & set(entry_points)

    def test_adding_entry_points_never_grows_removable(self):
        graph = make_graph(CHAIN)
        names = sorted(CHAIN)
        for entry_points in combinations(names, 2):
            base = compute_removable(graph, entry_points).removable
            for extra in names:
                extended = compute_removable(graph, list(entry_points) + [extra]).removable
                assert extended <= base

    def test_removable_plus_reachable_covers_graph(self):
        graph = make_graph(CHAIN)
        result = compute_removable(graph, ["a.D"])
        assert result.removable | (result.reachable & graph.names()) == graph.names()
        assert not result.removable & result.reachable


class TestMinifier:
    """Minifier 测试"""

    @pytest.fixture
    def classpath(self, make_jar):
        app = make_jar("app.jar", {
            "META-INF/MANIFEST.MF": b"Manifest-Version: 1.0\n",
            class_member("com.example.Main"): build_class("com.example.Main", references=["com.example.Helper"]),
            class_member("com.example.Helper"): build_class("com.example.Helper", field_types=["Lcom/lib/Lib;"]),
            class_member("com.example.Unused"): build_class("com.example.Unused"),
        })
        lib = make_jar("lib.jar", {
            class_member("com.lib.Lib"): build_class("com.lib.Lib"),
            class_member("com.lib.Dead"): build_class("com.lib.Dead", references=["com.lib.Lib"]),
            class_member("com.lib.Plugin"): build_class("com.lib.Plugin"),
            "META-INF/services/com.lib.Spi": b"com.lib.Plugin\n",
        })
        return [app, lib]

    def test_analyze(self, classpath):
        minifier = Minifier(MinifyModel(
            artifacts=["com.lib:*"],
            entry_points=["com.example.Main"],
            service_entry_points=["META-INF/services/com.lib.Spi"],
        ))
        result = minifier.analyze(classpath)

        assert minifier.entry_points == ["com.example.Main", "com.lib.Plugin"]
        assert result.removable == frozenset({"com.example.Unused", "com.lib.Dead"})

    def test_predicate(self, classpath):
        minifier = Minifier(MinifyModel(artifacts=["*:*"], entry_points=["com.example.Main"]))
        keep = minifier.create_minify_predicate(classpath)

        assert keep("com/lib/Lib.class")
        assert not keep("com/lib/Dead.class")
        assert not keep("com/lib/Plugin.class")
        assert keep("META-INF/MANIFEST.MF")
        assert keep("META-INF/services/com.lib.Spi")
        assert minifier.get_minify_predicate() is keep

    def test_predicate_before_analysis(self):
        minifier = Minifier(MinifyModel(artifacts=["*:*"]))
        with pytest.raises(RuntimeError):
            minifier.get_minify_predicate()

    def test_accept(self, make_artifact, tmp_path):
        minifier = Minifier(MinifyModel(artifacts=["com.lib:*"]))
        assert minifier.accept(make_artifact("com.lib", "lib", "1.0", tmp_path / "lib.jar"))
        assert not minifier.accept(make_artifact("com.example", "app", "1.0", tmp_path / "app.jar"))

    def test_analysis_is_idempotent(self, classpath):
        task = MinifyModel(artifacts=["*:*"], entry_points=["com.example.Main"])
        first = Minifier(task).analyze(classpath)
        second = Minifier(task).analyze(classpath)
        assert first.removable == second.removable


class TestScenario:
    """A.jar(X→Y) + B.jar(Z 未被引用)，入口点 X"""

    def test_unreferenced_class_dropped(self, make_jar, tmp_path):
        a = make_jar("A.jar", {
            class_member("p.X"): build_class("p.X", references=["p.Y"]),
            class_member("p.Y"): build_class("p.Y"),
        })
        b = make_jar("B.jar", {
            "META-INF/MANIFEST.MF": b"Manifest-Version: 1.0\n",
            class_member("q.Z"): build_class("q.Z"),
            "q/data.txt": b"payload",
        })

        minifier = Minifier(MinifyModel(artifacts=["*:*"], entry_points=["p.X"]))
        keep = minifier.create_minify_predicate([a, b])
        assert minifier.result.removable == frozenset({"q.Z"})

        repackager = ArchiveRepackager()
        repackager.repackage(a, tmp_path / "A-out.jar", keep=keep)
        repackager.repackage(b, tmp_path / "B-out.jar", keep=keep)

        with zipfile.ZipFile(tmp_path / "A-out.jar") as archive:
            assert archive.namelist() == ["p/X.class", "p/Y.class"]
        with zipfile.ZipFile(tmp_path / "B-out.jar") as archive:
            assert archive.namelist() == ["META-INF/MANIFEST.MF", "q/data.txt"]
            assert archive.read("q/data.txt") == b"payload"

    def test_versioned_override_follows_base_class(self, make_jar, tmp_path):
        jar = make_jar("mr.jar", {
            "META-INF/MANIFEST.MF": b"Manifest-Version: 1.0\nMulti-Release: true\n",
            class_member("p.X"): build_class("p.X"),
            class_member("p.Dead"): build_class("p.Dead"),
            class_member("p.Helper"): build_class("p.Helper"),
            "META-INF/versions/11/p/X.class": build_class("p.X", references=["p.Helper"]),
            "META-INF/versions/11/p/Dead.class": build_class("p.Dead"),
        })

        minifier = Minifier(MinifyModel(artifacts=["*:*"], entry_points=["p.X"]))
        keep = minifier.create_minify_predicate([jar])
        assert minifier.result.removable == frozenset({"p.Dead"})

        ArchiveRepackager().repackage(jar, tmp_path / "mr-out.jar", keep=keep)

        with zipfile.ZipFile(tmp_path / "mr-out.jar") as archive:
            assert archive.namelist() == [
                "META-INF/MANIFEST.MF",
                "p/X.class",
                "p/Helper.class",
                "META-INF/versions/11/p/X.class",
            ]
