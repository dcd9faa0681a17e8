"""
End-to-end tests for the SliceWise facade.
"""

from slicewise import SliceWise
from slicewise.analysis.decomposition.models import Suggestion
from slicewise.config import SliceWiseConfig


def _small_project_config() -> SliceWiseConfig:
    config = SliceWiseConfig.default()
    config.detection_settings.min_community_size = 1
    config.detection_settings.target_service_count = 3
    return config


class TestBuildGraph:
    """Tests for graph construction from a source tree."""

    def test_sample_project_graph(self, sample_project):
        graph = SliceWise().build_graph(sample_project)

        assert len(graph) == 11
        assert graph.project_id == "sample_project"
        billing_to_order = graph.dependency(
            "shop.billing.service.BillingService", "shop.orders.models.Order"
        )
        assert billing_to_order is not None
        assert billing_to_order.type_references == 1
        assert billing_to_order.method_calls == 1

    def test_project_id_override(self, sample_project):
        assert SliceWise().build_graph(sample_project, project_id="shop").project_id == "shop"


class TestAnalyzeProject:
    """Tests for analyze_project."""

    def test_sample_project(self, sample_project):
        result = SliceWise(_small_project_config()).analyze_project(sample_project)

        assert result.success
        assert result.data["graph"]["classes"] == 11
        assert any("shop/legacy.py" in warning for warning in result.warnings)
        assert result.metadata["configuration"]["detection"]["min_community_size"] == 1

        suggestion = Suggestion.from_dict(result.data["suggestion"])
        members = [name for b in suggestion.boundaries for name in b.class_names]
        assert len(members) == 11
        assert len(set(members)) == 11
        assert 1 <= len(suggestion.boundaries) <= 3

    def test_default_minimum_gives_one_boundary(self, sample_project):
        result = SliceWise().analyze_project(sample_project)
        assert len(result.data["suggestion"]["boundaries"]) == 1

    def test_custom_namer(self, sample_project):
        result = SliceWise(namer=lambda cid, members: f"svc-{len(members)}").analyze_project(
            sample_project
        )
        assert result.data["suggestion"]["boundaries"][0]["suggested_name"] == "svc-11"

    def test_missing_path(self, tmp_path):
        result = SliceWise().analyze_project(tmp_path / "nowhere")
        assert not result.success
        assert "does not exist" in result.errors[0]

    def test_path_is_a_file(self, tmp_path):
        path = tmp_path / "module.py"
        path.write_text("class A:\n    pass\n")
        result = SliceWise().analyze_project(path)
        assert not result.success
        assert "not a directory" in result.errors[0]

    def test_empty_project(self, project_factory):
        root = project_factory({"README.txt": "nothing here"})
        result = SliceWise().analyze_project(root)
        assert result.success
        assert result.data["suggestion"]["boundaries"] == []
        assert "No classes found in project" in result.warnings


class TestPackageExports:
    """Tests for the lazily loaded public names."""

    def test_top_level_names(self):
        import slicewise

        assert slicewise.SliceWise.__name__ == "SliceWise"
        assert issubclass(slicewise.GraphIntegrityError, slicewise.SliceWiseError)

    def test_analysis_names(self):
        from slicewise.analysis import BoundaryDetector, DependencyGraph, GraphBuilder, Suggestion

        assert GraphBuilder("p").build([]).__class__ is DependencyGraph
        assert BoundaryDetector().detect(DependencyGraph()).__class__ is Suggestion
