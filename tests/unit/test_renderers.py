"""Unit tests for output renderers."""

import json

import pytest
from rich.console import Console

from cuda_doctor.core.compare import compare_snapshots
from cuda_doctor.core.compat import CompatibilityEngine
from cuda_doctor.core.updates import check_updates
from cuda_doctor.knowledge.compat_matrix import get_recommended_stacks, get_rule_table
from cuda_doctor.knowledge.remediation import get_remediation
from cuda_doctor.models.common import DiagnosticError
from cuda_doctor.models.report import CompatibilityMatrix, DiagnosticReport
from cuda_doctor.renderers import JSONRenderer, OutputFormat, RenderContext, TerminalRenderer, get_renderer


@pytest.fixture
def report(sample_snapshot) -> DiagnosticReport:
    return DiagnosticReport(
        snapshot=sample_snapshot,
        compatibility=CompatibilityEngine().evaluate(sample_snapshot.facts),
        errors=[DiagnosticError(code="DETECTION_FAILED", message="Could not detect framework:tensorflow")],
    )


def render_text(data, **context) -> str:
    console = Console(record=True, width=200, color_system=None)
    TerminalRenderer(console).render(data, RenderContext(**context))
    return console.export_text()


class TestJSONRenderer:
    """Tests for JSONRenderer."""

    def test_diagnostic_report(self, report):
        """Test that the report is dumped with remediation for missing keys."""
        data = json.loads(JSONRenderer().render(report, RenderContext(format=OutputFormat.JSON)))

        assert data["snapshot"]["facts"][0]["version"] == "8.6"
        assert data["compatibility"]["findings"][0]["tier"] == "supported"
        assert list(data["remediation"]) == ["framework:tensorflow"]
        assert data["remediation"]["framework:tensorflow"]["title"] == "TensorFlow not found"

    def test_remediation_per_platform(self, report):
        """Test that remediation steps follow the platform tag."""
        data = json.loads(JSONRenderer().render(report, RenderContext(platform="windows")))
        expected = get_remediation("framework:tensorflow", "windows")
        assert data["remediation"]["framework:tensorflow"]["steps"] == expected["steps"]

    def test_plain_dict(self):
        """Test rendering data that is not a model."""
        output = JSONRenderer().render({"a": 1}, RenderContext(indent=0))
        assert output == '{"a": 1}'

    def test_render_to_file(self, tmp_path, sample_snapshot):
        """Test writing output to a file."""
        path = tmp_path / "snapshot.json"
        JSONRenderer().render_to_file(sample_snapshot, RenderContext(output_path=path))
        assert json.loads(path.read_text())["hostname"] == "gpu-box"

    def test_render_to_file_needs_path(self, sample_snapshot):
        """Test that a missing output path is refused."""
        with pytest.raises(ValueError):
            JSONRenderer().render_to_file(sample_snapshot, RenderContext())


class TestTerminalRenderer:
    """Tests for TerminalRenderer."""

    def test_diagnostic_report(self, report):
        """Test the default diagnostics view."""
        text = render_text(report)

        assert "CUDA Environment" in text
        assert "535.104.05" in text
        assert "Cross-checks" in text
        assert "Overall: COMPATIBLE" in text
        assert "TensorFlow not found" in text
        assert "Probe errors" not in text

    def test_verbose_shows_errors(self, report):
        """Test that probe errors are listed in verbose mode."""
        assert "Probe errors" in render_text(report, verbose=True)

    def test_matrix(self):
        """Test the rule table view."""
        matrix = CompatibilityMatrix(rules=list(get_rule_table()), stacks=get_recommended_stacks())
        text = render_text(matrix)
        assert "Compatibility Matrix" in text
        assert "CUDA Toolkit 12.2 -> NVIDIA Driver >= 535.86" in text
        assert "Latest Stable" in text

    def test_updates(self, sample_snapshot):
        """Test the update view."""
        text = render_text(check_updates(sample_snapshot))
        assert "update available" in text
        assert "not installed" in text

    def test_comparison(self, sample_snapshot, other_snapshot):
        """Test that matching components are hidden unless verbose."""
        result = compare_snapshots(sample_snapshot, other_snapshot)
        text = render_text(result)
        assert "MISSING_IN_OTHER" in text
        assert "gpu:0" not in text
        assert "gpu:0" in render_text(result, verbose=True)

    def test_identical_comparison(self, sample_snapshot):
        """Test the summary for identical environments."""
        assert "Environments match" in render_text(compare_snapshots(sample_snapshot, sample_snapshot))

    def test_render_to_file(self, tmp_path, report):
        """Test saving the terminal view as plain text."""
        path = tmp_path / "out" / "report.txt"
        written = TerminalRenderer(Console(width=120)).render_to_file(report, RenderContext(output_path=path, color=False))

        assert written == path
        text = path.read_text()
        assert "Overall: COMPATIBLE" in text
        assert "\x1b[" not in text


class TestGetRenderer:
    """Tests for get_renderer."""

    def test_by_name(self):
        """Test looking up renderers by format name."""
        assert isinstance(get_renderer("json"), JSONRenderer)
        assert isinstance(get_renderer(OutputFormat.TERMINAL), TerminalRenderer)

    def test_unknown(self):
        """Test an unknown format name."""
        with pytest.raises(ValueError):
            get_renderer("markdown")
