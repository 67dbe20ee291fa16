"""Rendering tests of the Streamlit report."""

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

import run_analysis

APP_PATH = Path(__file__).resolve().parent.parent / "app.py"


@pytest.fixture(scope="module")
def reports_dir(tmp_path_factory, raw_export):
    tmp = tmp_path_factory.mktemp("app")
    path = tmp / "indicators.xlsx"
    raw_export.to_excel(path, sheet_name="Data", index=False)
    run_analysis.run_pipeline(path, tmp / "reports", world=None, sheet_name="Data")
    return tmp / "reports"


@pytest.mark.integration
class TestReportApp:
    """Test that the report renders from the analysis artifacts."""

    def test_renders_report(self, monkeypatch, reports_dir):
        monkeypatch.setattr("wdi_clusters.utils.REPORTS_DIR", reports_dir)

        at = AppTest.from_file(str(APP_PATH), default_timeout=60).run()

        assert not at.exception
        assert not at.error
        # comparison table, members and regression summary at least
        assert len(at.dataframe) >= 3
        assert at.title[0].value == "World Bank Country Clusters"

    def test_missing_artifacts(self, monkeypatch, tmp_path):
        monkeypatch.setattr("wdi_clusters.utils.REPORTS_DIR", tmp_path)

        at = AppTest.from_file(str(APP_PATH), default_timeout=60).run()

        assert not at.exception
        assert "Report artifacts are missing" in at.error[0].value
