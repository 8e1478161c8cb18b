import sys

from run_tests import build_command


class TestRunTests:
    """Test the pytest command line built by run_tests.py"""

    def test_defaults_to_tests_dir(self):
        assert build_command([]) == [sys.executable, "-m", "pytest", "--tb=short", "tests/"]

    def test_passes_selection_through(self):
        command = build_command(["-k", "click"])
        assert command[-3:] == ["tests/", "-k", "click"]

    def test_explicit_path_replaces_default(self):
        command = build_command(["tests/test_log.py::TestLogging", "-x"])
        assert "tests/" not in command
        assert command[-2:] == ["tests/test_log.py::TestLogging", "-x"]
