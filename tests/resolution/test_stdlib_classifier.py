"""Tests for the standard-library classifier process client."""

import io
import sys
import threading
from unittest.mock import MagicMock
from unittest.mock import patch

import pytest

from pydeps_resolver.errors import ClassifierError
from pydeps_resolver.resolution.stdlib import StdlibClassifier


def _fake_process(replies):
    process = MagicMock()
    process.poll.return_value = None
    process.stdin = io.StringIO()
    process.stdout = io.StringIO("".join(f"{r}\n" for r in replies))
    return process


class TestWithFakeProcess:
    def test_answers_are_memoized(self):
        process = _fake_process(["true"])
        with patch("pydeps_resolver.resolution.stdlib.subprocess.Popen", return_value=process) as popen:
            classifier = StdlibClassifier("python3")

            assert classifier.is_standard_library("os.path") is True
            assert classifier.is_standard_library("os.path") is True

        popen.assert_called_once()
        assert process.stdin.getvalue() == "os.path\n"

    def test_process_started_with_configured_interpreter(self):
        process = _fake_process(["false"])
        with patch("pydeps_resolver.resolution.stdlib.subprocess.Popen", return_value=process) as popen:
            assert StdlibClassifier("/opt/py/bin/python").is_standard_library("numpy") is False

        cmd = popen.call_args.args[0]
        assert cmd[0] == "/opt/py/bin/python"
        assert cmd[1] == "-c"

    def test_missing_interpreter_is_classifier_error(self):
        with patch(
            "pydeps_resolver.resolution.stdlib.subprocess.Popen",
            side_effect=FileNotFoundError("no such file"),
        ):
            with pytest.raises(ClassifierError, match="Cannot start"):
                StdlibClassifier("missing-python").is_standard_library("os")

    def test_process_without_pipes_is_classifier_error(self):
        process = _fake_process([])
        process.stdin = None
        with patch("pydeps_resolver.resolution.stdlib.subprocess.Popen", return_value=process):
            with pytest.raises(ClassifierError, match="pipes"):
                StdlibClassifier("python3").is_standard_library("os")

    def test_empty_reply_is_classifier_error(self):
        process = _fake_process([])
        process.poll.side_effect = [None, 1]
        with patch("pydeps_resolver.resolution.stdlib.subprocess.Popen", return_value=process):
            with pytest.raises(ClassifierError, match="no answer"):
                StdlibClassifier("python3").is_standard_library("os")

    def test_dead_process_is_not_restarted(self):
        process = _fake_process(["true"])
        with patch("pydeps_resolver.resolution.stdlib.subprocess.Popen", return_value=process) as popen:
            classifier = StdlibClassifier("python3")
            classifier.is_standard_library("os")
            process.poll.return_value = 1
            process.returncode = 1

            with pytest.raises(ClassifierError, match="exited"):
                classifier.is_standard_library("sys")

        popen.assert_called_once()


class TestWithRealInterpreter:
    @pytest.fixture
    def classifier(self):
        with StdlibClassifier(sys.executable) as classifier:
            yield classifier

    @pytest.mark.parametrize("name", ["os", "os.path", "collections.abc", "json.decoder.JSONDecodeError", "sys"])
    def test_standard_library(self, classifier, name):
        assert classifier.is_standard_library(name) is True

    @pytest.mark.parametrize("name", ["numpy", "requests.adapters", "mycompany.internal"])
    def test_not_standard_library(self, classifier, name):
        assert classifier.is_standard_library(name) is False

    def test_concurrent_queries_share_one_process(self, classifier):
        names = ["os", "numpy", "re", "yaml", "json", "click"] * 5
        answers = {}

        def ask(name):
            answers[name] = classifier.is_standard_library(name)

        threads = [threading.Thread(target=ask, args=(n,)) for n in names]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert answers == {"os": True, "numpy": False, "re": True, "yaml": False, "json": True, "click": False}
