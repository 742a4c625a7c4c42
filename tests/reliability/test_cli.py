#!/usr/bin/env python3
"""
Tests for the evaluate_reliability CLI script.

Usage:
    pytest tests/reliability
    python tests/reliability/test_cli.py
"""

import importlib.util
import io
import json
import os
import sys
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import patch

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
_SCRIPT_PATH = os.path.join(_PROJECT_ROOT, "scripts", "evaluate_reliability.py")


def _load_cli():
    spec = importlib.util.spec_from_file_location("evaluate_reliability", _SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


EVALUATIONS = [
    {"assessmentId": "a-1", "interviewId": "I1", "evaluatorId": "alice", "score": 4},
    {"assessmentId": "a-1", "interviewId": "I1", "evaluatorId": "bob", "score": 4},
    {"assessmentId": "a-1", "interviewId": "I2", "evaluatorId": "alice", "score": 2},
    {"assessmentId": "a-1", "interviewId": "I2", "evaluatorId": "bob", "score": 3},
    {"assessmentId": "a-1", "interviewId": "I3", "evaluatorId": "alice", "score": 5},
    {"assessmentId": "a-1", "interviewId": "I3", "evaluatorId": "bob", "score": 5},
    {"assessmentId": "a-2", "interviewId": "I9", "evaluatorId": "carol", "score": 3},
]


class TestEvaluateReliabilityCli(unittest.TestCase):

    def setUp(self):
        self.cli = _load_cli()
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_path = Path(self._tmp.name)
        self.export = self.tmp_path / "evaluations.json"
        self.export.write_text(json.dumps(EVALUATIONS), encoding="utf-8")

    def tearDown(self):
        self._tmp.cleanup()

    def _run(self, *args):
        stdout, stderr = io.StringIO(), io.StringIO()
        with patch.object(sys, "argv", ["evaluate_reliability.py", *args]):
            with redirect_stdout(stdout), redirect_stderr(stderr):
                self.cli.main()
        return stdout.getvalue(), stderr.getvalue()

    def test_json_output_for_one_assessment(self):
        stdout, stderr = self._run(str(self.export), "--assessment", "a-1", "--format", "json")
        output = json.loads(stdout)

        self.assertEqual(output["assessment_id"], "a-1")
        self.assertEqual(output["status"], "ok")
        self.assertAlmostEqual(output["result"]["icc"], 0.9, places=3)
        self.assertIn("SUMMARY", stderr)

    def test_markdown_reports_written_per_assessment(self):
        out_dir = self.tmp_path / "reports"
        self._run(str(self.export), "--output", str(out_dir))

        self.assertTrue((out_dir / "reliability_a-1.md").exists())
        self.assertTrue((out_dir / "reliability_a-2.md").exists())
        summary = (out_dir / "SUMMARY_ALL_ASSESSMENTS.md").read_text(encoding="utf-8")
        self.assertIn("| a-2 | 1 | - | insufficient_evaluations | - | 0 |", summary)

    def test_missing_file_exits_with_error(self):
        with self.assertRaises(SystemExit) as ctx:
            self._run(str(self.tmp_path / "missing.json"))
        self.assertEqual(ctx.exception.code, 1)

    def test_unknown_assessment_exits_with_error(self):
        with self.assertRaises(SystemExit) as ctx:
            self._run(str(self.export), "--assessment", "nope")
        self.assertEqual(ctx.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
