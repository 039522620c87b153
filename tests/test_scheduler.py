import os
import sys
import tempfile
import unittest

import pandas as pd

from posrunner.plan import (
    CommandPlanBuilder,
    Selection,
    Session,
    TrackScheduler,
    V1V2Mapping,
    VersionMode,
)

CONFIG_DIR = os.path.join(os.path.dirname(__file__), "configs")

def python_prefix(code):
    return [sys.executable, "-c", code]

def build_plan(names, version="V1V2", prefix=None, output_root="results"):
    session = Session(
        VersionMode(version),
        "suite",
        prefix or ["robot"],
        output_root=output_root,
        run_id="run"
    )

    mapping = None
    if session.is_dual():
        mapping = V1V2Mapping(os.path.join(CONFIG_DIR, "mapping.csv"))

    return CommandPlanBuilder(session, mapping).build(Selection(names))

class TestFinalize(unittest.TestCase):
    def test_both_tracks_get_sibling_output_file(self):
        plan = build_plan(["Combined Auth"])
        tracks = TrackScheduler().finalize(plan)

        self.assertEqual([track.get_label() for track in tracks], ["V1", "V2"])
        self.assertEqual(plan.get_track("V1").get_tokens(), [
            "robot",
            "--test", "AUAI Onus",
            "--variable", "V1V2 TEST NAME:Combined Auth",
            "--variable", "V2 OUTPUT FILE:" + os.path.join("results", "run", "V2", "output.xml"),
            "--outputdir", os.path.join("results", "run", "V1"),
            "suite",
        ])
        self.assertEqual(
            plan.get_track("V2").get_variable("V1 OUTPUT FILE"),
            os.path.join("results", "run", "V1", "output.xml")
        )
        self.assertIsNone(plan.get_track("V2").get_variable("V2 OUTPUT FILE"))

    def test_empty_track_is_dropped(self):
        plan = build_plan(["Combined Refund"])
        tracks = TrackScheduler().finalize(plan)

        self.assertEqual([track.get_label() for track in tracks], ["V1"])
        self.assertFalse(plan.get_track("V2").is_finalized())
        self.assertIsNone(plan.get_track("V1").get_variable("V2 OUTPUT FILE"))
        self.assertEqual(plan.get_track("V1").get_output_dirpath(), os.path.join("results", "run", "V1"))

    def test_single_version_has_no_output_file_variables(self):
        plan = build_plan(["AUAI Onus"], version="V1")
        tracks = TrackScheduler().finalize(plan)

        self.assertEqual(len(tracks), 1)
        self.assertEqual(tracks[0].get_variables(), [])
        self.assertEqual(tracks[0].get_tokens()[-3:], ["--outputdir", os.path.join("results", "run"), "suite"])

    def test_scheduler_is_used_once(self):
        scheduler = TrackScheduler()
        scheduler.finalize(build_plan(["Combined Auth"]))

        self.assertEqual(scheduler.get_state(), TrackScheduler.PLANNING)
        self.assertRaises(ValueError, scheduler.finalize, build_plan(["Combined Auth"]))

class TestRun(unittest.TestCase):
    def setUp(self):
        self.tempdir = tempfile.TemporaryDirectory()
        self.output_root = os.path.join(self.tempdir.name, "results")

    def tearDown(self):
        self.tempdir.cleanup()

    def test_single_run_passes_exit_code_through(self):
        plan = build_plan(
            ["AUAI Onus"],
            version="V2",
            prefix=python_prefix("import sys; sys.exit(3)"),
            output_root=self.output_root
        )
        scheduler = TrackScheduler(cwd=self.tempdir.name)

        self.assertEqual(scheduler.run(plan), 3)
        self.assertEqual(scheduler.get_state(), TrackScheduler.DONE)
        self.assertEqual(scheduler.get_results(), [{"label": "V2", "returncode": 3}])

    def test_single_run_with_missing_runner(self):
        plan = build_plan(
            ["AUAI Onus"],
            version="V2",
            prefix=[os.path.join(self.tempdir.name, "no-such-runner")],
            output_root=self.output_root
        )

        self.assertEqual(TrackScheduler(cwd=self.tempdir.name).run(plan), 127)

    def test_single_run_with_non_executable_runner(self):
        runner = self.write_non_executable_runner()
        plan = build_plan(["AUAI Onus"], version="V2", prefix=[runner], output_root=self.output_root)
        scheduler = TrackScheduler(cwd=self.tempdir.name)

        self.assertEqual(scheduler.run(plan), 127)
        self.assertEqual(scheduler.get_state(), TrackScheduler.DONE)
        self.assertEqual(scheduler.get_results(), [{"label": "V2", "returncode": 127}])

    def test_dual_run_with_non_executable_runner(self):
        runner = self.write_non_executable_runner()
        plan = build_plan(["Combined Auth"], prefix=[runner], output_root=self.output_root)
        scheduler = TrackScheduler(cwd=self.tempdir.name)

        self.assertEqual(scheduler.run(plan), 127)
        for result in scheduler.get_results():
            with self.subTest(label=result["label"]):
                self.assertEqual(result["returncode"], 127)
                self.assertIn("Could not start the runner", result["stderr"])

    def test_execute_needs_finalized_tracks(self):
        scheduler = TrackScheduler(cwd=self.tempdir.name)

        self.assertRaises(ValueError, scheduler.execute, [])

    def write_non_executable_runner(self):
        runner = os.path.join(self.tempdir.name, "runner")
        with open(runner, "w") as f:
            f.write("#!/bin/sh\nexit 0\n")
        os.chmod(runner, 0o644)

        return runner

    def test_dual_run_waits_for_both(self):
        code = "; ".join([
            "import sys",
            "args = sys.argv[1:]",
            "print(args[args.index('--test') + 1])",
            "sys.exit(2 if 'AUAI Offus' in args else 0)",
        ])
        plan = build_plan(
            ["Combined Auth"],
            prefix=python_prefix(code),
            output_root=self.output_root
        )
        scheduler = TrackScheduler(cwd=self.tempdir.name)

        self.assertEqual(scheduler.run(plan), 2)
        self.assertEqual(scheduler.get_state(), TrackScheduler.DONE)

        results = {result["label"]: result for result in scheduler.get_results()}
        self.assertEqual(results["V1"]["returncode"], 0)
        self.assertEqual(results["V1"]["stdout"], "AUAI Onus")
        self.assertEqual(results["V2"]["returncode"], 2)
        self.assertEqual(results["V2"]["stdout"], "AUAI Offus")

    def test_dual_run_with_one_track_runs_in_foreground(self):
        plan = build_plan(
            ["Combined Void"],
            prefix=python_prefix("import sys; sys.exit(0)"),
            output_root=self.output_root
        )
        scheduler = TrackScheduler(cwd=self.tempdir.name)

        self.assertEqual(scheduler.run(plan), 0)
        self.assertEqual(scheduler.get_results(), [{"label": "V2", "returncode": 0}])

    def test_nothing_to_run(self):
        session = Session(VersionMode.dual(), "suite", ["robot"], run_id="run")
        mapping = V1V2Mapping(df=_empty_mapping())
        plan = CommandPlanBuilder(session, mapping).build(Selection(["Combined Nothing"]))

        self.assertRaises(ValueError, TrackScheduler().run, plan)

def _empty_mapping():
    return pd.DataFrame({"Test Name": ["Combined Nothing"], "V1": [""], "V2": [""]})

if __name__ == "__main__":
    unittest.main()
