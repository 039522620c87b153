import os
import shutil
import sys
import tempfile
import unittest

from unittest import mock

from posrunner.app import Launcher
from posrunner.config import Config
from posrunner.main import main
from posrunner.plan import TrackScheduler
from tests.fakes import ScriptedPicker

CONFIG_DIR = os.path.join(os.path.dirname(__file__), "configs")
SUITE_DIR = os.path.join(CONFIG_DIR, "suite")

RUNNER_CODE = "import sys; print(' '.join(sys.argv[1:])); sys.exit({})"

def write_config(dirpath, version, returncode=0, cvv2="456"):
    """Config whose runner is the current interpreter printing its arguments."""
    prefix = ", ".join(
        '"{}"'.format(token.replace("\\", "\\\\").replace('"', '\\"'))
        for token in [sys.executable, "-c", RUNNER_CODE.format(returncode)]
    )

    lines = [
        "[session]",
        f'version = "{version}"' if version else "",
        'mode = "development"',
        'output_root = "results"',
        'mapping_file = "mapping.csv"',
        "",
        "[runner]",
        'production = ["robot"]',
        f"development = [{prefix}]",
        "",
        "[[cards.onus.VISA]]",
        'PAN = "4761739001010010"',
        'Expiry = "2812"',
        'CVV1 = "123"',
        f'CVV2 = "{cvv2}"',
        "",
        "[[cards.offus.VISA]]",
        'PAN = "4111111111111111"',
        'Expiry = "2712"',
        'CVV1 = "321"',
        'CVV2 = "654"',
        "",
        "[[merchants.V1]]",
        'Org = "ACME"',
        'ID = "000000000012345"',
        'Terminal = "T0001"',
        'Currency = "840"',
    ]

    filepath = os.path.join(dirpath, "config.toml")
    with open(filepath, "w") as f:
        f.write("\n".join(lines) + "\n")

    shutil.copy(os.path.join(CONFIG_DIR, "mapping.csv"), dirpath)

    return filepath

class TestMain(unittest.TestCase):
    def setUp(self):
        self.tempdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tempdir.cleanup()

    def test_single_run(self):
        config_file = write_config(self.tempdir.name, "V1", returncode=5)
        picker = ScriptedPicker([[0], "VISA", 0, 0])

        returncode = main([SUITE_DIR, "--config", config_file], picker=picker)

        self.assertEqual(returncode, 5)
        self.assertEqual(picker.get_headers(), [
            "Select Test Cases",
            "Select Network",
            "Select On-Us Card",
            "Select Merchant",
        ])
        self.assertEqual(picker.calls[0]["items"][0], "AUAI Onus")
        self.assertTrue(picker.calls[0]["multi"])

    def test_dual_run(self):
        config_file = write_config(self.tempdir.name, "V1V2")
        picker = ScriptedPicker(["Combined Auth", "VISA", 0])

        self.assertEqual(main([SUITE_DIR, "--config", config_file], picker=picker), 0)
        self.assertEqual(
            picker.calls[0]["items"],
            ["Combined Auth", "Combined Refund", "Combined Void"]
        )

    def test_version_prompt_and_dry_run(self):
        config_file = write_config(self.tempdir.name, None)
        picker = ScriptedPicker(["V1V2", [2], "VISA", 0])

        self.assertEqual(main([SUITE_DIR, "--config", config_file, "--dry-run"], picker=picker), 0)
        self.assertEqual(picker.calls[0]["items"], ["V1", "V2", "V1V2"])
        self.assertFalse(os.path.exists(os.path.join(self.tempdir.name, "results")))

    def test_cancellation_exits_cleanly(self):
        config_file = write_config(self.tempdir.name, "V1")

        for i, answers in enumerate([[None], [[0], None], [[0], "VISA", None]]):
            with self.subTest(i=i):
                picker = ScriptedPicker(answers)
                self.assertEqual(main([SUITE_DIR, "--config", config_file], picker=picker), 0)

    def test_incomplete_card_exits_cleanly(self):
        config_file = write_config(self.tempdir.name, "V1V2", cvv2="")
        picker = ScriptedPicker(["Combined Auth", "VISA", 0])

        self.assertEqual(main([SUITE_DIR, "--config", config_file], picker=picker), 0)

    def test_fatal_errors(self):
        missing = os.path.join(self.tempdir.name, "missing.toml")
        self.assertEqual(main([SUITE_DIR, "--config", missing], picker=ScriptedPicker([])), 1)

        config_file = write_config(self.tempdir.name, "V1")
        missing_suite = os.path.join(self.tempdir.name, "no-suite")
        self.assertEqual(main([missing_suite, "--config", config_file], picker=ScriptedPicker([])), 1)

    def test_empty_suite_is_fatal(self):
        config_file = write_config(self.tempdir.name, "V1")
        empty_suite = os.path.join(self.tempdir.name, "empty-suite")
        os.makedirs(empty_suite)
        picker = ScriptedPicker([])

        self.assertEqual(main([empty_suite, "--config", config_file], picker=picker), 1)
        self.assertEqual(picker.calls, [])

    def test_plan_is_shown_before_running(self):
        config_file = write_config(self.tempdir.name, "V1")
        picker = ScriptedPicker([[0], "VISA", 0, 0])
        shown = []

        def record_plan(launcher, tracks):
            shown.append((launcher.get_scheduler().get_state(), [track.get_label() for track in tracks]))

        with mock.patch.object(Launcher, "show_plan", autospec=True, side_effect=record_plan):
            returncode = main([SUITE_DIR, "--config", config_file], picker=picker)

        self.assertEqual(returncode, 0)
        self.assertEqual(shown, [(TrackScheduler.PLANNING, ["V1"])])

class TestLauncher(unittest.TestCase):
    def test_plan(self):
        with tempfile.TemporaryDirectory() as dirpath:
            config = Config(write_config(dirpath, "V1V2"))
            picker = ScriptedPicker([["Combined Auth", "Combined Void"], "VISA", 0])
            launcher = Launcher(config, SUITE_DIR, picker, cwd=dirpath, run_id="run")

            plan = launcher.plan()

        self.assertEqual(plan.get_track("V1").get_tests(), ["AUAI Onus"])
        self.assertEqual(plan.get_track("V2").get_tests(), ["AUAI Offus", "VOID Offus"])
        self.assertEqual(
            [value for name, value in plan.get_track("V2").get_variables() if name == "V1V2 TEST NAME"],
            ["Combined Auth", "Combined Void"]
        )

if __name__ == "__main__":
    unittest.main()
