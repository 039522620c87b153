import os
import subprocess

from multiprocessing import Manager, Process
from typing import Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from posrunner.logger import logger
from .builder import Plan
from .track import Track

console = Console()

class TrackScheduler:
    """
    Finalizes the tracks of a plan and runs them.

    One track runs in the foreground. Two tracks run as separate background
    processes and both are always waited for, whatever their exit codes.
    """

    IDLE = "idle"
    PLANNING = "planning"
    SINGLE_RUN = "single_run"
    DUAL_RUN = "dual_run"
    DONE = "done"

    V1_OUTPUT_FILE_VARIABLE = "V1 OUTPUT FILE"
    V2_OUTPUT_FILE_VARIABLE = "V2 OUTPUT FILE"

    def __init__(self, cwd: Optional[str] = None):
        self.cwd = cwd or os.getcwd()
        self.state = self.IDLE
        self.dual = False
        self.results = []

    def __rich_repr__(self):
        yield "cwd", self.cwd
        yield "state", self.state
        yield "results", self.results

    def get_state(self):
        return self.state

    def get_results(self):
        return self.results

    def finalize(self, plan: Plan) -> List[Track]:
        if not isinstance(plan, Plan):
            raise ValueError(f"Plan must be a Plan: {plan}")

        if self.state != self.IDLE:
            raise ValueError(f"Scheduler has already been used (state={self.state})")

        self.state = self.PLANNING

        session = plan.get_session()
        self.dual = session.is_dual()
        tracks = [track for track in plan.get_tracks() if track.has_tests()]

        for track in plan.get_tracks():
            if not track.has_tests():
                logger.info(f"[{track.get_label()}] No tests selected, skipping.")

        if len(tracks) == 0:
            raise ValueError("None of the selected tests resolve to a runnable track")

        if session.is_dual() and len(tracks) == 2:
            v1_track = plan.get_track("V1")
            v2_track = plan.get_track("V2")

            v1_track.add_variable(
                self.V2_OUTPUT_FILE_VARIABLE,
                session.get_output_filepath("V2")
            )
            v2_track.add_variable(
                self.V1_OUTPUT_FILE_VARIABLE,
                session.get_output_filepath("V1")
            )

        for track in tracks:
            track.finalize(
                session.get_output_dirpath(track.get_label()),
                session.get_suite_path()
            )

        return tracks

    def run(self, plan: Plan) -> int:
        return self.execute(self.finalize(plan))

    def execute(self, tracks: List[Track]) -> int:
        if self.state != self.PLANNING:
            raise ValueError(f"Tracks must be finalized before they run (state={self.state})")

        if self.dual:
            self.state = self.DUAL_RUN
        else:
            self.state = self.SINGLE_RUN

        if len(tracks) == 1:
            returncode = self.run_single(tracks[0])

        else:
            self.results = self.run_dual(tracks)
            returncode = next(
                (result["returncode"] for result in self.results if result["returncode"] != 0),
                0
            )

        self.state = self.DONE

        return returncode

    def run_single(self, track: Track) -> int:
        logger.info(f"[{track.get_label()}] Running: {track.to_command()}")

        try:
            result = subprocess.run(track.get_tokens(), cwd=self.cwd)
            returncode = result.returncode

        except OSError as e:
            logger.error(f"[{track.get_label()}] Could not start the runner: {e}")
            returncode = 127

        self.results = [{
            "label": track.get_label(),
            "returncode": returncode,
        }]

        if returncode != 0:
            logger.warning(f"[{track.get_label()}] Runner exited with {returncode}.")

        return returncode

    def run_dual(self, tracks: List[Track]) -> List[Dict]:
        with Manager() as manager:
            shared_dict = manager.dict()
            processes = []

            for index, track in enumerate(tracks):
                logger.info(
                    "[{}/{}] [{}] Starting: {}".format(
                        index + 1,
                        len(tracks),
                        track.get_label(),
                        track.to_command()
                    )
                )

                process = Process(
                    target=run_track_in_background,
                    args=(track.get_label(), track.get_tokens(), self.cwd, shared_dict),
                    name=f"{track.get_label()}-process",
                )
                processes.append(process)
                process.start()

            # No timeout: a hung runner blocks the whole run.
            for process in processes:
                process.join()
                process.close()

            results = []
            for track in tracks:
                result = dict(shared_dict.get(track.get_label(), {}))
                result.setdefault("returncode", 1)
                result.setdefault("stdout", "")
                result.setdefault("stderr", "Process ended without reporting a result.")
                result["label"] = track.get_label()

                results.append(result)

        for result in results:
            self.report(result)

        return results

    def report(self, result):
        label = result["label"]

        output = result["stdout"]
        if result["stderr"]:
            output = f"{output}\n{result['stderr']}".strip()

        console.print(Panel(Text(output or "(no output)"), title=f"{label} output"))

        if result["returncode"] == 0:
            logger.info(f"[{label}] Runner finished successfully.")
        else:
            logger.warning(f"[{label}] Runner exited with {result['returncode']}.")

def run_track_in_background(label, tokens, cwd, shared_dict):
    try:
        result = subprocess.run(tokens, cwd=cwd, capture_output=True, text=True)
        shared_dict[label] = {
            "returncode": result.returncode,
            "stdout": result.stdout.strip(),
            "stderr": result.stderr.strip(),
        }

    except OSError as e:
        shared_dict[label] = {
            "returncode": 127,
            "stdout": "",
            "stderr": f"Could not start the runner: {e}",
        }
