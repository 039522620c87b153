import os

from typing import Optional

from rich.console import Console
from rich.table import Table

from posrunner.config import Config
from posrunner.discovery import TestCaseLister
from posrunner.errors import CatalogLookupFailure, UserCancellation
from posrunner.logger import logger
from posrunner.plan import (
    CommandPlanBuilder,
    Plan,
    Selection,
    TrackScheduler,
    VariableAttachmentEngine,
    VersionMode,
)

console = Console()

class Launcher:
    """
    One interactive run: resolve the version, let the user pick tests,
    attach card and merchant variables, then run the resulting tracks.
    """

    def __init__(
        self,
        config: Config,
        suite_path: str,
        picker,
        lister: Optional[TestCaseLister] = None,
        cwd: Optional[str] = None,
        run_id: Optional[str] = None
    ):
        self.config = config
        self.suite_path = suite_path
        self.picker = picker
        self.lister = lister or TestCaseLister(config.get_lister_command())
        self.cwd = cwd or os.getcwd()
        self.run_id = run_id
        self.scheduler = TrackScheduler(cwd=self.cwd)

    def get_scheduler(self):
        return self.scheduler

    def resolve_version_mode(self):
        version = self.config.get_version()

        if version is None:
            version = self.picker.pick(VersionMode.get_choices(), "Select Version", multi=False)
            if not version:
                raise UserCancellation("No version selected")

        return VersionMode(version)

    def select_tests(self, session, mapping=None):
        if session.is_dual():
            names = mapping.get_names()
        else:
            names = self.lister.list(session.get_suite_path())

        if len(names) == 0:
            raise CatalogLookupFailure(f"No test cases found in {session.get_suite_path()}")

        chosen = self.picker.pick(names, "Select Test Cases", multi=True)
        if not chosen:
            raise UserCancellation("No test cases selected")

        if isinstance(chosen, str):
            chosen = [chosen]

        logger.info(f"Selected {len(chosen)} test case(s).")

        return Selection(chosen)

    def plan(self) -> Plan:
        version_mode = self.resolve_version_mode()
        session = self.config.get_session(self.suite_path, version_mode, run_id=self.run_id)
        catalog = self.config.get_catalog(version_mode)

        mapping = None
        if session.is_dual():
            mapping = self.config.get_mapping()

        selection = self.select_tests(session, mapping)

        builder = CommandPlanBuilder(session, mapping)
        plan = builder.build(selection)

        engine = VariableAttachmentEngine(catalog, self.picker, blacklist=session.get_blacklist())
        engine.attach(plan)

        return plan

    def show_plan(self, tracks):
        table = Table(title="Planned runs")
        table.add_column("Track", style="cyan")
        table.add_column("Tests")
        table.add_column("Variables")
        table.add_column("Output")

        for track in tracks:
            table.add_row(
                track.get_label(),
                "\n".join(track.get_tests()),
                "\n".join(f"{name}: {value}" for name, value in track.get_variables()),
                track.get_output_dirpath() or ""
            )

        console.print(table)

    def run(self, dry_run=False) -> int:
        plan = self.plan()

        tracks = self.scheduler.finalize(plan)
        self.show_plan(tracks)

        if dry_run:
            for track in tracks:
                console.print(f"[{track.get_label()}] {track.to_command()}", markup=False)

            return 0

        returncode = self.scheduler.execute(tracks)
        logger.info(f"Run {plan.get_session().get_run_id()} finished with exit code {returncode}.")

        return returncode
