import os

from dataclasses import dataclass
from typing import List, Optional

from posrunner.logger import logger
from posrunner.utils import generate_run_id

@dataclass(frozen=True)
class VersionMode:
    DUAL = "V1V2"
    SINGLE_VERSIONS = ["V1", "V2"]

    version: str

    def __post_init__(self):
        if self.version not in self.SINGLE_VERSIONS + [self.DUAL]:
            raise ValueError(
                "Version must be one of {}: {}".format(
                    self.SINGLE_VERSIONS + [self.DUAL],
                    self.version
                )
            )

    @classmethod
    def single(cls, version):
        if version == cls.DUAL:
            raise ValueError(f"{version} is not a single version")

        return cls(version)

    @classmethod
    def dual(cls):
        return cls(cls.DUAL)

    @classmethod
    def get_choices(cls):
        return cls.SINGLE_VERSIONS + [cls.DUAL]

    def is_dual(self):
        return self.version == self.DUAL

    def get_version(self):
        return self.version

    def get_track_labels(self):
        if self.is_dual():
            return list(self.SINGLE_VERSIONS)

        return [self.version]

class Session:
    """
    Everything that is fixed for one run: version mode, runner invocation
    prefix, suite path and where the runner writes its results.

    Single runs write to <output_root>/<run_id>, dual runs to
    <output_root>/<run_id>/V1 and <output_root>/<run_id>/V2.
    """

    def __init__(
        self,
        version_mode: VersionMode,
        suite_path: str,
        runner_prefix: List[str],
        output_root: str = "results",
        output_file: str = "output.xml",
        blacklist: Optional[List[str]] = None,
        run_id: Optional[str] = None
    ):
        if not isinstance(version_mode, VersionMode):
            raise ValueError(f"Version mode must be a VersionMode: {version_mode}")

        if not isinstance(suite_path, str) or suite_path == "":
            raise ValueError(f"Suite path must be a non-empty string: {suite_path}")

        if not isinstance(runner_prefix, list) or len(runner_prefix) == 0:
            raise ValueError(f"Runner prefix must be a non-empty list: {runner_prefix}")

        for token in runner_prefix:
            if not isinstance(token, str) or token == "":
                raise ValueError(f"Runner prefix tokens must be non-empty strings: {runner_prefix}")

        if not isinstance(output_file, str) or output_file == "":
            raise ValueError(f"Output file must be a non-empty string: {output_file}")

        self.version_mode = version_mode
        self.suite_path = suite_path
        self.runner_prefix = tuple(runner_prefix)
        self.output_root = output_root
        self.output_file = output_file
        self.blacklist = tuple(blacklist) if blacklist is not None else None
        self.run_id = run_id or generate_run_id()

        logger.debug(
            "Session {} created for {} in {} mode.".format(
                self.run_id,
                self.suite_path,
                self.version_mode.get_version()
            )
        )

    def __rich_repr__(self):
        yield "version_mode", self.version_mode
        yield "suite_path", self.suite_path
        yield "runner_prefix", self.runner_prefix
        yield "output_root", self.output_root
        yield "run_id", self.run_id

    def get_version_mode(self):
        return self.version_mode

    def is_dual(self):
        return self.version_mode.is_dual()

    def get_suite_path(self):
        return self.suite_path

    def get_runner_prefix(self):
        return list(self.runner_prefix)

    def get_blacklist(self):
        return self.blacklist

    def get_run_id(self):
        return self.run_id

    def get_run_dirpath(self):
        return os.path.join(self.output_root, self.run_id)

    def get_output_dirpath(self, label):
        if label not in self.version_mode.get_track_labels():
            raise ValueError(
                f"Track {label} does not exist in {self.version_mode.get_version()} mode"
            )

        if self.is_dual():
            return os.path.join(self.get_run_dirpath(), label)

        return self.get_run_dirpath()

    def get_output_filepath(self, label):
        return os.path.join(self.get_output_dirpath(label), self.output_file)
