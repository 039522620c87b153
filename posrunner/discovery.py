import os
import re
import subprocess

from typing import List, Optional

from posrunner.errors import ExternalProcessFailure
from posrunner.logger import logger

class TestCaseLister:
    """
    Lists the test case names of a suite.

    With a lister command configured, the command is run with the suite path
    appended and every non-empty stdout line is a test name. Otherwise the
    *.robot files under the path are read and the names in their
    '*** Test Cases ***' sections are collected.
    """

    SECTION_PATTERN = re.compile(r"^\*+\s*([^*]+?)\s*\*+\s*$")
    TEST_SECTIONS = ["test cases", "test case", "tasks", "task"]
    SUITE_EXTENSION = ".robot"

    def __init__(self, command: Optional[List[str]] = None):
        if command is not None:
            if not isinstance(command, list) or len(command) == 0:
                raise ValueError(f"Lister command must be a non-empty list: {command}")

        self.command = command

    def list(self, path) -> List[str]:
        if not os.path.exists(path):
            logger.error(f"Test suite path {path} does not exist")
            raise FileNotFoundError(f"Test suite path does not exist: {path}")

        if self.command:
            names = self.list_with_command(path)
        else:
            names = self.list_from_files(path)

        logger.debug(f"Found {len(names)} test cases in {path}")

        return names

    def list_with_command(self, path):
        command = self.command + [path]

        result = subprocess.run(command, capture_output=True, text=True)
        if result.returncode != 0:
            logger.error(
                "Test case lister exited with {}.\nstderr: {}".format(
                    result.returncode,
                    result.stderr
                )
            )
            raise ExternalProcessFailure(" ".join(command), result.returncode, result.stderr)

        return self.unique([line.strip() for line in result.stdout.splitlines() if line.strip()])

    def list_from_files(self, path):
        if os.path.isfile(path):
            filepaths = [path]

        else:
            filepaths = []
            for dirpath, dirnames, filenames in os.walk(path):
                dirnames.sort()
                for filename in sorted(filenames):
                    if filename.endswith(self.SUITE_EXTENSION):
                        filepaths.append(os.path.join(dirpath, filename))

        names = []
        for filepath in filepaths:
            with open(filepath, encoding="utf-8") as f:
                names += self.parse_suite(f.read())

        return self.unique(names)

    def parse_suite(self, text):
        names = []
        in_tests = False

        for line in text.splitlines():
            section = self.SECTION_PATTERN.match(line)
            if section:
                in_tests = section.group(1).lower() in self.TEST_SECTIONS
                continue

            if not in_tests:
                continue

            # Test names start in the first column, their steps are indented.
            if line == "" or line[0] in " \t" or line.startswith("#"):
                continue

            name = re.split(r"\s{2,}|\t", line.rstrip())[0]
            if name and name != "...":
                names.append(name)

        return names

    @staticmethod
    def unique(names):
        unique_names = []
        for name in names:
            if name not in unique_names:
                unique_names.append(name)

        return unique_names
