from typing import List

from posrunner.utils import quote_command

class Track:
    """
    Argument list for one invocation of the test runner.

    Tokens are only ever appended. Once finalized, the output directory and
    the suite path are the last two tokens and nothing else can be added.
    """

    def __init__(self, label: str, prefix: List[str]):
        if not isinstance(label, str) or label == "":
            raise ValueError(f"Track label must be a non-empty string: {label}")

        if not isinstance(prefix, list) or len(prefix) == 0:
            raise ValueError(f"Track prefix must be a non-empty list: {prefix}")

        self.label = label
        self.tokens = list(prefix)
        self.tests = []
        self.variables = []
        self.output_dirpath = None
        self.finalized = False

    def __rich_repr__(self):
        yield "label", self.label
        yield "tests", self.tests
        yield "variables", self.variables
        yield "output_dirpath", self.output_dirpath
        yield "finalized", self.finalized

    def get_label(self):
        return self.label

    def get_tokens(self):
        return list(self.tokens)

    def get_tests(self):
        return list(self.tests)

    def get_variables(self):
        return list(self.variables)

    def get_variable(self, name):
        values = [value for key, value in self.variables if key == name]
        if len(values) == 0:
            return None

        return values[-1]

    def get_output_dirpath(self):
        return self.output_dirpath

    def has_tests(self):
        return len(self.tests) > 0

    def is_finalized(self):
        return self.finalized

    def check_open(self):
        if self.finalized:
            raise ValueError(f"Track {self.label} is already finalized")

    def add_test(self, name):
        self.check_open()

        if not isinstance(name, str) or name.strip() == "":
            raise ValueError(f"Test name must be a non-empty string: {name}")

        self.tests.append(name)
        self.tokens += ["--test", name]

        return self

    def add_variable(self, name, value):
        self.check_open()

        if not isinstance(name, str) or name == "":
            raise ValueError(f"Variable name must be a non-empty string: {name}")

        # The runner splits NAME:VALUE on the first colon.
        if ":" in name:
            raise ValueError(f"Variable name must not contain ':': {name}")

        if not isinstance(value, str):
            raise ValueError(f"Variable {name} must have a string value: {value}")

        self.variables.append((name, value))
        self.tokens += ["--variable", f"{name}:{value}"]

        return self

    def finalize(self, output_dirpath, suite_path):
        self.check_open()

        if not self.has_tests():
            raise ValueError(f"Track {self.label} has no tests to run")

        if not isinstance(output_dirpath, str) or output_dirpath == "":
            raise ValueError(f"Output dirpath must be a non-empty string: {output_dirpath}")

        if not isinstance(suite_path, str) or suite_path == "":
            raise ValueError(f"Suite path must be a non-empty string: {suite_path}")

        self.output_dirpath = output_dirpath
        self.tokens += ["--outputdir", output_dirpath, suite_path]
        self.finalized = True

        return self

    def to_command(self):
        return quote_command(self.tokens)
