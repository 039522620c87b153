class UserCancellation(Exception):
    """Raised when the user leaves a prompt without choosing anything."""


class ConfigDataDefect(ValueError):
    """Raised when catalog data is present but unusable for the run."""


class CatalogLookupFailure(LookupError):
    """Raised when a network, merchant list or mapping entry does not exist."""


NotFound = CatalogLookupFailure


class ExternalProcessFailure(RuntimeError):
    def __init__(self, command, returncode, stderr=""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr

        super().__init__(
            "Command {} exited with {}: {}".format(
                command,
                returncode,
                stderr.strip()
            )
        )
