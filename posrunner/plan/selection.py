from typing import List

from posrunner.utils import contains_marker

class Selection:
    OFFUS_MARKER = "OFFUS"
    QR_ISSUER_MARKER = "QR ISS"
    QR_ACQUIRER_MARKER = "QR ACQ"

    def __init__(self, names: List[str]):
        if isinstance(names, str) or not isinstance(names, (list, tuple)):
            raise ValueError(f"Selection must be a list of test names: {names}")

        if len(names) == 0:
            raise ValueError("Selection must not be empty")

        for name in names:
            if not isinstance(name, str) or name.strip() == "":
                raise ValueError(f"Test name must be a non-empty string: {name}")

        self.names = tuple(names)

    def __rich_repr__(self):
        yield "names", self.names
        yield "offus", self.is_offus()
        yield "onus", self.is_onus()
        yield "qr_issuer", self.is_qr_issuer()
        yield "qr_acquirer", self.is_qr_acquirer()

    def __iter__(self):
        return iter(self.names)

    def __len__(self):
        return len(self.names)

    def get_names(self):
        return list(self.names)

    def is_offus(self):
        return any(contains_marker(name, self.OFFUS_MARKER) for name in self.names)

    def is_onus(self):
        return any(not contains_marker(name, self.OFFUS_MARKER) for name in self.names)

    def is_qr_issuer(self):
        return any(contains_marker(name, self.QR_ISSUER_MARKER) for name in self.names)

    def is_qr_acquirer(self):
        return any(contains_marker(name, self.QR_ACQUIRER_MARKER) for name in self.names)
