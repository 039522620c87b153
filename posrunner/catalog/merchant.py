from dataclasses import dataclass
from typing import Optional

from posrunner.logger import logger

@dataclass(frozen=True)
class MerchantRecord:
    FIELDS = ["Org", "ID", "Currency", "Terminal", "Description"]

    id: str
    org: Optional[str] = None
    currency: Optional[str] = None
    terminal: Optional[str] = None
    description: Optional[str] = None

    def __rich_repr__(self):
        yield "org", self.org
        yield "id", self.id
        yield "currency", self.currency
        yield "terminal", self.terminal
        yield "description", self.description

    @classmethod
    def from_dict(cls, record, source=""):
        if not isinstance(record, dict):
            logger.error(f"Merchant record must be a table in {source}: {record}")
            raise ValueError(f"Merchant record must be a dict: {record}")

        for key in record.keys():
            if key not in cls.FIELDS:
                logger.error(f"Unknown merchant field {key} in {source}")
                raise ValueError(f"Unknown merchant field: {key}")

        values = {}
        for key in cls.FIELDS:
            value = record.get(key)

            if isinstance(value, int) and not isinstance(value, bool):
                value = str(value)

            if value is not None and not isinstance(value, str):
                logger.error(f"Merchant field {key} must be a string in {source}")
                raise ValueError(f"Merchant field {key} must be a string: {value}")

            if value == "":
                value = None

            values[key.lower()] = value

        if values["id"] is None:
            logger.error(f"Merchant record without ID in {source}: {record}")
            raise ValueError(f"Merchant ID must be a non-empty string: {record}")

        return cls(**values)

    def get_identity(self):
        return (self.org, self.id)

    def get_org(self):
        return self.org

    def get_id(self):
        return self.id

    def get_currency(self):
        return self.currency

    def get_terminal(self):
        return self.terminal

    def get_description(self):
        return self.description

    def get_label(self):
        parts = [part for part in [self.org, self.id, self.terminal, self.currency] if part]
        label = " / ".join(parts)

        if self.description:
            label = f"{label} - {self.description}"

        return label
