from dataclasses import dataclass
from typing import Optional

from posrunner.logger import logger

@dataclass(frozen=True)
class CardRecord:
    FIELDS = ["PAN", "Expiry", "CVV1", "CVV2", "Description"]

    pan: str
    expiry: Optional[str] = None
    cvv1: Optional[str] = None
    cvv2: Optional[str] = None
    description: Optional[str] = None

    def __rich_repr__(self):
        yield "pan", self.pan
        yield "expiry", self.expiry
        yield "cvv1", self.cvv1
        yield "cvv2", self.cvv2
        yield "description", self.description

    @classmethod
    def from_dict(cls, record, source=""):
        if not isinstance(record, dict):
            logger.error(f"Card record must be a table in {source}: {record}")
            raise ValueError(f"Card record must be a dict: {record}")

        for key in record.keys():
            if key not in cls.FIELDS:
                logger.error(f"Unknown card field {key} in {source}")
                raise ValueError(f"Unknown card field: {key}")

        pan = record.get("PAN")
        if not isinstance(pan, str) or pan.strip() == "":
            logger.error(f"Card record without PAN in {source}: {record}")
            raise ValueError(f"Card PAN must be a non-empty string: {pan}")

        values = {}
        for key in cls.FIELDS[1:]:
            value = record.get(key)

            # Expiry and CVVs are often written as bare numbers in TOML.
            if isinstance(value, int) and not isinstance(value, bool):
                value = str(value)

            if value is not None and not isinstance(value, str):
                logger.error(f"Card field {key} must be a string in {source}")
                raise ValueError(f"Card field {key} must be a string: {value}")

            if value == "":
                value = None

            values[key.lower()] = value

        return cls(pan=pan.strip(), **values)

    def get_pan(self):
        return self.pan

    def get_expiry(self):
        return self.expiry

    def get_cvv1(self):
        return self.cvv1

    def get_cvv2(self):
        return self.cvv2

    def get_description(self):
        return self.description

    def get_missing_offus_fields(self):
        missing = []
        if self.expiry is None:
            missing.append("Expiry")

        if self.cvv1 is None:
            missing.append("CVV1")

        if self.cvv2 is None:
            missing.append("CVV2")

        return missing

    def get_label(self):
        if self.description:
            return f"{self.pan} - {self.description}"

        return self.pan
