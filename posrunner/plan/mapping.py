import pandas as pd

from typing import Optional, Tuple

from posrunner.errors import CatalogLookupFailure
from posrunner.logger import logger

class V1V2Mapping:
    """
    Combined test names and the V1/V2 test cases they stand for.

    The table is a CSV file with the columns "Test Name", "V1" and "V2". A
    blank V1 or V2 cell means the combined test has no counterpart on that
    side.
    """

    NAME_COLUMN = "Test Name"
    V1_COLUMN = "V1"
    V2_COLUMN = "V2"
    REQUIRED_COLUMNS = [NAME_COLUMN, V1_COLUMN, V2_COLUMN]

    def __init__(self, filepath: str = "", df: Optional[pd.DataFrame] = None):
        self.filepath = filepath

        if df is None:
            df = self.read()

        self.df = self.validate(df)

    def __rich_repr__(self):
        yield "filepath", self.filepath
        yield "names", self.get_names()

    def read(self):
        logger.debug(f"Reading V1V2 mapping from {self.filepath}...")

        try:
            df = pd.read_csv(self.filepath, dtype=str, keep_default_na=False)

        except FileNotFoundError as e:
            logger.error(f"V1V2 mapping file {self.filepath} not found")
            raise e

        except pd.errors.EmptyDataError:
            logger.error(f"V1V2 mapping file {self.filepath} is empty")
            raise ValueError(f"V1V2 mapping file is empty: {self.filepath}")

        return df

    def validate(self, df):
        if not isinstance(df, pd.DataFrame):
            raise ValueError(f"Mapping must be a DataFrame: {df}")

        for column in self.REQUIRED_COLUMNS:
            if column not in df.columns:
                logger.error(f"Column {column} not found in V1V2 mapping {self.filepath}")
                raise ValueError(f"Column {column} missing from V1V2 mapping")

        df = df[self.REQUIRED_COLUMNS].fillna("").astype(str)
        df = df.apply(lambda column: column.str.strip())
        df = df[df[self.NAME_COLUMN] != ""].reset_index(drop=True)

        duplicates = df[df[self.NAME_COLUMN].duplicated()][self.NAME_COLUMN].tolist()
        if len(duplicates) > 0:
            logger.error(f"Duplicate test names in V1V2 mapping {self.filepath}: {duplicates}")
            raise ValueError(f"Duplicate test names in V1V2 mapping: {duplicates}")

        if len(df.index) == 0:
            raise ValueError(f"V1V2 mapping has no test names: {self.filepath}")

        logger.debug(f"Found {len(df.index)} combined test names.")

        return df

    def get_names(self):
        return self.df[self.NAME_COLUMN].tolist()

    def resolve(self, name) -> Tuple[Optional[str], Optional[str]]:
        rows = self.df[self.df[self.NAME_COLUMN] == name]
        if len(rows.index) == 0:
            logger.error(f"{name} is not in the V1V2 mapping.")
            raise CatalogLookupFailure(f"No V1V2 mapping for {name}")

        row = rows.iloc[0]
        v1_name = row[self.V1_COLUMN] or None
        v2_name = row[self.V2_COLUMN] or None

        return v1_name, v2_name
