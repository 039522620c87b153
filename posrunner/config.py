import os
import sys

import toml

from posrunner.logger import logger
from posrunner.catalog import Catalog, CardRecord, MerchantRecord
from posrunner.plan import Session, VersionMode, V1V2Mapping

class Config:
    REQUIRED_SECTIONS = [
        "session",
        "runner",
        "cards"
    ]

    OPTIONAL_SECTIONS = [
        "merchants",
        "lister"
    ]

    SESSION_SETTINGS = [
        "version",
        "mode",
        "output_root",
        "output_file",
        "mapping_file",
        "blacklist"
    ]

    RUN_MODES = [
        "production",
        "development",
        "auto"
    ]

    CARD_KINDS = [
        "onus",
        "offus"
    ]

    def __init__(self, filename):
        self.filename = filename
        self.config = self.parse()
        self.validate_config()

    def __rich_repr__(self):
        yield "filename", self.filename
        yield "config", self.config

    def parse(self):
        logger.debug(f"Parsing config file: {self.filename}...")

        try:
            with open(self.filename) as f:
                config = toml.load(f)

        except FileNotFoundError as e:
            logger.error(
                f"Config file {self.filename} not found"
            )
            raise e

        except toml.TomlDecodeError as e:
            logger.error(
                f"Config file {self.filename} is not valid TOML: {e}"
            )
            raise ValueError(f"Invalid TOML in {self.filename}: {e}")

        return config

    def get_filename(self):
        return self.filename

    def get_config(self):
        return self.config

    def validate_config(self):
        if not self.config:
            raise ValueError(f"Config is empty: {self.filename}")

        for section in self.REQUIRED_SECTIONS:
            if section not in self.config:
                logger.error(
                    f"Section [{section}] not found in {self.filename}"
                )
                raise ValueError(f"Section {section} missing from {self.filename}")

            if not isinstance(self.config[section], dict):
                logger.error(
                    f"[{section}] must be a table in {self.filename}"
                )
                raise ValueError(f"Section {section} must be a table")

        for section in self.OPTIONAL_SECTIONS:
            if section not in self.config:
                self.config[section] = {}

        self.validate_session()
        self.validate_runner()
        self.validate_cards()
        self.validate_merchants()
        self.validate_lister()

    def validate_session(self):
        session = self.config["session"]

        for key in session.keys():
            if key not in self.SESSION_SETTINGS:
                logger.error(
                    f"Unknown setting {key} in [session] in {self.filename}"
                )
                raise ValueError(f"Unknown session setting: {key}")

        version = session.get("version")
        if version is not None and version not in VersionMode.get_choices():
            logger.error(
                "version must be one of {} in {}".format(
                    VersionMode.get_choices(),
                    self.filename
                )
            )
            raise ValueError(f"Unknown version: {version}")

        mode = session.setdefault("mode", "auto")
        if mode not in self.RUN_MODES:
            logger.error(
                f"mode must be one of {self.RUN_MODES} in {self.filename}"
            )
            raise ValueError(f"Unknown mode: {mode}")

        for key, default in [("output_root", "results"), ("output_file", "output.xml")]:
            value = session.setdefault(key, default)
            if not isinstance(value, str) or value == "":
                logger.error(
                    f"{key} must be a non-empty string in {self.filename}"
                )
                raise ValueError(f"{key} must be a non-empty string")

        if "mapping_file" in session and not isinstance(session["mapping_file"], str):
            logger.error(
                f"mapping_file must be a string in {self.filename}"
            )
            raise ValueError("mapping_file must be a string")

        if "blacklist" in session:
            self.validate_string_list(session["blacklist"], "blacklist")

    def validate_runner(self):
        runner = self.config["runner"]

        for mode in ["production", "development"]:
            if mode not in runner:
                logger.error(
                    f"Setting {mode} not found in [runner] in {self.filename}"
                )
                raise ValueError(f"Runner prefix {mode} missing")

            self.validate_string_list(runner[mode], f"runner.{mode}", allow_empty=False)

    def validate_lister(self):
        lister = self.config["lister"]

        if "command" in lister:
            self.validate_string_list(lister["command"], "lister.command", allow_empty=False)

    def validate_cards(self):
        cards = self.config["cards"]

        for kind in cards.keys():
            if kind not in self.CARD_KINDS:
                logger.error(
                    f"Unknown card kind {kind} in [cards] in {self.filename}"
                )
                raise ValueError(f"Unknown card kind: {kind}")

        for kind in self.CARD_KINDS:
            networks = cards.setdefault(kind, {})
            if not isinstance(networks, dict):
                logger.error(
                    f"[cards.{kind}] must be a table of networks in {self.filename}"
                )
                raise ValueError(f"cards.{kind} must be a table")

            for network, records in networks.items():
                if not isinstance(records, list):
                    logger.error(
                        f"cards.{kind}.{network} must be an array of tables in {self.filename}"
                    )
                    raise ValueError(f"cards.{kind}.{network} must be a list")

    def validate_merchants(self):
        merchants = self.config["merchants"]

        for version, records in merchants.items():
            if version not in VersionMode.SINGLE_VERSIONS:
                logger.error(
                    f"Unknown merchant version {version} in {self.filename}"
                )
                raise ValueError(f"Unknown merchant version: {version}")

            if not isinstance(records, list):
                logger.error(
                    f"merchants.{version} must be an array of tables in {self.filename}"
                )
                raise ValueError(f"merchants.{version} must be a list")

    def validate_string_list(self, value, name, allow_empty=True):
        if not isinstance(value, list):
            logger.error(
                f"{name} must be a list in {self.filename}"
            )
            raise ValueError(f"{name} must be a list")

        if not allow_empty and len(value) == 0:
            logger.error(
                f"{name} must have at least one value in {self.filename}"
            )
            raise ValueError(f"{name} must not be empty")

        for item in value:
            if not isinstance(item, str) or item == "":
                logger.error(
                    f"{name} must only hold non-empty strings in {self.filename}"
                )
                raise ValueError(f"{name} must only hold non-empty strings")

    def get_version(self):
        return self.config["session"].get("version")

    def get_run_mode(self):
        mode = self.config["session"]["mode"]
        if mode != "auto":
            return mode

        # Bundled executables run the bundled runner.
        if getattr(sys, "frozen", False):
            return "production"

        return "development"

    def get_runner_prefix(self):
        return list(self.config["runner"][self.get_run_mode()])

    def get_blacklist(self):
        return self.config["session"].get("blacklist")

    def get_lister_command(self):
        return self.config["lister"].get("command")

    def get_mapping_filepath(self):
        mapping_file = self.config["session"].get("mapping_file")
        if mapping_file is None:
            return None

        if os.path.isabs(mapping_file):
            return mapping_file

        return os.path.join(
            os.path.dirname(os.path.abspath(self.filename)),
            mapping_file
        )

    def get_mapping(self):
        filepath = self.get_mapping_filepath()
        if filepath is None:
            logger.error(
                f"Dual version runs need session.mapping_file in {self.filename}"
            )
            raise ValueError("session.mapping_file is not set")

        return V1V2Mapping(filepath)

    def get_session(self, suite_path, version_mode, run_id=None):
        session = self.config["session"]

        return Session(
            version_mode,
            suite_path,
            self.get_runner_prefix(),
            output_root=session["output_root"],
            output_file=session["output_file"],
            blacklist=self.get_blacklist(),
            run_id=run_id
        )

    def get_catalog(self, version_mode):
        cards = self.config["cards"]

        onus_cards = self.build_cards(cards["onus"], "onus")
        offus_cards = self.build_cards(cards["offus"], "offus")

        merchants = []
        if not version_mode.is_dual():
            version = version_mode.get_version()
            merchants = [
                MerchantRecord.from_dict(record, f"merchants.{version} in {self.filename}")
                for record in self.config["merchants"].get(version, [])
            ]

        catalog = Catalog(
            onus_cards,
            offus_cards,
            merchants,
            version=version_mode.get_version()
        )

        logger.debug(
            "Loaded {} on-us and {} off-us networks, {} merchants.".format(
                len(onus_cards),
                len(offus_cards),
                len(merchants)
            )
        )

        return catalog

    def build_cards(self, networks, kind):
        return {
            network: [
                CardRecord.from_dict(record, f"cards.{kind}.{network} in {self.filename}")
                for record in records
            ]
            for network, records in networks.items()
        }
