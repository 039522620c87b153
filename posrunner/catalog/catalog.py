from typing import Dict, List

from posrunner.errors import CatalogLookupFailure
from posrunner.logger import logger
from .card import CardRecord
from .merchant import MerchantRecord

class Catalog:
    """
    Read-only view over the cards and merchants of one session.

    Cards are grouped by network, once for on-us and once for off-us. Network
    names are compared case-insensitively and keep their order of appearance.
    """

    def __init__(
        self,
        onus_cards: Dict[str, List[CardRecord]],
        offus_cards: Dict[str, List[CardRecord]],
        merchants: List[MerchantRecord],
        version: str = ""
    ):
        self.onus_cards = self.normalise_networks(onus_cards, "on-us")
        self.offus_cards = self.normalise_networks(offus_cards, "off-us")

        if not isinstance(merchants, list):
            raise ValueError(f"Merchants must be a list: {merchants}")

        for merchant in merchants:
            if not isinstance(merchant, MerchantRecord):
                raise ValueError(f"Merchant must be a MerchantRecord: {merchant}")

        self.merchants = tuple(merchants)
        self.version = version

    def __rich_repr__(self):
        yield "onus_networks", self.get_networks(on_us=True)
        yield "offus_networks", self.get_networks(on_us=False)
        yield "merchant_count", len(self.merchants)
        yield "version", self.version

    @staticmethod
    def normalise_networks(cards_by_network, label):
        if not isinstance(cards_by_network, dict):
            raise ValueError(f"{label} cards must be a dict: {cards_by_network}")

        normalised = {}
        for network, cards in cards_by_network.items():
            if not isinstance(network, str) or network.strip() == "":
                raise ValueError(f"{label} network name must be a non-empty string: {network}")

            key = network.strip().upper()
            if key in normalised:
                raise ValueError(f"{label} network {network} is defined twice")

            for card in cards:
                if not isinstance(card, CardRecord):
                    raise ValueError(f"Card must be a CardRecord: {card}")

            normalised[key] = tuple(cards)

        return normalised

    def get_version(self):
        return self.version

    def get_networks(self, on_us=True):
        if on_us:
            return list(self.onus_cards.keys())

        return list(self.offus_cards.keys())

    def get_shared_networks(self):
        offus_networks = set(self.offus_cards.keys())
        return [
            network for network in self.onus_cards.keys()
            if network in offus_networks
        ]

    def get_cards(self, network, on_us=True):
        cards_by_network = self.onus_cards if on_us else self.offus_cards
        kind = "on-us" if on_us else "off-us"

        if not isinstance(network, str):
            raise ValueError(f"Network must be a string: {network}")

        key = network.strip().upper()
        if key not in cards_by_network:
            logger.error(f"Network {network} has no {kind} cards in the catalog.")
            raise CatalogLookupFailure(f"No {kind} cards for network {network}")

        cards = list(cards_by_network[key])
        if len(cards) == 0:
            logger.error(f"Network {network} has an empty {kind} card list.")
            raise CatalogLookupFailure(f"No {kind} cards for network {network}")

        return cards

    def get_merchants(self):
        if len(self.merchants) == 0:
            logger.error(f"No merchants configured for version {self.version}.")
            raise CatalogLookupFailure(f"No merchants for version {self.version}")

        return list(self.merchants)
