from posrunner.catalog import Catalog, CardRecord, MerchantRecord
from posrunner.errors import CatalogLookupFailure, ConfigDataDefect, UserCancellation
from posrunner.logger import logger
from posrunner.utils import matches_any
from .builder import Plan
from .selection import Selection
from .track import Track

class VariableAttachmentEngine:
    """
    Prompts for the cards and merchant a selection needs and attaches them
    as runner variables to the tracks of a plan.

    Single version runs get every variable on their only track. Dual
    version runs put the on-us identity on V1 and the off-us card data on V2.
    """

    OFFUS_CARD_VARIABLES = [
        ("OFFUS CARD", "pan"),
        ("OFFUS CARD EXPIRY", "expiry"),
        ("OFFUS CARD CVV1", "cvv1"),
        ("OFFUS CARD CVV2", "cvv2"),
    ]
    ONUS_CARD_VARIABLE = "ONUS CARD"
    MERCHANT_VARIABLES = [
        ("MERCHANT ORG", "org"),
        ("MERCHANT ID", "id"),
        ("MERCHANT TERMINAL", "terminal"),
        ("MERCHANT CURRENCY", "currency"),
    ]
    DEFAULT_BLACKLIST = ["INCOMING", "AIAI", "AIFA", "QR"]

    def __init__(self, catalog: Catalog, picker, blacklist=None):
        if not isinstance(catalog, Catalog):
            raise ValueError(f"Catalog must be a Catalog: {catalog}")

        self.catalog = catalog
        self.picker = picker
        self.blacklist = list(blacklist) if blacklist is not None else list(self.DEFAULT_BLACKLIST)

    def get_candidate_networks(self, selection: Selection):
        if selection.is_offus() and selection.is_onus():
            return self.catalog.get_shared_networks()

        if selection.is_offus():
            return self.catalog.get_networks(on_us=False)

        return self.catalog.get_networks(on_us=True)

    def resolve_network(self, selection: Selection):
        networks = self.get_candidate_networks(selection)
        if len(networks) == 0:
            logger.error("No network in the catalog has the cards this selection needs.")
            raise CatalogLookupFailure("No candidate networks for the selection")

        network = self.picker.pick(networks, "Select Network", multi=False)
        if not network:
            raise UserCancellation("No network selected")

        logger.debug(f"Network {network} selected.")

        return network

    def pick_card(self, network, on_us, header) -> CardRecord:
        cards = self.catalog.get_cards(network, on_us=on_us)
        labels = unique_labels([card.get_label() for card in cards])

        choice = self.picker.pick(labels, header, multi=False)
        if not choice:
            raise UserCancellation(f"No card selected for '{header}'")

        return cards[labels.index(choice)]

    def pick_merchant(self) -> MerchantRecord:
        merchants = self.catalog.get_merchants()
        labels = unique_labels([merchant.get_label() for merchant in merchants])

        choice = self.picker.pick(labels, "Select Merchant", multi=False)
        if not choice:
            raise UserCancellation("No merchant selected")

        return merchants[labels.index(choice)]

    def attach(self, plan: Plan):
        if not isinstance(plan, Plan):
            raise ValueError(f"Plan must be a Plan: {plan}")

        selection = plan.get_selection()
        network = self.resolve_network(selection)

        if plan.get_session().is_dual():
            self.attach_dual(selection, network, plan.get_track("V1"), plan.get_track("V2"))

        else:
            track = plan.get_single_track()
            self.attach_single(selection, network, track)
            self.attach_merchant(selection, track)

        return plan

    def attach_single(self, selection: Selection, network, track: Track):
        if selection.is_offus():
            card = self.pick_card(network, False, "Select Off-Us Card")
            self.attach_offus_card(track, card)

        if selection.is_onus():
            card = self.pick_card(network, True, "Select On-Us Card")
            self.attach_onus_card(track, card)

        if selection.is_qr_issuer() or selection.is_qr_acquirer():
            if selection.is_qr_issuer():
                header = "Select Merchant PAN"
            else:
                header = "Select Consumer PAN"

            card = self.pick_card(network, False, header)
            self.attach_offus_card(track, card)

    def attach_dual(self, selection: Selection, network, v1_track: Track, v2_track: Track):
        if selection.is_offus():
            card = self.pick_card(network, False, "Select Off-Us Card")
            self.attach_offus_card(v2_track, card)

        if selection.is_onus():
            card = self.pick_card(network, True, "Select On-Us Card")
            self.attach_onus_card(v1_track, card)

            missing = card.get_missing_offus_fields()
            if len(missing) > 0:
                logger.error(
                    "On-us card {} has no {}.".format(
                        card.get_pan(),
                        "/".join(missing)
                    )
                )
                raise ConfigDataDefect(
                    "On-us card {} is missing {}: set up expiry/CVV1/CVV2 in the configuration".format(
                        card.get_pan(),
                        "/".join(missing)
                    )
                )

            # The V1 on-us card doubles as the V2 off-us card.
            self.attach_offus_card(v2_track, card)

    def attach_merchant(self, selection: Selection, track: Track):
        for name in selection:
            if matches_any(name, self.blacklist):
                logger.debug(f"{name} does not need a merchant.")
                continue

            merchant = self.pick_merchant()
            self.attach_merchant_fields(track, merchant)

            return True

        return False

    @classmethod
    def attach_offus_card(cls, track: Track, card: CardRecord):
        cls.attach_fields(track, card, cls.OFFUS_CARD_VARIABLES)

    @classmethod
    def attach_onus_card(cls, track: Track, card: CardRecord):
        track.add_variable(cls.ONUS_CARD_VARIABLE, card.get_pan())

    @classmethod
    def attach_merchant_fields(cls, track: Track, merchant: MerchantRecord):
        cls.attach_fields(track, merchant, cls.MERCHANT_VARIABLES)

    @staticmethod
    def attach_fields(track, record, variables):
        for variable, field in variables:
            value = getattr(record, field)

            if value is None:
                logger.warning(
                    "[{}] {} is not set in the configuration, skipping {}.".format(
                        track.get_label(),
                        field,
                        variable
                    )
                )
                continue

            track.add_variable(variable, value)

def unique_labels(labels):
    """Suffixes repeated labels with their position so each record stays pickable."""
    unique = []
    for index, label in enumerate(labels):
        if labels.count(label) > 1:
            label = f"{label} (#{index + 1})"

        unique.append(label)

    return unique
