from .card import CardRecord
from .merchant import MerchantRecord
from .catalog import Catalog
