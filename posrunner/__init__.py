from .catalog import Catalog, CardRecord, MerchantRecord
from .plan import Session, VersionMode, Track, Selection

__version__ = "0.1.0"
