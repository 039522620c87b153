from .timer import Timer
from .utils import contains_marker
from .utils import matches_any
from .utils import fuzzy_match
from .utils import generate_run_id
from .utils import quote_command

__all__ = ["Timer"]
