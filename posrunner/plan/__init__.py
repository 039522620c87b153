from .session import Session, VersionMode
from .track import Track
from .selection import Selection
from .mapping import V1V2Mapping
from .builder import CommandPlanBuilder, Plan
from .attachment import VariableAttachmentEngine
from .scheduler import TrackScheduler
