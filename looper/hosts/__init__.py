"""Program host implementations."""
from .recording import CrossProgramCall, RecordingHost

__all__ = ["CrossProgramCall", "RecordingHost"]
