from .api_client import RecognitionClient, SummaryClient
from .coordinator import RecognitionCoordinator
from .exceptions import DeviceUnavailable, MemoryHelperError, RecognitionUnavailable, SummaryUnavailable
from .frame_sampler import FrameSampler
from .types import CoordinatorState, Frame, Phase, PersonProfile, RecognitionResult

__all__ = [
    "CoordinatorState",
    "DeviceUnavailable",
    "Frame",
    "FrameSampler",
    "MemoryHelperError",
    "PersonProfile",
    "Phase",
    "RecognitionClient",
    "RecognitionCoordinator",
    "RecognitionResult",
    "RecognitionUnavailable",
    "SummaryClient",
    "SummaryUnavailable",
]
