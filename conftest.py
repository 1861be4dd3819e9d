import os
import sys
from pathlib import Path

import pytest

# Ensure repo root on sys.path for imports from anywhere in tests tree.
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("MOTION_EASING_MODE", "strict")
os.environ.setdefault("MOTION_DEFAULT_RESOLUTION", "1920x1080")


@pytest.fixture(autouse=True)
def fresh_services():
    from motion_engines.motion_graphics.presets import built_in_library, set_preset_library
    from motion_engines.motion_graphics.service import TimelineService, set_timeline_service
    from motion_engines.video_timeline.service import ClipTrackService, set_clip_service

    set_timeline_service(TimelineService())
    set_clip_service(ClipTrackService())
    set_preset_library(built_in_library())
    yield
