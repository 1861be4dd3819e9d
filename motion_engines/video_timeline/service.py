from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Tuple

from motion_engines.common.errors import (
    ClipNotFoundError,
    InvalidParameterError,
    InvalidSplitTimeError,
    NonContiguousClipsError,
)
from motion_engines.video_timeline.models import TRIM_TOLERANCE, Clip, ClipTrack

logger = logging.getLogger(__name__)


def _close(a: float, b: float) -> bool:
    return math.isclose(a, b, rel_tol=0.0, abs_tol=TRIM_TOLERANCE)


def split_clip(clip: Clip, at_time: float) -> Tuple[Clip, Clip]:
    """
    Cut ``clip`` at timeline time ``at_time``.
    The two halves cover exactly the timeline span and source span of ``clip``.
    """
    if not (clip.start_time < at_time < clip.end_time):
        raise InvalidSplitTimeError(
            f"Split point {at_time} outside clip bounds ({clip.start_time}, {clip.end_time})",
            details={"clip_id": clip.id, "at_time": at_time},
        )

    offset = at_time - clip.start_time
    # duration - (duration - offset) is exact, so first + second == duration
    second_duration = clip.duration - offset
    first_duration = clip.duration - second_duration
    split_point_in_source = clip.trim_in + first_duration

    # First half ends at the split
    first = clip.model_copy(
        update={"id": f"{clip.id}-1", "duration": first_duration, "trim_out": split_point_in_source}
    )
    # New clip starts at split
    second = clip.model_copy(
        update={
            "id": f"{clip.id}-2",
            "start_time": at_time,
            "duration": second_duration,
            "trim_in": split_point_in_source,
        }
    )
    return first, second


def _merged_id(first: Clip, second: Clip) -> str:
    if first.id.endswith("-1") and second.id == first.id[:-2] + "-2":
        return first.id[:-2]
    return first.id


def merge_clips(first: Clip, second: Clip) -> Clip:
    """Join two adjacent clips cut from the same source span."""
    reasons = []
    if first.track_id != second.track_id:
        reasons.append("clips are on different tracks")
    if first.source_id != second.source_id:
        reasons.append("clips reference different sources")
    if not _close(first.end_time, second.start_time):
        reasons.append("first clip does not end where the second starts")
    if not _close(first.trim_out, second.trim_in):
        reasons.append("source trims are not contiguous")
    if reasons:
        raise NonContiguousClipsError(
            f"Cannot merge {first.id} and {second.id}: {'; '.join(reasons)}",
            details={"first_id": first.id, "second_id": second.id, "reasons": reasons},
        )

    return first.model_copy(
        update={
            "id": _merged_id(first, second),
            "duration": first.duration + second.duration,
            "trim_out": second.trim_out,
        }
    )


class ClipRepository:
    def create_track(self, track: ClipTrack) -> ClipTrack:
        raise NotImplementedError

    def get_track(self, track_id: str) -> Optional[ClipTrack]:
        raise NotImplementedError

    def list_tracks(self) -> List[ClipTrack]:
        raise NotImplementedError

    def save_clip(self, clip: Clip) -> Clip:
        raise NotImplementedError

    def get_clip(self, clip_id: str) -> Optional[Clip]:
        raise NotImplementedError

    def delete_clip(self, clip_id: str) -> None:
        raise NotImplementedError


class InMemoryClipRepository(ClipRepository):
    def __init__(self) -> None:
        self.tracks: Dict[str, ClipTrack] = {}
        self.clips: Dict[str, Clip] = {}

    def create_track(self, track: ClipTrack) -> ClipTrack:
        self.tracks[track.id] = track
        return track

    def get_track(self, track_id: str) -> Optional[ClipTrack]:
        return self.tracks.get(track_id)

    def list_tracks(self) -> List[ClipTrack]:
        return list(self.tracks.values())

    def save_clip(self, clip: Clip) -> Clip:
        self.clips[clip.id] = clip
        return clip

    def get_clip(self, clip_id: str) -> Optional[Clip]:
        return self.clips.get(clip_id)

    def delete_clip(self, clip_id: str) -> None:
        self.clips.pop(clip_id, None)


class ClipTrackService:
    def __init__(self, repo: Optional[ClipRepository] = None) -> None:
        self.repo = repo or InMemoryClipRepository()

    def _require_track(self, track_id: str, editing: bool = False) -> ClipTrack:
        track = self.repo.get_track(track_id)
        if track is None:
            raise ClipNotFoundError(f"Track {track_id} not found", details={"track_id": track_id})
        if editing and track.locked:
            raise InvalidParameterError(f"Track {track_id} is locked", details={"track_id": track_id})
        return track

    def _require_clip(self, clip_id: str) -> Clip:
        clip = self.repo.get_clip(clip_id)
        if clip is None:
            raise ClipNotFoundError(f"Clip {clip_id} not found", details={"clip_id": clip_id})
        return clip

    def create_track(self, track: ClipTrack) -> ClipTrack:
        if self.repo.get_track(track.id):
            raise InvalidParameterError(f"Track with ID {track.id} already exists")
        return self.repo.create_track(track)

    def get_track(self, track_id: str) -> ClipTrack:
        return self._require_track(track_id)

    def list_tracks(self) -> List[ClipTrack]:
        return self.repo.list_tracks()

    def add_clip(self, clip: Clip) -> Clip:
        track = self._require_track(clip.track_id, editing=True)
        if self.repo.get_clip(clip.id):
            raise InvalidParameterError(f"Clip with ID {clip.id} already exists")
        self.repo.save_clip(clip)
        track.clip_ids.append(clip.id)
        logger.debug("Added clip %s to track %s", clip.id, track.id)
        return clip

    def get_clip(self, clip_id: str) -> Clip:
        return self._require_clip(clip_id)

    def list_clips(self, track_id: str) -> List[Clip]:
        track = self._require_track(track_id)
        clips = [self.repo.get_clip(cid) for cid in track.clip_ids]
        return sorted([c for c in clips if c is not None], key=lambda c: c.start_time)

    def delete_clip(self, clip_id: str) -> None:
        clip = self._require_clip(clip_id)
        track = self._require_track(clip.track_id, editing=True)
        track.clip_ids = [cid for cid in track.clip_ids if cid != clip_id]
        self.repo.delete_clip(clip_id)
        logger.debug("Deleted clip %s", clip_id)

    def split(self, clip_id: str, at_time: float) -> Tuple[Clip, Clip]:
        clip = self._require_clip(clip_id)
        track = self._require_track(clip.track_id, editing=True)
        first, second = split_clip(clip, at_time)
        for part in (first, second):
            if part.id != clip.id and self.repo.get_clip(part.id):
                raise InvalidParameterError(f"Clip with ID {part.id} already exists")

        index = track.clip_ids.index(clip_id)
        track.clip_ids[index:index + 1] = [first.id, second.id]
        self.repo.delete_clip(clip_id)
        self.repo.save_clip(first)
        self.repo.save_clip(second)
        logger.debug("Split clip %s at %s", clip_id, at_time)
        return first, second

    def merge(self, first_id: str, second_id: str) -> Clip:
        first = self._require_clip(first_id)
        second = self._require_clip(second_id)
        track = self._require_track(first.track_id, editing=True)
        merged = merge_clips(first, second)
        if merged.id not in (first.id, second.id) and self.repo.get_clip(merged.id):
            raise InvalidParameterError(f"Clip with ID {merged.id} already exists")

        index = track.clip_ids.index(first_id)
        track.clip_ids = [cid for cid in track.clip_ids if cid not in (first_id, second_id)]
        track.clip_ids.insert(min(index, len(track.clip_ids)), merged.id)
        self.repo.delete_clip(first_id)
        self.repo.delete_clip(second_id)
        self.repo.save_clip(merged)
        logger.debug("Merged clips %s and %s into %s", first_id, second_id, merged.id)
        return merged


_clip_service: Optional[ClipTrackService] = None


def get_clip_service() -> ClipTrackService:
    global _clip_service
    if _clip_service is None:
        _clip_service = ClipTrackService()
    return _clip_service


def set_clip_service(service: ClipTrackService) -> None:
    global _clip_service
    _clip_service = service
