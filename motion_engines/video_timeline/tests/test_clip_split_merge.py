import random

import pytest
from pydantic import ValidationError

from motion_engines.common.errors import (
    ClipNotFoundError,
    InvalidParameterError,
    InvalidSplitTimeError,
    NonContiguousClipsError,
)
from motion_engines.video_timeline.models import Clip, ClipTrack
from motion_engines.video_timeline.service import ClipTrackService, merge_clips, split_clip


def _clip(**kwargs):
    data = dict(id="c1", track_id="t1", source_id="a1", start_time=0, duration=10, trim_in=0, trim_out=10)
    data.update(kwargs)
    return Clip(**data)


def test_split_scenario():
    first, second = split_clip(_clip(), 4)
    assert (first.start_time, first.duration, first.trim_in, first.trim_out) == (0, 4, 0, 4)
    assert (second.start_time, second.duration, second.trim_in, second.trim_out) == (4, 6, 4, 10)
    assert (first.id, second.id) == ("c1-1", "c1-2")
    assert first.source_id == second.source_id == "a1"


def test_split_preserves_spans_with_offset_trim():
    clip = _clip(start_time=12.5, duration=7.25, trim_in=3.0, trim_out=10.25)
    first, second = split_clip(clip, 15.0)
    assert first.end_time == pytest.approx(second.start_time)
    assert first.duration + second.duration == pytest.approx(clip.duration)
    assert first.trim_out == pytest.approx(second.trim_in)
    assert second.trim_out == clip.trim_out
    assert first.trim_in == clip.trim_in


@pytest.mark.parametrize("at", [0, 10, -1, 11])
def test_split_outside_clip(at):
    with pytest.raises(InvalidSplitTimeError):
        split_clip(_clip(), at)


def test_split_then_merge_restores_clip():
    rng = random.Random(1234)
    for n in range(2000):
        start = rng.randint(0, 600_000) / 1000
        duration_ms = rng.randint(2, 120_000)
        duration = duration_ms / 1000
        trim_in = rng.randint(0, 600_000) / 1000
        clip = _clip(
            id=f"clip{n}",
            start_time=start,
            duration=duration,
            trim_in=trim_in,
            trim_out=trim_in + duration,
        )
        at = start + rng.randint(1, duration_ms - 1) / 1000

        first, second = split_clip(clip, at)
        assert first.duration + second.duration == clip.duration
        merged = merge_clips(first, second)
        assert (merged.start_time, merged.duration, merged.trim_in, merged.trim_out) == (
            clip.start_time,
            clip.duration,
            clip.trim_in,
            clip.trim_out,
        )
        assert merged == clip


def test_merge_rejects_gaps_and_mismatches():
    first, second = split_clip(_clip(), 4)
    with pytest.raises(NonContiguousClipsError):
        merge_clips(first, second.model_copy(update={"start_time": 5}))
    with pytest.raises(NonContiguousClipsError):
        merge_clips(first, second.model_copy(update={"source_id": "other"}))
    with pytest.raises(NonContiguousClipsError):
        merge_clips(first, second.model_copy(update={"track_id": "t2"}))
    with pytest.raises(NonContiguousClipsError) as excinfo:
        merge_clips(second, first)
    assert excinfo.value.details["reasons"]


def test_clip_trim_invariant():
    with pytest.raises(ValidationError):
        Clip(track_id="t1", duration=5, trim_in=0, trim_out=4)


class TestClipTrackService:
    def setup_method(self):
        self.service = ClipTrackService()
        self.service.create_track(ClipTrack(id="t1"))

    def test_split_in_place(self):
        self.service.add_clip(_clip(id="a", duration=2, trim_out=2))
        self.service.add_clip(_clip(id="b", start_time=2, duration=10, trim_out=10))
        self.service.add_clip(_clip(id="c", start_time=12, duration=1, trim_out=1))

        self.service.split("b", 6)
        assert self.service.get_track("t1").clip_ids == ["a", "b-1", "b-2", "c"]
        with pytest.raises(ClipNotFoundError):
            self.service.get_clip("b")

        merged = self.service.merge("b-1", "b-2")
        assert merged.id == "b"
        assert self.service.get_track("t1").clip_ids == ["a", "b", "c"]
        assert [c.id for c in self.service.list_clips("t1")] == ["a", "b", "c"]

    def test_invalid_split_leaves_track_alone(self):
        self.service.add_clip(_clip())
        with pytest.raises(InvalidSplitTimeError):
            self.service.split("c1", 10)
        assert self.service.get_track("t1").clip_ids == ["c1"]

    def test_locked_track(self):
        self.service.add_clip(_clip())
        self.service.get_track("t1").locked = True
        with pytest.raises(InvalidParameterError):
            self.service.split("c1", 5)
        with pytest.raises(InvalidParameterError):
            self.service.add_clip(_clip(id="c2"))

    def test_missing_track_and_clip(self):
        with pytest.raises(ClipNotFoundError):
            self.service.add_clip(_clip(track_id="nope"))
        with pytest.raises(ClipNotFoundError):
            self.service.split("ghost", 1)

    def test_delete_clip(self):
        self.service.add_clip(_clip())
        self.service.delete_clip("c1")
        assert self.service.list_clips("t1") == []
