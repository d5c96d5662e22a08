import numpy as np
import pytest

from newsflash_reel import sequencer
from newsflash_reel.errors import EncoderError, RenderCancelled
from newsflash_reel.models import MultiImageSettings


def solid(w, h, color):
    arr = np.zeros((h, w, 3), dtype=np.uint8)
    arr[:] = color
    return arr


RED, GREEN, BLUE = (255, 0, 0), (0, 255, 0), (0, 0, 255)
SIZE = (40, 50)


class FakeOverlay:
    def render(self, size):
        return np.zeros((size[1], size[0], 4), dtype=np.uint8)


class FakeJob:
    def __init__(self, fail_encode=False):
        self.indices = []
        self.encoded = False
        self.audio_source = None
        self.fail_encode = fail_encode

    def write_frame(self, index, frame):
        self.indices.append(index)

    def extract_audio(self, source):
        self.audio_source = source
        return None

    def encode(self, fps, audio=None):
        if self.fail_encode:
            raise EncoderError("boom")
        self.encoded = True

    def read_output(self):
        return b"mp4"


def make_renderer(mode="slideshow", transition="fade", n=3):
    images = [solid(20, 25, c) for c in (RED, GREEN, BLUE)[:n]]
    settings = MultiImageSettings(video_mode=mode, image_duration=1.0, transition_type=transition)
    return sequencer.MultiImageFrameRenderer(images, settings, SIZE, fps=4)


def test_frame_counts():
    assert sequencer.frame_count(3, 30) == 90
    assert sequencer.frame_count(1.5, 24) == 36
    assert sequencer.total_frames("slideshow", 4, 3, 30) == 360
    assert sequencer.total_frames("kenburns", 2, 2, 25) == 100
    assert sequencer.total_frames("collage", 9, 3, 30) == 90


def test_frame_position():
    assert sequencer.frame_position(95, 90, 4) == (1, 5, pytest.approx(5 / 90))
    assert sequencer.frame_position(0, 90, 4) == (0, 0, 0.0)
    idx, within, _ = sequencer.frame_position(400, 90, 4)
    assert idx == 3 and within == 400 % 90


def test_slideshow_frames_and_fade_window():
    r = make_renderer()
    assert r.total_frames == 12
    assert r.n_transition == 2
    assert tuple(r.frame(0)[25, 20]) == RED
    # frame 2 starts the window at alpha 0
    assert tuple(r.frame(2)[25, 20]) == RED
    mid = r.frame(3)[25, 20]
    assert mid[0] == 128 and mid[1] == 128
    assert tuple(r.frame(4)[25, 20]) == GREEN
    # the last image has no successor and never blends
    assert tuple(r.frame(11)[25, 20]) == BLUE


def test_no_transition_is_hard_cut():
    r = make_renderer(transition="none")
    assert r.n_transition == 0
    assert tuple(r.frame(3)[25, 20]) == RED
    assert tuple(r.frame(4)[25, 20]) == GREEN


def test_single_mode_uses_first_image_only():
    r = make_renderer(mode="single")
    assert r.mode == "slideshow"
    assert len(r.images) == 1
    assert r.total_frames == 4


def test_collage_is_one_window():
    r = make_renderer(mode="collage")
    assert r.total_frames == 4
    assert r.frame(1).shape == (50, 40, 3)


def test_empty_images_rejected():
    with pytest.raises(ValueError):
        sequencer.MultiImageFrameRenderer([], MultiImageSettings(), SIZE, 4)


def test_video_overlay_renderer_samples_at_fps():
    class FakeSource:
        duration = 1.0

        def __init__(self):
            self.times = []

        def frame_at(self, t):
            self.times.append(t)
            return solid(8, 10, (int(t * 100), 0, 0))

    src = FakeSource()
    r = sequencer.VideoOverlayFrameRenderer(src, (8, 10), fps=10)
    assert r.total_frames == 10
    assert r.frame(3)[5, 4, 0] == 30
    assert src.times == [pytest.approx(0.3)]


def test_progress_monotonic_and_capped():
    seen = []
    p = sequencer.ProgressReporter(seen.append)
    p.report(10)
    p.report(5)
    p.report(150)
    p.fraction(1, 2, 0, 60)
    assert seen == [10, 99]
    p.finish()
    assert seen[-1] == 100


def test_sequencer_streams_every_frame_in_order():
    seen = []
    r = make_renderer()
    seq = sequencer.FrameSequencer(r, FakeOverlay(), 4, sequencer.ProgressReporter(seen.append))
    job = FakeJob()
    assert seq.run(job) == b"mp4"
    assert job.indices == list(range(12))
    assert job.encoded
    assert seq.state is sequencer.JobState.DONE
    assert seen == sorted(seen)
    assert seen[-1] == 60


def test_sequencer_passes_audio_source():
    seq = sequencer.FrameSequencer(make_renderer(n=1), FakeOverlay(), 4)
    job = FakeJob()
    seq.run(job, audio_source="/tmp/source.mp4")
    assert job.audio_source == "/tmp/source.mp4"


def test_sequencer_cancel_skips_encoding():
    calls = {"n": 0}

    def should_cancel():
        calls["n"] += 1
        return calls["n"] > 3

    seq = sequencer.FrameSequencer(make_renderer(), FakeOverlay(), 4, should_cancel=should_cancel)
    job = FakeJob()
    with pytest.raises(RenderCancelled):
        seq.run(job)
    assert job.indices == [0, 1, 2]
    assert not job.encoded
    assert seq.state is sequencer.JobState.CANCELLED


def test_sequencer_encoder_failure_marks_failed():
    seq = sequencer.FrameSequencer(make_renderer(), FakeOverlay(), 4)
    with pytest.raises(EncoderError):
        seq.run(FakeJob(fail_encode=True))
    assert seq.state is sequencer.JobState.FAILED
