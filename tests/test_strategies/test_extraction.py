"""Tests for native (OpenCV) and external (ffmpeg) frame extraction."""

import math
from pathlib import Path

import cv2
import pytest

from vidsum.core.errors import ConfigurationError, TranscoderError
from vidsum.core.ordering import parse_frame_filename
from vidsum.strategies.extraction import ExternalSample, NativeSample, build_extractor


class TestNativeSample:
    @pytest.mark.parametrize("total, interval", [(25, 10), (30, 10), (7, 1), (5, 100), (0, 3)])
    def test_sample_count_is_ceil(self, fake_capture_cls, make_frames, total, interval):
        """N frames at interval k give ceil(N/k) samples."""
        sampler = NativeSample(interval, decoder=lambda p: None)
        cap = fake_capture_cls(make_frames(total))

        frames = list(sampler.sample(cap, 0, Path("v.mp4")))

        assert len(frames) == math.ceil(total / interval)
        assert [f.frame_index for f in frames] == list(range(0, total, interval))

    def test_skips_failed_seek_and_empty_frames(self, fake_capture_cls, make_frames, caplog):
        """Failed seeks and empty frames are skipped with warnings."""
        sampler = NativeSample(10, decoder=lambda p: None)
        cap = fake_capture_cls(make_frames(50), fail_seek=(10,), empty_at=(30,))

        frames = list(sampler.sample(cap, 2, Path("v.mp4")))

        assert [f.frame_index for f in frames] == [0, 20, 40]
        assert all(f.source_video_index == 2 for f in frames)
        assert len(frames) <= math.ceil(50 / 10)
        assert "Failed to seek to frame 10" in caplog.text
        assert "empty frame at index 30" in caplog.text

    def test_read_failure_stops_video(self, fake_capture_cls, make_frames):
        """A failed read ends sampling of that video."""
        sampler = NativeSample(5, decoder=lambda p: None)
        cap = fake_capture_cls(make_frames(12), frame_count=40)

        frames = list(sampler.sample(cap, 0, Path("v.mp4")))
        assert [f.frame_index for f in frames] == [0, 5, 10]

    def test_extract_writes_padded_names(self, tmp_path: Path, fake_decoder, make_frames):
        """Staged names use 3/7 digit padding."""
        decoder = fake_decoder({"clip.mp4": {"frames": make_frames(21)}})
        sampler = NativeSample(10, decoder=decoder)

        written = sampler.extract(tmp_path / "clip.mp4", 4, tmp_path)

        assert [p.name for p in written] == [
            "video004_frame0000000.jpg",
            "video004_frame0000010.jpg",
            "video004_frame0000020.jpg",
        ]
        assert all(p.exists() for p in written)
        assert [parse_frame_filename(p) for p in written] == [(4, 0), (4, 10), (4, 20)]
        image = cv2.imread(str(written[0]))
        assert image.shape == (48, 64, 3)

    def test_unopenable_video_is_skipped(self, tmp_path: Path, fake_decoder, caplog):
        """An unopenable video stages nothing."""
        sampler = NativeSample(10, decoder=fake_decoder({}))
        assert sampler.extract(tmp_path / "corrupt.mp4", 0, tmp_path) == []
        assert "Failed to open video" in caplog.text
        assert list(tmp_path.iterdir()) == []

    def test_capture_released(self, tmp_path: Path, fake_capture_cls, make_frames):
        cap = fake_capture_cls(make_frames(3))
        sampler = NativeSample(1, decoder=lambda p: cap)
        sampler.extract(tmp_path / "a.mp4", 0, tmp_path)
        assert cap.released is True

    def test_zero_interval_rejected(self):
        """NativeSample refuses an interval below 1."""
        with pytest.raises(ConfigurationError):
            NativeSample(0)


class TestExternalSample:
    def test_zero_interval_spawns_nothing(self, tmp_path: Path, monkeypatch):
        """The interval is checked before ffmpeg is spawned."""
        calls = []
        monkeypatch.setattr("vidsum.strategies.extraction.run_command", lambda cmd, **kw: calls.append(cmd))

        with pytest.raises(ConfigurationError, match="greater than 0"):
            ExternalSample(0).extract(tmp_path / "a.mp4", 0, tmp_path / "stage")
        assert calls == []

    def test_command_and_outputs(self, tmp_path: Path, monkeypatch):
        """One select-filter call; only this video's frames are returned."""
        staging = tmp_path / "stage"
        calls = []

        def _fake_run(cmd, **kwargs):
            calls.append(cmd)
            pattern = Path(next(arg for arg in cmd if arg.endswith(".jpg")))
            for n in (2, 1, 3):
                Path(str(pattern).replace("%06d", f"{n:06d}")).write_bytes(b"jpg")

        monkeypatch.setattr("vidsum.strategies.extraction.run_command", _fake_run)
        (staging).mkdir()
        (staging / "video10_frame000001.jpg").write_bytes(b"other video")

        written = ExternalSample(15, ffmpeg_binary="/opt/ffmpeg").extract(tmp_path / "a.mp4", 1, staging)

        (cmd,) = calls
        assert cmd[0] == "/opt/ffmpeg"
        assert cmd[cmd.index("-i") + 1] == str(tmp_path / "a.mp4")
        assert cmd[cmd.index("-vf") + 1] == "select=not(mod(n\\,15))"
        assert cmd[cmd.index("-vsync") + 1] == "vfr"
        assert str(staging / "video1_frame%06d.jpg") in cmd
        assert [p.name for p in written] == [
            "video1_frame000001.jpg",
            "video1_frame000002.jpg",
            "video1_frame000003.jpg",
        ]

    def test_non_zero_exit_propagates(self, tmp_path: Path, monkeypatch):
        """ffmpeg failures surface as TranscoderError."""
        def _failing(cmd, **kwargs):
            raise TranscoderError(" ".join(cmd), 1, "", "Invalid data found")

        monkeypatch.setattr("vidsum.strategies.extraction.run_command", _failing)
        with pytest.raises(TranscoderError, match="Invalid data found"):
            ExternalSample(5).extract(tmp_path / "a.mp4", 0, tmp_path / "stage")


class TestBuildExtractor:
    def test_native_by_default(self, make_config):
        assert isinstance(build_extractor(make_config()), NativeSample)

    def test_ffmpeg(self, make_config):
        extractor = build_extractor(make_config(extraction_mode="ffmpeg", ffmpeg_binary="ff"))
        assert isinstance(extractor, ExternalSample)
        assert extractor.ffmpeg_binary == "ff"
        assert extractor.interval == 10
