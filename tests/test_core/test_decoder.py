"""Tests for AudioDecoder and AsyncAudioDecoder using real files on disk."""

import asyncio
import io
import logging

import numpy as np
import pytest
import soundfile as sf

from contour.core.decoder import (
    AsyncAudioDecoder,
    AudioDecoder,
    create_audio_decoder,
    describe,
)
from contour.utils.errors import DecodeError, FileTooLargeError, UnsupportedFormatError


def sine(duration, sr, hz=220.0, amplitude=0.5):
    t = np.arange(int(duration * sr)) / sr
    return (amplitude * np.sin(2 * np.pi * hz * t)).astype(np.float32)


@pytest.fixture
def wav_file(tmp_path):
    """Two seconds of 220 Hz at 16 kHz."""
    path = tmp_path / "tone.wav"
    sf.write(path, sine(2.0, 16000), 16000)
    return path


class TestDecode:
    def test_native_rate(self, wav_file):
        source = AudioDecoder(target_sr=None).decode(wav_file)

        assert source.sample_rate == 16000
        assert source.num_samples == 32000
        assert source.duration == pytest.approx(2.0)
        assert source.samples.dtype == np.float32
        assert source.origin == str(wav_file)

    def test_resamples_to_target_rate(self, wav_file):
        source = AudioDecoder(target_sr=8000).decode(wav_file)

        assert source.sample_rate == 8000
        assert source.duration == pytest.approx(2.0, abs=0.01)

    def test_stereo_is_downmixed(self, tmp_path):
        path = tmp_path / "stereo.wav"
        mono = sine(1.0, 8000)
        sf.write(path, np.stack([mono, mono], axis=1), 8000)

        source = AudioDecoder(target_sr=None).decode(path)

        assert source.samples.ndim == 1
        assert source.num_samples == 8000

    def test_clipping_is_normalized(self, tmp_path):
        path = tmp_path / "hot.wav"
        sf.write(path, sine(0.5, 8000, amplitude=2.0), 8000, subtype="FLOAT")

        source = AudioDecoder(target_sr=None).decode(path)

        assert np.max(np.abs(source.samples)) == pytest.approx(1.0)

    def test_bytes_input(self, wav_file):
        source = AudioDecoder(target_sr=None).decode(wav_file.read_bytes())

        assert source.sample_rate == 16000
        assert source.origin.startswith("<")

    def test_flac_is_supported(self, tmp_path):
        path = tmp_path / "tone.flac"
        sf.write(path, sine(1.0, 8000), 8000)
        assert AudioDecoder(target_sr=None).decode(path).num_samples == 8000


class TestLevelReports:
    @pytest.fixture
    def silent_file(self, tmp_path):
        path = tmp_path / "silence.wav"
        sf.write(path, np.zeros(8000, dtype=np.float32), 8000)
        return path

    @pytest.fixture
    def hot_file(self, tmp_path):
        path = tmp_path / "hot.wav"
        sf.write(path, sine(0.5, 8000, amplitude=2.0), 8000, subtype="FLOAT")
        return path

    def test_silence_is_a_warning_by_default(self, silent_file, caplog):
        with caplog.at_level(logging.DEBUG, logger="decoder"):
            AudioDecoder(target_sr=None).decode(silent_file)

        levels = [r.levelno for r in caplog.records if "silent" in r.getMessage()]
        assert levels == [logging.WARNING]

    def test_silence_is_debug_when_warnings_are_off(self, silent_file, caplog):
        with caplog.at_level(logging.DEBUG, logger="decoder"):
            AudioDecoder(target_sr=None).decode(silent_file, warn_levels=False)

        levels = [r.levelno for r in caplog.records if "silent" in r.getMessage()]
        assert levels == [logging.DEBUG]

    def test_clipping_still_normalized_without_warning(self, hot_file, caplog):
        with caplog.at_level(logging.DEBUG, logger="decoder"):
            source = AudioDecoder(target_sr=None).decode(hot_file, warn_levels=False)

        assert np.max(np.abs(source.samples)) == pytest.approx(1.0)
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

    def test_async_wrapper_forwards_flag(self, silent_file, caplog):
        decoder = AsyncAudioDecoder(AudioDecoder(target_sr=None))
        try:
            with caplog.at_level(logging.DEBUG, logger="decoder"):
                asyncio.run(decoder.decode(silent_file, warn_levels=False))
        finally:
            decoder.shutdown()

        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


class TestValidation:
    def test_missing_file(self, tmp_path):
        with pytest.raises(DecodeError) as exc_info:
            AudioDecoder().decode(tmp_path / "nope.wav")
        assert "not found" in str(exc_info.value)

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("do re mi")

        with pytest.raises(UnsupportedFormatError) as exc_info:
            AudioDecoder().decode(path)
        assert exc_info.value.format == ".txt"

    def test_file_too_large(self, wav_file):
        with pytest.raises(FileTooLargeError) as exc_info:
            AudioDecoder(max_file_size=100).decode(wav_file)
        assert exc_info.value.max_size == 100

    def test_bytes_too_large(self, wav_file):
        with pytest.raises(FileTooLargeError):
            AudioDecoder(max_file_size=100).decode(wav_file.read_bytes())

    def test_empty_bytes(self):
        with pytest.raises(DecodeError):
            AudioDecoder().decode(b"")

    def test_garbage_bytes(self):
        with pytest.raises(DecodeError):
            AudioDecoder().decode(b"definitely not audio" * 10)

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "broken.wav"
        path.write_bytes(b"RIFF\x00\x00garbage")

        with pytest.raises(DecodeError):
            AudioDecoder().decode(path)

    def test_errors_share_base_class(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("x")
        with pytest.raises(DecodeError):
            AudioDecoder().decode(path)


class TestProbeDuration:
    def test_path(self, wav_file):
        assert AudioDecoder().probe_duration(wav_file) == pytest.approx(2.0)

    def test_bytes(self, wav_file):
        buffer = io.BytesIO()
        sf.write(buffer, sine(3.0, 8000), 8000, format="WAV")
        assert AudioDecoder().probe_duration(buffer.getvalue()) == pytest.approx(3.0)

    def test_garbage_bytes(self):
        with pytest.raises(DecodeError):
            AudioDecoder().probe_duration(b"definitely not audio" * 10)


class TestAsyncAudioDecoder:
    def test_decode_and_probe(self, wav_file):
        decoder = AsyncAudioDecoder(AudioDecoder(target_sr=None))

        async def both():
            return (
                await decoder.probe_duration(wav_file),
                await decoder.decode(wav_file),
            )

        try:
            duration, source = asyncio.run(both())
        finally:
            decoder.shutdown()

        assert duration == pytest.approx(2.0)
        assert source.sample_rate == 16000

    def test_errors_propagate(self, tmp_path):
        decoder = AsyncAudioDecoder()
        try:
            with pytest.raises(DecodeError):
                asyncio.run(decoder.decode(tmp_path / "missing.wav"))
        finally:
            decoder.shutdown()


class TestHelpers:
    def test_describe(self):
        assert describe(b"abc") == "<3 bytes>"
        assert describe("a/b.wav") == "a/b.wav"

    def test_factory(self):
        decoder = create_audio_decoder({"target_sample_rate": 16000, "max_file_size": 1024})
        assert decoder.target_sr == 16000
        assert decoder.max_file_size == 1024

    def test_factory_defaults(self):
        assert create_audio_decoder().target_sr == 22050
