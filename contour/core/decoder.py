"""
Audio decoder for the Contour pitch analysis package.

Probes durations and decodes audio files (or in-memory bytes) into mono
AudioSource buffers.
"""

import asyncio
import io
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional, Set, Union

import librosa
import numpy as np
import soundfile as sf

from contour.core.models import AudioSource
from contour.utils.errors import DecodeError, FileTooLargeError, UnsupportedFormatError

# A path on disk or the raw bytes of an encoded file
AudioInput = Union[str, Path, bytes]

SUPPORTED_FORMATS: Dict[str, str] = {
    '.wav': 'soundfile',
    '.flac': 'soundfile',
    '.ogg': 'soundfile',
    '.aif': 'soundfile',
    '.aiff': 'soundfile',
    '.mp3': 'audioread',
}

TARGET_SAMPLE_RATE: Optional[int] = 22050  # Hz, None keeps the native rate
MAX_FILE_SIZE: int = 524288000  # 500 MB

logger = logging.getLogger("decoder")


def describe(file: AudioInput) -> str:
    """Short label for logs and AudioSource.origin."""
    if isinstance(file, (bytes, bytearray)):
        return f"<{len(file)} bytes>"
    return str(file)


class AudioDecoder:
    """
    Decodes audio into mono float32 samples.

    Stateless - a single instance may be shared between threads.
    """

    def __init__(
        self,
        target_sr: Optional[int] = TARGET_SAMPLE_RATE,
        max_file_size: int = MAX_FILE_SIZE
    ):
        """
        Initialize decoder with configuration.

        Args:
            target_sr: Resample to this rate (None keeps the file's own rate)
            max_file_size: Maximum file size in bytes
        """
        self.target_sr = target_sr
        self.max_file_size = max_file_size
        self.supported_suffixes: Set[str] = set(SUPPORTED_FORMATS.keys())

    def decode(self, file: AudioInput, warn_levels: bool = True) -> AudioSource:
        """
        Decode a whole file into an AudioSource.

        Args:
            file: Path to an audio file or its raw bytes
            warn_levels: Log silence/clipping at WARNING (DEBUG otherwise)

        Returns:
            AudioSource: Mono samples, sample rate and duration

        Raises:
            DecodeError: File missing, unreadable or empty
            UnsupportedFormatError: Suffix not supported
            FileTooLargeError: File exceeds the size limit
        """
        self._validate_input(file)

        try:
            samples, sample_rate = librosa.load(
                self._open(file),
                sr=self.target_sr,
                mono=True,
                dtype=np.float32
            )
        except Exception as e:
            raise DecodeError(
                f"Failed to decode audio from {describe(file)}: {e}",
                file_path=describe(file)
            ) from e

        samples = self._validate_samples(samples, file, warn_levels)

        return AudioSource(
            samples=samples,
            sample_rate=int(sample_rate),
            duration=len(samples) / sample_rate,
            origin=describe(file)
        )

    def probe_duration(self, file: AudioInput) -> float:
        """
        Read the duration in seconds without decoding the samples.

        Raises:
            DecodeError: If no backend can read the file header
        """
        self._validate_input(file)

        try:
            return float(sf.info(self._open(file)).duration)
        except Exception as e:
            if isinstance(file, (bytes, bytearray)):
                raise DecodeError(
                    f"Could not read audio header from {describe(file)}: {e}",
                    file_path=describe(file)
                ) from e
            logger.debug(f"soundfile could not probe {file}: {e}")

        # Formats libsndfile cannot read (some MP3s) go through librosa's
        # audioread fallback
        try:
            return float(librosa.get_duration(path=str(file)))
        except Exception as e:
            raise DecodeError(
                f"Could not determine duration of {file}: {e}",
                file_path=str(file)
            ) from e

    def _validate_input(self, file: AudioInput) -> None:
        """Validate existence, suffix and size of a path input."""
        if isinstance(file, (bytes, bytearray)):
            if len(file) == 0:
                raise DecodeError("Audio data is empty", file_path=describe(file))
            if len(file) > self.max_file_size:
                raise FileTooLargeError(
                    f"Audio data too large: {len(file) / 1024 / 1024:.1f} MB. "
                    f"Maximum: {self.max_file_size / 1024 / 1024:.1f} MB",
                    file_size=len(file),
                    max_size=self.max_file_size
                )
            return

        file_path = Path(file)
        if not file_path.exists():
            raise DecodeError(f"Audio file not found: {file_path}", file_path=str(file_path))

        suffix = file_path.suffix.lower()
        if suffix not in self.supported_suffixes:
            raise UnsupportedFormatError(
                f"Format {suffix or '<none>'} not supported. "
                f"Supported formats: {', '.join(sorted(self.supported_suffixes))}",
                format=suffix
            )

        file_size = file_path.stat().st_size
        if file_size > self.max_file_size:
            raise FileTooLargeError(
                f"File too large: {file_size / 1024 / 1024:.1f} MB. "
                f"Maximum: {self.max_file_size / 1024 / 1024:.1f} MB",
                file_size=file_size,
                max_size=self.max_file_size
            )

    @staticmethod
    def _open(file: AudioInput) -> Union[str, BinaryIO]:
        if isinstance(file, (bytes, bytearray)):
            return io.BytesIO(bytes(file))
        return str(file)

    def _validate_samples(
        self,
        samples: np.ndarray,
        file: AudioInput,
        warn_levels: bool = True
    ) -> np.ndarray:
        """
        Reject empty buffers, report silence, normalize clipping.

        Clipped audio is normalized either way; ``warn_levels`` only picks
        the log level of the reports.
        """
        level = logging.WARNING if warn_levels else logging.DEBUG
        if samples.size == 0:
            raise DecodeError(
                f"Audio contains no samples: {describe(file)}",
                file_path=describe(file)
            )

        rms = float(np.sqrt(np.mean(samples ** 2)))
        if rms < 1e-6:
            logger.log(level, f"Audio appears to be silent: {describe(file)}")

        max_abs = float(np.max(np.abs(samples)))
        if max_abs > 1.0:
            logger.log(
                level,
                f"Audio contains clipping (max: {max_abs:.2f}), normalizing: {describe(file)}"
            )
            samples = samples / max_abs

        return samples


class AsyncAudioDecoder:
    """Async wrapper around AudioDecoder; decoding runs on a worker thread."""

    def __init__(
        self,
        decoder: Optional[AudioDecoder] = None,
        executor: Optional[ThreadPoolExecutor] = None
    ):
        """
        Initialize async decoder.

        Args:
            decoder: AudioDecoder instance (creates default if None)
            executor: ThreadPoolExecutor (single worker if None)
        """
        self.decoder = decoder or AudioDecoder()
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(max_workers=1)

    async def decode(self, file: AudioInput, warn_levels: bool = True) -> AudioSource:
        """Decode asynchronously."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(self.executor, self.decoder.decode, file, warn_levels)

    async def probe_duration(self, file: AudioInput) -> float:
        """Probe duration asynchronously."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(self.executor, self.decoder.probe_duration, file)

    def shutdown(self) -> None:
        """Shutdown the executor if this wrapper created it."""
        if self._owns_executor:
            self.executor.shutdown(wait=True)


def create_audio_decoder(config: Optional[Dict[str, Any]] = None) -> AudioDecoder:
    """
    Factory function to create AudioDecoder from the "audio" config section.

    Args:
        config: Optional configuration dict
    """
    if config is None:
        config = {}

    return AudioDecoder(
        target_sr=config.get('target_sample_rate', TARGET_SAMPLE_RATE),
        max_file_size=config.get('max_file_size', MAX_FILE_SIZE)
    )
