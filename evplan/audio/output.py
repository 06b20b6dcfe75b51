# Audio output context shared by all speech requests.
# The process holds one context, created on first use and kept for the
# life of the process. Playback through it is serialized by a lock;
# decoding happens before and is not serialized.

from __future__ import annotations
import io
import threading
import wave
from typing import Optional

import numpy as np

from evplan.log import get_logger
from .pcm import PCM16_SCALE, SAMPLE_RATE, DecodedAudio

logger = get_logger("evplan.audio")


class AudioOutput:
    def __init__(self, sample_rate: int = SAMPLE_RATE):
        self.sample_rate = sample_rate
        self.played = 0
        self._lock = threading.Lock()

    @staticmethod
    def to_pcm16(audio: DecodedAudio) -> bytes:
        """Interleave channels back into int16 LE bytes."""
        scaled = np.clip(np.round(audio.samples * PCM16_SCALE), -32768, 32767)
        return scaled.T.astype("<i2").tobytes()

    def render_wav(self, audio: DecodedAudio) -> bytes:
        buf = io.BytesIO()
        with wave.open(buf, "wb") as w:
            w.setnchannels(audio.channel_count)
            w.setsampwidth(2)
            w.setframerate(audio.sample_rate)
            w.writeframes(self.to_pcm16(audio))
        return buf.getvalue()

    def play(self, audio: DecodedAudio) -> bytes:
        """Start playback of `audio`; returns the rendered WAV stream."""
        if audio.sample_rate != self.sample_rate:
            logger.warning("Audio at %d Hz played on a %d Hz context", audio.sample_rate, self.sample_rate)
        with self._lock:
            data = self.render_wav(audio)
            self.played += 1
        logger.info("Playing %.2fs of audio (%d channel(s))", audio.duration_seconds, audio.channel_count)
        return data


_OUTPUT: Optional[AudioOutput] = None
_OUTPUT_LOCK = threading.Lock()


def get_audio_output() -> AudioOutput:
    """Lazy-create and cache the process-wide AudioOutput."""
    global _OUTPUT
    with _OUTPUT_LOCK:
        if _OUTPUT is None:
            _OUTPUT = AudioOutput(sample_rate=SAMPLE_RATE)
        return _OUTPUT
