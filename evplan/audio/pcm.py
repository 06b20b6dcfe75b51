# Raw speech payload decoding.
#
# The speech model answers with base64 text wrapping signed 16-bit
# little-endian PCM, interleaved per frame when there is more than one
# channel. decode_audio() turns that into per-channel float32 samples:
#
#   base64 -> bytes -> int16[] -> float32[channel][frame] (value / 32768)
#
# The divisor is 32768 for both signs, so -32768 -> -1.0 and
# 32767 -> 0.999969..., never 1.0.

from __future__ import annotations
import base64
import binascii
from dataclasses import dataclass

import numpy as np

from evplan.errors import AudioDecodeError

SAMPLE_RATE = 24000
PCM16_SCALE = 32768.0
_PCM16_LE = np.dtype("<i2")


@dataclass(frozen=True)
class DecodedAudio:
    """Float samples shaped (channel_count, frame_count), in [-1.0, 1.0)."""
    sample_rate: int
    channel_count: int
    samples: np.ndarray

    @property
    def frame_count(self) -> int:
        return int(self.samples.shape[1])

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / float(self.sample_rate)

    def channel(self, index: int) -> np.ndarray:
        return self.samples[index]


def decode_base64(payload: str | bytes) -> bytes:
    if isinstance(payload, str):
        payload = payload.strip()
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AudioDecodeError(f"Audio payload is not valid base64: {e}", cause=e) from e


def decode_pcm16(data: bytes, sample_rate: int = SAMPLE_RATE, channel_count: int = 1) -> DecodedAudio:
    """De-interleave int16 LE PCM bytes into float32 channels."""
    if channel_count < 1:
        raise AudioDecodeError(f"channel_count must be >= 1, got {channel_count}")
    if len(data) % 2:
        raise AudioDecodeError(f"PCM16 payload has odd byte length {len(data)}")

    ints = np.frombuffer(data, dtype=_PCM16_LE)
    if ints.size % channel_count:
        raise AudioDecodeError(
            f"{ints.size} samples do not split evenly into {channel_count} channels"
        )
    frame_count = ints.size // channel_count

    samples = np.empty((channel_count, frame_count), dtype=np.float32)
    for c in range(channel_count):
        # sample[c][i] = int16[i * channel_count + c]
        samples[c, :] = ints[c::channel_count]
    samples /= PCM16_SCALE

    return DecodedAudio(sample_rate=sample_rate, channel_count=channel_count, samples=samples)


def decode_audio(payload: str | bytes, sample_rate: int = SAMPLE_RATE, channel_count: int = 1) -> DecodedAudio:
    return decode_pcm16(decode_base64(payload), sample_rate=sample_rate, channel_count=channel_count)
