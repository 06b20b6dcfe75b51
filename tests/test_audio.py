# ===============================================
# tests/test_audio.py
# PCM16 speech decoding: base64 -> int16 -> float channels
# ===============================================

import base64
import io
import wave

import numpy as np
import pytest

from evplan.audio import AudioOutput, decode_audio, decode_base64, decode_pcm16, get_audio_output
from evplan.errors import AudioDecodeError


def _b64(ints, dtype="<i2"):
    return base64.b64encode(np.asarray(ints, dtype=dtype).tobytes()).decode("ascii")


def test_mono_samples_match_int16_over_32768():
    raw = [0, 1, -1, 16384, -16384, 32767, -32768]
    audio = decode_audio(_b64(raw), sample_rate=24000, channel_count=1)

    assert audio.sample_rate == 24000
    assert audio.channel_count == 1
    assert audio.frame_count == len(raw)
    assert audio.samples.dtype == np.float32
    for i, v in enumerate(raw):
        assert audio.samples[0][i] == v / 32768.0


def test_interleaved_stereo_is_deinterleaved():
    # frames: (L, R) = (100, -100), (200, -200), (300, -300)
    raw = [100, -100, 200, -200, 300, -300]
    audio = decode_audio(_b64(raw), channel_count=2)

    assert audio.frame_count == 3
    channels = 2
    for c in range(channels):
        for i in range(audio.frame_count):
            assert audio.samples[c][i] == pytest.approx(raw[i * channels + c] / 32768.0, abs=1e-9)
    np.testing.assert_array_equal(audio.channel(0) * 32768.0, [100, 200, 300])
    np.testing.assert_array_equal(audio.channel(1) * 32768.0, [-100, -200, -300])


def test_extremes_are_asymmetric():
    audio = decode_audio(_b64([32767, -32768]))
    assert audio.samples[0][0] == 32767 / 32768
    assert audio.samples[0][0] < 1.0
    assert audio.samples[0][1] == -1.0


def test_little_endian_byte_order():
    # 0x0100 little-endian is 1, big-endian would be 256
    audio = decode_pcm16(b"\x01\x00\x00\x01")
    assert audio.samples[0][0] == 1 / 32768.0
    assert audio.samples[0][1] == 256 / 32768.0


def test_odd_byte_length_is_rejected():
    payload = base64.b64encode(b"\x01\x02\x03").decode("ascii")
    with pytest.raises(AudioDecodeError):
        decode_audio(payload)


def test_frame_count_must_divide_evenly():
    with pytest.raises(AudioDecodeError):
        decode_audio(_b64([1, 2, 3]), channel_count=2)


def test_invalid_base64_is_rejected():
    with pytest.raises(AudioDecodeError):
        decode_base64("not base64!!")


def test_zero_channels_is_rejected():
    with pytest.raises(AudioDecodeError):
        decode_pcm16(b"\x00\x00", channel_count=0)


def test_duration_uses_sample_rate():
    audio = decode_pcm16(bytes(24000 * 2), sample_rate=24000)
    assert audio.frame_count == 24000
    assert audio.duration_seconds == pytest.approx(1.0)


def test_wav_rendering_round_trips_pcm():
    raw = [0, 1000, -1000, 32767, -32768, 5]
    audio = decode_audio(_b64(raw), channel_count=2)
    wav = AudioOutput().render_wav(audio)

    with wave.open(io.BytesIO(wav), "rb") as w:
        assert w.getnchannels() == 2
        assert w.getframerate() == 24000
        assert w.getsampwidth() == 2
        frames = w.readframes(w.getnframes())
    assert np.frombuffer(frames, dtype="<i2").tolist() == raw


def test_audio_output_is_shared():
    assert get_audio_output() is get_audio_output()
