# Audio package
# PCM speech decoding and the shared output context.

from .pcm import DecodedAudio, decode_audio, decode_base64, decode_pcm16, SAMPLE_RATE
from .output import AudioOutput, get_audio_output

__all__ = [
    "DecodedAudio",
    "decode_audio",
    "decode_base64",
    "decode_pcm16",
    "SAMPLE_RATE",
    "AudioOutput",
    "get_audio_output",
]
