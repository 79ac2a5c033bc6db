# ABOUTME: WAV container framing for raw PCM returned by speech synthesis.
# ABOUTME: Builds and parses the canonical 44-byte RIFF/WAVE header.

import struct
from dataclasses import dataclass

SAMPLE_RATE = 24000
CHANNELS = 1
BITS_PER_SAMPLE = 16

HEADER_SIZE = 44
_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


@dataclass(frozen=True)
class WavHeader:
    """Fields of a canonical PCM WAV header."""

    riff_size: int
    channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_size: int


def add_wav_header(
    pcm: bytes,
    sample_rate: int = SAMPLE_RATE,
    channels: int = CHANNELS,
    bits_per_sample: int = BITS_PER_SAMPLE,
) -> bytes:
    """Prepend a RIFF/WAVE header to headerless little-endian PCM."""
    byte_rate = sample_rate * channels * bits_per_sample // 8
    block_align = channels * bits_per_sample // 8
    data_size = len(pcm)
    header = _HEADER.pack(
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,
        1,  # PCM
        channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        b"data",
        data_size,
    )
    return header + pcm


def parse_wav(data: bytes) -> tuple[WavHeader, bytes]:
    """Split a canonical WAV file into its header fields and PCM payload.

    Raises:
        ValueError: If the data is not a canonical 44-byte-header PCM WAV.
    """
    if len(data) < HEADER_SIZE:
        raise ValueError(f"WAV data too short: {len(data)} bytes")

    (
        riff,
        riff_size,
        wave,
        fmt,
        fmt_size,
        audio_format,
        channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        data_tag,
        data_size,
    ) = _HEADER.unpack_from(data)

    if (riff, wave, fmt, data_tag) != (b"RIFF", b"WAVE", b"fmt ", b"data"):
        raise ValueError("Not a canonical RIFF/WAVE file")
    if fmt_size != 16 or audio_format != 1:
        raise ValueError("Only uncompressed PCM is supported")

    pcm = data[HEADER_SIZE : HEADER_SIZE + data_size]
    if len(pcm) != data_size:
        raise ValueError(f"Truncated PCM payload: expected {data_size}, got {len(pcm)}")

    header = WavHeader(
        riff_size=riff_size,
        channels=channels,
        sample_rate=sample_rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits_per_sample,
        data_size=data_size,
    )
    return header, pcm
