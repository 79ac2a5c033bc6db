# ABOUTME: Tests for WAV header framing of synthesized PCM.
# ABOUTME: Checks header field values and parse errors on malformed input.

import pytest

from foul_weather.audio import HEADER_SIZE, add_wav_header, parse_wav


class TestAddWavHeader:
    """Tests for add_wav_header."""

    def test_size_is_header_plus_payload(self) -> None:
        wav = add_wav_header(b"\x00" * 1000)

        assert len(wav) == 1044
        assert wav[:4] == b"RIFF"
        assert wav[8:16] == b"WAVEfmt "
        assert wav[36:40] == b"data"

    def test_default_format_fields(self) -> None:
        header, pcm = parse_wav(add_wav_header(b"\x10\x20" * 50))

        assert header.riff_size == 36 + 100
        assert header.data_size == 100
        assert header.channels == 1
        assert header.sample_rate == 24000
        assert header.bits_per_sample == 16
        assert header.byte_rate == 48000
        assert header.block_align == 2
        assert pcm == b"\x10\x20" * 50

    def test_custom_format(self) -> None:
        header, _ = parse_wav(
            add_wav_header(b"\x00" * 8, sample_rate=16000, channels=2, bits_per_sample=16)
        )

        assert header.byte_rate == 64000
        assert header.block_align == 4

    def test_empty_payload(self) -> None:
        wav = add_wav_header(b"")

        assert len(wav) == HEADER_SIZE
        header, pcm = parse_wav(wav)
        assert header.riff_size == 36
        assert pcm == b""

    def test_little_endian_sizes(self) -> None:
        wav = add_wav_header(b"\x00" * 258)

        assert wav[4:8] == (36 + 258).to_bytes(4, "little")
        assert wav[40:44] == (258).to_bytes(4, "little")


class TestParseWav:
    """Tests for parse_wav error handling."""

    def test_too_short(self) -> None:
        with pytest.raises(ValueError, match="too short"):
            parse_wav(b"RIFF")

    def test_wrong_magic(self) -> None:
        wav = bytearray(add_wav_header(b"\x00" * 4))
        wav[:4] = b"RIFX"

        with pytest.raises(ValueError, match="RIFF/WAVE"):
            parse_wav(bytes(wav))

    def test_truncated_payload(self) -> None:
        wav = add_wav_header(b"\x00" * 100)

        with pytest.raises(ValueError, match="Truncated"):
            parse_wav(wav[:-10])

    def test_non_pcm_format(self) -> None:
        wav = bytearray(add_wav_header(b"\x00" * 4))
        wav[20:22] = (3).to_bytes(2, "little")

        with pytest.raises(ValueError, match="PCM"):
            parse_wav(bytes(wav))
