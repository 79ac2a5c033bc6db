# ABOUTME: Turns generated narrative text into a two-speaker transcript.
# ABOUTME: Splits paragraphs, alternates speaker roles and adds optional ad segments.

import re

from foul_weather.models import SpeakerRole, TranscriptSegment

_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n|\n")


def split_paragraphs(text: str) -> list[str]:
    """Split text on blank lines and line breaks, dropping empty segments."""
    return [part.strip() for part in _PARAGRAPH_SPLIT.split(text) if part.strip()]


def assign_roles(
    paragraphs: list[str],
    preroll: str = "",
    postroll: str = "",
) -> list[TranscriptSegment]:
    """Assign alternating speaker roles to paragraphs.

    Paragraph 0 goes to role A, paragraph 1 to role B and so on.
    A non-empty preroll is always read by role B, a postroll by role A.
    """
    segments: list[TranscriptSegment] = []
    if preroll.strip():
        segments.append(TranscriptSegment(role=SpeakerRole.B, text=preroll.strip(), promo=True))

    for i, paragraph in enumerate(paragraphs):
        role = SpeakerRole.A if i % 2 == 0 else SpeakerRole.B
        segments.append(TranscriptSegment(role=role, text=paragraph))

    if postroll.strip():
        segments.append(TranscriptSegment(role=SpeakerRole.A, text=postroll.strip(), promo=True))
    return segments


def format_transcript(segments: list[TranscriptSegment]) -> str:
    """Render segments as ``Speaker: text`` lines.

    Narrative paragraphs are one per line; ad segments are set apart by a blank line.
    """
    groups: list[list[str]] = []
    previous_promo: bool | None = None
    for segment in segments:
        line = f"{segment.role.value}: {segment.text}"
        if segment.promo or previous_promo is None or previous_promo:
            groups.append([line])
        else:
            groups[-1].append(line)
        previous_promo = segment.promo

    return "\n\n".join("\n".join(group) for group in groups)


def build_transcript(text: str, preroll: str = "", postroll: str = "") -> str:
    """Full conversion from generated text to a formatted transcript."""
    return format_transcript(assign_roles(split_paragraphs(text), preroll, postroll))
