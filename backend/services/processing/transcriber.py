"""
Caption payload parsing into normalized transcript items.
"""
import html
import re
from typing import Iterable, List, Tuple
from bs4 import BeautifulSoup

from models.transcript_models import TranscriptItem
from services.processing.utils import clean_caption_text

# Duration used when a timedtext node carries no dur attribute
DEFAULT_ITEM_DURATION_MS = 2000


def normalize_items(raw_items: Iterable[Tuple[str, float, float]]) -> List[TranscriptItem]:
    """
    Build TranscriptItems from (text, offset_ms, duration_ms) triples.

    Text is whitespace-normalized and items left empty are dropped.
    """
    items = []
    for text, offset_ms, duration_ms in raw_items:
        clean = clean_caption_text(text or "")
        if clean:
            items.append(TranscriptItem(
                text=clean,
                offset_ms=offset_ms,
                duration_ms=duration_ms,
            ))
    return items


def parse_timedtext_xml(xml_content: str) -> List[TranscriptItem]:
    """
    Parse YouTube timedtext XML (<transcript><text start= dur=>...).

    Processing:
        1. Find every <text> node
        2. Convert start/dur seconds to milliseconds
        3. Decode HTML entities (captions are often double-escaped)
        4. Normalize whitespace, drop empty lines
    """
    soup = BeautifulSoup(xml_content, 'html.parser')
    raw_items = []

    for node in soup.find_all('text'):
        start_ms = _seconds_attr_to_ms(node.get('start')) or 0
        duration_ms = _seconds_attr_to_ms(node.get('dur')) or DEFAULT_ITEM_DURATION_MS
        text = html.unescape(node.get_text())
        raw_items.append((text, start_ms, duration_ms))

    return normalize_items(raw_items)


def parse_srt_captions(srt_content: str) -> List[TranscriptItem]:
    """Parse SRT format captions."""
    raw_items = []
    blocks = re.split(r'\n\s*\n', srt_content.replace('\r\n', '\n').strip())

    for block in blocks:
        lines = block.strip().split('\n')
        if len(lines) < 3:
            continue

        # First line is number, second is timestamp
        timestamp_line = lines[1]
        text_lines = lines[2:]

        # Parse timestamp (HH:MM:SS,mmm --> HH:MM:SS,mmm)
        timestamp_match = re.match(
            r'(\d{2}):(\d{2}):(\d{2})[,.](\d{3})\s*-->\s*(\d{2}):(\d{2}):(\d{2})[,.](\d{3})',
            timestamp_line.strip(),
        )
        if timestamp_match:
            h1, m1, s1, ms1, h2, m2, s2, ms2 = timestamp_match.groups()
            start_ms = int(h1) * 3600000 + int(m1) * 60000 + int(s1) * 1000 + int(ms1)
            end_ms = int(h2) * 3600000 + int(m2) * 60000 + int(s2) * 1000 + int(ms2)
            raw_items.append((" ".join(text_lines), start_ms, max(0, end_ms - start_ms)))

    return normalize_items(raw_items)


def _seconds_attr_to_ms(value) -> float:
    if value is None:
        return 0
    try:
        return float(value) * 1000
    except ValueError:
        return 0
