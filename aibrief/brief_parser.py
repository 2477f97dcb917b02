"""
Brief parser - rebuild structured sections from free-text model output.

Two passes over the text:
1. Segment lines into sections on the headings requested in prompt.py.
2. Run a small line-oriented state machine per section.

parse_brief is total: any input, including an empty string, produces a
BriefSections value. Unlabeled output becomes the headline so a malformed
response is never silently dropped.
"""

import re

from .models import BriefSections, PromptIdea, StoryGroup, StoryItem

# Section key -> heading prefixes (lower case), checked in this order
SECTION_HEADINGS = [
    ("headline", ("headline", "topline")),
    ("summary", ("summary", "other headlines summary", "signal summary")),
    ("signals", ("other stories", "signals")),
    ("deepdives", ("deep dives",)),
    ("promptpack", ("prompt studio",)),
    ("toolsandlaunches", ("tools & launches", "tools and launches")),
    ("quicklinks", ("quick links", "also worth reading", "worth reading")),
    ("watchlist", ("tomorrow's radar", "tomorrows radar", "watchlist")),
]

_HEADING_DECORATION = "#*_> \t"
_BULLET = re.compile(r"^(?:[-*]\s+|•\s*)")
_NUMBERED = re.compile(r"^\d+[).](?!\d)\s*")
_LIST_NUMBER = re.compile(r"^\d+[).]\s+")


def _heading_key(line: str) -> str | None:
    """Return the section key if the line is a heading, else None."""
    lower = line.lstrip(_HEADING_DECORATION).lower().replace("’", "'")
    for key, prefixes in SECTION_HEADINGS:
        if lower.startswith(prefixes):
            return key
    return None


def split_sections(text: str) -> dict[str, list[str]]:
    """Pass 1: bucket non-blank lines under the most recent heading."""
    sections: dict[str, list[str]] = {}
    current_key: str | None = None
    buffer: list[str] = []

    for raw in text.splitlines():
        trimmed = raw.strip()
        key = _heading_key(trimmed) if trimmed else None
        if key:
            if current_key and buffer:
                sections[current_key] = buffer
            current_key = key
            buffer = []
            continue
        if trimmed:
            buffer.append(trimmed)

    if current_key and buffer:
        sections[current_key] = buffer

    return sections


def _has_label(line: str, label: str) -> bool:
    return f"{label.lower()}:" in line.lower()


def _clean_value(value: str) -> str:
    return value.strip().strip("*").strip()


def value_after(line: str, label: str) -> str:
    """Text after the first case-insensitive 'label:' in the line."""
    marker = f"{label.lower()}:"
    index = line.lower().find(marker)
    if index == -1:
        return _clean_value(line)
    return _clean_value(line[index + len(marker):])


def parse_source_and_url(line: str) -> tuple[str, str]:
    """
    Split a 'Source:' line that may also carry the URL.

    'Source: X | URL: Y' yields (X, Y); without a url: marker after the
    source label the whole remainder is the source name.
    """
    lower = line.lower()
    source_index = lower.find("source:")
    if source_index == -1:
        return value_after(line, "Source"), ""

    source_end = source_index + len("source:")
    url_index = lower.find("url:", source_end)
    if url_index == -1:
        return value_after(line, "Source"), ""

    source = _clean_value(line[source_end:url_index]).strip("|").strip()
    url = _clean_value(line[url_index + len("url:"):])
    return _clean_value(source), url


def _strip_bullet(line: str) -> str:
    return _BULLET.sub("", line, count=1).strip()


class _StoryAccumulator:
    """Collects story/source/url fields for one item."""

    def __init__(self):
        self.story = ""
        self.source = ""
        self.url = ""

    def take(self) -> StoryItem | None:
        """Return the pending item (if it has a story) and reset."""
        story = self.story.strip()
        item = StoryItem(story=story, source=self.source, url=self.url) if story else None
        self.story = ""
        self.source = ""
        self.url = ""
        return item

    def feed(self, line: str) -> StoryItem | None:
        """
        Consume one line. Returns a finished item when a bullet starts a new one.
        """
        finished = None
        if _BULLET.match(line):
            finished = self.take()
            cleaned = _strip_bullet(line)
            self.story = value_after(cleaned, "Story") if _has_label(cleaned, "story") else cleaned
        elif _has_label(line, "story"):
            self.story = value_after(line, "Story")
        elif _has_label(line, "source"):
            source, url = parse_source_and_url(line)
            self.source = source
            if url:
                self.url = url
        elif _has_label(line, "url"):
            self.url = value_after(line, "URL")
        elif line:
            self.story = f"{self.story} {line}" if self.story else line
        return finished


def parse_signals(lines: list[str]) -> list[StoryGroup]:
    """Parse the Other Stories section into themed groups."""
    groups: list[StoryGroup] = []
    theme = ""
    items: list[StoryItem] = []
    pending = _StoryAccumulator()

    def flush_group():
        nonlocal theme, items
        last = pending.take()
        if last:
            items.append(last)
        if theme.strip() or items:
            groups.append(StoryGroup(theme=theme.strip(), items=items))
        theme = ""
        items = []

    for line in lines:
        if _has_label(line, "theme"):
            flush_group()
            theme = value_after(line, "Theme")
            continue
        finished = pending.feed(line)
        if finished:
            items.append(finished)

    flush_group()
    return groups


def parse_story_list(lines: list[str]) -> list[StoryItem]:
    """Parse a flat list of story/source/url items (Deep Dives and similar)."""
    items: list[StoryItem] = []
    pending = _StoryAccumulator()
    for line in lines:
        finished = pending.feed(line)
        if finished:
            items.append(finished)
    last = pending.take()
    if last:
        items.append(last)
    return items


_PROMPT_FIELDS = [
    ("prompt", "Prompt"),
    ("best_for", "Best For"),
    ("input_format", "Input Format"),
    ("output_format", "Output Format"),
]


def _apply_prompt_line(idea: PromptIdea, line: str) -> bool:
    """Set a labeled field on idea. Returns False if the line is unlabeled."""
    for attr, label in _PROMPT_FIELDS:
        if _has_label(line, label):
            setattr(idea, attr, value_after(line, label))
            return True
    return False


def parse_prompt_pack(lines: list[str]) -> list[PromptIdea]:
    """Parse the Prompt Studio section."""
    ideas: list[PromptIdea] = []
    current: PromptIdea | None = None

    def flush():
        if current is not None and current.is_complete:
            ideas.append(current)

    for line in lines:
        numbered = _NUMBERED.match(line)
        if numbered:
            flush()
            current = PromptIdea()
            remainder = _strip_bullet(line[numbered.end():])
            if not remainder:
                continue
            if _has_label(remainder, "task"):
                current.task = value_after(remainder, "Task")
            elif not _apply_prompt_line(current, remainder):
                current.task = _clean_value(remainder)
            continue

        cleaned = _strip_bullet(line)
        if _has_label(cleaned, "task"):
            if current is None or current.is_complete:
                flush()
                current = PromptIdea()
            current.task = value_after(cleaned, "Task")
            continue

        if current is None:
            current = PromptIdea()
        if not _apply_prompt_line(current, cleaned) and cleaned:
            current.prompt = f"{current.prompt} {cleaned}" if current.prompt else cleaned

    flush()
    return ideas


def parse_watchlist(lines: list[str]) -> list[str]:
    """One watch item per line, with any bullet or list number removed."""
    watchlist = []
    for line in lines:
        cleaned = _strip_bullet(line)
        cleaned = _LIST_NUMBER.sub("", cleaned, count=1).strip()
        if cleaned:
            watchlist.append(cleaned)
    return watchlist


def parse_brief(text: str) -> BriefSections:
    """
    Parse generated text into BriefSections.

    Never raises; missing sections come back empty.
    """
    text = text or ""
    sections = split_sections(text)

    headline = " ".join(sections.get("headline", [])).strip()
    summary = " ".join(sections.get("summary", [])).strip()

    return BriefSections(
        headline=headline or text.strip(),
        summary=summary,
        other_stories=parse_signals(sections.get("signals", [])),
        deep_dives=parse_story_list(sections.get("deepdives", [])),
        prompt_studio=parse_prompt_pack(sections.get("promptpack", [])),
        watchlist=parse_watchlist(sections.get("watchlist", [])),
        tools_and_launches=parse_story_list(sections.get("toolsandlaunches", [])),
        quick_links=parse_story_list(sections.get("quicklinks", [])),
    )
