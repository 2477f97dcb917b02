"""
Export a parsed brief as markdown, plain text or a standalone HTML page.
"""

import html
from datetime import datetime

from .models import BriefSections, NewsItem, StoryItem, utcnow

BRIEF_TITLE = "The AI Brief"


def _story_line(item: StoryItem, with_link: bool = True) -> str:
    source = f" ({item.source})" if item.source else ""
    link = f" — {item.url}" if with_link and item.url else ""
    return f"{item.story}{source}{link}"


def format_brief_markdown(sections: BriefSections, sources: list[NewsItem] | None = None) -> str:
    """Markdown export, optionally ending with the list of sources used."""
    lines = [f"# {BRIEF_TITLE}", "", f"## {sections.headline}", "", sections.summary, ""]

    if sections.other_stories:
        lines += ["## Other Stories", ""]
        for group in sections.other_stories:
            lines.append(f"### {group.theme}")
            lines += [f"- {_story_line(item)}" for item in group.items]
            lines.append("")

    for heading, items in (
        ("Deep Dives", sections.deep_dives),
        ("Tools & Launches", sections.tools_and_launches),
        ("Quick Links", sections.quick_links),
    ):
        if items:
            lines += [f"## {heading}", ""]
            lines += [f"- {_story_line(item)}" for item in items]
            lines.append("")

    if sections.prompt_studio:
        lines += ["## Prompt Studio", ""]
        for idea in sections.prompt_studio:
            lines.append(f"### {idea.task or 'Prompt'}")
            lines.append(f"**Prompt:** {idea.prompt}")
            if idea.best_for:
                lines.append(f"**Best For:** {idea.best_for}")
            if idea.input_format:
                lines.append(f"**Input:** {idea.input_format}")
            if idea.output_format:
                lines.append(f"**Output:** {idea.output_format}")
            lines.append("")

    if sections.watchlist:
        lines += ["## Tomorrow's Radar", ""]
        lines += [f"- {entry}" for entry in sections.watchlist]
        lines.append("")

    used = [item for item in sources or [] if not item.is_placeholder]
    if used:
        lines += ["## Sources Used", ""]
        lines += [f"- {item.title} — {item.source_name} ({item.url})" for item in used]

    return "\n".join(lines).strip()


def format_brief_plain_text(sections: BriefSections) -> str:
    """Plain text export without links."""
    lines = [BRIEF_TITLE, sections.headline, "", sections.summary, ""]

    if sections.other_stories:
        lines.append("Other Stories:")
        for group in sections.other_stories:
            lines.append(f"  {group.theme}:")
            lines += [f"    - {_story_line(item, with_link=False)}" for item in group.items]
        lines.append("")

    if sections.deep_dives:
        lines.append("Deep Dives:")
        lines += [f"  - {_story_line(item, with_link=False)}" for item in sections.deep_dives]
        lines.append("")

    if sections.prompt_studio:
        lines.append("Prompt Studio:")
        lines += [f"  {idea.task}: {idea.prompt}" for idea in sections.prompt_studio]
        lines.append("")

    for heading, items in (
        ("Tools & Launches", sections.tools_and_launches),
        ("Quick Links", sections.quick_links),
    ):
        if items:
            lines.append(f"{heading}:")
            lines += [f"  - {_story_line(item, with_link=False)}" for item in items]
            lines.append("")

    if sections.watchlist:
        lines.append("Tomorrow's Radar:")
        lines += [f"  - {entry}" for entry in sections.watchlist]
        lines.append("")

    return "\n".join(lines).strip()


def _esc(text: str) -> str:
    return html.escape(text or "", quote=True)


def _story_li(item: StoryItem) -> str:
    if item.url:
        story = f'<a href="{_esc(item.url)}" target="_blank" rel="noreferrer">{_esc(item.story)}</a>'
    else:
        story = _esc(item.story)
    source = f' <span class="source">{_esc(item.source)}</span>' if item.source else ""
    return f"<li>{story}{source}</li>\n"


_STYLE = """*{box-sizing:border-box;margin:0;padding:0}
body{font-family:-apple-system,BlinkMacSystemFont,"Segoe UI",Roboto,Helvetica,Arial,sans-serif;
  color:#1b1f24;background:#f9f7f2;padding:24px;line-height:1.6;max-width:720px;margin:0 auto}
h1{font-family:Georgia,serif;font-size:28px;font-weight:700;margin-bottom:4px;color:#0f766e}
h2{font-size:20px;font-weight:600;margin:28px 0 12px;padding-bottom:6px;border-bottom:2px solid #e6e0d6}
h3{font-size:16px;font-weight:600;margin:16px 0 8px;color:#334155}
.date{color:#6b7280;font-size:13px;margin-bottom:16px}
.summary{font-size:16px;line-height:1.8;margin-bottom:8px}
ul{padding-left:20px;margin-bottom:12px}
li{margin-bottom:8px;font-size:15px}
a{color:#0f766e;text-decoration:none}
.source{display:inline-block;font-size:11px;background:#e6e0d6;color:#5d656f;padding:2px 8px;
  border-radius:99px;margin-left:6px;vertical-align:middle}
.prompt-card{background:#fff;border:1px solid #e6e0d6;border-radius:12px;padding:16px;margin-bottom:12px}
footer{margin-top:32px;text-align:center;font-size:12px;color:#9ca3af}"""


def format_brief_html(sections: BriefSections, generated_at: datetime | None = None) -> str:
    """Standalone HTML page; every model-provided string is escaped."""
    date = (generated_at or utcnow()).strftime("%A, %B %d, %Y")

    body = f"<h1>{_esc(sections.headline)}</h1>\n"
    body += f'<p class="date">{_esc(date)}</p>\n'
    body += f'<p class="summary">{_esc(sections.summary)}</p>\n'

    if sections.other_stories:
        body += "<h2>Other Stories</h2>\n"
        for group in sections.other_stories:
            body += f"<h3>{_esc(group.theme)}</h3>\n<ul>\n"
            body += "".join(_story_li(item) for item in group.items)
            body += "</ul>\n"

    if sections.deep_dives:
        body += "<h2>Deep Dives</h2>\n<ul>\n"
        body += "".join(_story_li(item) for item in sections.deep_dives)
        body += "</ul>\n"

    if sections.prompt_studio:
        body += "<h2>Prompt Studio</h2>\n"
        for idea in sections.prompt_studio:
            body += '<div class="prompt-card">\n'
            body += f"<h3>{_esc(idea.task)}</h3>\n"
            body += f"<p><strong>Prompt:</strong> {_esc(idea.prompt)}</p>\n"
            if idea.best_for:
                body += f"<p><strong>Best For:</strong> {_esc(idea.best_for)}</p>\n"
            if idea.input_format:
                body += f"<p><strong>Input:</strong> {_esc(idea.input_format)}</p>\n"
            if idea.output_format:
                body += f"<p><strong>Output:</strong> {_esc(idea.output_format)}</p>\n"
            body += "</div>\n"

    for heading, items in (
        ("Tools &amp; Launches", sections.tools_and_launches),
        ("Quick Links", sections.quick_links),
    ):
        if items:
            body += f"<h2>{heading}</h2>\n<ul>\n"
            body += "".join(_story_li(item) for item in items)
            body += "</ul>\n"

    if sections.watchlist:
        body += "<h2>Tomorrow&#x27;s Radar</h2>\n<ul>\n"
        body += "".join(f"<li>{_esc(entry)}</li>\n" for entry in sections.watchlist)
        body += "</ul>\n"

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8"/>
<meta name="viewport" content="width=device-width, initial-scale=1"/>
<title>{BRIEF_TITLE} - {_esc(sections.headline)}</title>
<style>
{_STYLE}
</style>
</head>
<body>
{body}
<footer>Generated by {BRIEF_TITLE}</footer>
</body>
</html>"""
