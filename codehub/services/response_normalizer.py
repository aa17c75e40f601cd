"""
Response Normalizer
===================
Coerces whatever the LLM sent back into a ProblemAnalysis.

Fallback chain:
1. Structured: the text (optionally inside a ``` fence) is one JSON object
2. Unstructured: heuristic section mining over the free text
   a. "Correct answer: X" letter
   b. split into sections at headings / numbered markers
   c. explanation section (or first substantial non-answer section)
   d. misconceptions: headed list -> paragraphs -> full-text scan
3. ProblemAnalysis pads/truncates the misconceptions to exactly three

normalize() never raises; the worst case is an empty record.
"""
import json
import logging
import re
from dataclasses import dataclass
from typing import Union

from codehub.models import ProblemAnalysis, MISCONCEPTION_COUNT

logger = logging.getLogger(__name__)


# =============================================================================
# PATTERNS
# =============================================================================

_ANSWER_RE = re.compile(r'correct\s+answer(?:\s+is)?[\s:*_\-]*\(?([A-Z])\b', re.IGNORECASE)

# Section markers at line start: markdown headings, or "N." numbered items
_HEADING_MARKER_RE = re.compile(r'(?:^|\n)(?P<marker>#+)[ \t]+')
_ANY_MARKER_RE = re.compile(r'(?:^|\n)(?P<marker>#+|\d+\.)[ \t]+')

_EXPLANATION_HEADING_RE = re.compile(r'explanation|solution|solving|steps', re.IGNORECASE)
_NOT_EXPLANATION_RE = re.compile(r'answer|correct|misconception|mistake|error', re.IGNORECASE)
_MISCONCEPTION_HEADING_RE = re.compile(r'misconception|mistake|error|confusion', re.IGNORECASE)

# List items inside a section: "1." / "1)" / "*" / "-" / "•", optionally indented
_LIST_ITEM_RE = re.compile(r'^(?P<indent>[ \t]*)(?:\d+[.)]|[*\-•])[ \t]+', re.MULTILINE)
_PARAGRAPH_SPLIT_RE = re.compile(r'\n[ \t]*\n')

# Last resort: runs starting with misconception vocabulary, ending at a blank
# line, the next marker, or end of text
_RUN_RE = re.compile(
    r'^[ \t>*_\-]*((?:misconceptions?|mistakes?|errors?|students\s+might)\b.*?)'
    r'(?=\n[ \t]*\n|\n[ \t]*(?:#|\d+\.)|\Z)',
    re.IGNORECASE | re.MULTILINE | re.DOTALL,
)

_EMPHASIS_RE = re.compile(r'\*\*|__')

_ITEM_TEXT_KEYS = ("misconception", "explanation", "text", "description", "reason")

EXPLANATION_MIN_LENGTH = 100
PARAGRAPH_MIN_LENGTH = 50


# =============================================================================
# STEP 1: STRUCTURED PARSE
# =============================================================================

@dataclass(frozen=True)
class Structured:
    analysis: ProblemAnalysis


@dataclass(frozen=True)
class Unstructured:
    raw_text: str


ParseResult = Union[Structured, Unstructured]


def _strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence if present."""
    text = text.strip()
    if text.startswith("```"):
        lines = text.split('\n')
        end = len(lines)
        for i in range(len(lines) - 1, 0, -1):
            if lines[i].strip() == "```":
                end = i
                break
        text = '\n'.join(lines[1:end])
    return text.strip()


def _load_json_object(text: str):
    """Parse text as a JSON object, retrying on the outermost {...} span."""
    candidates = [text]
    start, end = text.find('{'), text.rfind('}')
    if start != -1 and end > start and (start, end) != (0, len(text) - 1):
        candidates.append(text[start:end + 1])

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except (ValueError, RecursionError):
            continue
        if isinstance(data, dict):
            return data
    return None


def _coerce_answer(value):
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    value = str(value).strip()
    return value or None


def _coerce_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, dict):
        for key in _ITEM_TEXT_KEYS:
            if isinstance(value.get(key), str):
                return value[key].strip()
        return " ".join(str(v).strip() for v in value.values() if isinstance(v, str))
    if isinstance(value, list):
        return "\n".join(_coerce_text(v) for v in value if v is not None)
    return str(value).strip()


def _coerce_items(value) -> list:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [_coerce_text(item) for item in value if item is not None]
    if isinstance(value, dict) and not any(key in value for key in _ITEM_TEXT_KEYS):
        # {"A": "...", "C": "..."}: one item per option
        return [_coerce_text(item) for item in value.values() if item is not None]
    return [_coerce_text(value)]


def parse_structured(raw_text: str) -> ParseResult:
    """Step 1: accept the response as a JSON object with the expected keys."""
    data = _load_json_object(_strip_code_fence(raw_text))
    if data is None:
        logger.debug("LLM response is not a JSON object; using text heuristics")
        return Unstructured(raw_text)

    return Structured(ProblemAnalysis(
        correct_answer=_coerce_answer(data.get("correctAnswer")),
        explanation=_coerce_text(data.get("explanation")),
        misconceptions=_coerce_items(data.get("misconceptions")),
    ))


# =============================================================================
# STEP 2: FREE-TEXT HEURISTICS
# =============================================================================

@dataclass(frozen=True)
class Section:
    heading: str
    body: str
    numbered: bool = False
    marked: bool = True

    @property
    def text(self) -> str:
        return f"{self.heading}\n{self.body}".strip()


def _clean(text: str) -> str:
    return _EMPHASIS_RE.sub('', text).strip()


def _heading_remainder(heading: str) -> str:
    """Inline content after "Label:" on a heading line."""
    if ':' not in heading:
        return ""
    return heading.split(':', 1)[1].strip()


def _make_section(chunk: str, numbered: bool, marked: bool = True) -> Section:
    heading, _, body = chunk.partition('\n')
    return Section(heading=heading.strip(), body=body.strip('\n'), numbered=numbered, marked=marked)


def extract_correct_answer(text: str):
    match = _ANSWER_RE.search(text)
    if match:
        return match.group(1).upper()
    return None


def split_sections(text: str) -> list:
    """
    Split text at line-start markers.

    Markdown headings take precedence: when the text has any, numbered lines
    stay inside their section as list items.
    """
    marker_re = _HEADING_MARKER_RE if _HEADING_MARKER_RE.search(text) else _ANY_MARKER_RE
    markers = list(marker_re.finditer(text))

    sections = []
    preamble = text[:markers[0].start()] if markers else text
    if preamble.strip():
        sections.append(_make_section(preamble, numbered=False, marked=False))

    for i, match in enumerate(markers):
        end = markers[i + 1].start() if i + 1 < len(markers) else len(text)
        chunk = text[match.end():end]
        if chunk.strip():
            numbered = not match.group('marker').startswith('#')
            sections.append(_make_section(chunk, numbered=numbered))
    return sections


def _headed(sections: list, heading_re) -> list:
    """Indexes of sections whose heading matches, marker-prefixed ones first.

    The unmarked preamble ("Sure! Here is the solution:") is only a
    candidate after every real heading.
    """
    matches = [i for i, s in enumerate(sections) if heading_re.search(s.heading)]
    return [i for i in matches if sections[i].marked] + [i for i in matches if not sections[i].marked]


def find_explanation(sections: list, text: str) -> str:
    for i in _headed(sections, _EXPLANATION_HEADING_RE):
        section = sections[i]
        explanation = _clean(f"{_heading_remainder(section.heading)}\n{section.body}")
        if explanation:
            return explanation

    for section in sections:
        if not _NOT_EXPLANATION_RE.search(section.heading) and len(section.text) > EXPLANATION_MIN_LENGTH:
            return _clean(section.text)

    # No usable sections at all: the whole response is the explanation
    stripped = text.strip()
    if not _ANY_MARKER_RE.search(text) and len(stripped) > EXPLANATION_MIN_LENGTH:
        return _clean(stripped)
    return ""


def _indent(match) -> int:
    return len(match.group('indent').expandtabs(4))


def _fold_item(chunk: str) -> str:
    """One top-level item with its indented sub-items joined onto it."""
    text = ""
    for line in chunk.split('\n'):
        sub_item = _LIST_ITEM_RE.match(line)
        line = _clean(line[sub_item.end():] if sub_item else line)
        if not line:
            continue
        if not text:
            text = line
        elif sub_item and text[-1] not in ".:;!?":
            text = f"{text}: {line}"
        else:
            text = f"{text} {line}"
    return text


def _list_items(body: str) -> list:
    """Items at the first marker's indentation; deeper markers fold into their parent."""
    markers = list(_LIST_ITEM_RE.finditer(body))
    if not markers:
        return []
    depth = _indent(markers[0])
    top = [m for m in markers if _indent(m) <= depth]

    items = []
    for i, match in enumerate(top):
        end = top[i + 1].start() if i + 1 < len(top) else len(body)
        item = _fold_item(body[match.end():end])
        if item:
            items.append(item)
    return items


def _following_items(sections: list, index: int) -> list:
    """Numbered sections right after an empty "N. Misconceptions:" header."""
    items = []
    for section in sections[index + 1:]:
        if not section.numbered:
            break
        if _EXPLANATION_HEADING_RE.search(section.heading) or _ANSWER_RE.search(section.heading):
            break
        items.append(_clean(section.text))
    return [item for item in items if item]


def _paragraphs(section: Section) -> list:
    content = f"{_heading_remainder(section.heading)}\n{section.body}"
    return [
        _clean(paragraph)
        for paragraph in _PARAGRAPH_SPLIT_RE.split(content)
        if len(paragraph.strip()) > PARAGRAPH_MIN_LENGTH
    ]


def _run_text(run: str) -> str:
    """Drop a bare "Misconceptions:" label line leading a run."""
    first, _, rest = run.partition('\n')
    if _clean(first).endswith(':') and (rest.strip() or len(first) < 40):
        run = rest
    return _clean(run)


def scan_misconception_runs(text: str) -> list:
    runs = []
    for match in _RUN_RE.finditer(text):
        run = _run_text(match.group(1))
        if run and not run.endswith(':'):
            runs.append((match.start(), run))

    longest = sorted(runs, key=lambda r: len(r[1]), reverse=True)[:MISCONCEPTION_COUNT]
    return [run for _, run in sorted(longest, key=lambda r: r[0])]


def find_misconceptions(sections: list, text: str) -> list:
    """Tiers run in order; a later tier is tried only if the earlier found nothing."""
    headed = _headed(sections, _MISCONCEPTION_HEADING_RE)
    index = headed[0] if headed else None

    if index is not None:
        section = sections[index]
        items = _list_items(section.body)
        if not items and section.numbered and not section.body.strip():
            items = _following_items(sections, index)
        if not items:
            items = _paragraphs(section)
        if items:
            return items

    return scan_misconception_runs(text)


def extract_from_text(text: str) -> ProblemAnalysis:
    """Step 2: heuristic extraction for responses that ignored JSON mode."""
    sections = split_sections(text)
    return ProblemAnalysis(
        correct_answer=extract_correct_answer(text),
        explanation=find_explanation(sections, text),
        misconceptions=find_misconceptions(sections, text),
    )


# =============================================================================
# ENTRY POINT
# =============================================================================

def normalize(raw_text) -> ProblemAnalysis:
    """
    Turn raw LLM output into a ProblemAnalysis.

    Args:
        raw_text: Response content, JSON or free text. None is treated as empty.

    Returns:
        ProblemAnalysis with exactly three misconception slots.
    """
    if raw_text is None:
        raw_text = ""
    elif not isinstance(raw_text, str):
        raw_text = str(raw_text)

    try:
        result = parse_structured(raw_text)
        if isinstance(result, Structured):
            return result.analysis
        return extract_from_text(result.raw_text)
    except Exception as e:
        logger.error("Failed to normalize LLM response: %s", e)
        return ProblemAnalysis()
