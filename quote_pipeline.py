"""Parse, validate and fall back on free-text model output.

Every public ``resolve_*`` coroutine walks an ordered chain of resolvers:
the primary generate-and-validate step, a lenient secondary generation,
and finally a static literal. A resolver returns a list of items to accept
the result or ``None`` to hand over to the next one, so the chain always
ends with something usable.
"""
import asyncio
import json
import logging
import math
import re
from dataclasses import dataclass
from types import MappingProxyType

from vision_prompts import (
    DEFAULT_LANGUAGE,
    build_fallback_questions_prompt,
    build_fallback_quotes_prompt,
    build_goal_quote_prompt,
    build_questions_prompt,
    build_quotes_prompt,
    build_vision_quotes_prompt,
    normalize_languages,
    quote_count,
)

logger = logging.getLogger(__name__)

MAX_QUOTE_LENGTH = 100
MIN_GOAL_QUOTE_WORDS = 3
MAX_GOAL_QUOTE_WORDS = 8

LATIN_ONLY = re.compile(r"^[A-Za-z\s.,!?'-]+$")
LATIN_LETTER = re.compile(r"[A-Za-z]")
DEVANAGARI = re.compile(r"[\u0900-\u097F]")
CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)
NUMERIC_SUFFIX = re.compile(r"(\d+)$")

FALLBACK_QUOTES = MappingProxyType({
    "English": (
        "Dream Big.",
        "Stay Focused.",
        "Make It Happen.",
        "Believe In Yourself.",
        "Success Awaits.",
        "Keep Moving Forward.",
    ),
    "Hindi": (
        "बड़े सपने देखो।",
        "केंद्रित रहो।",
        "इसे साकार करो।",
        "खुद पर विश्वास करो।",
        "सफलता आपकी है।",
        "आगे बढ़ते रहो।",
    ),
    "Marathi": (
        "मोठी स्वप्ने पहा.",
        "लक्ष केंद्रित करा.",
        "ते साकार करा.",
        "स्वतःवर विश्वास ठेवा.",
        "यश तुमचे आहे.",
        "पुढे जात रहा.",
    ),
})

MINIMAL_QUOTES = (
    "Believe in yourself.",
    "Make it happen.",
    "Dream big.",
    "You are capable.",
    "Success awaits.",
    "Keep going.",
    "Stay focused.",
    "You've got this.",
)

MINIMAL_QUESTIONS = (
    "What does success look like for you in this area?",
    "How will achieving this goal change your life?",
    "What steps are you most excited to take?",
)

EMPTY_GOAL_QUOTE = "Make your dreams reality."
LAST_RESORT_GOAL_QUOTE = "Believe in your dreams."

# Which script checks apply to each supported language.
SCRIPT_RULES = MappingProxyType({
    "English": "latin",
    "Hindi": "devanagari",
    "Marathi": "devanagari",
})


class QuoteValidationError(ValueError):
    pass


@dataclass
class Resolution:
    items: list
    source: str
    error: str = None

    @property
    def failed(self):
        return self.error is not None


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def strip_code_fences(text):
    return CODE_FENCE.sub("", text or "").strip()


def _suffix_key(item):
    match = NUMERIC_SUFFIX.search(str(item[0]))
    return (0, int(match.group(1))) if match else (1, 0)


def parse_quote_mapping(text):
    """Parse a ``{"quote1": "...", ...}`` response into an ordered list of values.

    Raises ValueError when the payload is not a JSON object.
    """
    data = json.loads(strip_code_fences(text))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    ordered = sorted(data.items(), key=_suffix_key)
    return [value.strip() for _key, value in ordered if isinstance(value, str) and value.strip()]


def split_lines(text, max_length=MAX_QUOTE_LENGTH, require=None):
    lines = []
    for line in (text or "").splitlines():
        line = line.strip()
        if not line:
            continue
        if max_length is not None and len(line) >= max_length:
            continue
        if require and require not in line:
            continue
        lines.append(line)
    return lines


def clean_single_quote(text):
    quote = (text or "").strip()
    quote = re.sub(r"^[\"'“”‘’]+|[\"'“”‘’]+$", "", quote)
    quote = re.sub(r"^\d+[.)]\s*", "", quote)
    quote = re.sub(r"^[-*•]\s*", "", quote)
    return quote.strip()


def parse_quotes(text, count):
    """Structured parse first, line split when the model ignored the JSON format."""
    try:
        items = parse_quote_mapping(text)
    except ValueError as e:
        logger.info("Structured parse failed (%s), falling back to line split", e)
        items = split_lines(strip_code_fences(text))
    return [item for item in items if len(item) < MAX_QUOTE_LENGTH][:count]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def is_latin_text(item):
    return bool(LATIN_ONLY.match(item)) and not DEVANAGARI.search(item)


def is_devanagari_text(item):
    return bool(DEVANAGARI.search(item)) and not LATIN_LETTER.search(item)


def matches_language(item, language):
    rule = SCRIPT_RULES.get(language)
    if rule == "latin":
        return is_latin_text(item)
    if rule == "devanagari":
        return is_devanagari_text(item)
    return True


def matches_languages(item, languages):
    return any(matches_language(item, lang) for lang in normalize_languages(languages))


def validate_quotes(items, languages, count):
    """Drop items in the wrong script; reject the batch when under half survive."""
    valid = [
        item for item in items
        if isinstance(item, str) and item.strip() and matches_languages(item, languages)
    ]
    if len(valid) < count / 2:
        raise QuoteValidationError(
            f"Only {len(valid)} of {count} quotes passed validation for {', '.join(normalize_languages(languages))}"
        )
    return valid


def is_valid_goal_quote(quote):
    words = quote.split()
    return MIN_GOAL_QUOTE_WORDS <= len(words) <= MAX_GOAL_QUOTE_WORDS and len(quote) < MAX_QUOTE_LENGTH


# ---------------------------------------------------------------------------
# Fallbacks
# ---------------------------------------------------------------------------

def fallback_quotes(languages, count):
    languages = normalize_languages(languages)
    count = max(count, 1)
    default = FALLBACK_QUOTES[DEFAULT_LANGUAGE]

    if len(languages) == 1:
        return list(FALLBACK_QUOTES.get(languages[0], default)[:count])

    per_language = math.ceil(count / len(languages))
    quotes = []
    for lang in languages:
        quotes.extend(FALLBACK_QUOTES.get(lang, default)[:per_language])
    return quotes[:count]


def language_shares(languages, count):
    """How many of ``count`` quotes each language should get, first languages rounding up."""
    languages = normalize_languages(languages)
    base, extra = divmod(count, len(languages))
    return {lang: base + (1 if i < extra else 0) for i, lang in enumerate(languages)}


def pad_quotes(quotes, languages, count):
    """Top a partial batch up to ``count``, filling short languages first."""
    if len(quotes) >= count:
        return quotes[:count]
    languages = normalize_languages(languages)
    default = FALLBACK_QUOTES[DEFAULT_LANGUAGE]
    padded = list(quotes)

    shares = language_shares(languages, count)
    for quote in quotes:
        lang = next((lang for lang in languages if matches_language(quote, lang)), None)
        if lang is not None:
            shares[lang] -= 1

    for lang in languages:
        for extra in FALLBACK_QUOTES.get(lang, default):
            if shares[lang] <= 0 or len(padded) >= count:
                break
            if extra not in padded:
                padded.append(extra)
                shares[lang] -= 1

    for extra in fallback_quotes(languages, len(default) * len(languages)):
        if len(padded) >= count:
            break
        if extra not in padded:
            padded.append(extra)
    return padded


async def generate_fallback_quotes(generate, count=5, context="motivation and success"):
    """Lenient secondary generation: any short non-empty line is accepted.

    Returns an empty list when the call fails or yields nothing usable.
    """
    try:
        text = await generate(build_fallback_quotes_prompt(count, context))
    except Exception:
        logger.exception("Fallback quote generation error")
        return []
    return split_lines(text)[:count]


async def generate_fallback_questions(generate, count=3, vision_type="personal growth"):
    try:
        text = await generate(build_fallback_questions_prompt(count, vision_type))
    except Exception:
        logger.exception("Fallback question generation error")
        return []
    return split_lines(text, max_length=None, require="?")[:count]


# ---------------------------------------------------------------------------
# Resolver chain
# ---------------------------------------------------------------------------

class _Attempt:
    """Shared state across one resolver chain; records the primary call's error."""

    def __init__(self):
        self.error = None


async def resolve(resolvers, label="generation"):
    """Run ``(name, resolver)`` pairs in order until one returns items."""
    attempt = _Attempt()
    for name, resolver in resolvers:
        items = await resolver(attempt)
        if items:
            logger.info("%s resolved by %s (%d items)", label, name, len(items))
            return Resolution(items=list(items), source=name, error=attempt.error)
        logger.info("%s: %s gave no usable result, trying next", label, name)
    raise RuntimeError(f"No resolver produced a result for {label}")


def _primary(generate, prompt, accept):
    async def resolver(attempt):
        try:
            text = await generate(prompt)
        except Exception as e:
            logger.exception("Remote generation failed")
            attempt.error = str(e) or e.__class__.__name__
            return None
        try:
            return accept(text)
        except ValueError as e:
            logger.warning("Rejected model output: %s", e)
            return None
    return resolver


def _static(items):
    async def resolver(attempt):
        return list(items)
    return resolver


async def resolve_quotes(generate, vision_type, goals, count=6, max_items=8):
    prompt = build_quotes_prompt(vision_type, goals, count)

    def accept(text):
        quotes = split_lines(text)[:max_items]
        if len(quotes) < count / 2:
            raise QuoteValidationError(f"Only {len(quotes)} of {count} quotes parsed")
        return quotes

    async def dynamic(attempt):
        return await generate_fallback_quotes(generate, count, f"{vision_type or 'success'} and achieving goals")

    return await resolve([
        ("model", _primary(generate, prompt, accept)),
        ("dynamic-fallback", dynamic),
        ("static-fallback", _static(MINIMAL_QUOTES[:count])),
    ], label="quotes")


async def resolve_vision_quotes(generate, user_vision, goals, languages, count=None):
    languages = normalize_languages(languages)
    count = quote_count(goals, count)
    prompt = build_vision_quotes_prompt(user_vision, goals, languages, count)

    def accept(text):
        quotes = validate_quotes(parse_quotes(text, count), languages, count)
        return pad_quotes(quotes, languages, count)

    return await resolve([
        ("model", _primary(generate, prompt, accept)),
        ("language-fallback", _static(fallback_quotes(languages, count))),
    ], label="vision quotes")


async def resolve_goal_quote(generate, goal, vision_type, user_vision=""):
    prompt = build_goal_quote_prompt(goal, vision_type, user_vision)

    def accept(text):
        quote = clean_single_quote(text) or EMPTY_GOAL_QUOTE
        if not is_valid_goal_quote(quote):
            raise QuoteValidationError(f"Goal quote out of bounds: {quote!r}")
        return [quote]

    title = getattr(goal, "title", None) or "your goal"

    async def dynamic(attempt):
        return await generate_fallback_quotes(generate, 1, f"{title} and success")

    return await resolve([
        ("model", _primary(generate, prompt, accept)),
        ("dynamic-fallback", dynamic),
        ("static-fallback", _static([LAST_RESORT_GOAL_QUOTE])),
    ], label=f"goal quote {getattr(goal, 'id', '?')}")


async def resolve_individual_quotes(generate, goals, vision_type, user_vision=""):
    """One quote per goal, generated concurrently. Returns ``{goal_id: Resolution}``."""
    goals = list(goals or [])
    resolutions = await asyncio.gather(*(
        resolve_goal_quote(generate, goal, vision_type, user_vision) for goal in goals
    ))
    return {str(goal.id): resolution for goal, resolution in zip(goals, resolutions)}


async def resolve_questions(generate, vision_type, goals, count=3):
    prompt = build_questions_prompt(vision_type, goals, count)

    def accept(text):
        questions = split_lines(text, max_length=None, require="?")[:count]
        if len(questions) < count / 2:
            raise QuoteValidationError(f"Only {len(questions)} of {count} questions parsed")
        return questions

    async def dynamic(attempt):
        return await generate_fallback_questions(generate, count, vision_type)

    return await resolve([
        ("model", _primary(generate, prompt, accept)),
        ("dynamic-fallback", dynamic),
        ("static-fallback", _static(MINIMAL_QUESTIONS)),
    ], label="questions")
