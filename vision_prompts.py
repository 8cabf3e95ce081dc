import json
import math
from types import MappingProxyType

SUPPORTED_LANGUAGES = ("English", "Hindi", "Marathi")
DEFAULT_LANGUAGE = "English"

LANGUAGE_SCRIPTS = MappingProxyType({
    "English": "Latin alphabet",
    "Hindi": "Devanagari script",
    "Marathi": "Devanagari script",
})

THEME_MAP = MappingProxyType({
    "money": "financial abundance, wealth and a luxury lifestyle",
    "career": "professional success, leadership and recognition",
    "health": "vibrant health, fitness and inner balance",
    "relationships": "love, family and meaningful connections",
    "custom": "a balanced life across several personal dreams",
    "typevision": "a personal, self-described dream life",
})

VISION_CONTEXT_MAP = MappingProxyType({
    "money": "luxury lifestyle, wealth, abundance, financial success, prosperity",
    "career": "professional success, achievement, leadership, growth, recognition",
    "health": "wellness, vitality, fitness, balance, healthy lifestyle",
    "relationships": "love, connection, family, friendship, harmony",
    "typevision": "personal dreams, custom vision, unique goals, aspirations",
})
DEFAULT_VISION_CONTEXT = "success, happiness, achievement, dream life"

# Keyed by the first word of a lower-cased goal title.
GOAL_MAP = MappingProxyType({
    "financial": "a calm person reviewing a thriving portfolio in a bright modern home office",
    "dream": "a beautiful dream scene brought to life, bathed in warm golden light",
    "luxury": "an elegant luxury lifestyle scene with refined details",
    "travel": "first-class travel to a breathtaking destination",
    "investments": "a growing investment portfolio shown on sleek screens",
    "passive": "relaxing on a sunny terrace while income flows in",
    "savings": "a secure, overflowing savings jar in a tidy home",
    "leadership": "a confident leader addressing an engaged team",
    "recognition": "receiving an industry award on a softly lit stage",
    "business": "a thriving business with a busy, modern workspace",
    "expertise": "a respected expert teaching an attentive audience",
    "startup": "a startup launch celebration with a proud founding team",
    "networking": "a warm handshake at an elegant professional event",
    "innovation": "a breakthrough prototype glowing on a workbench",
    "peak": "an athletic person at peak fitness training outdoors at sunrise",
    "inner": "peaceful meditation by a calm lake at dawn",
    "healthy": "a colourful, fresh and healthy meal on a sunlit table",
    "active": "running a marathon with energy and joy",
    "quality": "a serene bedroom ready for deep, restful sleep",
    "mental": "a clear, focused mind working in a tidy, bright studio",
    "high": "a person bursting with energy on a mountain trail",
    "wellness": "a complete mind-body wellness retreat surrounded by nature",
    "true": "two people sharing a genuine moment of connection",
    "happy": "a joyful family gathered around a warm dinner table",
    "social": "volunteers inspiring and helping their community",
    "perfect": "a loving couple walking together at golden hour",
    "parenthood": "a tender moment between a parent and a child",
    "home": "a harmonious, welcoming home full of light",
    "self": "a person smiling at their reflection with quiet confidence",
    "personal": "a personal milestone reached with pride",
    "achievement": "standing on a summit after a hard climb",
    "creative": "an artist absorbed in a vivid creative project",
    "learning": "mastering a new skill in an inspiring study space",
    "adventure": "exploring a wild, beautiful landscape",
    "success": "celebrating a well-earned success",
    "magic": "a magical scene where the impossible becomes possible",
})

TIMELINE_MAP = MappingProxyType({
    "1month": "immediate fresh start, new beginnings, quick wins, early morning light",
    "3months": "building momentum, growth in progress, spring energy, blossoming success",
    "6months": "substantial progress, half-year achievements, summer abundance",
    "1year": "major milestone achieved, annual success, full cycle completion, celebration",
    "5years": "long-term success, established wealth, lasting achievement, legacy building",
    "lifetime": "ultimate life achievement, generational success, timeless prosperity, lifetime fulfillment",
})
DEFAULT_TIMELINE = "success achieved, goals manifested, dreams realized"

BOARD_SIZE_MAP = MappingProxyType({
    "desktop": "wide 16:9 landscape composition for a desktop wallpaper",
    "mobile": "tall 9:16 portrait composition for a phone wallpaper",
})
DEFAULT_BOARD_SIZE = BOARD_SIZE_MAP["desktop"]

SIZE_GUIDE_MAP = MappingProxyType({
    "desktop": "Create a horizontal/landscape oriented image suitable for a desktop wallpaper.",
    "mobile": "Create a vertical/portrait oriented image suitable for a phone wallpaper.",
})

WALLPAPER_ELEMENTS = MappingProxyType({
    "money": (
        "Luxury lifestyle, financial freedom, abundance and wealth visualization, "
        "golden tones, warm rich colors, confident stress-free atmosphere, "
        "modern luxury home, passive income lifestyle"
    ),
    "career": (
        "Professional success, career achievement, leadership presence, "
        "modern executive office, awards and recognition, ambitious and accomplished atmosphere"
    ),
    "health": (
        "Healthy vibrant lifestyle, wellness and fitness, calm peaceful environment, "
        "nature elements, morning sunlight, vitality and energy"
    ),
})
DEFAULT_WALLPAPER_ELEMENTS = (
    "Personal dream lifestyle, aspirational imagery, emotional fulfillment, "
    "life goals achieved, dream come true visualization"
)

LANGUAGE_EXAMPLES = MappingProxyType({
    "English": '"Dream big and achieve.", "Success is yours.", "Find happiness."',
    "Hindi": '"सपने देखो और पूरे करो.", "सफलता आपकी है.", "खुशी खोजो."',
    "Marathi": '"स्वप्न पहा आणि साकार करा.", "यश तुमचे आहे.", "आनंद शोधा."',
})

BANNER = "━" * 40

WALLPAPER_STYLE = (
    "Ultra realistic, cinematic digital art, 4K quality, bright positive mood, "
    "modern aesthetic, clean composition, soft dramatic lighting, inspirational atmosphere, "
    "vision board style, no text, no letters, no words, no watermarks"
)

QUOTES_PROMPT = """\
Generate exactly {count} short, powerful inspirational quotes for a vision board about "{theme}" with goals like: {goals}.

Requirements:
- Each quote should be maximum 10 words
- Make them motivational and positive
- Related to achieving dreams and goals
- Do NOT include author names
- Return ONLY the quotes, one per line
- No numbering, no bullet points, no quotes marks

Example format:
Your dreams are worth the effort
Success begins with believing in yourself
Every day brings new opportunities"""

VISION_QUOTES_PROMPT = """\
You are generating inspirational quotes for a vision board. Follow these instructions EXACTLY.

User's Vision:
{vision}

Goals: {goals}

{banner}
CRITICAL LANGUAGE REQUIREMENTS (MANDATORY)
{banner}

SELECTED LANGUAGE: {languages}

{language_line}
{script_line}

REJECTION CRITERIA - DO NOT GENERATE:
{rejection}

ACCEPTANCE CRITERIA - ONLY GENERATE:
{acceptance}

VALIDATION CHECKLIST (Check each quote):
1. Is this quote in {languages}? If NO, REJECT it.
2. Does this quote use the correct script? If NO, REJECT it.
3. Does this quote contain ANY words from other languages? If YES, REJECT it.
4. Generate a replacement quote that meets ALL criteria.

{banner}

Format Requirements:
- Return valid JSON format ONLY
- Each quote: 3-8 words maximum
- Generate {count} unique quotes
- All quotes must be motivational and relevant

Required JSON Structure:
{structure}

FINAL REMINDER: Every single quote MUST be in {languages} ONLY. No exceptions."""

GOAL_QUOTE_PROMPT = """\
Generate ONE short, powerful, inspirational quote specifically for this goal on a vision board.

Vision Type: {theme}
Goal: {title}
Description: {description}
{vision_line}

Requirements:
- Generate EXACTLY ONE quote (3-8 words maximum)
- Make it specific and relevant to this exact goal: "{title}"
- Use motivational, empowering language
- Make it personal and actionable
- Return ONLY the quote text, nothing else
- No quotation marks, no numbering, no extra text

Examples of good short quotes:
- Dream it. Believe it. Achieve it.
- Your journey starts today.
- Make it happen.
- Success is your destiny."""

QUESTIONS_PROMPT = """\
You are helping someone create a vision board for "{theme}".

Their specific goals are:
{goal_details}

Generate exactly {count} unique, deep, thought-provoking questions that will help them clarify their vision and dreams.

IMPORTANT REQUIREMENTS:
- Each question MUST be different and unique
- Questions should be SPECIFIC to their vision type "{theme}" and their individual goals
- Ask about their vision, feelings, ideal outcomes, and what success looks like
- Make questions personal and introspective
- Each question should be 12-25 words
- Focus on visualization and emotional connection
- Return ONLY the questions, one per line
- No numbering, no bullet points, no extra text

Examples of GOOD questions for different vision types:
- For Money/Wealth: "Describe your ideal lifestyle when you achieve financial freedom - where do you live and what does your day look like?"
- For Health: "How will your body feel and what activities will you enjoy when you reach your peak fitness?"
- For Career: "What recognition and achievements will make you feel most proud in your professional journey?"

Now generate {count} unique questions specifically for "{theme}" with goals: {goals}"""

FALLBACK_QUOTES_PROMPT = """\
Generate exactly {count} short, powerful, universal inspirational quotes about {context}.

Requirements:
- Each quote should be 3-8 words maximum
- Make them motivational and positive
- Universal and timeless
- Return ONLY the quotes, one per line
- No numbering, no bullet points, no quotation marks
- No author names

Examples:
Dream it. Believe it. Achieve it.
Your journey starts today.
Make it happen."""

FALLBACK_QUESTIONS_PROMPT = """\
Generate {count} simple, thoughtful questions for someone creating a vision board about "{theme}".

Requirements:
- Each question should be 10-20 words
- Make them introspective and helpful
- Return ONLY the questions, one per line
- No numbering, no bullet points

Examples:
What does success look like for you?
How will achieving this goal change your life?
What steps are you most excited to take?"""

VISION_BOARD_PROMPT = """\
Create a single photorealistic vision board collage about {theme}.

LAYOUT:
- {size}
- {panel_count} image panels arranged in a clean grid, one panel per goal listed below
- One additional dedicated quote panel with a soft, plain background

GOAL PANELS:
{panels}

PERSONAL VISION (MUST FOLLOW CLOSELY):
{vision}

TIMELINE FEELING: {timeline}

QUOTE PANEL:
- Render ONLY this text, in elegant readable typography: {quote}
- This is the ONLY place in the image where text may appear

CRITICAL INSTRUCTIONS:
- Do NOT render any other text, letters, labels, captions or watermarks in any goal panel
- Show every goal as already achieved, emotionally uplifting and positive
- High-end editorial photography, cinematic lighting, vibrant and uplifting colors, sharp focus"""


def _goal_value(goal, key, default=""):
    if isinstance(goal, dict):
        value = goal.get(key)
    else:
        value = getattr(goal, key, None)
    return default if value is None else value


def normalize_languages(language):
    """Turn a language field (string, list or None) into a non-empty list."""
    if isinstance(language, str):
        languages = [language] if language.strip() else []
    else:
        languages = [lang for lang in (language or []) if lang and lang.strip()]
    return languages or [DEFAULT_LANGUAGE]


def quote_count(goals, count=None):
    if count is not None:
        return max(int(count), 1)
    return max(len(goals or []), 1)


def map_theme(vision_type):
    if not vision_type:
        return "success and happiness"
    return THEME_MAP.get(vision_type, vision_type)


def map_vision_context(vision_type):
    if not vision_type:
        return DEFAULT_VISION_CONTEXT
    return VISION_CONTEXT_MAP.get(vision_type, DEFAULT_VISION_CONTEXT)


def map_timeline(timeline):
    if not timeline:
        return DEFAULT_TIMELINE
    return TIMELINE_MAP.get(timeline, timeline)


def map_board_size(board_size):
    if not board_size:
        return DEFAULT_BOARD_SIZE
    return BOARD_SIZE_MAP.get(board_size, board_size)


def map_goal(goal):
    title = str(_goal_value(goal, "title")).strip()
    words = title.lower().split()
    if words and words[0] in GOAL_MAP:
        return GOAL_MAP[words[0]]
    return _goal_value(goal, "description") or title


def goal_titles(goals, default=""):
    titles = [str(_goal_value(g, "title")) for g in goals or [] if _goal_value(g, "title")]
    return ", ".join(titles) or default


def build_language_instructions(languages, count):
    """Return the (language, script) instruction lines for the selected languages."""
    languages = normalize_languages(languages)
    joined = ", ".join(languages)

    if len(languages) == 1:
        lang = languages[0]
        language_line = f"- Generate ALL {count} quotes EXCLUSIVELY in {lang}. DO NOT use any other language."
        script = LANGUAGE_SCRIPTS.get(lang)
        if script is None:
            return language_line, f"- ALL quotes MUST be written in the native script of {lang}."
        others = [other for other in SUPPORTED_LANGUAGES if other != lang]
        banned = sorted({LANGUAGE_SCRIPTS[o] for o in others if LANGUAGE_SCRIPTS[o] != script})
        script_line = (
            f"- ALL quotes MUST be in {lang} using {script}. "
            f"NO {', NO '.join(others)}, NO other languages."
        )
        if banned:
            script_line += f" DO NOT use {' or '.join(banned)}."
        return language_line, script_line

    if len(languages) == 2:
        half = math.ceil(count / 2)
        language_line = (
            f"- Generate approximately {half} quotes in {languages[0]} and "
            f"{count - half} quotes in {languages[1]}. DO NOT use any other languages."
        )
    else:
        language_line = (
            f"- Distribute the {count} quotes across {joined}, using each language at least once. "
            "DO NOT use any languages outside this list."
        )

    scripts = []
    for lang in languages:
        script = LANGUAGE_SCRIPTS.get(lang, "its native script")
        scripts.append(f"{script} for {lang}")
    return language_line, f"- Use appropriate scripts: {', '.join(scripts)}."


def build_rejection_criteria(languages):
    lines = []
    for lang in normalize_languages(languages):
        script = LANGUAGE_SCRIPTS.get(lang)
        others = [other for other in SUPPORTED_LANGUAGES if other != lang]
        lines.extend(f"- ANY quotes in {other} (when {lang} is required)" for other in others)
        if script == "Devanagari script":
            lines.append("- ANY quotes using Latin alphabet (a-z, A-Z)")
        elif script == "Latin alphabet":
            lines.append("- ANY quotes using Devanagari script (देवनागरी)")
    lines.append("- ANY quotes in Chinese or other unlisted languages")
    return "\n".join(dict.fromkeys(lines))


def build_acceptance_criteria(languages):
    lines = []
    for lang in normalize_languages(languages):
        script = LANGUAGE_SCRIPTS.get(lang, "its native script")
        lines.append(f"- Quotes written ONLY in {lang} language, using ONLY {script}")
        if lang in LANGUAGE_EXAMPLES:
            lines.append(f"- Example VALID {lang} quotes: {LANGUAGE_EXAMPLES[lang]}")
    return "\n".join(lines)


def build_json_structure(count):
    keys = [f"quote{i + 1}" for i in range(count)]
    body = ",\n".join(f'  {json.dumps(key)}: "Quote string"' for key in keys)
    return "{\n" + body + "\n}"


def build_quotes_prompt(vision_type, goals, count=6):
    return QUOTES_PROMPT.format(
        count=count,
        theme=vision_type or "success",
        goals=goal_titles(goals, "success and happiness"),
    )


def build_vision_quotes_prompt(user_vision, goals, languages, count=None):
    languages = normalize_languages(languages)
    count = quote_count(goals, count)
    language_line, script_line = build_language_instructions(languages, count)
    return VISION_QUOTES_PROMPT.format(
        vision=(user_vision or "").strip() or "A happy, successful and fulfilling life.",
        goals=goal_titles(goals),
        banner=BANNER,
        languages=", ".join(languages),
        language_line=language_line,
        script_line=script_line,
        rejection=build_rejection_criteria(languages),
        acceptance=build_acceptance_criteria(languages),
        count=count,
        structure=build_json_structure(count),
    )


def build_goal_quote_prompt(goal, vision_type, user_vision=""):
    title = _goal_value(goal, "title")
    vision_line = f"User's Vision: {user_vision}" if user_vision else ""
    return GOAL_QUOTE_PROMPT.format(
        theme=vision_type or "personal growth",
        title=title,
        description=_goal_value(goal, "description") or title,
        vision_line=vision_line,
    )


def build_questions_prompt(vision_type, goals, count=3):
    details = "\n".join(
        f"{_goal_value(g, 'emoji')} {_goal_value(g, 'title')}: {_goal_value(g, 'description')}".strip()
        for g in goals or []
    )
    return QUESTIONS_PROMPT.format(
        theme=vision_type or "personal growth",
        goal_details=details,
        count=count,
        goals=goal_titles(goals, "personal growth"),
    )


def build_fallback_quotes_prompt(count=5, context="motivation and success"):
    return FALLBACK_QUOTES_PROMPT.format(count=count, context=context)


def build_fallback_questions_prompt(count=3, vision_type="personal growth"):
    return FALLBACK_QUESTIONS_PROMPT.format(count=count, theme=vision_type or "personal growth")


def build_image_prompt(prompt, size="desktop"):
    guide = SIZE_GUIDE_MAP["mobile"] if size == "mobile" else SIZE_GUIDE_MAP["desktop"]
    return f"{prompt}\n\n{guide}"


def build_wallpaper_prompt(vision_type, goal_type="", user_description="", details="", timeline=""):
    """Single-image wallpaper prompt: base style, main goal, vision, theme elements and timeline."""
    elements = WALLPAPER_ELEMENTS.get(vision_type, DEFAULT_WALLPAPER_ELEMENTS)
    if details:
        elements = f"{elements}, {details}"
    prompt = (
        f"{WALLPAPER_STYLE}, MAIN GOAL: {goal_type or 'a dream life achieved'}, "
        f"DETAILED VISION: {user_description or 'success and happiness'}, "
        f"VISUAL ELEMENTS: {elements}, "
        f"TIMELINE FEELING: {map_timeline(timeline)}, "
        "Show the end result as already achieved, future success already manifested, "
        "emotionally uplifting and motivating imagery, suitable for a vision board or desktop wallpaper, "
        "photorealistic quality with artistic touch"
    )
    return " ".join(prompt.split())


def build_vision_board_prompt(theme, goals, timeline="", board_size="desktop",
                              user_vision="", custom_vision_text="", quotes=None):
    """Collage prompt: one panel per goal plus a single panel carrying the quote."""
    goals = list(goals or [])
    panels = "\n".join(
        f"- Panel {i}: {_goal_value(g, 'title') or 'Goal'}: {map_goal(g)}"
        for i, g in enumerate(goals, 1)
    ) or f"- Panel 1: {map_vision_context(theme)}"

    vision_parts = [part.strip() for part in (custom_vision_text, user_vision) if part and part.strip()]
    quote = next((q for q in quotes or [] if q), "Dream it. Believe it. Achieve it.")

    return VISION_BOARD_PROMPT.format(
        theme=map_theme(theme),
        size=map_board_size(board_size),
        panel_count=max(len(goals), 1),
        panels=panels,
        vision=" ".join(vision_parts) or map_vision_context(theme),
        timeline=map_timeline(timeline),
        quote=json.dumps(quote, ensure_ascii=False),
    )
