import base64
import io
import math
import textwrap
from dataclasses import dataclass

from PIL import Image, ImageDraw, ImageFont, ImageOps

from vision_prompts import map_vision_context

DEFAULT_QUOTES = (
    "Dream it. Believe it. Achieve it.",
    "Your only limit is your imagination.",
    "Make it happen.",
    "The future belongs to those who believe.",
    "Success starts with a vision.",
    "Believe in yourself.",
    "You are capable of amazing things.",
    "Every day is a new opportunity.",
)

BASE_STYLE = (
    "High-end editorial photography, 8k resolution, photorealistic, cinematic lighting, "
    "vibrant and uplifting colors, sharp focus, highly detailed, professional composition"
)

NEGATIVE_CONSTRAINTS = (
    "Avoid: cartoon, illustration, 3d render, drawing, painting, watermark, "
    "text overlay, blurry, distorted, dark, gloomy"
)

VISION_GOAL_PROMPT = """\
Create a stunning, photorealistic image for a vision board.

PRIMARY VISION (MUST FOLLOW CLOSELY):
{vision}

Specific Goal: {title}
Additional Details: {details}
Theme: {context}

Style: {style}

CRITICAL INSTRUCTIONS:
- The image MUST incorporate specific elements mentioned in the user's vision above
- If specific objects, activities, or scenes are mentioned (like bikes, cars, beaches, etc.), they MUST be included
- Make the image reflect the exact scenario and details described by the user
- DO NOT include any text or quotes in the image

Requirements:
- The image must look like a real, high-quality photograph WITHOUT any text
- Emotional tone: Uplifting, inspiring, and positive
- MUST reflect the user's specific vision and mentioned details
- {negative}"""

GOAL_PROMPT = """\
Create a stunning, photorealistic image representing: {title}.

Scene Details: {details}
Context: {context}

Style: {style}

Requirements:
- The image must look like a real, high-quality photograph WITHOUT any text
- Emotional tone: Uplifting, inspiring, and positive
- DO NOT include any text or quotes in the image
- {negative}"""

CANVAS_SIZES = {
    "desktop": (1920, 1080),
    "mobile": (1080, 1920),
}

BACKGROUND = (250, 247, 242)
PLACEHOLDER = (226, 220, 236)
INK = (40, 36, 56)
ACCENT = (102, 126, 234)


@dataclass
class GoalPrompt:
    goal_id: object
    prompt: str
    quote: str

    def to_dict(self):
        return {"goalId": self.goal_id, "prompt": self.prompt, "quote": self.quote}


@dataclass
class BoardLayout:
    type: str
    columns: int
    rows: int
    cell_aspect: str

    def to_dict(self):
        return {"type": self.type, "columns": self.columns, "rows": self.rows, "cellAspect": self.cell_aspect}


def _flatten(text):
    # Prompts go out on a single line.
    return " ".join(text.split())


def build_goal_prompts(goals, vision_type, user_vision="", goal_quotes=None):
    """One image prompt per goal, in input order.

    The quote travels alongside the prompt for separate display and is never
    part of the image.
    """
    goal_quotes = goal_quotes or {}
    vision = (user_vision or "").strip()
    context = map_vision_context(vision_type)

    prompts = []
    for index, goal in enumerate(goals):
        quote = goal_quotes.get(str(goal.id)) or DEFAULT_QUOTES[index % len(DEFAULT_QUOTES)]
        fields = dict(
            title=goal.title,
            details=goal.description or goal.title,
            context=context,
            style=BASE_STYLE,
            negative=NEGATIVE_CONSTRAINTS,
        )
        if vision:
            prompt = VISION_GOAL_PROMPT.format(vision=vision, **fields)
        else:
            prompt = GOAL_PROMPT.format(**fields)
        prompts.append(GoalPrompt(goal_id=goal.id, prompt=_flatten(prompt), quote=quote))
    return prompts


def get_board_layout(goal_count):
    if goal_count <= 2:
        return BoardLayout("horizontal", 2, 1, "16/9")
    if goal_count <= 4:
        return BoardLayout("grid", 2, 2, "4/3")
    return BoardLayout("grid", 3, max(2, math.ceil(goal_count / 3)), "4/3")


def decode_data_url(image_data):
    """Split a ``data:<mime>;base64,<payload>`` string into (mime, bytes)."""
    header, b64 = image_data.split(",", 1)
    mime = header.split(":")[1].split(";")[0]
    return mime, base64.b64decode(b64)


def _font(size):
    return ImageFont.load_default(size=size)


def _draw_centered(draw, box, text, font, fill=INK, width=40):
    left, top, right, bottom = box
    wrapped = textwrap.fill(text, width=width)
    bbox = draw.multiline_textbbox((0, 0), wrapped, font=font, align="center")
    w, h = bbox[2] - bbox[0], bbox[3] - bbox[1]
    x = left + (right - left - w) / 2
    y = top + (bottom - top - h) / 2
    draw.multiline_text((x, y), wrapped, font=font, fill=fill, align="center")


def compose_board(goals, images, quotes=(), size="desktop", title="My Vision Board", affirmation=""):
    """Render the downloadable board: title banner, goal grid, quotes strip.

    ``images`` maps goal id (as a string) to raw image bytes or None; goals
    without an image get a placeholder cell with their title. Returns
    ``(png_bytes, layout)``.
    """
    width, height = CANVAS_SIZES.get(size, CANVAS_SIZES["desktop"])
    layout = get_board_layout(len(goals))
    columns, rows = layout.columns, layout.rows
    if size == "mobile" and columns > rows:
        columns, rows = rows, columns
    rows = max(rows, math.ceil(len(goals) / columns)) if goals else rows

    board = Image.new("RGB", (width, height), BACKGROUND)
    draw = ImageDraw.Draw(board)
    margin = width // 40

    banner_h = height // 8
    _draw_centered(draw, (0, margin // 2, width, banner_h * 2 // 3), title, _font(height // 18), fill=ACCENT)
    if affirmation:
        _draw_centered(draw, (0, banner_h * 2 // 3, width, banner_h), affirmation, _font(height // 48), width=90)

    quotes = [q for q in quotes if q]
    quotes_h = height // 6 if quotes else 0
    grid_top = banner_h + margin // 2
    grid_bottom = height - quotes_h - margin
    cell_w = max((width - margin * (columns + 1)) // columns, 1)
    cell_h = max((grid_bottom - grid_top - margin * (rows - 1)) // rows, 1)

    for index, goal in enumerate(goals):
        row, col = divmod(index, columns)
        x = margin + col * (cell_w + margin)
        y = grid_top + row * (cell_h + margin)
        raw = images.get(str(goal.id))
        if raw:
            with Image.open(io.BytesIO(raw)) as img:
                cell = ImageOps.fit(img.convert("RGB"), (cell_w, cell_h), Image.LANCZOS)
            board.paste(cell, (x, y))
        else:
            draw.rectangle((x, y, x + cell_w, y + cell_h), fill=PLACEHOLDER)
            _draw_centered(draw, (x, y, x + cell_w, y + cell_h), goal.title or "Goal", _font(max(cell_h // 10, 10)), width=20)

    if quotes:
        strip_top = height - quotes_h - margin // 2
        slot_w = (width - margin * 2) // len(quotes)
        font = _font(max(quotes_h // 8, 12))
        for i, quote in enumerate(quotes):
            left = margin + i * slot_w
            _draw_centered(draw, (left, strip_top, left + slot_w, height - margin // 2),
                           f"\"{quote}\"", font, width=max(slot_w // 22, 10))

    buf = io.BytesIO()
    board.save(buf, format="PNG")
    return buf.getvalue(), layout
