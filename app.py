import base64
import binascii
import logging
import os
import time

from dotenv import load_dotenv
from flask import Flask, request, jsonify
from flask_cors import CORS
from pydantic import ValidationError

from board_builder import build_goal_prompts, compose_board, decode_data_url
from gemini import GeminiGateway, NoImageError
from image_batch import generate_images_parallel, generate_images_sequential
from quote_pipeline import (
    resolve_individual_quotes,
    resolve_questions,
    resolve_quotes,
    resolve_vision_quotes,
)
from schemas import (
    ComposeBoardRequest,
    GoalImagesRequest,
    ImageRequest,
    IndividualQuotesRequest,
    QuestionsRequest,
    QuotesRequest,
    VisionBoardRequest,
    VisionQuotesRequest,
)
from vision_prompts import build_image_prompt, build_vision_board_prompt, build_wallpaper_prompt

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
TEXT_MODEL = os.getenv("TEXT_MODEL", "gemini-2.0-flash")
IMAGE_MODEL = os.getenv("IMAGE_MODEL", "gemini-2.5-flash-image")
GEMINI_TIMEOUT_MS = int(os.getenv("GEMINI_TIMEOUT_MS", "300000"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
PORT = int(os.getenv("PORT", "3002"))

if GEMINI_API_KEY:
    logger.info("API key loaded (length %d)", len(GEMINI_API_KEY))
else:
    logger.error("GEMINI_API_KEY is missing; every request will be served from fallbacks")

app = Flask(__name__)
CORS(app, origins=CORS_ORIGINS, methods=["GET", "POST", "OPTIONS"],
     allow_headers=["Content-Type", "Authorization"])

gateway = GeminiGateway(
    api_key=GEMINI_API_KEY,
    text_model=TEXT_MODEL,
    image_model=IMAGE_MODEL,
    timeout_ms=GEMINI_TIMEOUT_MS,
)


async def generate_text(prompt):
    return await gateway.agenerate_text(prompt)


async def generate_image(prompt, size="desktop"):
    return await gateway.agenerate_image(build_image_prompt(prompt, size))


def parse_body(model):
    return model.model_validate(request.get_json(silent=True) or {})


@app.errorhandler(ValidationError)
def handle_validation_error(e):
    errors = "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}" for err in e.errors()
    )
    return jsonify({"success": False, "error": errors}), 400


def resolution_response(key, resolution):
    if resolution.failed:
        return jsonify({"success": False, "error": resolution.error, key: resolution.items}), 500
    return jsonify({"success": True, key: resolution.items})


@app.route("/generate-image", methods=["POST"])
async def generate_image_route():
    payload = parse_body(ImageRequest)
    prompt = payload.prompt or build_wallpaper_prompt(
        payload.vision_type, payload.goal_type, payload.user_description, payload.details, payload.timeline,
    )
    logger.info("Generating %s image for prompt: %s...", payload.size, prompt[:100])

    try:
        start = time.time()
        image = await generate_image(prompt, payload.size)
        elapsed = round(time.time() - start, 1)
        return jsonify({"success": True, "image": image.data, "mimeType": image.mime_type, "elapsed": elapsed})
    except NoImageError as e:
        return jsonify({"success": False, "error": str(e)}), 400
    except Exception as e:
        logger.exception("Image generation error")
        return jsonify({"success": False, "error": str(e)}), 500


@app.route("/generate-quotes", methods=["POST"])
async def generate_quotes():
    payload = parse_body(QuotesRequest)
    logger.info("Generating quotes for %s (%d goals)", payload.vision_type, len(payload.goals))
    resolution = await resolve_quotes(generate_text, payload.vision_type, payload.goals)
    return resolution_response("quotes", resolution)


@app.route("/generate-vision-quotes", methods=["POST"])
async def generate_vision_quotes():
    payload = parse_body(VisionQuotesRequest)
    logger.info("Generating vision quotes in [%s]", ", ".join(payload.languages))
    resolution = await resolve_vision_quotes(
        generate_text, payload.user_vision, payload.goals, payload.languages, payload.count,
    )
    return resolution_response("quotes", resolution)


@app.route("/generate-individual-quotes", methods=["POST"])
async def generate_individual_quotes():
    payload = parse_body(IndividualQuotesRequest)
    logger.info("Generating individual quotes for %d goals (%s)", len(payload.goals), payload.vision_type)
    resolutions = await resolve_individual_quotes(
        generate_text, payload.goals, payload.vision_type, payload.user_vision,
    )
    quotes = {goal_id: res.items[0] for goal_id, res in resolutions.items()}

    errors = [res.error for res in resolutions.values() if res.failed]
    if errors and len(errors) == len(resolutions):
        return jsonify({"success": False, "error": errors[0], "quotes": quotes}), 500
    return jsonify({"success": True, "quotes": quotes})


@app.route("/generate-questions", methods=["POST"])
async def generate_questions():
    payload = parse_body(QuestionsRequest)
    logger.info("Generating questions for %s", payload.vision_type)
    resolution = await resolve_questions(generate_text, payload.vision_type, payload.goals)
    return resolution_response("questions", resolution)


@app.route("/generate-goal-images", methods=["POST"])
async def generate_goal_images():
    """Build one prompt per goal and generate its image."""
    payload = parse_body(GoalImagesRequest)
    goal_prompts = build_goal_prompts(payload.goals, payload.vision_type, payload.user_vision, payload.quotes)

    def on_progress(percent):
        logger.info("Goal images: %.0f%% complete", percent)

    batch = generate_images_parallel if payload.mode == "parallel" else generate_images_sequential
    images = await batch(goal_prompts, generate_image, payload.size, on_progress)
    return jsonify({
        "success": True,
        "images": images,
        "prompts": [gp.to_dict() for gp in goal_prompts],
    })


@app.route("/generate-vision-board", methods=["POST"])
async def generate_vision_board():
    """Single collage image; the quote is the only text allowed in it."""
    payload = parse_body(VisionBoardRequest)

    quotes = payload.quotes
    if not quotes:
        resolution = await resolve_vision_quotes(
            generate_text, payload.user_vision, payload.goals, payload.languages, count=1,
        )
        quotes = resolution.items

    prompt = build_vision_board_prompt(
        payload.vision_type, payload.goals, payload.timeline, payload.board_size,
        payload.user_vision, payload.custom_vision_text, quotes,
    )

    try:
        image = await generate_image(prompt, payload.board_size)
    except NoImageError as e:
        return jsonify({"success": False, "error": str(e), "prompt": prompt, "quotes": quotes}), 400
    except Exception as e:
        logger.exception("Vision board generation error")
        return jsonify({"success": False, "error": str(e), "prompt": prompt, "quotes": quotes}), 500

    return jsonify({
        "success": True,
        "image": image.data,
        "mimeType": image.mime_type,
        "prompt": prompt,
        "quotes": quotes,
    })


@app.route("/compose-board", methods=["POST"])
def compose_board_route():
    """Assemble goal images and quotes into one downloadable PNG."""
    payload = parse_body(ComposeBoardRequest)

    images = {}
    try:
        for goal_id, image_data in payload.images.items():
            images[goal_id] = decode_data_url(image_data)[1] if image_data else None
    except (ValueError, IndexError, binascii.Error):
        return jsonify({"success": False, "error": "Invalid image data"}), 400

    try:
        png, layout = compose_board(
            payload.goals, images, payload.quotes, payload.size, payload.title, payload.affirmation,
        )
    except (OSError, ValueError) as e:
        logger.warning("Could not compose board: %s", e)
        return jsonify({"success": False, "error": "Invalid image data"}), 400

    return jsonify({
        "success": True,
        "image": base64.b64encode(png).decode("utf-8"),
        "mimeType": "image/png",
        "layout": layout.to_dict(),
    })


@app.route("/health")
def health():
    return jsonify({"status": "ok", "message": "Gemini proxy server is running"})


if __name__ == "__main__":
    logger.info("Gemini proxy server running on http://localhost:%d", PORT)
    app.run(debug=os.getenv("FLASK_DEBUG") == "1", port=PORT, threaded=True)
