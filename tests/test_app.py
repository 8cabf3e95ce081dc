import base64

from gemini import NoImageError
from helpers import fake_image, png_bytes
from quote_pipeline import FALLBACK_QUOTES, MINIMAL_QUESTIONS

FITNESS = {"id": 1, "emoji": "💪", "title": "Peak Fitness", "description": "Achieve my ideal body"}
PEACE = {"id": 2, "emoji": "🧘", "title": "Inner Peace", "description": "Daily meditation practice"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_vision_quotes_success(client, gateway):
    gateway.text = ["Dream Big.\n"]
    response = client.post("/generate-vision-quotes", json={
        "visionType": "health", "goals": [FITNESS], "language": ["English"], "userVision": "",
    })
    assert response.status_code == 200
    assert response.get_json() == {"success": True, "quotes": ["Dream Big."]}


def test_vision_quotes_remote_error_returns_500_with_fallback(client, gateway):
    gateway.text = [RuntimeError("upstream unavailable")]
    response = client.post("/generate-vision-quotes", json={
        "visionType": "health", "goals": [FITNESS], "language": "English",
    })
    body = response.get_json()
    assert response.status_code == 500
    assert body["success"] is False
    assert body["error"] == "upstream unavailable"
    assert body["quotes"]
    assert set(body["quotes"]) <= set(FALLBACK_QUOTES["English"])


def test_vision_quotes_marathi_validation_failure_uses_marathi_table(client, gateway):
    gateway.text = ["Dream Big.\nStay Focused.\nयश तुमचे आहे."]
    response = client.post("/generate-vision-quotes", json={
        "goals": [FITNESS, PEACE, {"id": 3, "title": "Wellness"}], "language": ["Marathi"],
    })
    body = response.get_json()
    assert response.status_code == 200
    assert body["quotes"] == list(FALLBACK_QUOTES["Marathi"][:3])


def test_vision_quotes_prompt_carries_language_split(client, gateway):
    gateway.text = ['{"quote1": "Dream Big.", "quote2": "सफलता आपकी है।", "quote3": "Stay Focused."}']
    response = client.post("/generate-vision-quotes", json={
        "goals": [FITNESS, PEACE, {"id": 3, "title": "Wellness"}], "language": ["English", "Hindi"],
    })
    assert response.status_code == 200
    assert "approximately 2 quotes in English and 1 quotes in Hindi" in gateway.text_prompts[0]


def test_quotes_endpoint(client, gateway):
    gateway.text = ["Your dreams are worth it\nSuccess begins today\nKeep rising\n1\n"]
    response = client.post("/generate-quotes", json={"visionType": "career", "goals": [FITNESS]})
    body = response.get_json()
    assert response.status_code == 200
    assert body["quotes"][:3] == ["Your dreams are worth it", "Success begins today", "Keep rising"]


def test_quotes_endpoint_all_failures(client, gateway):
    gateway.text = [RuntimeError("a"), RuntimeError("b")]
    response = client.post("/generate-quotes", json={"visionType": "career", "goals": []})
    body = response.get_json()
    assert response.status_code == 500
    assert body["success"] is False
    assert len(body["quotes"]) == 6


def test_individual_quotes_keyed_by_goal_id(client, gateway):
    gateway.text = lambda prompt: "Strong body, calm mind." if "Peak Fitness" in prompt else "Peace lives within you."
    response = client.post("/generate-individual-quotes", json={
        "goals": [FITNESS, PEACE], "userVision": "", "visionType": "health",
    })
    body = response.get_json()
    assert response.status_code == 200
    assert body["quotes"] == {"1": "Strong body, calm mind.", "2": "Peace lives within you."}


def test_individual_quotes_all_remote_errors(client, gateway):
    gateway.text = lambda prompt: RuntimeError("down")
    response = client.post("/generate-individual-quotes", json={"goals": [FITNESS, PEACE], "visionType": "health"})
    body = response.get_json()
    assert response.status_code == 500
    assert set(body["quotes"]) == {"1", "2"}
    assert all(body["quotes"].values())


def test_individual_quotes_requires_goals(client):
    response = client.post("/generate-individual-quotes", json={"goals": []})
    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_questions_endpoint(client, gateway):
    gateway.text = ["What will your mornings feel like?\nWho will you share it with?\nWhat changes first?"]
    response = client.post("/generate-questions", json={"visionType": "health", "goals": [FITNESS]})
    body = response.get_json()
    assert response.status_code == 200
    assert len(body["questions"]) == 3


def test_questions_fallback(client, gateway):
    gateway.text = [RuntimeError("x"), RuntimeError("y")]
    response = client.post("/generate-questions", json={"visionType": "health", "goals": [FITNESS]})
    assert response.status_code == 500
    assert response.get_json()["questions"] == list(MINIMAL_QUESTIONS)


def test_generate_image(client, gateway):
    gateway.image = [fake_image()]
    response = client.post("/generate-image", json={"prompt": "A calm lake", "size": "mobile"})
    body = response.get_json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["mimeType"] == "image/png"
    assert base64.b64decode(body["image"])
    assert "portrait" in gateway.image_prompts[0]


def test_generate_image_without_image_part(client, gateway):
    gateway.image = [NoImageError("I can only describe this.")]
    response = client.post("/generate-image", json={"prompt": "A calm lake"})
    assert response.status_code == 400
    assert response.get_json()["error"] == "I can only describe this."


def test_generate_image_remote_error(client, gateway):
    gateway.image = [RuntimeError("quota exceeded")]
    response = client.post("/generate-image", json={"prompt": "A calm lake"})
    assert response.status_code == 500
    assert response.get_json() == {"success": False, "error": "quota exceeded"}


def test_generate_image_rejects_bad_body(client):
    assert client.post("/generate-image", json={"prompt": "   "}).status_code == 400
    assert client.post("/generate-image", json={"prompt": "x", "size": "tablet"}).status_code == 400
    assert client.post("/generate-image", data="not json").status_code == 400


def test_goal_images_parallel(client, gateway):
    gateway.image = lambda prompt: RuntimeError("nope") if "Inner Peace" in prompt else fake_image()
    response = client.post("/generate-goal-images", json={
        "goals": [FITNESS, PEACE], "visionType": "health", "mode": "parallel",
        "quotes": {"1": "Strong body, calm mind."},
    })
    body = response.get_json()
    assert response.status_code == 200
    assert body["images"]["2"] is None
    assert body["images"]["1"].startswith("data:image/png;base64,")
    assert [p["goalId"] for p in body["prompts"]] == [1, 2]
    assert body["prompts"][0]["quote"] == "Strong body, calm mind."


def test_vision_board_generates_quote_then_collage(client, gateway):
    gateway.text = ["Dream Big."]
    gateway.image = [fake_image()]
    response = client.post("/generate-vision-board", json={
        "theme": "health", "goals": [FITNESS, PEACE], "timeline": "1year",
        "boardSize": "desktop", "language": ["English"],
    })
    body = response.get_json()
    assert response.status_code == 200
    assert body["quotes"] == ["Dream Big."]
    assert '"Dream Big."' in body["prompt"]
    assert "Panel 2: Inner Peace" in gateway.image_prompts[0]


def test_vision_board_image_failure_keeps_prompt(client, gateway):
    gateway.image = [RuntimeError("boom")]
    response = client.post("/generate-vision-board", json={
        "theme": "money", "goals": [FITNESS], "quotes": ["Make It Happen."],
    })
    body = response.get_json()
    assert response.status_code == 500
    assert body["quotes"] == ["Make It Happen."]
    assert body["prompt"]
    assert gateway.text_prompts == []


def test_compose_board(client):
    image = "data:image/png;base64," + base64.b64encode(png_bytes()).decode()
    response = client.post("/compose-board", json={
        "goals": [FITNESS, PEACE], "images": {"1": image, "2": None},
        "quotes": ["Dream Big."], "size": "mobile",
    })
    body = response.get_json()
    assert response.status_code == 200
    assert body["layout"]["type"] == "horizontal"
    assert base64.b64decode(body["image"]).startswith(b"\x89PNG")


def test_compose_board_rejects_bad_image_data(client):
    response = client.post("/compose-board", json={"goals": [FITNESS], "images": {"1": "garbage"}})
    assert response.status_code == 400
    bad_png = "data:image/png;base64," + base64.b64encode(b"not an image").decode()
    response = client.post("/compose-board", json={"goals": [FITNESS], "images": {"1": bad_png}})
    assert response.status_code == 400


def test_generate_image_builds_wallpaper_prompt_without_prompt(client, gateway):
    gateway.image = [fake_image()]
    response = client.post("/generate-image", json={
        "visionType": "money", "goalType": "Dream Home", "userDescription": "A villa by the sea",
        "timeline": "5years",
    })
    assert response.status_code == 200
    sent = gateway.image_prompts[0]
    assert "MAIN GOAL: Dream Home" in sent
    assert "DETAILED VISION: A villa by the sea" in sent
    assert "landscape" in sent


def test_non_string_language_is_rejected(client):
    response = client.post("/generate-vision-quotes", json={"goals": [], "language": [1]})
    assert response.status_code == 400
    assert response.get_json()["success"] is False
    assert client.post("/generate-quotes", json={"language": {"name": "English"}}).status_code == 400


def test_compose_board_rejects_too_many_goals(client):
    goals = [{"id": i, "title": f"Goal {i}"} for i in range(60)]
    response = client.post("/compose-board", json={"goals": goals, "images": {}})
    assert response.status_code == 400
    assert response.get_json()["success"] is False
