import asyncio
import base64
import logging
from dataclasses import dataclass

from google import genai
from google.genai import types
from google.genai.types import Modality

logger = logging.getLogger(__name__)


class NoImageError(RuntimeError):
    """The image model answered without an image part."""

    def __init__(self, text=None):
        super().__init__(text or "No image generated")
        self.text = text


@dataclass
class GeneratedImage:
    data: str
    mime_type: str = "image/png"

    @property
    def data_url(self):
        return f"data:{self.mime_type};base64,{self.data}"


class GeminiGateway:
    """Text and image generation against the Gemini API.

    The SDK client is created on first use, so a process started without
    ``GEMINI_API_KEY`` still serves fallbacks instead of crashing.
    """

    def __init__(self, api_key=None, text_model="gemini-2.0-flash",
                 image_model="gemini-2.5-flash-image", timeout_ms=300_000):
        self.api_key = api_key
        self.text_model = text_model
        self.image_model = image_model
        self.timeout_ms = timeout_ms
        self._client = None

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise RuntimeError("GEMINI_API_KEY is not configured")
            self._client = genai.Client(
                api_key=self.api_key,
                http_options=types.HttpOptions(timeout=self.timeout_ms),
            )
        return self._client

    def generate_text(self, prompt, model=None):
        response = self.client.models.generate_content(
            model=model or self.text_model,
            contents=prompt,
        )
        return response.text or ""

    def generate_image(self, prompt, model=None):
        config = types.GenerateContentConfig(
            response_modalities=[Modality.TEXT, Modality.IMAGE],
        )
        response = self.client.models.generate_content(
            model=model or self.image_model, contents=prompt, config=config,
        )

        text = None
        for part in response.candidates[0].content.parts:
            if part.inline_data and part.inline_data.data:
                b64 = base64.b64encode(part.inline_data.data).decode("utf-8")
                return GeneratedImage(b64, part.inline_data.mime_type or "image/png")
            if part.text:
                text = part.text
        raise NoImageError(text)

    async def agenerate_text(self, prompt, model=None):
        return await asyncio.to_thread(self.generate_text, prompt, model)

    async def agenerate_image(self, prompt, model=None):
        return await asyncio.to_thread(self.generate_image, prompt, model)

    def list_models(self):
        return [
            (m.name, list(m.supported_actions or []))
            for m in self.client.models.list()
        ]
