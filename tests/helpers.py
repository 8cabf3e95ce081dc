import asyncio
import base64
import io

from PIL import Image

from gemini import GeneratedImage


class FakeGateway:
    """Stands in for GeminiGateway.

    ``text`` and ``image`` are either a list consumed in order or a callable
    taking the prompt. Exceptions (instances) are raised instead of returned.
    """

    def __init__(self, text=None, image=None):
        self.text = text if text is not None else []
        self.image = image if image is not None else []
        self.text_prompts = []
        self.image_prompts = []

    @staticmethod
    def _next(source, prompt):
        if callable(source):
            result = source(prompt)
        elif source:
            result = source.pop(0)
        else:
            result = RuntimeError("no scripted response")
        if isinstance(result, Exception):
            raise result
        return result

    async def agenerate_text(self, prompt, model=None):
        self.text_prompts.append(prompt)
        return self._next(self.text, prompt)

    async def agenerate_image(self, prompt, model=None):
        self.image_prompts.append(prompt)
        return self._next(self.image, prompt)


def png_bytes(color=(200, 30, 30), size=(64, 48)):
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def fake_image(color=(200, 30, 30)):
    return GeneratedImage(base64.b64encode(png_bytes(color)).decode("utf-8"), "image/png")


def scripted(items):
    """Coroutine function returning the scripted items in order."""
    queue = list(items)

    async def generate(prompt):
        result = queue.pop(0) if queue else RuntimeError("exhausted")
        if isinstance(result, Exception):
            raise result
        return result

    return generate


def run(coro):
    return asyncio.run(coro)
