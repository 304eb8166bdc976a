"""Chat-completion payload construction for nutrition analysis."""

import base64
from collections.abc import Callable
from dataclasses import dataclass

SYSTEM_PROMPT = """You are a nutrition analysis AI. When given a photo of food, \
identify each distinct food item visible on the plate/image. For each item, estimate:
- name (string)
- calories (number, kcal)
- protein (number, grams)
- carbs (number, grams)
- fat (number, grams)
- amount (string, e.g. "1 cup", "150g", "1 medium piece")

Be as accurate as possible with typical serving sizes visible in the image.

IMPORTANT: Respond ONLY with valid JSON in this exact format, no markdown, \
no extra text:
{
  "foods": [
    {
      "name": "Grilled Chicken Breast",
      "calories": 165,
      "protein": 31,
      "carbs": 0,
      "fat": 3.6,
      "amount": "150g"
    }
  ]
}"""

USER_PROMPT = (
    "Analyze this food image. Identify every food item and estimate its "
    "nutritional values. Return JSON only."
)

FALLBACK_PROMPT = (
    "The image could not be processed. Estimate the nutritional values of a "
    "typical mixed meal: one grilled chicken breast, one cup of cooked white "
    "rice and a side salad with olive oil dressing. Return JSON only."
)

DEFAULT_MEDIA_TYPE = "image/jpeg"
MAX_TOKENS = 1000
MAX_COMPLETION_TOKENS = 2000
TEMPERATURE = 0.2

PayloadShape = Callable[[str, str, str], dict[str, object]]
TextShape = Callable[[str], dict[str, object]]


def _standard_shape(model: str, image_url: str, prompt: str) -> dict[str, object]:
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {
                        "type": "image_url",
                        "image_url": {"url": image_url, "detail": "high"},
                    },
                ],
            },
        ],
        "max_tokens": MAX_TOKENS,
        "temperature": TEMPERATURE,
    }


def _reasoning_shape(model: str, image_url: str, prompt: str) -> dict[str, object]:
    # These models reject max_tokens and custom temperature.
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {
                        "type": "image_url",
                        "image_url": {"url": canonical_data_url(image_url)},
                    },
                ],
            },
        ],
        "max_completion_tokens": MAX_COMPLETION_TOKENS,
        "stream": False,
    }


def _standard_text_shape(model: str) -> dict[str, object]:
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": FALLBACK_PROMPT},
        ],
        "max_tokens": MAX_TOKENS,
        "temperature": TEMPERATURE,
    }


def _reasoning_text_shape(model: str) -> dict[str, object]:
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": FALLBACK_PROMPT},
        ],
        "max_completion_tokens": MAX_COMPLETION_TOKENS,
        "stream": False,
    }


@dataclass(frozen=True)
class PayloadVariant:
    """Payload shapes for one model family.

    A model belongs to the family when its name contains one of ``markers``
    or its id, after any ``vendor/`` part, starts with one of ``prefixes``.

    ``text_shape`` is set only for families that get a text-only retry after
    a structured provider error.
    """

    name: str
    markers: tuple[str, ...]
    shape: PayloadShape
    text_shape: TextShape | None = None
    prefixes: tuple[str, ...] = ()

    @property
    def text_fallback(self) -> bool:
        return self.text_shape is not None

    def matches(self, model: str) -> bool:
        """Return True when the model name matches a marker or a prefix."""
        lowered = model.strip().lower()
        if any(marker in lowered for marker in self.markers):
            return True
        return bool(self.prefixes) and lowered.rpartition("/")[2].startswith(
            self.prefixes
        )


STANDARD_VARIANT = PayloadVariant(name="standard", markers=(), shape=_standard_shape)

PAYLOAD_VARIANTS: tuple[PayloadVariant, ...] = (
    PayloadVariant(
        name="reasoning",
        markers=("gpt-5", "o1-", "o3", "o4-"),
        shape=_reasoning_shape,
        text_shape=_reasoning_text_shape,
        prefixes=("o1", "o3", "o4"),
    ),
)


def select_variant(model: str) -> PayloadVariant:
    """Return the first matching variant, or the standard one."""
    for variant in PAYLOAD_VARIANTS:
        if variant.matches(model):
            return variant
    return STANDARD_VARIANT


def build_analysis_payload(
    image: bytes | str, model: str, prompt: str = USER_PROMPT
) -> dict[str, object]:
    """Build the chat-completion payload for an image analysis request."""
    image_url = to_data_url(image)
    return select_variant(model).shape(model, image_url, prompt)


def build_text_fallback_payload(model: str) -> dict[str, object]:
    """Build a text-only request describing a typical mixed meal."""
    text_shape = select_variant(model).text_shape or _standard_text_shape
    return text_shape(model)


def to_data_url(image: bytes | str) -> str:
    """Convert raw bytes or base64 text to a data URL for image input."""
    if isinstance(image, bytes):
        mime_type = _detect_mime_type(image)
        encoded = base64.b64encode(image).decode("utf-8")
        return f"data:{mime_type};base64,{encoded}"
    cleaned = image.strip()
    if cleaned.startswith("data:"):
        return cleaned
    return f"data:{DEFAULT_MEDIA_TYPE};base64,{cleaned}"


def canonical_data_url(image_url: str) -> str:
    """Strip any data URL prefix and re-add the default one."""
    _, separator, payload = image_url.partition(",")
    if not separator or not image_url.startswith("data:"):
        payload = image_url
    return f"data:{DEFAULT_MEDIA_TYPE};base64,{payload.strip()}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return DEFAULT_MEDIA_TYPE
