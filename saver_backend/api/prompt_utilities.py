"""
Completion client and prompt helpers (text + optional image → reply)
====================================================================

Purpose
-------
Turns a caller prompt, optionally with an image, into the assistant's reply
using an OpenAI chat model through LangChain.

Key Functions
-------------
- normalize_mime          : Keep only supported image MIME types (jpg -> jpeg).
- to_data_url             : Turn raw base64 or a data URL into a well-formed data URL.
- build_messages          : System prompt + multimodal HumanMessage.
- format_conversation     : Flatten prior case messages into one prompt.
- CompletionClient        : Wraps `ChatOpenAI`; `complete(prompt, image=None)`.

Dependencies
------------
LangChain (`langchain_openai.ChatOpenAI`, `langchain_core.messages`).
Requires settings.API_KEY and settings.OPEN_AI_MODEL.
"""

import logging
import re
from typing import Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from saver_backend.database.config.config import settings
from saver_backend.relay.errors import UpstreamError

logger = logging.getLogger("uvicorn")

SYSTEM_PROMPT = """Think like a doctor: analyze symptoms, suggest possible diagnoses, recommend tests, treatments, and referrals.

Purpose: Help healthcare professionals avoid malpractice with the highest level of professionalism, depth, legal soundness, and evidence-based guidance, and write report summaries when needed.

Clarity: Be confident, direct, and provide clear, actionable advice, no summary phrases.

Legal & Medical: Follow clinical guidelines, apply past legal precedents (without naming them), and recommend necessary tests, treatments, referrals, etc.

Communication: Use the highest professional phrasing and avoid generalizations.

Risk Management: Advise on documenting red flags.

Compliance: Align with HIPAA, GDPR, AMA, AHA, and HHS.

Emergency: Prioritize immediate action in life-threatening and emergency cases.

Reports: If the prompt starts with "report:" summarize and format it professionally as an appointment report.

Other: Only answer relevant medical/legal queries, including requests to fix something.

Keep every answer under 600 words."""

_DATA_URL = re.compile(r"^data:(?P<mime>[^;,]+)?(?:;[^,]*)?,(?P<data>.*)$", re.DOTALL)


def normalize_mime(mt: str) -> str:
    """
    Keep only 'image/<subtype>' and map oddities (jpg -> jpeg).
    Strip any extra parameters after ';'.
    """
    if not mt:
        return "image/png"  # sane default
    core = mt.split(";")[0].strip().lower()
    if core == "image/jpg":
        core = "image/jpeg"
    allowed = {"image/png", "image/jpeg", "image/webp", "image/gif"}
    return core if core in allowed else "image/png"


def to_data_url(image: str, mime: Optional[str] = None) -> str:
    """
    Convert an image payload into a base64 data URL.

    Args:
        image (str): Raw base64 data, or an existing `data:` URL.
        mime (str, optional): MIME type for raw data; ignored when `image`
            already carries one.

    Returns:
        str: Data URL string (data:{mime};base64,...).
    """
    image = image.strip()
    match = _DATA_URL.match(image)
    if match:
        return f"data:{normalize_mime(match.group('mime') or mime)};base64,{match.group('data')}"
    return f"data:{normalize_mime(mime)};base64,{image}"


def build_messages(prompt_text: str, image: Optional[str] = None):
    """
    Build the chat payload: the system prompt, then the caller's text with the
    image (if any) inlined as an `image_url` part.

    Returns:
        list[BaseMessage]: LangChain messages ready for `ChatOpenAI.invoke`.
    """
    parts = [{"type": "text", "text": prompt_text}]
    if image:
        parts.append({"type": "image_url", "image_url": {"url": to_data_url(image)}})
    return [SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=parts)]


def format_conversation(history: list[dict], new_text: str) -> str:
    """
    Flatten prior messages of a case and the new caller text into one prompt.

    Args:
        history (list[dict]): Earlier messages (oldest first) with `role` and `content`.
        new_text (str): The message being answered.

    Returns:
        str: The prompt sent to the model.
    """
    if not history:
        return new_text
    lines = []
    for message in history:
        speaker = "Assistant" if message["role"] == "assistant" else "Clinician"
        lines.append(f"{speaker}: {message['content']}")
    return "Conversation so far:\n" + "\n\n".join(lines) + f"\n\nNew message:\n{new_text}"


class CompletionClient:
    """
    Synchronous request/response wrapper around the chat model. No streaming.

    Parameters
    ----------
    model : BaseChatModel, optional
        Preconfigured model; by default a `ChatOpenAI` built from settings.
    """

    def __init__(self, model=None):
        self.model = model or ChatOpenAI(
            model=settings.OPEN_AI_MODEL,
            api_key=settings.API_KEY,
            temperature=settings.COMPLETION_TEMPERATURE,
            max_tokens=settings.COMPLETION_MAX_TOKENS,
        )

    def complete(self, prompt: str, image: Optional[str] = None) -> str:
        """
        Generate the assistant reply.

        Parameters
        ----------
        prompt : str
            Caller prompt (may already contain the flattened conversation).
        image : str, optional
            Base64 image, with or without a `data:` prefix.

        Returns
        -------
        str
            Generated text.

        Raises
        ------
        UpstreamError
            The provider failed or returned no text.
        """
        try:
            response = self.model.invoke(build_messages(prompt, image))
        except Exception as e:
            logger.error(f"Completion request failed: {e}")
            raise UpstreamError("Completion request failed") from e
        content = getattr(response, "content", None)
        if not isinstance(content, str) or not content.strip():
            raise UpstreamError("Invalid response format from completion endpoint")
        return content
