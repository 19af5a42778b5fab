# utils/groq_utils.py
from typing import Any, Dict, Optional

from groq import Groq

# Choose a sensible default model here so .env only needs the API key
DEFAULT_GROQ_MODEL = "llama-3.3-70b-versatile"
DEFAULT_VISION_MODEL = "meta-llama/llama-4-scout-17b-16e-instruct"

TOPICS_SYSTEM_PROMPT = "You are an educational content analyzer."

QUIZ_SYSTEM_PROMPT = "You are an educational quiz generator."


def build_topics_prompt(content: str) -> str:
    return f"""
Extract the main topics from the following curriculum content.
Return ONLY a list of 5-10 distinct topics, with each topic being 2-5 words long.
Format your response as a JSON array of strings, like this: ["Topic 1", "Topic 2", "Topic 3"]

Content:
{content[:14000]}
"""


IMAGE_TOPICS_PROMPT = """Extract the main topics from the image of curriculum content.
Return ONLY a list of 5-10 distinct topics, with each topic being 2-5 words long.
Format your response as a JSON array of strings, like this: ["Topic 1", "Topic 2", "Topic 3"]"""


def build_quiz_prompt(content: str, num_questions: int, language: str) -> str:
    return f"""
Create {num_questions} multiple-choice questions based on the following content.
Each question should have 4 options with exactly one correct answer.

Content:
{content[:14000]}

Language: {language}

Format your response as a JSON array of objects, where each object has the following structure:
{{
  "question": "Question text",
  "options": ["Option A", "Option B", "Option C", "Option D"],
  "correctOptionIndex": 0,
  "explanation": "Brief explanation of the correct answer"
}}
correctOptionIndex is the index of the correct option (0-3).
"""


def make_client(api_key: Optional[str], timeout: Optional[float] = None) -> Groq:
    """Build a Groq client; raises groq.GroqError when no key is available."""
    if timeout:
        return Groq(api_key=api_key, timeout=timeout)
    return Groq(api_key=api_key)


def call_groq_text(
    client: Groq,
    system_prompt: str,
    user_prompt: str,
    model: Optional[str] = None,
    temperature: float = 0.3,
    max_tokens: int = 2500,
) -> str:
    """Call Groq chat completions and return the raw message text (no JSON mode)."""
    chat = client.chat.completions.create(
        model=model or DEFAULT_GROQ_MODEL,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        temperature=temperature,
        max_tokens=max_tokens,
    )
    return chat.choices[0].message.content or ""


def call_groq_vision(
    client: Groq,
    prompt: str,
    image_base64: str,
    mime_type: str = "image/jpeg",
    model: Optional[str] = None,
    max_tokens: int = 800,
) -> str:
    """Send one image plus a text prompt to a vision model and return the raw text."""
    if image_base64.startswith("data:"):
        data_url = image_base64
    else:
        data_url = f"data:{mime_type};base64,{image_base64}"
    chat = client.chat.completions.create(
        model=model or DEFAULT_VISION_MODEL,
        messages=[
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": data_url}},
                ],
            }
        ],
        temperature=0.2,
        max_tokens=max_tokens,
    )
    return chat.choices[0].message.content or ""


def llm_status(api_key: Optional[str], client: Any = None) -> Dict[str, bool]:
    """Whether the LLM collaborator is usable."""
    return {
        "initialized": client is not None or bool(api_key),
        "key_available": bool(api_key),
    }
