"""
Request Builder
===============
Assembles the chat-completions request for a problem analysis and issues it
against an OpenAI-compatible endpoint (OpenRouter by default).

Exactly one outbound call per generation; retry policy belongs to the caller.
"""
import logging

from openai import OpenAI, APIStatusError, OpenAIError

from codehub.config import config
from codehub.errors import AIServiceError, MissingInputError
from codehub.models import ImageUpload, ProblemAnalysis, QUESTION_TYPES
from codehub.services.response_normalizer import normalize

logger = logging.getLogger(__name__)

TEMPERATURE = 0.3
MAX_TOKENS = 1500

_RESPONSE_SHAPE = """Respond with a JSON object ONLY (no other text) in this format:
{
    "correctAnswer": "<answer>",
    "explanation": "<detailed step-by-step solution>",
    "misconceptions": ["<misconception 1>", "<misconception 2>", "<misconception 3>"]
}"""

SYSTEM_PROMPTS = {
    "multiple-choice": f"""You are an expert math teacher analyzing a multiple-choice math problem.
First, identify the correct answer choice (A, B, C, D, etc.).
Then, provide a clear, detailed solution explaining the mathematical concepts and steps needed to solve this problem.
Next, identify exactly three misconceptions, one for each incorrect answer choice, in the order the choices appear.
For each misconception, explain what reasoning error leads a student to that choice and how to fix it.

{_RESPONSE_SHAPE}

"correctAnswer" must be a single letter. "misconceptions" must contain exactly 3 strings.""",

    "equation": f"""You are an expert math teacher analyzing an open-ended math problem whose answer is a value or equation.
First, determine the correct answer (the final value or equation).
Then, provide a clear, detailed solution explaining the mathematical concepts and steps needed to solve this problem.
Next, identify three common misconceptions students might have when approaching this problem.
For each misconception, explain what causes the error and how to fix it.

{_RESPONSE_SHAPE}

"correctAnswer" is the final answer written as plain text. "misconceptions" must contain exactly 3 strings.""",
}

IMAGE_INSTRUCTION = "Analyze this math problem image and provide the solution and misconceptions:"
TEXT_INSTRUCTION = "Provide a solution and misconceptions for the described math problem:"

# Model families that accept response_format={"type": "json_object"}
JSON_MODE_PREFIXES = ('openai/', 'google/', 'mistralai/', 'deepseek/', 'qwen/', 'gpt-', 'o1', 'o3')


def supports_json_mode(model: str) -> bool:
    return (model or "").lower().startswith(JSON_MODE_PREFIXES)


def system_prompt_for(question_type: str, prompt_override: str = None, instructions: str = None) -> str:
    """Pick the instructional prompt and append any additional instructions."""
    if prompt_override and prompt_override.strip():
        prompt = prompt_override.strip()
    else:
        prompt = SYSTEM_PROMPTS.get(question_type, SYSTEM_PROMPTS["multiple-choice"])

    if instructions and instructions.strip():
        prompt = f"{prompt}\n\nAdditional instructions: {instructions.strip()}"
    return prompt


def build_request(prompt_override=None, image: ImageUpload = None, model: str = None,
                  question_type: str = "multiple-choice", instructions=None, question_text=None) -> dict:
    """
    Build the keyword arguments for client.chat.completions.create().

    Args:
        prompt_override: Replaces the default system prompt when non-blank
        image: Optional question image, sent as a base64 data URI
        model: Model id; defaults to the configured model
        question_type: "multiple-choice" or "equation"
        instructions: Extra user instructions appended to the system prompt
        question_text: Problem description for text-only requests

    Returns:
        Dict of request parameters
    """
    if question_type not in QUESTION_TYPES:
        question_type = "multiple-choice"
    model = model or config.default_model

    if image is not None:
        user_content = [
            {"type": "text", "text": IMAGE_INSTRUCTION},
            {"type": "image_url", "image_url": {"url": image.to_data_uri()}},
        ]
        if question_text and question_text.strip():
            user_content[0]["text"] += f"\n\n{question_text.strip()}"
    else:
        user_content = TEXT_INSTRUCTION
        if question_text and question_text.strip():
            user_content += f"\n\n{question_text.strip()}"

    request = {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt_for(question_type, prompt_override, instructions)},
            {"role": "user", "content": user_content},
        ],
        "temperature": TEMPERATURE,
        "max_tokens": MAX_TOKENS,
    }
    if supports_json_mode(model):
        request["response_format"] = {"type": "json_object"}
    return request


def get_client(api_key: str) -> OpenAI:
    if not api_key:
        raise MissingInputError("Please enter your OpenRouter API key")
    return OpenAI(api_key=api_key, base_url=config.base_url, max_retries=0)


def _provider_message(error: APIStatusError, fallback: str = "Failed to generate content") -> str:
    """Pull the provider's message out of an error body, if there is one."""
    body = error.body
    if isinstance(body, dict):
        inner = body.get("error", body)
        if isinstance(inner, dict) and inner.get("message"):
            return str(inner["message"])
        if body.get("message"):
            return str(body["message"])
    return fallback


def generate_analysis(api_key: str, prompt_override=None, image: ImageUpload = None, model: str = None,
                      question_type: str = "multiple-choice", instructions=None, question_text=None,
                      client=None) -> ProblemAnalysis:
    """Issue one analysis request and normalize whatever comes back."""
    if image is None and not (question_text and question_text.strip()):
        raise MissingInputError("Please provide a question image or text")

    client = client or get_client(api_key)
    request = build_request(prompt_override, image, model, question_type, instructions, question_text)
    logger.info("Requesting analysis: model=%s type=%s image=%s",
                request["model"], question_type, image is not None)

    try:
        completion = client.chat.completions.create(**request)
    except APIStatusError as e:
        message = _provider_message(e)
        logger.error("LLM endpoint returned %s: %s", e.status_code, message)
        raise AIServiceError(message) from e
    except OpenAIError as e:
        logger.error("LLM request failed: %s", e)
        raise AIServiceError(str(e) or "Failed to generate content") from e

    if not getattr(completion, "choices", None):
        raise AIServiceError("No content generated")

    content = completion.choices[0].message.content
    return normalize(content)


def list_models(api_key: str, client=None) -> list:
    """List {id, name} pairs for the model selector."""
    client = client or get_client(api_key)
    try:
        page = client.models.list()
    except APIStatusError as e:
        message = _provider_message(e, "Failed to list models")
        logger.error("Model listing returned %s: %s", e.status_code, message)
        raise AIServiceError(message) from e
    except OpenAIError as e:
        logger.error("Model listing failed: %s", e)
        raise AIServiceError(str(e) or "Failed to list models") from e

    models = []
    for model in page:
        name = getattr(model, "name", None) or model.id
        models.append({"id": model.id, "name": name})
    return models
