from journal_ai.errors import EmptyInputError
from journal_ai.models import ProviderId, StructuringRequest

STRUCTURE_SYSTEM_PROMPT = """You fix grammar and structure journal entries.

CRITICAL RULES:
- NEVER translate the text - keep the EXACT same language as the input
- NEVER add new information or content not in the original
- ONLY fix spelling mistakes and grammar errors
- ONLY improve sentence structure and formatting
- Keep ALL original meaning and content intact
- NO commentary such as "here is" or summaries

OUTPUT SHAPE:
Return ONLY one JSON object with exactly these fields:
{"title": "short descriptive title", "content": "cleaned up content", "tags": ["tag1", "tag2"]}
- title: 3-5 words describing the note
- content: the cleaned up input, with paragraphs or bullet points where they help
- tags: 0-3 short lowercase keywords from the content"""

OUTPUT_SHAPE_REMINDER = """

IMPORTANT: your previous answer could not be used.
Respond with a single JSON object and nothing else: no prose, no code fences.
"title" and "content" must be non-empty strings and "tags" must be a list of strings."""


def build_user_prompt(text: str) -> str:
    return f"Structure this journal entry.\n\nInput:\n{text}"


def build_request(raw_text: str, provider_hint: ProviderId | None = None) -> StructuringRequest:
    text = raw_text.strip() if isinstance(raw_text, str) else ""
    if not text:
        raise EmptyInputError("No content provided. Pass the note as an argument or pipe it via stdin.")

    return StructuringRequest(
        raw_text=text,
        system_prompt=STRUCTURE_SYSTEM_PROMPT,
        user_prompt=build_user_prompt(text),
        provider_hint=provider_hint,
    )


def emphasize(request: StructuringRequest) -> StructuringRequest:
    if request.emphasized:
        return request
    return request.with_system_prompt(request.system_prompt + OUTPUT_SHAPE_REMINDER)
