"""Fixed instruction blocks that steer a model toward raw JSON output."""

from collections.abc import Sequence

from openrouter_structured.core.types import ChatMessage

FIRST_ATTEMPT_INSTRUCTION = """

CRITICAL OUTPUT REQUIREMENT:
You MUST respond with ONLY a valid JSON object.
- Start your response with { and end with }
- Do NOT include any text before or after the JSON
- Do NOT use markdown code blocks
- Do NOT include explanations or commentary
- Ensure all strings are properly escaped
- Ensure all required fields are present"""

RETRY_INSTRUCTION = """

CRITICAL: Your previous response was not valid JSON. This time you MUST:
1. Output ONLY a raw JSON object starting with { and ending with }
2. NO text before the opening brace
3. NO text after the closing brace
4. NO markdown, NO code blocks, NO explanations
5. Just the pure JSON object"""

ERROR_FEEDBACK_TEMPLATE = (
    "\n\nPREVIOUS RESPONSE VALIDATION FAILED. Please fix these errors:\n"
    "{errors}\n\nGenerate a corrected JSON response:"
)


def json_instruction(attempt: int) -> str:
    """Instruction block for the given zero-based attempt."""
    return FIRST_ATTEMPT_INSTRUCTION if attempt == 0 else RETRY_INSTRUCTION


def build_json_messages(
    messages: Sequence[ChatMessage],
    attempt: int,
    previous_errors: Sequence[str] = (),
) -> tuple[ChatMessage, ...]:
    """Return ``messages`` with the JSON instruction and error feedback applied.

    The instruction is appended to the first message when it is a system
    message; other conversations are left without one. Feedback from the
    previous attempt goes at the end of the last message, and only from the
    second attempt on.
    """
    built = list(messages)
    if built and built[0].role == "system":
        first = built[0]
        built[0] = ChatMessage(first.role, first.content + json_instruction(attempt))

    if attempt > 0 and previous_errors and built:
        last = built[-1]
        feedback = ERROR_FEEDBACK_TEMPLATE.format(errors="\n".join(previous_errors))
        built[-1] = ChatMessage(last.role, last.content + feedback)

    return tuple(built)
