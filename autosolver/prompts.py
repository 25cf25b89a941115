"""
prompts.py — Prompt templates for the Analyst (segmentation) and the
Solver (answering) steps.

Both providers share the same wording; the local variants add a few
explicit formatting lines because small local models drift without them.
"""

_SEGMENT_RULES = (
    "You are an expert educational content analyzer.\n"
    "I have a raw text dump from a Question Bank document.\n"
    "Your goal is to extract individual questions from this text.\n\n"
    "Rules:\n"
    "1. Ignore headers, footers, page numbers, or instructional text "
    '(e.g., "Answer all questions").\n'
    "2. Extract only the question text.\n"
    "3. If a question has sub-parts (a, b, c), try to keep them together as "
    "one question entry unless they are clearly distinct problems.\n"
)

_ANSWER_RULES = (
    "Instructions:\n"
    "1. Answer clearly and concisely.\n"
    "2. Use the source notes as the primary truth.\n"
    "3. If the answer is not in the notes, use your general knowledge but "
    "mention that it was not explicitly found in the notes.\n"
    "4. Format with clear paragraphs or bullet points if necessary.\n"
    "5. Do NOT output Markdown formatting (like **bold**) excessively, as "
    "this will go into a plain Word doc. Keep it clean.\n"
)


def build_segment_prompt(raw_text: str, local: bool = False) -> str:
    """Prompt asking the model to return the questions as a JSON array of strings."""
    if local:
        rules = (
            _SEGMENT_RULES
            + "4. Return ONLY a JSON array of strings. No other text or explanation.\n"
            + '5. Format: ["question 1", "question 2", "question 3"]\n'
        )
        return f"{rules}\nRaw Text:\n{raw_text}\n\nJSON Array:"

    rules = _SEGMENT_RULES + "4. Return ONLY a JSON array of strings.\n"
    return f"{rules}\nRaw Text:\n{raw_text}\n"


def build_answer_prompt(question: str, context: str, limit: int,
                        local: bool = False) -> str:
    """
    Prompt asking the model to answer *question* from the first *limit*
    characters of *context*.
    """
    notes = context[:limit]
    instructions = _ANSWER_RULES
    if local:
        instructions += "6. Provide a direct answer without repeating the question.\n"

    prompt = (
        "You are an intelligent academic tutor.\n\n"
        "Task: Answer the following question comprehensively using the "
        "provided Source Notes.\n\n"
        f"Source Notes:\n{notes}\n\n"
        f"Question:\n{question}\n\n"
        f"{instructions}"
    )
    if local:
        prompt += "\nAnswer:"
    return prompt


# Placeholder answers used when a provider returns nothing or fails.
NO_ANSWER = "Could not generate answer."
ANSWER_FAILED = "Error generating answer."
