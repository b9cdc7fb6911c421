"""
SWOT Explorer Backend — Prompt Templates

All prompt templates are defined here, keyed by prompt-type id.
The analyst system instruction lives in config.LLM_CONFIG and is injected in llm.py.
Canned demo-mode responses live here too, so every piece of prompt text is in one place.
"""


# -----------------------------------------------------------------------------
# 1. Insight templates
# -----------------------------------------------------------------------------
# Placeholders: {segment}, {product}, {objective}. The objective is
# interpolated in lower case ("Increase Sales" -> "increase sales").

PROMPT_TEMPLATES: dict[str, str] = {
    "marketing-okrs": (
        "What are 3 measurable marketing OKRs to {objective} for {product} in the {segment} segment?"
    ),
    "strengths": (
        "What {product} strengths matter most to {segment} when trying to {objective}?"
    ),
    "weaknesses": (
        "What would {segment} be concerned about or dislike when considering {product} to {objective}?"
    ),
    "opportunities": (
        "What {product} opportunities can we unlock by targeting {segment} to {objective}?"
    ),
    "threats": (
        "What risks might prevent {segment} from adopting or staying loyal to {product} "
        "when trying to {objective}?"
    ),
    "market-positioning": (
        "How should we position {product} to resonate with {segment} to {objective}?"
    ),
    "buyer-persona": (
        "Write a sample persona for a typical {segment} customer interested in {product} to {objective}."
    ),
    "investment-opportunities": (
        "Why is {segment} strategically valuable from a growth/investment perspective for {product} "
        "when trying to {objective}?"
    ),
    "channels-distribution": (
        "How should we reach and activate {segment} for {product} to {objective}?"
    ),
}


class UnknownPromptTypeError(ValueError):
    """No template is registered for the requested prompt-type id."""

    def __init__(self, prompt_type_id: str):
        self.prompt_type_id = prompt_type_id
        super().__init__(f"Unknown prompt type: {prompt_type_id}")


def build_insight_prompt(prompt_type_id: str, segment: str, product: str, objective: str) -> str:
    """
    Build the user prompt for one (segment, prompt type) pair.

    Args:
        prompt_type_id: Key into PROMPT_TEMPLATES (e.g. "strengths").
        segment: Segment display name (e.g. "Gen Z Creators").
        product: Product display name (e.g. "Electric Cars").
        objective: Objective display name (e.g. "Increase Sales").

    Returns:
        The natural-language question sent to the LLM.

    Raises:
        UnknownPromptTypeError: If prompt_type_id has no template.
    """
    template = PROMPT_TEMPLATES.get(prompt_type_id)
    if template is None:
        raise UnknownPromptTypeError(prompt_type_id)
    return template.format(segment=segment, product=product, objective=objective.lower())


# -----------------------------------------------------------------------------
# 2. Demo-mode canned responses
# -----------------------------------------------------------------------------

DEMO_RESPONSES: dict[str, str] = {
    "strengths": (
        "• Strong brand recognition and trust within the target segment\n"
        "• Product features closely aligned with the segment's everyday needs\n"
        "• Competitive pricing relative to perceived value\n"
        "• Positive word-of-mouth and community advocacy"
    ),
    "weaknesses": (
        "• Limited awareness of the full feature set among new prospects\n"
        "• Perceived price premium compared with budget alternatives\n"
        "• Onboarding friction for first-time users\n"
        "• Few proof points or case studies tailored to this segment"
    ),
    "opportunities": (
        "• Partner with creators and communities the segment already trusts\n"
        "• Launch segment-specific bundles or entry-level tiers\n"
        "• Use sustainability and values messaging to deepen loyalty\n"
        "• Expand into underserved channels where competitors are absent"
    ),
    "threats": (
        "• Aggressive pricing from emerging competitors\n"
        "• Shifting preferences and short attention spans within the segment\n"
        "• Negative reviews spreading quickly on social platforms\n"
        "• Economic pressure reducing discretionary spending"
    ),
}

DEMO_PLACEHOLDER = (
    "This is a demo response. Connect a language model API key and disable demo mode "
    "to generate real insights for this analysis type."
)

DEMO_USAGE = {"prompt_tokens": 50, "completion_tokens": 100, "total_tokens": 150}


def get_demo_response(prompt_type_id: str) -> str:
    """
    Return the canned demo content for a prompt type.

    The four SWOT categories have fixed bullet lists; anything else gets
    DEMO_PLACEHOLDER. The same id always returns the same string.
    """
    return DEMO_RESPONSES.get(prompt_type_id, DEMO_PLACEHOLDER)
