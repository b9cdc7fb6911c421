"""
SWOT Explorer Backend — Reference Catalog

Products, business objectives, customer segments and prompt types.
Immutable, defined at import time, looked up by id. Prompt text is built
through prompts.build_insight_prompt so the data carries no callables.
"""

from swot_explorer.models import BusinessObjective, Product, PromptType, Segment
from swot_explorer.prompts import build_insight_prompt


PRODUCTS: tuple[Product, ...] = (
    Product(id="electric-cars", name="Electric Cars", description="Sustainable electric vehicle solutions"),
    Product(id="coffee", name="Coffee", description="Premium coffee products and services"),
    Product(id="fitness-app", name="Fitness App", description="Digital fitness and wellness platform"),
    Product(id="saas-platform", name="SaaS Platform", description="Business automation software solution"),
)

BUSINESS_OBJECTIVES: tuple[BusinessObjective, ...] = (
    BusinessObjective(
        id="increase-awareness",
        name="Increase Awareness",
        description="Build brand recognition and visibility",
    ),
    BusinessObjective(
        id="increase-consideration",
        name="Increase Consideration",
        description="Drive evaluation and interest",
    ),
    BusinessObjective(
        id="increase-sales",
        name="Increase Sales",
        description="Convert prospects to customers",
    ),
    BusinessObjective(
        id="improve-retention",
        name="Improve Retention",
        description="Enhance customer loyalty and lifetime value",
    ),
)

SEGMENTS: tuple[Segment, ...] = (
    Segment(
        id="gen-z-creators",
        name="Gen Z Creators",
        description="Young content creators and influencers (18-26)",
    ),
    Segment(
        id="urban-climate-advocates",
        name="Urban Climate Advocates",
        description="Environmentally conscious urban professionals",
    ),
    Segment(
        id="cost-sensitive-smb",
        name="Cost-Sensitive SMB Owners",
        description="Small business owners focused on value and ROI",
    ),
    Segment(
        id="retired-diyers",
        name="Retired DIYers",
        description="Active retirees who enjoy hands-on projects",
    ),
    Segment(
        id="enterprise-it-leaders",
        name="Enterprise IT Leaders",
        description="Technology decision-makers in large organizations",
    ),
)

PROMPT_TYPES: tuple[PromptType, ...] = (
    PromptType(
        id="marketing-okrs",
        name="Marketing OKRs",
        description="Measurable marketing objectives and key results",
        icon="Target",
    ),
    PromptType(
        id="strengths",
        name="Strengths",
        description="Product strengths that matter to this segment",
        icon="TrendingUp",
    ),
    PromptType(
        id="weaknesses",
        name="Weaknesses",
        description="Concerns and potential dislikes",
        icon="TrendingDown",
    ),
    PromptType(
        id="opportunities",
        name="Opportunities",
        description="Product and brand opportunities to unlock",
        icon="Lightbulb",
    ),
    PromptType(
        id="threats",
        name="Threats",
        description="Risks preventing adoption or loyalty",
        icon="AlertTriangle",
    ),
    PromptType(
        id="market-positioning",
        name="Market Positioning",
        description="How to position the product effectively",
        icon="Crosshair",
    ),
    PromptType(
        id="buyer-persona",
        name="Buyer Persona",
        description="Detailed customer persona profile",
        icon="User",
    ),
    PromptType(
        id="investment-opportunities",
        name="Investment Opportunities",
        description="Strategic value from growth perspective",
        icon="DollarSign",
    ),
    PromptType(
        id="channels-distribution",
        name="Channels & Distribution",
        description="How to reach and activate the segment",
        icon="Share2",
    ),
)


def _index(items):
    return {item.id: item for item in items}


_PRODUCTS_BY_ID = _index(PRODUCTS)
_OBJECTIVES_BY_ID = _index(BUSINESS_OBJECTIVES)
_SEGMENTS_BY_ID = _index(SEGMENTS)
_PROMPT_TYPES_BY_ID = _index(PROMPT_TYPES)


def get_product(product_id: str) -> Product | None:
    return _PRODUCTS_BY_ID.get(product_id)


def get_objective(objective_id: str) -> BusinessObjective | None:
    return _OBJECTIVES_BY_ID.get(objective_id)


def get_segment(segment_id: str) -> Segment | None:
    return _SEGMENTS_BY_ID.get(segment_id)


def get_prompt_type(prompt_type_id: str) -> PromptType | None:
    return _PROMPT_TYPES_BY_ID.get(prompt_type_id)


def render_prompt(
    prompt_type: PromptType,
    segment: Segment,
    product: Product,
    objective: BusinessObjective,
) -> str:
    """Render the prompt for a prompt type using the display names of the selection."""
    return build_insight_prompt(prompt_type.id, segment.name, product.name, objective.name)
