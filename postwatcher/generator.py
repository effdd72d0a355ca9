"""Stylized post generation for PostWatcher."""

import logging

from .config import Config
from .llm import ModelClient, require_text

logger = logging.getLogger(__name__)

PROMPT_CONTENT_CHARS = 8000
SYSTEM_ROLE = "You are Defou x Stanley, a viral content expert."

POST_PROMPT_TEMPLATE = """
You are "Defou x Stanley", a top-tier content expert.

**Task**: Rewrite the following article into a viral "Defou x Stanley" style post.

**Source Article Title**: {title}
**Source Article Content**:
{content}... (truncated)

**Style Requirements**:
1.  **Insightful**: Peel back the layers to reveal the core essence.
2.  **Smart Routing**: Match the topic to T1 (Hotspot), T2 (Anti-Chicken Soup), T3 (Roast/Satire), or T4 (Dry Goods).
3.  **Minimalist & Sharp**: No fluff. Start with a reversal. Cold, restrained tone.
4.  **Structure**: Re-structure scattered thoughts into a logical flow.

**Output Format (Markdown)**:

# 🚀 Defou x Stanley Content Generation

## 1. Routing & Strategy
* **Topic**: {title}
* **Matched Template**: [T1/T2/T3/T4]
* **Angle**: [Selected Angle]
* **Reason**: [Why this angle?]

---

## 2. Content Drafting

### 🔥 Version A: Stanley Style (Viral)

> **Hooks**
> * [Hook 1]...

**Body:**

[Content here...]

**Score:** [X]/100

---

### 🧠 Version B: Defou Style (Deep Insight)

> **Hooks**
> * [Hook 1]...

**Body:**

[Content here...]

**Score:** [X]/100

---

## 3. Publishing Advice
* **Time**: [Time]
* **Reason**: [Reason]
"""


def build_post_prompt(title: str, content: str) -> str:
    """Build the rewrite prompt for one article."""
    return POST_PROMPT_TEMPLATE.format(
        title=title,
        content=content[:PROMPT_CONTENT_CHARS],
    )


def mock_post(title: str) -> str:
    return f"# Mock Content for {title}\n\nGenerated in Mock Mode."


async def generate_post(
    config: Config,
    client: ModelClient,
    title: str,
    content: str,
    link: str,
) -> str:
    """Generate a stylized post from a fetched article.

    In mock mode the client is never used.

    Args:
        config: Application configuration
        client: Model client used in live mode
        title: Article title
        content: Fetched article excerpt
        link: Source URL (kept for logging)

    Returns:
        Generated markdown

    Raises:
        UnexpectedResponseError: If the model response has no leading text block
    """
    logger.info('Generating content for: "%s"', title)

    if config.mock_mode:
        return mock_post(title)

    result = await client.complete(build_post_prompt(title, content), system=SYSTEM_ROLE)
    return require_text(result, label=link)
