# Overview: Service-layer wrapper around the Gemini API for advisory sales insights.

"""
AI sales insights

Purely advisory: nothing else depends on the text returned here. A missing
API key or any failure of the call degrades to a fixed message instead of
an error, so the dashboard keeps working without it.
"""

import json
import logging
from datetime import datetime

from google import genai

from salesdesk.time_utils import to_utc_z

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

RECENT_SALES_IN_PROMPT = 10

MISSING_KEY_MESSAGE = "API Key not configured. Please set up your environment variables."
FAILURE_MESSAGE = "Failed to generate AI insights. Please check the server logs for more details."

PROMPT_TEMPLATE = """Analyze the following sales and product data for a small retail business.
Provide actionable insights for the business owner.

- Identify the top-selling products by revenue.
- Identify products with low stock that are selling well.
- Suggest a sales trend based on the recent sales data.
- Propose a simple marketing or promotion idea based on the data.

Keep the analysis concise and easy to read, using bullet points.
Amounts ending in _cents are integer cents.

**Product Data (Inventory):**
{products}

**Recent Sales Data:**
{sales}
"""


def _json_default(value):
    if isinstance(value, datetime):
        return to_utc_z(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def build_prompt(products: list[dict], sales: list[dict]) -> str:
    """Sales are expected newest first; only the most recent ones are sent."""
    return PROMPT_TEMPLATE.format(
        products=json.dumps(products, indent=2, default=_json_default),
        sales=json.dumps(sales[:RECENT_SALES_IN_PROMPT], indent=2, default=_json_default),
    )


def generate_sales_insights(
    products: list[dict],
    sales: list[dict],
    *,
    api_key: str | None,
    model_name: str | None = None,
) -> str:
    if not api_key:
        return MISSING_KEY_MESSAGE

    try:
        client = genai.Client(api_key=api_key)
        response = client.models.generate_content(
            model=model_name or DEFAULT_MODEL,
            contents=build_prompt(products, sales),
        )
        text = (getattr(response, "text", None) or "").strip()
    except Exception:
        logger.exception("Error generating sales insights")
        return FAILURE_MESSAGE

    return text or FAILURE_MESSAGE
