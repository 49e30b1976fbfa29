"""AI insight collaborator: prompt building and degradation paths."""

from datetime import datetime

from salesdesk.services import insights_service


PRODUCTS = [{"id": 1, "name": "Kettle", "price_cents": 10_000, "cost_cents": 6_000, "stock": 2}]
SALES = [
    {"id": n, "product_id": 1, "product_name": "Kettle", "quantity": 1,
     "total_price_cents": 10_000, "sold_at": datetime(2026, 10, 17, 9, n)}
    for n in range(12, 0, -1)
]


class FakeModels:
    def __init__(self, client):
        self.client = client

    def generate_content(self, *, model, contents):
        FakeClient.calls.append((self.client.api_key, model, contents))

        class Response:
            text = "- Kettle is your best seller\n- Restock kettles soon"

        return Response()


class FakeClient:
    calls = []

    def __init__(self, *, api_key):
        self.api_key = api_key
        self.models = FakeModels(self)


class BrokenModels:
    def generate_content(self, *, model, contents):
        raise RuntimeError("quota exceeded")


class BrokenClient:
    def __init__(self, *, api_key):
        self.models = BrokenModels()


def test_missing_key_degrades():
    text = insights_service.generate_sales_insights(PRODUCTS, SALES, api_key=None)
    assert text == insights_service.MISSING_KEY_MESSAGE


def test_prompt_holds_products_and_ten_recent_sales():
    prompt = insights_service.build_prompt(PRODUCTS, SALES)

    assert '"name": "Kettle"' in prompt
    assert "2026-10-17T09:12:00Z" in prompt
    assert "2026-10-17T09:03:00Z" in prompt
    assert "2026-10-17T09:02:00Z" not in prompt
    assert "bullet points" in prompt


def test_returns_model_text(monkeypatch):
    FakeClient.calls.clear()
    monkeypatch.setattr(insights_service.genai, "Client", FakeClient)

    text = insights_service.generate_sales_insights(PRODUCTS, SALES, api_key="k", model_name="gemini-test")

    assert text.startswith("- Kettle")
    api_key, model, contents = FakeClient.calls[0]
    assert (api_key, model) == ("k", "gemini-test")
    assert contents == insights_service.build_prompt(PRODUCTS, SALES)


def test_default_model(monkeypatch):
    FakeClient.calls.clear()
    monkeypatch.setattr(insights_service.genai, "Client", FakeClient)

    insights_service.generate_sales_insights(PRODUCTS, SALES, api_key="k")

    assert FakeClient.calls[0][1] == insights_service.DEFAULT_MODEL


def test_failure_degrades_and_logs(monkeypatch, caplog):
    monkeypatch.setattr(insights_service.genai, "Client", BrokenClient)

    text = insights_service.generate_sales_insights(PRODUCTS, SALES, api_key="k")

    assert text == insights_service.FAILURE_MESSAGE
    assert "Error generating sales insights" in caplog.text
