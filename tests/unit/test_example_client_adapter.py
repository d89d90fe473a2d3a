import json

from tradedocs.extraction.example_client_adapter import ExampleClientAdapter
from tradedocs.normalization import normalize


class TestExampleClientAdapter:
    def test_probe_never_fails(self) -> None:
        assert ExampleClientAdapter().probe() is None

    def test_returns_fixed_bill_of_lading(self) -> None:
        result = ExampleClientAdapter().create_completion(
            model="example",
            temperature=0.0,
            system_prompt="",
            user_prompt="",
            json_schema={},
        )
        assert result.model == "example"
        fields = json.loads(result.content)
        assert fields["shipmentDetails"]["bolNumber"] == "EXAMPLE0000000001"

    def test_response_normalizes_cleanly(self) -> None:
        result = ExampleClientAdapter().create_completion(
            model="example", temperature=0.0, system_prompt="", user_prompt="", json_schema={}
        )
        data = normalize(json.loads(result.content))
        assert data.date_of_issue is not None
        assert data.date_of_issue.value == "2025-01-15"
        assert data.containers[0].quantity.liters == 20000.0

    def test_custom_response(self) -> None:
        adapter = ExampleClientAdapter(response={"bolNumber": "X1"})
        result = adapter.create_completion(
            model="m", temperature=0.0, system_prompt="", user_prompt="", json_schema={}
        )
        assert json.loads(result.content) == {"bolNumber": "X1"}
