"""Offline extraction client.

Returns a fixed bill of lading so the whole upload flow can run without a
provider account. New provider adapters implement BaseExtractionClient the
same way and are registered in ExtractionClientFactory.
"""

import json
from typing import Any, ClassVar

from tradedocs.extraction.client_base import BaseExtractionClient
from tradedocs.extraction.models import CompletionResult, ExtractionUsage


class ExampleClientAdapter(BaseExtractionClient):
    """Adapter that never touches the network."""

    DEFAULT_RESPONSE: ClassVar[dict[str, Any]] = {
        "shipmentDetails": {
            "bolNumber": "EXAMPLE0000000001",
            "bookingNumber": None,
            "carrierReference": None,
            "dateOfIssue": "01/15/2025",
            "vesselName": "EXAMPLE VESSEL",
            "voyageNumber": "001E",
            "portOfLoading": "PUERTO CABELLO",
            "portOfDischarge": "HOUSTON",
        },
        "parties": {
            "shipper": {"name": "EXAMPLE SHIPPER", "address": None, "taxId": None},
            "consignee": {"name": "EXAMPLE CONSIGNEE", "address": None, "taxId": None},
            "notifyParty": {"name": None, "address": None, "taxId": None},
        },
        "containers": [
            {
                "containerNumber": "EXMU0000001",
                "sealNumber": "SEAL0001",
                "type": "20' TANK",
                "product": {"name": "EXAMPLE PRODUCT", "density": None},
                "quantity": {
                    "volume": {"liters": 20000, "gallons": None},
                    "weight": {"kg": None},
                },
            }
        ],
        "commercial": {"currency": "USD", "freightTerms": None, "itnNumber": None},
    }

    def __init__(self, response: dict[str, Any] | None = None) -> None:
        self._response = response if response is not None else self.DEFAULT_RESPONSE

    def probe(self) -> None:
        return None

    def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, Any],
        image_data_urls: list[str] | None = None,
    ) -> CompletionResult:
        _ = temperature, system_prompt, user_prompt, json_schema, image_data_urls
        return CompletionResult(
            content=json.dumps(self._response),
            model=model,
            usage=ExtractionUsage(),
        )
