# backend/carbon/external/inference_gateway.py
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import httpx
from django.conf import settings
from rest_framework import serializers

from ..choices import FALLBACK_ADVICE

logger = logging.getLogger(__name__)


class InferenceError(Exception):
    """The gateway could not produce a schema-valid result."""


class PromptKind(str, Enum):
    CARBON_CREDITS = 'carbon_credits'


# Model output is JSON: types must match exactly, nothing is coerced

class StrictFloatField(serializers.FloatField):
    """JSON numbers only; booleans and numeric strings are rejected"""

    def to_internal_value(self, data):
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            self.fail('invalid')
        if not math.isfinite(data):
            self.fail('invalid')
        return super().to_internal_value(data)


class StrictBooleanField(serializers.BooleanField):
    def to_internal_value(self, data):
        if not isinstance(data, bool):
            self.fail('invalid', input=data)
        return data


class StrictCharField(serializers.CharField):
    def to_internal_value(self, data):
        if not isinstance(data, str):
            self.fail('invalid')
        return super().to_internal_value(data)


class CarbonCreditEstimateSerializer(serializers.Serializer):
    """Validates a carbon credit estimate (camelCase on the wire, snake_case once validated)"""
    estimatedCO2SavedKg = StrictFloatField(source='estimated_co2_saved_kg', min_value=0)
    rewardPoints = StrictFloatField(source='reward_points', min_value=0)
    reductionAdvice = StrictCharField(source='reduction_advice')
    climateImpactAnalysis = StrictCharField(source='climate_impact_analysis')
    isApproved = StrictBooleanField(source='is_approved')
    verificationDetails = StrictCharField(source='verification_details', allow_blank=True)
    pesticideAnalysis = StrictCharField(source='pesticide_analysis', allow_blank=True)
    properUseAdvice = StrictCharField(source='proper_use_advice', allow_blank=True)


def fallback_carbon_credit_estimate():
    """Estimate used when the gateway fails; the activity is still credited."""
    credits = settings.CARBON_FALLBACK_CREDITS
    return {
        'estimated_co2_saved_kg': credits,
        'reward_points': credits * 10,
        'reduction_advice': FALLBACK_ADVICE,
        'climate_impact_analysis': None,
        'is_approved': True,
        'verification_details': "Approved automatically; AI analysis was unavailable.",
        'pesticide_analysis': '',
        'proper_use_advice': '',
    }


@dataclass(frozen=True)
class PromptSpec:
    output_serializer: type
    fallback: Callable[[], dict]


PROMPTS = {
    PromptKind.CARBON_CREDITS: PromptSpec(
        output_serializer=CarbonCreditEstimateSerializer,
        fallback=fallback_carbon_credit_estimate,
    ),
}


def fallback_for(kind: PromptKind) -> dict:
    return PROMPTS[kind].fallback()


class InferenceGateway:
    """
    Client for the external generative-AI gateway.

    One POST per call, no retries. Every failure mode (not configured,
    transport error, timeout, HTTP error, malformed body, schema mismatch)
    surfaces as InferenceError so callers have a single thing to handle.
    """

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None,
                 timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url if base_url is not None else settings.AI_GATEWAY_URL
        self.api_key = api_key if api_key is not None else settings.AI_GATEWAY_API_KEY
        self.timeout = timeout if timeout is not None else settings.AI_GATEWAY_TIMEOUT
        self.transport = transport

    def _headers(self):
        headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json'
        }
        if self.api_key:
            headers['Authorization'] = f"Bearer {self.api_key}"
        return headers

    async def infer(self, kind: PromptKind, payload: dict) -> dict:
        """Run one inference and return the validated, snake_case result"""
        if not self.base_url:
            raise InferenceError("AI gateway URL is not configured")

        spec = PROMPTS[kind]
        logger.info(f"Requesting {kind.value} inference from AI gateway")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.base_url,
                    json={'kind': kind.value, 'input': payload},
                    headers=self._headers()
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as e:
            raise InferenceError(f"AI gateway request failed: {e}") from e
        except ValueError as e:
            raise InferenceError(f"AI gateway returned a non-JSON body: {e}") from e

        serializer = spec.output_serializer(data=body)
        if not serializer.is_valid():
            raise InferenceError(f"AI gateway result failed {kind.value} schema validation: {serializer.errors}")

        return dict(serializer.validated_data)
