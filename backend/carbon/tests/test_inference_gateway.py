import json

import httpx
import pytest

from carbon.choices import FALLBACK_ADVICE
from carbon.external.inference_gateway import (
    InferenceError, InferenceGateway, PromptKind, fallback_for
)

GATEWAY_URL = 'https://gateway.test/infer'

VALID_ESTIMATE = {
    'estimatedCO2SavedKg': 12.75,
    'rewardPoints': 127.5,
    'reductionAdvice': 'Leave crop residue on the field after harvest.',
    'climateImpactAnalysis': 'Zero tillage keeps carbon locked in the soil.',
    'isApproved': True,
    'verificationDetails': 'Photo shows an untilled field with residue cover.',
    'pesticideAnalysis': '',
    'properUseAdvice': '',
}


def make_gateway(handler, **kwargs):
    options = {'base_url': GATEWAY_URL, 'api_key': 'test-key', 'timeout': 5}
    options.update(kwargs)
    return InferenceGateway(transport=httpx.MockTransport(handler), **options)


@pytest.mark.asyncio
async def test_infer_returns_validated_snake_case_result():
    captured = {}

    def handler(request):
        captured['body'] = json.loads(request.content)
        captured['auth'] = request.headers.get('Authorization')
        return httpx.Response(200, json=VALID_ESTIMATE)

    result = await make_gateway(handler).infer(PromptKind.CARBON_CREDITS, {'activityType': 'Zero Tillage'})

    assert result['estimated_co2_saved_kg'] == 12.75
    assert result['reduction_advice'] == VALID_ESTIMATE['reductionAdvice']
    assert result['climate_impact_analysis'] == VALID_ESTIMATE['climateImpactAnalysis']
    assert captured['body'] == {'kind': 'carbon_credits', 'input': {'activityType': 'Zero Tillage'}}
    assert captured['auth'] == 'Bearer test-key'


@pytest.mark.asyncio
async def test_schema_mismatch_raises_inference_error():
    body = dict(VALID_ESTIMATE)
    del body['estimatedCO2SavedKg']

    gateway = make_gateway(lambda request: httpx.Response(200, json=body))

    with pytest.raises(InferenceError):
        await gateway.infer(PromptKind.CARBON_CREDITS, {'activityType': 'Composting'})


@pytest.mark.asyncio
async def test_negative_credits_rejected():
    body = dict(VALID_ESTIMATE, estimatedCO2SavedKg=-4)
    gateway = make_gateway(lambda request: httpx.Response(200, json=body))

    with pytest.raises(InferenceError):
        await gateway.infer(PromptKind.CARBON_CREDITS, {'activityType': 'Composting'})


@pytest.mark.asyncio
async def test_timeout_raises_inference_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(InferenceError):
        await make_gateway(handler).infer(PromptKind.CARBON_CREDITS, {'activityType': 'Mulching'})


@pytest.mark.asyncio
async def test_http_error_status_raises_inference_error():
    gateway = make_gateway(lambda request: httpx.Response(503, json={'error': 'overloaded'}))

    with pytest.raises(InferenceError):
        await gateway.infer(PromptKind.CARBON_CREDITS, {'activityType': 'Mulching'})


@pytest.mark.asyncio
async def test_non_json_body_raises_inference_error():
    gateway = make_gateway(lambda request: httpx.Response(200, text='<html>bad gateway</html>'))

    with pytest.raises(InferenceError):
        await gateway.infer(PromptKind.CARBON_CREDITS, {'activityType': 'Mulching'})


@pytest.mark.asyncio
async def test_unconfigured_gateway_raises_inference_error():
    gateway = make_gateway(lambda request: httpx.Response(200, json=VALID_ESTIMATE), base_url='')

    with pytest.raises(InferenceError):
        await gateway.infer(PromptKind.CARBON_CREDITS, {'activityType': 'Mulching'})


def test_carbon_credit_fallback():
    fallback = fallback_for(PromptKind.CARBON_CREDITS)

    assert fallback['estimated_co2_saved_kg'] == 1.5
    assert fallback['reduction_advice'] == FALLBACK_ADVICE
    assert fallback['climate_impact_analysis'] is None
    assert fallback['is_approved'] is True


@pytest.mark.asyncio
@pytest.mark.parametrize('field, value', [
    ('estimatedCO2SavedKg', True),
    ('estimatedCO2SavedKg', '15'),
    ('rewardPoints', '15'),
    ('rewardPoints', False),
    ('isApproved', 'yes'),
    ('isApproved', 1),
    ('reductionAdvice', 42),
])
async def test_wrongly_typed_values_are_not_coerced(field, value):
    body = dict(VALID_ESTIMATE, **{field: value})
    gateway = make_gateway(lambda request: httpx.Response(200, json=body))

    with pytest.raises(InferenceError):
        await gateway.infer(PromptKind.CARBON_CREDITS, {'activityType': 'Zero Tillage'})


@pytest.mark.asyncio
async def test_integer_credits_are_accepted():
    body = dict(VALID_ESTIMATE, estimatedCO2SavedKg=15)
    gateway = make_gateway(lambda request: httpx.Response(200, json=body))

    result = await gateway.infer(PromptKind.CARBON_CREDITS, {'activityType': 'Zero Tillage'})

    assert result['estimated_co2_saved_kg'] == 15.0
