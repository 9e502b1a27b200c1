import json

import pytest

from walletguard_api.assessment import parse_assessment
from walletguard_api.errors import MalformedAssessment


def test_accepts_minimal_payload(assessment_payload):
    assessment = parse_assessment(json.dumps(assessment_payload))

    assert assessment.is_fraudulent is False
    assert assessment.risk_score == 5
    assert assessment.confidence_level == 'Low'
    assert assessment.flags == []
    assert assessment.recommendations == []
    assert assessment.behaviors.gas_price_anomaly is False
    assert assessment.activity_patterns.activity_age == '1 day'


def test_accepts_populated_payload(assessment_payload):
    assessment_payload.update(
        isFraudulent=True,
        riskScore=100,
        confidenceLevel='High',
        flags=['Interacts with mixer'],
        recommendations=['Avoid sending funds'],
    )
    assessment_payload['activityPatterns']['peakActivityPeriods'] = ['2024-01']

    assessment = parse_assessment(json.dumps(assessment_payload))

    assert assessment.risk_score == 100
    assert assessment.flags == ['Interacts with mixer']
    assert assessment.model_dump(by_alias=True)['activityPatterns']['peakActivityPeriods'] == ['2024-01']


@pytest.mark.parametrize(
    'raw',
    [
        'The wallet looks fine.',
        '',
        '```json\n{}\n```',
        '[]',
        'null',
        '{"isFraudulent": false',
    ],
)
def test_rejects_non_object_payloads(raw):
    with pytest.raises(MalformedAssessment) as exc_info:
        parse_assessment(raw)

    assert exc_info.value.raw == raw
    assert exc_info.value.stage == 'parse'


@pytest.mark.parametrize(
    'field',
    [
        'isFraudulent',
        'riskScore',
        'confidenceLevel',
        'flags',
        'behaviors',
        'summary',
        'recommendations',
        'activityPatterns',
    ],
)
def test_rejects_missing_top_level_field(assessment_payload, field):
    del assessment_payload[field]
    raw = json.dumps(assessment_payload)

    with pytest.raises(MalformedAssessment) as exc_info:
        parse_assessment(raw)

    assert exc_info.value.raw == raw


@pytest.mark.parametrize('score', [-1, 101, 250])
def test_rejects_out_of_range_score(assessment_payload, score):
    assessment_payload['riskScore'] = score

    with pytest.raises(MalformedAssessment):
        parse_assessment(json.dumps(assessment_payload))


@pytest.mark.parametrize('level', ['low', 'Critical', '', 'HIGH'])
def test_rejects_unknown_confidence_level(assessment_payload, level):
    assessment_payload['confidenceLevel'] = level

    with pytest.raises(MalformedAssessment):
        parse_assessment(json.dumps(assessment_payload))


@pytest.mark.parametrize(
    'field, value',
    [
        ('riskScore', '5'),
        ('riskScore', 5.5),
        ('isFraudulent', 'false'),
        ('isFraudulent', 0),
        ('flags', 'none'),
        ('summary', ''),
        ('summary', ' '),
        ('summary', '\n'),
        ('summary', None),
    ],
)
def test_rejects_mistyped_fields(assessment_payload, field, value):
    assessment_payload[field] = value

    with pytest.raises(MalformedAssessment):
        parse_assessment(json.dumps(assessment_payload))


def test_rejects_extra_behavior_key(assessment_payload):
    assessment_payload['behaviors']['phishing'] = True

    with pytest.raises(MalformedAssessment):
        parse_assessment(json.dumps(assessment_payload))


def test_rejects_missing_behavior_key(assessment_payload):
    del assessment_payload['behaviors']['largeTransfers']

    with pytest.raises(MalformedAssessment):
        parse_assessment(json.dumps(assessment_payload))


def test_rejects_missing_activity_pattern_key(assessment_payload):
    del assessment_payload['activityPatterns']['dormantPeriods']

    with pytest.raises(MalformedAssessment):
        parse_assessment(json.dumps(assessment_payload))
