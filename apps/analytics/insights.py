"""AI insights aggregation: emotion responses, A/B test outcomes and creative performance."""
from collections import OrderedDict
from datetime import timedelta

from django.utils import timezone

from .repositories import monitor_query_performance
from .repository import AnalyticsRepository

EMOTION_WINDOW_DAYS = 30
EMOTION_SAMPLE_LIMIT = 500
AB_TEST_LIMIT = 10
TOP_CREATIVE_LIMIT = 10
WINNER_MARGIN = 1.2


def _rate(part, whole):
    return part / whole * 100 if whole > 0 else 0


def _mean(values):
    return sum(values) / len(values) if values else 0


def summarize_emotions(samples):
    by_type = OrderedDict()
    by_creative = OrderedDict()

    for sample in samples:
        creative = sample.ad_creative
        if creative is None or not sample.joy_score:
            continue

        scores = (
            sample.joy_score or 0,
            sample.surprise_score or 0,
            sample.neutral_score or 0,
            sample.dwell_time or 0,
        )
        type_totals = by_type.setdefault(creative.type, [0, 0, 0, 0, 0])
        creative_totals = by_creative.setdefault(creative.id, {
            'id': creative.id,
            'headline': creative.headline or 'Unknown',
            'type': creative.type,
            'totals': [0, 0, 0, 0],
            'samples': 0,
        })
        for i, score in enumerate(scores):
            type_totals[i] += score
            creative_totals['totals'][i] += score
        type_totals[4] += 1
        creative_totals['samples'] += 1

    type_insights = []
    for creative_type, (joy, surprise, neutral, dwell, count) in by_type.items():
        type_insights.append({
            'type': creative_type,
            'avgJoy': round(joy / count, 3),
            'avgSurprise': round(surprise / count, 3),
            'avgNeutral': round(neutral / count, 3),
            'avgDwellTime': round(dwell / count, 1),
            'sampleSize': count,
        })

    creative_insights = []
    for entry in by_creative.values():
        joy, surprise, neutral, dwell = entry['totals']
        samples_seen = entry['samples']
        creative_insights.append({
            'id': entry['id'],
            'headline': entry['headline'],
            'type': entry['type'],
            'avgJoy': round(joy / samples_seen, 3),
            'avgSurprise': round(surprise / samples_seen, 3),
            'avgNeutral': round(neutral / samples_seen, 3),
            'avgDwellTime': round(dwell / samples_seen, 1),
            'samples': samples_seen,
        })

    def top(field):
        return sorted(creative_insights, key=lambda row: row[field], reverse=True)[:5]

    return {
        'byCreativeType': type_insights,
        'topEmotionalResponses': {
            'mostJoyful': top('avgJoy'),
            'mostSurprising': top('avgSurprise'),
            'longestDwellTime': top('avgDwellTime'),
        },
        'overall': {
            'avgJoy': _mean([row['avgJoy'] for row in type_insights]),
            'avgSurprise': _mean([row['avgSurprise'] for row in type_insights]),
            'avgDwellTime': _mean([row['avgDwellTime'] for row in type_insights]),
        },
    }


def improvement_percentage(best_rate, baseline_rate):
    if not baseline_rate:
        return 0
    return round((best_rate - baseline_rate) / baseline_rate * 100, 1)


def summarize_ab_test(test):
    variants = []
    for variant in test.variants.all():
        creative = variant.ad_creative
        variants.append({
            'id': variant.id,
            'name': variant.name,
            'creativeType': creative.type if creative else 'UNKNOWN',
            'creativeHeadline': (creative.headline if creative else None) or 'Unknown',
            'trafficAllocation': float(variant.traffic_allocation),
            'metrics': {
                'impressions': variant.impressions,
                'engagements': variant.engagements,
                'conversions': variant.conversions,
                'engagementRate': _rate(variant.engagements, variant.impressions),
                'conversionRate': _rate(variant.conversions, variant.impressions),
            },
            'isWinner': variant.id == test.winning_variant_id,
        })
    variants.sort(key=lambda row: row['metrics']['engagementRate'], reverse=True)

    has_winner = bool(test.winning_variant_id) or (
        len(variants) > 1
        and variants[0]['metrics']['engagementRate'] > 0
        and variants[0]['metrics']['engagementRate'] > variants[1]['metrics']['engagementRate'] * WINNER_MARGIN
    )

    total_impressions = sum(row['metrics']['impressions'] for row in variants)
    total_engagements = sum(row['metrics']['engagements'] for row in variants)
    winning_variant_id = test.winning_variant_id or (variants[0]['id'] if has_winner else None)
    improvement = 0
    if has_winner and len(variants) > 1:
        improvement = improvement_percentage(
            variants[0]['metrics']['engagementRate'], variants[-1]['metrics']['engagementRate']
        )

    return {
        'id': test.id,
        'name': test.name,
        'status': test.status,
        'startDate': test.start_date,
        'endDate': test.end_date,
        'totalImpressions': total_impressions,
        'totalEngagements': total_engagements,
        'overallEngagementRate': _rate(total_engagements, total_impressions),
        'variants': variants,
        'hasSignificantWinner': has_winner,
        'winningVariantId': winning_variant_id,
        'improvementPercentage': improvement,
    }


def summarize_ab_tests(tests):
    recent = [summarize_ab_test(test) for test in tests]
    winners = [row for row in recent if row['hasSignificantWinner']]
    return {
        'recentTests': recent,
        'summary': {
            'activeTests': sum(1 for row in recent if row['status'] == 'ACTIVE'),
            'completedTests': sum(1 for row in recent if row['status'] == 'COMPLETED'),
            'significantWinners': len(winners),
            'avgImprovement': _mean([row['improvementPercentage'] for row in winners]),
        },
    }


def summarize_creatives(rows):
    result = []
    for row in rows:
        creative = row['creative']
        result.append({
            'id': creative.id,
            'name': creative.name,
            'type': creative.type,
            'headline': creative.headline,
            'previewImage': creative.preview_image,
            'metrics': {
                'impressions': row['impressions'],
                'engagements': row['engagements'],
                'completions': row['completions'],
                'engagementRate': _rate(row['engagements'], row['impressions']),
                'completionRate': _rate(row['completions'], row['impressions']),
            },
        })
    return sorted(result, key=lambda item: item['metrics']['engagementRate'], reverse=True)


def default_model_performance(now):
    stamp = now.isoformat()
    return {
        'audienceEstimation': {
            'accuracy': 92.5, 'lastUpdated': stamp, 'trainingStatus': 'STABLE', 'dataPoints': 45000,
        },
        'emotionDetection': {
            'precision': 88.3, 'recall': 86.7, 'lastUpdated': stamp, 'trainingStatus': 'IMPROVING',
            'dataPoints': 32000,
        },
        'engagementPrediction': {
            'accuracy': 83.9, 'lastUpdated': stamp, 'trainingStatus': 'NEEDS_RETRAINING', 'dataPoints': 28500,
        },
        'adRecommendation': {
            'precision': 90.2, 'recall': 87.5, 'lastUpdated': stamp, 'trainingStatus': 'STABLE',
            'dataPoints': 38000,
        },
    }


def default_federated_learning(now):
    return {
        'lastGlobalUpdate': (now - timedelta(days=1)).isoformat(),
        'modelVersion': '2.4.1',
        'avgDeviceContribution': 15,
        'dataPrivacyScore': 98.5,
    }


DEFAULT_RECOMMENDATIONS = [
    {
        'id': 1,
        'type': 'CREATIVE_OPTIMIZATION',
        'title': 'Use more dynamic content in retail environments',
        'description': 'Analysis shows 35% higher engagement with interactive ads in shopping areas',
        'confidence': 92,
        'implementationDifficulty': 'MEDIUM',
    },
    {
        'id': 2,
        'type': 'TARGETING_ADJUSTMENT',
        'title': 'Refine evening demographic targeting',
        'description': 'Evening viewers (6-9pm) show higher conversion rates for entertainment offers',
        'confidence': 88,
        'implementationDifficulty': 'LOW',
    },
    {
        'id': 3,
        'type': 'AD_SCHEDULING',
        'title': 'Optimize ad frequency in transportation',
        'description': 'Repeated exposure within 20-minute intervals reduces engagement on commuter routes',
        'confidence': 85,
        'implementationDifficulty': 'MEDIUM',
    },
    {
        'id': 4,
        'type': 'CONTENT_SUGGESTION',
        'title': 'Incorporate more local cultural elements',
        'description': 'Region-specific cultural references boost attention metrics by 28%',
        'confidence': 82,
        'implementationDifficulty': 'HIGH',
    },
]


def _config_value(key):
    from apps.sysconfig.models import SystemConfig

    value = SystemConfig.objects.filter(config_key=key).values_list('config_value', flat=True).first()
    return value if isinstance(value, (dict, list)) else None


@monitor_query_performance
def build_ai_insights(now=None):
    now = now or timezone.now()
    since = now - timedelta(days=EMOTION_WINDOW_DAYS)

    emotion_samples = AnalyticsRepository.recent_emotion_data(since, EMOTION_SAMPLE_LIMIT)
    ab_tests = AnalyticsRepository.ab_tests_for_insights(AB_TEST_LIMIT)
    creatives = AnalyticsRepository.creatives_delivered_since(since, TOP_CREATIVE_LIMIT)
    active_devices = AnalyticsRepository.active_device_count(now - timedelta(days=7))

    federated = _config_value('FEDERATED_LEARNING')
    if isinstance(federated, dict):
        federated = {**federated, 'activeDevices': active_devices}
    else:
        federated = {'activeDevices': active_devices, **default_federated_learning(now)}

    return {
        'emotionInsights': summarize_emotions(emotion_samples),
        'abTestInsights': summarize_ab_tests(ab_tests),
        'topPerformingCreatives': summarize_creatives(creatives),
        'modelPerformance': _config_value('AI_MODEL_PERFORMANCE') or default_model_performance(now),
        'federatedLearning': federated,
        'aiRecommendations': _config_value('AI_RECOMMENDATIONS') or DEFAULT_RECOMMENDATIONS,
    }
