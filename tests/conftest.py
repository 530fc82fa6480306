import copy

import pytest

from sleep_report.core.ingest.normalizer_manager import NormalizerManager

# 2024-01-05 22:00 UTC (23:00 in Paris) -> 2024-01-06 06:00 UTC, a Saturday
NIGHT_1_START = 1704492000
NIGHT_1_END = 1704520800

# 2024-01-08 23:30 UTC -> 2024-01-09 07:00 UTC, a Tuesday
NIGHT_2_START = 1704756600
NIGHT_2_END = 1704783600


@pytest.fixture
def vendor_rows():
    """Two nights as returned by the vendor API"""
    return copy.deepcopy([
        {
            "id": 101,
            "timezone": "Europe/Paris",
            "startdate": NIGHT_1_START,
            "enddate": NIGHT_1_END,
            "night_events": '{"1": [0], "2": [600], "3": [27000], "4": [28200]}',
            "data": {
                "total_timeinbed": 28800,
                "total_sleep_time": 25200,
                "sleep_efficiency": 0.89,
                "sleep_latency": 600,
                "durationtosleep": 600,
                "durationtowakeup": 300,
                "apnea_hypopnea_index": 2,
                "snoring": 600,
                "hr_average": 58,
                "hr_min": 49,
                "hr_max": 71,
                "out_of_bed_count": 1,
            },
        },
        {
            "id": 102,
            "timezone": "UTC",
            "startdate": NIGHT_2_START,
            "enddate": NIGHT_2_END,
            "night_events": None,
            "data": {
                "total_timeinbed": 27000,
                "total_sleep_time": 23400,
                "sleep_efficiency": 0.8,
                "sleep_latency": 1200,
                "durationtosleep": 1200,
                "durationtowakeup": 0,
                "apnea_hypopnea_index": 22,
                "snoring": 2700,
                "hr_average": 62,
                "hr_min": 52,
                "hr_max": 80,
                "out_of_bed_count": 0,
            },
        },
    ])


@pytest.fixture
def epoch_records():
    """Sparse epoch series for night 101"""
    base = NIGHT_1_START
    return [
        {
            "sleep_id": 101,
            "series": [
                {
                    "state": 0,
                    "startdate": base,
                    "enddate": base + 900,
                    "hr": {str(base): 70, str(base + 300): 68, str(base + 600): 66, str(base + 900): 65},
                    "rr": {str(base): 15},
                },
                {
                    "state": 1,
                    "startdate": base + 1200,
                    "enddate": base + 1800,
                    "hr": {str(base + 1200): 60, str(base + 1500): 58, str(base + 1800): 57},
                    "snoring": {str(base + 1500): 1},
                },
                {
                    "state": 2,
                    "startdate": base + 2100,
                    "enddate": base + 2100,
                    "hr": {},
                    "rr": {str(base + 2100): 13},
                },
            ],
        },
    ]


@pytest.fixture
def manager():
    return NormalizerManager()


@pytest.fixture
def nights(manager, vendor_rows):
    return manager.normalize(vendor_rows, label="LAB-1").nights
