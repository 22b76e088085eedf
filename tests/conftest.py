"""Pytest configuration and fixtures."""

import pytest

from cutoffs.records.models import CutoffRecord


def make_record(rank, percentile, institute="Institute", course="Course", choice_code=None, category="GOPEN"):
    return CutoffRecord(
        rank=rank,
        percentile=percentile,
        choice_code=choice_code or f"C{rank}",
        institute_name=institute,
        course_name=course,
        category=category,
    )


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def sample_records():
    """Small mixed dataset in load order (not sorted)."""
    return [
        make_record(1200, 98.5, "College of Engineering, Pune", "Computer Engineering"),
        make_record(15, 99.95, "Veermata Jijabai Technological Institute", "Computer Engineering"),
        make_record(40000, 72.1, "Government College of Engineering, Karad", "Civil Engineering"),
        make_record(5300, 95.2, "Pune Institute of Computer Technology", "Information Technology"),
        make_record(880, 99.1, "Sardar Patel Institute of Technology", "Electronics and Telecommunication"),
    ]


@pytest.fixture
def raw_rows():
    """Rows as the dataset serves them (source key names)."""
    return [
        {
            "Rank": 1,
            "Percentile": 99.9,
            "Choice Code": "0100119110",
            "Institute Name": "College of Engineering, Pune",
            "Course Name": "Computer Engineering",
            "Type": "GOPENS",
        },
        {
            "Rank": 2,
            "Percentile": 99.5,
            "Choice Code": "0100124510",
            "Institute Name": "Veermata Jijabai Technological Institute",
            "Course Name": "Information Technology",
            "Type": "GOPENS",
        },
        {
            "Rank": 50000,
            "Percentile": 10,
            "Choice Code": "0600519110",
            "Institute Name": "Government College of Engineering, Amravati",
            "Course Name": "Mechanical Engineering",
            "Type": "GOBCS",
        },
    ]


@pytest.fixture
def sources_config():
    return {
        "version": 1,
        "dataset_url": "https://data.example.com/cutoffs.json",
        "defaults": {"timeout_seconds": 5, "user_agent": "cutoff-explorer-tests"},
        "sources": [
            {"id": "local-api", "type": "endpoint", "url": "http://localhost:8080/api/cutoffs"},
            {"id": "allorigins", "type": "allorigins", "url": "https://proxy-a.example.com/get?url="},
            {"id": "corsproxy", "type": "proxy", "url": "https://proxy-b.example.com/?"},
            {"id": "direct", "type": "endpoint"},
        ],
    }
