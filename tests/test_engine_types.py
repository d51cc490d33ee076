"""Tests for engine types and stored-document parsing."""

import dataclasses
from datetime import datetime, timezone

import pytest

from rankly.engine.numeric import percentage, to_count, to_float
from rankly.engine.types import (
    NO_OWNER,
    BrandMetricEntry,
    MetricRecord,
    Scope,
    SentimentBreakdown,
    camel,
)


class TestNumeric:
    """Test numeric coercion helpers."""

    def test_to_float_valid(self):
        assert to_float(3) == 3.0
        assert to_float("2.5") == 2.5

    def test_to_float_invalid_becomes_zero(self):
        assert to_float(None) == 0.0
        assert to_float("abc") == 0.0
        assert to_float(float("nan")) == 0.0
        assert to_float(float("inf")) == 0.0
        assert to_float({"a": 1}) == 0.0

    def test_to_count_clamps_negative(self):
        assert to_count(-4) == 0
        assert to_count(7.9) == 7
        assert to_count(None) == 0

    def test_percentage_zero_total(self):
        assert percentage(5, 0) == 0.0

    def test_percentage_rounds_two_decimals(self):
        assert percentage(1, 3) == 33.33


class TestCamel:
    def test_simple(self):
        assert camel("brand_name") == "brandName"

    def test_digit_suffix(self):
        assert camel("count_1st") == "count1st"
        assert camel("rank_3rd") == "rank3rd"

    def test_multi_part(self):
        assert camel("earned_citations_total") == "earnedCitationsTotal"

    def test_single_word(self):
        assert camel("scope") == "scope"


class TestScope:
    def test_values(self):
        assert Scope.OVERALL == "overall"
        assert Scope.PLATFORM == "platform"
        assert Scope.TOPIC == "topic"
        assert Scope.PERSONA == "persona"
        assert Scope.PROMPT == "prompt"
        assert Scope.FILTERED == "filtered"


class TestBrandMetricEntry:
    """Test BrandMetricEntry defaults and parsing."""

    def test_default_values(self):
        e = BrandMetricEntry(brand_name="Acme")
        assert e.is_owner is False
        assert e.visibility_score == 0.0
        assert e.visibility_rank == 0
        assert e.count_1st == 0
        assert e.sentiment_breakdown == SentimentBreakdown()

    def test_frozen(self):
        e = BrandMetricEntry(brand_name="Acme")
        with pytest.raises(dataclasses.FrozenInstanceError):
            e.visibility_rank = 1  # type: ignore[misc]

    def test_from_camel_case_document(self):
        doc = {
            "brandId": "b1",
            "brandName": "Acme",
            "isOwner": True,
            "visibilityScore": 80,
            "depthOfMention": 1.2345,
            "avgPosition": 2.5,
            "visibilityRank": 1,
            "count1st": 4,
            "countOther": 2,
            "totalCitations": 9,
            "sentimentBreakdown": {"positive": 3, "neutral": 1, "negative": 0, "mixed": 1},
        }
        e = BrandMetricEntry.from_dict(doc)
        assert e.brand_id == "b1"
        assert e.brand_name == "Acme"
        assert e.is_owner is True
        assert e.visibility_score == 80.0
        assert e.depth_of_mention == 1.2345
        assert e.avg_position == 2.5
        assert e.visibility_rank == 1
        assert e.count_1st == 4
        assert e.count_other == 2
        assert e.total_citations == 9
        assert e.sentiment_breakdown.positive == 3
        assert e.sentiment_breakdown.total == 5

    def test_from_snake_case_document(self):
        e = BrandMetricEntry.from_dict({"brand_name": "Globex", "total_mentions": 12})
        assert e.brand_name == "Globex"
        assert e.total_mentions == 12

    def test_invalid_numbers_coerced_to_zero(self):
        doc = {
            "brandName": "Acme",
            "visibilityScore": float("nan"),
            "shareOfVoice": None,
            "avgPosition": "n/a",
            "count1st": -3,
            "sentimentBreakdown": None,
        }
        e = BrandMetricEntry.from_dict(doc)
        assert e.visibility_score == 0.0
        assert e.share_of_voice == 0.0
        assert e.avg_position == 0.0
        assert e.count_1st == 0
        assert e.sentiment_breakdown.total == 0

    def test_legacy_document_without_owner_flag(self):
        e = BrandMetricEntry.from_dict({"brandName": "Acme"})
        assert e.is_owner is False

    def test_metric_reads_invalid_as_zero(self):
        e = BrandMetricEntry(brand_name="Acme", visibility_score=float("nan"))
        assert e.metric("visibility_score") == 0.0
        assert e.metric("not_a_field") == 0.0

    def test_to_dict_uses_camel_case(self):
        e = BrandMetricEntry(
            brand_name="Acme",
            count_1st=2,
            sentiment_breakdown=SentimentBreakdown(positive=1),
        )
        d = e.to_dict()
        assert d["brandName"] == "Acme"
        assert d["count1st"] == 2
        assert d["isOwner"] is False
        assert d["sentimentBreakdown"] == {"positive": 1, "neutral": 0, "negative": 0, "mixed": 0}
        assert "brand_name" not in d


class TestMetricRecord:
    """Test MetricRecord parsing and serialization."""

    def test_from_document(self):
        doc = {
            "scope": "topic",
            "scopeValue": "Payments",
            "totalPrompts": 20,
            "totalResponses": 80,
            "lastCalculated": "2025-03-01T10:00:00Z",
            "brandMetrics": [{"brandName": "Acme"}, {"brandName": "Globex"}],
        }
        record = MetricRecord.from_dict(doc)
        assert record.scope == Scope.TOPIC
        assert record.scope_value == "Payments"
        assert record.total_tests == 20
        assert record.total_responses == 80
        assert record.total_brands == 2
        assert record.last_calculated == datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)
        assert isinstance(record.brand_metrics, tuple)

    def test_total_tests_preferred_over_total_prompts(self):
        record = MetricRecord.from_dict({"totalTests": 5, "totalPrompts": 9})
        assert record.total_tests == 5

    def test_unknown_scope_falls_back_to_overall(self):
        record = MetricRecord.from_dict({"scope": "weekly"})
        assert record.scope == Scope.OVERALL

    def test_naive_timestamp_taken_as_utc(self):
        record = MetricRecord.from_dict({"lastCalculated": "2025-03-01T10:00:00"})
        assert record.last_calculated.tzinfo == timezone.utc

    def test_bad_timestamp_ignored(self):
        record = MetricRecord.from_dict({"lastCalculated": "yesterday"})
        assert record.last_calculated is None

    def test_empty_record(self):
        record = MetricRecord()
        assert record.is_empty
        assert record.total_brands == 0

    def test_to_dict(self):
        record = MetricRecord(
            scope=Scope.FILTERED,
            brand_metrics=(BrandMetricEntry(brand_name="Acme"),),
            total_tests=3,
        )
        d = record.to_dict()
        assert d["scope"] == "filtered"
        assert d["scopeValue"] is None
        assert d["totalTests"] == 3
        assert d["totalBrands"] == 1
        assert d["brandMetrics"][0]["brandName"] == "Acme"
        assert d["lastCalculated"] is None


class TestNoOwner:
    def test_sentinel_is_empty_entry(self):
        assert NO_OWNER.brand_name == ""
        assert NO_OWNER.is_owner is False
