"""Tests for the Selection Filter."""

from datetime import datetime, timezone

from rankly.engine.selection import Selection, apply_selection, filter_brands, select_records
from rankly.engine.types import BrandMetricEntry, MetricRecord, Scope


def _record(*names: str, owner: str | None = None, scope: Scope = Scope.OVERALL, scope_value: str | None = None, **kwargs):
    return MetricRecord(
        scope=scope,
        scope_value=scope_value,
        brand_metrics=tuple(BrandMetricEntry(brand_name=n, is_owner=(n == owner)) for n in names),
        **kwargs,
    )


def _names(entries) -> list[str]:
    return [e.brand_name for e in entries]


class TestFilterBrands:
    def test_keeps_owner_and_allowed(self):
        record = _record("Acme", "Globex", "Initech", "Umbrella", owner="Acme")
        kept = filter_brands(record, "Acme", {"Initech"})
        assert _names(kept) == ["Acme", "Initech"]

    def test_owner_kept_when_not_in_allowed(self):
        record = _record("Acme", "Globex", owner="Acme")
        assert "Acme" in _names(filter_brands(record, "Acme", {"Globex"}))

    def test_owner_alone_when_nothing_else_matches(self):
        record = _record("Acme", "Globex", owner="Acme")
        assert _names(filter_brands(record, "Acme", {"Hooli"})) == ["Acme"]

    def test_owner_found_by_name_without_flag(self):
        record = _record("Globex", "Acme")
        assert _names(filter_brands(record, "Acme", {"Hooli"})) == ["Acme"]

    def test_flagged_owner_kept_even_if_owner_name_differs(self):
        record = _record("Acme", "Globex", owner="Acme")
        assert _names(filter_brands(record, "Renamed Co", {"Globex"})) == ["Acme", "Globex"]

    def test_empty_selection_means_all(self):
        record = _record("Acme", "Globex", "Initech", owner="Acme")
        kept = filter_brands(record, "Acme", set(), empty_selection_means_all=True)
        assert _names(kept) == ["Acme", "Globex", "Initech"]

    def test_empty_selection_means_owner_only(self):
        record = _record("Acme", "Globex", "Initech", owner="Acme")
        kept = filter_brands(record, "Acme", set(), empty_selection_means_all=False)
        assert _names(kept) == ["Acme"]

    def test_empty_selection_owner_only_without_owner(self):
        record = _record("Globex", "Initech")
        assert filter_brands(record, "Acme", [], empty_selection_means_all=False) == []

    def test_empty_record(self):
        assert filter_brands(MetricRecord(), "Acme", {"Globex"}) == []

    def test_allowed_match_is_exact(self):
        record = _record("Acme", "Globex", owner="Acme")
        assert _names(filter_brands(record, "Acme", {"globex"})) == ["Acme"]


class TestApplySelection:
    def test_returns_narrowed_copy(self):
        record = _record("Acme", "Globex", "Initech", owner="Acme", total_tests=4)
        narrowed = apply_selection(record, "Acme", Selection(competitors=frozenset({"Globex"})))
        assert _names(narrowed.brand_metrics) == ["Acme", "Globex"]
        assert narrowed.total_tests == 4
        assert record.total_brands == 3


class TestSelectRecords:
    def _records(self) -> list[MetricRecord]:
        return [
            _record("Acme", scope=Scope.OVERALL, last_calculated=datetime(2025, 1, 1, tzinfo=timezone.utc)),
            _record("Acme", scope=Scope.OVERALL, last_calculated=datetime(2025, 3, 1, tzinfo=timezone.utc)),
            _record("Acme", scope=Scope.TOPIC, scope_value="Payments"),
            _record("Acme", scope=Scope.TOPIC, scope_value="Lending"),
            _record("Acme", scope=Scope.PERSONA, scope_value="CFO"),
            _record("Acme", scope=Scope.PLATFORM, scope_value="chatgpt"),
        ]

    def test_no_scope_filter_returns_latest_overall(self):
        selected = select_records(self._records(), Selection())
        assert len(selected) == 1
        assert selected[0].last_calculated.month == 3

    def test_overall_without_timestamps(self):
        records = [_record("Acme"), _record("Globex", last_calculated=datetime(2025, 1, 1, tzinfo=timezone.utc))]
        assert _names(select_records(records, Selection())[0].brand_metrics) == ["Globex"]

    def test_topics(self):
        selected = select_records(self._records(), Selection(topics=frozenset({"Payments", "Lending"})))
        assert [r.scope_value for r in selected] == ["Payments", "Lending"]

    def test_mixed_dimensions(self):
        selection = Selection(personas=frozenset({"CFO"}), platforms=frozenset({"chatgpt"}))
        selected = select_records(self._records(), selection)
        assert {(r.scope, r.scope_value) for r in selected} == {(Scope.PERSONA, "CFO"), (Scope.PLATFORM, "chatgpt")}

    def test_latest_copy_per_scope_value(self):
        jan = datetime(2025, 1, 1, tzinfo=timezone.utc)
        feb = datetime(2025, 2, 1, tzinfo=timezone.utc)
        old = _record("Acme", scope=Scope.TOPIC, scope_value="Payments", total_tests=10, last_calculated=jan)
        new = _record("Acme", scope=Scope.TOPIC, scope_value="Payments", total_tests=12, last_calculated=feb)
        lending = _record("Acme", scope=Scope.TOPIC, scope_value="Lending")
        selected = select_records([old, lending, new], Selection(topics=frozenset({"Payments", "Lending"})))
        assert [r.scope_value for r in selected] == ["Payments", "Lending"]
        assert selected[0] is new

    def test_undated_copy_loses_to_dated(self):
        jan = datetime(2025, 1, 1, tzinfo=timezone.utc)
        dated = _record("Acme", scope=Scope.PLATFORM, scope_value="claude", last_calculated=jan)
        undated = _record("Acme", scope=Scope.PLATFORM, scope_value="claude")
        selected = select_records([dated, undated], Selection(platforms=frozenset({"claude"})))
        assert len(selected) == 1
        assert selected[0] is dated

    def test_unknown_scope_value(self):
        assert select_records(self._records(), Selection(topics=frozenset({"Insurance"}))) == []

    def test_no_overall_record(self):
        records = [_record("Acme", scope=Scope.TOPIC, scope_value="Payments")]
        assert select_records(records, Selection()) == []

    def test_narrows_scope(self):
        assert Selection().narrows_scope is False
        assert Selection(competitors=frozenset({"Globex"})).narrows_scope is False
        assert Selection(platforms=frozenset({"claude"})).narrows_scope is True
