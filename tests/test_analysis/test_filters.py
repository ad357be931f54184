"""Tests for game_analytics.analysis.filters — predicate composition and options."""

from __future__ import annotations

from game_analytics.analysis.filters import (
    analyze_with_filters,
    apply_filters,
    filter_options,
    matches,
)
from game_analytics.models.analysis import AnalysisFilters


class TestMatches:
    def test_empty_filters_match_everything(self, sample_records):
        assert all(matches(r, AnalysisFilters()) for r in sample_records)

    def test_platform_exact(self, make_record):
        assert matches(make_record(platform="PS4"), AnalysisFilters(platform="PS4"))
        assert not matches(make_record(platform="PS4"), AnalysisFilters(platform="ps4"))

    def test_year_bounds_inclusive(self, make_record):
        flt = AnalysisFilters(start_year=2005, end_year=2010)
        assert matches(make_record(year_of_release=2005), flt)
        assert matches(make_record(year_of_release=2010), flt)
        assert not matches(make_record(year_of_release=2004), flt)
        assert not matches(make_record(year_of_release=2011), flt)

    def test_yearless_record_fails_year_bound(self, make_record):
        record = make_record(year_of_release=None)
        assert not matches(record, AnalysisFilters(start_year=2000))
        assert not matches(record, AnalysisFilters(end_year=2030))
        assert matches(record, AnalysisFilters(genre="Action"))

    def test_sales_bounds_inclusive(self, make_record):
        flt = AnalysisFilters(min_sales=1.0, max_sales=2.0)
        assert matches(make_record(global_sales=1.0), flt)
        assert matches(make_record(global_sales=2.0), flt)
        assert not matches(make_record(global_sales=2.01), flt)


class TestApplyFilters:
    def test_none_returns_all(self, sample_records):
        assert apply_filters(sample_records, None) == sample_records

    def test_preserves_order(self, sample_records):
        kept = apply_filters(sample_records, AnalysisFilters(platform="X360"))
        assert [r.name for r in kept] == ["Call of Duty: Black Ops", "Halo 3"]

    def test_composition_is_commutative(self, sample_records):
        by_platform = AnalysisFilters(platform="Wii")
        by_year = AnalysisFilters(start_year=2007)
        a = apply_filters(apply_filters(sample_records, by_platform), by_year)
        b = apply_filters(apply_filters(sample_records, by_year), by_platform)
        assert a == b
        assert [r.name for r in a] == ["Mario Kart Wii"]

    def test_idempotent(self, sample_records):
        flt = AnalysisFilters(genre="Shooter", min_sales=13.0)
        once = apply_filters(sample_records, flt)
        twice = apply_filters(once, flt)
        assert once == twice

    def test_combined_equals_sequential(self, sample_records):
        combined = apply_filters(
            sample_records, AnalysisFilters(platform="Wii", start_year=2007)
        )
        sequential = apply_filters(
            apply_filters(sample_records, AnalysisFilters(platform="Wii")),
            AnalysisFilters(start_year=2007),
        )
        assert combined == sequential


class TestAnalyzeWithFilters:
    def test_filtered_genre_task(self, sample_records):
        rows = analyze_with_filters(sample_records, "genre", AnalysisFilters(platform="X360"))
        assert len(rows) == 1
        assert rows[0].category == "Shooter"

    def test_unknown_task(self, sample_records):
        assert analyze_with_filters(sample_records, "bogus", AnalysisFilters()) == []


class TestFilterOptions:
    def test_sorted_distinct_values(self, sample_records):
        options = filter_options(sample_records)
        assert options.platforms == ["GB", "PS", "PS4", "Wii", "X360"]
        assert options.genres == sorted({r.genre for r in sample_records})

    def test_year_range_ignores_yearless(self, sample_records):
        options = filter_options(sample_records)
        assert options.min_year == 1996
        assert options.max_year == 2010

    def test_empty_records(self):
        options = filter_options([])
        assert options.platforms == []
        assert options.min_year is None
        assert options.max_year is None
