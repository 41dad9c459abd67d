import pytest
from datetime import datetime, timedelta, timezone

from log_insights.analysis.windows import round_half_up, window_cutoffs
from log_insights.ingestion.timestamps import to_epoch_ms

from conftest import BROWSER_UA, SAMPLE_HOST, make_line

NOW = datetime(2025, 9, 20, 12, 0, 0, tzinfo=timezone.utc)

class TestWindowHelpers:

    def test_cutoffs(self):
        cutoffs = window_cutoffs(NOW)
        assert cutoffs[1] == to_epoch_ms(NOW) - 86400000
        assert cutoffs[7] == to_epoch_ms(NOW) - 7 * 86400000
        assert cutoffs[30] == to_epoch_ms(NOW) - 30 * 86400000

    @pytest.mark.parametrize("value, expected", [
        (0, 0), (2.4, 2), (2.5, 3), (3.5, 4), (2.6, 3), (None, 0), (57.85, 58),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

class TestRollingWindows:
    """Entries of different ages counted against a fixed query time"""

    @pytest.fixture(autouse=True)
    def load_entries(self, analyzer, tmp_path):
        ages = [
            timedelta(hours=2),
            timedelta(days=1),            # exactly on the 1 day cutoff
            timedelta(days=3),
            timedelta(days=7, seconds=1),  # just outside 7 days
            timedelta(days=20),
            timedelta(days=45),           # outside every window
        ]
        lines = [
            make_line(NOW - age, url="/page", status=500, size="100",
                      referrer="https://ref.example/", user_agent=BROWSER_UA,
                      offset_minutes=offset)
            for age, offset in zip(ages, [-420, 330, 0, -60, 600, 0])
        ]
        # A bot hit on the same page from another IP, 5 days back
        lines.append(make_line(NOW - timedelta(days=5), url="/page", status=200, size="300",
                               user_agent="Googlebot/2.1", ip="66.249.66.1"))
        path = tmp_path / "windows.log"
        path.write_text("\n".join(lines))
        analyzer.load_log_file(str(path), SAMPLE_HOST)

    def test_page_windows(self, analyzer):
        page = analyzer.analyze(now=NOW).pages[0]

        assert page.url == "/page"
        assert (page.requests_1d, page.requests_7d, page.requests_30d) == (2, 4, 6)
        assert (page.bot_requests_1d, page.bot_requests_7d, page.bot_requests_30d) == (0, 1, 1)
        assert (page.non_bot_requests_1d, page.non_bot_requests_7d, page.non_bot_requests_30d) == (2, 3, 5)
        assert (page.unique_ips_1d, page.unique_ips_7d, page.unique_ips_30d) == (1, 2, 2)

    def test_user_agent_windows(self, analyzer):
        user_agents = analyzer.analyze(now=NOW).user_agents

        browser = next(ua for ua in user_agents if ua.user_agent == BROWSER_UA)
        assert (browser.requests_1d, browser.requests_7d, browser.requests_30d) == (2, 3, 5)
        assert browser.is_bot is False
        google = next(ua for ua in user_agents if ua.user_agent == "Googlebot/2.1")
        assert google.is_bot is True

    def test_error_and_referrer_windows(self, analyzer):
        results = analyzer.analyze(now=NOW)

        assert len(results.errors) == 1
        error = results.errors[0]
        assert (error.url, error.status_code) == ("/page", 500)
        assert (error.requests_1d, error.requests_7d, error.requests_30d) == (2, 3, 5)

        assert [r.referrer for r in results.referrers] == ["https://ref.example/"]
        assert results.referrers[0].requests_30d == 5

    def test_top_ips(self, analyzer):
        top_ips = analyzer.analyze(now=NOW).top_ips

        assert [ip.ip for ip in top_ips] == ["172.16.6.142", "66.249.66.1"]
        assert top_ips[0].is_bot is False
        assert top_ips[1].is_bot is True
        assert (top_ips[1].requests_1d, top_ips[1].requests_7d, top_ips[1].requests_30d) == (0, 1, 1)

    def test_windows_are_nested(self, analyzer):
        results = analyzer.analyze(now=NOW)
        for row in results.user_agents + results.referrers + results.errors + results.top_ips:
            assert row.requests_1d <= row.requests_7d <= row.requests_30d

    def test_bandwidth_covers_all_history(self, analyzer):
        results = analyzer.analyze(now=NOW)
        bandwidth = results.bandwidth

        assert sum(day.total_requests for day in bandwidth) == 7
        assert sum(day.total_requests for day in bandwidth) == results.summary.total_requests
        assert bandwidth[-1].date == "2025-08-06"
        assert bandwidth[0].date == "2025-09-20"

    def test_summary(self, analyzer):
        summary = analyzer.analyze(now=NOW).summary

        assert summary.total_requests == 7
        assert summary.total_unique_ips == 2
        assert summary.total_bandwidth == 900
        assert summary.avg_response_size == 129
        assert summary.bot_traffic_percentage == 14
        assert [(sc.code, sc.count) for sc in summary.top_status_codes] == [(500, 6), (200, 1)]

def test_bandwidth_limited_to_thirty_days(analyzer, tmp_path):
    lines = [
        make_line(NOW - timedelta(days=day), size="10")
        for day in range(40)
    ]
    path = tmp_path / "long.log"
    path.write_text("\n".join(lines))
    analyzer.load_log_file(str(path), SAMPLE_HOST)

    bandwidth = analyzer.analyze(now=NOW).bandwidth

    assert len(bandwidth) == 30
    assert bandwidth[0].date == "2025-09-20"
    assert bandwidth[-1].date == "2025-08-22"

def test_most_active_day_tie_goes_to_latest(analyzer, tmp_path):
    lines = [
        make_line(datetime(2025, 9, 1, 10, tzinfo=timezone.utc)),
        make_line(datetime(2025, 9, 1, 11, tzinfo=timezone.utc)),
        make_line(datetime(2025, 9, 2, 10, tzinfo=timezone.utc)),
        make_line(datetime(2025, 9, 2, 11, tzinfo=timezone.utc)),
        make_line(datetime(2025, 8, 30, 11, tzinfo=timezone.utc)),
    ]
    path = tmp_path / "tie.log"
    path.write_text("\n".join(lines))
    analyzer.load_log_file(str(path), SAMPLE_HOST)

    assert analyzer.analyze(now=NOW).summary.most_active_day == "2025-09-02"
