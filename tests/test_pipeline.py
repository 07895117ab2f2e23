"""End-to-end pipeline tests over local feed files."""


import pytest

from driftrack.errors import ConfigError, FeedDecodeError, FeedRetrievalError
from driftrack.export.writer import read_track
from driftrack.models.config import RunConfig, SourceConfig
from driftrack.pipeline import build_adapter, run_pipeline
from driftrack.adapters.file_feed import FileFeedAdapter
from driftrack.adapters.http_feed import HttpFeedAdapter

from feeds import feed_text, row, utc


def _feed(tmp_path, name, rows) -> str:
    path = tmp_path / name
    path.write_text(feed_text(rows))
    return str(path)


def _config(sources, drifters) -> RunConfig:
    return RunConfig.model_validate({"sources": sources, "drifters": drifters})


@pytest.fixture
def two_feeds(tmp_path):
    """Transmitter 5 in a 2014 feed crossing new year, 7 in a 2015 feed."""
    first = _feed(tmp_path, "drift_2014.dat", [
        row(5, 12, 30, 0, 0, 363.0, lat=40.0),
        row(6, 12, 30, 1, 0, 363.04, lat=99.0),
        row(5, 12, 31, 0, 0, 364.0, lat=40.5),
        row(5, 1, 2, 0, 0, 1.0, lat=41.0),
    ])
    second = _feed(tmp_path, "drift_2015.dat", [
        row(7, 1, 1, 12, 0, 0.5, lat=50.0),
        row(7, 1, 3, 0, 0, 2.0, lat=51.0),
        row(7, 1, 4, 0, 0, 3.0, lat=52.0),
    ])
    return first, second


class TestBuildAdapter:

    def test_scheme_selection(self):
        assert isinstance(
            build_adapter("s", SourceConfig(url="https://x/a.dat", year=2014)),
            HttpFeedAdapter,
        )
        assert isinstance(
            build_adapter("s", SourceConfig(url="/data/a.dat", year=2014)),
            FileFeedAdapter,
        )
        assert isinstance(
            build_adapter("s", SourceConfig(url="file:///data/a.dat", year=2014)),
            FileFeedAdapter,
        )

    def test_unsupported_scheme(self):
        with pytest.raises(ConfigError):
            build_adapter("s", SourceConfig(url="ftp://x/a.dat", year=2014))


class TestRunPipeline:

    @pytest.mark.asyncio
    async def test_drifter_across_two_sources(self, tmp_path, two_feeds):
        first, second = two_feeds
        config = _config(
            sources=[
                {"url": first, "year": 2014, "esns": [5]},
                {"url": second, "year": 2015, "esns": [7]},
            ],
            drifters=[{"name": "WEST", "esns": [5, 7]}],
        )
        out = tmp_path / "output"

        result = await run_pipeline(config, out)

        assert result.ok
        assert result.source_points == {"source_1": 3, "source_2": 3}
        points = read_track(out / "WEST.dat")
        assert [p.timestamp for p in points] == [
            utc(2014, 12, 30),
            utc(2014, 12, 31),
            utc(2015, 1, 1, 12),
            utc(2015, 1, 2),
            utc(2015, 1, 3),
            utc(2015, 1, 4),
        ]
        assert [p.latitude for p in points] == [40.0, 40.5, 50.0, 41.0, 51.0, 52.0]

    @pytest.mark.asyncio
    async def test_unlisted_transmitters_never_exported(self, tmp_path, two_feeds):
        first, _ = two_feeds
        config = _config(
            sources=[{"url": first, "year": 2014, "esns": [5]}],
            drifters=[
                {"name": "A", "esns": [5, 6]},
                {"name": "B", "esns": [6]},
            ],
        )
        result = await run_pipeline(config, tmp_path / "output")
        assert len(result.tracks["A"]) == 3
        assert len(result.tracks["B"]) == 0
        assert all(p.latitude != 99.0 for p in result.tracks["A"].points)

    @pytest.mark.asyncio
    async def test_window_applied(self, tmp_path, two_feeds):
        first, second = two_feeds
        config = _config(
            sources=[
                {"url": first, "year": 2014, "esns": [5]},
                {"url": second, "year": 2015, "esns": [7]},
            ],
            drifters=[{
                "name": "WEST",
                "esns": [5, 7],
                "from": "2015-01-01T00:00:00Z",
                "to": utc(2015, 1, 3),
            }],
        )
        result = await run_pipeline(config, tmp_path / "output")
        assert [p.timestamp for p in result.tracks["WEST"].points] == [
            utc(2015, 1, 1, 12),
            utc(2015, 1, 2),
        ]

    @pytest.mark.asyncio
    async def test_missing_feed_aborts_before_export(self, tmp_path, two_feeds):
        first, _ = two_feeds
        config = _config(
            sources=[
                {"url": first, "year": 2014, "esns": [5]},
                {"url": str(tmp_path / "absent.dat"), "year": 2015, "esns": [7]},
            ],
            drifters=[{"name": "WEST", "esns": [5, 7]}],
        )
        out = tmp_path / "output"
        with pytest.raises(FeedRetrievalError):
            await run_pipeline(config, out)
        assert not out.exists()

    @pytest.mark.asyncio
    async def test_ragged_feed_aborts(self, tmp_path):
        path = tmp_path / "bad.dat"
        path.write_text(feed_text([row(5, 1, 1, 0, 0, 0.5)]) + "1 5 1 1\n")
        config = _config(
            sources=[{"url": str(path), "year": 2014, "esns": [5]}],
            drifters=[{"name": "A", "esns": [5]}],
        )
        with pytest.raises(FeedDecodeError):
            await run_pipeline(config, tmp_path / "output")

    @pytest.mark.asyncio
    async def test_export_failure_is_reported(self, tmp_path, two_feeds):
        first, _ = two_feeds
        blocker = tmp_path / "output"
        blocker.write_text("")
        config = _config(
            sources=[{"url": first, "year": 2014, "esns": [5]}],
            drifters=[{"name": "A", "esns": [5]}],
        )
        result = await run_pipeline(config, blocker)
        assert not result.ok
        assert "A" in result.export.failed
        assert len(result.tracks["A"]) == 3
