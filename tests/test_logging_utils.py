"""
Tests for run logging.
"""
import logging
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pso_forecast.core import setup_logging, get_logger, LogContext


@pytest.fixture
def reset_logging():
    yield
    # Drop (and close) any file handler left by the test.
    setup_logging(console=False)


class TestSetupLogging:
    """Tests for handler configuration."""

    def test_file_records_carry_run_id(self, tmp_path, reset_logging):
        logger = setup_logging(tmp_path, run_id='run_x', console=False)
        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()

        text = (tmp_path / 'run_x.log').read_text(encoding='utf-8')
        assert '| run_x | hello' in text

    def test_repeated_setup_replaces_handlers(self, tmp_path, reset_logging):
        setup_logging(tmp_path, run_id='first', console=False)
        logger = setup_logging(tmp_path, run_id='second', console=True)

        assert len(logger.handlers) == 2
        assert logger is get_logger()


class TestLogContext:
    """Tests for stage banners."""

    def test_banner_shows_details(self, caplog):
        logger = get_logger()
        with caplog.at_level(logging.INFO, logger='pso_forecast'):
            with LogContext(logger, "Forecast run", scenario='baseline', seed=42) as ctx:
                pass

        assert 'Starting: Forecast run [scenario=baseline, seed=42]' in caplog.text
        assert 'Completed: Forecast run' in caplog.text
        assert ctx.elapsed >= 0.0

    def test_failure_is_logged_and_propagates(self, caplog):
        logger = get_logger()
        with caplog.at_level(logging.INFO, logger='pso_forecast'):
            with pytest.raises(ValueError):
                with LogContext(logger, "Load data"):
                    raise ValueError("bad file")

        assert 'Failed: Load data' in caplog.text
        assert 'bad file' in caplog.text


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
