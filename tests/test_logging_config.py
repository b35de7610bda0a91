"""Tests for structlog configuration."""

import json
import logging

import pytest
import structlog

from equine_genetics.logging_config import configure_logging, get_log_format, get_log_level


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


def test_log_level_from_env(monkeypatch):
    monkeypatch.setenv('LOG_LEVEL', 'debug')
    assert get_log_level() == logging.DEBUG
    monkeypatch.setenv('LOG_LEVEL', 'chatty')
    assert get_log_level() == logging.INFO
    monkeypatch.delenv('LOG_LEVEL')
    assert get_log_level() == logging.INFO


def test_log_format_from_env(monkeypatch):
    monkeypatch.setenv('LOG_FORMAT', 'JSON')
    assert get_log_format() == 'json'
    monkeypatch.setenv('LOG_FORMAT', 'xml')
    assert get_log_format() == 'text'


def test_json_output(capsys):
    configure_logging(level=logging.INFO, log_format='json')
    logger = structlog.get_logger('equine_genetics.test')
    logger.info("foal_created", animal_id=3)
    logger.debug("phenotype_resolved")

    lines = [line for line in capsys.readouterr().err.splitlines() if line.strip()]
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record['event'] == 'foal_created'
    assert record['animal_id'] == 3
    assert record['level'] == 'info'
    assert 'timestamp' in record


def test_level_filters_lower_events(capsys):
    configure_logging(level=logging.ERROR, log_format='text')
    logger = structlog.get_logger('equine_genetics.test')
    logger.warning("caregiving_task_unknown")
    logger.error("breed_profile_missing", breed='Unicorn')

    err = capsys.readouterr().err
    assert 'caregiving_task_unknown' not in err
    assert 'breed_profile_missing' in err
