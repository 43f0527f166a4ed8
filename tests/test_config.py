"""Tests for configuration helpers."""
import os
from datetime import timedelta

import pytest

from petsched.config import (DevelopmentConfig, ProductionConfig, TestingConfig, get_config,
                             normalize_database_url, parse_duration)


@pytest.mark.parametrize('value, expected', [
    ('7d', timedelta(days=7)),
    ('15m', timedelta(minutes=15)),
    ('12h', timedelta(hours=12)),
    ('30s', timedelta(seconds=30)),
    ('3600', timedelta(seconds=3600)),
])
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


def test_parse_duration_default_and_errors():
    assert parse_duration(None, timedelta(days=1)) == timedelta(days=1)
    assert parse_duration('', 5) == 5
    with pytest.raises(ValueError):
        parse_duration('a week')


def test_normalize_database_url():
    assert normalize_database_url('postgres://u:p@db/petsched') == 'postgresql://u:p@db/petsched'
    assert normalize_database_url('postgresql://u:p@db/petsched') == 'postgresql://u:p@db/petsched'
    assert normalize_database_url('sqlite:///:memory:') == 'sqlite:///:memory:'
    assert normalize_database_url('sqlite:////var/data/app.db') == 'sqlite:////var/data/app.db'
    assert normalize_database_url('sqlite:///app.db') == 'sqlite:///' + os.path.abspath('app.db')


def test_get_config(monkeypatch):
    assert get_config('production') is ProductionConfig
    assert get_config('TEST') is TestingConfig
    assert get_config('staging') is DevelopmentConfig
    monkeypatch.setenv('APP_ENV', 'production')
    assert get_config() is ProductionConfig


def test_production_sends_hsts(config_class, payments, emails):
    from petsched import create_app

    class Production(config_class):
        APP_ENV = 'production'

    app = create_app(Production, payment_service=payments, email_service=emails)
    try:
        headers = app.test_client().get('/api/health').headers
        assert headers['Strict-Transport-Security'].startswith('max-age=')
    finally:
        app.extensions['petsched'].close()
