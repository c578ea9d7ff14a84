import re

from topocoords.utils import logging as topo_logging
from topocoords.utils.logging import LOGGER, warn_once


def test_logger():
    assert LOGGER.name == 'topocoords'


def test_warn_once(caplog, monkeypatch):
    monkeypatch.setattr(topo_logging, '_WARNINGS', set())

    warn_once('test')
    assert 'test' in caplog.text

    warn_once('test')
    assert len(re.findall('test', caplog.text)) == 1
