"""Shared pytest fixtures for the papers index tests."""

import pytest


@pytest.fixture
def papers_dir(tmp_path, monkeypatch):
    """A temporary top-level directory, also made the current directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_paper(papers_dir):
    """Return a function that writes an HTML paper under papers_dir.

    ``title`` is placed in an ``h1`` heading; pass ``body`` instead to
    control the whole document body.
    """

    def _write(path, title=None, body=None):
        if body is None:
            body = '<h1>%s</h1>\n<p>Some text.</p>' % title
        full = papers_dir / path
        full.parent.mkdir(parents=True, exist_ok=True)
        full.write_text(
            '<!DOCTYPE html>\n<html>\n<head><title>x</title></head>\n'
            '<body>\n%s\n</body>\n</html>\n' % body,
            encoding='utf-8')
        return full

    return _write
