"""Pytest configuration and fixtures."""

from __future__ import annotations

import pytest

STOP_PAGE_HTML = """
<html>
  <body>
    <h3>Bus Stop:</h3>
    3 AV/E 23 ST
    <div class="directionAtStop">
      <p><strong>M101 Southbound</strong></p>
      <ol><li><strong>3 min</strong>utes, 2 stops away, <small>Vehicle 1234</small></li></ol>
      <ol><li><strong>9 min</strong>utes, 2.1 miles away, <small>Vehicle 5678</small></li></ol>
    </div>
    <div class="directionAtStop">
      <p><strong>M103 Select Bus Service to City Hall</strong></p>
      <ol><li><strong>1 minute</strong>, approaching <small>Vehicle 77</small></li></ol>
    </div>
    <div class="directionAtStop">
      <p><strong>M102 Southbound</strong></p>
    </div>
  </body>
</html>
"""


@pytest.fixture
def stop_page_html() -> str:
    """A BusTime stop page with three route blocks."""
    return STOP_PAGE_HTML
