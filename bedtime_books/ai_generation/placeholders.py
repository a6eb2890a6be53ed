"""
Inline SVG art returned in place of real illustrations.
"""

from __future__ import annotations

from urllib.parse import quote

MOCK_COLORS = ("#fbbf24", "#34d399", "#60a5fa", "#a78bfa", "#f87171")
PLACEHOLDER_FILL = "#f3f4f6"
PLACEHOLDER_TEXT = "#6b7280"

SVG_DATA_URI_PREFIX = "data:image/svg+xml;utf8,"


def svg_data_uri(svg: str) -> str:
    # Same escaping as JavaScript's encodeURIComponent
    return SVG_DATA_URI_PREFIX + quote(svg.strip(), safe="-_.!~*'()")


def mock_image(index: int) -> str:
    """Coloured mock illustration for the 0-based page ``index``."""
    color = MOCK_COLORS[index % len(MOCK_COLORS)]
    return svg_data_uri(f"""
<svg xmlns="http://www.w3.org/2000/svg" width="400" height="300" viewBox="0 0 400 300">
  <rect width="100%" height="100%" fill="{color}"/>
  <circle cx="200" cy="150" r="50" fill="white" opacity="0.3"/>
  <text x="200" y="160" text-anchor="middle" font-family="Arial" font-size="16" fill="white">Mock Image {index + 1}</text>
</svg>
""")


def failed_image() -> str:
    return svg_data_uri(f"""
<svg xmlns="http://www.w3.org/2000/svg" width="400" height="300" viewBox="0 0 400 300">
  <rect width="100%" height="100%" fill="{PLACEHOLDER_FILL}"/>
  <text x="200" y="150" text-anchor="middle" font-family="Arial" font-size="16" fill="{PLACEHOLDER_TEXT}">Image failed to generate</text>
</svg>
""")
