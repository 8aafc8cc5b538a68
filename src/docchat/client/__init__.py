"""Entry points: Flask HTTP surface and Click command-line tools."""
