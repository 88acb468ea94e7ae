"""mole - interactive terminal menus and launcher for disk and system analysis tools."""

__version__ = "0.1.0"
