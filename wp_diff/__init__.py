# wp_diff/__init__.py
"""
wp_diff package initializer.
Compares paginated WordPress REST collections of an origin site and its mirror.
"""
__version__ = "0.1.0"
