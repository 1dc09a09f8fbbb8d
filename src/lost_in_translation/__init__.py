"""Find translation keys used in PHP/Blade sources that a locale is missing."""

__version__ = "0.4.0"
