"""covhealth: coverage report archiving, health scoring and trends for CI builds."""

__version__ = "0.1.0"
