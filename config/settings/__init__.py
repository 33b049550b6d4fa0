"""Settings package for UMC Media Hub.

``base.py`` contains configuration shared across environments; ``dev.py``,
``test.py`` and ``prod.py`` extend it with environment specific overrides.
"""
