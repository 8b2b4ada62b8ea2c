# mixflow: harmonic set ordering for DJ library exports
# Package: src.mixflow

__version__ = "1.0.0"
__author__ = "mixflow Contributors"
__description__ = "Camelot key normalization, transition scoring and set ordering for DJ collections"

# Module structure:
#   - mixflow.analyze     : Key normalization & Camelot wheel geometry
#   - mixflow.generate    : Transition scoring, set sequencing, matches & exports
#   - mixflow.collection  : DJ library XML ingestion (tracks + playlist tree)
#   - mixflow.config      : Configuration management
#   - mixflow.cli         : Command-line interface
