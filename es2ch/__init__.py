# ==============================================
# es2ch - Elasticsearch → ClickHouse Transfer
# ==============================================
#
# Package Structure:
#
# es2ch/
# ├── storage/          # Record model + the two record stores
# ├── transfer/         # Transfer engine, verification, progress
# ├── seeding/          # Synthetic data generation for the source
# ├── config.py         # Configuration management
# ├── errors.py         # Error taxonomy
# ├── formatting.py     # Human-readable durations and sample tables
# ├── logging_config.py # Logging setup
# └── cli.py            # Command line entry point
#
# ==============================================

__version__ = "0.1.0"
