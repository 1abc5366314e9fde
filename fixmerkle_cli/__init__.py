"""
fixmerkle CLI

Command-line interface for fixed-capacity Merkle trees.

Usage:
    python -m fixmerkle_cli root data1 data2 data3
    python -m fixmerkle_cli prove --index 1 data1 data2 data3 --out proof.json
    python -m fixmerkle_cli verify proof.json data2
"""

__version__ = "0.1.0"
