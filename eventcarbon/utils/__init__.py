"""Emission calculators, factor registries and validation helpers."""
