# src/policy/__init__.py — v1
