"""
Laser-cutting calculation engine.

Validates calculator inputs against declared field specs, runs the
estimation models over the static material tables in
calculators/material_lookup.py, and returns a uniform result envelope.
"""
