"""
Deterministic estimation models for laser cutting and fabrication.

Pure Python math over the static tables in material_lookup.py.
Every calculator is a CalculatorDefinition registered in registry.py;
go through registry.validate() / registry.calculate().
"""
