"""
Core building blocks: numeric primitives, domain models and request contracts.

Nothing in this package depends on the valuation or simulation layers.
"""
