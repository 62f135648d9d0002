"""
Nutrition resolution pipeline.

Turns a low-confidence visual estimate of a food item into the best
achievable nutrition record using ranked data sources.

Structure:
- domain/: Models, ports, curated knowledge base, estimate validation
- infrastructure/: External concerns (OpenFoodFacts API, cache stores, config)
- application/: Use cases (tiered resolution, image analysis)
- scripts/: Operational scripts (MongoDB setup)
- tests/: Test suite (unit, integration)
"""

__version__ = "1.0.0"
