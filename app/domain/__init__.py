"""Domain-level policies and business rules.

This package contains logic that defines *what* the business rules are
(date ranges, pricing, deposit policy, availability, the contract state
machine), independent from *where* they are applied (services,
repositories, etc.).
"""
