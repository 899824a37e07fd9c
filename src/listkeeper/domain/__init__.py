"""Domain layer — entry models, pattern compilation, and matching rules.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
Registrable-domain lookups arrive through the :class:`DomainResolver`
protocol so a public-suffix implementation can be injected from outside.
"""
