"""
Infrastructure Package
======================

Provides abstraction layers for external dependencies following the Dependency Inversion Principle.

Modules:
    - storage: File storage abstraction (S3, local filesystem)
    - email: Email service abstraction (SMTP, mock)
    - events: Domain event bus (redis pub/sub, in-memory)
    - observability: OpenTelemetry tracing setup

This package enables:
    - Easy testing with mock implementations
    - Switching between providers without code changes
    - Loose coupling between business logic and infrastructure
"""
