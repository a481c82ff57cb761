"""Weekly shift planning generator.

Modules:
- config: load and validate planner configuration (JSON or YAML)
- schemas: pydantic request models for the generation payload
- errors: planning exception hierarchy
- domain: planning types and the optional SQLAlchemy persistence layer
- services: time handling, availability, opening windows, constraints, lunch
  breaks, coverage, scoring, statistics and request validation
- engine: employee ordering, greedy allocator and orchestrator
- validator: post-generation checks and text summaries
- io: payload JSON and CSV export helpers
- api: FastAPI application exposing the generation endpoint
- cli: command-line interface entrypoints
"""

__all__ = [
    "config",
    "schemas",
    "errors",
    "domain",
    "services",
    "engine",
    "validator",
    "io",
    "api",
    "cli",
]
