"""Schema management for relational providers.

The memory provider needs nothing; for sqlite and postgresql the tables are
created from the SQLAlchemy metadata Protean builds once each repository has
been touched.
"""

from protean.domain import Domain
from sqlalchemy import create_engine

_RELATIONAL_PROVIDERS = ("sqlite", "postgresql")


def _relational_providers(domain: Domain):
    for _, provider in domain.providers.items():
        if provider.conn_info["provider"] in _RELATIONAL_PROVIDERS:
            yield provider


def setup_db(domain: Domain) -> list[str]:
    """Create tables for every aggregate and entity; returns the provider names touched."""
    touched = []
    with domain.domain_context():
        for provider in _relational_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])

            # Accessing _dao registers the model with the provider's metadata
            for registry in (domain.registry.aggregates, domain.registry.entities):
                for _, record in registry.items():
                    if record.cls.meta_.provider == provider.name:
                        domain.repository_for(record.cls)._dao  # noqa: B018

            provider._metadata.create_all(engine)
            touched.append(provider.name)
    return touched


def drop_db(domain: Domain) -> list[str]:
    dropped = []
    with domain.domain_context():
        for provider in _relational_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            provider._metadata.drop_all(engine)
            dropped.append(provider.name)
    return dropped
