"""Thin helpers over repository queries used by the read side."""

from protean.utils.globals import current_domain

# Upper bound for unpaginated reads; the default query limit is far lower.
FETCH_LIMIT = 10_000


def fetch(aggregate_cls, **filters):
    """Return every record of ``aggregate_cls`` matching ``filters``."""
    query = current_domain.repository_for(aggregate_cls)._dao.query
    if filters:
        query = query.filter(**filters)
    return query.limit(FETCH_LIMIT).all().items


def fetch_one(aggregate_cls, **filters):
    items = current_domain.repository_for(aggregate_cls)._dao.query.filter(**filters).limit(1).all().items
    return items[0] if items else None
