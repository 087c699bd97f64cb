"""Metadata normalisation: classification, ref resolution, and aggregation.

Build a record from a synthetic environment::

    >>> from ghmeta.environment import EnvironmentContext, EnvironmentReader
    >>> from ghmeta.metadata import MetadataAggregator
    >>> snapshot = EnvironmentReader(EnvironmentContext(environ=env)).read()
    >>> record = MetadataAggregator(snapshot, detector=detector).build()
    >>> record.repository.full_name
    'octo/reef'

"""

from __future__ import annotations

from .aggregator import MetadataAggregator, resolve_visibility
from .cache import generate_cache_keys
from .events import classify_event, is_version_tag
from .models import (
    ActorInfo,
    CacheInfo,
    ChangedFiles,
    CommitInfo,
    EventInfo,
    EventName,
    MetadataRecord,
    PullRequestInfo,
    RefInfo,
    RepositoryInfo,
    Visibility,
    WorkflowInfo,
)
from .refs import resolve_ref

__all__ = [
    "ActorInfo",
    "CacheInfo",
    "ChangedFiles",
    "CommitInfo",
    "EventInfo",
    "EventName",
    "MetadataAggregator",
    "MetadataRecord",
    "PullRequestInfo",
    "RefInfo",
    "RepositoryInfo",
    "Visibility",
    "WorkflowInfo",
    "classify_event",
    "generate_cache_keys",
    "is_version_tag",
    "resolve_ref",
    "resolve_visibility",
]
