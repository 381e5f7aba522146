"""
Core backend base components.

Foundational viewsets, serializers, mixins and filters shared by every app.
"""

from .viewsets import BaseViewSet, ReadOnlyBaseViewSet
from .serializers import BaseModelSerializer, ActorSerializerMixin
from .mixins import OptimizedQuerysetMixin, ArchivingViewSetMixin
from .filters import BaseFilterSet, DateRangeFilterSet

__all__ = [
    # ViewSets
    'BaseViewSet',
    'ReadOnlyBaseViewSet',

    # Serializers
    'BaseModelSerializer',
    'ActorSerializerMixin',

    # Mixins
    'OptimizedQuerysetMixin',
    'ArchivingViewSetMixin',

    # Filters
    'BaseFilterSet',
    'DateRangeFilterSet',
]
