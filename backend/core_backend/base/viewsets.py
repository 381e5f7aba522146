from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend
from .mixins import OptimizedQuerysetMixin, ArchivingViewSetMixin
from .permissions import IsStaffOrReadOnly
from ..pagination import StandardPagination


class BaseViewSet(OptimizedQuerysetMixin, ArchivingViewSetMixin, viewsets.ModelViewSet):
    """
    Base ViewSet that provides standard configuration for all ModelViewSets.

    Features:
    - Query optimization via OptimizedQuerysetMixin
    - Archiving support via ArchivingViewSetMixin
    - Standard pagination, filtering, and search

    Usage:
        class SupplierViewSet(BaseViewSet):
            queryset = Supplier.objects.all()
            serializer_class = SupplierSerializer
    """

    pagination_class = StandardPagination
    permission_classes = [IsStaffOrReadOnly]

    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]

    ordering = ['-id']

    def get_queryset(self):
        """
        Re-evaluate the class-level queryset per request so cached querysets
        never leak results between requests.
        """
        if getattr(self, 'queryset', None) is not None:
            original_queryset = self.queryset
            self.queryset = original_queryset.model.objects.all()
            try:
                return super().get_queryset()
            finally:
                self.queryset = original_queryset
        return super().get_queryset()


class ReadOnlyBaseViewSet(OptimizedQuerysetMixin, viewsets.ReadOnlyModelViewSet):
    """
    Base ViewSet for read-only endpoints (append-only history, derived data).
    """

    pagination_class = StandardPagination
    permission_classes = [IsStaffOrReadOnly]
    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]
    ordering = ['-id']
