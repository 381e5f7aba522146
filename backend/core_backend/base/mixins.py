from rest_framework.viewsets import ViewSetMixin
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework import status
from .permissions import CanArchiveRecords


class OptimizedQuerysetMixin(ViewSetMixin):
    """
    A ViewSet mixin that optimizes the queryset using the
    `select_related_fields` and `prefetch_related_fields` attributes
    declared on the serializer's Meta class.
    """

    def get_queryset(self):
        queryset = super().get_queryset()

        try:
            serializer_class = self.get_serializer_class()
        except (AttributeError, AssertionError):
            return queryset

        meta = getattr(serializer_class, "Meta", None)
        select_related = getattr(meta, "select_related_fields", [])
        prefetch_related = getattr(meta, "prefetch_related_fields", [])

        if select_related:
            queryset = queryset.select_related(*select_related)

        if prefetch_related:
            queryset = queryset.prefetch_related(*prefetch_related)

        return queryset


class ArchivingViewSetMixin(ViewSetMixin):
    """
    A ViewSet mixin that provides archiving for models using SoftDeleteMixin.

    - Archived records are hidden by default
    - ?include_archived=true includes them, ?include_archived=only shows only them
    - archive/unarchive actions replace hard deletes
    """

    def get_queryset(self):
        queryset = super().get_queryset()

        if hasattr(queryset.model, 'is_active') and hasattr(self, 'request') and self.request is not None:
            include_archived = self.request.query_params.get('include_archived', '').lower()

            if include_archived in ['true', '1', 'yes']:
                if hasattr(queryset.model, 'all_objects'):
                    queryset = queryset.model.all_objects.all()
            elif include_archived == 'only':
                if hasattr(queryset.model, 'all_objects'):
                    queryset = queryset.model.all_objects.filter(is_active=False)
                else:
                    queryset = queryset.filter(is_active=False)

        return queryset

    @action(detail=True, methods=['post'], permission_classes=[CanArchiveRecords])
    def archive(self, request, pk=None):
        """
        Archive a single record.
        """
        obj = self.get_object()

        if not hasattr(obj, 'archive'):
            return Response(
                {'error': 'This model does not support archiving.'},
                status=status.HTTP_400_BAD_REQUEST
            )

        if not obj.is_active:
            return Response(
                {'error': 'Record is already archived.'},
                status=status.HTTP_400_BAD_REQUEST
            )

        obj.archive(archived_by=request.user)

        return Response(
            {'message': f'{obj._meta.verbose_name} archived successfully.'},
            status=status.HTTP_200_OK
        )

    @action(detail=True, methods=['post'], permission_classes=[CanArchiveRecords])
    def unarchive(self, request, pk=None):
        """
        Unarchive a single record.
        """
        model = self.get_queryset().model
        manager = getattr(model, 'all_objects', model._default_manager)

        try:
            obj = manager.get(pk=pk)
        except model.DoesNotExist:
            return Response(
                {'error': 'Record not found.'},
                status=status.HTTP_404_NOT_FOUND
            )

        if obj.is_active:
            return Response(
                {'error': 'Record is not archived.'},
                status=status.HTTP_400_BAD_REQUEST
            )

        obj.unarchive()

        return Response(
            {'message': f'{obj._meta.verbose_name} unarchived successfully.'},
            status=status.HTTP_200_OK
        )
