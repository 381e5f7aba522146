from rest_framework import serializers


class BaseModelSerializer(serializers.ModelSerializer):
    """
    Base serializer that provides common functionality.

    Subclasses may declare ``select_related_fields`` and
    ``prefetch_related_fields`` on Meta; OptimizedQuerysetMixin applies them.
    """

    class Meta:
        select_related_fields = []
        prefetch_related_fields = []


class ActorSerializerMixin:
    """Resolve the acting user from the serializer context."""

    def get_actor(self):
        request = self.context.get('request')
        if request is not None and request.user.is_authenticated:
            return request.user
        return None
