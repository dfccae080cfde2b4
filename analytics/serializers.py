"""
Query parameter serializers for the analytics endpoints.
"""

from rest_framework import serializers


class DateRangeSerializer(serializers.Serializer):
    start = serializers.DateTimeField(required=False)
    end = serializers.DateTimeField(required=False)

    def validate(self, attrs):
        start, end = attrs.get('start'), attrs.get('end')
        if start and end and start > end:
            raise serializers.ValidationError({'start': 'start must not be after end.'})
        return attrs


class UserGrowthSerializer(DateRangeSerializer):
    interval = serializers.ChoiceField(choices=['day', 'month'], default='day')


class TopContributorsSerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=100, default=10)
