"""
Pagination helpers shared by services and API views.

Every list operation returns the same envelope:
    {'items': [...], 'pagination': {'page', 'limit', 'total', 'pages'}}
"""

import math

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from .exceptions import ValidationFailed

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100


def validate_page_params(page=1, limit=DEFAULT_PAGE_LIMIT):
    """
    Coerce and validate page/limit values.

    Args:
        page: 1-based page number (int or numeric string)
        limit: Page size, between 1 and MAX_PAGE_LIMIT

    Returns:
        tuple: (page, limit) as integers

    Raises:
        ValidationFailed: If either value is out of range or not a number
    """
    try:
        page = int(page)
    except (TypeError, ValueError):
        raise ValidationFailed('page must be an integer.', field='page')
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        raise ValidationFailed('limit must be an integer.', field='limit')

    if page < 1:
        raise ValidationFailed('page must be at least 1.', field='page')
    if not 1 <= limit <= MAX_PAGE_LIMIT:
        raise ValidationFailed(
            f'limit must be between 1 and {MAX_PAGE_LIMIT}.', field='limit')

    return page, limit


def page_info(page, limit, total):
    return {
        'page': page,
        'limit': limit,
        'total': total,
        'pages': math.ceil(total / limit),
    }


def paginate(queryset, page=1, limit=DEFAULT_PAGE_LIMIT):
    """
    Slice a queryset into one page.

    Returns:
        dict: {'items': list of model instances, 'pagination': {...}}
    """
    page, limit = validate_page_params(page, limit)
    total = queryset.count()
    offset = (page - 1) * limit
    return {
        'items': list(queryset[offset:offset + limit]),
        'pagination': page_info(page, limit, total),
    }


class CivicPagination(PageNumberPagination):
    """
    DRF pagination class producing the items/pagination envelope.

    Query parameters: ?page=<n>&limit=<n>
    """
    page_query_param = 'page'
    page_size_query_param = 'limit'
    page_size = DEFAULT_PAGE_LIMIT
    max_page_size = MAX_PAGE_LIMIT

    def paginate_queryset(self, queryset, request, view=None):
        validate_page_params(
            request.query_params.get(self.page_query_param, 1),
            request.query_params.get(self.page_size_query_param, self.page_size),
        )
        return super().paginate_queryset(queryset, request, view)

    def get_paginated_response(self, data):
        return Response({
            'items': data,
            'pagination': page_info(
                self.page.number,
                self.page.paginator.per_page,
                self.page.paginator.count,
            ),
        })

    def get_paginated_response_schema(self, schema):
        return {
            'type': 'object',
            'properties': {
                'items': schema,
                'pagination': {
                    'type': 'object',
                    'properties': {
                        'page': {'type': 'integer'},
                        'limit': {'type': 'integer'},
                        'total': {'type': 'integer'},
                        'pages': {'type': 'integer'},
                    },
                },
            },
        }
