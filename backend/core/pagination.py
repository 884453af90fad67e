from rest_framework.pagination import LimitOffsetPagination


class StandardPagination(LimitOffsetPagination):
    """limit/offset pagination shared by every list endpoint."""

    default_limit = 50
    max_limit = 100


def paginated_response(request, queryset, serializer_class, context=None):
    paginator = StandardPagination()
    page = paginator.paginate_queryset(queryset, request)
    serializer = serializer_class(page, many=True, context=context or {})
    return paginator.get_paginated_response(serializer.data)
