from rest_framework.response import Response

class PaginationMixin:
    """Shared helper to reduce pagination boilerplate."""

    def paginate_and_respond(self, queryset, serializer_cls, many=True, context=None):
        context = {"request": self.request, **(context or {})}
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = serializer_cls(page, many=many, context=context)
            return self.get_paginated_response(serializer.data)
        return Response(serializer_cls(queryset, many=many, context=context).data)
